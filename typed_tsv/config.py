"""
Load options and YAML I/O for typed-tsv.

``LoadOptions`` controls how ``load()`` treats its input:

- ``delimiter``: the single character that separates fields (tab).
- ``header``: skip the first non-comment, non-empty line (True).
- ``comment``: lines starting with this character are skipped
  (``None``, i.e. only empty lines are skipped).

Options can be kept next to the data in a small YAML file and read back
with ``load_options()``; ``save_options()`` writes one.

Why Pydantic + YAML:
- Pydantic rejects a multi-character delimiter or comment prefix when
  the options are built, not halfway through a file.
- YAML is human-editable and round-trips cleanly.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from typed_tsv.exceptions import ConfigValidationError

logger = logging.getLogger(__name__)


class LoadOptions(BaseModel):
    """Options controlling how a delimited document is loaded."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    delimiter: str = Field("\t", description="Character used to split fields")
    header: bool = Field(
        True, description="If True, skip the first non-comment line as a header"
    )
    comment: str | None = Field(
        None, description="Lines starting with this character are skipped"
    )

    @field_validator("delimiter")
    @classmethod
    def _check_delimiter(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError(
                f"delimiter must be a single character, got {value!r}"
            )
        if value in "\r\n":
            raise ValueError("delimiter cannot be a line break")
        return value

    @field_validator("comment")
    @classmethod
    def _check_comment(cls, value: str | None) -> str | None:
        if not value:
            return None
        if len(value) != 1:
            raise ValueError(
                f"comment prefix must be a single character, got {value!r}"
            )
        return value


def load_options(path: str | Path) -> LoadOptions:
    """Load and validate a YAML options file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the file is empty.
        pydantic.ValidationError: If the content fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Options file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Options file is empty: {path}")
    logger.info("Loaded options from %s", path)
    return LoadOptions.model_validate(raw)


def save_options(options: LoadOptions, path: str | Path) -> None:
    """Serialize *options* to YAML."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# typed-tsv load options\n")
        yaml.dump(
            options.model_dump(mode="json"),
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved options to %s", path)
