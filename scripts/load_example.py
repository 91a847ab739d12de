"""
Demo script: load a sparse-matrix TSV file via the public API.

Usage:
    python scripts/load_example.py input.tsv
    python scripts/load_example.py input.tsv --options input.yaml

Each line holds ``row<TAB>column<TAB>value``.  Lines starting with ``#``
are skipped and there is no header unless an options file says so.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

import numpy as np

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("load_example")


@dataclass
class Entry:
    row: np.uint32
    column: np.uint32
    value: float


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> int:
    import typed_tsv

    args = sys.argv[1:]
    if not args:
        log.error("usage: load_example.py INPUT [--options OPTIONS.yaml]")
        return 2

    input_path = args[0]
    if "--options" in args:
        options = typed_tsv.load_options(args[args.index("--options") + 1])
    else:
        options = typed_tsv.LoadOptions(header=False, comment="#")

    try:
        with open(input_path, encoding="utf-8") as f:
            records = typed_tsv.load(f, Entry, options)
    except typed_tsv.TsvError as err:
        log.error("error: %s", err.describe())
        return 1

    log.info("%d records", len(records))
    df = typed_tsv.records_to_frame(records, Entry)
    log.info("value range: %s .. %s", df["value"].min(), df["value"].max())
    return 0


if __name__ == "__main__":
    sys.exit(main())
