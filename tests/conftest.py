"""
Shared test fixtures and record types for typed-tsv tests.

Record types used across several test modules are defined here as
module-level classes so their layouts are cached once per session.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pytest


# ---------------------------------------------------------------------------
# Record types
# ---------------------------------------------------------------------------

@dataclass
class MatrixEntry:
    """Sparse matrix entry: (row, column, value)."""
    row: np.uint32
    column: np.uint32
    value: float


@dataclass
class LabeledEntry:
    row: np.uint32
    column: np.uint32
    value: float
    label: str


@dataclass
class Edge:
    source: np.uint32
    destination: np.uint32


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (reads files from disk)",
    )
