"""
DataFrame export for typed-tsv.

Turns a list of loaded records into a ``pandas.DataFrame`` with one
column per record field, in field order.  Columns declared with a numpy
scalar type (``np.uint32``, ``np.float32``, ...) or ``float`` / ``bool``
keep that dtype, so an empty load still yields correctly typed columns.
Everything else is left for pandas to infer.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import numpy as np
import pandas as pd

from typed_tsv.reflection import record_layout

logger = logging.getLogger(__name__)

_PYTHON_DTYPES: dict[Any, Any] = {float: np.float64, bool: np.bool_}


def records_to_frame(
    records: Sequence[Any],
    record_type: type | None = None,
) -> pd.DataFrame:
    """Build a DataFrame from *records*.

    Args:
        records: Records as returned by ``load()``.
        record_type: The record type.  Inferred from the first record when
            omitted; required to get named columns for an empty list.

    Returns:
        DataFrame with one row per record and one column per field.
    """
    if record_type is None:
        if not records:
            return pd.DataFrame()
        record_type = type(records[0])

    layout = record_layout(record_type)
    columns = {
        name: [getattr(record, name) for record in records]
        for name in layout.names
    }
    df = pd.DataFrame(columns, columns=list(layout.names))

    for name, field_type in zip(layout.names, layout.types):
        dtype = _column_dtype(field_type)
        if dtype is not None:
            df[name] = df[name].astype(dtype)

    logger.debug("Built %d x %d frame from %s", len(df), len(df.columns),
                 record_type.__name__)
    return df


def _column_dtype(field_type: Any) -> Any:
    if isinstance(field_type, type) and issubclass(field_type, np.generic):
        return field_type
    return _PYTHON_DTYPES.get(field_type)
