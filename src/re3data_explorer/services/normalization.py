"""
Tabular normalization of extraction records.

Steps, applied in order by normalize_table():
1. mark_missing: empty strings and empty lists become MISSING (pandas.NA)
2. derive_flags: boolean columns from the presence of a source column,
   computed before any row is duplicated
3. explode_column: one row per value of a multi-valued column, all other
   columns duplicated, identifier kept as foreign key

Running normalize_table() on its own output changes nothing.
"""

from typing import Any, Dict, Iterable, List, Optional, Union
import logging
import math

import pandas as pd

from re3data_explorer.models.extraction import NormalizationSpec

logger = logging.getLogger(__name__)


MISSING = pd.NA


def is_missing(value: Any) -> bool:
    """
    True for None, NA/NaN, blank strings and empty lists.

    "Never seen" and "seen as empty" are treated the same.
    """
    if value is None or value is pd.NA:
        return True
    if isinstance(value, float):
        return math.isnan(value)
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return all(is_missing(v) for v in value)
    return False


def _clean_cell(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        values = [v for v in value if not is_missing(v)]
        return values if values else MISSING
    return MISSING if is_missing(value) else value


def _map_cells(series: pd.Series, func) -> pd.Series:
    # Cells hold lists, strings and MISSING side by side; keep them as objects.
    return pd.Series([func(v) for v in series], index=series.index, dtype=object, name=series.name)


def records_to_frame(records: Iterable[Dict[str, Any]], columns: List[str]) -> pd.DataFrame:
    """
    Build a DataFrame with exactly the declared columns.

    Keys not in columns are dropped, absent keys become missing cells.
    """
    return pd.DataFrame(list(records), columns=columns)


def mark_missing(df: pd.DataFrame) -> pd.DataFrame:
    """Replace empty cells with MISSING (boolean columns are left alone)."""
    df = df.copy()
    for column in df.columns:
        if pd.api.types.is_bool_dtype(df[column]):
            continue
        df[column] = _map_cells(df[column], _clean_cell)
    return df


def derive_flags(df: pd.DataFrame, flags: Dict[str, str]) -> pd.DataFrame:
    """
    Add boolean columns: target is True where the source cell is present.

    Args:
        df: Table before explosion
        flags: Target column → source column

    Example:
        >>> derive_flags(df, {'has_certificate': 'certificate'})
    """
    df = df.copy()
    for target, source in flags.items():
        if source not in df.columns:
            raise KeyError(f"Flag source column '{source}' not in table columns {list(df.columns)}")
        df[target] = df[source].map(lambda v: not is_missing(v)).astype(bool)
    return df


def _split_cell(value: Any, delimiter: str) -> Any:
    if isinstance(value, (list, tuple)):
        parts = list(value)
    elif isinstance(value, str) and delimiter in value:
        parts = value.split(delimiter)
    else:
        return value

    parts = [p for p in parts if not is_missing(p)]
    return parts if parts else MISSING


def explode_column(df: pd.DataFrame, column: str, delimiter: str) -> pd.DataFrame:
    """
    Split a multi-valued column into one row per value.

    List cells and delimited strings are both split; every other column is
    duplicated. Rows stay grouped in their original order and values keep
    their split order. A missing cell stays as a single row, so no
    identifier is dropped.

    Args:
        df: Input table
        column: Column to explode
        delimiter: Separator for string cells (see AppConfig.multivalue_delimiter)

    Returns:
        New table with a fresh RangeIndex
    """
    if column not in df.columns:
        raise KeyError(f"Explode column '{column}' not in table columns {list(df.columns)}")

    df = df.copy()
    df[column] = _map_cells(df[column], lambda v: _split_cell(v, delimiter))
    exploded = df.explode(column, ignore_index=True)
    exploded[column] = _map_cells(exploded[column], _clean_cell)

    if len(exploded) != len(df):
        logger.debug(f"Exploded '{column}': {len(df)} → {len(exploded)} rows")

    return exploded


def normalize_table(
    data: Union[pd.DataFrame, Iterable[Dict[str, Any]]],
    columns: Optional[List[str]] = None,
    spec: Optional[NormalizationSpec] = None,
    delimiter: str = " || "
) -> pd.DataFrame:
    """
    Build the Result Table from extraction records (or re-normalize a table).

    Args:
        data: Extraction records or an existing DataFrame
        columns: Declared output columns (required for records)
        spec: NormalizationSpec with flags and explode column
        delimiter: Separator for delimited string cells

    Returns:
        Normalized DataFrame

    Example:
        >>> table = normalize_table(records, use_case.extraction.columns,
        ...                         use_case.normalization)
    """
    spec = spec or NormalizationSpec()

    if isinstance(data, pd.DataFrame):
        df = data.copy() if columns is None else data.reindex(columns=list(columns))
    else:
        if columns is None:
            raise ValueError("columns are required when normalizing raw records")
        df = records_to_frame(data, columns)

    df = mark_missing(df)

    if spec.flags:
        df = derive_flags(df, spec.flags)

    if spec.explode:
        df = explode_column(df, spec.explode, delimiter)

    return df


def serialize_multivalue(df: pd.DataFrame, delimiter: str = " || ") -> pd.DataFrame:
    """
    Join list cells into delimited strings for output.

    Raises:
        ValueError: If a value already contains the delimiter (it could not
                    be split back unambiguously)
    """
    def _join(value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return value
        clashing = [v for v in value if delimiter in str(v)]
        if clashing:
            raise ValueError(
                f"Values {clashing} contain the delimiter '{delimiter}'; choose another delimiter"
            )
        return delimiter.join(str(v) for v in value) if value else MISSING

    df = df.copy()
    for column in df.columns:
        if not pd.api.types.is_bool_dtype(df[column]):
            df[column] = _map_cells(df[column], _join)
    return df
