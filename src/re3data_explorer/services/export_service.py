"""
CSV persistence for Result Tables and failure reports.

Multi-valued cells are joined with the configured delimiter on write and
left as delimited strings on read, so a loaded table can be passed back
through normalize_table() to explode them again.
"""

from pathlib import Path
from typing import List, Union
import logging

import pandas as pd

from re3data_explorer.services.extraction import ExtractionResult
from re3data_explorer.services.normalization import MISSING, serialize_multivalue

logger = logging.getLogger(__name__)


FAILURE_COLUMNS = ['identifier', 'url', 'error_type', 'error']


def save_table_csv(
    df: pd.DataFrame,
    path: Union[str, Path],
    delimiter: str = " || "
) -> Path:
    """
    Write a Result Table to CSV.

    Args:
        df: Result Table (list cells allowed)
        path: Target file; parent directories are created
        delimiter: Separator for list cells

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    serialize_multivalue(df, delimiter).to_csv(path, index=False, encoding='utf-8')

    logger.info(f"Saved {len(df)} row(s) to {path}")
    return path


def load_table_csv(path: Union[str, Path]) -> pd.DataFrame:
    """
    Read a Result Table written by save_table_csv().

    All cells are read as strings (identifiers keep leading zeros); empty
    cells become MISSING. Flag columns ("True"/"False") are restored to bool.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding='utf-8')

    for column in df.columns:
        values = set(df[column].unique())
        if values and values <= {'True', 'False'}:
            df[column] = df[column] == 'True'
        else:
            df[column] = df[column].astype(object).map(lambda v: MISSING if v == '' else v)

    return df


def save_failures_csv(
    failures: List[ExtractionResult],
    path: Union[str, Path]
) -> Union[Path, None]:
    """
    Save failed extractions to CSV for later inspection.

    Returns:
        Path of the written file, or None when there were no failures
    """
    if not failures:
        return None

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(
        [{column: getattr(f, column) for column in FAILURE_COLUMNS} for f in failures],
        columns=FAILURE_COLUMNS
    )
    df.to_csv(path, index=False, encoding='utf-8')

    logger.info(f"Saved {len(failures)} failure(s) to {path}")
    return path
