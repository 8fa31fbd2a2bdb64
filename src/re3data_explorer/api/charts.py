"""
Descriptive bar charts for Result Tables.

Counts are always distinct repositories per value, so an exploded table
(one row per repository type) and an unexploded one (list cells) give the
same bars.
"""

from pathlib import Path
from typing import Optional, Union
import logging

import matplotlib.pyplot as plt
import pandas as pd

from re3data_explorer.services.normalization import is_missing

logger = logging.getLogger(__name__)


def _present(df: pd.DataFrame, column: str) -> pd.DataFrame:
    if column not in df.columns:
        raise KeyError(f"Column '{column}' not in table columns {list(df.columns)}")
    missing = df[column].map(is_missing).astype(bool)
    return df[~missing]


def count_by_value(
    df: pd.DataFrame,
    column: str,
    id_column: str = 're3data_id'
) -> pd.Series:
    """
    Number of distinct repositories per value of column.

    Missing values are excluded; list cells are counted per element.
    Sorted by count (descending), ties by value.

    Example:
        >>> count_by_value(table, 'type')
        type
        disciplinary     2
        institutional    1
        Name: repositories, dtype: int64
    """
    subset = _present(df, column)[[id_column, column]].explode(column)
    subset = subset[~subset[column].map(is_missing).astype(bool)].drop_duplicates()

    counts = subset.groupby(column)[id_column].nunique().rename('repositories')
    return counts.sort_index().sort_values(ascending=False, kind='stable')


def _finish(fig, output_path: Optional[Union[str, Path]]):
    fig.tight_layout()
    if output_path is not None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=130)
        plt.close(fig)
        logger.info(f"Saved chart to {output_path}")
    return fig


def plot_value_counts(
    df: pd.DataFrame,
    column: str,
    id_column: str = 're3data_id',
    title: Optional[str] = None,
    output_path: Optional[Union[str, Path]] = None,
    top: Optional[int] = None
):
    """
    Horizontal bar chart of repositories per value (types, certificates, API types).

    Args:
        df: Result Table
        column: Column whose values are counted
        id_column: Identifier column used for distinct counts
        title: Chart title (default: "Repositories by <column>")
        output_path: Save the chart there and close the figure
        top: Only show the most frequent values

    Returns:
        matplotlib Figure

    Raises:
        ValueError: If the column has no values to plot
    """
    counts = count_by_value(df, column, id_column)
    if counts.empty:
        raise ValueError(f"No values to plot in column '{column}'")
    if top is not None:
        counts = counts.head(top)

    # barh draws bottom-up, reverse so the largest bar is on top
    counts = counts.iloc[::-1]

    fig, ax = plt.subplots(figsize=(8, max(3, 0.4 * len(counts) + 1)))
    ax.barh([str(v) for v in counts.index], counts.values, color="tab:blue")
    ax.set_xlabel("Repositories")
    ax.set_ylabel(column)
    ax.set_title(title or f"Repositories by {column}")
    ax.grid(True, axis="x", alpha=0.3)

    return _finish(fig, output_path)


def plot_flag_by_group(
    df: pd.DataFrame,
    group_column: str,
    flag_column: str,
    id_column: str = 're3data_id',
    title: Optional[str] = None,
    output_path: Optional[Union[str, Path]] = None
):
    """
    Stacked bar chart of a boolean column per group.

    E.g., certified vs. not certified repositories per repository type.

    Returns:
        matplotlib Figure

    Raises:
        ValueError: If the group column has no values to plot
    """
    subset = _present(df, group_column)[[id_column, group_column, flag_column]]
    subset = subset.explode(group_column).drop_duplicates(subset=[id_column, group_column])
    if subset.empty:
        raise ValueError(f"No values to plot in column '{group_column}'")

    table = pd.crosstab(subset[group_column], subset[flag_column].astype(bool))
    table = table.reindex(columns=[True, False], fill_value=0)
    table = table.loc[table.sum(axis=1).sort_values(kind='stable').index]

    labels = [str(v) for v in table.index]
    fig, ax = plt.subplots(figsize=(8, max(3, 0.4 * len(table) + 1)))
    ax.barh(labels, table[True].values, color="tab:green", label=f"{flag_column}")
    ax.barh(labels, table[False].values, left=table[True].values,
            color="tab:gray", label=f"not {flag_column}")
    ax.set_xlabel("Repositories")
    ax.set_ylabel(group_column)
    ax.set_title(title or f"{flag_column} by {group_column}")
    ax.grid(True, axis="x", alpha=0.3)
    ax.legend()

    return _finish(fig, output_path)
