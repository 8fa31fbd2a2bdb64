"""
User-facing API interfaces for re3data-explorer.

This module provides the aggregation pipeline and chart helpers for
working with the resulting tables.
"""

from re3data_explorer.api.pipeline import AggregationPipeline, PipelineResult
from re3data_explorer.api.charts import count_by_value, plot_value_counts, plot_flag_by_group

__all__ = [
    'AggregationPipeline',
    'PipelineResult',
    'count_by_value',
    'plot_value_counts',
    'plot_flag_by_group',
]
