"""
re3data-explorer: metadata aggregation over the re3data.org registry API.

Main package exports for user-facing API.
"""

from re3data_explorer.config import __version__, get_use_case
from re3data_explorer.types import UseCases
from re3data_explorer.api import AggregationPipeline, PipelineResult

__all__ = [
    '__version__',
    'AggregationPipeline',
    'PipelineResult',
    'UseCases',
    'get_use_case',
    'run_use_case',
]


def run_use_case(name: str, save: bool = True) -> PipelineResult:
    """
    Run one configured preset end to end.

    Convenience wrapper around AggregationPipeline for notebooks and scripts.

    Args:
        name: Preset name from config/use_cases.yaml
        save: Write the Result Table (and failures) as CSV to AppConfig.output_dir

    Returns:
        PipelineResult with table, failures and statistics

    Raises:
        KeyError: If the preset does not exist
        DiscoveryError: If the listing request fails

    Example:
        >>> from re3data_explorer import run_use_case
        >>> result = run_use_case('certificates_by_type')
        >>> result.table.head()
    """
    pipeline = AggregationPipeline()
    return pipeline.run(name, save=save)
