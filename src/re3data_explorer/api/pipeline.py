"""
High-level pipeline orchestrator for re3data metadata aggregation.

AggregationPipeline coordinates the complete workflow:
- Discover detail URLs (via DiscoveryService)
- Extract records per repository (via ExtractionService)
- Normalize into the Result Table
- Optionally save CSV files

Design Philosophy:
- Strictly sequential: one request at a time, each document fully consumed
  before the next request
- Discovery failures abort the run, per-repository failures are isolated
  (recorded and skipped) unless on_error='raise'
- Statistics and failed identifiers are returned with the table
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union
import logging

import pandas as pd

from re3data_explorer.config import AppConfig, get_app_config, get_config, get_use_case
from re3data_explorer.models.extraction import UseCase
from re3data_explorer.services.discovery import DiscoveryService
from re3data_explorer.services.export_service import save_failures_csv, save_table_csv
from re3data_explorer.services.extraction import (
    ExtractionResult,
    ExtractionService,
    Record,
    identifier_from_url,
)
from re3data_explorer.services.normalization import normalize_table
from re3data_explorer.services.registry_client import RegistryClient

logger = logging.getLogger(__name__)


ON_ERROR_POLICIES = ('skip', 'raise')


@dataclass
class PipelineResult:
    """Result Table of one run plus its failures and statistics."""
    use_case: str
    table: pd.DataFrame
    failures: List[ExtractionResult] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)
    output_files: List[Path] = field(default_factory=list)

    @property
    def failed_identifiers(self) -> List[str]:
        return [f.identifier for f in self.failures]


class AggregationPipeline:
    """
    High-level orchestrator for the discovery → extraction → normalization run.

    Example:
        pipeline = AggregationPipeline()
        result = pipeline.run("certificates_by_type", save=True)
        print(f"{result.stats['rows']} rows, "
              f"{result.stats['failed']} failed: {result.failed_identifiers}")
    """

    def __init__(
        self,
        client: Optional[RegistryClient] = None,
        config: Optional[AppConfig] = None
    ):
        """
        Initialize pipeline.

        Args:
            client: RegistryClient for all requests (default: new client from config)
            config: AppConfig (default: global config)
        """
        self._config = config or get_app_config()
        self._client = client or RegistryClient(
            timeout=self._config.request_timeout,
            user_agent=self._config.user_agent
        )
        self._discovery = DiscoveryService(self._client, config=self._config)
        self._extraction = ExtractionService(self._client)
        logger.info("AggregationPipeline initialized")

    def run(
        self,
        use_case: Union[str, UseCase],
        on_error: str = 'skip',
        save: bool = False,
        output_dir: Optional[str] = None
    ) -> PipelineResult:
        """
        Complete workflow: discover → extract → normalize (→ save).

        Args:
            use_case: Preset name from config/use_cases.yaml or a UseCase
            on_error: 'skip' records per-repository failures and continues,
                      'raise' aborts on the first failure
            save: Write <name>.csv (and <name>_failures.csv if needed)
            output_dir: Target directory (default: AppConfig.output_dir)

        Returns:
            PipelineResult with the Result Table, failures and statistics:
            {
                'discovered': 120,  # Detail URLs from the listing
                'extracted': 118,   # Documents extracted successfully
                'records': 131,     # Extraction records before explosion
                'rows': 164,        # Rows in the Result Table
                'failed': 2         # Documents skipped after an error
            }

        Raises:
            DiscoveryError: If the listing request fails
            ItemExtractionError: If a repository fails and on_error='raise'
            ValueError: If on_error is not a known policy
        """
        if on_error not in ON_ERROR_POLICIES:
            raise ValueError(
                f"on_error must be one of {ON_ERROR_POLICIES}, got: '{on_error}'"
            )

        if isinstance(use_case, str):
            use_case = get_use_case(use_case)

        logger.info(f"Starting pipeline for use case '{use_case.name}'")

        urls = tuple(self._discovery.discover(use_case.listing))

        records, failures = self._extract_all(urls, use_case, on_error)

        table = normalize_table(
            records,
            columns=use_case.extraction.columns,
            spec=use_case.normalization,
            delimiter=self._config.multivalue_delimiter
        )

        stats = {
            'discovered': len(urls),
            'extracted': len(urls) - len(failures),
            'records': len(records),
            'rows': len(table),
            'failed': len(failures)
        }

        result = PipelineResult(
            use_case=use_case.name,
            table=table,
            failures=failures,
            stats=stats
        )

        self._log_summary(result)

        if save:
            result.output_files = self._save(result, output_dir)

        return result

    def run_all(
        self,
        names: Optional[Iterable[str]] = None,
        on_error: str = 'skip',
        save: bool = False,
        output_dir: Optional[str] = None
    ) -> Dict[str, PipelineResult]:
        """
        Run several presets one after another.

        Args:
            names: Preset names (default: every preset in config/use_cases.yaml)

        Returns:
            Preset name → PipelineResult
        """
        names = list(names) if names is not None else list(get_config().use_cases)
        return {
            name: self.run(name, on_error=on_error, save=save, output_dir=output_dir)
            for name in names
        }

    def _extract_all(
        self,
        urls: Tuple[str, ...],
        use_case: UseCase,
        on_error: str
    ) -> Tuple[List[Record], List[ExtractionResult]]:
        """Fold over the URL sequence, collecting records and failures."""
        results = []
        total = len(urls)

        for position, url in enumerate(urls, start=1):
            logger.debug(f"[{position}/{total}] Extracting {url}")

            if on_error == 'raise':
                # ItemExtractionError propagates and aborts the run
                result = ExtractionResult(
                    url=url,
                    identifier=identifier_from_url(url),
                    status='success',
                    records=self._extraction.extract(url, use_case.extraction)
                )
            else:
                result = self._extraction.extract_safely(url, use_case.extraction)
                if not result.ok:
                    logger.error(
                        f"[{position}/{total}] Skipping {result.identifier} ({url}): "
                        f"{result.error_type}: {result.error}"
                    )

            results.append(result)

        records = [record for r in results if r.ok for record in r.records]
        failures = [r for r in results if not r.ok]
        return records, failures

    def _log_summary(self, result: PipelineResult) -> None:
        stats = result.stats
        message = (
            f"Pipeline complete for '{result.use_case}': "
            f"{stats['discovered']} discovered, {stats['extracted']} extracted, "
            f"{stats['records']} records, {stats['rows']} rows, {stats['failed']} failed"
        )
        if result.failures:
            logger.warning(f"{message}. Skipped identifiers: {result.failed_identifiers}")
        else:
            logger.info(message)

    def _save(self, result: PipelineResult, output_dir: Optional[str]) -> List[Path]:
        """Save the Result Table and any failures as CSV files."""
        target_dir = Path(output_dir or self._config.output_dir)
        delimiter = self._config.multivalue_delimiter

        output_files = [
            save_table_csv(result.table, target_dir / f"{result.use_case}.csv", delimiter)
        ]

        failures_path = save_failures_csv(
            result.failures,
            target_dir / f"{result.use_case}_failures.csv"
        )
        if failures_path is not None:
            output_files.append(failures_path)

        return output_files
