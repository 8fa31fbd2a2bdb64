"""
Batch Data Collection Script

Runs every aggregation preset against the live re3data API, saves the
Result Tables as CSV and draws the descriptive bar charts.

Presets (config/use_cases.yaml):
- certificates_by_type: repository types × certification status
- api_endpoints: one row per API endpoint and API type
- ess_repositories: Earth System Sciences, open upload, DOI
- medical_repositories: subject 205 Medicine

Note: requests are sequential; a full registry run fetches one detail
      document per repository and takes a while.
"""

import logging
from datetime import datetime
from pathlib import Path

from re3data_explorer.api import AggregationPipeline, plot_flag_by_group, plot_value_counts
from re3data_explorer.config import get_app_config
from re3data_explorer.types import UseCases

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

print("=" * 80)
print("BATCH DATA COLLECTION: re3data Repository Metadata")
print("=" * 80)

# === Step 1: Load Configuration ===
print("\n[Step 1] Loading configuration...")
config = get_app_config()
output_dir = Path(config.output_dir)
print(f"  ✓ Config loaded")
print(f"    - Listing endpoint: {config.registry_listing_url}")
print(f"    - Detail template: {config.registry_detail_url_template}")
print(f"    - Timeout: {config.request_timeout}s")
print(f"    - Output: {output_dir}")

# === Step 2: Select Use Cases ===
use_cases = UseCases.list_available()
print(f"\n[Step 2] {len(use_cases)} use case(s):")
for name, description in use_cases.items():
    print(f"    - {name}: {description}")

# === Step 3: Run Pipelines ===
print("\n[Step 3] Running pipelines (per-repository failures are skipped and reported)...")
pipeline = AggregationPipeline()

start_time = datetime.now()
results = pipeline.run_all(use_cases.keys(), on_error='skip', save=True)
elapsed = (datetime.now() - start_time).total_seconds()

# === Step 4: Charts ===
print("\n[Step 4] Drawing charts...")
charts_dir = output_dir / "charts"

for name, result in results.items():
    table = result.table
    if table.empty:
        print(f"  ⚠️  {name}: empty table, no charts")
        continue

    if 'type' in table.columns:
        plot_value_counts(table, 'type', output_path=charts_dir / f"{name}_types.png")
    if 'has_certificate' in table.columns and 'type' in table.columns:
        plot_flag_by_group(
            table, 'type', 'has_certificate',
            title="Certified repositories by repository type",
            output_path=charts_dir / f"{name}_certification_by_type.png"
        )
    if 'api_type' in table.columns and table['api_type'].notna().any():
        plot_value_counts(table, 'api_type', output_path=charts_dir / f"{name}_api_types.png")

    print(f"  ✓ {name}")

# === Step 5: Display Results ===
print("\n" + "=" * 80)
print("BATCH COLLECTION COMPLETE")
print("=" * 80)
print()
print(f"⏱️  Total Time: {elapsed:.1f} seconds ({elapsed/60:.1f} minutes)")
print()
print("📊 Statistics:")
for name, result in results.items():
    stats = result.stats
    print(
        f"    {name}: {stats['discovered']} discovered, {stats['rows']} rows, "
        f"{stats['failed']} failed"
    )
    if result.failures:
        print(f"      ✗ Skipped: {', '.join(result.failed_identifiers)}")
print()
print(f"💾 Output: {output_dir}")
print()
print("=" * 80)
