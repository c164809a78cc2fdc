"""
Pipeline job definitions for polity analytics.

Defines the orchestration jobs that coordinate asset execution:
1. Domain-specific jobs for focused data refreshes
2. Full comparison pipeline from downloads to the chart
"""

from dagster import AssetSelection, define_asset_job


# ETL job for the Polity spreadsheet.
#
# 1. Download of the legacy .xls file (staged in a temporary directory)
# 2. Column selection, integer coercion and cutoff/range filtering
#
# Use case: Run independently to inspect the cleaned score table
polity_etl_pipeline = define_asset_job(
    name="polity_etl_pipeline",
    selection=AssetSelection.groups("polity_etl"),
    description="Polity spreadsheet download and cleaning",
)

# ETL job for the NATO member list.
#
# 1. Scrape of the member table from the archived Wikipedia article
# 2. Header/footnote removal and country code resolution
#
# Use case: Check that the page layout still matches the selector
membership_etl_pipeline = define_asset_job(
    name="membership_etl_pipeline",
    selection=AssetSelection.groups("membership_etl"),
    description="NATO membership scraping and code resolution",
)

# Complete end-to-end comparison pipeline.
#
# Polity ETL ──────┐
#                  ├─→ target / peer average / named peers ─→ chart
# Membership ETL ──┘
#
# Use case: Primary pipeline producing the comparison chart
full_comparison_pipeline = define_asset_job(
    name="full_comparison_pipeline",
    selection=AssetSelection.all(),
    description="Downloads, cleaning, aggregation and the comparison chart",
)
