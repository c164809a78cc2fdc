"""
Polity score assets for polity analytics pipeline.

Handles the ETL process for the Polity IV spreadsheet:
1. Download of the legacy .xls file through a temporary file
2. Column selection, integer coercion, cutoff year and score range filtering
"""

import traceback
from typing import Dict

import pandas as pd
from dagster import AssetExecutionContext, Config, Output, asset

from ..resources.sources import get_cutoff_year, get_data_source_config
from ..utils.data_processing import normalize_scores
from ..utils.fetcher import FetcherResource


class ScoresConfig(Config):
    url: str = get_data_source_config('polity')['url']
    cutoff_year: int = get_cutoff_year()
    columns: Dict[str, str] = get_data_source_config('polity')['columns']


@asset(
    description="Download the Polity IV spreadsheet",
    group_name="polity_etl"
)
def polity_scores_raw(context: AssetExecutionContext, config: ScoresConfig,
                      fetcher: FetcherResource) -> Output[pd.DataFrame]:
    """
    Download the Polity IV spreadsheet from systemicpeace.org.

    The file is staged in a temporary directory and removed after parsing,
    so nothing is kept on disk between runs.

    Returns:
        Output containing the raw spreadsheet rows
    """
    source_config = get_data_source_config('polity')
    context.log.info(f"Downloading {source_config['source_name']} data from: {config.url}")

    try:
        with fetcher.get_fetcher() as remote:
            df = remote.fetch_spreadsheet(config.url)
    except Exception as e:
        context.log.error(f"Failed to download Polity spreadsheet: {e}")
        context.log.error(f"Traceback: {traceback.format_exc()}")
        raise

    context.log.info(f"Raw spreadsheet shape: {df.shape}")
    return Output(
        df,
        metadata={
            "source_url": config.url,
            "rows": len(df),
            "columns": len(df.columns),
            "data_source": source_config['source_full_name'],
        }
    )


@asset(
    description="Cleaned Polity scores (entity_code, year, score)",
    group_name="polity_etl"
)
def polity_scores(context: AssetExecutionContext, config: ScoresConfig,
                  polity_scores_raw: pd.DataFrame) -> Output[pd.DataFrame]:
    """
    Clean the raw spreadsheet into one row per country and year.

    - Selects ccode, year and polity2 and renames them
    - Coerces to integers, failing the run on non-numeric cells
    - Keeps years from the cutoff onwards and scores within [-10, 10]

    Returns:
        Output containing the cleaned score table
    """
    try:
        df = normalize_scores(polity_scores_raw, columns=config.columns, cutoff_year=config.cutoff_year)
    except Exception as e:
        context.log.error(f"Failed to clean Polity scores: {e}")
        context.log.error(f"Traceback: {traceback.format_exc()}")
        raise

    context.log.info(f"Cleaned scores: {len(df):,} rows for {df['entity_code'].nunique()} countries")
    metadata = {
        "rows": len(df),
        "countries": int(df['entity_code'].nunique()),
        "missing_scores": int(df['score'].isna().sum()),
        "cutoff_year": config.cutoff_year,
    }
    if len(df):
        metadata["year_range"] = f"{int(df['year'].min())}-{int(df['year'].max())}"

    return Output(df, metadata=metadata)
