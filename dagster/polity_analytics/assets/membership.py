"""
Membership assets for polity analytics pipeline.

Handles the NATO member state list:
1. Scraping the member table from an archived Wikipedia page
2. Header/footnote removal and resolution of names to country codes
"""

import traceback

import pandas as pd
from dagster import AssetExecutionContext, Config, Output, asset

from ..resources.country_codes import CountryCodeResource
from ..resources.sources import get_data_source_config
from ..utils.data_processing import normalize_membership, resolve_membership_codes
from ..utils.fetcher import FetcherResource

_NATO = get_data_source_config('nato')


class MembershipConfig(Config):
    url: str = _NATO['url']
    selector: str = _NATO['selector']
    table_index: int = _NATO['table_index']
    name_position: int = _NATO['name_position']
    date_position: int = _NATO['date_position']


@asset(
    description="Scrape the NATO member state table",
    group_name="membership_etl"
)
def nato_membership_raw(context: AssetExecutionContext, config: MembershipConfig,
                        fetcher: FetcherResource) -> Output[pd.DataFrame]:
    """
    Extract the member state table from the archived Wikipedia article.

    A selector that matches nothing means the page layout changed and
    fails the run.

    Returns:
        Output containing the raw table cells
    """
    context.log.info(f"Scraping membership table '{config.selector}' from: {config.url}")

    try:
        with fetcher.get_fetcher() as remote:
            table = remote.fetch_html_table(config.url, config.selector, config.table_index)
    except Exception as e:
        context.log.error(f"Failed to scrape membership table: {e}")
        context.log.error(f"Traceback: {traceback.format_exc()}")
        raise

    return Output(
        table,
        metadata={
            "source_url": config.url,
            "rows": len(table),
            "columns": len(table.columns),
        }
    )


@asset(
    description="NATO members with join dates and country codes",
    group_name="membership_etl"
)
def nato_membership(context: AssetExecutionContext, config: MembershipConfig,
                    nato_membership_raw: pd.DataFrame,
                    country_codes: CountryCodeResource) -> Output[pd.DataFrame]:
    """
    Clean the scraped table and resolve member names to country codes.

    Members whose name cannot be resolved keep a missing code and are left
    out of the peer group downstream.

    Returns:
        Output containing entity_name, join_date, join_year and entity_code
    """
    try:
        members = normalize_membership(
            nato_membership_raw,
            name_position=config.name_position,
            date_position=config.date_position,
        )
    except Exception as e:
        context.log.error(f"Failed to clean membership table: {e}")
        context.log.error(f"Traceback: {traceback.format_exc()}")
        raise

    members = resolve_membership_codes(members, country_codes.get_registry())
    unresolved = members.loc[members['entity_code'].isna(), 'entity_name'].tolist()
    if unresolved:
        context.log.warning(f"Unresolved member names excluded from peer group: {unresolved}")

    context.log.info(f"Membership table: {len(members)} members, {len(unresolved)} unresolved")
    return Output(
        members,
        metadata={
            "members": len(members),
            "resolved": len(members) - len(unresolved),
            "unresolved_names": ", ".join(unresolved) or "none",
        }
    )
