"""
Polity Analytics Pipeline - Main Definitions

Dagster definitions for the complete polity comparison pipeline.
This module brings together all assets, jobs, and resources for execution.

Data Flow:
Polity .xls ─┐
             ├─→ Clean tables → Target / Peer average / Named peers → Chart
NATO page ───┘
"""

from dagster import Definitions

from polity_analytics.assets.polity_scores import polity_scores_raw, polity_scores
from polity_analytics.assets.membership import nato_membership_raw, nato_membership
from polity_analytics.assets.comparison import (
    target_trend,
    peer_average_trend,
    named_peer_trends,
    trend_comparison_chart
)
from polity_analytics.jobs.pipelines import (
    polity_etl_pipeline,
    membership_etl_pipeline,
    full_comparison_pipeline
)
from polity_analytics.resources.comparison import ComparisonResource
from polity_analytics.resources.country_codes import CountryCodeResource
from polity_analytics.resources.sources import get_http_timeout
from polity_analytics.utils.fetcher import FetcherResource


defs = Definitions(
    assets=[
        # Polity score assets
        polity_scores_raw,
        polity_scores,

        # Membership assets
        nato_membership_raw,
        nato_membership,

        # Comparison assets
        target_trend,
        peer_average_trend,
        named_peer_trends,
        trend_comparison_chart
    ],
    jobs=[
        polity_etl_pipeline,
        membership_etl_pipeline,
        full_comparison_pipeline
    ],
    resources={
        "fetcher": FetcherResource(timeout=get_http_timeout()),
        "country_codes": CountryCodeResource(),
        "comparison": ComparisonResource()
    }
)
