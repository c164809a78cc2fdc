"""
Comparison assets for polity analytics pipeline.

Joins cleaned scores with the membership list:
1. Target country series
2. Peer-group average (members excluding the target)
3. Named peer series
4. Layered comparison chart, optionally written to disk

Target, named peers and accession cutoff come from the shared
ComparisonResource; only chart presentation is per-asset config.
"""

from typing import Optional

import pandas as pd
import plotly.graph_objects as go
from dagster import AssetExecutionContext, Config, Output, asset

from ..resources.comparison import ComparisonResource
from ..resources.country_codes import CountryCodeResource
from ..resources.sources import get_chart_output
from ..utils.aggregation import TrendComparison, named_peer_series, peer_average_series, target_series
from ..utils.data_processing import member_codes
from ..utils.plotting import ChartStyle, build_comparison_chart, write_chart


class ChartConfig(Config):
    group_name: str = "NATO"
    label_year: Optional[int] = None
    invert_y: bool = False
    output_path: str = get_chart_output()


@asset(
    description="Polity score series of the target country",
    group_name="comparison"
)
def target_trend(context: AssetExecutionContext, polity_scores: pd.DataFrame,
                 comparison: ComparisonResource) -> Output[pd.DataFrame]:
    """
    Extract the target country's scores, ordered by year.

    Returns:
        Output containing year and score for the target
    """
    df = target_series(polity_scores, comparison.target_code)
    if df.empty:
        context.log.warning(f"No scores found for target code {comparison.target_code}")

    context.log.info(f"Target {comparison.target_code}: {len(df)} years")
    return Output(df, metadata={"target_code": comparison.target_code, "years": len(df)})


@asset(
    description="Mean Polity score per year over the peer group",
    group_name="comparison"
)
def peer_average_trend(context: AssetExecutionContext, polity_scores: pd.DataFrame,
                       nato_membership: pd.DataFrame,
                       comparison: ComparisonResource) -> Output[pd.DataFrame]:
    """
    Average the scores of all members except the target, year by year.

    Missing scores are ignored in both the sum and the count; years where no
    peer has a score are absent from the result.

    Returns:
        Output containing year, mean_score and peer_count
    """
    codes = comparison.peer_codes(member_codes(nato_membership, joined_by=comparison.joined_by))
    context.log.info(f"Peer group: {len(codes)} members (target {comparison.target_code} excluded)")

    df = peer_average_series(polity_scores, codes, comparison.target_code)
    return Output(
        df,
        metadata={
            "target_code": comparison.target_code,
            "peer_count": len(codes),
            "years": len(df),
            "joined_by": comparison.joined_by if comparison.joined_by is not None else "any",
        }
    )


@asset(
    description="Polity score series of individually named peers",
    group_name="comparison"
)
def named_peer_trends(context: AssetExecutionContext, polity_scores: pd.DataFrame,
                      comparison: ComparisonResource,
                      country_codes: CountryCodeResource) -> Output[pd.DataFrame]:
    peers = comparison.named_peer_codes()
    df = named_peer_series(polity_scores, peers, country_codes.get_registry())
    context.log.info(f"Named peers: {df['entity_name'].unique().tolist()}")
    return Output(df, metadata={"named_peers": len(peers), "rows": len(df)})


@asset(
    description="Layered chart comparing the target with its peers",
    group_name="comparison"
)
def trend_comparison_chart(context: AssetExecutionContext, config: ChartConfig,
                           target_trend: pd.DataFrame, peer_average_trend: pd.DataFrame,
                           named_peer_trends: pd.DataFrame,
                           comparison: ComparisonResource,
                           country_codes: CountryCodeResource) -> Output[go.Figure]:
    """
    Compose the comparison chart: classification bands, trend lines, labels.

    The chart is written to disk only when output_path is configured
    (.html or .json).

    Returns:
        Output containing the plotly Figure
    """
    target_code = comparison.target_code
    target_name = country_codes.get_registry().code_to_name(target_code) or str(target_code)
    trends = TrendComparison(
        target_code=target_code,
        target=target_trend,
        peer_average=peer_average_trend,
        named_peers=named_peer_trends,
    )
    style = ChartStyle(title=f"{target_name} vs. {config.group_name} average", invert_y=config.invert_y)
    fig = build_comparison_chart(trends, target_name, group_name=config.group_name,
                                 label_year=config.label_year, style=style)

    metadata = {"target": target_name, "traces": len(fig.data)}
    if config.output_path:
        path = write_chart(fig, config.output_path)
        context.log.info(f"Chart written to {path}")
        metadata["output_path"] = str(path)

    return Output(fig, metadata=metadata)
