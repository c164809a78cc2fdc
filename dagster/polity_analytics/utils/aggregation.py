"""
Join and aggregation of cleaned Polity scores.

Builds the target country series, the peer-group average and the series of
individually named peers. Every function returns a new DataFrame.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import pandas as pd

from ..resources.country_codes import CountryCodeResolver

logger = logging.getLogger(__name__)


@dataclass
class TrendComparison:
    """Inputs for the comparison chart."""
    target_code: int
    target: pd.DataFrame
    peer_average: pd.DataFrame
    named_peers: pd.DataFrame
    peer_codes: List[int] = field(default_factory=list)


def target_series(scores: pd.DataFrame, target_code: int) -> pd.DataFrame:
    """Year and score rows of the target entity, ascending by year, unaltered."""
    df = scores.loc[scores['entity_code'] == target_code, ['year', 'score']]
    return df.sort_values('year', kind='stable').reset_index(drop=True)


def peer_average_series(scores: pd.DataFrame, membership_codes: Iterable[int], target_code: int) -> pd.DataFrame:
    """
    Mean score per year over the peer group, excluding the target entity.

    Missing scores are left out of both the sum and the count. A year whose
    peers all have missing scores gets no row rather than a zero.

    Returns:
        DataFrame with columns year, mean_score, peer_count
    """
    peers = set(int(code) for code in membership_codes) - {int(target_code)}
    df = scores[scores['entity_code'].isin(peers) & scores['score'].notna()]

    if df.empty:
        logger.warning(f"No peer scores found for {len(peers)} peer codes")
        return pd.DataFrame({
            'year': pd.Series(dtype='Int64'),
            'mean_score': pd.Series(dtype='float64'),
            'peer_count': pd.Series(dtype='int64'),
        })

    grouped = df.groupby('year')['score'].agg(['mean', 'count']).reset_index()
    grouped.columns = ['year', 'mean_score', 'peer_count']
    grouped['mean_score'] = grouped['mean_score'].astype('float64')
    return grouped.sort_values('year').reset_index(drop=True)


def named_peer_series(scores: pd.DataFrame, codes: Iterable[int],
                      resolver: Optional[CountryCodeResolver] = None) -> pd.DataFrame:
    """
    Long table of year/score rows for each named peer.

    Names come from the resolver when given, otherwise the code is used.
    Codes without any score rows are logged and skipped.
    """
    frames = []
    for code in codes:
        series = target_series(scores, code)
        if series.empty:
            logger.warning(f"No scores found for named peer {code}")
            continue
        name = resolver.code_to_name(code) if resolver is not None else None
        frames.append(series.assign(entity_code=int(code), entity_name=name or str(code)))

    if not frames:
        return pd.DataFrame(columns=['entity_code', 'entity_name', 'year', 'score'])
    return pd.concat(frames, ignore_index=True)[['entity_code', 'entity_name', 'year', 'score']]


def compare_trends(scores: pd.DataFrame, membership_codes: Iterable[int], target_code: int,
                   named_peers: Iterable[int] = (),
                   resolver: Optional[CountryCodeResolver] = None) -> TrendComparison:
    membership_codes = set(membership_codes)
    return TrendComparison(
        target_code=target_code,
        target=target_series(scores, target_code),
        peer_average=peer_average_series(scores, membership_codes, target_code),
        named_peers=named_peer_series(scores, named_peers, resolver),
        peer_codes=sorted(membership_codes - {target_code}),
    )
