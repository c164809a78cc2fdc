"""
Unit tests for target, peer average and named peer series
"""

import pandas as pd
import pytest

from polity_analytics.utils.aggregation import (
    compare_trends,
    named_peer_series,
    peer_average_series,
    target_series,
)
from polity_analytics.utils.data_processing import normalize_scores


def _scores(rows):
    return pd.DataFrame({
        "entity_code": pd.array([r[0] for r in rows], dtype="Int64"),
        "year": pd.array([r[1] for r in rows], dtype="Int64"),
        "score": pd.array([r[2] for r in rows], dtype="Int64"),
    })


class TestTargetSeries:
    """Tests for target series extraction"""

    def test_end_to_end_cutoff_scenario(self):
        raw = pd.DataFrame({
            "ccode": [2, 2, 2, 2],
            "year": [1999, 2000, 2016, 2017],
            "polity2": [10, 10, 10, 8],
        })
        series = target_series(normalize_scores(raw), 2)
        assert list(zip(series["year"], series["score"])) == [(2000, 10), (2016, 10), (2017, 8)]

    def test_lossless_and_sorted(self):
        scores = _scores([(5, 2003, 1), (5, 2001, -3), (7, 2001, 9), (5, 2002, None)])
        series = target_series(scores, 5)
        assert series["year"].tolist() == [2001, 2002, 2003]
        assert series["score"].iloc[0] == -3
        assert pd.isna(series["score"].iloc[1])
        assert series["score"].iloc[2] == 1

    def test_unknown_target_is_empty(self, scores):
        assert target_series(scores, 999).empty

    def test_columns(self, scores):
        assert list(target_series(scores, 2).columns) == ["year", "score"]


class TestPeerAverageSeries:
    """Tests for the peer-group mean"""

    def test_missing_scores_excluded_from_sum_and_count(self):
        scores = _scores([(1, 2010, 5), (2, 2010, 7), (3, 2010, None)])
        avg = peer_average_series(scores, {1, 2, 3}, target_code=99)
        assert avg["mean_score"].tolist() == [6.0]
        assert avg["peer_count"].tolist() == [2]

    def test_target_is_excluded(self):
        scores = _scores([(1, 2010, 5), (2, 2010, 7), (3, 2010, -10)])
        avg = peer_average_series(scores, {1, 2, 3}, target_code=3)
        assert avg["mean_score"].tolist() == [6.0]

    def test_non_members_are_excluded(self):
        scores = _scores([(1, 2010, 5), (2, 2010, 7), (4, 2010, -10)])
        avg = peer_average_series(scores, [1, 2], target_code=99)
        assert avg["mean_score"].tolist() == [6.0]

    def test_year_with_only_missing_scores_is_absent(self):
        scores = _scores([(1, 2010, 5), (1, 2011, None), (2, 2011, None), (2, 2012, 3)])
        avg = peer_average_series(scores, {1, 2}, target_code=99)
        assert avg["year"].tolist() == [2010, 2012]

    def test_one_row_per_year_ascending(self, scores):
        avg = peer_average_series(scores, {2, 290, 255, 310}, target_code=310)
        assert avg["year"].tolist() == [2000, 2016, 2017]
        assert avg["mean_score"].tolist() == [10.0, 10.0, pytest.approx(8.5)]

    def test_duplicate_entity_years_fold_into_mean(self):
        scores = _scores([(1, 2010, 4), (1, 2010, 6), (2, 2010, 8)])
        avg = peer_average_series(scores, {1, 2}, target_code=99)
        assert avg["mean_score"].tolist() == [6.0]

    def test_empty_peer_group(self, scores):
        avg = peer_average_series(scores, {310}, target_code=310)
        assert avg.empty
        assert list(avg.columns) == ["year", "mean_score", "peer_count"]


class TestNamedPeers:
    """Tests for the per-peer series"""

    def test_names_from_resolver(self, scores, dict_resolver):
        named = named_peer_series(scores, [290, 255], dict_resolver)
        assert named["entity_name"].unique().tolist() == ["Poland", "Germany"]
        assert named[named["entity_code"] == 290]["score"].tolist() == [10, 9]

    def test_codes_used_without_resolver(self, scores):
        named = named_peer_series(scores, [290])
        assert named["entity_name"].unique().tolist() == ["290"]

    def test_peer_without_scores_is_skipped(self, scores, dict_resolver):
        named = named_peer_series(scores, [999, 290], dict_resolver)
        assert named["entity_code"].unique().tolist() == [290]

    def test_no_peers(self, scores):
        named = named_peer_series(scores, [])
        assert named.empty
        assert list(named.columns) == ["entity_code", "entity_name", "year", "score"]


class TestCompareTrends:

    def test_bundles_all_series(self, scores, dict_resolver):
        comparison = compare_trends(scores, {2, 290, 255, 310}, 310, [290], dict_resolver)
        assert comparison.target_code == 310
        assert comparison.target["year"].tolist() == [2000, 2016]
        assert comparison.peer_average["year"].tolist() == [2000, 2016, 2017]
        assert comparison.named_peers["entity_name"].unique().tolist() == ["Poland"]
        assert comparison.peer_codes == [2, 255, 290]
