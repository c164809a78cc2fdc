"""
Tests for the data source registry and environment overrides
"""

import pytest

from polity_analytics.resources import sources


class TestDataSources:

    def test_known_sources(self):
        assert set(sources.get_all_data_sources()) == {"polity", "nato"}

    def test_unknown_source_lists_available(self):
        with pytest.raises(KeyError) as exc_info:
            sources.get_data_source_config("freedom_house")
        assert "polity" in str(exc_info.value)

    def test_nato_source_prefers_archived_snapshot(self):
        assert sources.get_data_source_config("nato")["url"].startswith("https://web.archive.org/")

    def test_url_override(self, monkeypatch):
        monkeypatch.setenv("POLITY_SCORES_URL", "https://mirror.example.org/p4v2018.xls")
        assert sources.get_data_source_config("polity")["url"] == "https://mirror.example.org/p4v2018.xls"
        assert sources.DATA_SOURCES["polity"]["url"] != "https://mirror.example.org/p4v2018.xls"


class TestAnalysisDefaults:

    def test_defaults(self, monkeypatch):
        for name in ("POLITY_CUTOFF_YEAR", "POLITY_TARGET_CODE", "POLITY_NAMED_PEERS", "POLITY_CHART_OUTPUT"):
            monkeypatch.delenv(name, raising=False)
        assert sources.get_cutoff_year() == 2000
        assert sources.get_target_code() == 310
        assert sources.get_named_peers() == [290, 316, 317]
        assert sources.get_chart_output() == ""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("POLITY_CUTOFF_YEAR", "1990")
        monkeypatch.setenv("POLITY_TARGET_CODE", "640")
        monkeypatch.setenv("POLITY_NAMED_PEERS", "350, 352")
        assert sources.get_cutoff_year() == 1990
        assert sources.get_target_code() == 640
        assert sources.get_named_peers() == [350, 352]

    def test_invalid_integer(self, monkeypatch):
        monkeypatch.setenv("POLITY_HTTP_TIMEOUT", "soon")
        with pytest.raises(ValueError):
            sources.get_http_timeout()
