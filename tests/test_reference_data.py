"""
Tests for static reference data: classification bands and the country code registry
"""

import pandas as pd
import pytest

from polity_analytics.errors import UnresolvedEntityError
from polity_analytics.resources.classification import (
    CLASSIFICATION_BANDS,
    SCORE_MAX,
    SCORE_MIN,
    classify_score,
)
from polity_analytics.resources.country_codes import (
    CountryCodeRegistry,
    CountryCodeResource,
    normalize_country_name,
)


class TestClassificationBands:
    """Tests for the regime bands"""

    def test_every_score_in_exactly_one_band(self):
        for score in range(SCORE_MIN, SCORE_MAX + 1):
            matching = [band for band in CLASSIFICATION_BANDS if band.contains(score)]
            assert len(matching) == 1, f"score {score} in {len(matching)} bands"

    def test_bands_ordered_by_score_range(self):
        assert [band.label for band in CLASSIFICATION_BANDS] == ["Autocracy", "Anocracy", "Democracy"]
        starts = [band.range_start for band in CLASSIFICATION_BANDS]
        assert starts == sorted(starts)

    def test_render_bounds_touch(self):
        for lower, upper in zip(CLASSIFICATION_BANDS, CLASSIFICATION_BANDS[1:]):
            assert lower.render_bounds()[1] == upper.render_bounds()[0]

    def test_render_bounds_cover_domain(self):
        assert CLASSIFICATION_BANDS[0].render_bounds()[0] <= SCORE_MIN
        assert CLASSIFICATION_BANDS[-1].render_bounds()[1] >= SCORE_MAX

    def test_classify_score(self):
        assert classify_score(-10) == "Autocracy"
        assert classify_score(0) == "Anocracy"
        assert classify_score(6) == "Democracy"
        assert classify_score(-66) is None


class TestNormalizeCountryName:

    def test_accents_case_and_punctuation(self):
        assert normalize_country_name("  Côte d'Ivoire ") == "cote d ivoire"

    def test_citation_markers_removed(self):
        assert normalize_country_name("Canada[5]") == "canada"

    def test_leading_article_and_saint(self):
        assert normalize_country_name("The Bahamas") == "bahamas"
        assert normalize_country_name("St. Lucia") == "saint lucia"

    def test_ampersand(self):
        assert normalize_country_name("Antigua & Barbuda") == normalize_country_name("Antigua and Barbuda")

    def test_none(self):
        assert normalize_country_name(None) == ""


class TestCountryCodeRegistry:
    """Tests for the bundled Correlates of War registry"""

    @pytest.fixture(scope="class")
    def registry(self):
        return CountryCodeRegistry()

    def test_registry_loaded(self, registry):
        assert len(registry) > 150

    def test_exact_names(self, registry):
        assert registry.name_to_code("Hungary") == 310
        assert registry.name_to_code("Turkey") == 640
        assert registry.name_to_code("Niger") == 436
        assert registry.name_to_code("Nigeria") == 475

    def test_aliases(self, registry):
        assert registry.name_to_code("United States") == 2
        assert registry.name_to_code("USA") == 2
        assert registry.name_to_code("Czechia") == 316
        assert registry.name_to_code("Republic of Macedonia") == 343

    def test_names_with_page_artifacts(self, registry):
        assert registry.name_to_code("Canada[5]") == 20
        assert registry.name_to_code("  united kingdom ") == 200

    def test_fuzzy_match(self, registry):
        assert registry.name_to_code("Untied Kingdom") == 200
        assert registry.name_to_code("Luxemburg") == 212

    def test_unknown_name(self, registry):
        assert registry.name_to_code("Atlantis") is None
        assert registry.name_to_code("") is None

    def test_code_to_name(self, registry):
        assert registry.code_to_name(310) == "Hungary"
        assert registry.code_to_name(2) == "United States of America"
        assert registry.code_to_name(1) is None

    def test_require_code_raises(self, registry):
        with pytest.raises(UnresolvedEntityError) as exc_info:
            registry.require_code("Atlantis")
        assert exc_info.value.name == "Atlantis"

    def test_custom_table_and_cutoff(self):
        table = pd.DataFrame({"code": [1], "name": ["Freedonia"], "aliases": [""]})
        strict = CountryCodeRegistry(table, score_cutoff=100)
        assert strict.name_to_code("Freedonia") == 1
        assert strict.name_to_code("Fredonia") is None

    def test_resource_builds_registry(self):
        registry = CountryCodeResource(score_cutoff=95).get_registry()
        assert registry.score_cutoff == 95
        assert registry.name_to_code("Poland") == 290
