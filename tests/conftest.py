"""
Shared fixtures for polity analytics tests
"""

import pandas as pd
import pytest


MEMBERSHIP_GRID = [
    ["", "", ""],
    ["Header", "Header2", ""],
    ["", "USA", "2000"],
    ["", "Hungary", "1996"],
    ["Note: membership can change", ""],
]


class DictResolver:
    """Resolver backed by a plain dict, independent of any name matching."""

    def __init__(self, mapping):
        self.mapping = mapping
        self.names = {code: name for name, code in mapping.items()}

    def name_to_code(self, name):
        return self.mapping.get(name)

    def code_to_name(self, code):
        return self.names.get(code)


@pytest.fixture
def membership_grid():
    return [list(row) for row in MEMBERSHIP_GRID]


@pytest.fixture
def dict_resolver():
    return DictResolver({"USA": 2, "Hungary": 310, "Poland": 290, "Germany": 255})


@pytest.fixture
def raw_scores():
    """Rows shaped like the Polity spreadsheet, including artifacts to be filtered."""
    return pd.DataFrame({
        "cyear": [21999, 22000, 22016, 22017, 3102000, 3102016, 3102017, 2902016, 2902017, 2552016, 2552017],
        "ccode": [2, 2, 2, 2, 310, 310, 310, 290, 290, 255, 255],
        "country": ["United States"] * 4 + ["Hungary"] * 3 + ["Poland"] * 2 + ["Germany"] * 2,
        "year": [1999, 2000, 2016, 2017, 2000, 2016, 2017, 2016, 2017, 2016, 2017],
        "polity2": [10, 10, 10, 8, 10, 10, 10, 10, 10, 10, None],
    })


@pytest.fixture
def scores():
    """Cleaned score table."""
    return pd.DataFrame({
        "entity_code": pd.array([2, 2, 2, 310, 310, 290, 290, 255, 255], dtype="Int64"),
        "year": pd.array([2000, 2016, 2017, 2000, 2016, 2016, 2017, 2016, 2017], dtype="Int64"),
        "score": pd.array([10, 10, 8, 10, 10, 10, 9, 10, None], dtype="Int64"),
    })
