"""
Country name <-> numeric code registry.

The pipeline only depends on the CountryCodeResolver protocol; the default
CountryCodeRegistry resolves free-text names against a bundled table of
Correlates of War state codes, matching exact aliases first and falling back
to fuzzy matching.
"""

import logging
import re
import unicodedata
from importlib import resources
from typing import Dict, List, Optional, Protocol

import pandas as pd
from dagster import ConfigurableResource
from rapidfuzz import fuzz, process

from ..errors import UnresolvedEntityError

logger = logging.getLogger(__name__)

REGISTRY_FILE = 'cow_country_codes.csv'
DEFAULT_SCORE_CUTOFF = 90.0


class CountryCodeResolver(Protocol):
    def name_to_code(self, name: str) -> Optional[int]:
        ...

    def code_to_name(self, code: int) -> Optional[str]:
        ...


def normalize_country_name(name: str) -> str:
    """
    Reduce a country name to a comparable key.

    Strips accents, bracketed notes and punctuation, lowercases, expands
    'St.' and '&', and drops a leading 'the'.
    """
    if name is None:
        return ''
    text = unicodedata.normalize('NFKD', str(name))
    text = ''.join(c for c in text if not unicodedata.combining(c))
    text = re.sub(r'\[[^\]]*\]', ' ', text)
    text = text.lower().replace('&', ' and ')
    text = re.sub(r'\bst\.?\s', 'saint ', text)
    text = re.sub(r"[^a-z0-9 ]+", ' ', text)
    text = re.sub(r'\s+', ' ', text).strip()
    if text.startswith('the '):
        text = text[4:]
    return text


class CountryCodeRegistry:
    """Resolves country names to numeric codes using exact aliases then rapidfuzz."""

    def __init__(self, table: Optional[pd.DataFrame] = None, score_cutoff: float = DEFAULT_SCORE_CUTOFF):
        if table is None:
            table = load_registry_table()
        self.score_cutoff = score_cutoff
        self._names: Dict[int, str] = {}
        self._aliases: Dict[str, int] = {}

        for row in table.itertuples(index=False):
            code = int(row.code)
            self._names.setdefault(code, row.name)
            aliases = [row.name]
            if isinstance(row.aliases, str) and row.aliases:
                aliases.extend(row.aliases.split('|'))
            for alias in aliases:
                key = normalize_country_name(alias)
                if key:
                    self._aliases.setdefault(key, code)

        self._keys: List[str] = list(self._aliases.keys())

    def __len__(self) -> int:
        return len(self._names)

    def name_to_code(self, name: str) -> Optional[int]:
        key = normalize_country_name(name)
        if not key:
            return None
        if key in self._aliases:
            return self._aliases[key]

        match = process.extractOne(
            key, self._keys, scorer=fuzz.token_sort_ratio, score_cutoff=self.score_cutoff
        )
        if match is None:
            return None
        matched_key, score, _ = match
        logger.debug(f"Fuzzy matched '{name}' to '{matched_key}' (score {score:.1f})")
        return self._aliases[matched_key]

    def code_to_name(self, code: int) -> Optional[str]:
        return self._names.get(int(code))

    def require_code(self, name: str) -> int:
        code = self.name_to_code(name)
        if code is None:
            raise UnresolvedEntityError(name)
        return code


def load_registry_table() -> pd.DataFrame:
    """Load the bundled code table (columns: code, name, aliases)."""
    with resources.files(__package__).joinpath('data').joinpath(REGISTRY_FILE).open('r', encoding='utf-8') as f:
        return pd.read_csv(f, dtype={'code': int, 'name': str, 'aliases': str}, keep_default_na=False)


class CountryCodeResource(ConfigurableResource):
    """Dagster resource handing out a CountryCodeRegistry."""

    score_cutoff: float = DEFAULT_SCORE_CUTOFF

    def get_registry(self) -> CountryCodeRegistry:
        return CountryCodeRegistry(score_cutoff=self.score_cutoff)
