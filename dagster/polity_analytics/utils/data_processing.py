"""
Data processing utilities for polity analytics pipeline.

Contains functions for:
- Polity spreadsheet column selection, integer coercion and filtering
- Membership table cleanup (header/footnote rows, positional columns)
- Country name to code resolution for membership rows
"""

import logging
import re
from typing import Dict, Optional, Set

import pandas as pd

from ..errors import ParseError, TypeCoercionError, UnresolvedEntityError
from ..resources.classification import SCORE_MAX, SCORE_MIN
from ..resources.country_codes import CountryCodeResolver

logger = logging.getLogger(__name__)

DEFAULT_SCORE_COLUMNS: Dict[str, str] = {'ccode': 'entity_code', 'year': 'year', 'polity2': 'score'}
REQUIRED_COLUMNS = ('entity_code', 'year')

_YEAR_PATTERN = re.compile(r'\b(1[89]\d{2}|20\d{2})\b')


def normalize_scores(raw: pd.DataFrame, columns: Optional[Dict[str, str]] = None,
                     cutoff_year: int = 2000) -> pd.DataFrame:
    """
    Clean the raw Polity spreadsheet into entity_code / year / score rows.

    Steps:
    - Select the three source columns and rename them
    - Coerce them to integers (empty scores stay missing)
    - Keep rows with year >= cutoff_year
    - Drop rows whose score lies outside [-10, 10]; Polity's special
      codes (-66, -77, -88) are filtered this way, never clamped

    Args:
        raw: DataFrame read from the spreadsheet
        columns: Mapping of source column name to target column name
        cutoff_year: First year to keep

    Returns:
        New DataFrame sorted by entity_code and year

    Raises:
        ParseError: a source column is missing
        TypeCoercionError: a cell is not an integer
    """
    columns = columns or DEFAULT_SCORE_COLUMNS
    missing = [col for col in columns if col not in raw.columns]
    if missing:
        raise ParseError(f"Spreadsheet is missing columns {missing}. Found: {list(raw.columns)[:20]}")

    df = raw[list(columns)].rename(columns=columns)
    for col in df.columns:
        df[col] = _coerce_integer_column(df[col], col)

    for col in REQUIRED_COLUMNS:
        if df[col].isna().any():
            raise TypeCoercionError(col, ['<empty>'])

    total_rows = len(df)
    df = df[df['year'] >= cutoff_year]
    after_cutoff = len(df)

    in_range = df['score'].isna() | df['score'].between(SCORE_MIN, SCORE_MAX)
    df = df[in_range.astype(bool)]

    logger.info(
        f"Normalized scores: {total_rows} rows, {total_rows - after_cutoff} before {cutoff_year}, "
        f"{after_cutoff - len(df)} out of range, {len(df)} kept"
    )
    return df.sort_values(['entity_code', 'year']).reset_index(drop=True)


def _coerce_integer_column(series: pd.Series, name: str) -> pd.Series:
    """Coerce a column to nullable Int64, raising on non-numeric or fractional cells."""
    text = series.astype(str).str.strip()
    blank = series.isna().to_numpy() | text.eq('').to_numpy()
    numeric = pd.to_numeric(text.where(~blank), errors='coerce')

    bad = numeric.isna().to_numpy() & ~blank
    if bad.any():
        raise TypeCoercionError(name, series[bad].tolist())

    fractional = numeric.notna() & (numeric != numeric.round())
    if fractional.any():
        raise TypeCoercionError(name, series[fractional].tolist())

    return numeric.round().astype('Int64')


def normalize_membership(table: pd.DataFrame, name_position: int = 1, date_position: int = 2) -> pd.DataFrame:
    """
    Clean the scraped membership table.

    The scraped table has no real header: its first data row holds the
    literal header text and its last row is a footnote. Both are dropped and
    the member name and join date columns are picked by position.

    Returns:
        New DataFrame with entity_name, join_date and join_year
    """
    width = len(table.columns)
    if max(name_position, date_position) >= width:
        raise ParseError(
            f"Membership table has {width} columns, positions {name_position} and {date_position} requested"
        )

    body = table.iloc[1:-1, [name_position, date_position]].copy()
    body.columns = ['entity_name', 'join_date']
    body['entity_name'] = body['entity_name'].fillna('').astype(str).str.strip()
    body['join_date'] = body['join_date'].fillna('').astype(str).str.strip()

    empty_names = body['entity_name'] == ''
    if empty_names.any():
        logger.warning(f"Dropping {int(empty_names.sum())} membership rows without a name")
    body = body[~empty_names]

    body['join_year'] = body['join_date'].map(extract_year).astype('Int64')
    return body.reset_index(drop=True)


def extract_year(text: str) -> Optional[int]:
    """First four-digit year in a free-text date, or None."""
    match = _YEAR_PATTERN.search(text or '')
    return int(match.group(1)) if match else None


def resolve_membership_codes(members: pd.DataFrame, resolver: CountryCodeResolver) -> pd.DataFrame:
    """
    Add a nullable entity_code column by resolving each member name.

    Unresolved names are logged and left with a missing code; they never
    abort the run.
    """
    codes = []
    unresolved = []
    for name in members['entity_name']:
        try:
            codes.append(_require_code(resolver, name))
        except UnresolvedEntityError as e:
            logger.warning(str(e))
            unresolved.append(name)
            codes.append(None)

    resolved = members.assign(entity_code=pd.array(codes, dtype='Int64'))
    logger.info(f"Resolved {len(members) - len(unresolved)}/{len(members)} member names")
    return resolved


def _require_code(resolver: CountryCodeResolver, name: str) -> int:
    code = resolver.name_to_code(name)
    if code is None:
        raise UnresolvedEntityError(name)
    return int(code)


def member_codes(members: pd.DataFrame, joined_by: Optional[int] = None) -> Set[int]:
    """
    Resolved member codes, optionally only members that joined by a given year.

    Rows without a code are excluded.
    """
    df = members[members['entity_code'].notna()]
    if joined_by is not None:
        df = df[(df['join_year'].notna() & (df['join_year'] <= joined_by)).astype(bool)]
    return {int(code) for code in df['entity_code']}
