"""
Remote Fetcher
Downloads the Polity spreadsheet and extracts HTML tables from web pages
"""

import logging
import os
import re
import tempfile
from typing import List, Optional
from urllib.parse import urlparse

import pandas as pd
import requests
from bs4 import BeautifulSoup, Tag
from dagster import ConfigurableResource
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import FetchError, ParseError, SelectorNotFoundError

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'
)

_CITATION_PATTERN = re.compile(r'\[[^\]]*\]')
_WHITESPACE_PATTERN = re.compile(r'\s+')


class RemoteFetcher:

    def __init__(self, timeout: int = 60, user_agent: str = DEFAULT_USER_AGENT,
                 max_retries: int = 3, backoff_factor: float = 0.6):
        self.timeout = timeout
        self.session = self._build_session(user_agent, max_retries, backoff_factor)
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def _build_session(user_agent: str, max_retries: int, backoff_factor: float) -> requests.Session:
        """
        Build a requests Session with conservative retries.
        systemicpeace.org and web.archive.org are slow and occasionally flaky.
        """
        session = requests.Session()
        session.headers.update({'User-Agent': user_agent})

        retry = Retry(
            total=max_retries,
            connect=max_retries,
            read=max_retries,
            status=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def close(self):
        self.session.close()

    def __enter__(self) -> 'RemoteFetcher':
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.close()

    def _get(self, url: str, stream: bool = False) -> requests.Response:
        try:
            response = self.session.get(url, timeout=self.timeout, stream=stream)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch {url}: {e}") from e
        return response

    def fetch_spreadsheet(self, url: str, sheet_name=0) -> pd.DataFrame:
        """
        Download a spreadsheet and parse it into a DataFrame.

        The body is staged in a temporary directory that is removed once
        parsing finishes, whether it succeeded or not.

        Raises:
            FetchError: network failure or non-2xx response
            ParseError: the downloaded bytes are not a readable spreadsheet
        """
        self.logger.info(f"Downloading spreadsheet: {url}")
        response = self._get(url, stream=True)

        filename = os.path.basename(urlparse(url).path) or 'download.xls'
        with tempfile.TemporaryDirectory(prefix='polity_') as tmp_dir:
            file_path = os.path.join(tmp_dir, filename)
            try:
                with open(file_path, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=8192):
                        if chunk:
                            f.write(chunk)
            except requests.RequestException as e:
                raise FetchError(f"Download interrupted for {url}: {e}") from e
            finally:
                response.close()

            self.logger.info(f"Downloaded {os.path.getsize(file_path):,} bytes to {file_path}")

            try:
                df = pd.read_excel(file_path, sheet_name=sheet_name, engine='calamine')
            except Exception as e:
                raise ParseError(f"Could not parse spreadsheet from {url}: {e}") from e

        self.logger.info(f"Parsed spreadsheet with shape {df.shape}")
        return df

    def fetch_html(self, url: str) -> BeautifulSoup:
        self.logger.info(f"Fetching page: {url}")
        response = self._get(url)
        return BeautifulSoup(response.content, 'html.parser')

    def fetch_html_table(self, url: str, selector: str, index: int = 0) -> pd.DataFrame:
        """
        Fetch a page and materialize one table selected by a positional CSS query.

        Args:
            url: Page URL, preferably an archived snapshot
            selector: CSS selector matching the candidate table elements
            index: Which of the matched elements to use

        Returns:
            DataFrame whose columns come from the table's first row

        Raises:
            SelectorNotFoundError: the selector matched fewer than index + 1 elements
        """
        soup = self.fetch_html(url)
        matches = soup.select(selector)
        if len(matches) <= index:
            raise SelectorNotFoundError(selector, url)
        if len(matches) > 1:
            self.logger.warning(f"Selector '{selector}' matched {len(matches)} elements on {url}, using match {index}")

        grid = table_to_grid(matches[index])
        self.logger.info(f"Extracted table with {len(grid)} rows from {url}")
        return table_from_grid(grid)


def clean_cell_text(text: str) -> str:
    """Remove citation markers like [5] and collapse whitespace."""
    text = _CITATION_PATTERN.sub('', text)
    return _WHITESPACE_PATTERN.sub(' ', text).strip()


def table_to_grid(table: Tag) -> List[List[str]]:
    """
    Materialize a table element into rows of text cells.

    Rows of nested tables are skipped, colspan cells are repeated, and short
    rows are padded with empty strings to the widest row.
    """
    grid = []
    for tr in table.find_all('tr'):
        if tr.find_parent('table') is not table:
            continue
        row = []
        for cell in tr.find_all(['th', 'td'], recursive=False):
            text = clean_cell_text(cell.get_text(' '))
            try:
                span = max(1, int(cell.get('colspan', 1)))
            except (TypeError, ValueError):
                span = 1
            row.extend([text] * span)
        grid.append(row)

    return pad_rows(grid)


def pad_rows(grid: List[List[str]], width: Optional[int] = None) -> List[List[str]]:
    """Pad ragged rows with empty strings so every row has the same length."""
    if width is None:
        width = max((len(row) for row in grid), default=0)
    return [list(row) + [''] * (width - len(row)) for row in grid]


def table_from_grid(grid: List[List[str]]) -> pd.DataFrame:
    """
    Turn a grid into a DataFrame using the first row as column labels.

    The labels are placeholders on the pages we scrape; blank or repeated
    labels get positional names so every column stays addressable.
    """
    grid = pad_rows(grid)
    if not grid:
        return pd.DataFrame()

    header, rows = grid[0], grid[1:]
    columns = []
    seen = set()
    for position, label in enumerate(header):
        name = label if label and label not in seen else f'unnamed_column_{position}'
        seen.add(name)
        columns.append(name)

    return pd.DataFrame(rows, columns=columns, dtype=object)


class FetcherResource(ConfigurableResource):
    """Dagster resource handing out a configured RemoteFetcher."""

    timeout: int = 60
    max_retries: int = 3
    backoff_factor: float = 0.6
    user_agent: str = DEFAULT_USER_AGENT

    def get_fetcher(self) -> RemoteFetcher:
        return RemoteFetcher(
            timeout=self.timeout,
            user_agent=self.user_agent,
            max_retries=self.max_retries,
            backoff_factor=self.backoff_factor,
        )
