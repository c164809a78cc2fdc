"""
Data source configuration for polity analytics pipeline.

Provides the source registry and the environment-driven analysis defaults.
"""

import os
from typing import Dict, Any, List


# Data source configuration registry
DATA_SOURCES: Dict[str, Dict[str, Any]] = {
    'polity': {
        'source_name': 'Polity IV',
        'source_full_name': 'Polity IV Project, Center for Systemic Peace',
        'category': 'democracy_scores',
        'url': 'http://www.systemicpeace.org/inscr/p4v2017.xls',
        'description': 'Annual regime authority characteristics, polity2 score -10..10',
        'columns': {'ccode': 'entity_code', 'year': 'year', 'polity2': 'score'},
        'update_frequency': 'annual'
    },
    'nato': {
        'source_name': 'Wikipedia',
        'source_full_name': 'Wikipedia - Member states of NATO (archived snapshot)',
        'category': 'membership',
        # Archived snapshot: the live article layout keeps changing
        'url': 'https://web.archive.org/web/20180710072004/https://en.wikipedia.org/wiki/Member_states_of_NATO',
        'selector': '#mw-content-text table.wikitable',
        'table_index': 0,
        'name_position': 1,
        'date_position': 2,
        'description': 'NATO member states with accession dates',
        'update_frequency': 'irregular'
    }
}

DEFAULT_CUTOFF_YEAR = 2000
DEFAULT_TARGET_CODE = 310  # Hungary
DEFAULT_NAMED_PEERS = [290, 316, 317]  # Poland, Czech Republic, Slovakia
DEFAULT_HTTP_TIMEOUT = 60


def get_data_source_config(source_name: str) -> Dict[str, Any]:
    """
    Get configuration for a specific data source.

    Environment variables POLITY_SCORES_URL and POLITY_MEMBERSHIP_URL override
    the registered URLs.

    Args:
        source_name: Name of the data source (e.g., 'polity', 'nato')

    Returns:
        Dictionary containing source configuration

    Raises:
        KeyError: If source_name is not found in DATA_SOURCES
    """
    if source_name not in DATA_SOURCES:
        available_sources = list(DATA_SOURCES.keys())
        raise KeyError(f"Unknown data source '{source_name}'. Available: {available_sources}")

    config = dict(DATA_SOURCES[source_name])
    env_var = {'polity': 'POLITY_SCORES_URL', 'nato': 'POLITY_MEMBERSHIP_URL'}[source_name]
    override = os.getenv(env_var, '').strip()
    if override:
        config['url'] = override
    return config


def get_all_data_sources() -> Dict[str, Dict[str, Any]]:
    """
    Get all available data source configurations.

    Returns:
        Dictionary of all data source configurations
    """
    return DATA_SOURCES.copy()


def _int_from_env(name: str, default: int) -> int:
    value = os.getenv(name, '').strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got '{value}'")


def _codes_from_env(name: str, default: List[int]) -> List[int]:
    value = os.getenv(name, '').strip()
    if not value:
        return list(default)
    try:
        return [int(part) for part in value.split(',') if part.strip()]
    except ValueError:
        raise ValueError(f"Environment variable {name} must be comma-separated integers, got '{value}'")


def get_cutoff_year() -> int:
    return _int_from_env('POLITY_CUTOFF_YEAR', DEFAULT_CUTOFF_YEAR)


def get_target_code() -> int:
    return _int_from_env('POLITY_TARGET_CODE', DEFAULT_TARGET_CODE)


def get_named_peers() -> List[int]:
    return _codes_from_env('POLITY_NAMED_PEERS', DEFAULT_NAMED_PEERS)


def get_http_timeout() -> int:
    return _int_from_env('POLITY_HTTP_TIMEOUT', DEFAULT_HTTP_TIMEOUT)


def get_chart_output() -> str:
    """Chart output path, empty when no file should be written."""
    return os.getenv('POLITY_CHART_OUTPUT', '').strip()
