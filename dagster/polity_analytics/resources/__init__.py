"""
Resources and static configuration for polity analytics pipeline.

- sources: data source registry and environment-driven defaults
- classification: Polity regime classification bands
- country_codes: country name <-> numeric code registry
"""
