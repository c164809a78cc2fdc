"""
Utility modules for polity analytics pipeline.

- fetcher: HTTP download of spreadsheets and HTML tables
- data_processing: table normalization
- aggregation: target and peer trend series
- plotting: layered trend chart builder
"""
