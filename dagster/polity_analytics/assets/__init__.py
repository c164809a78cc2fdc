"""
Assets module for polity analytics pipeline.

Contains all Dagster assets organized by domain:
- polity_scores: Polity spreadsheet download and cleaning
- membership: NATO member state list scraping and code resolution
- comparison: Target/peer trends and the comparison chart
"""
