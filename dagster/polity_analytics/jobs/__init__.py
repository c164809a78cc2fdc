"""
Jobs module for polity analytics pipeline.

Contains job definitions that orchestrate asset execution:
- Individual domain jobs (polity scores, membership)
- Full comparison pipeline ending in the trend chart
"""
