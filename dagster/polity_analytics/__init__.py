"""
Polity Analytics Pipeline

A small data pipeline comparing one country's Polity democracy score trend
against the average of its NATO peers and against individually named peers.
Combines the Polity spreadsheet with the NATO member state list scraped from
an archived Wikipedia page.
"""

__version__ = "1.0.0"
__author__ = "Polity Analytics Team"
