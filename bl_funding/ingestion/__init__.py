"""
bl_funding.ingestion — Data acquisition and loading.

Modules:
    tidytuesday_client — Download and cache bl_funding.csv.
    loader             — Validate the CSV and build FundingRecords.
"""
