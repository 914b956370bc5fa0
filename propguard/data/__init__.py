"""
Data ingestion and validation module.

Parses raw data-store rows into model objects and validates the numeric
inputs every calculation depends on.
"""
