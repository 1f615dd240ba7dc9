"""Pharmacy list retriever: EXCEL pharmacy listings -> geocoded, scored JSON."""

__version__ = "0.1.0"
