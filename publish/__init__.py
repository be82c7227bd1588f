"""Streaming upload ingestion endpoint."""

__version__ = "0.1.0"
