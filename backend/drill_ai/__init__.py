"""Drill AI backend: drilling spreadsheet ingestion, well store, charts and chat."""
