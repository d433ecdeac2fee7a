"""HTTP surface for the ingestion service."""
