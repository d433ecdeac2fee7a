"""API route modules."""
from . import ingestion

__all__ = ["ingestion"]
