"""
Posting Ingestion
De-duplicated persistence of discovered postings
"""
from .posting_ingestor import PostingIngestor, IngestionResult

__all__ = ["PostingIngestor", "IngestionResult"]
