"""Branch portfolio ingestion engine: flat-file extracts -> classified, cross-referenced tables."""
