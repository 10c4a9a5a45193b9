"""Upstream data sources: subgraph indexer and curated metadata."""
