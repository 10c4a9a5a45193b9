"""Gardens directory aggregation service."""
