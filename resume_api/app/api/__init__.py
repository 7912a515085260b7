"""HTTP routes for the resume aggregation service."""
