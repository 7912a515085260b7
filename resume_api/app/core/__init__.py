"""Core configuration, security and error types for the resume aggregation service."""
