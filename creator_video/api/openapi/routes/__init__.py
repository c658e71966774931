"""OpenAPI route modules."""
