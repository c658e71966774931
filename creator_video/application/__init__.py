"""Application layer - use cases and orchestration.

This layer contains:
- Services: lifecycle commands, webhook ingestion, view tracking, engagement
- DTOs: Data transfer objects for API boundaries
"""
