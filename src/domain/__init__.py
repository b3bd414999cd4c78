"""
Domain layer for recipient sync business logic.

This layer contains:
- Data models (type-safe structures)
- Business logic (policy checks, enrichment, sync pipeline)
- The per-message recipient cache
"""
