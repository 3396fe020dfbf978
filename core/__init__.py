"""
Shared infrastructure for the account portal.

Provides base functionality used throughout the project:
- Base models (UUIDModel, TimestampedModel)
- Encrypted model fields
- camelCase JSON rendering and parsing
- Cache-backed rate limiting
- API exception handling and table pagination
"""
