"""
Database package: tenant ORM models, the tenant resolver and migrations.

CHANGELOG:
- 2026-10-09: Initial creation (STORY-001)

TODO:
- None
"""
