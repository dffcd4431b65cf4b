"""
Domain services: buckets, energy conversion, accumulation, resets and rollups.

CHANGELOG:
- 2026-10-09: Initial creation (STORY-001)

TODO:
- None
"""
