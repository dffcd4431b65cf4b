"""
Redis rollup cache package.

CHANGELOG:
- 2026-10-09: Initial creation (STORY-001)

TODO:
- None
"""
