"""
Authentication package.

Exports the BearerAuth dependency class and token parsing utilities
for use by FastAPI route handlers.

CHANGELOG:
- 2026-10-10: Export BearerAuth, parse_tenant_tokens, verify_bearer_token (STORY-006)

TODO:
- None
"""

from load_meter.auth.bearer import BearerAuth, parse_tenant_tokens, verify_bearer_token

__all__ = ["BearerAuth", "parse_tenant_tokens", "verify_bearer_token"]
