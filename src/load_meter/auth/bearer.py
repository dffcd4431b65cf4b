"""
Bearer token authentication for the load meter API.

TENANT_TOKENS binds each token to exactly one tenant. The tenant a request
operates on is always the one bound to its token, never a value from the
request body, so tenant ids are checked when the tokens are loaded rather
than on first use.

CHANGELOG:
- 2026-10-16: Validate tenant ids at load time, reject conflicting bindings,
  scan every token on verify
- 2026-10-10: Initial creation (STORY-006)

TODO:
- None
"""

import logging
import secrets

from fastapi import HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from load_meter.db.session import validate_tenant_id
from load_meter.errors import UnknownTenant

logger = logging.getLogger(__name__)


def parse_tenant_tokens(raw: str) -> dict[str, str]:
    """Parse ``token1:tenant1,token2:tenant2`` into a token -> tenant map.

    Malformed entries (no colon, empty token, tenant id that is not a valid
    database name) are skipped with a warning. Several tokens may share a
    tenant, which is how tokens are rotated.

    Raises:
        ValueError: If one token is bound to two different tenants.
    """
    token_map: dict[str, str] = {}
    for position, entry in enumerate(raw.split(",")):
        token, sep, tenant = (part.strip() for part in entry.partition(":"))
        if not entry.strip():
            continue
        if not sep or not token or not tenant:
            logger.warning("Skipping malformed TENANT_TOKENS entry %d", position)
            continue
        try:
            validate_tenant_id(tenant)
        except UnknownTenant:
            logger.warning(
                "Skipping TENANT_TOKENS entry %d: invalid tenant id %r",
                position,
                tenant,
            )
            continue
        bound = token_map.setdefault(token, tenant)
        if bound != tenant:
            raise ValueError(
                f"TENANT_TOKENS entry {position} rebinds a token from "
                f"'{bound}' to '{tenant}'"
            )
    return token_map


def verify_bearer_token(token: str, token_map: dict[str, str]) -> str | None:
    """Return the tenant bound to ``token``, or None.

    Every registered token is compared with secrets.compare_digest, even
    after a match, so timing does not reveal the token's position.
    """
    if not token:
        return None
    presented = token.encode("utf-8")
    match: str | None = None
    for registered, tenant in token_map.items():
        if secrets.compare_digest(presented, registered.encode("utf-8")):
            match = tenant
    return match


class BearerAuth:
    """FastAPI dependency resolving ``Authorization: Bearer`` to a tenant id.

    Attributes:
        token_map: Mapping of valid token -> tenant id.
    """

    def __init__(self, token_map: dict[str, str]) -> None:
        self.token_map = token_map
        self._scheme = HTTPBearer(auto_error=False)

    @classmethod
    def from_setting(cls, raw: str) -> "BearerAuth":
        """Build from the TENANT_TOKENS setting.

        Raises:
            RuntimeError: If no usable ``token:tenant`` entry is configured.
        """
        token_map = parse_tenant_tokens(raw)
        if not token_map:
            raise RuntimeError(
                "TENANT_TOKENS parsed but contains no valid token:tenant entries"
            )
        return cls(token_map)

    @property
    def tenants(self) -> set[str]:
        return set(self.token_map.values())

    @staticmethod
    def _reject(detail: str) -> HTTPException:
        return HTTPException(
            status_code=401,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

    async def verify(self, request: Request) -> str:
        """Return the tenant of the request's bearer token.

        The tenant is also stored on ``request.state.tenant`` for logging.

        Raises:
            HTTPException: 401 if the token is missing or unknown.
        """
        credentials: HTTPAuthorizationCredentials | None = await self._scheme(request)
        if credentials is None:
            raise self._reject("Missing authorization credentials.")

        tenant = verify_bearer_token(credentials.credentials, self.token_map)
        if tenant is None:
            raise self._reject("Invalid or expired token.")

        request.state.tenant = tenant
        return tenant
