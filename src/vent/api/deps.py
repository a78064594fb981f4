"""FastAPI dependencies for authentication and authorization.

The resolved principal is passed to endpoints as an explicit argument:

    @router.get("/admin/users/")
    async def list_users(principal: EntityData = Depends(require_permissions(resolver, "view_user"))):
        ...
"""

import logging
from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException, Request

from vent.auth import permissions
from vent.auth.types import TokenAuthenticator
from vent.core.errors import (
    AuthenticationError,
    EntityNotFoundError,
    InvalidTokenError,
    PermissionDeniedError,
    PrincipalNotFoundError,
)
from vent.core.fields import EntityData
from vent.schema.client import GetOptions
from vent.schema.config import SchemaConfig

logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


class PrincipalResolver:
    """Dependency resolving the request's token into the user entity.

    The token is taken from the auth cookie, or from an
    ``Authorization: Bearer`` header. The user is loaded with the
    permission graph eager-loaded so authorization needs no more I/O.
    """

    def __init__(
        self,
        tokens: TokenAuthenticator,
        user_schema: SchemaConfig,
        cookie_name: str,
    ):
        self._tokens = tokens
        self._user_schema = user_schema
        self._cookie_name = cookie_name

    def _extract_token(self, request: Request) -> str | None:
        token = request.cookies.get(self._cookie_name)
        if token:
            return token
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            return auth_header[7:]  # Remove "Bearer " prefix
        return None

    async def resolve(self, token: str) -> EntityData:
        """Resolve a token into the principal.

        Raises:
            AuthenticationError: If the token is bad or names no usable user
        """
        claims = self._tokens.authenticate(token)
        try:
            user_id = claims.user_id
        except ValueError:
            raise InvalidTokenError("Token subject is not a user id")

        try:
            principal = await self._user_schema.client.get(
                user_id, GetOptions(with_edges=list(permissions.PERMISSION_EDGES))
            )
        except EntityNotFoundError:
            raise PrincipalNotFoundError(f"User {user_id} does not exist")

        active = principal.get("is_active")
        if active is not None and active.raw is False:
            raise PrincipalNotFoundError(f"User {user_id} is disabled")
        return principal

    async def __call__(self, request: Request) -> EntityData:
        token = self._extract_token(request)
        if not token:
            raise _unauthorized("Authentication required")
        try:
            return await self.resolve(token)
        except AuthenticationError as e:
            logger.info("Rejected token for %s %s: %s", request.method, request.url.path, e)
            raise _unauthorized("Authentication required")


def require_permissions(
    resolver: PrincipalResolver,
    *required: str,
) -> Callable[..., Awaitable[EntityData]]:
    """Create a dependency that requires the principal to hold permissions.

    Unauthenticated requests get a 401 from the resolver; authenticated
    principals missing a permission get a 403.
    """

    async def dependency(principal: EntityData = Depends(resolver)) -> EntityData:
        try:
            permissions.require_permissions(principal, *required)
        except PermissionDeniedError as e:
            raise HTTPException(status_code=403, detail=str(e))
        return principal

    return dependency
