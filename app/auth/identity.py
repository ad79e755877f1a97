"""
Bearer token -> verified CurrentUser.

SupabaseIdentityProvider asks the auth API (one network call per request).
JwtIdentityProvider verifies the provider-issued JWT locally with the project secret.
Either way a bad token, an expired token or a provider error ends as UnauthorizedError.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional
from uuid import UUID

from jose import JWTError, jwt
from starlette.concurrency import run_in_threadpool
from supabase import Client

from app.auth.schemas import CurrentUser
from app.core.config import settings
from app.core.enums import UserRole
from app.core.exceptions import UnauthorizedError
from app.core.supabase_client import get_supabase_client

logger = logging.getLogger(__name__)


def role_from_metadata(app_metadata: Optional[Mapping[str, Any]]) -> str:
    """Role set by an administrator in app_metadata; student when absent."""
    role = (app_metadata or {}).get("role")
    if isinstance(role, str) and role.strip():
        return role.strip().lower()
    return UserRole.STUDENT.value


class IdentityProvider(ABC):
    @abstractmethod
    async def verify(self, token: str) -> CurrentUser:
        """Return the verified caller or raise UnauthorizedError."""


class SupabaseIdentityProvider(IdentityProvider):
    def __init__(self, client: Client) -> None:
        self._client = client

    async def verify(self, token: str) -> CurrentUser:
        try:
            # supabase-py is synchronous; keep it off the event loop
            response = await run_in_threadpool(self._client.auth.get_user, token)
        except Exception as e:
            logger.warning("Identity provider rejected token: %s", e)
            raise UnauthorizedError("Invalid token") from e

        user = getattr(response, "user", None)
        if user is None:
            raise UnauthorizedError("Invalid token")
        return CurrentUser(
            id=UUID(str(user.id)),
            email=user.email or None,
            role=role_from_metadata(user.app_metadata),
        )


class JwtIdentityProvider(IdentityProvider):
    def __init__(self, secret: str, audience: str = "authenticated", algorithm: str = "HS256") -> None:
        self._secret = secret
        self._audience = audience
        self._algorithm = algorithm

    async def verify(self, token: str) -> CurrentUser:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
            )
        except JWTError as e:
            logger.warning("JWT verification failed: %s", e)
            raise UnauthorizedError("Invalid token") from e

        try:
            user_id = UUID(str(claims.get("sub")))
        except ValueError:
            raise UnauthorizedError("Invalid token")
        return CurrentUser(
            id=user_id,
            email=claims.get("email") or None,
            role=role_from_metadata(claims.get("app_metadata")),
        )


def get_identity_provider() -> IdentityProvider:
    if settings.supabase_jwt_secret:
        return JwtIdentityProvider(settings.supabase_jwt_secret, settings.supabase_jwt_audience)
    return SupabaseIdentityProvider(get_supabase_client())
