from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.identity import IdentityProvider, get_identity_provider
from app.auth.schemas import CurrentUser
from app.core.exceptions import UnauthorizedError


# auto_error=False: a missing or non-Bearer header is reported as our own 401 envelope
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> CurrentUser:
    """Resolve the caller from `Authorization: Bearer <token>`.

    A missing or malformed header fails before the identity provider is contacted.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Missing token")
    return await provider.verify(credentials.credentials)
