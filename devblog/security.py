from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED

from devblog.settings import Settings, settings

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings() -> Settings:
    """Small wrapper to allow dependency overrides in tests."""
    return settings


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> str:
    """The caller's GitHub token, forwarded as-is to GitHub."""
    if credentials and credentials.credentials:
        return credentials.credentials
    raise HTTPException(
        status_code=HTTP_401_UNAUTHORIZED,
        detail="Please sign in with GitHub",
        headers={"WWW-Authenticate": "Bearer"},
    )
