import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from devblog import dependencies as deps
from devblog.exceptions import GitHubAPIError, OAuthError
from devblog.schemas.github import Identity
from devblog.security import get_settings
from devblog.services import auth_service
from devblog.session import AuthSession
from devblog.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


@router.get("/login")
def login(current_settings: Settings = Depends(get_settings)):
    """Send the browser to GitHub's consent screen."""
    return RedirectResponse(auth_service.build_authorize_url(current_settings))


@router.get("/callback")
async def callback(
    code: Optional[str] = None,
    http_client: httpx.AsyncClient = Depends(deps.get_http_client),
    current_settings: Settings = Depends(get_settings),
):
    if not code:
        return RedirectResponse(
            auth_service.error_redirect_url("no_code", current_settings)
        )

    try:
        session = await auth_service.complete_login(code, http_client, current_settings)
    except OAuthError as e:
        logger.error(f"GitHub auth error: {e}")
        return RedirectResponse(
            auth_service.error_redirect_url(e.reason, current_settings)
        )
    except GitHubAPIError as e:
        logger.error(f"GitHub auth error: {e}")
        return RedirectResponse(
            auth_service.error_redirect_url("auth_failed", current_settings)
        )

    return RedirectResponse(auth_service.login_redirect_url(session, current_settings))


@router.get("/me", response_model=Identity)
async def me(session: AuthSession = Depends(deps.get_session)):
    return session.user
