import json
import logging
import urllib.parse

import httpx

from devblog.exceptions import OAuthError
from devblog.services.github_client import GitHubClient
from devblog.session import AuthSession
from devblog.settings import Settings, settings

logger = logging.getLogger(__name__)


def build_authorize_url(settings_obj: Settings = settings) -> str:
    params = {
        "client_id": settings_obj.GITHUB_CLIENT_ID,
        "redirect_uri": settings_obj.OAUTH_REDIRECT_URI,
        "scope": settings_obj.GITHUB_OAUTH_SCOPE,
    }
    return f"{settings_obj.authorize_url}?{urllib.parse.urlencode(params)}"


async def exchange_code(
    code: str, http_client: httpx.AsyncClient, settings_obj: Settings = settings
) -> str:
    """Trade an authorization code for a bearer token."""
    try:
        response = await http_client.post(
            settings_obj.access_token_url,
            json={
                "client_id": settings_obj.GITHUB_CLIENT_ID,
                "client_secret": settings_obj.GITHUB_CLIENT_SECRET,
                "code": code,
            },
            headers={"Accept": "application/json"},
            timeout=settings_obj.REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        token = response.json().get("access_token")
    except (httpx.HTTPError, ValueError) as e:
        raise OAuthError("auth_failed", f"Token exchange failed: {e}") from e

    if not token:
        raise OAuthError("no_token", "GitHub did not return an access token")
    return token


async def complete_login(
    code: str, http_client: httpx.AsyncClient, settings_obj: Settings = settings
) -> AuthSession:
    token = await exchange_code(code, http_client, settings_obj)
    client = GitHubClient(token, http_client, api_url=settings_obj.GITHUB_API_URL)
    user = await client.get_user()
    logger.info(f"Signed in as {user.login}")
    return AuthSession(token=token, user=user)


def login_redirect_url(session: AuthSession, settings_obj: Settings = settings) -> str:
    """Frontend URL carrying the token and identity for client-side storage."""
    params = {
        "token": session.token,
        "user": json.dumps(session.user.model_dump()),
    }
    return f"{settings_obj.BASE_BLOG_URL.rstrip('/')}/?{urllib.parse.urlencode(params)}"


def error_redirect_url(reason: str, settings_obj: Settings = settings) -> str:
    query = urllib.parse.urlencode({"error": reason})
    return f"{settings_obj.BASE_BLOG_URL.rstrip('/')}/?{query}"
