import logging

import httpx
from fastapi import Depends, HTTPException, Request
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_502_BAD_GATEWAY

from devblog.exceptions import GitHubAPIError
from devblog.security import get_bearer_token, get_settings
from devblog.services.github_client import GitHubClient
from devblog.services.posts_service import PostsService
from devblog.session import AuthSession
from devblog.settings import Settings

logger = logging.getLogger(__name__)


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


async def get_session(
    token: str = Depends(get_bearer_token),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    current_settings: Settings = Depends(get_settings),
) -> AuthSession:
    client = GitHubClient(token, http_client, api_url=current_settings.GITHUB_API_URL)
    try:
        user = await client.get_user()
    except GitHubAPIError as e:
        if e.status_code == HTTP_401_UNAUTHORIZED:
            raise HTTPException(
                status_code=HTTP_401_UNAUTHORIZED,
                detail="GitHub session expired, please sign in again",
            )
        logger.error(f"Failed to load GitHub user: {e}")
        raise HTTPException(
            status_code=HTTP_502_BAD_GATEWAY, detail="GitHub request failed"
        )
    return AuthSession(token=token, user=user)


def get_github_client(
    session: AuthSession = Depends(get_session),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    current_settings: Settings = Depends(get_settings),
) -> GitHubClient:
    return GitHubClient.for_session(
        session, http_client, api_url=current_settings.GITHUB_API_URL
    )


def get_posts_service(
    client: GitHubClient = Depends(get_github_client),
) -> PostsService:
    return PostsService(client)
