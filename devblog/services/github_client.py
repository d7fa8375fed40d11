import base64
import binascii
import logging
import urllib.parse
from typing import Any, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from devblog.exceptions import (
    EditConflictError,
    FileAlreadyExistsError,
    GitHubAPIError,
    RepositoryExistsError,
    UnexpectedResponseError,
)
from devblog.schemas.github import Identity, PutFileResult, Repository, RepositoryFile
from devblog.session import AuthSession
from devblog.settings import settings

logger = logging.getLogger(__name__)

API_VERSION = "2022-11-28"

ModelT = TypeVar("ModelT", bound=BaseModel)


class GitHubClient:
    """
    Typed wrapper over the GitHub contents and repos endpoints.

    Every call is a single round trip. Non-2xx responses raise
    GitHubAPIError; a 404 is only tolerated where the caller asks for it.
    """

    def __init__(
        self,
        token: str,
        http_client: httpx.AsyncClient,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.token = token
        self.http = http_client
        self.api_url = (api_url or settings.GITHUB_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT

    @classmethod
    def for_session(
        cls, session: AuthSession, http_client: httpx.AsyncClient, **kwargs
    ):
        return cls(session.token, http_client, **kwargs)

    @property
    def headers(self) -> dict:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def get_user(self) -> Identity:
        data = await self._request("GET", "/user")
        return _parse(Identity, data, "/user")

    async def list_directory(
        self, owner: str, repo: str, path: str, allow_missing: bool = False
    ) -> Optional[List[RepositoryFile]]:
        """List a folder. Returns None for a missing folder when allowed."""
        endpoint = _contents_endpoint(owner, repo, path)
        data = await self._request("GET", endpoint, allow_404=allow_missing)
        if data is None:
            return None
        if not isinstance(data, list):
            raise UnexpectedResponseError(f"{endpoint} is not a directory")
        return [_parse(RepositoryFile, entry, endpoint) for entry in data]

    async def get_file(self, owner: str, repo: str, path: str) -> str:
        data = await self._request("GET", _contents_endpoint(owner, repo, path))
        if not isinstance(data, dict):
            return ""
        content = data.get("content")
        if not content or data.get("encoding") != "base64":
            return ""
        try:
            return base64.b64decode(content.replace("\n", "")).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            logger.warning(f"Could not decode {path}: {e}")
            return ""

    async def put_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        sha: Optional[str] = None,
    ) -> PutFileResult:
        """
        Create ``path``, or update it when ``sha`` is given.

        GitHub refuses the update with a 409 when ``sha`` is no longer the
        current blob, which surfaces as EditConflictError.
        """
        encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
        return await self._put_contents(owner, repo, path, encoded, message, sha)

    async def upload_binary(
        self, owner: str, repo: str, path: str, data: bytes, message: str
    ) -> str:
        encoded = base64.b64encode(data).decode("ascii")
        await self._put_contents(owner, repo, path, encoded, message)
        return path

    async def delete_file(
        self, owner: str, repo: str, path: str, sha: str, message: str
    ) -> None:
        try:
            await self._request(
                "DELETE",
                _contents_endpoint(owner, repo, path),
                json={"message": message, "sha": sha},
            )
        except GitHubAPIError as e:
            if e.status_code == 409:
                raise EditConflictError(path) from e
            raise

    async def repo_exists(self, owner: str, repo: str) -> bool:
        data = await self._request("GET", f"/repos/{owner}/{repo}", allow_404=True)
        return data is not None

    async def create_repo(
        self, name: str, description: str, private: bool = True
    ) -> Repository:
        """Create a repository for the authenticated user.

        ``auto_init`` gives the repository a README so it has a default
        branch to commit onto. Creating an existing name raises
        RepositoryExistsError.
        """
        payload = {
            "name": name,
            "description": description,
            "private": private,
            "auto_init": True,
        }
        try:
            data = await self._request("POST", "/user/repos", json=payload)
        except GitHubAPIError as e:
            if e.status_code == 422:
                raise RepositoryExistsError(name) from e
            raise
        return _parse(Repository, data, "/user/repos")

    async def _put_contents(
        self,
        owner: str,
        repo: str,
        path: str,
        encoded: str,
        message: str,
        sha: Optional[str] = None,
    ) -> PutFileResult:
        endpoint = _contents_endpoint(owner, repo, path)
        payload = {"message": message, "content": encoded}
        if sha:
            payload["sha"] = sha
        try:
            data = await self._request("PUT", endpoint, json=payload)
        except GitHubAPIError as e:
            if e.status_code == 409:
                raise EditConflictError(path) from e
            if e.status_code == 422 and not sha:
                raise FileAlreadyExistsError(path) from e
            raise
        return _parse(PutFileResult, data, endpoint)

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Optional[dict] = None,
        allow_404: bool = False,
    ) -> Any:
        url = f"{self.api_url}{endpoint}"
        try:
            response = await self.http.request(
                method, url, headers=self.headers, json=json, timeout=self.timeout
            )
        except httpx.RequestError as e:
            logger.error(f"{method} {endpoint} failed: {e}")
            raise GitHubAPIError(503, str(e)) from e

        if response.status_code == 404 and allow_404:
            return None
        if response.is_error:
            message = _error_message(response)
            logger.debug(f"{method} {endpoint} -> {response.status_code}: {message}")
            raise GitHubAPIError(response.status_code, message)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UnexpectedResponseError(
                f"{method} {endpoint} did not return JSON"
            ) from e


def _contents_endpoint(owner: str, repo: str, path: str) -> str:
    return f"/repos/{owner}/{repo}/contents/{urllib.parse.quote(path.strip('/'))}"


def _parse(model: Type[ModelT], data: Any, endpoint: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise UnexpectedResponseError(
            f"Unexpected {model.__name__} payload from {endpoint}: {e}"
        ) from e


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase
