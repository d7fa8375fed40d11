import datetime
import hashlib

from devblog.exceptions import (
    EditConflictError,
    FileAlreadyExistsError,
    GitHubAPIError,
)
from devblog.schemas.github import (
    CommitInfo,
    Identity,
    PutFileResult,
    Repository,
    RepositoryFile,
)
from devblog.session import AuthSession

FIXED_NOW = datetime.datetime(2025, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)


def fixed_clock():
    return FIXED_NOW


def blob_sha(content) -> str:
    data = content if isinstance(content, bytes) else content.encode("utf-8")
    return hashlib.sha1(data).hexdigest()


def make_session(login: str = "octocat", token: str = "gho_test") -> AuthSession:
    return AuthSession(token=token, user=Identity(login=login, name="The Octocat"))


class FakeGitHubClient:
    """
    In-memory stand-in for GitHubClient.
    Folders exist when they hold at least one file or are listed in ``dirs``.
    Writes enforce the same sha rules GitHub does.
    """

    def __init__(
        self,
        files: dict | None = None,
        dirs=(),
        repo_exists: bool = True,
        create_repo_error: Exception | None = None,
        fail_paths=(),
    ):
        self.files = {path: content for path, content in (files or {}).items()}
        self.dirs = set(dirs)
        self._repo_exists = repo_exists
        self.create_repo_error = create_repo_error
        self.fail_paths = set(fail_paths)
        self.calls = []
        self.puts = []
        self.created_repos = []

    def sha(self, path: str) -> str:
        return blob_sha(self.files[path])

    async def get_user(self):
        self.calls.append(("user",))
        return Identity(login="octocat")

    async def list_directory(self, owner, repo, path, allow_missing=False):
        self.calls.append(("list", path))
        prefix = path.strip("/") + "/"
        entries = [
            RepositoryFile(name=p[len(prefix):], path=p, sha=self.sha(p))
            for p in self.files
            if p.startswith(prefix) and "/" not in p[len(prefix):]
        ]
        if not entries and path not in self.dirs:
            if allow_missing:
                return None
            raise GitHubAPIError(404, "Not Found")
        return entries

    async def get_file(self, owner, repo, path):
        self.calls.append(("get", path))
        if path in self.fail_paths:
            raise GitHubAPIError(500, "Server Error")
        if path not in self.files:
            raise GitHubAPIError(404, "Not Found")
        return self.files[path]

    async def put_file(self, owner, repo, path, content, message, sha=None):
        self.puts.append(
            {"owner": owner, "repo": repo, "path": path, "content": content,
             "message": message, "sha": sha}
        )
        if path in self.files:
            if sha is None:
                raise FileAlreadyExistsError(path)
            if sha != self.sha(path):
                raise EditConflictError(path)
        elif sha is not None:
            raise GitHubAPIError(422, "sha does not match")
        self.files[path] = content
        name = path.rsplit("/", 1)[-1]
        return PutFileResult(
            content=RepositoryFile(name=name, path=path, sha=self.sha(path)),
            commit=CommitInfo(sha=blob_sha(message), message=message),
        )

    async def upload_binary(self, owner, repo, path, data, message):
        self.puts.append(
            {"owner": owner, "repo": repo, "path": path, "content": data,
             "message": message, "sha": None}
        )
        self.files[path] = data
        return path

    async def delete_file(self, owner, repo, path, sha, message):
        self.calls.append(("delete", path, sha, message))
        if path not in self.files:
            raise GitHubAPIError(404, "Not Found")
        if sha != self.sha(path):
            raise EditConflictError(path)
        del self.files[path]

    async def repo_exists(self, owner, repo):
        self.calls.append(("repo_exists", repo))
        return self._repo_exists

    async def create_repo(self, name, description, private=True):
        self.created_repos.append((name, description, private))
        if self.create_repo_error:
            raise self.create_repo_error
        self._repo_exists = True
        return Repository(name=name, full_name=f"octocat/{name}", private=private)


class FakePostsService:
    """
    Minimal posts service stand-in for router tests.
    Set ``error`` to make every call raise it.
    """

    def __init__(self, posts=None, post=None, error: Exception | None = None):
        self.posts = posts or []
        self.post = post
        self.error = error
        self.calls = []

    def _maybe_raise(self):
        if self.error:
            raise self.error

    async def list_posts(self, owner):
        self.calls.append(("list_posts", owner))
        self._maybe_raise()
        return self.posts

    async def get_post(self, owner, slug):
        self.calls.append(("get_post", owner, slug))
        self._maybe_raise()
        return self.post

    async def save_post(self, owner, draft):
        self.calls.append(("save_post", owner, draft))
        self._maybe_raise()
        return self.post

    async def delete_post(self, owner, slug, sha):
        self.calls.append(("delete_post", owner, slug, sha))
        self._maybe_raise()

    async def upload_image(self, owner, content_type, data, name=None):
        self.calls.append(("upload_image", owner, content_type, data, name))
        self._maybe_raise()
        return "images/paste-1.png"

    async def initialize_folder(self, owner, folder):
        self.calls.append(("initialize_folder", owner, folder))
        self._maybe_raise()
        return f"{folder}/README.md"

