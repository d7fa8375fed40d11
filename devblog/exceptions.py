class DevBlogError(Exception):
    """Base class for errors raised by the blog services."""


class GitHubAPIError(DevBlogError):
    """A GitHub request returned a non-2xx response."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        self.message = message
        super().__init__(f"GitHub API error ({status_code}): {message}")


class UnexpectedResponseError(GitHubAPIError):
    """A GitHub response did not have the shape the endpoint promises."""

    def __init__(self, message: str):
        super().__init__(502, message)


class EditConflictError(GitHubAPIError):
    """The file changed on GitHub since its sha was read."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(409, f"{path} was changed since it was loaded")


class FileAlreadyExistsError(GitHubAPIError):
    """A create was attempted on a path that already holds a file."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(422, f"{path} already exists")


class RepositoryExistsError(GitHubAPIError):
    """Repository creation was refused because the name is taken."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(422, f"repository {name} already exists")


class PostNotFoundError(DevBlogError):
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(
            f'Post "{slug}" not found. If you just created this post, '
            "please wait a few seconds and try again."
        )


class OAuthError(DevBlogError):
    """The OAuth code exchange did not yield an access token."""

    def __init__(self, reason: str, message: str = ""):
        self.reason = reason
        super().__init__(message or reason)


class InvalidRequestError(DevBlogError):
    """The caller asked for something the blog cannot store."""
