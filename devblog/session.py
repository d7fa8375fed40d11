from pydantic import BaseModel

from devblog.schemas.github import Identity


class AuthSession(BaseModel):
    """Bearer credential plus the identity it belongs to.

    Built once per request (or by the OAuth callback) and handed to the
    GitHub client explicitly. The login doubles as the repository owner.
    """

    token: str
    user: Identity

    @property
    def owner(self) -> str:
        return self.user.login
