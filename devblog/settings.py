from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # GitHub API
    GITHUB_API_URL: str = "https://api.github.com"
    REQUEST_TIMEOUT: float = 20.0

    # GitHub OAuth
    GITHUB_OAUTH_URL: str = "https://github.com/login/oauth"
    GITHUB_CLIENT_ID: str = ""
    GITHUB_CLIENT_SECRET: str = ""
    GITHUB_OAUTH_SCOPE: str = "repo user"
    OAUTH_REDIRECT_URI: str = "http://localhost:8000/auth/callback"

    # Blog storage
    BLOG_REPO: str = "DevBlog"
    BLOG_REPO_DESCRIPTION: str = "My personal blog powered by GitHub"
    # Probed in order; the first folder that exists holds the posts
    BLOG_FOLDERS: List[str] = ["blog", "posts"]
    DEFAULT_BLOG_FOLDER: str = "blog"
    IMAGES_FOLDER: str = "images"

    # Frontend
    BASE_BLOG_URL: str = "http://localhost:3000"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def authorize_url(self) -> str:
        return f"{self.GITHUB_OAUTH_URL}/authorize"

    @property
    def access_token_url(self) -> str:
        return f"{self.GITHUB_OAUTH_URL}/access_token"


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
