from typing import Optional

from pydantic import BaseModel
from pydantic.config import ConfigDict


class Identity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    login: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None


class RepositoryFile(BaseModel):
    """One entry of a contents listing, or a single fetched blob."""

    model_config = ConfigDict(extra="ignore")

    name: str
    path: str
    sha: str
    size: int = 0
    type: str = "file"
    content: Optional[str] = None  # base64, only present on single-file reads
    encoding: Optional[str] = None
    download_url: Optional[str] = None


class CommitInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sha: str
    message: Optional[str] = None


class PutFileResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: Optional[RepositoryFile] = None
    commit: CommitInfo


class Repository(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    full_name: str
    private: bool = True
