import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from devblog.exceptions import PostNotFoundError
from devblog.schemas.github import RepositoryFile
from devblog.settings import settings

logger = logging.getLogger(__name__)

POST_EXTENSIONS = (".md", ".mdx")


@dataclass(frozen=True)
class ResolvedFile:
    folder: str
    path: str
    name: str
    sha: str


class PostResolver:
    """Finds the file backing a slug across the candidate post folders."""

    def __init__(
        self,
        client,
        repo: Optional[str] = None,
        folders: Optional[Sequence[str]] = None,
    ):
        self.client = client
        self.repo = repo or settings.BLOG_REPO
        self.folders = list(folders or settings.BLOG_FOLDERS)

    async def find_existing_folder(
        self, owner: str
    ) -> Optional[Tuple[str, List[RepositoryFile]]]:
        """Return the first candidate folder that exists with its entries."""
        for folder in self.folders:
            entries = await self.client.list_directory(
                owner, self.repo, folder, allow_missing=True
            )
            if entries is not None:
                return folder, entries
        return None

    async def resolve(self, owner: str, slug: str) -> ResolvedFile:
        names = {f"{slug}{ext}" for ext in POST_EXTENSIONS}
        for folder in self.folders:
            entries = await self.client.list_directory(
                owner, self.repo, folder, allow_missing=True
            )
            if entries is None:
                logger.debug(f"Folder {folder} missing in {owner}/{self.repo}")
                continue
            match = find_entry(entries, names)
            if match:
                return ResolvedFile(
                    folder=folder, path=match.path, name=match.name, sha=match.sha
                )
        logger.info(f"Post {slug} not found in {owner}/{self.repo} {self.folders}")
        raise PostNotFoundError(slug)

    async def fetch(self, owner: str, slug: str) -> Tuple[ResolvedFile, str]:
        resolved = await self.resolve(owner, slug)
        raw = await self.client.get_file(owner, self.repo, resolved.path)
        return resolved, raw


def find_entry(entries: Sequence[RepositoryFile], names) -> Optional[RepositoryFile]:
    return next((entry for entry in entries if entry.name in names), None)
