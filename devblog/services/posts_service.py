import asyncio
import datetime
import logging
from pathlib import PurePosixPath
from typing import Callable, List, Optional

from devblog.exceptions import (
    FileAlreadyExistsError,
    InvalidRequestError,
    RepositoryExistsError,
)
from devblog.schemas.blog import Post, PostDraft
from devblog.schemas.github import RepositoryFile
from devblog.services.frontmatter_codec import decode, encode
from devblog.services.post_resolver import POST_EXTENSIONS, PostResolver, find_entry
from devblog.settings import settings
from devblog.utils import create_slug, derive_excerpt, strip_post_extension

logger = logging.getLogger(__name__)

FOLDER_README = """# Blog Posts

This folder contains your blog posts written in Markdown.

## File Structure

Each post should be a Markdown file (.md) with frontmatter:

```markdown
---
title: Your Post Title
date: 2025-01-01
---

Your post content here...
```
"""


LOOSE_DATE_FORMATS = (
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%Y/%m/%d",
    "%a, %d %b %Y %H:%M:%S %z",
)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class PostsService:
    def __init__(
        self,
        client,
        resolver: Optional[PostResolver] = None,
        *,
        repo: Optional[str] = None,
        default_folder: Optional[str] = None,
        images_folder: Optional[str] = None,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ):
        self.client = client
        self.repo = repo or settings.BLOG_REPO
        self.resolver = resolver or PostResolver(client, repo=self.repo)
        self.default_folder = default_folder or settings.DEFAULT_BLOG_FOLDER
        self.images_folder = images_folder or settings.IMAGES_FOLDER
        self.clock = clock

    async def ensure_repository(self, owner: str) -> bool:
        """Create the blog repository if it is missing. Returns True if created."""
        if await self.client.repo_exists(owner, self.repo):
            return False

        logger.info(f"Repository {owner}/{self.repo} doesn't exist, creating...")
        try:
            await self.client.create_repo(
                self.repo, settings.BLOG_REPO_DESCRIPTION, private=True
            )
        except RepositoryExistsError:
            # 404 on lookup but name taken on create: usually a permissions problem
            logger.warning(
                f"Repository {owner}/{self.repo} looked missing but already exists"
            )
            return False
        return True

    async def list_posts(self, owner: str) -> List[Post]:
        if await self.ensure_repository(owner):
            logger.info(f"Created {owner}/{self.repo}; it has no posts yet")
            return []

        found = await self.resolver.find_existing_folder(owner)
        if found is None:
            logger.info(
                f"No post folder {self.resolver.folders} in {owner}/{self.repo}"
            )
            return []

        folder, entries = found
        files = [entry for entry in entries if is_post_file(entry)]
        now = self.clock()
        results = await asyncio.gather(
            *(self._load_post(owner, entry, now) for entry in files),
            return_exceptions=True,
        )

        posts = []
        for entry, result in zip(files, results):
            if isinstance(result, Exception):
                logger.warning(f"Failed to load post {entry.path}: {result}")
                continue
            posts.append(result)

        posts.sort(key=lambda post: post_sort_key(post, now), reverse=True)
        logger.debug(f"Loaded {len(posts)}/{len(files)} posts from {folder}")
        return posts

    async def get_post(self, owner: str, slug: str) -> Post:
        resolved, raw = await self.resolver.fetch(owner, slug)
        return parse_post(raw, resolved.name, resolved.sha, resolved.path, self.clock())

    async def save_post(self, owner: str, draft: PostDraft) -> Post:
        """
        Create a post, or update it when the draft carries the sha it was
        loaded with.

        New posts get a slug derived from the title and are written without
        a sha. Updates keep the original slug and file, and GitHub rejects
        them if the file moved on since ``draft.sha`` was read. An update
        without metadata keeps the extra fields already in the file.
        """
        now = self.clock()
        editing = draft.sha is not None

        extra = draft.metadata
        if editing:
            slug = draft.slug or create_slug(draft.title)
            resolved, raw = await self.resolver.fetch(owner, slug)
            path, name = resolved.path, resolved.name
            if not extra:
                extra = parse_post(raw, name, resolved.sha, path, now).metadata
            message = f"Update post: {draft.title}"
        else:
            slug = create_slug(draft.title)
            if not slug:
                raise InvalidRequestError(
                    "Title must contain at least one letter or digit"
                )
            folder, entries = await self._write_folder(owner)
            path, name = f"{folder}/{slug}.md", f"{slug}.md"
            if find_entry(entries, {f"{slug}{ext}" for ext in POST_EXTENSIONS}):
                raise FileAlreadyExistsError(path)
            message = f"Create post: {draft.title}"

        date = draft.date or now.date().isoformat()
        markdown = encode(draft.title, date, draft.content, extra=extra)
        result = await self.client.put_file(
            owner,
            self.repo,
            path,
            markdown,
            message,
            sha=draft.sha if editing else None,
        )
        new_sha = result.content.sha if result.content else ""
        logger.info(f"{message} -> {owner}/{self.repo}/{path}")
        return parse_post(markdown, name, new_sha, path, now)

    async def delete_post(self, owner: str, slug: str, sha: str) -> None:
        resolved = await self.resolver.resolve(owner, slug)
        await self.client.delete_file(
            owner, self.repo, resolved.path, sha, f"Delete post: {slug}"
        )
        logger.info(f"Deleted {owner}/{self.repo}/{resolved.path}")

    async def upload_image(
        self, owner: str, content_type: str, data: bytes, name: Optional[str] = None
    ) -> str:
        """Store an image under the images folder and return its repo path."""
        timestamp = int(self.clock().timestamp() * 1000)
        extension = image_extension(content_type)
        stem = create_slug(PurePosixPath(name).stem) if name else ""
        prefix = f"{timestamp}-{stem}" if stem else f"paste-{timestamp}"
        file_name = f"{prefix}.{extension}"
        path = f"{self.images_folder}/{file_name}"
        return await self.client.upload_binary(
            owner, self.repo, path, data, f"Upload image: {file_name}"
        )

    async def initialize_folder(self, owner: str, folder: str) -> str:
        folder = folder.strip("/")
        if folder not in self.resolver.folders:
            raise InvalidRequestError(
                f"Folder must be one of {', '.join(self.resolver.folders)}"
            )
        path = f"{folder}/README.md"
        await self.client.put_file(
            owner,
            self.repo,
            path,
            FOLDER_README,
            f"Initialize {folder} folder for blog posts",
        )
        return path

    async def _write_folder(self, owner: str):
        found = await self.resolver.find_existing_folder(owner)
        if found is None:
            return self.default_folder, []
        return found

    async def _load_post(
        self, owner: str, entry: RepositoryFile, now: datetime.datetime
    ) -> Post:
        raw = await self.client.get_file(owner, self.repo, entry.path)
        return parse_post(raw, entry.name, entry.sha, entry.path, now)


def parse_post(
    raw: str, name: str, sha: str, path: Optional[str], now: datetime.datetime
) -> Post:
    """Project a post file into a Post, filling gaps in its frontmatter."""
    metadata, body = decode(raw)
    slug = strip_post_extension(name)
    return Post(
        title=metadata.get("title") or slug,
        slug=slug,
        date=metadata.get("date") or now.isoformat(),
        content=body,
        excerpt=derive_excerpt(body, metadata.get("excerpt")),
        sha=sha,
        path=path,
        metadata={k: v for k, v in metadata.items() if k not in ("title", "date")},
    )


def is_post_file(entry: RepositoryFile) -> bool:
    return (
        entry.type == "file"
        and entry.name.endswith(POST_EXTENSIONS)
        and entry.name.lower() != "readme.md"
    )


def parse_date(value: str) -> Optional[datetime.datetime]:
    """
    Parse a frontmatter date: ISO 8601 first, then the handful of
    written-out forms people type by hand ("January 5, 2025", "2025/01/05").
    """
    value = value.strip()
    try:
        parsed = datetime.datetime.fromisoformat(value)
    except ValueError:
        parsed = _parse_loose_date(value)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def _parse_loose_date(value: str) -> Optional[datetime.datetime]:
    for fmt in LOOSE_DATE_FORMATS:
        try:
            return datetime.datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def post_sort_key(post: Post, now: datetime.datetime) -> datetime.datetime:
    # Undated or unparsable posts count as brand new
    return parse_date(post.date) or now


def image_extension(content_type: str) -> str:
    _, _, subtype = content_type.partition("/")
    return subtype.split("+", 1)[0].strip().lower() or "png"
