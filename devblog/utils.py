import re
from typing import Optional

EXCERPT_LENGTH = 150

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def create_slug(title: str) -> str:
    """Turn a post title into a lowercase, hyphen-separated file name stem."""
    slug = _DISALLOWED.sub("", title.lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def derive_excerpt(body: str, explicit: Optional[str] = None) -> str:
    if explicit:
        return explicit
    return body[:EXCERPT_LENGTH].strip() + "..."


def strip_post_extension(name: str) -> str:
    return re.sub(r"\.mdx?$", "", name)
