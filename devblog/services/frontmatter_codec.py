import logging
import re
from typing import Dict, Mapping, Optional, Tuple

import frontmatter
from frontmatter.default_handlers import BaseHandler

from devblog.exceptions import InvalidRequestError

logger = logging.getLogger(__name__)

QUOTES = ("'", '"')


class KeyValueHandler(BaseHandler):
    """
    Flat ``key: value`` frontmatter between two lines of exactly ``---``.

    Values are kept as strings. The YAML handler would turn dates into
    ``datetime.date`` and reject loose lines, neither of which we want for
    hand-edited posts.
    """

    FM_BOUNDARY = re.compile(r"^---\r?$", re.MULTILINE)
    START_DELIMITER = END_DELIMITER = "---"

    def load(self, fm: str) -> Dict[str, str]:
        metadata: Dict[str, str] = {}
        for line in fm.splitlines():
            key, sep, value = line.partition(":")
            key = key.strip()
            if not sep or not key:
                continue
            metadata[key] = _unquote(value.strip())
        return metadata

    def export(self, metadata: Mapping[str, str], **kwargs) -> str:
        lines = []
        for key, value in metadata.items():
            value = str(value)
            if _multiline(key + value) or ":" in key or key != key.strip():
                raise InvalidRequestError(f"Cannot store frontmatter field {key!r}")
            lines.append(f"{key}: {_quote(value)}")
        return "\n".join(lines)


handler = KeyValueHandler()


def decode(raw: str) -> Tuple[Dict[str, str], str]:
    """
    Split a post file into its frontmatter mapping and Markdown body.

    Files without a leading ``---`` block come back untouched with an
    empty mapping.
    """
    if not handler.detect(raw):
        return {}, raw
    try:
        fm, content = handler.split(raw)
    except ValueError:
        logger.debug("Frontmatter opened but never closed, treating as body")
        return {}, raw
    return handler.load(fm), content.strip()


def encode(
    title: str, date: str, body: str, extra: Optional[Mapping[str, str]] = None
) -> str:
    post = frontmatter.Post(body)
    post.metadata["title"] = title
    post.metadata["date"] = date
    for key, value in (extra or {}).items():
        if key not in ("title", "date"):
            post.metadata[key] = value
    return frontmatter.dumps(post, handler=handler)


def _quote(value: str) -> str:
    # load() strips surrounding whitespace and one pair of quotes
    if value != value.strip() or _unquote(value) != value:
        return f'"{value}"'
    return value


def _multiline(text: str) -> bool:
    # same line breaks load() splits on, unicode separators included
    return text.splitlines() not in ([], [text])


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in QUOTES:
        return value[1:-1]
    return value
