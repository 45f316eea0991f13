"""Rich-content inspection.

Bodies are opaque HTML produced by the editor. The store only needs two
facts about them: the plain text (for emptiness checks and search) and
whether media is embedded.
"""

import html
import re
from typing import Protocol


class RichContentInspector(Protocol):
    """Collaborator that understands the stored body format."""

    def plain_text(self, body: str) -> str: ...

    def has_media(self, body: str) -> bool: ...


TAG_PATTERN = re.compile(r"<[^>]+>")
MEDIA_PATTERN = re.compile(r"<\s*(img|video|iframe|source)\b", re.IGNORECASE)
BLOCK_BREAK_PATTERN = re.compile(r"<\s*(br|/p|/div|/li|/h[1-6])\b[^>]*>", re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r"\s+")


class HtmlContentInspector:
    """Inspector for editor HTML bodies."""

    def plain_text(self, body: str) -> str:
        """Strip tags, decode entities and collapse whitespace."""
        if not body:
            return ""
        text = BLOCK_BREAK_PATTERN.sub(" ", body)
        text = TAG_PATTERN.sub("", text)
        text = html.unescape(text).replace("\xa0", " ")
        return WHITESPACE_PATTERN.sub(" ", text).strip()

    def has_media(self, body: str) -> bool:
        return bool(body) and MEDIA_PATTERN.search(body) is not None
