"""Parse npm-style author strings: ``Name <email> (url)``."""

from __future__ import annotations

import re
from typing import Any, Mapping

from .types import Author

_AUTHOR_RE = re.compile(r"^([^<(]+?)?[ \t]*(?:<([^>(]+?)>)?[ \t]*(?:\(([^)]+?)\)|$)")


def parse_author(value: str) -> Author:
    text = str(value or "").strip()
    match = _AUTHOR_RE.match(text)
    if not match:
        return Author(name=text)
    name, email, url = (group.strip() if group else None for group in match.groups())
    return Author(name=name or "", email=email, url=url)


def author_display_name(author: str | Mapping[str, Any] | None) -> str | None:
    if author is None:
        return None
    if isinstance(author, str):
        if not author.strip():
            return None
        return parse_author(author).name or None
    name = author.get("name")
    return str(name) if name else None
