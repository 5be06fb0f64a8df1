"""Lexical matchers for the lightweight markdown dialect shown in the browser."""
from __future__ import annotations

import re
from enum import IntEnum
from typing import Optional


DEFAULT_ICON_SIZE = 24
ICON_PREFIX = "icon:"


class Matcher(IntEnum):
    """Matcher ids; declaration order doubles as the tie-break order."""

    EMPHASIS_START = 0
    HEADER_START = 1
    BULLET_ITEM_START = 2
    NUMERIC_ITEM_START = 3
    IMAGE = 4
    LINK = 5
    EMPHASIS_END = 6
    HEADER_OR_LIST_ITEM_END = 7


# Searched only while the matching emphasis/header/list state is active
END_MATCHERS = (Matcher.EMPHASIS_END, Matcher.HEADER_OR_LIST_ITEM_END)
START_MATCHERS = tuple(m for m in Matcher if m not in END_MATCHERS)
LIST_ITEM_MATCHERS = (Matcher.BULLET_ITEM_START, Matcher.NUMERIC_ITEM_START)

# MULTILINE ^ only follows \n; a bare \r ends a line too
LINE_START = r"(?:^|(?<=\r))"

PATTERNS: dict[Matcher, re.Pattern[str]] = {
    Matcher.EMPHASIS_START: re.compile(r"(?<!\\)(\*{1,3})(?=[^*\s])"),
    Matcher.HEADER_START: re.compile(LINE_START + r" {0,3}(#{1,6}) ", re.MULTILINE),
    Matcher.BULLET_ITEM_START: re.compile(LINE_START + r"( *)\* ", re.MULTILINE),
    Matcher.NUMERIC_ITEM_START: re.compile(LINE_START + r"( *)\d+\. ", re.MULTILINE),
    Matcher.IMAGE: re.compile(r"(?<!\\)!\[([^\]]+)\]\(([^)]+)\)"),
    Matcher.LINK: re.compile(r"(?<![!\\])\[([^\]]+)\]\(([^)]+)\)"),
    Matcher.EMPHASIS_END: re.compile(r"(?<![\\ ])(\*{1,3})"),
    Matcher.HEADER_OR_LIST_ITEM_END: re.compile(r"(?=\r\n|[\r\n])"),
}

UNESCAPE_PATTERN = re.compile(r"\\([\[\]\\`*_{}<>()#+\-.!|])")


def find_match(matcher: Matcher, content: str, pos: int) -> Optional[re.Match[str]]:
    """Return the first match of ``matcher`` at or after absolute offset ``pos``.

    Searching the full string (rather than a slice) keeps ``^`` anchored to
    real line starts and lets look-behinds see the preceding character.
    """
    return PATTERNS[matcher].search(content, pos)


def unescape_markdown(text: str) -> str:
    """Drop the backslash from escaped markdown punctuation."""
    if "\\" not in text:
        return text
    return UNESCAPE_PATTERN.sub(r"\1", text)


def parse_icon_url(url: str, default_size: int = DEFAULT_ICON_SIZE) -> Optional[tuple[str, int]]:
    """Split ``icon:name`` / ``icon:size:name`` into ``(name, size)``.

    Returns None for anything that is not an icon url. A size that does not
    parse as a positive integer falls back to ``default_size``.
    """
    if not url.startswith(ICON_PREFIX):
        return None
    parts = url[len(ICON_PREFIX):].split(":")
    size = default_size
    if len(parts) > 1:
        try:
            size = int(parts[0])
        except ValueError:
            size = default_size
        if size <= 0:
            size = default_size
    return parts[-1], size
