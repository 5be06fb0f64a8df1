from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


LIST_LEVEL_COUNT = 10
HEADERS_COUNT = 6
MAX_FIRST_LEVEL_SPACES = 3
MIN_LEVEL_SPACING = 2

TAG_BOLD = "bold"
TAG_ITALIC = "italic"
TAG_LINK = "link"
LIST_TAG_PREFIX = "list"
HEADER_TAG_PREFIX = "h"


def list_tag(level: int) -> str:
    return f"{LIST_TAG_PREFIX}{level}"


def header_tag(size: int) -> str:
    return f"{HEADER_TAG_PREFIX}{size}"


def tag_level(tags: frozenset[str], prefix: str) -> int:
    """Return the numeric suffix of the first ``prefix<N>`` tag, or 0."""
    for tag in tags:
        if tag.startswith(prefix) and tag[len(prefix):].isdigit():
            return int(tag[len(prefix):])
    return 0


@dataclass
class ListLevel:
    indent: int
    counter: int = 0


@dataclass
class StyleState:
    """Emphasis, link, header and list nesting threaded through one render pass."""

    bold: bool = False
    italic: bool = False
    in_link: bool = False
    in_list_item: bool = False
    header_size: int = 0
    levels: list[ListLevel] = field(default_factory=list)
    max_levels: int = LIST_LEVEL_COUNT
    max_first_level_spaces: int = MAX_FIRST_LEVEL_SPACES
    min_level_spacing: int = MIN_LEVEL_SPACING

    @property
    def list_level(self) -> int:
        return len(self.levels)

    @property
    def emphasized(self) -> bool:
        return self.bold or self.italic

    def open_emphasis(self, run_length: int) -> None:
        # Odd runs toggle italic on, runs of 2 or 3 toggle bold on
        if run_length & 1:
            self.italic = True
        if run_length & 2:
            self.bold = True

    def close_emphasis(self, run_length: int) -> None:
        if run_length & 1:
            self.italic = False
        if run_length & 2:
            self.bold = False

    def start_header(self, size: int) -> None:
        self.header_size = max(0, min(HEADERS_COUNT, size))

    def end_line(self) -> None:
        """End a header or list item; the list stack survives until the list ends."""
        self.header_size = 0
        self.in_list_item = False

    def start_list_item(self, indent: int) -> Optional[int]:
        """Place a list item indented by ``indent`` spaces and return its level.

        Returns None when no list is active and the indentation is too deep for
        a first level item, in which case the item is plain text.
        """
        levels = self.levels
        if not levels:
            if indent > self.max_first_level_spaces:
                return None
            levels.append(ListLevel(indent))
            return 1

        # Walk outermost to innermost for the level whose indent is closest
        index = 0
        while index < len(levels) - 1:
            if indent - levels[index].indent < levels[index + 1].indent - indent:
                break
            index += 1

        if (
            index == len(levels) - 1
            and indent >= levels[index].indent + self.min_level_spacing
            and len(levels) < self.max_levels
        ):
            levels.append(ListLevel(indent))
        else:
            del levels[index + 1:]
            levels[index].indent = indent
        return len(levels)

    def next_number(self) -> int:
        level = self.levels[-1]
        level.counter += 1
        return level.counter

    def end_list(self) -> None:
        self.levels.clear()

    def tags(self) -> frozenset[str]:
        tags: list[str] = []
        if self.bold:
            tags.append(TAG_BOLD)
        if self.italic:
            tags.append(TAG_ITALIC)
        if self.in_link:
            tags.append(TAG_LINK)
        if self.in_list_item and self.levels:
            tags.append(list_tag(len(self.levels)))
        if self.header_size > 0:
            tags.append(header_tag(self.header_size))
        return frozenset(tags)
