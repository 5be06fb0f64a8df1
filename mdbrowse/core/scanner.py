"""Single pass merge-scan tokenizer turning markdown text into styled runs.

Every matcher in :mod:`mdbrowse.core.patterns` keeps one pending candidate
match. Each step consumes the candidate with the lowest offset, emits the text
between the previous step and that match, and re-searches only the matcher
that was consumed (plus any candidate the consumed span swallowed). The end of
emphasis and end of line matchers are only searched while the state they
close is active.
"""
from __future__ import annotations

import itertools
import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Iterator, Optional, Sequence, Union

from .patterns import (
    DEFAULT_ICON_SIZE,
    END_MATCHERS,
    LIST_ITEM_MATCHERS,
    START_MATCHERS,
    Matcher,
    find_match,
    parse_icon_url,
    unescape_markdown,
)
from .style_state import StyleState


logger = logging.getLogger(__name__)

DEFAULT_BULLET_CHARS = ("●", "○", "■", "▢")
DEFAULT_IMAGES_PATH = "."

_NO_TAGS: frozenset[str] = frozenset()


@dataclass(frozen=True)
class TextRun:
    text: str
    tags: frozenset[str] = _NO_TAGS


@dataclass(frozen=True)
class ImageRun:
    handle: int
    image: object
    alt: str = ""


@dataclass(frozen=True)
class LinkRun:
    handle: int
    text: str
    url: str
    tags: frozenset[str] = _NO_TAGS


Token = Union[TextRun, ImageRun, LinkRun]


class ImageResolver:
    """Turn image references into displayable handles; None means "no image".

    The base resolver knows nothing about icon themes and resolves files to
    their path when they exist. GUI shells override both hooks.
    """

    def load_icon(self, name: str, size: int) -> Optional[object]:
        return None

    def load_file(self, path: Path) -> Optional[object]:
        return path if path.is_file() else None


class ScanCursor:
    """Incremental multi-matcher scan over one document."""

    def __init__(
        self,
        content: str,
        state: Optional[StyleState] = None,
        *,
        resolver: Optional[ImageResolver] = None,
        images_path: Union[str, Path] = DEFAULT_IMAGES_PATH,
        bullet_chars: Sequence[str] = DEFAULT_BULLET_CHARS,
        icon_size: int = DEFAULT_ICON_SIZE,
    ) -> None:
        self.content = content or ""
        self.state = state if state is not None else StyleState()
        self.resolver = resolver if resolver is not None else ImageResolver()
        self.images_path = Path(images_path)
        self.bullet_chars = tuple(bullet_chars) or DEFAULT_BULLET_CHARS
        self.icon_size = icon_size
        self.position = 0
        self._candidates: dict[Matcher, Optional[re.Match[str]]] = {}
        self._handles = itertools.count(1)

    def __iter__(self) -> Iterator[Token]:
        return self.tokens()

    def tokens(self) -> Iterator[Token]:
        content = self.content
        self.position = 0
        self._handles = itertools.count(1)
        self._candidates = {matcher: None for matcher in Matcher}
        if not content:
            return
        for matcher in START_MATCHERS:
            self._candidates[matcher] = find_match(matcher, content, 0)

        while True:
            matcher, match = self._next_candidate()
            next_pos = match.start() if match is not None else len(content)
            if self.position < next_pos:
                yield self._text_run(content[self.position:next_pos])
            if match is None:
                break

            state = self.state
            if state.list_level and not state.in_list_item and matcher not in LIST_ITEM_MATCHERS:
                state.end_list()

            yield from self._apply(matcher, match)

            self.position = match.end()
            if matcher in END_MATCHERS:
                self._candidates[matcher] = None
            else:
                self._candidates[matcher] = find_match(matcher, content, self.position)
            self._refresh_candidates()

    # --- Internal helpers -----------------------------------------------
    def _next_candidate(self) -> tuple[Optional[Matcher], Optional[re.Match[str]]]:
        best: Optional[Matcher] = None
        best_match: Optional[re.Match[str]] = None
        for matcher in Matcher:
            match = self._candidates.get(matcher)
            if match is None:
                continue
            # Strictly lower wins, so ties go to the earlier declared matcher
            if best_match is None or match.start() < best_match.start():
                best, best_match = matcher, match
        return best, best_match

    def _refresh_candidates(self) -> None:
        content = self.content
        pos = self.position
        state = self.state
        active = {
            Matcher.EMPHASIS_END: state.emphasized,
            Matcher.HEADER_OR_LIST_ITEM_END: state.header_size > 0 or state.in_list_item,
        }
        for matcher in Matcher:
            match = self._candidates[matcher]
            if match is not None and match.start() < pos:
                # Swallowed by the span just consumed
                if active.get(matcher, True):
                    self._candidates[matcher] = find_match(matcher, content, pos)
                else:
                    self._candidates[matcher] = None
        for matcher, is_active in active.items():
            if is_active and self._candidates[matcher] is None:
                self._candidates[matcher] = find_match(matcher, content, pos)

    def _text_run(self, text: str) -> TextRun:
        return TextRun(unescape_markdown(text), self.state.tags())

    def _apply(self, matcher: Matcher, match: re.Match[str]) -> Iterator[Token]:
        state = self.state
        if matcher is Matcher.EMPHASIS_START:
            state.open_emphasis(len(match.group(1)))
        elif matcher is Matcher.EMPHASIS_END:
            state.close_emphasis(len(match.group(1)))
        elif matcher is Matcher.HEADER_START:
            state.start_header(len(match.group(1)))
        elif matcher in LIST_ITEM_MATCHERS:
            level = state.start_list_item(len(match.group(1)))
            if level is None:
                yield self._text_run(match.group(0))
                return
            if matcher is Matcher.BULLET_ITEM_START:
                bullet = self.bullet_chars[(level - 1) % len(self.bullet_chars)]
                yield TextRun(f"{bullet} ")
            else:
                yield TextRun(f"{state.next_number()}. ")
            state.in_list_item = True
        elif matcher is Matcher.IMAGE:
            image = self._resolve_image(match.group(2))
            if image is None:
                logger.debug("Skipping unresolved image %r", match.group(2))
                return
            yield ImageRun(next(self._handles), image, match.group(1))
        elif matcher is Matcher.LINK:
            state.in_link = True
            tags = state.tags()
            state.in_link = False
            yield LinkRun(next(self._handles), unescape_markdown(match.group(1)), match.group(2), tags)
        elif matcher is Matcher.HEADER_OR_LIST_ITEM_END:
            state.end_line()

    def _resolve_image(self, url: str) -> Optional[object]:
        icon = parse_icon_url(url, self.icon_size)
        if icon is not None:
            name, size = icon
            return self.resolver.load_icon(name, size) if name else None
        file_name = PurePath(url.strip()).name
        if not file_name:
            return None
        return self.resolver.load_file(self.images_path / file_name)


def tokenize(content: str, **options) -> Iterator[Token]:
    """Tokenize ``content`` with a fresh cursor and style state.

    Keyword options are passed to :class:`ScanCursor` (resolver, images_path,
    bullet_chars, icon_size).
    """
    return ScanCursor(content, StyleState(), **options).tokens()
