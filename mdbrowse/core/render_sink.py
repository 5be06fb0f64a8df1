from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from .patterns import DEFAULT_ICON_SIZE
from .scanner import (
    DEFAULT_BULLET_CHARS,
    DEFAULT_IMAGES_PATH,
    ImageResolver,
    ImageRun,
    LinkRun,
    TextRun,
    Token,
    tokenize,
)


logger = logging.getLogger(__name__)

EXTERNAL_LINK_PREFIXES = ("http", "mailto")


def is_external_link(url: str) -> bool:
    return url.startswith(EXTERNAL_LINK_PREFIXES)


def link_tooltip(url: str) -> str:
    """Tooltip text for a link: web/mail urls as-is, anything else is a topic."""
    return url if is_external_link(url) else f"Topic: {url}"


class RenderSink:
    """Consumer of the styled run stream produced by :class:`MarkdownRenderer`.

    Calls arrive in content order. Tags are the style names active when the
    run ended; list numbering, bullets and indentation levels are already
    baked into the text and tag names.
    """

    def begin_render(self) -> None:
        """Discard everything appended by the previous render."""

    def append_text(self, text: str, tags: frozenset[str]) -> None:
        raise NotImplementedError

    def append_image(self, handle: int, image: object) -> None:
        raise NotImplementedError

    def append_link(self, handle: int, text: str, tags: frozenset[str]) -> None:
        raise NotImplementedError


class RecordingSink(RenderSink):
    """Sink that keeps every call as a tuple, for dumps and tests."""

    def __init__(self) -> None:
        self.events: list[tuple] = []

    def begin_render(self) -> None:
        self.events = []

    def append_text(self, text: str, tags: frozenset[str]) -> None:
        self.events.append(("text", text, tags))

    def append_image(self, handle: int, image: object) -> None:
        self.events.append(("image", handle, image))

    def append_link(self, handle: int, text: str, tags: frozenset[str]) -> None:
        self.events.append(("link", handle, text, tags))

    def text_runs(self) -> list[tuple[str, frozenset[str]]]:
        return [(event[1], event[2]) for event in self.events if event[0] == "text"]

    def plain_text(self) -> str:
        parts = []
        for event in self.events:
            if event[0] == "text":
                parts.append(event[1])
            elif event[0] == "link":
                parts.append(event[2])
        return "".join(parts)


class AltLinkMap:
    """Handle to alt text (images) or url (links) lookup, rebuilt every render."""

    def __init__(self) -> None:
        self._alts: dict[int, str] = {}
        self._links: dict[int, str] = {}

    def register_alt(self, handle: int, alt: str) -> None:
        self._alts[handle] = alt

    def register_link(self, handle: int, url: str) -> None:
        self._links[handle] = url

    def alt_text(self, handle: int) -> Optional[str]:
        return self._alts.get(handle)

    def link_url(self, handle: int) -> Optional[str]:
        return self._links.get(handle)

    def clear(self) -> None:
        self._alts.clear()
        self._links.clear()

    def __len__(self) -> int:
        return len(self._alts) + len(self._links)

    def __contains__(self, handle: object) -> bool:
        return handle in self._alts or handle in self._links


class MarkdownRenderer:
    """Replay the tokenizer output into a sink and keep the alt/link map."""

    def __init__(
        self,
        sink: RenderSink,
        resolver: Optional[ImageResolver] = None,
        *,
        images_path: Union[str, Path] = DEFAULT_IMAGES_PATH,
        bullet_chars: Sequence[str] = DEFAULT_BULLET_CHARS,
        icon_size: int = DEFAULT_ICON_SIZE,
    ) -> None:
        self.sink = sink
        self.resolver = resolver if resolver is not None else ImageResolver()
        self.images_path = Path(images_path)
        self.bullet_chars = tuple(bullet_chars) or DEFAULT_BULLET_CHARS
        self.icon_size = icon_size
        self.alt_links = AltLinkMap()

    def tokens(self, content: str) -> Iterable[Token]:
        return tokenize(
            content,
            resolver=self.resolver,
            images_path=self.images_path,
            bullet_chars=self.bullet_chars,
            icon_size=self.icon_size,
        )

    def render(self, content: Optional[str]) -> int:
        """Render ``content`` (None or empty clears the sink). Returns the token count."""
        self.sink.begin_render()
        self.alt_links.clear()
        if not content:
            return 0
        count = 0
        for token in self.tokens(content):
            self._deliver(token)
            count += 1
        logger.debug("Rendered %d tokens (%d alt/link entries)", count, len(self.alt_links))
        return count

    def _deliver(self, token: Token) -> None:
        sink = self.sink
        if isinstance(token, TextRun):
            sink.append_text(token.text, token.tags)
        elif isinstance(token, ImageRun):
            if token.alt:
                self.alt_links.register_alt(token.handle, token.alt)
            sink.append_image(token.handle, token.image)
        elif isinstance(token, LinkRun):
            sink.append_link(token.handle, token.text, token.tags)
            self.alt_links.register_link(token.handle, token.url)
