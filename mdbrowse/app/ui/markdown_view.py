from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from PySide6.QtCore import QEvent, QPoint, QTimer, QUrl, Signal
from PySide6.QtGui import (
    QColor,
    QFont,
    QIcon,
    QImage,
    QTextBlockFormat,
    QTextCharFormat,
    QTextCursor,
    QTextDocument,
    QTextFormat,
    QTextImageFormat,
    QTextOption,
)
from PySide6.QtWidgets import QTextBrowser, QToolTip

from mdbrowse.core.patterns import DEFAULT_ICON_SIZE
from mdbrowse.core.render_sink import MarkdownRenderer, RenderSink, link_tooltip
from mdbrowse.core.scanner import DEFAULT_BULLET_CHARS, DEFAULT_IMAGES_PATH, ImageResolver
from mdbrowse.core.style_state import (
    HEADER_TAG_PREFIX,
    LIST_TAG_PREFIX,
    TAG_BOLD,
    TAG_ITALIC,
    TAG_LINK,
    tag_level,
)
from .render_logger import RenderLogger


logger = logging.getLogger(__name__)

HEADER_SCALES = (2.0, 1.75, 1.5, 1.3, 1.2, 1.1)
HEADER_SPACING = 8
LIST_INDENT = 16
LIST_SPACING = 4
LINK_COLOR = QColor.fromRgbF(0.45, 0.62, 0.81, 1.0)
VIEW_MARGIN = 4

LINK_SCHEME = "mdlink"
IMAGE_SCHEME = "mdimage"
IMAGE_PROP_HANDLE = int(QTextFormat.UserProperty)


def _handle_from_url(url: QUrl, scheme: str) -> Optional[int]:
    if url.scheme() != scheme:
        return None
    try:
        return int(url.path())
    except ValueError:
        return None


class QtImageResolver(ImageResolver):
    """Resolve theme icons and image files to QImages."""

    def load_icon(self, name: str, size: int) -> Optional[QImage]:
        # Prefer the symbolic variant, like a forced symbolic theme lookup
        candidates = [name] if name.endswith("-symbolic") else [f"{name}-symbolic", name]
        for candidate in candidates:
            icon = QIcon.fromTheme(candidate)
            if icon.isNull():
                continue
            pixmap = icon.pixmap(size, size)
            if not pixmap.isNull():
                return pixmap.toImage()
        return None

    def load_file(self, path: Path) -> Optional[QImage]:
        if not path.is_file():
            return None
        image = QImage(str(path))
        return None if image.isNull() else image


class MarkdownView(QTextBrowser, RenderSink):
    """Read-only text view that renders topic markdown as rich text."""

    linkClicked = Signal(str)

    def __init__(
        self,
        parent=None,
        *,
        images_path: Union[str, Path] = DEFAULT_IMAGES_PATH,
        bullet_chars: Sequence[str] = DEFAULT_BULLET_CHARS,
        icon_size: int = DEFAULT_ICON_SIZE,
        resolver: Optional[ImageResolver] = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("markdownView")
        self.setReadOnly(True)
        self.setOpenLinks(False)
        self.setOpenExternalLinks(False)
        self.setWordWrapMode(QTextOption.WrapMode.WrapAtWordBoundaryOrAnywhere)
        self.setViewportMargins(VIEW_MARGIN, VIEW_MARGIN, VIEW_MARGIN, VIEW_MARGIN)
        self.document().setDocumentMargin(VIEW_MARGIN)
        self.setMouseTracking(True)
        self.anchorClicked.connect(self._on_anchor_clicked)

        self.renderer = MarkdownRenderer(
            self,
            resolver if resolver is not None else QtImageResolver(),
            images_path=images_path,
            bullet_chars=bullet_chars,
            icon_size=icon_size,
        )
        self._formats: dict[frozenset[str], QTextCharFormat] = {}
        self._cursor: Optional[QTextCursor] = None

    # --- Public API -----------------------------------------------------
    def set_images_path(self, path: Union[str, Path]) -> None:
        self.renderer.images_path = Path(path)

    def render_markdown(self, content: Optional[str], tracer: Optional[RenderLogger] = None) -> None:
        """Replace the view contents with ``content`` rendered as markdown."""
        tracer = tracer or RenderLogger(f"{len(content or '')} chars")
        count = self.renderer.render(content)
        tracer.mark(f"insert({count})")
        if tracer.enabled:
            # Runs the layout pass that would otherwise happen on first paint
            self.document().documentLayout().documentSize()
            tracer.mark("layout")
        tracer.end()

    def scroll_offset(self) -> float:
        return float(self.verticalScrollBar().value())

    def set_scroll_offset(self, offset: float) -> None:
        value = int(round(offset))
        self.verticalScrollBar().setValue(value)
        # Layout may still be growing the scroll range; apply again once idle
        QTimer.singleShot(0, lambda v=value: self.verticalScrollBar().setValue(v))

    def tooltip_at(self, pos: QPoint) -> Optional[str]:
        """Tooltip for viewport position ``pos``: link target or image alt text."""
        href = self.anchorAt(pos)
        if href:
            handle = _handle_from_url(QUrl(href), LINK_SCHEME)
            url = self.renderer.alt_links.link_url(handle) if handle is not None else None
            return link_tooltip(url) if url else None
        image_format = self._image_format_at(pos)
        if image_format is None:
            return None
        handle = image_format.property(IMAGE_PROP_HANDLE)
        if handle is None:
            return None
        return self.renderer.alt_links.alt_text(int(handle))

    def link_url(self, handle: int) -> Optional[str]:
        return self.renderer.alt_links.link_url(handle)

    # --- RenderSink -----------------------------------------------------
    def begin_render(self) -> None:
        self.clear()
        self._cursor = QTextCursor(self.document())
        self._cursor.setBlockFormat(QTextBlockFormat())

    def append_text(self, text: str, tags: frozenset[str]) -> None:
        cursor = self._end_cursor()
        fmt = self._char_format(tags)
        lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        for index, line in enumerate(lines):
            if index:
                # New paragraphs start unstyled; tagged runs restyle their own block
                cursor.insertBlock(QTextBlockFormat(), QTextCharFormat())
            if line:
                self._apply_block_format(cursor, tags)
                cursor.insertText(line, fmt)

    def append_image(self, handle: int, image: object) -> None:
        if not isinstance(image, QImage):
            image = QImage(str(image))
        if image.isNull():
            return
        cursor = self._end_cursor()
        name = f"{IMAGE_SCHEME}:{handle}"
        self.document().addResource(QTextDocument.ResourceType.ImageResource, QUrl(name), image)
        fmt = QTextImageFormat()
        fmt.setName(name)
        fmt.setWidth(image.width())
        fmt.setHeight(image.height())
        fmt.setProperty(IMAGE_PROP_HANDLE, handle)
        cursor.insertImage(fmt)

    def append_link(self, handle: int, text: str, tags: frozenset[str]) -> None:
        cursor = self._end_cursor()
        fmt = QTextCharFormat(self._char_format(tags))
        fmt.setAnchor(True)
        fmt.setAnchorHref(f"{LINK_SCHEME}:{handle}")
        self._apply_block_format(cursor, tags)
        cursor.insertText(text, fmt)

    # --- Internal helpers -----------------------------------------------
    def _end_cursor(self) -> QTextCursor:
        if self._cursor is None:
            self._cursor = QTextCursor(self.document())
        self._cursor.movePosition(QTextCursor.MoveOperation.End)
        return self._cursor

    def _char_format(self, tags: frozenset[str]) -> QTextCharFormat:
        cached = self._formats.get(tags)
        if cached is not None:
            return cached
        fmt = QTextCharFormat()
        header = tag_level(tags, HEADER_TAG_PREFIX)
        if TAG_BOLD in tags or header:
            fmt.setFontWeight(QFont.Weight.Bold)
        if TAG_ITALIC in tags:
            fmt.setFontItalic(True)
        if TAG_LINK in tags:
            fmt.setForeground(LINK_COLOR)
            fmt.setFontUnderline(True)
        if header:
            base = self.font().pointSizeF()
            if base <= 0:
                base = 10.0
            fmt.setFontPointSize(base * HEADER_SCALES[header - 1])
        self._formats[tags] = fmt
        return fmt

    def _apply_block_format(self, cursor: QTextCursor, tags: frozenset[str]) -> None:
        level = tag_level(tags, LIST_TAG_PREFIX)
        header = tag_level(tags, HEADER_TAG_PREFIX)
        if not level and not header:
            return
        block = cursor.blockFormat()
        if level:
            block.setLeftMargin(level * LIST_INDENT)
            block.setTextIndent(-LIST_INDENT)
            block.setTopMargin(LIST_SPACING)
            block.setBottomMargin(LIST_SPACING)
        if header:
            block.setTopMargin(HEADER_SPACING)
            block.setBottomMargin(HEADER_SPACING)
        cursor.setBlockFormat(block)

    def _image_format_at(self, pos: QPoint) -> Optional[QTextImageFormat]:
        cursor = self.cursorForPosition(pos)
        for probe_pos in (cursor.position() + 1, cursor.position()):
            if probe_pos <= 0:
                continue
            probe = QTextCursor(self.document())
            probe.setPosition(min(probe_pos, self.document().characterCount() - 1))
            fmt = probe.charFormat()
            if fmt.isImageFormat():
                return fmt.toImageFormat()
        return None

    def _on_anchor_clicked(self, url: QUrl) -> None:
        handle = _handle_from_url(url, LINK_SCHEME)
        link = self.renderer.alt_links.link_url(handle) if handle is not None else None
        if link:
            self.linkClicked.emit(link)

    def viewportEvent(self, event):  # type: ignore[override]
        if event.type() == QEvent.Type.ToolTip:
            text = self.tooltip_at(event.pos())
            if text:
                QToolTip.showText(event.globalPos(), text, self.viewport())
            else:
                QToolTip.hideText()
                event.ignore()
            return True
        return super().viewportEvent(event)
