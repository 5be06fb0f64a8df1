from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from PySide6.QtCore import QSignalBlocker, Qt, QUrl, Signal
from PySide6.QtGui import QDesktopServices, QIcon, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLineEdit,
    QListWidget,
    QSplitter,
    QStyle,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from mdbrowse.app.config import DEFAULT_SPLITTER_POSITION
from mdbrowse.core.history import DEFAULT_HISTORY_MAX
from mdbrowse.core.scanner import DEFAULT_BULLET_CHARS
from mdbrowse.core.topic_files import DEFAULT_FILE_MATCH, DEFAULT_TITLE_MATCH
from mdbrowse.core.topic_store import DEFAULT_HOME_TOPIC, DisplaySurface, TopicStore
from .markdown_view import MarkdownView


logger = logging.getLogger(__name__)

NAV_MARGIN = 4


class MarkdownBrowser(QWidget, DisplaySurface):
    """Topic list, navigation bar and markdown view bound to a TopicStore."""

    splitterMoved = Signal(int)

    def __init__(
        self,
        parent=None,
        *,
        home_topic: str = DEFAULT_HOME_TOPIC,
        history_max: int = DEFAULT_HISTORY_MAX,
        images_path: Optional[Union[str, Path]] = None,
        bullet_chars: Sequence[str] = DEFAULT_BULLET_CHARS,
        splitter_position: int = DEFAULT_SPLITTER_POSITION,
    ) -> None:
        super().__init__(parent)
        self._images_path = Path(images_path) if images_path else None
        self._docs_path: Optional[Path] = None
        self._file_pattern = DEFAULT_FILE_MATCH
        self._title_pattern = DEFAULT_TITLE_MATCH

        self.view = MarkdownView(images_path=self._images_path or ".", bullet_chars=bullet_chars)
        self.store = TopicStore(self, home_topic=home_topic, history_max=history_max, parent=self)
        self._build_ui(splitter_position)
        self._connect_store()
        self._update_nav_buttons(False, False, self.store.home_visible)

    def _build_ui(self, splitter_position: int) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        side = QWidget()
        side_layout = QVBoxLayout(side)
        side_layout.setContentsMargins(NAV_MARGIN, NAV_MARGIN, NAV_MARGIN, NAV_MARGIN)
        side_layout.setSpacing(NAV_MARGIN)
        side_layout.addLayout(self._build_nav_bar())

        self.topic_list = QListWidget()
        self.topic_list.setObjectName("topicList")
        self.topic_list.setUniformItemSizes(True)
        self.topic_list.currentRowChanged.connect(self._on_topic_row_changed)
        side_layout.addWidget(self.topic_list, 1)

        self.splitter = QSplitter(Qt.Orientation.Horizontal)
        self.splitter.addWidget(side)
        self.splitter.addWidget(self.view)
        self.splitter.setStretchFactor(0, 0)
        self.splitter.setStretchFactor(1, 1)
        self.splitter.setSizes([splitter_position, max(splitter_position, 1) * 3])
        self.splitter.splitterMoved.connect(lambda pos, _index: self.splitterMoved.emit(pos))
        layout.addWidget(self.splitter, 1)

        QShortcut(QKeySequence("Alt+Left"), self, activated=self.store.go_back)
        QShortcut(QKeySequence("Alt+Right"), self, activated=self.store.go_forward)
        QShortcut(QKeySequence("Alt+Home"), self, activated=self.store.go_home)
        QShortcut(QKeySequence("F5"), self, activated=self.reload)

    def _build_nav_bar(self) -> QHBoxLayout:
        nav = QHBoxLayout()
        nav.setSpacing(NAV_MARGIN)

        self.back_button = self._nav_button(
            "go-previous", QStyle.StandardPixmap.SP_ArrowBack, "Go to previous topic visited"
        )
        self.back_button.clicked.connect(self.store.go_back)
        nav.addWidget(self.back_button)

        self.forward_button = self._nav_button(
            "go-next", QStyle.StandardPixmap.SP_ArrowForward, "Go to next topic visited"
        )
        self.forward_button.clicked.connect(self.store.go_forward)
        nav.addWidget(self.forward_button)

        self.home_button = self._nav_button(
            "go-home", QStyle.StandardPixmap.SP_DirHomeIcon, "Go to documentation home"
        )
        self.home_button.clicked.connect(self.store.go_home)
        nav.addWidget(self.home_button)

        self.search = QLineEdit()
        self.search.setPlaceholderText("Search help topics")
        self.search.setToolTip("Search help topics")
        self.search.setClearButtonEnabled(True)
        self.search.textChanged.connect(self._filter_topics)
        nav.addWidget(self.search, 1)
        return nav

    def _nav_button(self, icon_name: str, fallback: QStyle.StandardPixmap, tooltip: str) -> QToolButton:
        button = QToolButton()
        icon = QIcon.fromTheme(icon_name)
        if icon.isNull():
            icon = self.style().standardIcon(fallback)
        button.setIcon(icon)
        button.setToolTip(tooltip)
        button.setAutoRaise(True)
        return button

    def _connect_store(self) -> None:
        store = self.store
        store.topicInserted.connect(self._on_topic_inserted)
        store.topicsCleared.connect(self.topic_list.clear)
        store.navigationStateChanged.connect(self._update_nav_buttons)
        store.externalLinkRequested.connect(self._open_external_link)
        self.view.linkClicked.connect(store.activate_link)

    # --- Public API -----------------------------------------------------
    @property
    def docs_path(self) -> Optional[Path]:
        return self._docs_path

    def add_files(
        self,
        path: Union[str, Path],
        file_pattern: str = DEFAULT_FILE_MATCH,
        title_pattern: str = DEFAULT_TITLE_MATCH,
    ) -> int:
        """Load topics from ``path``; images resolve there unless a path was configured."""
        self._docs_path = Path(path).expanduser()
        self._file_pattern = file_pattern
        self._title_pattern = title_pattern
        self.view.set_images_path(self._images_path or self._docs_path)
        return self.store.add_files(self._docs_path, file_pattern, title_pattern)

    def reload(self) -> int:
        if self._docs_path is None:
            return 0
        current = self.store.current_topic
        count = self.store.reload_files(self._docs_path, self._file_pattern, self._title_pattern)
        shown = self.store.current_topic
        if current is not None and (shown is None or shown.name != current.name):
            self.store.navigate_to_topic_by_name(current.name)
        self._filter_topics(self.search.text())
        return count

    # --- DisplaySurface -------------------------------------------------
    def show_content(self, content: Optional[str]) -> None:
        self.view.render_markdown(content)

    def scroll_offset(self) -> float:
        return self.view.scroll_offset()

    def set_scroll_offset(self, offset: float) -> None:
        self.view.set_scroll_offset(offset)

    def select_topic(self, index: int) -> None:
        # Programmatic selection must not loop back into navigation
        blocker = QSignalBlocker(self.topic_list)
        try:
            self.topic_list.setCurrentRow(index)
            item = self.topic_list.item(index)
            if item is not None:
                self.topic_list.scrollToItem(item)
        finally:
            blocker.unblock()

    # --- Internal helpers -----------------------------------------------
    def _on_topic_inserted(self, index: int, title: str) -> None:
        blocker = QSignalBlocker(self.topic_list)
        try:
            self.topic_list.insertItem(index, title)
        finally:
            blocker.unblock()
        query = self.search.text().strip().lower()
        if query:
            self.topic_list.item(index).setHidden(query not in title.lower())

    def _on_topic_row_changed(self, row: int) -> None:
        if row >= 0:
            self.store.on_topic_selected(row)

    def _update_nav_buttons(self, can_back: bool, can_forward: bool, home_visible: bool) -> None:
        self.back_button.setEnabled(can_back)
        self.forward_button.setEnabled(can_forward)
        self.home_button.setVisible(home_visible)

    def _filter_topics(self, text: str) -> None:
        query = (text or "").strip().lower()
        for row in range(self.topic_list.count()):
            item = self.topic_list.item(row)
            item.setHidden(bool(query) and query not in item.text().lower())

    def _open_external_link(self, url: str) -> None:
        if not QDesktopServices.openUrl(QUrl(url)):
            logger.warning("Could not open external link %s", url)
