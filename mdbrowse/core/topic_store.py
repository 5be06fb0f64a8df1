from __future__ import annotations

import bisect
import logging
from pathlib import Path
from typing import Optional, Union

from PySide6.QtCore import QObject, Signal

from .history import DEFAULT_HISTORY_MAX, NavigationHistory, Visit
from .render_sink import is_external_link
from .topic_files import DEFAULT_FILE_MATCH, DEFAULT_TITLE_MATCH, Topic, iter_topic_files


logger = logging.getLogger(__name__)

TOPIC_NONE = -1
DEFAULT_HOME_TOPIC = "README"


class DisplaySurface:
    """What the store needs from the widget that shows topics.

    The defaults do nothing so the store can run headless.
    """

    def show_content(self, content: Optional[str]) -> None:
        """Show ``content``; None clears the view."""

    def scroll_offset(self) -> float:
        return 0.0

    def set_scroll_offset(self, offset: float) -> None:
        """Restore a scroll position saved in a visit."""

    def select_topic(self, index: int) -> None:
        """Highlight ``index`` in the topic list without reporting it back."""


class TopicStore(QObject):
    """Title-sorted topics plus the back/forward navigation state machine."""

    topicInserted = Signal(int, str)  # Index and title of the new topic
    topicsCleared = Signal()
    topicsChanged = Signal()
    navigationStateChanged = Signal(bool, bool, bool)  # can back, can forward, home visible
    linkActivated = Signal(str)
    externalLinkRequested = Signal(str)

    def __init__(
        self,
        surface: Optional[DisplaySurface] = None,
        *,
        home_topic: str = DEFAULT_HOME_TOPIC,
        history_max: int = DEFAULT_HISTORY_MAX,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.surface = surface if surface is not None else DisplaySurface()
        self._topics: list[Topic] = []
        self._history = NavigationHistory(history_max)
        self._home_topic = home_topic or ""
        self._current_index = TOPIC_NONE
        self._suspend_selection = False

    # --- Public API -----------------------------------------------------
    @property
    def topics(self) -> tuple[Topic, ...]:
        return tuple(self._topics)

    @property
    def history(self) -> NavigationHistory:
        return self._history

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_topic(self) -> Optional[Topic]:
        if self._current_index == TOPIC_NONE:
            return None
        return self._topics[self._current_index]

    @property
    def home_topic(self) -> str:
        return self._home_topic

    @home_topic.setter
    def home_topic(self, name: Optional[str]) -> None:
        self._home_topic = name or ""
        self._emit_navigation_state()

    @property
    def can_go_back(self) -> bool:
        return self._history.can_go_back

    @property
    def can_go_forward(self) -> bool:
        return self._history.can_go_forward

    @property
    def home_visible(self) -> bool:
        return bool(self._home_topic)

    def get_topic_by_name(self, name: str) -> int:
        """Index of the first topic (in title order) called ``name``, else TOPIC_NONE."""
        for index, topic in enumerate(self._topics):
            if topic.name == name:
                return index
        return TOPIC_NONE

    def add_topic(self, name: str, title: str, content: str) -> int:
        """Insert a topic keeping the collection sorted by title; returns its index."""
        topic = Topic(name, title or "", content or "")
        index = bisect.bisect_left(self._topics, topic.title, key=lambda t: t.title)
        self._topics.insert(index, topic)
        if self._current_index != TOPIC_NONE and index <= self._current_index:
            self._current_index += 1
        self._history.shift_topics(index)
        logger.debug("Inserted topic %r at %d", name, index)
        self.topicInserted.emit(index, topic.title)
        self.topicsChanged.emit()

        if self._current_index == TOPIC_NONE and self._home_topic and name == self._home_topic:
            self.navigate_to_topic_by_name(self._home_topic)
        return index

    def add_files(
        self,
        path: Union[str, Path],
        file_pattern: str = DEFAULT_FILE_MATCH,
        title_pattern: str = DEFAULT_TITLE_MATCH,
    ) -> int:
        """Load every matching file in ``path`` as a topic; returns how many were added.

        History and the current topic are reset first, so the home topic (if
        present) becomes the page on screen.
        """
        topics = list(iter_topic_files(path, file_pattern, title_pattern))
        self._reset_navigation()
        for topic in topics:
            self.add_topic(topic.name, topic.title, topic.content)
        logger.debug("Loaded %d topics from %s", len(topics), path)
        return len(topics)

    def clear_topics(self) -> None:
        self._topics.clear()
        self._reset_navigation()
        self.topicsCleared.emit()
        self.topicsChanged.emit()

    def reload_files(
        self,
        path: Union[str, Path],
        file_pattern: str = DEFAULT_FILE_MATCH,
        title_pattern: str = DEFAULT_TITLE_MATCH,
    ) -> int:
        # Read first so a bad path leaves the current topics in place
        topics = list(iter_topic_files(path, file_pattern, title_pattern))
        self.clear_topics()
        for topic in topics:
            self.add_topic(topic.name, topic.title, topic.content)
        return len(topics)

    def navigate(self, history_ofs: int, topic_index: int = TOPIC_NONE) -> bool:
        """Move through history (``history_ofs`` != 0) or jump to ``topic_index``.

        Returns False, with nothing changed, when the history offset or topic
        index is out of range.
        """
        history = self._history
        if history_ofs != 0:
            new_pos = history.target(history_ofs)
            if new_pos is None:
                logger.debug("History offset %d out of range (position %d)", history_ofs, history.position)
                return False
        else:
            new_pos = None
            if topic_index != TOPIC_NONE and not 0 <= topic_index < len(self._topics):
                logger.debug("Topic index %d out of range", topic_index)
                return False

        if self._current_index != TOPIC_NONE:
            visit = Visit(self._current_index, max(0.0, float(self.surface.scroll_offset())))
            rebased = history.record(visit, branch=history_ofs == 0, target=new_pos)
            if history_ofs != 0:
                if rebased is None:
                    logger.debug("History target %s would be trimmed; staying put", new_pos)
                    return False
                new_pos = rebased

        restore: Optional[Visit] = None
        if history_ofs != 0:
            restore = history.go_to(new_pos)
            topic_index = restore.topic_index
        else:
            history.go_to_head()

        self._current_index = topic_index
        topic = self.current_topic
        self.surface.show_content(topic.content if topic is not None else None)
        if restore is not None:
            self.surface.set_scroll_offset(restore.scroll_offset)
        if topic is not None:
            self._select_in_list(topic_index)
        logger.debug(
            "Navigated to %r (position %d of %d)",
            topic.name if topic else None,
            history.position,
            len(history),
        )
        self._emit_navigation_state()
        return True

    def navigate_to_topic_by_name(self, name: Optional[str]) -> bool:
        """Show the named topic; an empty name clears the view."""
        if not name:
            return self.navigate(0, TOPIC_NONE)
        index = self.get_topic_by_name(name)
        if index == TOPIC_NONE:
            logger.debug("No topic named %r", name)
            return False
        return self.navigate(0, index)

    def go_back(self) -> bool:
        return self.navigate(-1)

    def go_forward(self) -> bool:
        return self.navigate(1)

    def go_home(self) -> bool:
        if not self._home_topic:
            return False
        return self.navigate_to_topic_by_name(self._home_topic)

    def on_topic_selected(self, index: int) -> bool:
        """Handle a user selection in the topic list."""
        if self._suspend_selection or index < 0 or index == self._current_index:
            return False
        return self.navigate(0, index)

    def activate_link(self, url: str) -> bool:
        """Follow a clicked link: web/mail links go outside, others name a topic."""
        if not url:
            return False
        self.linkActivated.emit(url)
        if is_external_link(url):
            self.externalLinkRequested.emit(url)
            return True
        index = self.get_topic_by_name(url)
        if index == TOPIC_NONE:
            logger.debug("Link to unknown topic %r ignored", url)
            return False
        return self.navigate(0, index)

    # --- Internal helpers -----------------------------------------------
    def _select_in_list(self, index: int) -> None:
        self._suspend_selection = True
        try:
            self.surface.select_topic(index)
        finally:
            self._suspend_selection = False

    def _reset_navigation(self) -> None:
        self._history.clear()
        self._current_index = TOPIC_NONE
        self.surface.show_content(None)
        self._emit_navigation_state()

    def _emit_navigation_state(self) -> None:
        self.navigationStateChanged.emit(self.can_go_back, self.can_go_forward, self.home_visible)
