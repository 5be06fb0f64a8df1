from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from PySide6.QtWidgets import QMainWindow, QMessageBox

from mdbrowse.app import config
from mdbrowse.core.topic_files import TopicLoadError
from .markdown_browser import MarkdownBrowser


class MainWindow(QMainWindow):
    def __init__(
        self,
        *,
        home_topic: Optional[str] = None,
        history_max: Optional[int] = None,
        images_path: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Markdown Browser")
        self.resize(1200, 800)
        self.browser = MarkdownBrowser(
            self,
            home_topic=config.load_home_topic() if home_topic is None else home_topic,
            history_max=history_max or config.load_history_max(),
            images_path=images_path or config.load_images_path(),
            bullet_chars=config.load_bullet_chars(),
            splitter_position=config.load_splitter_position(),
        )
        self.browser.splitterMoved.connect(config.save_splitter_position)
        self.setCentralWidget(self.browser)

    def open_docs(self, path: Union[str, Path]) -> bool:
        """Load the documentation directory at ``path``; returns False on failure."""
        try:
            count = self.browser.add_files(path, config.load_file_pattern(), config.load_title_pattern())
        except TopicLoadError as exc:
            QMessageBox.warning(self, "Markdown Browser", f"Could not load topics.\n\nReason: {exc}")
            return False
        config.save_last_docs_path(str(path))
        self.statusBar().showMessage(f"{count} topics loaded from {path}", 5000)
        return True
