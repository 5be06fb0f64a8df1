from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Union


logger = logging.getLogger(__name__)

DEFAULT_FILE_MATCH = r"(.*)\.(md|markdown)$"
DEFAULT_TITLE_MATCH = r"^ {0,3}# (.*)"


class TopicLoadError(RuntimeError):
    pass


@dataclass(frozen=True)
class Topic:
    name: str
    title: str
    content: str


def _compile(pattern: str, flags: int = 0) -> re.Pattern[str]:
    try:
        return re.compile(pattern, flags)
    except re.error as exc:
        raise TopicLoadError(f"Invalid pattern {pattern!r}: {exc}") from exc


def topic_name_for(file_name: str, match: re.Match[str]) -> str:
    """Topic id for a matched file: first capture group, else the file stem."""
    captured = match.group(1) if match.re.groups else None
    if captured:
        return Path(captured).stem
    return Path(file_name).stem


def iter_topic_files(
    path: Union[str, Path],
    file_pattern: str = DEFAULT_FILE_MATCH,
    title_pattern: str = DEFAULT_TITLE_MATCH,
) -> Iterator[Topic]:
    """Yield a Topic for every matching file directly inside ``path``.

    Entries are visited in file-name order. Directories, non-matching names and
    unreadable files are skipped.
    """
    root = Path(path).expanduser()
    if not root.is_dir():
        raise TopicLoadError(f"Topic directory does not exist: {root}")
    file_regex = _compile(file_pattern)
    title_regex = _compile(title_pattern, re.MULTILINE)

    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if not entry.is_file():
            continue
        file_match = file_regex.search(entry.name)
        if not file_match:
            continue
        try:
            content = entry.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable topic file %s: %s", entry, exc)
            continue
        title_match = title_regex.search(content)
        title = ""
        if title_match:
            title = (title_match.group(1) if title_regex.groups else title_match.group(0)).strip()
        name = topic_name_for(entry.name, file_match)
        logger.debug("Loaded topic %r (%r) from %s", name, title, entry)
        yield Topic(name, title, content)
