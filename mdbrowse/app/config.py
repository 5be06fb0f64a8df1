from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Optional

from mdbrowse.core.history import DEFAULT_HISTORY_MAX
from mdbrowse.core.scanner import DEFAULT_BULLET_CHARS
from mdbrowse.core.topic_files import DEFAULT_FILE_MATCH, DEFAULT_TITLE_MATCH
from mdbrowse.core.topic_store import DEFAULT_HOME_TOPIC

GLOBAL_CONFIG = Path.home() / ".mdbrowse_config.json"

DEFAULT_SPLITTER_POSITION = 300


def init_settings() -> None:
    GLOBAL_CONFIG.parent.mkdir(parents=True, exist_ok=True)


def _read_global_config() -> dict:
    """Return the parsed global config, or an empty dict on error/missing."""
    if not GLOBAL_CONFIG.exists():
        return {}
    try:
        payload = json.loads(GLOBAL_CONFIG.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return payload if isinstance(payload, dict) else {}


def _update_global_config(updates: dict) -> None:
    """Merge updates into global config file."""
    existing = _read_global_config()
    existing.update(updates)
    GLOBAL_CONFIG.write_text(json.dumps(existing, indent=2), encoding="utf-8")


def load_home_topic() -> str:
    """Return the home topic name ('' hides the home button)."""
    payload = _read_global_config()
    name = payload.get("home_topic")
    if isinstance(name, str):
        return name.strip()
    return DEFAULT_HOME_TOPIC


def save_home_topic(name: str) -> None:
    _update_global_config({"home_topic": (name or "").strip()})


def load_history_max() -> int:
    payload = _read_global_config()
    try:
        return max(1, int(payload.get("history_max", DEFAULT_HISTORY_MAX)))
    except (TypeError, ValueError):
        return DEFAULT_HISTORY_MAX


def save_history_max(size: int) -> None:
    _update_global_config({"history_max": max(1, int(size))})


def _load_pattern(key: str, default: str) -> str:
    payload = _read_global_config()
    pattern = payload.get(key)
    if not isinstance(pattern, str) or not pattern:
        return default
    try:
        re.compile(pattern)
    except re.error:
        return default
    return pattern


def load_file_pattern() -> str:
    """Regex a file name must match to become a topic (group 1 is the topic name)."""
    return _load_pattern("file_pattern", DEFAULT_FILE_MATCH)


def load_title_pattern() -> str:
    """Regex whose first group, searched line-wise in a file, is the topic title."""
    return _load_pattern("title_pattern", DEFAULT_TITLE_MATCH)


def save_patterns(file_pattern: Optional[str] = None, title_pattern: Optional[str] = None) -> None:
    updates: dict = {}
    if file_pattern is not None:
        updates["file_pattern"] = file_pattern
    if title_pattern is not None:
        updates["title_pattern"] = title_pattern
    if updates:
        _update_global_config(updates)


def load_images_path() -> Optional[str]:
    """Return the configured images directory (None means the docs directory)."""
    payload = _read_global_config()
    path = payload.get("images_path")
    return path if isinstance(path, str) and path.strip() else None


def save_images_path(path: Optional[str]) -> None:
    _update_global_config({"images_path": path})


def load_bullet_chars() -> tuple[str, ...]:
    payload = _read_global_config()
    chars = payload.get("bullet_chars")
    if isinstance(chars, list):
        cleaned = tuple(str(c) for c in chars if isinstance(c, str) and c)
        if cleaned:
            return cleaned
    return DEFAULT_BULLET_CHARS


def load_last_docs_path() -> Optional[str]:
    payload = _read_global_config()
    last = payload.get("last_docs_path")
    return last if isinstance(last, str) else None


def save_last_docs_path(path: str) -> None:
    _update_global_config({"last_docs_path": str(Path(path))})


def load_splitter_position() -> int:
    payload = _read_global_config()
    try:
        return max(0, int(payload.get("splitter_position", DEFAULT_SPLITTER_POSITION)))
    except (TypeError, ValueError):
        return DEFAULT_SPLITTER_POSITION


def save_splitter_position(position: int) -> None:
    _update_global_config({"splitter_position": int(position)})
