from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional


DEFAULT_HISTORY_MAX = 10


@dataclass(frozen=True)
class Visit:
    """A topic the user left and how far down it was scrolled."""

    topic_index: int
    scroll_offset: float = 0.0


class NavigationHistory:
    """Bounded back/forward log of visits.

    ``position`` ranges over ``[0, len(visits)]``; ``position == len(visits)``
    is the head, i.e. the topic on screen has not been committed to the log.
    """

    def __init__(self, max_size: int = DEFAULT_HISTORY_MAX) -> None:
        if max_size < 1:
            raise ValueError(f"History size must be at least 1, got {max_size}")
        self.max_size = max_size
        self._visits: list[Visit] = []
        self.position = 0

    def __len__(self) -> int:
        return len(self._visits)

    @property
    def visits(self) -> tuple[Visit, ...]:
        return tuple(self._visits)

    @property
    def at_head(self) -> bool:
        return self.position == len(self._visits)

    @property
    def can_go_back(self) -> bool:
        return self.position > 0

    @property
    def can_go_forward(self) -> bool:
        return self.position + 1 < len(self._visits)

    def current_visit(self) -> Optional[Visit]:
        if self.at_head:
            return None
        return self._visits[self.position]

    def target(self, offset: int) -> Optional[int]:
        """Log index ``offset`` steps from the current position, if it exists."""
        index = self.position + offset
        if 0 <= index < len(self._visits):
            return index
        return None

    def record(self, visit: Visit, *, branch: bool, target: Optional[int] = None) -> Optional[int]:
        """Commit ``visit`` for the topic being left.

        Inside the log the visit overwrites the slot at ``position``; with
        ``branch`` the forward entries are dropped first. At the head the visit
        is appended and the oldest entries are trimmed to ``max_size``.
        Returns ``target`` rebased by the number of trimmed entries, or None
        (log untouched) when trimming would discard the target itself.
        """
        visits = self._visits
        if self.position < len(visits):
            if branch:
                del visits[self.position + 1:]
            visits[self.position] = visit
            return target

        dropped = max(0, len(visits) + 1 - self.max_size)
        if target is not None and target - dropped < 0:
            return None
        visits.append(visit)
        self.position = len(visits) - 1
        if dropped:
            del visits[:dropped]
            self.position = max(0, self.position - dropped)
        return None if target is None else target - dropped

    def go_to(self, index: int) -> Visit:
        if not 0 <= index < len(self._visits):
            raise IndexError(f"History index {index} out of range")
        self.position = index
        return self._visits[index]

    def go_to_head(self) -> None:
        self.position = len(self._visits)

    def clear(self) -> None:
        self._visits.clear()
        self.position = 0

    def shift_topics(self, start: int, delta: int = 1) -> None:
        """Renumber visits after a topic was inserted (or removed) at ``start``."""
        self._visits = [
            replace(v, topic_index=v.topic_index + delta) if v.topic_index >= start else v
            for v in self._visits
        ]
