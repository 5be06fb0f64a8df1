from __future__ import annotations

import os
import time


RENDER_LOGGING_ENABLED = os.getenv("MDBROWSE_DETAILED_RENDER_LOGGING", "0") not in (
    "0",
    "false",
    "False",
    "",
    None,
)


class RenderLogger:
    """Collects per-step durations of one topic render and prints them as one line."""

    def __init__(self, label: str, enabled: bool = RENDER_LOGGING_ENABLED) -> None:
        self.label = label
        self.enabled = enabled
        self.steps: list[tuple[str, float]] = []
        self._start = self._last = time.perf_counter()

    def mark(self, step: str) -> None:
        if not self.enabled:
            return
        now = time.perf_counter()
        self.steps.append((step, (now - self._last) * 1000.0))
        self._last = now

    def summary(self) -> str:
        total_ms = (self._last - self._start) * 1000.0
        parts = " ".join(f"{step}={ms:.1f}ms" for step, ms in self.steps)
        return f"[RenderTiming] {self.label}: {parts} total={total_ms:.1f}ms"

    def end(self) -> None:
        if self.enabled:
            print(self.summary())
