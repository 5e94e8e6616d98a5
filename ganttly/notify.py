# ganttly/notify.py
from __future__ import annotations

from typing import List, Protocol, Tuple

from .util.console import eprint

SEVERITIES = ("success", "error", "info")


class Notifier(Protocol):
    def notify(self, message: str, severity: str = "info") -> None:
        """Fire-and-forget user notice."""


class ConsoleNotifier:
    """Writes notices to stderr."""

    def notify(self, message: str, severity: str = "info") -> None:
        level = severity.upper() if severity in SEVERITIES else "INFO"
        eprint(f"[ganttly] {level}: {message}")


class NullNotifier:
    def notify(self, message: str, severity: str = "info") -> None:
        return None


class MemoryNotifier:
    """Keeps notices in memory (embedding hosts, tests)."""

    def __init__(self) -> None:
        self.notices: List[Tuple[str, str]] = []

    def notify(self, message: str, severity: str = "info") -> None:
        self.notices.append((severity, message))
