"""Diagnostic sink, where processed diagnostics are published.

Usage:
    sink = DiagnosticCollection()
    sink.replace_all(groups)          # drops everything, publishes groups
    sink.clear_file("/src/Foo.cs")    # drops one file
    sink.clear_all()                  # drops every file
"""

import threading
from typing import Protocol

from inspect_report.models import Diagnostic, FileIssueGroup


class DiagnosticSink(Protocol):
    """Interface a host integration implements to receive diagnostics."""

    def replace_all(self, groups: list[FileIssueGroup]) -> None: ...

    def clear_file(self, file: str) -> None: ...

    def clear_all(self) -> None: ...


class DiagnosticCollection:
    """In-memory diagnostic sink keyed by file path.

    Lives for the whole session. Every operation holds the same lock, so a
    reader never sees old diagnostics for one file next to new diagnostics
    for another. Files whose group carries no diagnostics are not published.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_file: dict[str, list[Diagnostic]] = {}

    # ------------------------------------------------------------------
    # Sink interface
    # ------------------------------------------------------------------

    def replace_all(self, groups: list[FileIssueGroup]) -> None:
        published = {g.file: list(g.diagnostics) for g in groups if g.diagnostics}
        with self._lock:
            self._by_file = published

    def clear_file(self, file: str) -> None:
        with self._lock:
            self._by_file.pop(file, None)

    def clear_all(self) -> None:
        with self._lock:
            self._by_file = {}

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def get(self, file: str) -> list[Diagnostic]:
        with self._lock:
            return list(self._by_file.get(file, []))

    def files(self) -> list[str]:
        with self._lock:
            return list(self._by_file)

    def snapshot(self) -> dict[str, list[Diagnostic]]:
        with self._lock:
            return {f: list(d) for f, d in self._by_file.items()}

    def __contains__(self, file: object) -> bool:
        with self._lock:
            return file in self._by_file

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_file)
