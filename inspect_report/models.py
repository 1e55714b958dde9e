"""Data models for InspectCode reports.

Contains dataclasses used to structure and serialize the JSON output:
    - IssueType
    - Offset
    - Issue
    - Report
    - Range
    - Diagnostic
    - FileIssueGroup
"""

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any

DEFAULT_SOURCE = "inspectcode"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ReportError(Exception):
    """Base exception for all report processing errors."""


# ---------------------------------------------------------------------------
# Severity
# ---------------------------------------------------------------------------

class DiagnosticSeverity(IntEnum):
    """Presentation severity, numbered the way editors number them."""

    Error = 0
    Warning = 1
    Information = 2
    Hint = 3


# ---------------------------------------------------------------------------
# Report records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class IssueType:
    id: str
    severity: str
    category: str = ""
    category_id: str = ""
    description: str = ""
    wiki_url: str = ""


@dataclass(frozen=True)
class Offset:
    start: int
    end: int


@dataclass
class Issue:
    file: str
    line: int
    offset: Offset
    message: str
    type_id: str
    issue_type: IssueType | None = None

    def resolve(self, issue_type: IssueType | None) -> "Issue":
        """Return a copy of this issue with *issue_type* attached."""
        return replace(self, issue_type=issue_type)


@dataclass
class Report:
    issue_types: list[IssueType] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    tools_version: str = ""


# ---------------------------------------------------------------------------
# Output records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Range:
    """Zero-based editor range."""

    start_line: int
    start_character: int
    end_line: int
    end_character: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": {"line": self.start_line, "character": self.start_character},
            "end":   {"line": self.end_line,   "character": self.end_character},
        }


@dataclass(frozen=True)
class Diagnostic:
    range: Range
    message: str
    severity: DiagnosticSeverity
    code: str
    source: str = DEFAULT_SOURCE

    def to_dict(self) -> dict[str, Any]:
        return {
            "range":    self.range.to_dict(),
            "message":  self.message,
            "severity": self.severity.name,
            "code":     self.code,
            "source":   self.source,
        }


@dataclass
class FileIssueGroup:
    """All issues reported for one file, with the diagnostics built from them.

    ``issues`` keeps first-seen report order. ``diagnostics`` holds one entry
    per issue that could be mapped, in the same order.
    """

    file: str
    issues: list[Issue] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file":        self.file,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
