"""Report processing pass: XML in, per-file diagnostics out.

Functions:
    process_report(xml_text, project_directory)   -> ProcessResult

Classes:
    ReportProcessor(sink)   runs passes one at a time and publishes them
"""

import threading
import warnings
from dataclasses import dataclass, field
from typing import Callable

from inspect_report.models import (
    DEFAULT_SOURCE,
    Diagnostic,
    DiagnosticSeverity,
    FileIssueGroup,
    Issue,
)
from inspect_report.reports.decoder import decode_report
from inspect_report.reports.grouping import UnknownSeverityError, classify_severity, group_by_file
from inspect_report.reports.ranges import OutOfRangeError, RangeMapper
from inspect_report.reports.resolver import resolve_issue_types
from inspect_report.sink import DiagnosticSink

# Why an issue did not make it into the published diagnostics
SKIP_OUT_OF_RANGE     = "out_of_range"
SKIP_UNKNOWN_SEVERITY = "unknown_severity"
SKIP_UNRESOLVED_TYPE  = "unresolved_type"
SKIP_UNREADABLE_FILE  = "unreadable_file"

_SKIP_REASONS = (
    SKIP_OUT_OF_RANGE, SKIP_UNKNOWN_SEVERITY, SKIP_UNRESOLVED_TYPE, SKIP_UNREADABLE_FILE,
)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SkippedIssue:
    issue: Issue
    reason: str
    detail: str

    def to_dict(self) -> dict:
        return {
            "file":    self.issue.file,
            "line":    self.issue.line,
            "type_id": self.issue.type_id,
            "reason":  self.reason,
            "detail":  self.detail,
        }


@dataclass
class ProcessResult:
    groups: list[FileIssueGroup] = field(default_factory=list)
    skipped: list[SkippedIssue] = field(default_factory=list)
    tools_version: str = ""

    def summary(self) -> dict:
        by_severity = {s.name: 0 for s in DiagnosticSeverity}
        by_reason   = {r: 0 for r in _SKIP_REASONS}

        published = 0
        for group in self.groups:
            for diagnostic in group.diagnostics:
                by_severity[diagnostic.severity.name] += 1
                published += 1
        for skipped in self.skipped:
            by_reason[skipped.reason] += 1

        return {
            "total":             published + len(self.skipped),
            "published":         published,
            "skipped":           len(self.skipped),
            "by_severity":       by_severity,
            "skipped_by_reason": by_reason,
        }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def process_report(
    xml_text: str | bytes,
    project_directory: str,
    *,
    source: str = DEFAULT_SOURCE,
    reader: Callable[[str], str] | None = None,
) -> ProcessResult:
    """Decode a report and build diagnostics for every issue that maps cleanly.

    Per-issue failures (unreadable file, line or offset out of range,
    unresolved type, unknown severity) skip that issue only; they are listed
    in ``ProcessResult.skipped`` and summarized in a single ``UserWarning``.

    Raises:
        MalformedReportError: the report itself could not be decoded.
    """
    report = decode_report(xml_text, project_directory)
    issues = resolve_issue_types(report.issue_types, report.issues)
    groups = group_by_file(issues)

    mapper = RangeMapper(reader)
    skipped: list[SkippedIssue] = []
    for group in groups:
        for issue in group.issues:
            try:
                group.diagnostics.append(_build_diagnostic(issue, mapper, source))
            except _IssueSkipped as exc:
                skipped.append(SkippedIssue(issue, exc.reason, exc.detail))
    mapper.clear()

    result = ProcessResult(groups=groups, skipped=skipped, tools_version=report.tools_version)
    if skipped:
        counts = ", ".join(
            f"{reason}={count}"
            for reason, count in result.summary()["skipped_by_reason"].items()
            if count
        )
        warnings.warn(
            f"{len(skipped)} of {len(issues)} issue(s) could not be mapped and were skipped ({counts}).",
            UserWarning,
            stacklevel=2,
        )
    return result


class ReportProcessor:
    """Runs processing passes against a sink, one pass at a time.

    A pass that fails to decode publishes nothing; the sink keeps whatever it
    held before.
    """

    def __init__(
        self,
        sink: DiagnosticSink,
        *,
        source: str = DEFAULT_SOURCE,
        reader: Callable[[str], str] | None = None,
    ) -> None:
        self.sink = sink
        self._source = source
        self._reader = reader
        self._lock = threading.Lock()

    def run(self, xml_text: str | bytes, project_directory: str) -> ProcessResult:
        with self._lock:
            result = process_report(
                xml_text, project_directory, source=self._source, reader=self._reader
            )
            self.sink.replace_all(result.groups)
            return result

    def clear_file(self, file: str) -> None:
        with self._lock:
            self.sink.clear_file(file)

    def clear_all(self) -> None:
        with self._lock:
            self.sink.clear_all()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

class _IssueSkipped(Exception):
    def __init__(self, reason: str, detail: str) -> None:
        super().__init__(detail)
        self.reason = reason
        self.detail = detail


def _build_diagnostic(issue: Issue, mapper: RangeMapper, source: str) -> Diagnostic:
    if issue.issue_type is None:
        raise _IssueSkipped(SKIP_UNRESOLVED_TYPE, f"No issue type with id '{issue.type_id}'")

    try:
        severity = classify_severity(issue.issue_type.severity)
    except UnknownSeverityError as exc:
        raise _IssueSkipped(SKIP_UNKNOWN_SEVERITY, str(exc)) from exc

    try:
        rng = mapper.map(issue)
    except OutOfRangeError as exc:
        raise _IssueSkipped(SKIP_OUT_OF_RANGE, str(exc)) from exc
    except OSError as exc:
        raise _IssueSkipped(SKIP_UNREADABLE_FILE, f"Could not read '{issue.file}': {exc}") from exc

    return Diagnostic(
        range=rng,
        message=issue.message,
        severity=severity,
        code=issue.type_id,
        source=source,
    )
