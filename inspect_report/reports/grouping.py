"""Group issues by file and classify their severity.

Functions:
    group_by_file(issues)          -> list[FileIssueGroup]
    classify_severity(severity)    -> DiagnosticSeverity
"""

from inspect_report.models import DiagnosticSeverity, FileIssueGroup, Issue, ReportError

# InspectCode severity -> editor severity
_SEVERITY_MAP = {
    "ERROR":      DiagnosticSeverity.Error,
    "WARNING":    DiagnosticSeverity.Warning,
    "SUGGESTION": DiagnosticSeverity.Information,
    "HINT":       DiagnosticSeverity.Hint,
}

SEVERITIES = tuple(_SEVERITY_MAP)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class UnknownSeverityError(ReportError):
    """Raised for a severity string outside ERROR/WARNING/SUGGESTION/HINT."""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def classify_severity(severity: str) -> DiagnosticSeverity:
    try:
        return _SEVERITY_MAP[severity]
    except KeyError:
        raise UnknownSeverityError(
            f"Unknown severity '{severity}'. Expected one of: {', '.join(SEVERITIES)}"
        ) from None


def group_by_file(issues: list[Issue]) -> list[FileIssueGroup]:
    """Group *issues* by their ``file`` value.

    Files appear in the order they are first seen, and issues keep their
    relative order inside each group.
    """
    groups: dict[str, FileIssueGroup] = {}
    for issue in issues:
        group = groups.get(issue.file)
        if group is None:
            group = groups[issue.file] = FileIssueGroup(file=issue.file)
        group.issues.append(issue)
    return list(groups.values())
