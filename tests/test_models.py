"""Tests for inspect_report/models.py"""

from inspect_report.models import (
    Diagnostic,
    DiagnosticSeverity,
    FileIssueGroup,
    Issue,
    IssueType,
    Offset,
    Range,
)


def test_severity_numbering():
    assert [s.value for s in DiagnosticSeverity] == [0, 1, 2, 3]


def test_resolve_returns_copy():
    issue = Issue(file="/a.cs", line=1, offset=Offset(0, 1), message="m", type_id="T")
    resolved = issue.resolve(IssueType(id="T", severity="HINT"))
    assert resolved.issue_type.severity == "HINT"
    assert issue.issue_type is None


def test_group_to_dict():
    group = FileIssueGroup(
        file="/a.cs",
        diagnostics=[Diagnostic(Range(2, 3, 2, 9), "msg", DiagnosticSeverity.Hint, "T", "tool")],
    )
    assert group.to_dict() == {
        "file": "/a.cs",
        "diagnostics": [{
            "range":    {"start": {"line": 2, "character": 3}, "end": {"line": 2, "character": 9}},
            "message":  "msg",
            "severity": "Hint",
            "code":     "T",
            "source":   "tool",
        }],
    }
