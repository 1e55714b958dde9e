"""Attach issue-type metadata to decoded issues."""

from inspect_report.models import Issue, IssueType


def build_type_index(issue_types: list[IssueType]) -> dict[str, IssueType]:
    """Map each issue-type id to its metadata. Later duplicates win."""
    return {t.id: t for t in issue_types}


def resolve_issue_types(issue_types: list[IssueType], issues: list[Issue]) -> list[Issue]:
    """Return copies of *issues* with ``issue_type`` set from *issue_types*.

    An issue whose ``type_id`` has no match keeps ``issue_type=None``; it does
    not stop the other issues from resolving.
    """
    index = build_type_index(issue_types)
    return [issue.resolve(index.get(issue.type_id)) for issue in issues]
