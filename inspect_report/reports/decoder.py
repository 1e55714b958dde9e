"""InspectCode XML decoder.

Functions:
    decode_report(xml_text, project_directory)  -> Report
    parse_offset(value)                         -> Offset

Expected document shape (all data lives in attributes)::

    <Report ToolsVersion="...">
      <IssueTypes>
        <IssueType Id="..." Category="..." CategoryId="..." Description="..."
                   Severity="WARNING" WikiUrl="..."/>
      </IssueTypes>
      <Issues>
        <Project Name="...">
          <Issue TypeId="..." File="src\\Foo.cs" Offset="120-135" Line="7"
                 Message="..."/>
        </Project>
      </Issues>
    </Report>
"""

import os
import re

from lxml import etree

from inspect_report.models import Issue, IssueType, Offset, Report, ReportError

_OFFSET_RE = re.compile(r"(\d+)-(\d+)")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class MalformedReportError(ReportError):
    """Raised when the report cannot be parsed into issue types and issues."""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def decode_report(xml_text: str | bytes, project_directory: str) -> Report:
    """Decode an InspectCode XML report.

    ``File`` attributes are relative to *project_directory* (the directory of
    the analysed solution) and are joined onto it. Issues from every
    ``<Project>`` element are returned in document order, with ``issue_type``
    left unresolved.

    Raises:
        MalformedReportError: on invalid XML, a missing ``IssueTypes`` or
                              ``Issues`` section, a missing required
                              attribute, or an unparseable number.
    """
    root = _parse_root(xml_text)

    type_container = root.find("IssueTypes")
    issue_container = root.find("Issues")
    if type_container is None:
        raise MalformedReportError("Report has no <IssueTypes> section")
    if issue_container is None:
        raise MalformedReportError("Report has no <Issues> section")

    issue_types = [_decode_issue_type(el) for el in type_container.iterfind("IssueType")]
    issues = [
        _decode_issue(el, project_directory)
        for project in issue_container.iterfind("Project")
        for el in project.iterfind("Issue")
    ]
    return Report(
        issue_types=issue_types,
        issues=issues,
        tools_version=root.get("ToolsVersion", ""),
    )


def parse_offset(value: str) -> Offset:
    """Parse an ``Offset`` attribute of the form ``"<start>-<end>"``."""
    match = _OFFSET_RE.fullmatch(value.strip())
    if not match:
        raise MalformedReportError(
            f"Invalid offset '{value}': expected '<start>-<end>'"
        )
    return Offset(start=int(match.group(1)), end=int(match.group(2)))


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _parse_root(xml_text: str | bytes):
    # lxml refuses str input that carries an encoding declaration
    data = xml_text.encode("utf-8") if isinstance(xml_text, str) else xml_text
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise MalformedReportError(f"Report is not valid XML: {exc}") from exc

    if root.tag != "Report":
        raise MalformedReportError(f"Expected <Report> root element, found <{root.tag}>")
    return root


def _required(el, name: str) -> str:
    value = el.get(name)
    if value is None:
        raise MalformedReportError(
            f"<{el.tag}> on line {el.sourceline} is missing the '{name}' attribute"
        )
    return value


def _decode_issue_type(el) -> IssueType:
    return IssueType(
        id=_required(el, "Id"),
        severity=_required(el, "Severity"),
        category=el.get("Category", ""),
        category_id=el.get("CategoryId", ""),
        description=el.get("Description", ""),
        wiki_url=el.get("WikiUrl", ""),
    )


def _decode_issue(el, project_directory: str) -> Issue:
    relative = _required(el, "File")
    return Issue(
        file=os.path.normpath(os.path.join(project_directory, relative)),
        line=_parse_int(el.get("Line", "1"), "Line"),
        offset=parse_offset(_required(el, "Offset")),
        message=el.get("Message", ""),
        type_id=_required(el, "TypeId"),
    )


def _parse_int(value: str, name: str) -> int:
    try:
        return int(value, 10)
    except ValueError as exc:
        raise MalformedReportError(f"Attribute '{name}' is not an integer: '{value}'") from exc
