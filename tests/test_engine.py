"""Tests for inspect_report/reports/engine.py"""

import os
import threading
import warnings

import pytest

from inspect_report.models import DiagnosticSeverity, Range
from inspect_report.reports.decoder import MalformedReportError
from inspect_report.reports.engine import ReportProcessor, process_report
from inspect_report.sink import DiagnosticCollection

TYPES = (
    '<IssueType Id="Unused" Severity="WARNING" Description="Unused"/>'
    '<IssueType Id="Typo" Severity="SUGGESTION"/>'
    '<IssueType Id="Weird" Severity="DO_NOT_SHOW"/>'
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _report(*issues: str, types: str = TYPES) -> str:
    return (
        f'<Report><IssueTypes>{types}</IssueTypes>'
        f'<Issues><Project Name="App">{"".join(issues)}</Project></Issues></Report>'
    )


def _issue(file="Foo.cs", line=2, offset="4-7", type_id="Unused", message="msg") -> str:
    return f'<Issue TypeId="{type_id}" File="{file}" Offset="{offset}" Line="{line}" Message="{message}"/>'


@pytest.fixture
def project(tmp_path):
    (tmp_path / "Foo.cs").write_text("abc\ndefgh\nij", encoding="utf-8")
    (tmp_path / "Bar.cs").write_text("one\ntwo\n", encoding="utf-8")
    return tmp_path


def _path(project, name):
    return os.path.normpath(os.path.join(str(project), name))


# ---------------------------------------------------------------------------
# process_report()
# ---------------------------------------------------------------------------

def test_diagnostic_fields(project):
    result = process_report(_report(_issue()), str(project), source="resharper")
    (group,) = result.groups
    (diagnostic,) = group.diagnostics
    assert group.file == _path(project, "Foo.cs")
    assert diagnostic.range == Range(1, 1, 1, 4)
    assert diagnostic.message == "msg"
    assert diagnostic.severity is DiagnosticSeverity.Warning
    assert diagnostic.code == "Unused"
    assert diagnostic.source == "resharper"


def test_groups_follow_first_seen_file_order(project):
    result = process_report(
        _report(
            _issue(file="Bar.cs", line=1, offset="0-3", message="b1"),
            _issue(file="Foo.cs", message="f1"),
            _issue(file="Bar.cs", line=2, offset="4-7", type_id="Typo", message="b2"),
        ),
        str(project),
    )
    assert [g.file for g in result.groups] == [_path(project, "Bar.cs"), _path(project, "Foo.cs")]
    assert [d.message for d in result.groups[0].diagnostics] == ["b1", "b2"]
    assert result.groups[0].diagnostics[1].severity is DiagnosticSeverity.Information


def test_per_issue_failures_are_skipped_and_counted(project):
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        result = process_report(
            _report(
                _issue(message="ok"),
                _issue(line=99, message="bad line"),
                _issue(type_id="Weird", message="bad severity"),
                _issue(type_id="Nope", message="no type"),
                _issue(file="Gone.cs", message="no file"),
            ),
            str(project),
        )

    summary = result.summary()
    assert summary["total"] == 5
    assert summary["published"] == 1
    assert summary["skipped"] == 4
    assert summary["skipped_by_reason"] == {
        "out_of_range": 1,
        "unknown_severity": 1,
        "unresolved_type": 1,
        "unreadable_file": 1,
    }
    assert [s.issue.message for s in result.skipped] == [
        "bad line", "bad severity", "no type", "no file",
    ]
    assert any("4 of 5 issue(s)" in str(w.message) for w in caught)


def test_no_warning_when_everything_maps(project):
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        process_report(_report(_issue()), str(project))
    assert caught == []


def test_summary_by_severity(project):
    result = process_report(
        _report(_issue(), _issue(type_id="Typo"), _issue(offset="5-6")),
        str(project),
    )
    assert result.summary()["by_severity"] == {
        "Error": 0, "Warning": 2, "Information": 1, "Hint": 0,
    }


def test_unreadable_file_read_once(project):
    calls: list[str] = []

    def reader(path):
        calls.append(path)
        raise PermissionError(path)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        result = process_report(_report(_issue(), _issue(offset="5-6")), str(project), reader=reader)
    assert len(calls) == 1
    assert len(result.skipped) == 2


def test_non_utf8_source_file_still_maps(project):
    (project / "Foo.cs").write_bytes(b"\xe9b\ndefgh\nij")
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        result = process_report(_report(_issue(offset="3-6")), str(project))
    assert caught == []
    assert result.skipped == []
    assert result.groups[0].diagnostics[0].range == Range(1, 1, 1, 4)


def test_malformed_report_propagates(project):
    with pytest.raises(MalformedReportError):
        process_report("<Report/>", str(project))


# ---------------------------------------------------------------------------
# ReportProcessor
# ---------------------------------------------------------------------------

def test_run_publishes_to_sink(project):
    sink = DiagnosticCollection()
    ReportProcessor(sink).run(_report(_issue()), str(project))
    assert len(sink.get(_path(project, "Foo.cs"))) == 1


def test_second_run_replaces_files_from_first(project):
    sink = DiagnosticCollection()
    processor = ReportProcessor(sink)
    processor.run(_report(_issue(file="Foo.cs")), str(project))
    processor.run(_report(_issue(file="Bar.cs", line=1, offset="0-3")), str(project))
    assert sink.files() == [_path(project, "Bar.cs")]


def test_failed_run_publishes_nothing(project):
    sink = DiagnosticCollection()
    processor = ReportProcessor(sink)
    processor.run(_report(_issue()), str(project))
    with pytest.raises(MalformedReportError):
        processor.run("<Report><Issues/></Report>", str(project))
    assert sink.files() == [_path(project, "Foo.cs")]


def test_processor_clear_operations(project):
    sink = DiagnosticCollection()
    processor = ReportProcessor(sink)
    processor.run(
        _report(_issue(file="Foo.cs"), _issue(file="Bar.cs", line=1, offset="0-3")),
        str(project),
    )
    processor.clear_file(_path(project, "Foo.cs"))
    assert sink.files() == [_path(project, "Bar.cs")]
    processor.clear_all()
    assert len(sink) == 0


class _RecordingCollection(DiagnosticCollection):
    def __init__(self):
        super().__init__()
        self.published: list[list[str]] = []

    def replace_all(self, groups):
        self.published.append([g.file for g in groups])
        super().replace_all(groups)


def test_concurrent_runs_publish_one_after_another(project):
    entered = threading.Event()
    release = threading.Event()

    def reader(path):
        if path.endswith("Foo.cs"):
            entered.set()
            assert release.wait(timeout=5)
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()

    sink = _RecordingCollection()
    processor = ReportProcessor(sink, reader=reader)
    first = threading.Thread(
        target=processor.run, args=(_report(_issue(file="Foo.cs")), str(project))
    )
    second = threading.Thread(
        target=processor.run,
        args=(_report(_issue(file="Bar.cs", line=1, offset="0-3")), str(project)),
    )

    first.start()
    assert entered.wait(timeout=5)
    second.start()
    second.join(timeout=0.2)

    # The second pass waits while the first is still mapping
    assert second.is_alive()
    assert sink.published == []

    release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert sink.published == [[_path(project, "Foo.cs")], [_path(project, "Bar.cs")]]
    assert sink.files() == [_path(project, "Bar.cs")]
