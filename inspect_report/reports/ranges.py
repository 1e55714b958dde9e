"""Offset-to-range mapping.

InspectCode reports each issue as a 1-based line number plus a pair of
character offsets counted from the beginning of the file. Editors want a
zero-based (line, character) range, so the offsets are rebased onto the start
of the reported line using the file's real text.

Usage:
    mapper = RangeMapper()                 # one per processing pass
    rng    = mapper.map(issue)             # reads issue.file at most once
"""

from typing import Callable

from inspect_report.models import Issue, Offset, Range, ReportError


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class OutOfRangeError(ReportError):
    """Raised when an issue's line or offset does not fit the file's text."""


# ---------------------------------------------------------------------------
# Line tables
# ---------------------------------------------------------------------------

def read_source_file(path: str) -> str:
    """Read a source file as text, keeping ``\\r`` characters intact.

    Bytes that are not valid UTF-8 are decoded as U+FFFD instead of failing
    the read.
    """
    with open(path, encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


def _utf16_len(text: str) -> int:
    if text.isascii():
        return len(text)
    return len(text.encode("utf-16-le")) // 2


class LineTable:
    """Start offset of every line in a text, split on ``\\n`` only.

    Offsets are measured in UTF-16 code units, the unit the analysis tool
    counts in. A ``\\r`` before the ``\\n`` belongs to the line's content.
    """

    def __init__(self, text: str) -> None:
        starts = [0]
        for line in text.split("\n"):
            starts.append(starts[-1] + _utf16_len(line) + 1)
        # Final entry is the start of a line that does not exist
        self._starts = starts

    @property
    def line_count(self) -> int:
        return len(self._starts) - 1

    def line_start(self, line: int) -> int:
        """Return the offset at which 1-based *line* begins."""
        if not 1 <= line <= self.line_count:
            raise OutOfRangeError(
                f"Line {line} is outside the file (1-{self.line_count})"
            )
        return self._starts[line - 1]


def map_range(table: LineTable, line: int, offset: Offset) -> Range:
    """Convert a 1-based line and file-relative offsets into a zero-based range.

    Columns are the offsets minus the line start. A negative column is an
    error; otherwise both are shifted by one to match the tool's offset encoding.
    Columns past the end of the line are returned as-is; the editor clamps.

    Raises:
        OutOfRangeError: if *line* is not in the file or an offset falls
                         before the start of *line*.
    """
    line_start = table.line_start(line)
    start_column = offset.start - line_start
    end_column = offset.end - line_start
    if start_column < 0 or end_column < 0:
        raise OutOfRangeError(
            f"Offset {offset.start}-{offset.end} begins before line {line} "
            f"(line starts at {line_start})"
        )
    return Range(line - 1, start_column + 1, line - 1, end_column + 1)


# ---------------------------------------------------------------------------
# Per-pass mapper
# ---------------------------------------------------------------------------

class RangeMapper:
    """Maps issues to ranges, reading and indexing each file once per pass."""

    def __init__(self, reader: Callable[[str], str] | None = None) -> None:
        self._reader = reader or read_source_file
        self._tables: dict[str, LineTable] = {}
        self._failures: dict[str, Exception] = {}

    def line_table(self, path: str) -> LineTable:
        """Return the cached line table for *path*, building it on first use.

        Raises:
            OSError: the file could not be read
        """
        if path in self._tables:
            return self._tables[path]
        if path in self._failures:
            raise self._failures[path]

        try:
            text = self._reader(path)
        except OSError as exc:
            self._failures[path] = exc
            raise

        table = self._tables[path] = LineTable(text)
        return table

    def map(self, issue: Issue) -> Range:
        return map_range(self.line_table(issue.file), issue.line, issue.offset)

    def clear(self) -> None:
        """Drop every cached table at the end of a pass."""
        self._tables.clear()
        self._failures.clear()
