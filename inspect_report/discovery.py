"""Locate solution files in a workspace.

Usage:
    paths = find_solutions("/work/repo")          # sorted absolute paths
    base  = solution_directory(paths[0])          # where report paths start
"""

import os
from fnmatch import fnmatch
from pathlib import Path

DEFAULT_PATTERN = "**/*.sln"
DEFAULT_EXCLUDE = ("**/node_modules/**",)


def find_solutions(
    workspace: str,
    pattern: str = DEFAULT_PATTERN,
    exclude: tuple[str, ...] | list[str] = DEFAULT_EXCLUDE,
) -> list[str]:
    """Return solution files under *workspace* matching *pattern*.

    *exclude* holds glob patterns matched against the workspace-relative
    POSIX path; ``*`` also matches ``/``.
    """
    root = Path(workspace).resolve()
    found: list[str] = []
    for path in root.glob(pattern):
        if not path.is_file():
            continue
        relative = path.relative_to(root).as_posix()
        if any(fnmatch(relative, p) or fnmatch("/" + relative, p) for p in exclude):
            continue
        found.append(str(path))
    return sorted(found)


def solution_directory(solution_path: str) -> str:
    """Return the absolute directory that a solution's report paths are relative to."""
    return os.path.dirname(os.path.abspath(solution_path))
