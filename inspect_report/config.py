"""Configuration loading and validation.

Usage:
    config = load("inspect-config.yaml")       # raises ConfigError on bad config
    sln = config.resolve_solution("app")       # returns "<workspace>/src/App.sln"
    generate_template("inspect-config.yaml")   # writes example file to disk
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from inspect_report.discovery import DEFAULT_EXCLUDE, DEFAULT_PATTERN
from inspect_report.models import DEFAULT_SOURCE


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


class SolutionNotFoundError(ConfigError):
    """Raised when a solution alias or path cannot be resolved."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    report: str
    source: str = DEFAULT_SOURCE
    workspace: str = "."
    solution_glob: str = DEFAULT_PATTERN
    exclude: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    solutions: dict[str, str] = field(default_factory=dict)
    token: str = ""

    def resolve_solution(self, name: str) -> str:
        """Return the absolute solution file path for a given alias.

        Accepts a configured alias (e.g. "app") or one of the configured paths,
        both relative to ``workspace``, or the path of an existing ``.sln``
        file given on the command line.

        Raises:
            SolutionNotFoundError: if *name* is unknown or the file it points
                                   to does not exist.
        """
        if name in self.solutions or name in self.solutions.values():
            configured = self.solutions.get(name, name)
            path = Path(self.workspace) / configured
            if not path.is_file():
                raise SolutionNotFoundError(
                    f"Solution '{name}' points to '{path}', which does not exist."
                )
            return os.path.abspath(path)
        if name.lower().endswith(".sln") and Path(name).is_file():
            return os.path.abspath(name)
        available = ", ".join(self.solutions.keys()) or "(none configured)"
        raise SolutionNotFoundError(
            f"Solution '{name}' not found. Available aliases: {available}"
        )


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str = "inspect-config.yaml") -> Config:
    """Load and validate configuration from a YAML file.

    Environment variables INSPECT_REPORT and INSPECT_REPORT_TOKEN override
    file values.

    Raises:
        ConfigError: if the file is missing, malformed, or required fields
                     are absent.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `python -m inspect_report init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")

    server = raw.get("server") or {}
    report = os.environ.get("INSPECT_REPORT")       or raw.get("report", "")
    token  = os.environ.get("INSPECT_REPORT_TOKEN") or server.get("token", "")
    exclude = raw.get("exclude")

    config = Config(
        report=str(report).strip(),
        source=str(raw.get("source") or DEFAULT_SOURCE).strip(),
        workspace=str(raw.get("workspace") or ".").strip(),
        solution_glob=str(raw.get("solution_glob") or DEFAULT_PATTERN).strip(),
        exclude=list(DEFAULT_EXCLUDE) if exclude is None else exclude,
        solutions=raw.get("solutions") or {},
        token=str(token or "").strip(),
    )
    _validate(config)
    return config


def _validate(config: Config) -> None:
    """Raise ConfigError if required fields are missing or mistyped."""
    errors: list[str] = []

    if not config.report:
        errors.append(
            "  - 'report' is missing (or set the INSPECT_REPORT environment variable)"
        )
    if not config.source:
        errors.append("  - 'source' must not be empty")
    if not isinstance(config.exclude, list) or not all(isinstance(p, str) for p in config.exclude):
        errors.append("  - 'exclude' must be a list of glob patterns")
    if not isinstance(config.solutions, dict):
        errors.append("  - 'solutions' must be a mapping of alias to solution path")

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
# Path or http(s) URL of the InspectCode XML report
report: "build/inspectcode.xml"

# Label attached to every published diagnostic
source: "inspectcode"

# Where to look for solution files
workspace: "."
solution_glob: "**/*.sln"
exclude:
  - "**/node_modules/**"

solutions:
  # Human-readable alias: solution file path, relative to workspace
  app: "src/App.sln"

server:
  token: ""        # Only needed when 'report' is a protected URL
"""


def generate_template(output_path: str = "inspect-config.yaml") -> None:
    """Write a template inspect-config.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists.
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
