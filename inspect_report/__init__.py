"""Map InspectCode XML reports onto per-file editor diagnostics."""

__version__ = "0.1.0"
