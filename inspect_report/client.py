"""Report loader for a local path or HTTP(S) URL.

Usage:
    client = ReportClient(token="xxx")
    xml    = client.fetch("build/inspectcode.xml")
    xml    = client.fetch("https://ci.example.com/artifacts/inspectcode.xml")
"""

from pathlib import Path

import requests

_URL_SCHEMES = ("http://", "https://")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ReportClientError(Exception):
    """Base exception for all report loading errors."""


class AuthenticationError(ReportClientError):
    """Raised on HTTP 401: invalid or expired token."""


class NotFoundError(ReportClientError):
    """Raised on HTTP 404 or when a local report file does not exist."""


class NetworkError(ReportClientError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

def is_url(source: str) -> bool:
    return source.lower().startswith(_URL_SCHEMES)


class ReportClient:
    """Reads an InspectCode report from disk or downloads it."""

    def __init__(self, token: str | None = None, timeout: int = 30) -> None:
        self._timeout = timeout
        self._session = requests.Session()
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def fetch(self, source: str) -> bytes:
        """Return the raw report document found at *source*.

        Raises:
            AuthenticationError: HTTP 401
            NotFoundError:       HTTP 404, or missing local file
            ReportClientError:   Any other non-2xx response or read failure
            NetworkError:        Timeout or connection failure
        """
        if is_url(source):
            return self._download(source)
        return self._read(source)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _read(self, source: str) -> bytes:
        path = Path(source)
        if not path.is_file():
            raise NotFoundError(f"Report file not found: '{source}'")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise ReportClientError(f"Could not read report '{source}': {exc}") from exc

    def _download(self, url: str) -> bytes:
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while downloading '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(f"Unable to reach '{url}'") from exc

        if response.status_code == 401:
            raise AuthenticationError(
                "Authentication failed, check that your token is valid and not expired."
            )
        if response.status_code == 404:
            raise NotFoundError(f"Report not found: {url}")
        if not response.ok:
            raise ReportClientError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )

        return response.content
