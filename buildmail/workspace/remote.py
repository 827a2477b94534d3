"""Workspace provider for builds running on a remote execution node.

The node runs a small agent that exposes its workspace over HTTP:

- ``GET {base_url}/api/workspaces/{node}/files?pattern=<glob>`` returns
  ``{"files": [{"name": ..., "path": ..., "length": ...}, ...]}``
- ``GET {base_url}/api/workspaces/{node}/content?path=<path>`` streams the
  raw bytes of one file.

File lengths come from the listing so that size budgeting never needs an
extra round trip per file.
"""

from typing import Any, BinaryIO, Dict, List, Optional

import requests

from buildmail.logging import get_logger

from .base import ResolvedFile, Workspace
from .exceptions import (
    WorkspaceError,
    WorkspaceHTTPError,
    WorkspaceResponseError,
    WorkspaceTimeoutError,
)
from .local import normalize_pattern

logger = get_logger(__name__, component="workspace")


class RemoteFile(ResolvedFile):
    """A file listed by a remote workspace agent."""

    def __init__(self, workspace: "RemoteWorkspace", name: str, path: str, length: int) -> None:
        self._workspace = workspace
        self._name = name
        self.path = path
        self._length = length

    @property
    def name(self) -> str:
        return self._name

    def length(self) -> int:
        return self._length

    def open_read(self) -> BinaryIO:
        return self._workspace.open_content(self.path)

    def __str__(self) -> str:
        return f"{self._workspace.describe()}:{self.path}"


class RemoteWorkspace(Workspace):
    """Workspace on a remote node, reached through its HTTP agent.

    Attributes:
        base_url: Agent base URL (no trailing slash)
        node: Execution node name
        timeout: HTTP request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        node: str,
        timeout: int = 30,
        user_agent: str = "buildmail/1.0",
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the remote workspace client.

        Args:
            base_url: Agent base URL, e.g. "http://agent-01:8080"
            node: Execution node name used in the URL path
            timeout: HTTP request timeout in seconds
            user_agent: User-Agent header for requests
            token: Optional bearer token for the agent
            session: Optional pre-built session (mainly for tests)

        Raises:
            WorkspaceError: If base_url or node is empty
        """
        if not base_url or not base_url.strip():
            raise WorkspaceError("Remote workspace base_url cannot be empty")
        if not node or not node.strip():
            raise WorkspaceError("Remote workspace node cannot be empty")

        self.base_url = base_url.strip().rstrip("/")
        self.node = node.strip()
        self.timeout = timeout

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent})
        if token:
            self._session.headers.update({"Authorization": f"Bearer {token}"})

    def list(self, pattern: str) -> List[ResolvedFile]:
        normalized = normalize_pattern(pattern)
        url = self._url("files")
        response = self._request(url, params={"pattern": normalized})

        try:
            payload = response.json()
        except ValueError as e:
            raise WorkspaceResponseError(
                f"Failed to parse file listing from {url}: {e}"
            ) from e

        files = [self._parse_entry(entry, url) for entry in self._listing(payload, url)]

        logger.debug(
            f"Pattern {normalized} matched {len(files)} file(s) on {self.node}",
            extra={
                "event": "workspace.list.completed",
                "pattern": normalized,
                "match_count": len(files),
                "node": self.node,
            },
        )
        return files

    def open_content(self, path: str) -> BinaryIO:
        """Open a streaming read of one workspace file.

        Raises:
            WorkspaceError: If the agent cannot serve the file
        """
        response = self._request(self._url("content"), params={"path": path}, stream=True)
        response.raw.decode_content = True
        return response.raw

    def describe(self) -> str:
        return f"{self.node}@{self.base_url}"

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/api/workspaces/{self.node}/{endpoint}"

    def _request(
        self, url: str, params: Dict[str, str], stream: bool = False
    ) -> requests.Response:
        """GET a URL, translating requests failures into WorkspaceError subclasses."""
        try:
            response = self._session.get(url, params=params, timeout=self.timeout, stream=stream)
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Request to {url} timed out after {self.timeout} seconds",
                extra={"event": "workspace.request.timeout", "url": url},
            )
            raise WorkspaceTimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(
                f"Request to {url} failed: {e}",
                extra={
                    "event": "workspace.request.error",
                    "error_type": type(e).__name__,
                    "url": url,
                },
            )
            raise WorkspaceHTTPError(
                f"Request to {url} failed: {e}", status_code=0, url=url
            ) from e

        if response.status_code >= 400:
            logger.error(
                f"HTTP {response.status_code} error from {url}",
                extra={
                    "event": "workspace.request.error",
                    "status_code": response.status_code,
                    "url": url,
                },
            )
            response.close()
            raise WorkspaceHTTPError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
                url=url,
            )

        return response

    @staticmethod
    def _listing(payload: Any, url: str) -> List[Any]:
        if not isinstance(payload, dict) or not isinstance(payload.get("files"), list):
            raise WorkspaceResponseError(f"Listing from {url} has no 'files' array")
        return payload["files"]

    def _parse_entry(self, entry: Any, url: str) -> RemoteFile:
        if not isinstance(entry, dict):
            raise WorkspaceResponseError(f"Malformed file entry in listing from {url}: {entry!r}")

        path = entry.get("path")
        length = entry.get("length")
        if not isinstance(path, str) or not path:
            raise WorkspaceResponseError(f"File entry without a path in listing from {url}")
        if isinstance(length, bool) or not isinstance(length, int) or length < 0:
            raise WorkspaceResponseError(
                f"File entry '{path}' has an invalid length in listing from {url}: {length!r}"
            )

        name = entry.get("name") or path.rstrip("/").rsplit("/", 1)[-1]
        return RemoteFile(self, name=name, path=path, length=length)
