"""Client-side error taxonomy.

Generation failures are deliberately flat: the orchestrator never inspects the
server's error code, it only needs to know that the request did not succeed.
Local action failures (clipboard, download, new tab) are reported separately
and never touch generation state.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, eq=False)
class GenerationRequestError(Exception):
    """The proxy call failed: non-2xx status, transport error or bad body."""

    message: str
    status_code: int | None = None
    server_error: str | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code})"


class GenerationInProgressError(RuntimeError):
    """A second submission was attempted before the first one settled."""


class ClientActionError(Exception):
    """A local code-surface action could not be performed."""


class CodeSurfaceLockedError(ClientActionError):
    """The live code value cannot be edited while a generation is running."""
