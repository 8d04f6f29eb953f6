r"""Single-attempt request executors.

An executor performs exactly one network round trip and reports what
happened as an ``AttemptOutcome``. Every ``httpx.RequestError`` becomes an
outcome; any other exception propagates. It never retries and never decodes:
both are the job of the retry policy.
"""

from __future__ import annotations

__all__ = ["AsyncRequestExecutor", "AttemptOutcome", "OutcomeKind", "RequestExecutor"]

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from waterfalls_client.endpoints import PreparedRequest

logger: logging.Logger = logging.getLogger(__name__)


class OutcomeKind(enum.Enum):
    SUCCESS = "success"
    SERVER_ERROR = "server_error"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of one network attempt.

    ``SUCCESS`` and ``SERVER_ERROR`` outcomes carry the status code and the
    body; ``TRANSPORT_ERROR`` outcomes carry the ``httpx`` exception, which
    may also be a failure to read the body (e.g. ``httpx.DecodingError``).
    """

    kind: OutcomeKind
    status_code: int | None = None
    content: bytes = b""
    error: httpx.RequestError | None = None

    @classmethod
    def from_response(cls, status_code: int, content: bytes) -> AttemptOutcome:
        kind = OutcomeKind.SUCCESS if 200 <= status_code < 300 else OutcomeKind.SERVER_ERROR
        return cls(kind=kind, status_code=status_code, content=content)

    @classmethod
    def from_error(cls, error: httpx.RequestError) -> AttemptOutcome:
        return cls(kind=OutcomeKind.TRANSPORT_ERROR, error=error)


def _url(base_url: str, request: PreparedRequest) -> str:
    return f"{base_url}{request.path}"


class RequestExecutor:
    """Perform one blocking attempt with an ``httpx.Client``.

    Args:
        client: The client that owns the connection pool and the timeout.
        base_url: The server URL the request paths are appended to.
    """

    def __init__(self, client: httpx.Client, base_url: str) -> None:
        self.client = client
        self.base_url = base_url

    def execute(self, request: PreparedRequest) -> AttemptOutcome:
        url = _url(self.base_url, request)
        try:
            response = self.client.request(
                request.method, url, params=request.params or None, content=request.content
            )
        except httpx.RequestError as exc:
            logger.debug(f"{request.method} {url} raised {type(exc).__name__}: {exc}")
            return AttemptOutcome.from_error(exc)
        return AttemptOutcome.from_response(response.status_code, response.content)


class AsyncRequestExecutor:
    """Perform one attempt with an ``httpx.AsyncClient``.

    The coroutine suspends while connecting and while reading the
    response. Cancelling it closes the in-flight request.

    Args:
        client: The client that owns the connection pool and the timeout.
        base_url: The server URL the request paths are appended to.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self.client = client
        self.base_url = base_url

    async def execute(self, request: PreparedRequest) -> AttemptOutcome:
        url = _url(self.base_url, request)
        try:
            response = await self.client.request(
                request.method, url, params=request.params or None, content=request.content
            )
        except httpx.RequestError as exc:
            logger.debug(f"{request.method} {url} raised {type(exc).__name__}: {exc}")
            return AttemptOutcome.from_error(exc)
        return AttemptOutcome.from_response(response.status_code, response.content)
