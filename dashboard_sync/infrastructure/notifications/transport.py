"""Websocket transport used by the push channel."""

from __future__ import annotations

import logging
from typing import Protocol

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, InvalidStatus, WebSocketException

logger = logging.getLogger(__name__)

AUTH_REJECTED_STATUSES = frozenset({401, 403})
# 1008 is the policy violation code servers use to reject a token; 4001 is the
# application-level "unauthorized" code.
AUTH_CLOSE_CODES = frozenset({1008, 4001})


class TransportError(RuntimeError):
    """Raised when the push channel cannot be opened or drops."""


class AuthenticationError(TransportError):
    """Raised when the server rejects the credentials of the push channel."""


class PushTransport(Protocol):
    """An open push channel carrying JSON text frames."""

    async def receive(self) -> str:
        ...

    async def send(self, message: str) -> None:
        ...

    async def close(self) -> None:
        ...


class PushConnector(Protocol):
    """Factory opening a new :class:`PushTransport`."""

    async def connect(self) -> PushTransport:
        ...


class WebSocketTransport:
    """Adapt a ``websockets`` client connection to :class:`PushTransport`."""

    def __init__(self, connection: ClientConnection) -> None:
        self._connection = connection

    async def receive(self) -> str:
        try:
            message = await self._connection.recv()
        except ConnectionClosed as exc:
            raise _closed_error(exc) from exc
        if isinstance(message, bytes):
            return message.decode("utf-8")
        return message

    async def send(self, message: str) -> None:
        try:
            await self._connection.send(message)
        except ConnectionClosed as exc:
            raise _closed_error(exc) from exc

    async def close(self) -> None:
        await self._connection.close()


class WebSocketConnector:
    """Open authenticated websocket connections to the push endpoint.

    Credentials are ambient: ``headers`` (for example an ``Authorization`` or
    ``Cookie`` header) are sent with every handshake.
    """

    def __init__(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        open_timeout: float = 10.0,
    ) -> None:
        self.url = url
        self._headers = dict(headers or {})
        self._open_timeout = open_timeout

    async def connect(self) -> WebSocketTransport:
        try:
            connection = await connect(
                self.url,
                additional_headers=self._headers,
                open_timeout=self._open_timeout,
            )
        except InvalidStatus as exc:
            status = exc.response.status_code
            if status in AUTH_REJECTED_STATUSES:
                raise AuthenticationError(
                    f"Push channel handshake rejected with HTTP {status}"
                ) from exc
            raise TransportError(f"Push channel handshake failed with HTTP {status}") from exc
        except (OSError, TimeoutError, WebSocketException) as exc:
            raise TransportError(f"Unable to open push channel: {exc}") from exc
        logger.debug("Push channel opened to %s", self.url)
        return WebSocketTransport(connection)


def _closed_error(exc: ConnectionClosed) -> TransportError:
    code = exc.rcvd.code if exc.rcvd is not None else None
    if code in AUTH_CLOSE_CODES:
        return AuthenticationError(f"Push channel closed by server with code {code}")
    return TransportError(f"Push channel closed (code {code})")


__all__ = [
    "AUTH_CLOSE_CODES",
    "AUTH_REJECTED_STATUSES",
    "AuthenticationError",
    "PushConnector",
    "PushTransport",
    "TransportError",
    "WebSocketConnector",
    "WebSocketTransport",
]
