"""Best-effort ZeroMQ publisher for snapshots.

The socket is a PUB socket that connects to the collecting endpoint.
Sends never block: with a high-water mark of 1 a slow or absent
subscriber simply misses messages.
"""

from __future__ import annotations

import logging

import zmq

log = logging.getLogger(__name__)


class PublisherError(Exception):
    """Raised when the publish transport cannot be established."""


class ZmqPublisher:
    """Non-blocking PUB socket connected to ``endpoint``."""

    def __init__(
        self,
        endpoint: str,
        send_hwm: int = 1,
        context: zmq.Context | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._send_hwm = send_hwm
        self._owns_context = context is None
        self._context = context
        self._socket: zmq.Socket | None = None
        self._sent = 0
        self._dropped = 0

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def sent(self) -> int:
        """Number of messages handed to ZeroMQ."""
        return self._sent

    @property
    def dropped(self) -> int:
        """Number of messages dropped because the send failed."""
        return self._dropped

    def connect(self) -> None:
        """Create the PUB socket and connect it.

        Raises:
            PublisherError: If the socket cannot be created or connected.
        """
        if self._context is None:
            self._context = zmq.Context()
        try:
            sock = self._context.socket(zmq.PUB)
        except zmq.ZMQError as exc:
            self._close_context()
            raise PublisherError(f"Cannot create PUB socket: {exc}") from exc

        try:
            sock.setsockopt(zmq.SNDHWM, self._send_hwm)
            sock.setsockopt(zmq.LINGER, 0)
            sock.connect(self._endpoint)
        except zmq.ZMQError as exc:
            # An open socket would make Context.term() block
            sock.close(linger=0)
            self._close_context()
            raise PublisherError(f"Cannot connect to {self._endpoint}: {exc}") from exc
        self._socket = sock
        log.info("Publishing to %s", self._endpoint)

    def send(self, payload: bytes) -> bool:
        """Send one message without blocking.

        Returns:
            True if ZeroMQ accepted the message, False if it was dropped.
        """
        if self._socket is None:
            raise RuntimeError("ZmqPublisher not connected; call connect() first")

        try:
            self._socket.send(payload, zmq.NOBLOCK)
        except zmq.Again:
            self._dropped += 1
            log.warning("Publish would block, dropping snapshot")
            return False
        except zmq.ZMQError as exc:
            self._dropped += 1
            log.warning("Publish failed, dropping snapshot: %s", exc)
            return False

        self._sent += 1
        return True

    def _close_context(self) -> None:
        if self._owns_context and self._context is not None:
            self._context.term()
            self._context = None

    def close(self) -> None:
        """Close the socket and, if we created it, the context."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        self._close_context()

    def __enter__(self) -> ZmqPublisher:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()
