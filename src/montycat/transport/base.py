"""Transport interface.

Transport errors and connection states.
"""

from __future__ import annotations

import enum
from typing import Optional

from ..protocol.errors import MontycatError


# Transport agnostic exceptions

class TransportError(MontycatError):
    """Base class for all transport-layer errors.

    Transport errors are never retried internally; whether to retry is up
    to the caller.
    """

    def __init__(self, message: str, host: Optional[str] = None, port: Optional[int] = None):
        self.host = host
        self.port = port
        self.reason = message
        if host is not None:
            message = f"{message} (address: {host}, port: {port})"
        super().__init__(message)


class TransportTimeout(TransportError):
    """A connection or a reply did not complete in time."""


class TransportConnectionError(TransportError):
    """The connection could not be established, or was lost."""


class State(enum.Enum):
    """Lifecycle of a single transport connection."""

    IDLE = "idle"
    CONNECTING = "connecting"
    SENDING = "sending"
    AWAITING_REPLY = "awaiting_reply"
    STREAMING = "streaming"
    CLOSED = "closed"
    STOPPED = "stopped"
