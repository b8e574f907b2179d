"""Transport layer implementations."""

from .base import (
    State,
    TransportError,
    TransportTimeout,
    TransportConnectionError,
)

from . import tcp
from .tcp import Subscription, Transport, execute, send
