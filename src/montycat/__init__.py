""" Python client for the Montycat key/value store. This includes the
    protocol layer, which turns data operations into the canonical wire
    representation and decodes the server's replies, the line-oriented
    asyncio transport, and the engine and keyspace classes built on both.
"""

# Utility components.

from . import json
from . import config

# Submodules used by multiple other components.

from . import protocol
from . import transport

from .protocol.errors import (
    MontycatError,
    ValidationError,
    MissingFieldError,
    ExtraFieldError,
    SchemaTypeError,
    MixedSchemaError,
    NormalizationError,
)
from .protocol.keys import canonicalize
from .protocol.types import Limit, Permission, Pointer, Timestamp
from .protocol.schema import Schema, SchemaDescriptor, make_schema, validate
from .protocol.decode import DecodeFailure, decode
from .transport import (
    Subscription,
    TransportError,
    TransportTimeout,
    TransportConnectionError,
)

# Primary public-facing interfaces.

from .engine import Engine
from .keyspace import KeyspaceInMemory, KeyspacePersistent

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
