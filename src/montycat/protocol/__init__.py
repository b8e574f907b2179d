"""
montycat Protocol Layer
=======================

This package turns high-level data operations into the canonical wire
representation understood by a Montycat server, and turns the server's
replies back into Python values. Everything here is pure computation;
the protocol layer MUST NOT depend on any transport implementation.

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

Keyspace / Engine (keyspace.py, engine.py)
    Thin per-command callers
    - insert_value(), get_bulk(), lookup_values_where(), ...
    - create_store(), grant_to(), ...

    │
    ▼
Schema Validation (schema.py)
    Optional: descriptor-driven checking of a record
    - Missing / extra / mistyped fields
    - Pointer and Timestamp side-maps

    │
    ▼
Value Normalization (normalize.py, keys.py)
    Pointer and Timestamp values rewritten to wire form
    - Custom keys hashed to stable decimal strings

    │
    ▼
Envelope Builder (envelope.py)
    One immutable Query per call
    - Credentials, addressing, command, payload slots

    │
    ▼
Transport (montycat.transport)
    Moves lines over one TCP connection
    - One-shot request/reply
    - Streaming subscription

    │
    ▼
Response Decoder (decode.py)
    Nested JSON-in-JSON unwrapped, identifiers kept as strings

---------------------------------------------------------------------
"""

from . import fields
from . import errors
from . import keys
from . import types
from . import normalize
from . import schema
from . import envelope
from . import decode


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
