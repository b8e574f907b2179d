""" Assembly of the outbound query envelope. A data-plane envelope is one
    JSON object carrying the connection context, the command, and the
    payload slots; record payloads are normalized and then JSON-encoded a
    second time, as strings, inside the outer object. Administrative
    commands use the much simpler ``raw`` envelope instead.

    Nothing in this module touches the network.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .. import json
from . import fields
from . import normalize
from .errors import MixedSchemaError, ValidationError
from .types import Limit


@dataclass(frozen=True)
class Context:
    """Connection context shared by every query against one keyspace."""

    host: str
    port: int
    username: str
    password: str
    store: Optional[str] = None
    keyspace: Optional[str] = None
    persistent: bool = False
    distributed: bool = False
    use_tls: bool = False

    def __repr__(self) -> str:
        return (
            f"Context(host={self.host!r}, port={self.port!r}, "
            f"username={self.username!r}, store={self.store!r}, "
            f"keyspace={self.keyspace!r}, persistent={self.persistent!r}, "
            f"distributed={self.distributed!r}, use_tls={self.use_tls!r})"
        )


@dataclass(frozen=True)
class Query:
    """One serialized request, ready for a transport.

    ``subscription`` selects the streaming reply mode; it is derived from
    the command rather than from the encoded bytes.
    """

    context: Context
    command: str
    data: bytes
    subscription: bool = False


def is_subscription(command: Optional[str]) -> bool:
    return command in fields.SUBSCRIPTION_COMMANDS


def _schema_of(items: Sequence[Any]) -> Optional[str]:
    """Return the one schema name shared by every item of a bulk batch."""

    names = set()
    for item in items:
        if isinstance(item, dict):
            names.add(item.get(fields.SCHEMA))
        else:
            names.add(None)

    if len(names) > 1:
        raise MixedSchemaError(names)

    return names.pop() if names else None


def _without_schema(record: Mapping[str, Any]) -> Dict[str, Any]:
    stripped = dict(record)
    stripped.pop(fields.SCHEMA, None)
    return stripped


def _key_text(key: Any) -> str:
    if isinstance(key, bool) or key is None:
        raise ValidationError(f"invalid key: {key!r}")
    if isinstance(key, bytes):
        return key.decode()
    return str(key)


def build(
    context: Context,
    command: str,
    key: Any = None,
    value: Optional[Mapping[str, Any]] = None,
    search_criteria: Optional[Mapping[str, Any]] = None,
    bulk_values: Optional[Sequence[Mapping[str, Any]]] = None,
    bulk_keys: Optional[Iterable[Any]] = None,
    bulk_keys_values: Optional[Mapping[Any, Mapping[str, Any]]] = None,
    limit: Any = None,
    expire: int = 0,
    with_pointers: bool = False,
    key_included: bool = False,
    pointers_metadata: bool = False,
    volumes: Optional[Sequence[str]] = None,
    latest_volume: bool = False,
    schema: Optional[str] = None,
) -> bytes:
    """Compose and encode a data-plane query envelope.

    Args:
        context: Connection context (credentials, addressing, flags).
        command: Command name, for example ``insert_value``.
        key: A server-issued key; coerced to its decimal string form.
        value: A single record; normalized, then JSON-encoded as a string.
        search_criteria: Lookup predicates; temporal values are serialized
            in place and references collected under ``pointers``.
        bulk_values: Records for a bulk insert; they must all declare the
            same schema, which becomes the envelope schema.
        bulk_keys: Server-issued keys, each coerced to a string.
        bulk_keys_values: Mapping of key to record for bulk updates.
        limit: Result window, see :meth:`Limit.parse`.
        expire: Expiry in seconds, 0 for none.
        with_pointers: Resolve pointer values in the reply.
        key_included: Include keys alongside values in the reply.
        pointers_metadata: Return pointer metadata in the reply.
        volumes: Restrict a key listing to these volumes.
        latest_volume: Restrict a key listing to the latest volume.
        schema: Schema name for lookups; overridden by a schema embedded
            in ``value`` or shared by ``bulk_values``.

    Returns:
        The UTF-8 encoded envelope.

    Raises:
        ValidationError: On conflicting options, a malformed limit, or a
            bulk batch mixing schemas.
        NormalizationError: On malformed references or temporal values.
    """

    if with_pointers and pointers_metadata:
        raise ValidationError(
            "select either pointer values or pointer metadata, not both"
        )

    if latest_volume and volumes:
        raise ValidationError("select either the latest volume or a volumes list, not both")

    if isinstance(expire, bool) or not isinstance(expire, int) or expire < 0:
        raise ValidationError(f"expire must be a non-negative integer, got {expire!r}")

    limit = Limit.parse(limit)

    if value:
        value = normalize.normalize(value)
        if fields.SCHEMA in value:
            schema = value.pop(fields.SCHEMA)
    else:
        value = dict()

    encoded_bulk_values: List[str] = list()
    if bulk_values:
        schema = _schema_of(bulk_values)
        for item in bulk_values:
            item = normalize.normalize(_without_schema(item))
            encoded_bulk_values.append(json.dumps_text(item))

    encoded_bulk_keys_values: Dict[str, str] = dict()
    if bulk_keys_values:
        for bulk_key, item in bulk_keys_values.items():
            item = normalize.normalize(item)
            encoded_bulk_keys_values[_key_text(bulk_key)] = json.dumps_text(item)

    if bulk_keys:
        bulk_keys = [_key_text(bulk_key) for bulk_key in bulk_keys]
    else:
        bulk_keys = list()

    if key is not None:
        key = _key_text(key)

    criteria = normalize.split_criteria(search_criteria)

    envelope = {
        fields.SCHEMA: schema,
        fields.USERNAME: context.username,
        fields.PASSWORD: context.password,
        fields.KEYSPACE: context.keyspace,
        fields.STORE: context.store,
        fields.PERSISTENT: context.persistent,
        fields.DISTRIBUTED: context.distributed,
        fields.LIMIT_OUTPUT: limit.serialize() if limit is not None else {},
        fields.KEY: key,
        fields.VALUE: json.dumps_text(value),
        fields.COMMAND: command,
        fields.EXPIRE: expire,
        fields.BULK_VALUES: encoded_bulk_values,
        fields.BULK_KEYS: bulk_keys,
        fields.BULK_KEYS_VALUES: encoded_bulk_keys_values,
        fields.SEARCH_CRITERIA: json.dumps_text(criteria),
        fields.WITH_POINTERS: with_pointers,
        fields.KEY_INCLUDED: key_included,
        fields.POINTERS_METADATA: pointers_metadata,
        fields.VOLUMES: list(volumes) if volumes else [],
        fields.LATEST_VOLUME: latest_volume,
    }

    return json.dumps(envelope)


def prepare(context: Context, command: str, **kwargs: Any) -> Query:
    """Build a :class:`Query` for *command*; see :func:`build`."""

    data = build(context, command, **kwargs)
    return Query(context, command, data, is_subscription(command))


def _token(token: Any) -> str:
    if token is None:
        raise ValidationError("raw command tokens must not be None")
    if isinstance(token, bool):
        return "y" if token else "n"
    return str(token)


def raw(tokens: Sequence[Any], username: str, password: str) -> bytes:
    """Encode an administrative envelope.

    ``tokens`` is the command name followed by alternating option names
    and values, for example ``["create-store", "store", "sales",
    "persistent", "n"]``.
    """

    if not tokens:
        raise ValidationError("raw command requires at least a command name")

    envelope = {
        fields.RAW: [_token(token) for token in tokens],
        fields.CREDENTIALS: [username, password],
    }

    return json.dumps(envelope)


def prepare_raw(context: Context, tokens: Sequence[Any]) -> Query:
    data = raw(tokens, context.username, context.password)
    return Query(context, _token(tokens[0]), data, False)
