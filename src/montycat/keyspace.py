""" Keyspace classes: a named partition of a store, bound to the connection
    details of an :class:`~montycat.engine.Engine`. Every method here is a
    thin caller of the protocol layer: it checks its arguments, builds one
    query, runs it on a fresh transport, and returns the decoded reply
    unchanged.
"""

import logging

from . import json
from .protocol import envelope
from .protocol import fields
from .protocol import keys
from .protocol.errors import ValidationError
from .protocol.schema import Schema, SchemaDescriptor, wire_types
from .transport import tcp

logger = logging.getLogger(__name__)


def _record(value):
    """ Accept either a plain mapping or a validated :class:`Schema`
        instance as a record.
    """

    if isinstance(value, Schema):
        return value.serialize()

    return value



def _schema_name(schema):

    if schema is None or isinstance(schema, str):
        return schema

    if isinstance(schema, SchemaDescriptor):
        return schema.name

    if isinstance(schema, type) and issubclass(schema, Schema):
        return schema.descriptor().name

    raise ValidationError('schema must be a name, a descriptor, or a Schema subclass: ' + repr(schema))



def _descriptor(schema, name=None):

    if isinstance(schema, SchemaDescriptor):
        return schema

    if isinstance(schema, type) and issubclass(schema, Schema):
        return schema.descriptor()

    if isinstance(schema, dict):
        if not name:
            raise ValidationError('a schema name is required alongside a field mapping')
        return SchemaDescriptor(name, schema)

    raise ValidationError('unsupported schema: ' + repr(schema))



def _one_key(key, custom_key):
    """ Resolve the pair of *key* and *custom_key* arguments, exactly one of
        which must be given, into the key that goes on the wire.
    """

    if key is not None and custom_key is not None:
        raise ValidationError("provide either 'key' or 'custom_key', not both")

    if custom_key is not None and custom_key != '':
        return keys.canonicalize(custom_key)

    if key is None or key == '':
        raise ValidationError('no key provided')

    return key



class Keyspace:
    """ Behavior common to in-memory and persistent keyspaces. A keyspace
        must be attached to an engine, via :func:`connect_engine`, before
        any query can be issued.

        :ivar name: The keyspace name.
        :ivar distributed: Whether the keyspace is distributed across nodes.
    """

    persistent = False
    supports_expiry = True

    def __init__(self, name, distributed=False):

        if not name:
            raise ValidationError('a keyspace name must be specified')

        self.name = name
        self.distributed = bool(distributed)
        self.engine = None


    def __repr__(self):
        return '%s(%r, store=%r)' % (type(self).__name__, self.name, self.store)


    @property
    def store(self):
        if self.engine is None:
            return None
        return self.engine.store


    def connect_engine(self, engine):
        """ Attach this keyspace to *engine*, whose host, port, credentials,
            and store will be used for every subsequent query.
        """

        self.engine = engine
        return self


    def context(self):

        if self.engine is None:
            raise ValidationError('keyspace %r is not connected to an engine' % (self.name))

        return self.engine.context(self.name, self.persistent, self.distributed)


    def show_properties(self):
        """ Return the connection properties of this keyspace, without the
            password, and log them at INFO level.
        """

        properties = dict()
        properties['keyspace'] = self.name
        properties['persistent'] = self.persistent
        properties['distributed'] = self.distributed

        if self.engine is not None:
            properties['host'] = self.engine.host
            properties['port'] = self.engine.port
            properties['username'] = self.engine.username
            properties['store'] = self.engine.store

        logger.info('montycat_keyspace_properties', extra={'properties': properties})
        return properties


    def _check_expire(self, expire):
        if expire and not self.supports_expiry:
            raise ValidationError('%s does not support expiry' % (type(self).__name__))


    async def _query(self, command, **kwargs):
        query = envelope.prepare(self.context(), command, **kwargs)
        return await tcp.execute(query)


    async def _raw(self, *tokens):
        query = envelope.prepare_raw(self.context(), tokens)
        logger.info('montycat_admin', extra={'command': query.command, 'keyspace': self.name})
        return await tcp.execute(query)


    def _store_tokens(self):

        store = self.store
        if not store:
            raise ValidationError('a store name must be specified')

        return ('store', store, 'keyspace', self.name)


    # Keyspace management.

    async def create_keyspace(self):
        return await self._raw(
            fields.CREATE_KEYSPACE, *self._store_tokens(),
            'persistent', self.persistent,
            'distributed', self.distributed,
        )


    async def remove_keyspace(self):
        return await self._raw(fields.REMOVE_KEYSPACE, *self._store_tokens(), 'persistent', self.persistent)


    async def enforce_schema(self, schema, schema_name=None):
        """ Ask the server to enforce *schema* on this keyspace. The schema
            may be a :class:`Schema` subclass, a :class:`SchemaDescriptor`,
            or a mapping of field names to types together with a
            *schema_name*.
        """

        descriptor = _descriptor(schema, schema_name)

        if not descriptor.fields:
            raise ValidationError('no schema fields provided for enforcement')

        content = json.dumps_text(wire_types(descriptor))

        return await self._raw(
            fields.ENFORCE_SCHEMA, *self._store_tokens(),
            'persistent', self.persistent,
            'schema_name', descriptor.name,
            'schema_content', content,
        )


    async def remove_enforced_schema(self, schema):
        return await self._raw(
            fields.REMOVE_ENFORCED_SCHEMA, *self._store_tokens(),
            'persistent', self.persistent,
            'schema_name', _schema_name(schema),
        )


    async def list_all_schemas_in_keyspace(self):
        return await self._query(fields.LIST_ALL_SCHEMAS_IN_KEYSPACE)


    async def get_len(self):
        """ Return the number of keys in this keyspace.
        """

        return await self._query(fields.GET_LEN)


    # Single values.

    async def get_value(self, key=None, custom_key=None, with_pointers=False, key_included=False, pointers_metadata=False):
        key = _one_key(key, custom_key)
        return await self._query(
            fields.GET_VALUE, key=key,
            with_pointers=with_pointers,
            key_included=key_included,
            pointers_metadata=pointers_metadata,
        )


    async def delete_key(self, key=None, custom_key=None):
        key = _one_key(key, custom_key)
        return await self._query(fields.DELETE_KEY, key=key)


    async def insert_value(self, value, expire=0):
        """ Insert a record; the server assigns and returns its key.
        """

        value = _record(value)
        if not value:
            raise ValidationError('no value provided for insertion')

        self._check_expire(expire)
        return await self._query(fields.INSERT_VALUE, value=value, expire=expire)


    async def insert_custom_key(self, custom_key, expire=0):
        """ Reserve *custom_key* with no value attached.
        """

        if custom_key is None or custom_key == '':
            raise ValidationError('no custom key provided for insertion')

        self._check_expire(expire)
        key = keys.canonicalize(custom_key)
        return await self._query(fields.INSERT_CUSTOM_KEY, key=key, expire=expire)


    async def insert_custom_key_value(self, custom_key, value, expire=0):

        value = _record(value)
        if not value:
            raise ValidationError('no value provided for insertion')
        if custom_key is None or custom_key == '':
            raise ValidationError('no custom key provided for insertion')

        self._check_expire(expire)
        key = keys.canonicalize(custom_key)
        return await self._query(fields.INSERT_CUSTOM_KEY_VALUE, key=key, value=value, expire=expire)


    async def update_value(self, key=None, custom_key=None, updates=None, expire=0):
        """ Update the fields listed in *updates* on an existing record.
        """

        if not updates:
            raise ValidationError('no updates provided')

        key = _one_key(key, custom_key)
        self._check_expire(expire)
        return await self._query(fields.UPDATE_VALUE, key=key, value=_record(updates), expire=expire)


    async def list_all_depending_keys(self, key=None, custom_key=None):
        key = _one_key(key, custom_key)
        return await self._query(fields.LIST_ALL_DEPENDING_KEYS, key=key)


    # Bulk operations.

    async def get_keys(self, limit=None):
        return await self._query(fields.GET_KEYS, limit=limit)


    async def insert_bulk(self, bulk_values, expire=0):
        """ Insert several records at once. All of them must declare the same
            schema, or none.
        """

        if not bulk_values:
            raise ValidationError('no values provided for bulk insertion')

        self._check_expire(expire)
        bulk_values = [_record(value) for value in bulk_values]
        return await self._query(fields.INSERT_BULK, bulk_values=bulk_values, expire=expire)


    async def get_bulk(self, bulk_keys=(), bulk_custom_keys=(), limit=None, with_pointers=False, key_included=False, pointers_metadata=False):

        bulk_keys = list(bulk_keys) + keys.canonicalize_many(bulk_custom_keys)

        if not bulk_keys:
            raise ValidationError('no keys provided for retrieval')

        return await self._query(
            fields.GET_BULK, bulk_keys=bulk_keys, limit=limit,
            with_pointers=with_pointers,
            key_included=key_included,
            pointers_metadata=pointers_metadata,
        )


    async def delete_bulk(self, bulk_keys=(), bulk_custom_keys=()):

        bulk_keys = list(bulk_keys) + keys.canonicalize_many(bulk_custom_keys)

        if not bulk_keys:
            raise ValidationError('no keys provided for deletion')

        return await self._query(fields.DELETE_BULK, bulk_keys=bulk_keys)


    async def update_bulk(self, bulk_keys_values=None, bulk_custom_keys_values=None):

        combined = dict()

        if bulk_keys_values:
            combined.update(bulk_keys_values)
        if bulk_custom_keys_values:
            combined.update(keys.canonicalize_mapping(bulk_custom_keys_values))

        if not combined:
            raise ValidationError('no key-value pairs provided for update')

        combined = {key: _record(value) for key, value in combined.items()}
        return await self._query(fields.UPDATE_BULK, bulk_keys_values=combined)


    # Lookups.

    async def lookup_keys_where(self, search_criteria=None, limit=None, schema=None):
        return await self._query(
            fields.LOOKUP_KEYS,
            search_criteria=search_criteria,
            limit=limit,
            schema=_schema_name(schema),
        )


    async def lookup_values_where(self, search_criteria=None, limit=None, schema=None, with_pointers=False, key_included=False, pointers_metadata=False):
        return await self._query(
            fields.LOOKUP_VALUES,
            search_criteria=search_criteria,
            limit=limit,
            schema=_schema_name(schema),
            with_pointers=with_pointers,
            key_included=key_included,
            pointers_metadata=pointers_metadata,
        )


# end of class Keyspace



class KeyspaceInMemory(Keyspace):
    """ A non-persistent keyspace. In-memory keyspaces support expiry,
        snapshots, volumes, and subscriptions.
    """

    persistent = False


    async def get_keys(self, limit=None, volumes=None, latest_volume=False):
        """ List the keys of this keyspace, optionally restricted to the
            listed *volumes* or to the latest volume.
        """

        return await self._query(fields.GET_KEYS, limit=limit, volumes=volumes, latest_volume=latest_volume)


    async def do_snapshots_for_keyspace(self):
        return await self._raw(fields.DO_SNAPSHOTS, *self._store_tokens())


    async def clean_snapshots_for_keyspace(self):
        return await self._raw(fields.CLEAN_SNAPSHOTS, *self._store_tokens())


    async def stop_snapshots_for_keyspace(self):
        return await self._raw(fields.STOP_SNAPSHOTS, *self._store_tokens())


    def subscribe(self, callback, key=None, custom_key=None):
        """ Return a :class:`~montycat.transport.tcp.Subscription` to changes
            in this keyspace, or to a single key if *key* or *custom_key* is
            given. Await its ``run()`` method to start streaming replies to
            *callback*, and call its ``stop()`` method to end it.
        """

        if key is not None or custom_key is not None:
            key = _one_key(key, custom_key)

        query = envelope.prepare(self.context(), fields.SUBSCRIBE, key=key)
        return tcp.Subscription(query, callback)


# end of class KeyspaceInMemory



class KeyspacePersistent(Keyspace):
    """ A keyspace stored on disk. Persistent keyspaces have an optional
        *cache* size and *compression* setting, and do not support expiry.
    """

    persistent = True
    supports_expiry = False

    def __init__(self, name, distributed=False, cache=None, compression=False):

        Keyspace.__init__(self, name, distributed)
        self.cache = cache
        self.compression = bool(compression)


    def _cache_tokens(self):

        cache = self.cache
        if cache is None:
            cache = 0

        return ('cache', cache, 'compression', self.compression)


    async def create_keyspace(self):
        return await self._raw(
            fields.CREATE_KEYSPACE, *self._store_tokens(),
            'persistent', self.persistent,
            'distributed', self.distributed,
            *self._cache_tokens(),
        )


    async def update_cache_and_compression(self):
        return await self._raw(fields.UPDATE_CACHE_COMPRESSION, *self._store_tokens(), *self._cache_tokens())


# end of class KeyspacePersistent


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
