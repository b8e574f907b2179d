import asyncio
import json

import pytest

from montycat import Engine, KeyspaceInMemory, KeyspacePersistent, Pointer, Schema, Timestamp
from montycat.protocol import keys
from montycat.protocol.errors import SchemaTypeError, ValidationError
from montycat.transport import State, Subscription


class Employee(Schema):
    fields = {'name': str, 'dep': Pointer, 'hired': Timestamp}


def keyspace_for(port, keyspace_class=KeyspaceInMemory, **kwargs):
    engine = Engine('127.0.0.1', port, 'USER', '12345', 'Company')
    keyspace = keyspace_class('customers', **kwargs)
    return keyspace.connect_engine(engine)


async def test_insert_schema_record(replying):

    port, requests = await replying(b'{"status":true,"payload":"29095364578528255816148465894650046051","error":null}')
    keyspace = keyspace_for(port)

    record = Employee(name='Alice', dep=Pointer('depts', 'eng-1'), hired=Timestamp(timestamp='2025-01-01T00:00:00'))
    result = await keyspace.insert_value(record, expire=60)

    assert result['payload'] == '29095364578528255816148465894650046051'

    sent = json.loads(requests[0])
    assert sent['command'] == 'insert_value'
    assert sent['schema'] == 'Employee'
    assert sent['keyspace'] == 'customers'
    assert sent['store'] == 'Company'
    assert sent['expire'] == 60
    assert json.loads(sent['value']) == {
        'name': 'Alice',
        'pointers': {'dep': ['depts', keys.canonicalize('eng-1')]},
        'timestamps': {'hired': '2025-01-01T00:00:00'},
    }


def test_schema_rejects_wrong_type():

    with pytest.raises(SchemaTypeError):
        Employee(name=7, dep=None, hired=None)


async def test_custom_key_is_hashed(replying):

    port, requests = await replying(b'{"status":true}')
    keyspace = keyspace_for(port)

    await keyspace.get_value(custom_key='alice@example.com', with_pointers=True)

    sent = json.loads(requests[0])
    assert sent['key'] == keys.canonicalize('alice@example.com')
    assert sent['with_pointers'] is True


async def test_key_arguments():

    keyspace = keyspace_for(1)

    with pytest.raises(ValidationError):
        await keyspace.get_value(key='1', custom_key='one')

    with pytest.raises(ValidationError):
        await keyspace.delete_key()

    with pytest.raises(ValidationError):
        await keyspace.insert_value({})

    with pytest.raises(ValidationError):
        await keyspace.update_value(key='1')


async def test_get_bulk_combines_keys(replying):

    port, requests = await replying(b'{"status":true,"payload":[]}')
    keyspace = keyspace_for(port)

    await keyspace.get_bulk(bulk_keys=['123'], bulk_custom_keys=['a', 'b'], limit=[0, 10])

    sent = json.loads(requests[0])
    assert sent['bulk_keys'] == ['123', keys.canonicalize('a'), keys.canonicalize('b')]
    assert sent['limit_output'] == {'start': 0, 'stop': 10}


async def test_update_bulk_custom_keys(replying):

    port, requests = await replying(b'true')
    keyspace = keyspace_for(port)

    await keyspace.update_bulk(bulk_custom_keys_values={'alice': {'age': 31}})

    sent = json.loads(requests[0])
    assert sent['bulk_keys_values'] == {keys.canonicalize('alice'): '{"age":31}'}


async def test_lookup_with_schema_class(replying):

    port, requests = await replying(b'[]')
    keyspace = keyspace_for(port)

    await keyspace.lookup_values_where({'name': 'Alice'}, schema=Employee, key_included=True)

    sent = json.loads(requests[0])
    assert sent['command'] == 'lookup_values'
    assert sent['schema'] == 'Employee'
    assert sent['key_included'] is True
    assert json.loads(sent['search_criteria']) == {'name': 'Alice'}


async def test_enforce_schema(replying):

    port, requests = await replying(b'true')
    keyspace = keyspace_for(port)

    await keyspace.enforce_schema(Employee)

    raw = json.loads(requests[0])['raw']
    assert raw[:5] == ['enforce-schema', 'store', 'Company', 'keyspace', 'customers']
    assert raw[raw.index('schema_name') + 1] == 'Employee'

    content = json.loads(raw[raw.index('schema_content') + 1])
    assert content == {'name': 'String', 'dep': 'Pointer', 'hired': 'Timestamp'}


async def test_persistent_create_keyspace(replying):

    port, requests = await replying(b'true')
    keyspace = keyspace_for(port, KeyspacePersistent, cache=256, compression=True)

    await keyspace.create_keyspace()

    assert json.loads(requests[0])['raw'] == [
        'create-keyspace', 'store', 'Company', 'keyspace', 'customers',
        'persistent', 'y', 'distributed', 'n', 'cache', '256', 'compression', 'y',
    ]


async def test_persistent_rejects_expiry():

    keyspace = keyspace_for(1, KeyspacePersistent)

    with pytest.raises(ValidationError):
        await keyspace.insert_value({'a': 1}, expire=10)


async def test_in_memory_volumes(replying):

    port, requests = await replying(b'[]')
    keyspace = keyspace_for(port)

    await keyspace.get_keys(volumes=['v1', 'v2'])

    sent = json.loads(requests[0])
    assert sent['volumes'] == ['v1', 'v2']
    assert sent['latest_volume'] is False

    with pytest.raises(ValidationError):
        await keyspace.get_keys(volumes=['v1'], latest_volume=True)


async def test_subscribe(replying):

    port, requests = await replying(b'"change 1"', b'"change 2"')
    keyspace = keyspace_for(port)
    received = list()

    subscription = keyspace.subscribe(received.append, custom_key='alice')
    assert isinstance(subscription, Subscription)
    assert subscription.state is State.IDLE

    await asyncio.wait_for(subscription.run(), 5)

    assert received == ['change 1', 'change 2']

    sent = json.loads(requests[0])
    assert sent['command'] == 'subscribe'
    assert sent['key'] == keys.canonicalize('alice')


def test_unconnected_keyspace():

    keyspace = KeyspaceInMemory('customers')

    with pytest.raises(ValidationError):
        keyspace.context()

    properties = keyspace.show_properties()
    assert properties['keyspace'] == 'customers'
    assert 'password' not in properties


def test_show_properties_omits_password():

    properties = keyspace_for(21210).show_properties()

    assert properties['store'] == 'Company'
    assert properties['username'] == 'USER'
    assert '12345' not in properties.values()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
