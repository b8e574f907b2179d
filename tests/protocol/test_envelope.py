import json

import pytest

from montycat.protocol import envelope
from montycat.protocol import keys
from montycat.protocol.errors import MixedSchemaError, NormalizationError, ValidationError
from montycat.protocol.schema import SchemaDescriptor, validate
from montycat.protocol.types import Pointer, Timestamp


context = envelope.Context(
    host='127.0.0.1',
    port=21210,
    username='USER',
    password='12345',
    store='Company',
    keyspace='customers',
)


def build(command='get_value', **kwargs):
    data = envelope.build(context, command, **kwargs)
    assert isinstance(data, bytes)
    return json.loads(data.decode('utf-8'))


def test_envelope_shape():

    decoded = build()

    assert list(decoded) == [
        'schema', 'username', 'password', 'keyspace', 'store', 'persistent',
        'distributed', 'limit_output', 'key', 'value', 'command', 'expire',
        'bulk_values', 'bulk_keys', 'bulk_keys_values', 'search_criteria',
        'with_pointers', 'key_included', 'pointers_metadata', 'volumes',
        'latest_volume',
    ]

    assert decoded['username'] == 'USER'
    assert decoded['password'] == '12345'
    assert decoded['store'] == 'Company'
    assert decoded['keyspace'] == 'customers'
    assert decoded['persistent'] is False
    assert decoded['command'] == 'get_value'
    assert decoded['value'] == '{}'
    assert decoded['search_criteria'] == '{}'
    assert decoded['limit_output'] == {}
    assert decoded['key'] is None
    assert decoded['schema'] is None
    assert decoded['expire'] == 0


def test_scenario_pointer_record():

    descriptor = SchemaDescriptor('Employee', {'name': str, 'dep': Pointer})
    record = validate({'name': 'Alice', 'dep': Pointer(keyspace='depts', key='eng-1')}, descriptor)

    decoded = build('insert_value', value=record)
    value = json.loads(decoded['value'])

    assert value == {'name': 'Alice', 'pointers': {'dep': ['depts', keys.canonicalize('eng-1')]}}
    assert 'dep' not in value
    assert decoded['schema'] == 'Employee'

    hashed = keys.canonicalize('eng-1')
    expected = '{"name":"Alice","pointers":{"dep":["depts","%s"]}}' % (hashed)
    assert decoded['value'] == expected


def test_limit():

    with pytest.raises(ValidationError):
        envelope.build(context, 'get_keys', limit=[5])

    data = envelope.build(context, 'get_keys', limit=[5, 10])
    assert b'"limit_output":{"start":5,"stop":10}' in data


def test_keys_are_strings():

    big = 30748150595091665781806646557034343545

    decoded = build(key=big)
    assert decoded['key'] == str(big)

    decoded = build('get_bulk', bulk_keys=[1, '2', big])
    assert decoded['bulk_keys'] == ['1', '2', str(big)]


def test_bulk_values_share_schema():

    batch = [{'name': 'a', 'schema': 'A'}, {'name': 'b', 'schema': 'B'}]

    with pytest.raises(MixedSchemaError):
        envelope.build(context, 'insert_bulk', bulk_values=batch)

    batch = [{'name': 'a', 'schema': 'A'}, {'name': 'b', 'schema': 'A', 'dep': Pointer('d', 'x')}]
    decoded = build('insert_bulk', bulk_values=batch)

    assert decoded['schema'] == 'A'
    values = [json.loads(item) for item in decoded['bulk_values']]
    assert values == [{'name': 'a'}, {'name': 'b', 'dep': ['d', keys.canonicalize('x')]}]


def test_bulk_keys_values():

    decoded = build('update_bulk', bulk_keys_values={'1': {'at': Timestamp(timestamp='t')}, 2: {'n': 1}})

    assert decoded['bulk_keys_values'] == {'1': '{"at":"t"}', '2': '{"n":1}'}


def test_search_criteria():

    criteria = {'quantity': 10, 'date': Timestamp(after='2025-10-01'), 'customer': Pointer('c', '7')}
    decoded = build('lookup_values', search_criteria=criteria, schema='Orders')

    assert decoded['schema'] == 'Orders'
    assert json.loads(decoded['search_criteria']) == {
        'quantity': 10,
        'date': {'after_timestamp': '2025-10-01'},
        'pointers': {'customer': ['c', '7']},
    }


def test_conflicting_options():

    with pytest.raises(ValidationError):
        envelope.build(context, 'get_value', with_pointers=True, pointers_metadata=True)

    with pytest.raises(ValidationError):
        envelope.build(context, 'get_keys', volumes=['v1'], latest_volume=True)

    with pytest.raises(ValidationError):
        envelope.build(context, 'insert_value', value={'a': 1}, expire=-1)


def test_normalization_failure_propagates():

    with pytest.raises(NormalizationError):
        envelope.build(context, 'insert_value', value={'pointers': {'dep': ['only-one']}})


def test_prepare_flags_subscriptions():

    query = envelope.prepare(context, 'subscribe', key='42')
    assert query.subscription is True
    assert query.command == 'subscribe'
    assert b'"command":"subscribe"' in query.data

    query = envelope.prepare(context, 'get_value', key='42')
    assert query.subscription is False


def test_raw_envelope():

    data = envelope.raw(['create-store', 'store', 'Company', 'persistent', False], 'USER', '12345')
    decoded = json.loads(data)

    assert decoded == {
        'raw': ['create-store', 'store', 'Company', 'persistent', 'n'],
        'credentials': ['USER', '12345'],
    }

    with pytest.raises(ValidationError):
        envelope.raw(['create-store', 'store', None], 'USER', '12345')

    with pytest.raises(ValidationError):
        envelope.raw([], 'USER', '12345')


def test_context_repr_hides_password():

    assert '12345' not in repr(context)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
