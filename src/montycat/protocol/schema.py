""" Descriptor-driven validation of records. A :class:`SchemaDescriptor`
    names a shape and maps each field to a field type; :func:`validate`
    checks a record against it and produces the record as it goes on the
    wire, with references and temporal values split out into their own
    side-maps and the schema name attached.

    Field types are a closed set, all evaluated through :func:`check`:

    * :class:`Primitive` -- the value's type must match exactly.
    * :class:`ListOf` -- a list whose every element matches exactly.
    * :data:`POINTER` -- a :class:`~montycat.protocol.types.Pointer`.
    * :data:`TIMESTAMP` -- a :class:`~montycat.protocol.types.Timestamp`.
    * :class:`OneOf` -- any one of several member types.
"""

from __future__ import annotations

import types
import typing
from typing import Any, Dict, Mapping, Tuple

from . import fields
from .errors import ExtraFieldError, MissingFieldError, SchemaTypeError
from .types import Pointer, Timestamp


class FieldType:
    """Base class of the tagged field types."""

    tag = None

    def names(self) -> Tuple[str, ...]:
        raise NotImplementedError


class Primitive(FieldType):

    tag = 'primitive'

    def __init__(self, type_: type):
        self.type = type_

    def names(self):
        return (self.type.__name__,)

    def __eq__(self, other):
        return isinstance(other, Primitive) and other.type is self.type

    def __hash__(self):
        return hash((self.tag, self.type))

    def __repr__(self):
        return 'Primitive(%s)' % (self.type.__name__)


class ListOf(FieldType):

    tag = 'list'

    def __init__(self, item: type):
        self.item = item

    def names(self):
        return ('list[%s]' % (self.item.__name__),)

    def __eq__(self, other):
        return isinstance(other, ListOf) and other.item is self.item

    def __hash__(self):
        return hash((self.tag, self.item))

    def __repr__(self):
        return 'ListOf(%s)' % (self.item.__name__)


class _Singleton(FieldType):

    def __init__(self, tag, name):
        self.tag = tag
        self._name = name

    def names(self):
        return (self._name,)

    def __repr__(self):
        return self._name.upper()


POINTER = _Singleton('pointer', 'Pointer')
TIMESTAMP = _Singleton('timestamp', 'Timestamp')


class OneOf(FieldType):

    tag = 'one_of'

    def __init__(self, *members: FieldType):
        if len(members) == 0:
            raise ValueError('OneOf requires at least one member type')
        self.members = tuple(members)

    def names(self):
        names = list()
        for member in self.members:
            names.extend(member.names())
        return tuple(names)

    def __eq__(self, other):
        return isinstance(other, OneOf) and other.members == self.members

    def __hash__(self):
        return hash((self.tag, self.members))

    def __repr__(self):
        return 'OneOf%r' % (self.members,)



def field_type(hint: Any) -> FieldType:
    """ Coerce a plain Python type hint into a tagged field type. Accepted
        hints are field types themselves, :class:`Pointer`,
        :class:`Timestamp`, a bare type, ``list[T]``, and a list or tuple
        of any of those meaning "one of".
    """

    if isinstance(hint, FieldType):
        return hint

    if hint is Pointer:
        return POINTER

    if hint is Timestamp:
        return TIMESTAMP

    if isinstance(hint, (list, tuple)):
        return OneOf(*(field_type(member) for member in hint))

    origin = typing.get_origin(hint)
    if origin is list:
        arguments = typing.get_args(hint)
        if len(arguments) == 1 and isinstance(arguments[0], type):
            return ListOf(arguments[0])
        raise TypeError('unsupported list hint: ' + repr(hint))

    if origin is typing.Union or origin is types.UnionType:
        return OneOf(*(field_type(member) for member in typing.get_args(hint)))

    if isinstance(hint, type):
        return Primitive(hint)

    raise TypeError('unsupported field type hint: ' + repr(hint))



def check(ftype: FieldType, value: Any) -> bool:
    """ Single dispatch point for all field types: return True if *value*
        satisfies *ftype*.
    """

    tag = ftype.tag

    if tag == 'primitive':
        return type(value) is ftype.type

    if tag == 'list':
        if type(value) is not list:
            return False
        return all(type(item) is ftype.item for item in value)

    if tag == 'pointer':
        return isinstance(value, Pointer)

    if tag == 'timestamp':
        return isinstance(value, Timestamp)

    if tag == 'one_of':
        return any(check(member, value) for member in ftype.members)

    raise TypeError('unknown field type: ' + repr(ftype))



class SchemaDescriptor:
    """ A named record shape: *fields* maps each field name to a type hint
        accepted by :func:`field_type`.
    """

    def __init__(self, name: str, fields: Mapping[str, Any]):

        if not name:
            raise ValueError('a schema must have a name')

        self.name = name
        self.fields: Dict[str, FieldType] = dict()

        for field, hint in fields.items():
            self.fields[field] = field_type(hint)


    def __repr__(self):
        return 'SchemaDescriptor(%r, %r)' % (self.name, self.fields)


# end of class SchemaDescriptor



def validate(record: Mapping[str, Any], descriptor: SchemaDescriptor) -> Dict[str, Any]:
    """ Validate *record* against *descriptor* and return the wire form of
        the record. Every declared field must be present, though it may be
        None; no undeclared field may be present. Pointer fields are moved
        into a ``pointers`` side-map and timestamp fields into a
        ``timestamps`` side-map, both in serialized form, and the schema
        name is attached under ``schema``.
    """

    declared = descriptor.fields
    missing = object()

    merged = dict(record)
    for name in declared:
        merged.setdefault(name, missing)

    for name, value in merged.items():
        if value is missing:
            raise MissingFieldError(name)

    for name in merged:
        if name not in declared:
            raise ExtraFieldError(name)

    pointers = dict()
    timestamps = dict()

    for name, ftype in declared.items():
        value = merged[name]

        if value is None:
            continue

        if not check(ftype, value):
            raise SchemaTypeError(name, ftype.names(), type(value).__name__)

        if ftype is POINTER:
            pointers[name] = value.serialize()
            del merged[name]
        elif ftype is TIMESTAMP:
            timestamps[name] = value.serialize()
            del merged[name]

    if pointers:
        merged[fields.POINTERS] = pointers
    if timestamps:
        merged[fields.TIMESTAMPS] = timestamps

    merged[fields.SCHEMA] = descriptor.name
    return merged



_wire_names = {
    str: 'String',
    int: 'Number',
    float: 'Float',
    bool: 'Boolean',
    list: 'Array',
    dict: 'Object',
}


def wire_type(ftype: FieldType) -> str:
    """ The server's name for a field type, as used when a schema is
        enforced on a keyspace.
    """

    if ftype is POINTER:
        return 'Pointer'
    if ftype is TIMESTAMP:
        return 'Timestamp'
    if ftype.tag == 'list':
        return 'Array'
    if ftype.tag == 'primitive':
        try:
            return _wire_names[ftype.type]
        except KeyError:
            pass

    raise SchemaTypeError('<schema>', tuple(_wire_names.values()) + ('Pointer', 'Timestamp'), repr(ftype))



def wire_types(descriptor: SchemaDescriptor) -> Dict[str, str]:
    return {name: wire_type(ftype) for name, ftype in descriptor.fields.items()}



class Schema:
    """ Base class for declaring record shapes in code. Subclasses set the
        ``fields`` class attribute; instantiating a subclass validates the
        keyword arguments against it::

            class Customer(Schema):
                fields = {'name': str, 'age': int, 'dep': Pointer}

            record = Customer(name='Alice', age=30, dep=Pointer('depts', 'eng-1'))
            keyspace.insert_value(record.serialize())

        The schema name defaults to the class name.
    """

    fields: Mapping[str, Any] = {}
    name = None

    def __init__(self, **values):
        self._record = validate(values, self.descriptor())


    @classmethod
    def descriptor(cls) -> SchemaDescriptor:
        try:
            return cls.__dict__['_descriptor']
        except KeyError:
            pass

        descriptor = SchemaDescriptor(cls.name or cls.__name__, cls.fields)
        cls._descriptor = descriptor
        return descriptor


    def serialize(self) -> Dict[str, Any]:
        return dict(self._record)


    def __repr__(self):
        return '%s(%r)' % (type(self).__name__, self._record)


# end of class Schema



def make_schema(name: str, fields: Mapping[str, Any]) -> type:
    """ Build a :class:`Schema` subclass at runtime.
    """

    return type(name, (Schema,), {'fields': dict(fields), 'name': name})


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
