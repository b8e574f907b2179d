""" Rewrite record values into their wire form. References become
    ``[keyspace, key]`` pairs with resolved keys, temporal conditions are
    serialized in place, and any pre-assembled ``pointers`` side-map has its
    keys resolved.

    Both functions here work on a copy of their input, and either return a
    fully normalized result or raise; the input is never modified.
"""

from . import fields
from . import keys
from .errors import NormalizationError
from .types import Pointer, Timestamp


def _resolve_pair(name, pair):
    """ Validate and resolve a single ``[keyspace, key]`` pair found in a
        ``pointers`` side-map.
    """

    if isinstance(pair, Pointer):
        return pair.resolve()

    if not isinstance(pair, (list, tuple)) or len(pair) != 2:
        raise NormalizationError('pointer must be a [keyspace, key] pair, got ' + repr(pair), name)

    keyspace, raw = pair

    if not isinstance(keyspace, str) or keyspace == '':
        raise NormalizationError('pointer keyspace must be a non-empty string, got ' + repr(keyspace), name)

    if raw is None:
        raise NormalizationError('pointer key is missing', name)

    return [keyspace, keys.resolve(raw)]



def normalize(record):
    """ Normalize a single *record*, a mapping of field names to values.
        Returns a new dictionary in the same field order.
    """

    if not isinstance(record, dict):
        raise NormalizationError('record must be a mapping, got ' + type(record).__name__)

    normalized = dict()

    for name, value in record.items():
        if isinstance(value, Pointer):
            value = value.resolve()
        elif isinstance(value, Timestamp):
            value = value.serialize()

        normalized[name] = value

    try:
        pointers = normalized[fields.POINTERS]
    except KeyError:
        return normalized

    # Only a mapping of field names to pairs is a pointers side-map; any other
    # value under that name is ordinary record data.

    if isinstance(pointers, dict):
        resolved = dict()
        for name, pair in pointers.items():
            resolved[name] = _resolve_pair(name, pair)

        normalized[fields.POINTERS] = resolved

    return normalized



def split_criteria(criteria):
    """ Prepare search criteria: temporal conditions are serialized in
        place, references are moved out of the predicate map and collected
        under a ``pointers`` sub-object with their keys resolved.
    """

    if criteria is None:
        return dict()

    if not isinstance(criteria, dict):
        raise NormalizationError('search criteria must be a mapping, got ' + type(criteria).__name__)

    result = dict()
    pointers = dict()

    for name, value in criteria.items():
        if isinstance(value, Timestamp):
            result[name] = value.serialize()
        elif isinstance(value, Pointer):
            pointers[name] = value.resolve()
        else:
            result[name] = value

    if pointers:
        existing = result.get(fields.POINTERS)
        if isinstance(existing, dict):
            merged = dict()
            for name, pair in existing.items():
                merged[name] = _resolve_pair(name, pair)
            merged.update(pointers)
            pointers = merged

        result[fields.POINTERS] = pointers

    return result


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
