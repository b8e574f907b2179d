import datetime

import pytest

from montycat.protocol import keys
from montycat.protocol.errors import NormalizationError, ValidationError
from montycat.protocol.types import Limit, Permission, Pointer, Timestamp


def test_pointer():

    pointer = Pointer('depts', 'eng-1')
    assert pointer.serialize() == ['depts', 'eng-1']
    assert pointer.resolve() == ['depts', keys.canonicalize('eng-1')]

    assert Pointer('depts', '42').resolve() == ['depts', '42']
    assert Pointer('depts', 42).resolve() == ['depts', '42']

    with pytest.raises(NormalizationError):
        Pointer('', 'eng-1')


def test_timestamp_forms():

    assert Timestamp(timestamp='2025-10-05T12:00:00Z').serialize() == '2025-10-05T12:00:00Z'
    assert Timestamp(start='a', end='b').serialize() == {'range_timestamp': ['a', 'b']}
    assert Timestamp(after='2025-10-01').serialize() == {'after_timestamp': '2025-10-01'}
    assert Timestamp(before='2025-10-01').serialize() == {'before_timestamp': '2025-10-01'}


def test_timestamp_datetime():

    instant = datetime.datetime(2025, 10, 5, 12, 34, 56, tzinfo=datetime.timezone.utc)
    assert Timestamp(timestamp=instant).serialize() == '2025-10-05T12:34:56+00:00'
    assert Timestamp(after=datetime.date(2025, 10, 1)).serialize() == {'after_timestamp': '2025-10-01'}


def test_timestamp_requires_exactly_one():

    with pytest.raises(NormalizationError):
        Timestamp()

    with pytest.raises(NormalizationError):
        Timestamp(timestamp='x', after='y')

    with pytest.raises(NormalizationError):
        Timestamp(after='x', before='y')

    with pytest.raises(NormalizationError):
        Timestamp(start='x')

    with pytest.raises(NormalizationError):
        Timestamp(end='x')


def test_limit_parse():

    assert Limit.parse(None) is None
    assert Limit.parse([]) is None
    assert Limit.parse([5, 10]).serialize() == {'start': 5, 'stop': 10}
    assert Limit.parse((0, 1)) == Limit(0, 1)
    assert Limit.parse({'start': 2, 'stop': 3}) == Limit(2, 3)

    limit = Limit(1, 2)
    assert Limit.parse(limit) is limit


def test_limit_invalid():

    for bad in ([5], [1, 2, 3], {'start': 1}, 'nope', [-1, 2], [1.5, 2], [True, 2]):
        with pytest.raises(ValidationError):
            Limit.parse(bad)


def test_permission():

    assert Permission.parse('read') is Permission.READ
    assert Permission.parse(Permission.ALL) is Permission.ALL
    assert str(Permission.WRITE) == 'write'

    with pytest.raises(ValidationError):
        Permission.parse('admin')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
