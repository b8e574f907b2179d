""" Canonical wire form for keys. Server-issued keys are decimal strings;
    any other "custom" key chosen by an application is hashed to a stable
    decimal string before it is put on the wire.
"""

import re

import xxhash


_digits = re.compile(r'[0-9]+')


def text(key):
    """ Return the canonical textual representation of *key*. This is the
        text that gets hashed, and must not vary with locale or platform.
    """

    if isinstance(key, str):
        return key

    if isinstance(key, bool):
        return 'true' if key else 'false'

    if isinstance(key, (bytes, bytearray)):
        return bytes(key).decode('utf-8', errors='replace')

    return str(key)



def canonicalize(key):
    """ Hash an arbitrary *key* with XXH32 (seed 0) over the UTF-8 encoding
        of its canonical text, and return the unsigned decimal form of the
        hash. The result is identical for identical input on every platform.
    """

    encoded = text(key).encode('utf-8')
    return str(xxhash.xxh32_intdigest(encoded))



def canonicalize_many(keys):
    """ Canonicalize every key in the *keys* sequence, preserving order.
    """

    return [canonicalize(key) for key in keys]



def canonicalize_mapping(mapping):
    """ Return a new dictionary with every key of *mapping* canonicalized;
        the values are left untouched.
    """

    return {canonicalize(key): value for key, value in mapping.items()}



def is_numeric(raw):
    """ True if *raw* already looks like a server-issued identifier: an
        integer, or a string composed solely of ASCII digits.
    """

    if isinstance(raw, bool):
        return False

    if isinstance(raw, int):
        return True

    if isinstance(raw, str):
        return _digits.fullmatch(raw) is not None

    return False



def resolve(raw):
    """ Resolve the key half of a reference. Numeric identifiers pass
        through in their string form, everything else is canonicalized.
        Resolving an already resolved key returns it unchanged.
    """

    if is_numeric(raw):
        return str(raw)

    return canonicalize(raw)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
