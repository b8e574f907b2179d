""" Decoding of response lines. The server nests JSON documents inside JSON
    strings, sometimes several levels deep; :func:`decode` unwraps all of
    them. Long runs of digits are server-issued 128-bit identifiers and are
    kept as strings so that no precision is lost.
"""

import re

from .. import json


_digits = re.compile(r'[0-9]+')

# Digit strings longer than this are identifiers, never numbers.
identifier_length = 16


def is_identifier(text):
    """ True if *text* is composed entirely of ASCII digits and is longer
        than :data:`identifier_length` characters.
    """

    return len(text) > identifier_length and _digits.fullmatch(text) is not None



def decode(data):
    """ Recursively decode *data*. Strings are parsed as JSON if possible,
        and the parsed result is decoded in turn; strings that are not JSON
        are returned unchanged, as are identifiers. Mappings and sequences
        are decoded element by element, preserving keys and order. All other
        values pass through untouched.
    """

    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode('utf-8', errors='replace')

    if isinstance(data, str):
        if is_identifier(data):
            return data

        try:
            parsed = json.loads(data)
        except (json.DecodeError, ValueError, TypeError):
            return data

        # A string must never parse to itself, or this would not terminate.

        if parsed == data:
            return data

        return decode(parsed)

    if isinstance(data, dict):
        return {key: decode(value) for key, value in data.items()}

    if isinstance(data, (list, tuple)):
        return [decode(item) for item in data]

    return data



class DecodeFailure:
    """ Delivered to a subscription callback in place of a value when a
        received line could not be decoded. The original *line* and a
        description of the *error* are retained.
    """

    def __init__(self, line, error):

        self.line = line
        self.error = error


    def __repr__(self):
        return 'DecodeFailure(%r, %r)' % (self.line, self.error)


    def __eq__(self, other):
        if not isinstance(other, DecodeFailure):
            return NotImplemented
        return self.line == other.line and self.error == other.error


    __hash__ = None


# end of class DecodeFailure


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
