# Copyright (c) 2019-2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Miscellaneous functions.'''

__all__ = (
    'be_bytes_to_int', 'int_to_be_bytes', 'hex_to_bytes', 'bytes_to_hex', 'wipe',
)

import logging
from functools import partial


# Converts big-endian bytes to an integer
be_bytes_to_int = partial(int.from_bytes, byteorder='big')


def int_to_be_bytes(value, size=None):
    '''Converts an integer to a big-endian sequence of bytes'''
    if size is None:
        size = (value.bit_length() + 7) // 8
    return value.to_bytes(size, 'big')


def hex_to_bytes(text):
    '''Convert a hex string, optionally 0x-prefixed, to bytes.'''
    if not isinstance(text, str):
        raise TypeError('a string is required')
    if text[:2] in ('0x', '0X'):
        text = text[2:]
    return bytes.fromhex(text)


def bytes_to_hex(data):
    '''Return data as a 0x-prefixed lower-case hex string.'''
    return '0x' + bytes(data).hex()


def wipe(buffer):
    '''Overwrite a bytearray with zeroes.'''
    for n in range(len(buffer)):
        buffer[n] = 0


#
# Internal utilities
#

class cachedproperty:
    '''Decorates a method taking no arguments whose result never changes.  The result
    replaces the attribute on first access.'''

    def __init__(self, f):
        self.f = f

    def __get__(self, obj, type_):
        obj = obj or type_
        value = self.f(obj)
        setattr(obj, self.f.__name__, value)
        return value


class PrefixedLogger(logging.LoggerAdapter):
    '''Prepends an identifier to a logging message.'''

    def process(self, msg, kwargs):
        return f'[{self.extra}] {msg}', kwargs


def prefixed_logger(name, text):
    '''Return a logger adapter for logger name whose messages are prefixed with [text].'''
    return PrefixedLogger(logging.getLogger(name), text)
