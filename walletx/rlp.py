# Copyright (c) 2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Recursive Length Prefix serialization.

An item is a byte string or a list of items.  Non-negative integers are encoded as their
minimal big-endian byte string; zero is the empty string.
'''

__all__ = ('rlp_encode', 'rlp_decode', 'rlp_int', 'read_rlp_item', )

from io import BytesIO

from .errors import RLPError
from .misc import be_bytes_to_int, int_to_be_bytes


def _pack_length(length, offset):
    if length < 56:
        return bytes([offset + length])
    length_bytes = int_to_be_bytes(length)
    return bytes([offset + 55 + len(length_bytes)]) + length_bytes


def rlp_encode(item):
    '''Return the RLP encoding of item: bytes, a str (UTF-8 encoded), a non-negative
    integer, or a list or tuple of items.'''
    if isinstance(item, (list, tuple)):
        payload = b''.join(rlp_encode(part) for part in item)
        return _pack_length(len(payload), 0xc0) + payload
    if isinstance(item, bool):
        raise TypeError('cannot RLP encode a bool')
    if isinstance(item, int):
        if item < 0:
            raise ValueError(f'cannot RLP encode negative integer {item}')
        item = int_to_be_bytes(item)
    elif isinstance(item, str):
        item = item.encode()
    elif isinstance(item, (bytes, bytearray)):
        item = bytes(item)
    else:
        raise TypeError(f'cannot RLP encode {type(item).__name__}')
    if len(item) == 1 and item[0] < 0x80:
        return item
    return _pack_length(len(item), 0x80) + item


def rlp_int(data):
    '''Interpret a decoded byte string as an integer.  Leading zeroes are rejected.'''
    if not isinstance(data, bytes):
        raise RLPError('expected an RLP byte string, not a list')
    if data[:1] == b'\0':
        raise RLPError('integer has leading zero bytes')
    return be_bytes_to_int(data)


def _read_exactly(read, n):
    result = read(n)
    if len(result) != n:
        raise RLPError(f'RLP item requires {n:,d} bytes, only {len(result):,d} remain')
    return result


def _read_length(read, prefix, offset):
    '''Return the payload length of an item whose prefix byte is prefix.'''
    if prefix - offset < 56:
        return prefix - offset
    length_bytes = _read_exactly(read, prefix - offset - 55)
    length = be_bytes_to_int(length_bytes)
    if length_bytes[0] == 0 or length < 56:
        raise RLPError('non-canonical RLP length')
    return length


def read_rlp_item(read):
    '''Read one RLP item from a stream.  Byte strings are returned as bytes, lists as
    lists.'''
    prefix = _read_exactly(read, 1)[0]
    if prefix < 0x80:
        return bytes([prefix])
    if prefix < 0xc0:
        data = _read_exactly(read, _read_length(read, prefix, 0x80))
        if len(data) == 1 and data[0] < 0x80:
            raise RLPError('non-canonical RLP single byte')
        return data
    data = _read_exactly(read, _read_length(read, prefix, 0xc0))
    payload = BytesIO(data)
    items = []
    while payload.tell() < len(data):
        items.append(read_rlp_item(payload.read))
    return items


def rlp_decode(data):
    '''Decode a complete RLP encoding.  Trailing bytes are an error.'''
    stream = BytesIO(data)
    item = read_rlp_item(stream.read)
    if stream.read(1):
        raise RLPError('trailing bytes after RLP item')
    return item
