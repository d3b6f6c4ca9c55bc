# Copyright (c) 2017-2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Base58 and Base58Check encoding, as used for extended key strings.'''

__all__ = (
    'base58_decode', 'base58_encode', 'base58_decode_check', 'base58_encode_check',
)

from .errors import Base58Error, InvalidChecksum
from .hashes import double_sha256
from .misc import int_to_be_bytes, be_bytes_to_int


ALPHABET = '123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz'
DIGIT_VALUES = {c: n for n, c in enumerate(ALPHABET)}
CHECKSUM_SIZE = 4


def base58_decode(txt):
    '''Decode a base58 string to bytes.  Each leading '1' is a leading zero byte.'''
    if not isinstance(txt, str):
        raise TypeError('a string is required')
    if not txt:
        raise Base58Error('string cannot be empty')

    value = 0
    for c in txt:
        digit = DIGIT_VALUES.get(c)
        if digit is None:
            raise Base58Error(f'invalid base 58 character "{c}"')
        value = value * 58 + digit

    zeroes = len(txt) - len(txt.lstrip('1'))
    return bytes(zeroes) + int_to_be_bytes(value)


def base58_encode(be_bytes):
    '''Encode bytes as a base58 string.'''
    be_bytes = bytes(be_bytes)
    value = be_bytes_to_int(be_bytes)
    digits = []
    while value:
        value, digit = divmod(value, 58)
        digits.append(ALPHABET[digit])
    zeroes = len(be_bytes) - len(be_bytes.lstrip(b'\0'))
    return '1' * zeroes + ''.join(reversed(digits))


def base58_decode_check(txt):
    '''Decode a Base58Check string and return its payload, version bytes included.'''
    be_bytes = base58_decode(txt)
    if len(be_bytes) < CHECKSUM_SIZE:
        raise Base58Error('Base58Check string is too short')
    payload, checksum = be_bytes[:-CHECKSUM_SIZE], be_bytes[-CHECKSUM_SIZE:]
    if checksum != double_sha256(payload)[:CHECKSUM_SIZE]:
        raise InvalidChecksum('invalid base 58 checksum')
    return payload


def base58_encode_check(payload):
    payload = bytes(payload)
    return base58_encode(payload + double_sha256(payload)[:CHECKSUM_SIZE])
