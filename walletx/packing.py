# Copyright (c) 2018-2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

__all__ = (
    'pack_be_uint32', 'pack_be_uint128', 'pack_byte', 'unpack_be_uint32',
    'pack_uint256', 'pack_int256', 'pack_address_word', 'pack_bool_word',
    'pack_personal_message',
)


from struct import Struct

from .consts import UINT256_MAX, PERSONAL_MESSAGE_PREFIX


struct_be_I = Struct('>I')
structB = Struct('B')

pack_be_uint32 = struct_be_I.pack
pack_byte = structB.pack

unpack_be_uint32 = struct_be_I.unpack


def pack_be_uint128(n):
    '''Pack an unsigned integer as 16 big-endian bytes.'''
    return n.to_bytes(16, 'big')


# ABI words.  Every word is exactly 32 bytes, left-padded.

def pack_uint256(n):
    '''Pack an unsigned integer as a 32-byte big-endian ABI word.'''
    if not 0 <= n <= UINT256_MAX:
        raise ValueError(f'value {n} out of range for uint256')
    return n.to_bytes(32, 'big')


def pack_int256(n):
    '''Pack a signed integer as a 32-byte two's-complement ABI word.'''
    return n.to_bytes(32, 'big', signed=True)


def pack_address_word(address_bytes):
    '''Pack 20 address bytes as a 32-byte ABI word.'''
    if len(address_bytes) != 20:
        raise ValueError('address must be 20 bytes')
    return bytes(12) + bytes(address_bytes)


def pack_bool_word(value):
    return pack_uint256(1 if value else 0)


def pack_personal_message(message):
    '''Message is the raw bytes or text string to be signed as an EIP-191 personal message.
    Return it encoded as bytes to actually be hashed.'''
    # Convert text to UTF-8 and prefix with the standard prefix and the decimal length.
    if isinstance(message, str):
        message = message.encode()
    return PERSONAL_MESSAGE_PREFIX + str(len(message)).encode() + message
