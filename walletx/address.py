# Copyright (c) 2019-2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#


'''EVM addresses with EIP-55 mixed-case checksums.'''

__all__ = ('Address', 'as_address', )

from .errors import InvalidAddress
from .hashes import keccak256


HEX_DIGITS = frozenset('0123456789abcdefABCDEF')


def _validate_raw(raw):
    if not isinstance(raw, (bytes, bytearray)):
        raise TypeError('address must be bytes')
    if len(raw) != Address.LENGTH:
        raise InvalidAddress(f'address must be 20 bytes, not {len(raw)}')
    return bytes(raw)


def _checksum_encode(hex_lower):
    '''Apply EIP-55 casing to 40 lower-case hex characters.'''
    nibbles = keccak256(hex_lower.encode()).hex()
    return ''.join(c.upper() if c.isalpha() and int(nibbles[n], 16) >= 8 else c
                   for n, c in enumerate(hex_lower))


class Address:
    '''A 20-byte EVM account address.'''

    LENGTH = 20

    def __init__(self, raw):
        self._raw = _validate_raw(raw)

    def __eq__(self, other):
        return isinstance(other, Address) and self._raw == other._raw

    def __hash__(self):
        return hash(self._raw)

    def __str__(self):
        return self.to_checksum_string()

    def __repr__(self):
        return f"Address('{self.to_checksum_string()}')"

    @classmethod
    def from_bytes(cls, raw):
        return cls(raw)

    @classmethod
    def from_string(cls, text, *, strict=True):
        '''Construct from a 0x-prefixed string of 40 hex characters.

        All-lowercase and all-uppercase strings carry no checksum and are accepted.  A
        mixed-case string must have a valid EIP-55 checksum unless strict is False.
        '''
        if not isinstance(text, str):
            raise TypeError('address must be a string')
        if not text.startswith(('0x', '0X')):
            raise InvalidAddress(f'address must begin with 0x: {text}')
        body = text[2:]
        if len(body) != 40 or not HEX_DIGITS.issuperset(body):
            raise InvalidAddress(f'invalid address: {text}')
        address = cls(bytes.fromhex(body))
        if strict and body not in (body.lower(), body.upper()):
            if address.to_checksum_string()[2:] != body:
                raise InvalidAddress(f'invalid EIP-55 checksum: {text}')
        return address

    @classmethod
    def from_public_key(cls, public_key):
        '''Return the address of a public key: the last 20 bytes of the Keccak-256 hash of
        the 64-byte uncompressed point.

        public_key is a PublicKey, or its 65-byte uncompressed or 64-byte raw serialization.
        '''
        if isinstance(public_key, (bytes, bytearray)):
            data = bytes(public_key)
            if len(data) == 65 and data[0] == 4:
                data = data[1:]
            elif len(data) != 64:
                raise InvalidAddress('public key must be 64 or 65 uncompressed bytes')
        else:
            data = public_key.to_bytes(compressed=False)[1:]
        return cls(keccak256(data)[12:])

    @classmethod
    def is_valid_checksum(cls, text):
        '''Return True if text is a valid address string whose casing passes EIP-55
        validation.'''
        try:
            cls.from_string(text, strict=True)
            return True
        except (InvalidAddress, TypeError):
            return False

    def to_bytes(self):
        return self._raw

    def to_hex(self):
        '''Return the lower-case 0x-prefixed form.'''
        return '0x' + self._raw.hex()

    def to_checksum_string(self):
        '''Return the EIP-55 mixed-case 0x-prefixed form.'''
        return '0x' + _checksum_encode(self._raw.hex())

    def is_zero(self):
        return not any(self._raw)


Address.ZERO = Address(bytes(Address.LENGTH))


def as_address(value):
    '''Return value as an Address.  value is an Address, a string or 20 bytes.'''
    if isinstance(value, Address):
        return value
    if isinstance(value, str):
        return Address.from_string(value)
    return Address(value)
