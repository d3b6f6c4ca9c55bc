# Copyright (c) 2019-2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Public and Private keys.'''

__all__ = ('PrivateKey', 'PublicKey', )


from hmac import compare_digest
from os import urandom

from coincurve import PrivateKey as _CCPrivateKey, PublicKey as _CCPublicKey

from .address import Address
from .consts import CURVE_ORDER
from .errors import InvalidPrivateKey, InvalidPublicKey, InvalidSignature
from .hashes import hash160 as calc_hash160
from .misc import be_bytes_to_int, int_to_be_bytes, cachedproperty, wipe
from .networks import Bitcoin


def _to_32_bytes(value):
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError('value must have type bytes')
    if len(value) != 32:
        raise ValueError('value must be 32 bytes')
    return bytes(value)


class PrivateKey:
    '''A secp256k1 private key: a 32-byte scalar in the range [1, n-1].

    The secret is held in a private bytearray that zeroize() overwrites; this also
    happens when the key is garbage-collected.  str() and repr() never show the secret.
    '''

    def __init__(self, secret, network=None):
        '''Construct a PrivateKey from 32 big-endian bytes.

        A private key exists independently of any network.  However extended keys need
        a network for their serialization, so it is remembered here.  If client code
        does not specify one, Bitcoin is used.
        '''
        if not isinstance(secret, (bytes, bytearray)):
            raise TypeError('private key must be bytes')
        if len(secret) != 32:
            raise InvalidPrivateKey('private key must be 32 bytes')
        if not 0 < be_bytes_to_int(secret) < CURVE_ORDER:
            raise InvalidPrivateKey('private key out of range')
        self._secret = bytearray(secret)
        self._network = network or Bitcoin

    def _secp256k1_private_key(self):
        '''Construct a wrapped secp256k1 private key.'''
        try:
            return _CCPrivateKey(bytes(self._secret))
        except ValueError:
            # Only possible once the key has been zeroized
            raise InvalidPrivateKey('private key has been zeroized') from None

    # Public methods

    def __eq__(self, other):
        '''Return True if this PrivateKey is equal to another.'''
        return (isinstance(other, PrivateKey)
                and compare_digest(self._secret, other._secret))

    def __hash__(self):
        '''Hashable objects which compare equal must have the same hash value.'''
        return hash(self.public_key)

    def __str__(self):
        '''The secret is never displayed.  To get it call to_hex() explicitly.'''
        return '[REDACTED]'

    def __repr__(self):
        return f'{self.__class__.__name__}([REDACTED])'

    def __del__(self):
        self.zeroize()

    def zeroize(self):
        '''Overwrite the secret with zeroes.  The key is unusable afterwards.'''
        secret = getattr(self, '_secret', None)
        if secret is not None:
            wipe(secret)

    def network(self):
        '''The implied network.'''
        return self._network

    @cachedproperty
    def public_key(self):
        '''Return a PublicKey corresponding to this private key.'''
        return PublicKey(self._secp256k1_private_key().public_key, self._network)

    def to_int(self):
        '''Return the private key's representation as an integer.'''
        return be_bytes_to_int(self._secret)

    def to_hex(self):
        '''Return the private key's representation as a hexidecimal string.'''
        return self._secret.hex()

    def to_bytes(self):
        '''Return the private key's representation as bytes (32 bytes, big-endian).'''
        return bytes(self._secret)

    @classmethod
    def from_int(cls, value):
        '''Contruct a PrivateKey from an unsigned integer.'''
        if not 0 < value < CURVE_ORDER:
            raise InvalidPrivateKey('private key out of range')
        return cls(int_to_be_bytes(value, 32))

    @classmethod
    def from_hex(cls, hex_str):
        '''Contruct a PrivateKey from a hexadecimal string of 64 characters, optionally
        0x-prefixed.

        There is no automatic padding.'''
        if hex_str[:2] in ('0x', '0X'):
            hex_str = hex_str[2:]
        try:
            return cls(bytes.fromhex(hex_str))
        except ValueError as e:
            if isinstance(e, InvalidPrivateKey):
                raise
            raise InvalidPrivateKey('invalid hex private key') from None

    @classmethod
    def from_random(cls, *, source=urandom):
        '''Return a random, valid PrivateKey.'''
        while True:
            try:
                return cls(source(32))
            except InvalidPrivateKey:
                pass

    def add(self, value):
        '''Return a new PrivateKey instance adding value to our secret modulo the curve
        order.'''
        try:
            result = self._secp256k1_private_key().add(_to_32_bytes(value))
        except ValueError:
            raise InvalidPrivateKey('value or result out of range') from None
        return PrivateKey(result.secret, self._network)

    def sign_recoverable(self, msg_hash):
        '''Sign a 32-byte message hash and return a 65-byte recoverable signature.
        This is r and s, 32 bytes each, with a recovery ID byte appended, and from
        which the public key can be immediately recovered.

        The nonce is generated deterministically per RFC-6979 and s is in low form.
        '''
        return self._secp256k1_private_key().sign_recoverable(_to_32_bytes(msg_hash),
                                                             hasher=None)


class PublicKey:

    def __init__(self, public_key, network=None):
        '''Construct a PublicKey.

        This function is not intended to be called directly by user code; use instead one
        of the "from_" class methods or a PrivateKey's 'public_key' property.
        '''
        if not isinstance(public_key, _CCPublicKey):
            raise TypeError('PublicKey constructor requires a coincurve PublicKey')
        self._public_key = public_key
        self._network = network or Bitcoin

    # Public methods

    def __eq__(self, other):
        '''Return True if this PublicKey is equal to another.'''
        return isinstance(other, PublicKey) and self.to_bytes() == other.to_bytes()

    def __hash__(self):
        '''Hashable objects which compare equal must have the same hash value.'''
        return hash(self.to_bytes())

    def __str__(self):
        return self.to_hex()

    def __repr__(self):
        return f'PublicKey("{self.to_hex()}")'

    def network(self):
        '''The implied network.'''
        return self._network

    def to_bytes(self, *, compressed=True):
        '''Serialize a PublicKey to bytes.  The canonical form is 33-byte compressed.'''
        return self._public_key.format(compressed=compressed)

    @classmethod
    def from_bytes(cls, data):
        '''Construct a PublicKey from its serialized bytes.

        data should be bytes of length 33 (compressed) or 65 (uncompressed).'''
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError('public key must be bytes')
        if not ((len(data) == 33 and data[0] in (2, 3)) or (len(data) == 65 and data[0] == 4)):
            raise InvalidPublicKey('invalid public key encoding')
        try:
            return cls(_CCPublicKey(bytes(data)))
        except ValueError:
            raise InvalidPublicKey('invalid public key') from None

    @classmethod
    def from_recoverable_signature(cls, recoverable_sig, msg_hash):
        '''Construct a PublicKey from a 65-byte recoverable signature and the 32-byte
        message hash that was signed.'''
        if len(recoverable_sig) != 65:
            raise InvalidSignature('recoverable signature must be 65 bytes')
        try:
            public_key = _CCPublicKey.from_signature_and_message(
                bytes(recoverable_sig), _to_32_bytes(msg_hash), hasher=None)
        except ValueError:
            raise InvalidSignature('public key recovery failed') from None
        return cls(public_key)

    def to_hex(self, *, compressed=True):
        '''Convert a PublicKey to a hexadecimal string.'''
        return self.to_bytes(compressed=compressed).hex()

    @classmethod
    def from_hex(cls, hex_str):
        '''Construct a PublicKey from a hexadecimal string.'''
        return cls.from_bytes(bytes.fromhex(hex_str))

    def to_point(self):
        '''Return the PublicKey as an (x, y) point on the curve.'''
        return self._public_key.point()

    @classmethod
    def from_point(cls, x, y):
        '''Construct a PublicKey from a (x, y) point on the curve.'''
        x_bytes = int_to_be_bytes(x, 32)
        y_bytes = int_to_be_bytes(y, 32)
        return cls.from_bytes(b''.join((b'\x04', x_bytes, y_bytes)))

    def add(self, value):
        '''Return a new PublicKey instance formed by adding value*G to this one.'''
        try:
            public_key = self._public_key.add(_to_32_bytes(value))
        except ValueError:
            raise InvalidPublicKey('value or result out of range') from None
        return PublicKey(public_key, self._network)

    def verify_recoverable_signature(self, recoverable_sig, msg_hash):
        '''Verify a recoverable signature.  Return True if good otherwise False.'''
        try:
            return PublicKey.from_recoverable_signature(recoverable_sig, msg_hash) == self
        except InvalidSignature:
            return False

    def hash160(self):
        '''Return the RIPEMD-160 of the SHA-256 of the compressed serialization.'''
        return calc_hash160(self.to_bytes())

    def to_address(self):
        '''Return the EVM address of the public key.'''
        return Address.from_public_key(self)
