# Copyright (c) 2019-2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''BIP32 implementation.'''

__all__ = (
    'ChildNumber', 'DerivationPath',
    'BIP32PublicKey', 'BIP32PrivateKey', 'BIP32Derivation',
    'bip32_key_from_string', 'bip32_decompose_chain_string', 'bip32_is_valid_chain_string',
    'bip32_build_chain_string', 'bip32_validate_derivation',
)

from os import urandom
import re

import attr

from .base58 import base58_decode_check, base58_encode_check
from .consts import CURVE_ORDER, HARDENED, MAX_DEPTH, UINT32_MAX
from .errors import (
    BIP32Error, InvalidSeed, InvalidPrivateKey, InvalidPublicKey, KeyOverflow,
    MaxDepthExceeded, UnsupportedHardenedFromPublic, InvalidDerivationPath,
    VersionMismatch, PrefixMismatch, MalformedMetadata,
)
from .hashes import hmac_sha512, hash160
from .keys import PrivateKey, PublicKey
from .misc import be_bytes_to_int, cachedproperty, wipe
from .networks import Bitcoin, Network
from .packing import pack_be_uint32, unpack_be_uint32, pack_byte

PART_REGEX = re.compile("([0-9]+)(['h]?)")


def _validate_index(instance, attribute, value):
    if not isinstance(value, int):
        raise TypeError('child index must be an integer')
    if not 0 <= value < HARDENED:
        raise InvalidDerivationPath(f'child index {value} out of range')


@attr.s(slots=True, frozen=True, repr=False, order=True)
class ChildNumber:
    '''A child index below 2^31 and whether it is hardened.  On the wire a hardened index
    has 2^31 added.'''
    index = attr.ib(validator=_validate_index)
    hardened = attr.ib(default=False, converter=bool)

    @classmethod
    def from_index(cls, n):
        '''Construct from a wire index in the range [0, 2^32).'''
        if not isinstance(n, int):
            raise TypeError('child number must be an integer')
        if not 0 <= n <= UINT32_MAX:
            raise InvalidDerivationPath(f'invalid child number: {n}')
        return cls(n & (HARDENED - 1), n >= HARDENED)

    def to_index(self):
        '''Return the wire index.'''
        return self.index + HARDENED if self.hardened else self.index

    def is_hardened(self):
        return self.hardened

    def is_normal(self):
        return not self.hardened

    def next(self):
        '''Return the following child number of the same kind.'''
        if self.index == HARDENED - 1:
            raise KeyOverflow('out of BIP32 derivations')
        return ChildNumber(self.index + 1, self.hardened)

    def __str__(self):
        return f"{self.index}'" if self.hardened else str(self.index)

    def __repr__(self):
        return f'ChildNumber({self})'


def _child_number(n):
    if isinstance(n, ChildNumber):
        return n
    return ChildNumber.from_index(n)


@attr.s(slots=True, frozen=True, repr=False)
class DerivationPath:
    '''A sequence of child numbers.  The empty path refers to the master key.'''
    child_numbers = attr.ib(converter=tuple)

    def __attrs_post_init__(self):
        if len(self.child_numbers) > MAX_DEPTH:
            raise MaxDepthExceeded(f'derivation path longer than {MAX_DEPTH} levels')
        if not all(isinstance(cn, ChildNumber) for cn in self.child_numbers):
            raise TypeError('derivation path must contain ChildNumber objects')

    @classmethod
    def from_string(cls, text):
        '''Parse a path such as m/44'/0'/0'/0/7.  Hardened levels are marked by ' or h.'''
        if not isinstance(text, str):
            raise TypeError(f'path {text} must be a string')

        parts = text.split('/')
        if parts[0] != 'm':
            raise InvalidDerivationPath(f'invalid derivation path: {text}')
        if len(parts) - 1 > MAX_DEPTH:
            raise MaxDepthExceeded(f'derivation path longer than {MAX_DEPTH} levels')

        result = []
        for part in parts[1:]:
            match = PART_REGEX.fullmatch(part)
            if not match:
                raise InvalidDerivationPath(f'invalid derivation path: {text}')
            value = int(match.group(1))
            if value >= HARDENED:
                raise InvalidDerivationPath(f'invalid derivation path: {text}')
            result.append(ChildNumber(value, bool(match.group(2))))
        return cls(result)

    @classmethod
    def from_indices(cls, indices):
        '''Construct from wire indices.'''
        return cls(_child_number(n) for n in indices)

    @classmethod
    def master(cls):
        return cls(())

    def to_indices(self):
        '''Return a list of wire indices.'''
        return [cn.to_index() for cn in self.child_numbers]

    def child(self, n):
        '''Return the path extended by one level.'''
        return DerivationPath(self.child_numbers + (_child_number(n), ))

    def parent(self):
        '''Return the path one level up, or None for the master path.'''
        if not self.child_numbers:
            return None
        return DerivationPath(self.child_numbers[:-1])

    def is_master(self):
        return not self.child_numbers

    def depth(self):
        return len(self.child_numbers)

    def contains_hardened(self):
        return any(cn.hardened for cn in self.child_numbers)

    def __iter__(self):
        return iter(self.child_numbers)

    def __len__(self):
        return len(self.child_numbers)

    def __getitem__(self, item):
        return self.child_numbers[item]

    def __str__(self):
        return '/'.join(['m'] + [str(cn) for cn in self.child_numbers])

    def __repr__(self):
        return f"DerivationPath('{self}')"


def _derivation_path(path):
    if isinstance(path, DerivationPath):
        return path
    if isinstance(path, str):
        return DerivationPath.from_string(path)
    return DerivationPath.from_indices(path)


@attr.s(slots=True, frozen=True, repr=False)
class BIP32Derivation:
    '''Metadata about a BIP32 derivation.'''
    chain_code = attr.ib()
    child_number = attr.ib()
    depth = attr.ib()
    parent_fingerprint = attr.ib()

    @classmethod
    def master(cls, chain_code):
        return cls(chain_code, ChildNumber(0), 0, bytes(4))

    def is_master(self):
        return self.depth == 0

    def extended_key(self, network, raw_serkey):
        '''Return the 78-byte extended key bytes.'''
        if len(raw_serkey) == 32:
            raw_serkey = b'\0' + raw_serkey
            ver_bytes = network.xprv_verbytes
        else:
            ver_bytes = network.xpub_verbytes

        assert len(raw_serkey) == 33

        return b''.join((
            ver_bytes,
            pack_byte(self.depth),
            self.parent_fingerprint,
            pack_be_uint32(self.child_number.to_index()),
            self.chain_code,
            raw_serkey,
        ))

    def child(self, chain_code, child_number, parent_fingerprint):
        if self.depth >= MAX_DEPTH:
            raise MaxDepthExceeded(f'cannot derive beyond depth {MAX_DEPTH}')
        return BIP32Derivation(chain_code, child_number, self.depth + 1, parent_fingerprint)

    def __repr__(self):
        return (f'BIP32Derivation(chain_code=bytes.fromhex("{self.chain_code.hex()}"), '
                f'child_number={self.child_number}, depth={self.depth}, '
                f'parent_fingerprint=bytes.fromhex("{self.parent_fingerprint.hex()}"))')


def _ckd_hmac(chain_code, msg, child_number):
    '''Return the (IL, IR) halves of the CKD HMAC as bytearrays.  Raises KeyOverflow if IL
    is not below the curve order.'''
    digest = bytearray(hmac_sha512(chain_code, msg))
    IL, IR = digest[:32], digest[32:]
    wipe(digest)
    if be_bytes_to_int(IL) >= CURVE_ORDER:
        wipe(IL)
        raise KeyOverflow(f'invalid child key at index {child_number}')
    return IL, IR


class _ExtendedKeyMixin:
    '''Methods common to extended private and public keys.'''

    def derivation(self):
        '''Return a BIP32 derivation object.'''
        return self._derivation

    def chain_code(self):
        return self._derivation.chain_code

    def depth(self):
        return self._derivation.depth

    def child_number(self):
        return self._derivation.child_number

    def parent_fingerprint(self):
        return self._derivation.parent_fingerprint

    def is_master(self):
        return self._derivation.is_master()

    def to_extended_key_string(self, network=None):
        '''Return an extended key as a base58 string.  If network is given its version bytes
        are used instead of those of the key's own network.'''
        return base58_encode_check(self._extended_key(network))

    def derive_path(self, path):
        '''Derive the key at path, relative to this key.  path is a DerivationPath, a path
        string or an iterable of child numbers.

        Raises KeyOverflow if any step yields an invalid key.'''
        key = self
        for child_number in _derivation_path(path):
            key = key.child(child_number)
        return key

    def derive_path_safe(self, path):
        '''As for derive_path() but each step moves on to the next index if the derivation
        is invalid.'''
        key = self
        for child_number in _derivation_path(path):
            key = key.child_safe(child_number)
        return key

    def child_safe(self, n):
        '''Return a child but increment n if the child derivation is invalid.'''
        child_number = _child_number(n)
        while True:
            try:
                return self.child(child_number)
            except KeyOverflow:
                child_number = child_number.next()

    @classmethod
    def from_extended_key_string(cls, text, network=None):
        '''Parse an extended key string, checking it has the type of this class, and if
        network is given, that it belongs to that network.'''
        key = bip32_key_from_string(text)
        if not isinstance(key, cls):
            raise VersionMismatch(f'version bytes are not those of a {cls.__name__}')
        if network is not None and key.network() is not network:
            raise VersionMismatch(f'extended key is for {key.network()}, not {network}')
        return key


class BIP32PrivateKey(_ExtendedKeyMixin, PrivateKey):
    '''A BIP32 private key.

    Intended to be constructed in one of the following ways:
       - from a string via bip32_key_from_string() or from_extended_key_string()
       - the classmethod from_seed
       - from an existing instance with the child() function
    '''
    def __init__(self, secret, derivation, network):
        super().__init__(secret, network)
        self._derivation = derivation

    def __eq__(self, other):
        return (isinstance(other, BIP32PrivateKey) and super().__eq__(other)
                and self._derivation == other._derivation and self._network is other._network)

    def __hash__(self):
        return hash((self.public_key.to_bytes(), self._derivation))

    def _extended_key(self, network=None):
        '''Return a raw extended private key.'''
        return self._derivation.extended_key(network or self._network, bytes(self._secret))

    @classmethod
    def from_seed(cls, seed, network=Bitcoin):
        '''Return the master key for a seed of 16 to 64 bytes.'''
        if not isinstance(seed, (bytes, bytearray)):
            raise TypeError('seed must be bytes')
        if not 16 <= len(seed) <= 64:
            raise InvalidSeed(f'seed must be 16 to 64 bytes, not {len(seed)}')
        # This hard-coded message string seems to be network-independent...
        digest = bytearray(hmac_sha512(b'Bitcoin seed', seed))
        privkey, chain_code = digest[:32], bytes(digest[32:])
        try:
            return cls(privkey, BIP32Derivation.master(chain_code), network)
        except InvalidPrivateKey:
            raise InvalidSeed('seed yields an invalid master key') from None
        finally:
            wipe(privkey)
            wipe(digest)

    @classmethod
    def from_random(cls, network=Bitcoin, *, source=urandom):
        '''Return a random, valid master key.'''
        while True:
            try:
                return cls.from_seed(source(64), network)
            except InvalidSeed:
                pass

    @cachedproperty
    def public_key(self):
        '''Return the corresponding BIP32PublicKey object.'''
        return BIP32PublicKey(self._secp256k1_private_key().public_key, self._derivation,
                              self._network)

    def child(self, n):
        '''Return the derived child extended private key at index n, a ChildNumber or a wire
        index.

        Raises KeyOverflow in the rare case the index gives an invalid key.  The caller should
        move on to the next index; see child_safe().
        '''
        child_number = _child_number(n)
        if self._derivation.depth >= MAX_DEPTH:
            raise MaxDepthExceeded(f'cannot derive beyond depth {MAX_DEPTH}')

        if child_number.hardened:
            serkey = b'\0' + bytes(self._secret)
        else:
            serkey = self.public_key.to_bytes()

        msg = serkey + pack_be_uint32(child_number.to_index())
        IL, IR = _ckd_hmac(self._derivation.chain_code, msg, child_number)
        try:
            child_key = self.add(IL)
        except InvalidPrivateKey:
            raise KeyOverflow(f'invalid child key at index {child_number}') from None
        finally:
            wipe(IL)
        child_derivation = self._derivation.child(bytes(IR), child_number, self.fingerprint())
        try:
            return BIP32PrivateKey(child_key._secret, child_derivation, self._network)
        finally:
            child_key.zeroize()

    def identifier(self):
        '''Return the key's identifier as 20 bytes.'''
        return self.public_key.identifier()

    def fingerprint(self):
        '''Return the key's fingerprint as 4 bytes.'''
        return self.public_key.fingerprint()

    def __repr__(self):
        return f'BIP32PrivateKey([REDACTED], {self._derivation.depth}, {self._network})'


class BIP32PublicKey(_ExtendedKeyMixin, PublicKey):
    '''A BIP32 public key.

    Intended to be constructed in one of the following ways:
       - from a string via bip32_key_from_string() or from_extended_key_string()
       - from an existing instance with the child() function
       - from a BIP32PrivateKey via its public_key attribute
    '''

    def __init__(self, public_key, derivation, network):
        if isinstance(public_key, PublicKey):
            public_key = public_key._public_key
        super().__init__(public_key, network)
        self._derivation = derivation

    def __eq__(self, other):
        return (isinstance(other, BIP32PublicKey) and super().__eq__(other)
                and self._derivation == other._derivation and self._network is other._network)

    def __hash__(self):
        return hash((self.to_bytes(), self._derivation))

    def _extended_key(self, network=None):
        '''Return a raw extended public key.'''
        return self._derivation.extended_key(network or self._network, self.to_bytes())

    def child(self, n):
        '''Return the derived child extended public key at index n.

        Raises UnsupportedHardenedFromPublic for hardened indices, and KeyOverflow in the
        rare case the index gives an invalid key.'''
        child_number = _child_number(n)
        if child_number.hardened:
            raise UnsupportedHardenedFromPublic(
                f'cannot derive hardened child {child_number} from a public key')
        if self._derivation.depth >= MAX_DEPTH:
            raise MaxDepthExceeded(f'cannot derive beyond depth {MAX_DEPTH}')

        msg = self.to_bytes() + pack_be_uint32(child_number.to_index())
        IL, IR = _ckd_hmac(self._derivation.chain_code, msg, child_number)
        try:
            public_key = self.add(IL)
        except InvalidPublicKey:
            raise KeyOverflow(f'invalid child key at index {child_number}') from None
        child_derivation = self._derivation.child(bytes(IR), child_number, self.fingerprint())
        return BIP32PublicKey(public_key, child_derivation, self._network)

    def identifier(self):
        '''Return the key's identifier as 20 bytes.'''
        return hash160(self.to_bytes())

    def fingerprint(self):
        '''Return the key's fingerprint as 4 bytes.'''
        return self.identifier()[:4]

    def __str__(self):
        return self.to_extended_key_string()

    def __repr__(self):
        return f'BIP32PublicKey("{self.to_extended_key_string()}")'


def _from_extended_key(ekey):
    '''Return a BIP32PublicKey or BIP32PrivateKey from raw extended key bytes.'''
    if len(ekey) != 78:
        raise BIP32Error('extended key must have length 78')

    network, is_public_key = Network.lookup_xver_bytes(ekey[:4])
    depth = ekey[4]
    parent_fingerprint = ekey[5:9]
    n, = unpack_be_uint32(ekey[9:13])
    chain_code = ekey[13:45]
    key_data = ekey[45:]

    prefix = key_data[0]
    if is_public_key:
        if prefix == 0:
            raise PrefixMismatch('private key data in an extended public key')
        if prefix not in (2, 3):
            raise InvalidPublicKey(f'invalid extended public key prefix byte {prefix}')
    else:
        if prefix in (2, 3):
            raise PrefixMismatch('public key data in an extended private key')
        if prefix != 0:
            raise InvalidPrivateKey(f'invalid extended private key prefix byte {prefix}')

    if depth == 0:
        if parent_fingerprint != bytes(4):
            raise MalformedMetadata('master key with non-zero parent fingerprint')
        if n != 0:
            raise MalformedMetadata('master key with non-zero child number')

    derivation = BIP32Derivation(bytes(chain_code), ChildNumber.from_index(n), depth,
                                 bytes(parent_fingerprint))
    if is_public_key:
        return BIP32PublicKey(PublicKey.from_bytes(key_data), derivation, network)
    return BIP32PrivateKey(key_data[1:], derivation, network)


def bip32_key_from_string(ekey_str):
    '''Given an extended key string, such as

    xpub6BsnM1W2Y7qLMiuhi7f7dbAwQZ5Cz5gYJCRzTNainXzQXYjFwtuQXHd
    3qfi3t3KJtHxshXezfjft93w4UE7BGMtKwhqEHae3ZA7d823DVrL

    return a BIP32PublicKey or BIP32PrivateKey.
    '''
    return _from_extended_key(base58_decode_check(ekey_str))


def bip32_decompose_chain_string(chain_str):
    '''Given a chain string return a list of unsigned integers.

       For example:  m/1/2'/3'/0  -> [1, 0x80000002, 0x800000003, 0]
                     m            -> []

       The chain string must be 'm' or begin with 'm/'.
    '''
    return DerivationPath.from_string(chain_str).to_indices()


def bip32_is_valid_chain_string(chain_str):
    '''Return True if chain_str is a valid BIP32 chain string.'''
    try:
        bip32_decompose_chain_string(chain_str)
        return True
    except BIP32Error:
        return False


def bip32_validate_derivation(derivation):
    '''Validate if derivation, an iterable of integers, is a valid BIP32 derivation.

    Returns the derivation as a list of integers.  Raises: InvalidDerivationPath, TypeError.
    '''
    result = list(derivation)
    for n in result:
        if not isinstance(n, int):
            raise TypeError('derivation must be a sequence of ints')
        if not 0 <= n <= UINT32_MAX:
            raise InvalidDerivationPath(f'invalid child number: {n}')
    return result


def bip32_build_chain_string(derivation):
    '''Given an iterable of unsigned integers, return a chain string.  This is the inverse of
       the bip32_decompose_chain_string() function.

       For example:  [1, 0x80000002, 0x800000003, 0] -> m/1/2'/3'/0
                     []                              -> m
    '''
    return str(DerivationPath.from_indices(bip32_validate_derivation(derivation)))
