# Copyright (c) 2016-2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Cryptographic hash functions.'''

__all__ = (
    'sha256', 'sha512', 'double_sha256', 'ripemd160', 'hash160', 'keccak256',
    'hmac_digest', 'hmac_sha512', 'pbkdf2_sha512',
)

import hashlib
import hmac

from Cryptodome.Hash import RIPEMD160, keccak


_sha256 = hashlib.sha256
_sha512 = hashlib.sha512
hmac_digest = hmac.digest


def sha256(x):
    '''Simple wrapper of hashlib sha256.'''
    return _sha256(x).digest()


def sha512(x):
    '''Simple wrapper of hashlib sha512.'''
    return _sha512(x).digest()


def ripemd160(x):
    '''Simple wrapper of Cryptodome ripemd160.'''
    h = RIPEMD160.new()
    h.update(x)
    return h.digest()


def double_sha256(x):
    '''SHA-256 of SHA-256, as used by Base58Check.'''
    return sha256(sha256(x))


def hash160(x):
    '''RIPEMD-160 of SHA-256.

    Used to make BIP32 key identifiers and fingerprints from pubkeys.'''
    return ripemd160(sha256(x))


def keccak256(x):
    '''The original Keccak-256 as used by Ethereum; it is not NIST SHA3-256.'''
    return keccak.new(digest_bits=256, data=bytes(x)).digest()


def hmac_sha512(key, msg):
    return hmac_digest(key, msg, _sha512)


def pbkdf2_sha512(password, salt, iterations=2048):
    '''PBKDF2-HMAC-SHA512 with a 64-byte output.'''
    return hashlib.pbkdf2_hmac('sha512', password, salt, iterations, dklen=64)
