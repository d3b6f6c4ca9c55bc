import hashlib
import hmac
from os import urandom

import pytest

from walletx.hashes import *


cases = [
    (sha256, b'sha256',
     b'][\t\xf6\xdc\xb2\xd5:_\xff\xc6\x0cJ\xc0\xd5_\xab\xdfU`i\xd6c\x15E\xf4*\xa6\xe3P\x0f.'),
    (ripemd160, b'ripemd160',
     b'\x903\x91\xa1\xc0I\x9e\xc8\xdf\xb5\x1aSK\xa5VW\xf9|W\xd5'),
    (double_sha256, b'double_sha256',
     b'ksn\x8e\xb7\xb9\x0f\xf6\xd9\xad\x88\xd9#\xa1\xbcU(j1Bx\xce\xd5;s\xectL\xe7\xc5\xb4\x00'),
    (hash160, b'hash160',
     b'\xb7\xe2\xbdh(\x82\xa8\xbd\xfc\x10\x03\x00\xdc\xcbX\xb7\xe62\x18>'),
]


def test_hash_funcs():
    for func, case, result in cases:
        assert func(case) == result


@pytest.mark.parametrize("func, answer", (
    (sha256, 'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'),
    (sha512, 'cf83e1357eefb8bdf1542850d66d8007d620e4050b5715dc83f4a921d36ce9ce'
     '47d0d13c5d85f2b0ff8318d2877eec2f63b931bd47417a81a538327af927da3e'),
    (ripemd160, '9c1185a5c5e9fc54612808977ee8f548b2258d31'),
    (double_sha256, '5df6e0e2761359d30a8275058e299fcc0381534545f55cf43e41983f5d4c9456'),
    (hash160, 'b472a266d0bd89c13706a4132ccfb16f7c3b9fcb'),
    (keccak256, 'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'),
), ids=['sha256', 'sha512', 'ripemd160', 'double_sha256', 'hash160', 'keccak256'])
def test_empty(func, answer):
    assert func(b'').hex() == answer


def test_keccak256_is_not_sha3():
    data = b'walletX'
    assert keccak256(data) != hashlib.sha3_256(data).digest()
    assert keccak256(bytearray(data)) == keccak256(data)
    assert len(keccak256(urandom(100))) == 32


def test_against_hashlib():
    data = urandom(200)
    assert sha256(data) == hashlib.sha256(data).digest()
    assert sha512(data) == hashlib.sha512(data).digest()


def test_hmac_sha512():
    key = b'foo'
    msg = b'bar'
    assert hmac_sha512(key, msg) == hmac_digest(key, msg, hashlib.sha512)
    assert hmac_sha512(key, msg) == hmac.new(key, msg, hashlib.sha512).digest()


def test_pbkdf2_sha512():
    result = pbkdf2_sha512(b'password', b'salt', 2048)
    assert len(result) == 64
    assert result == hashlib.pbkdf2_hmac('sha512', b'password', b'salt', 2048)
    assert pbkdf2_sha512(b'password', b'salt', 1) != result
