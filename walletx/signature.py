# Copyright (c) 2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Recoverable ECDSA signatures as used by EVM chains.'''

__all__ = (
    'Signature', 'recover_public_key', 'recover_signer', 'recover_message_signer',
)

import attr

from .consts import CURVE_ORDER, HALF_CURVE_ORDER
from .errors import InvalidSignature
from .hashes import keccak256
from .keys import PublicKey
from .misc import be_bytes_to_int, bytes_to_hex, int_to_be_bytes
from .packing import pack_personal_message


def _recovery_id(v):
    if 0 <= v < 4:
        return v
    if v in (27, 28):
        return v - 27
    if v >= 35:
        return (v - 35) & 1
    raise InvalidSignature(f'invalid signature v: {v}')


def _validate_scalar(instance, attribute, value):
    if not 0 < value < CURVE_ORDER:
        raise InvalidSignature(f'signature {attribute.name} out of range')


def _validate_v(instance, attribute, value):
    _recovery_id(value)


@attr.s(slots=True, frozen=True, repr=False)
class Signature:
    '''An ECDSA signature (r, s) with a recovery value v.

    v is normally the recovery ID, 0 or 1.  The Ethereum forms 27 / 28 and the EIP-155
    form chain_id * 2 + 35 + recovery ID are understood by recovery_id().
    '''
    r = attr.ib(validator=_validate_scalar)
    s = attr.ib(validator=_validate_scalar)
    v = attr.ib(default=0, validator=_validate_v)

    @classmethod
    def from_bytes(cls, data):
        '''Parse 65 bytes r || s || v.  A high s is replaced with n - s and the parity of
        the recovery ID flipped, so the result is always low-S.'''
        if len(data) != 65:
            raise InvalidSignature(f'signature must be 65 bytes, not {len(data)}')
        return cls.from_rsv(be_bytes_to_int(data[:32]), be_bytes_to_int(data[32:64]), data[64])

    @classmethod
    def from_rsv(cls, r, s, v):
        '''As from_bytes() but from integers.'''
        if HALF_CURVE_ORDER < s < CURVE_ORDER:
            s = CURVE_ORDER - s
            v = v - 1 if _recovery_id(v) & 1 else v + 1
        return cls(r, s, v)

    @classmethod
    def from_hex(cls, text):
        if text[:2] in ('0x', '0X'):
            text = text[2:]
        try:
            data = bytes.fromhex(text)
        except ValueError:
            raise InvalidSignature('invalid hex signature') from None
        return cls.from_bytes(data)

    def __repr__(self):
        return f'Signature(r=0x{self.r:064x}, s=0x{self.s:064x}, v={self.v})'

    def r_bytes(self):
        return int_to_be_bytes(self.r, 32)

    def s_bytes(self):
        return int_to_be_bytes(self.s, 32)

    def to_bytes(self):
        '''Return the 65-byte r || s || v serialization.  v must fit in a byte.'''
        if self.v > 255:
            raise InvalidSignature(f'v of {self.v} does not fit in a byte')
        return self.r_bytes() + self.s_bytes() + bytes([self.v])

    def to_recoverable_bytes(self):
        '''Return r || s || recovery ID, the form public key recovery expects.'''
        return self.r_bytes() + self.s_bytes() + bytes([self.recovery_id()])

    def to_hex(self):
        return bytes_to_hex(self.to_bytes())

    def recovery_id(self):
        return _recovery_id(self.v)

    def to_eip155_v(self, chain_id):
        '''Return v in the legacy EIP-155 replay-protected form.'''
        return self.recovery_id() + int(chain_id) * 2 + 35

    def to_personal_v(self):
        '''Return v as 27 or 28, the form used by personal_sign and ecrecover.'''
        return self.recovery_id() + 27

    def with_v(self, v):
        return attr.evolve(self, v=v)

    def is_low_s(self):
        return self.s <= HALF_CURVE_ORDER


def recover_public_key(digest, signature):
    '''Return the PublicKey that produced signature over the 32-byte digest.'''
    return PublicKey.from_recoverable_signature(signature.to_recoverable_bytes(), digest)


def recover_signer(digest, signature):
    '''Return the Address that produced signature over the 32-byte digest.'''
    return recover_public_key(digest, signature).to_address()


def recover_message_signer(message, signature):
    '''Return the Address that signed message as an EIP-191 personal message.'''
    return recover_signer(keccak256(pack_personal_message(message)), signature)
