# Copyright (c) 2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''ERC-4337 v0.7 packed user operations.'''

__all__ = (
    'ENTRY_POINT_V07', 'PackedUserOperation', 'hash_user_operation',
    'sign_user_operation', 'verify_user_operation',
)

import attr

from .address import Address, as_address
from .consts import UINT128_MAX, UINT256_MAX
from .errors import InvalidSignature, ValidationError
from .hashes import keccak256
from .packing import pack_address_word, pack_be_uint128, pack_uint256
from .signature import Signature, recover_signer


ENTRY_POINT_V07 = '0x0000000071727De22E5E9d8BAf0edAc6f37da032'


def _uint128(name, value):
    if not 0 <= value <= UINT128_MAX:
        raise ValidationError(f'{name} out of range for uint128: {value}')
    return value


def _validate_word(instance, attribute, value):
    if len(value) != 32:
        raise ValidationError(f'{attribute.name} must be 32 bytes, not {len(value)}')


def _validate_uint128(instance, attribute, value):
    _uint128(attribute.name, value)


def _validate_nonce(instance, attribute, value):
    if not 0 <= value <= UINT256_MAX:
        raise ValidationError(f'nonce out of range: {value}')


def _signature_bytes(value):
    if isinstance(value, Signature):
        return value.with_v(value.to_personal_v()).to_bytes()
    return bytes(value)


@attr.s(slots=True, frozen=True, kw_only=True)
class PackedUserOperation:
    '''A user operation as passed to the v0.7 EntryPoint.

    account_gas_limits packs verificationGasLimit (high 16 bytes) with callGasLimit (low
    16 bytes); gas_fees packs maxPriorityFeePerGas (high) with maxFeePerGas (low).
    paymaster_and_data is empty, or a 20-byte paymaster address followed by its data.
    '''
    sender = attr.ib(converter=as_address)
    nonce = attr.ib(validator=_validate_nonce)
    init_code = attr.ib(default=b'', converter=bytes)
    call_data = attr.ib(default=b'', converter=bytes)
    account_gas_limits = attr.ib(converter=bytes, validator=_validate_word)
    pre_verification_gas = attr.ib(validator=_validate_uint128)
    gas_fees = attr.ib(converter=bytes, validator=_validate_word)
    paymaster_and_data = attr.ib(default=b'', converter=bytes)
    signature = attr.ib(default=b'', converter=_signature_bytes)

    @classmethod
    def create(cls, *, sender, nonce, verification_gas_limit, call_gas_limit,
               pre_verification_gas, max_priority_fee_per_gas, max_fee_per_gas,
               init_code=b'', call_data=b'', paymaster=None, paymaster_data=b''):
        '''Construct from unpacked gas values and an optional paymaster address.'''
        paymaster_and_data = b''
        if paymaster is not None:
            paymaster_and_data = as_address(paymaster).to_bytes() + bytes(paymaster_data)
        elif paymaster_data:
            raise ValidationError('paymaster data requires a paymaster address')
        return cls(
            sender=sender,
            nonce=nonce,
            init_code=init_code,
            call_data=call_data,
            account_gas_limits=cls.pack_gas_limits(verification_gas_limit, call_gas_limit),
            pre_verification_gas=pre_verification_gas,
            gas_fees=cls.pack_gas_fees(max_priority_fee_per_gas, max_fee_per_gas),
            paymaster_and_data=paymaster_and_data,
        )

    @staticmethod
    def pack_gas_limits(verification_gas_limit, call_gas_limit):
        return (pack_be_uint128(_uint128('verification_gas_limit', verification_gas_limit))
                + pack_be_uint128(_uint128('call_gas_limit', call_gas_limit)))

    @staticmethod
    def pack_gas_fees(max_priority_fee_per_gas, max_fee_per_gas):
        return (pack_be_uint128(_uint128('max_priority_fee_per_gas', max_priority_fee_per_gas))
                + pack_be_uint128(_uint128('max_fee_per_gas', max_fee_per_gas)))

    def verification_gas_limit(self):
        return int.from_bytes(self.account_gas_limits[:16], 'big')

    def call_gas_limit(self):
        return int.from_bytes(self.account_gas_limits[16:], 'big')

    def max_priority_fee_per_gas(self):
        return int.from_bytes(self.gas_fees[:16], 'big')

    def max_fee_per_gas(self):
        return int.from_bytes(self.gas_fees[16:], 'big')

    def has_paymaster(self):
        return bool(self.paymaster_and_data)

    def paymaster_address(self):
        '''Return the paymaster Address, or None if there are fewer than 20 bytes.'''
        if len(self.paymaster_and_data) < Address.LENGTH:
            return None
        return Address(self.paymaster_and_data[:Address.LENGTH])

    def paymaster_data(self):
        return self.paymaster_and_data[Address.LENGTH:]

    def with_signature(self, signature):
        '''Return a copy carrying signature: bytes, or a Signature, which is stored as
        r || s || v with v 27 or 28.'''
        return attr.evolve(self, signature=signature)

    def encode(self):
        '''The ABI encoding hashed to form the user operation hash.  The signature is
        not part of it.'''
        return b''.join((
            pack_address_word(self.sender.to_bytes()),
            pack_uint256(self.nonce),
            keccak256(self.init_code),
            keccak256(self.call_data),
            self.account_gas_limits,
            pack_uint256(self.pre_verification_gas),
            self.gas_fees,
            keccak256(self.paymaster_and_data),
        ))


def hash_user_operation(user_op, entry_point, chain_id):
    '''Return the userOpHash the account owner signs.  It commits to the entry point and
    the chain.'''
    return keccak256(keccak256(user_op.encode())
                     + pack_address_word(as_address(entry_point).to_bytes())
                     + pack_uint256(int(chain_id)))


def sign_user_operation(signer, user_op, entry_point, chain_id):
    return signer.sign_hash(hash_user_operation(user_op, entry_point, chain_id))


def verify_user_operation(user_op, entry_point, chain_id, signature, expected_signer):
    '''Return True if signature over the user operation was made by expected_signer.'''
    try:
        signer = recover_signer(hash_user_operation(user_op, entry_point, chain_id),
                                signature)
    except InvalidSignature:
        return False
    return signer == as_address(expected_signer)
