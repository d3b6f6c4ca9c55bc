# Copyright (c) 2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''EIP-1559 (type 2) transactions.'''

__all__ = ('AccessListItem', 'Eip1559Transaction', 'SignedTransaction', )

import attr

from .address import as_address
from .consts import TRANSFER_GAS, UINT256_MAX
from .errors import RLPError, ValidationError
from .hashes import keccak256
from .misc import bytes_to_hex, hex_to_bytes
from .rlp import rlp_decode, rlp_encode, rlp_int
from .signature import Signature, recover_signer


UINT64_MAX = (1 << 64) - 1


def _optional_address(value):
    return None if value is None else as_address(value)


def _storage_keys(keys):
    keys = tuple(bytes(key) for key in keys)
    if any(len(key) != 32 for key in keys):
        raise ValidationError('access list storage keys must be 32 bytes')
    return keys


@attr.s(slots=True, frozen=True)
class AccessListItem:
    '''An address and the storage slots of it a transaction will touch.'''
    address = attr.ib(converter=as_address)
    storage_keys = attr.ib(default=(), converter=_storage_keys)

    def to_rlp(self):
        return [self.address.to_bytes(), list(self.storage_keys)]

    @classmethod
    def from_rlp(cls, item):
        if not isinstance(item, list) or len(item) != 2 or not isinstance(item[1], list):
            raise RLPError('malformed access list item')
        return cls(item[0], item[1])


def _access_list(items):
    return tuple(item if isinstance(item, AccessListItem) else AccessListItem(*item)
                 for item in items)


def _check_range(name, value, limit):
    if not isinstance(value, int) or not 0 <= value <= limit:
        raise ValidationError(f'{name} out of range: {value}')


@attr.s(slots=True, frozen=True, kw_only=True)
class Eip1559Transaction:
    '''An unsigned EIP-1559 transaction.  Construction validates it.

    to is None for contract creation.  Fees and value are in wei.
    '''
    TX_TYPE = 2

    chain_id = attr.ib(converter=int)
    nonce = attr.ib()
    max_priority_fee_per_gas = attr.ib()
    max_fee_per_gas = attr.ib()
    gas_limit = attr.ib()
    to = attr.ib(default=None, converter=_optional_address)
    value = attr.ib(default=0)
    data = attr.ib(default=b'', converter=bytes)
    access_list = attr.ib(default=(), converter=_access_list)

    def __attrs_post_init__(self):
        self.validate()

    def validate(self):
        '''Raise ValidationError if the transaction is not well-formed.'''
        _check_range('chain_id', self.chain_id, UINT64_MAX)
        if self.chain_id == 0:
            raise ValidationError('chain_id must be positive')
        _check_range('nonce', self.nonce, UINT64_MAX)
        _check_range('gas_limit', self.gas_limit, UINT64_MAX)
        _check_range('max_priority_fee_per_gas', self.max_priority_fee_per_gas, UINT256_MAX)
        _check_range('max_fee_per_gas', self.max_fee_per_gas, UINT256_MAX)
        _check_range('value', self.value, UINT256_MAX)
        if self.max_fee_per_gas < self.max_priority_fee_per_gas:
            raise ValidationError('max_fee_per_gas must be >= max_priority_fee_per_gas')
        if self.gas_limit < TRANSFER_GAS:
            raise ValidationError(f'gas_limit must be at least {TRANSFER_GAS:,d}, '
                                  f'got {self.gas_limit:,d}')

    def is_contract_creation(self):
        return self.to is None

    def is_transfer(self):
        '''True for a plain value transfer: a recipient and no call data.'''
        return self.to is not None and not self.data

    def rlp_fields(self):
        return [
            self.chain_id,
            self.nonce,
            self.max_priority_fee_per_gas,
            self.max_fee_per_gas,
            self.gas_limit,
            b'' if self.to is None else self.to.to_bytes(),
            self.value,
            self.data,
            [item.to_rlp() for item in self.access_list],
        ]

    def encode_unsigned(self):
        '''The type byte followed by the RLP of the unsigned fields.'''
        return bytes([self.TX_TYPE]) + rlp_encode(self.rlp_fields())

    def signing_hash(self):
        return keccak256(self.encode_unsigned())

    def sign(self, signer):
        '''Sign with an EvmSigner and return a SignedTransaction.'''
        return SignedTransaction(self, signer.sign_transaction(self))

    @classmethod
    def from_rlp_fields(cls, fields):
        if len(fields) != 9:
            raise RLPError(f'an EIP-1559 transaction has 9 fields, not {len(fields)}')
        (chain_id, nonce, max_priority_fee_per_gas, max_fee_per_gas, gas_limit, to,
         value, data, access_list) = fields
        if not isinstance(access_list, list):
            raise RLPError('access list must be an RLP list')
        return cls(
            chain_id=rlp_int(chain_id),
            nonce=rlp_int(nonce),
            max_priority_fee_per_gas=rlp_int(max_priority_fee_per_gas),
            max_fee_per_gas=rlp_int(max_fee_per_gas),
            gas_limit=rlp_int(gas_limit),
            to=to or None,
            value=rlp_int(value),
            data=data,
            access_list=[AccessListItem.from_rlp(item) for item in access_list],
        )


@attr.s(slots=True, frozen=True)
class SignedTransaction:
    '''A transaction with its signature, ready for eth_sendRawTransaction.'''
    transaction = attr.ib()
    signature = attr.ib()

    def encode(self):
        '''0x02 || RLP(unsigned fields + [y_parity, r, s]).  r and s are encoded as
        minimal integers.'''
        sig = self.signature
        fields = self.transaction.rlp_fields() + [sig.recovery_id(), sig.r, sig.s]
        return bytes([self.transaction.TX_TYPE]) + rlp_encode(fields)

    def to_raw_transaction(self):
        '''The encoding as a 0x-prefixed hex string.'''
        return bytes_to_hex(self.encode())

    def tx_hash(self):
        return keccak256(self.encode())

    def tx_hash_hex(self):
        return bytes_to_hex(self.tx_hash())

    def recover_signer(self):
        '''Return the Address that signed the transaction.'''
        return recover_signer(self.transaction.signing_hash(), self.signature)

    @classmethod
    def from_raw(cls, raw):
        '''Parse a signed transaction from bytes or a 0x-prefixed hex string.'''
        if isinstance(raw, str):
            raw = hex_to_bytes(raw)
        if raw[:1] != bytes([Eip1559Transaction.TX_TYPE]):
            raise RLPError('not an EIP-1559 transaction')
        fields = rlp_decode(raw[1:])
        if not isinstance(fields, list) or len(fields) != 12:
            raise RLPError('a signed EIP-1559 transaction has 12 fields')
        y_parity = rlp_int(fields[9])
        if y_parity > 1:
            raise RLPError(f'invalid y parity: {y_parity}')
        signature = Signature(rlp_int(fields[10]), rlp_int(fields[11]), y_parity)
        return cls(Eip1559Transaction.from_rlp_fields(fields[:9]), signature)
