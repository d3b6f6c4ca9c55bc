# Copyright (c) 2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Signing of EVM transactions, messages, typed data and user operations.'''

__all__ = ('EvmSigner', )

from .bip44 import Chain
from .eip712 import hash_typed_data
from .erc4337 import ENTRY_POINT_V07, hash_user_operation
from .hashes import keccak256
from .keys import PrivateKey
from .packing import pack_personal_message
from .signature import Signature


class EvmSigner:
    '''Signs 32-byte digests with a private key.  Signatures are deterministic (RFC-6979)
    and low-S.

    The signer holds no other state; in particular it does not track nonces.
    '''

    def __init__(self, private_key):
        if not isinstance(private_key, PrivateKey):
            raise TypeError('EvmSigner requires a PrivateKey')
        self._private_key = private_key
        self._address = private_key.public_key.to_address()

    @classmethod
    def from_private_key(cls, private_key):
        '''private_key is a PrivateKey or 32 bytes.'''
        if not isinstance(private_key, PrivateKey):
            private_key = PrivateKey(private_key)
        return cls(private_key)

    @classmethod
    def from_hex(cls, hex_str):
        return cls(PrivateKey.from_hex(hex_str))

    @classmethod
    def from_account(cls, account, address_index, chain=Chain.EXTERNAL):
        '''Sign with the key at address_index of a wallet Account's chain.'''
        return cls(account.derive_key(chain, address_index))

    def __repr__(self):
        return f'EvmSigner({self._address})'

    def address(self):
        return self._address

    def public_key(self):
        return self._private_key.public_key

    def sign_hash(self, digest):
        '''Sign a 32-byte digest and return a Signature with v the recovery ID.'''
        return Signature.from_bytes(self._private_key.sign_recoverable(digest))

    def sign_transaction(self, tx):
        '''Return the Signature over an Eip1559Transaction's signing hash.'''
        tx.validate()
        return self.sign_hash(tx.signing_hash())

    def sign_and_build(self, tx):
        '''Return a SignedTransaction.'''
        return tx.sign(self)

    def sign_message(self, message):
        '''Sign text or bytes as an EIP-191 personal message.  v is 27 or 28.'''
        signature = self.sign_hash(keccak256(pack_personal_message(message)))
        return signature.with_v(signature.to_personal_v())

    def sign_typed_data(self, domain, message):
        '''Sign an EIP-712 message (an Eip712Type or a TypedData) in domain.'''
        return self.sign_hash(hash_typed_data(domain, message))

    def sign_user_operation(self, user_op, chain_id, entry_point=ENTRY_POINT_V07):
        '''Return the Signature over an ERC-4337 user operation.  Store it with
        user_op.with_signature().'''
        return self.sign_hash(hash_user_operation(user_op, entry_point, chain_id))

    def zeroize(self):
        self._private_key.zeroize()
