# Copyright (c) 2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''HD wallets: a master key, its BIP44 accounts and their addresses.'''

__all__ = ('Wallet', 'Account', 'DerivedAddress', 'AddressIterator', )

import logging

from .bip32 import BIP32PrivateKey, ChildNumber
from .bip44 import Bip44Path, Chain, CoinType, Purpose
from .consts import UINT32_MAX
from .errors import InvalidDerivationPath
from .mnemonic import BIP39Mnemonic, Language
from .networks import Bitcoin


logger = logging.getLogger(__name__)


class Wallet:
    '''A master extended private key and a cache of the accounts derived from it.

    The account cache is keyed by (purpose, coin_type, account_index).  It is the only
    mutable state; callers sharing a Wallet between threads must synchronize access.
    '''

    def __init__(self, master_key):
        if not isinstance(master_key, BIP32PrivateKey):
            raise TypeError('master key must be a BIP32PrivateKey')
        self._master = master_key
        self._accounts = {}

    @classmethod
    def from_seed(cls, seed, network=Bitcoin):
        return cls(BIP32PrivateKey.from_seed(seed, network))

    @classmethod
    def from_mnemonic(cls, mnemonic, passphrase='', network=Bitcoin,
                      language=Language.ENGLISH):
        '''Construct from a BIP39Mnemonic or a phrase, which is validated in language.'''
        if not isinstance(mnemonic, BIP39Mnemonic):
            mnemonic = BIP39Mnemonic.from_phrase(mnemonic, language)
        return cls.from_seed(mnemonic.to_seed(passphrase), network)

    @classmethod
    def from_english_mnemonic(cls, phrase, passphrase='', network=Bitcoin):
        return cls.from_mnemonic(phrase, passphrase, network, Language.ENGLISH)

    def __repr__(self):
        return f'Wallet([REDACTED], {self.network()}, {len(self._accounts)} accounts)'

    def master_key(self):
        return self._master

    def network(self):
        return self._master.network()

    def get_account(self, purpose, coin_type, account_index=0):
        '''Return the account, deriving and caching it on first use.'''
        account_path = Bip44Path(purpose, coin_type, account_index)
        key = (account_path.purpose.value, account_path.coin_type.index, account_index)
        account = self._accounts.get(key)
        if account is None:
            path = account_path.account_path()
            logger.debug('deriving account %s', path)
            account = Account(self._master.derive_path(path), account_path.purpose,
                              account_path.coin_type, account_index)
            self._accounts[key] = account
        return account

    def derive_path(self, path):
        '''Return the extended private key at path from the master key.'''
        return self._master.derive_path(path)

    def derive_address(self, path):
        '''Return the DerivedAddress at a Bip44Path or BIP44 path string.'''
        if not isinstance(path, Bip44Path):
            path = Bip44Path.from_string(path)
        account = self.get_account(path.purpose, path.coin_type, path.account)
        return account.derive_address(path.chain, path.address_index)

    def cached_account_count(self):
        return len(self._accounts)

    def clear_cache(self):
        logger.debug('clearing %d cached accounts', len(self._accounts))
        self._accounts.clear()

    def zeroize(self):
        '''Zeroize the master key and all cached account keys, and empty the cache.'''
        for account in self._accounts.values():
            account.zeroize()
        self._accounts.clear()
        self._master.zeroize()


class Account:
    '''A BIP44 account: the extended private key at m / purpose' / coin_type' / account'.

    The external and internal chain keys are derived on first use and remembered.
    '''

    def __init__(self, extended_key, purpose, coin_type, account_index):
        self._key = extended_key
        self._purpose = Purpose.from_value(purpose)
        self._coin_type = CoinType.from_value(coin_type)
        self._account_index = account_index
        self._chain_keys = {}

    @classmethod
    def from_extended_key(cls, extended_key, purpose, coin_type, account_index):
        '''Wrap an existing depth-3 extended private key.'''
        if extended_key.depth() != 3:
            raise InvalidDerivationPath(f'an account key has depth 3, not '
                                        f'{extended_key.depth()}')
        return cls(extended_key, purpose, coin_type, account_index)

    def __repr__(self):
        return f"Account('{self.path()}')"

    def extended_key(self):
        return self._key

    def purpose(self):
        return self._purpose

    def coin_type(self):
        return self._coin_type

    def account_index(self):
        return self._account_index

    def network(self):
        return self._key.network()

    def path(self):
        '''Return the account's three-level DerivationPath.'''
        return Bip44Path(self._purpose, self._coin_type, self._account_index).account_path()

    def account_xpub(self):
        '''Return the account's BIP32PublicKey, for watch-only use.'''
        return self._key.public_key

    def chain_key(self, chain):
        chain = Chain.from_value(chain)
        key = self._chain_keys.get(chain)
        if key is None:
            key = self._chain_keys[chain] = self._key.child(chain.value)
        return key

    def external_chain_key(self):
        return self.chain_key(Chain.EXTERNAL)

    def internal_chain_key(self):
        return self.chain_key(Chain.INTERNAL)

    def derive_key(self, chain, address_index):
        '''Return the extended private key at address_index of chain.'''
        return self.chain_key(chain).child(ChildNumber.from_index(address_index))

    def derive_external(self, address_index):
        return self.derive_key(Chain.EXTERNAL, address_index)

    def derive_internal(self, address_index):
        return self.derive_key(Chain.INTERNAL, address_index)

    def derive_address(self, chain, address_index):
        '''Return the DerivedAddress at address_index of chain.'''
        path = Bip44Path(self._purpose, self._coin_type, self._account_index, chain,
                         address_index)
        return DerivedAddress(path, self.derive_key(path.chain, address_index))

    def derive_address_range(self, chain, start, count):
        '''Return a list of up to count consecutive DerivedAddress objects beginning at start.
        The range stops early at the last 32-bit index.'''
        stop = min(start + count, UINT32_MAX + 1)
        return [self.derive_address(chain, index) for index in range(start, stop)]

    def addresses(self, chain=Chain.EXTERNAL, start=0, max_index=None):
        '''Return an AddressIterator over chain.'''
        return AddressIterator(self, chain, start, max_index)

    def zeroize(self):
        for key in self._chain_keys.values():
            key.zeroize()
        self._chain_keys.clear()
        self._key.zeroize()


class DerivedAddress:
    '''An address-level key and the BIP44 path it was derived at.'''

    def __init__(self, path, key):
        self._path = path
        self._key = key

    def __repr__(self):
        return f"DerivedAddress('{self._path}')"

    def path(self):
        return self._path

    def key(self):
        '''The extended private key.'''
        return self._key

    def private_key(self):
        return self._key

    def public_key(self):
        return self._key.public_key

    def chain(self):
        return self._path.chain

    def index(self):
        return self._path.address_index

    def purpose(self):
        return self._path.purpose

    def coin_type(self):
        return self._path.coin_type

    def account_index(self):
        return self._path.account

    def is_external(self):
        return self._path.chain.is_external()

    def is_internal(self):
        return self._path.chain.is_internal()

    def network(self):
        return self._key.network()

    def evm_address(self):
        '''Return the EVM Address of the key.'''
        return self._key.public_key.to_address()


class AddressIterator:
    '''Lazily yields the DerivedAddress objects of one chain of an account, from a start
    index up to an optional maximum index, or the last 32-bit index.'''

    def __init__(self, account, chain=Chain.EXTERNAL, start=0, max_index=None):
        self._account = account
        self._chain = Chain.from_value(chain)
        self._index = start
        self._max_index = UINT32_MAX if max_index is None else min(max_index, UINT32_MAX)

    def __iter__(self):
        return self

    def __next__(self):
        if self._index > self._max_index:
            raise StopIteration
        result = self._account.derive_address(self._chain, self._index)
        self._index += 1
        return result

    def current_index(self):
        '''The index the next address will be derived at.'''
        return self._index

    def chain(self):
        return self._chain
