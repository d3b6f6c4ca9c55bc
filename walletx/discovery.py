# Copyright (c) 2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''BIP44 account discovery with a gap limit.

Whether an address has been used is decided by the caller, typically by querying a
blockchain.  Scanning proceeds index by index and stops after gap_limit consecutive
unused addresses.
'''

__all__ = (
    'AddressDiscovery', 'DerivedAddressDiscovery', 'GapLimitChecker', 'ChainScanResult',
    'AccountScanResult', 'AccountScanner', 'discover_wallet_accounts',
)

import logging
from abc import ABC, abstractmethod

import attr

from .bip44 import Chain
from .consts import DEFAULT_GAP_LIMIT, UINT32_MAX
from .misc import prefixed_logger


logger = logging.getLogger(__name__)


class AddressDiscovery(ABC):
    '''Answers whether the address at an index of one chain of one account has been used.'''

    @abstractmethod
    def is_address_used(self, address_index):
        '''Return True if the address at address_index has been used.'''


class DerivedAddressDiscovery(AddressDiscovery):
    '''Adapts a callable taking a DerivedAddress to the AddressDiscovery interface.'''

    def __init__(self, account, chain, is_used):
        self.account = account
        self.chain = Chain.from_value(chain)
        self.is_used = is_used

    def is_address_used(self, address_index):
        return bool(self.is_used(self.account.derive_address(self.chain, address_index)))


class GapLimitChecker:

    def __init__(self, gap_limit=DEFAULT_GAP_LIMIT):
        if gap_limit < 1:
            raise ValueError(f'gap limit must be positive: {gap_limit}')
        self.gap_limit = gap_limit

    def used_indices(self, discovery, start_index=0):
        '''Generate the used indices from start_index on, in order.  Generation stops after
        gap_limit consecutive unused indices, or once the last 32-bit index has been
        queried.'''
        gap = 0
        index = start_index
        while index <= UINT32_MAX and gap < self.gap_limit:
            if discovery.is_address_used(index):
                gap = 0
                yield index
            else:
                gap += 1
            index += 1

    def find_used_indices(self, discovery, start_index=0):
        return list(self.used_indices(discovery, start_index))

    def find_last_used_index(self, discovery, start_index=0):
        '''Return the highest used index, or None if no address was used.'''
        last_used = None
        for last_used in self.used_indices(discovery, start_index):
            pass
        return last_used


@attr.s(slots=True, frozen=True)
class ChainScanResult:
    chain = attr.ib(converter=Chain.from_value)
    used_indices = attr.ib(converter=tuple)

    @property
    def last_used_index(self):
        return self.used_indices[-1] if self.used_indices else None

    def is_used(self):
        return bool(self.used_indices)

    def used_count(self):
        return len(self.used_indices)


@attr.s(slots=True, frozen=True)
class AccountScanResult:
    account_index = attr.ib()
    external = attr.ib()
    internal = attr.ib()

    def is_used(self):
        '''An account is used if either of its chains has a used address.'''
        return self.external.is_used() or self.internal.is_used()

    def total_used_count(self):
        return self.external.used_count() + self.internal.used_count()


class AccountScanner:
    '''Scans accounts in order, stopping at the first with no used addresses.

    discovery_for is a callable taking (account_index, chain) and returning an
    AddressDiscovery for that chain of that account.
    '''

    def __init__(self, gap_limit=DEFAULT_GAP_LIMIT):
        self.checker = GapLimitChecker(gap_limit)

    def scan_chain(self, discovery, chain):
        return ChainScanResult(chain, self.checker.used_indices(discovery))

    def scan_account(self, discovery_for, account_index):
        account_logger = prefixed_logger(__name__, f'account {account_index}')
        results = []
        for chain in (Chain.EXTERNAL, Chain.INTERNAL):
            result = self.scan_chain(discovery_for(account_index, chain), chain)
            account_logger.debug('%s chain: %d used, last used %s', chain.name.lower(),
                                 result.used_count(), result.last_used_index)
            results.append(result)
        return AccountScanResult(account_index, *results)

    def discover_accounts(self, discovery_for, max_accounts):
        '''Return a list of AccountScanResult objects for the used accounts, scanning at
        most max_accounts accounts.'''
        accounts = []
        for account_index in range(max_accounts):
            result = self.scan_account(discovery_for, account_index)
            if not result.is_used():
                break
            accounts.append(result)
        logger.debug('discovered %d used accounts', len(accounts))
        return accounts


def discover_wallet_accounts(wallet, purpose, coin_type, is_used, max_accounts,
                             gap_limit=DEFAULT_GAP_LIMIT):
    '''Discover the used accounts of a wallet.  is_used is called with a DerivedAddress
    and returns True if it has been used.'''
    def discovery_for(account_index, chain):
        account = wallet.get_account(purpose, coin_type, account_index)
        return DerivedAddressDiscovery(account, chain, is_used)

    return AccountScanner(gap_limit).discover_accounts(discovery_for, max_accounts)
