# Copyright (c) 2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''BIP44 paths: m / purpose' / coin_type' / account' / chain / address_index.'''

__all__ = ('Purpose', 'Chain', 'CoinType', 'Bip44Path', )

from enum import IntEnum
import re

import attr

from .bip32 import ChildNumber, DerivationPath
from .consts import HARDENED, UINT32_MAX
from .errors import (
    InvalidPurpose, InvalidCoinType, InvalidChain, InvalidAccount, InvalidDerivationPath,
)


LEVEL_REGEX = re.compile("([0-9]+)(['h]?)")


class Purpose(IntEnum):
    '''The first level of a BIP44-style path.'''
    BIP44 = 44
    BIP49 = 49
    BIP84 = 84
    BIP86 = 86

    @classmethod
    def from_value(cls, value):
        try:
            return cls(value)
        except ValueError:
            raise InvalidPurpose(f'invalid purpose: {value}') from None

    def display_name(self):
        return f'BIP-{self.value}'

    def description(self):
        return _PURPOSE_DESCRIPTIONS[self]


_PURPOSE_DESCRIPTIONS = {
    Purpose.BIP44: 'Legacy P2PKH',
    Purpose.BIP49: 'SegWit (P2SH-wrapped)',
    Purpose.BIP84: 'Native SegWit',
    Purpose.BIP86: 'Taproot',
}


class Chain(IntEnum):
    '''External addresses receive payments; internal ones receive change.'''
    EXTERNAL = 0
    INTERNAL = 1

    @classmethod
    def from_value(cls, value):
        try:
            return cls(value)
        except ValueError:
            raise InvalidChain(f'invalid chain: {value}') from None

    def is_external(self):
        return self is Chain.EXTERNAL

    def is_internal(self):
        return self is Chain.INTERNAL


def _validate_coin_index(instance, attribute, value):
    if not isinstance(value, int):
        raise TypeError('coin type must be an integer')
    if not 0 <= value < HARDENED:
        raise InvalidCoinType(f'invalid coin type: {value}')


@attr.s(slots=True, frozen=True, repr=False)
class CoinType:
    '''A SLIP-44 coin type.  Well-known ones are class attributes; any index below 2^31 is
    accepted as a custom coin type.'''
    index = attr.ib(validator=_validate_coin_index)

    @classmethod
    def from_value(cls, value):
        if isinstance(value, CoinType):
            return value
        return cls(value)

    def symbol(self):
        return _COIN_INFO.get(self.index, ('CUSTOM', 'Custom'))[0]

    def name(self):
        return _COIN_INFO.get(self.index, ('CUSTOM', 'Custom'))[1]

    def is_custom(self):
        return self.index not in _COIN_INFO

    def is_testnet(self):
        return self.index == 1

    def is_evm_compatible(self):
        '''True for coins whose addresses are Keccak-256 hashes of the public key.'''
        return self.index in _EVM_COIN_INDICES

    def default_purpose(self):
        '''Bitcoin-like coins default to native SegWit; everything else to BIP44.'''
        if self.index in (0, 1, 2):
            return Purpose.BIP84
        return Purpose.BIP44

    def __int__(self):
        return self.index

    def __str__(self):
        return self.symbol() if not self.is_custom() else f'Custom({self.index})'

    def __repr__(self):
        return f'CoinType({self.index})'


_COIN_INFO = {
    0: ('BTC', 'Bitcoin'),
    1: ('tBTC', 'Bitcoin Testnet'),
    2: ('LTC', 'Litecoin'),
    3: ('DOGE', 'Dogecoin'),
    5: ('DASH', 'Dash'),
    60: ('ETH', 'Ethereum'),
    61: ('ETC', 'Ethereum Classic'),
    118: ('ATOM', 'Cosmos'),
    145: ('BCH', 'Bitcoin Cash'),
    195: ('TRX', 'Tron'),
    354: ('DOT', 'Polkadot'),
    501: ('SOL', 'Solana'),
    714: ('BNB', 'Binance Coin'),
    1815: ('ADA', 'Cardano'),
}
_EVM_COIN_INDICES = frozenset((60, 61, 195, 714))

CoinType.BITCOIN = CoinType(0)
CoinType.BITCOIN_TESTNET = CoinType(1)
CoinType.LITECOIN = CoinType(2)
CoinType.DOGECOIN = CoinType(3)
CoinType.DASH = CoinType(5)
CoinType.ETHEREUM = CoinType(60)
CoinType.ETHEREUM_CLASSIC = CoinType(61)
CoinType.COSMOS = CoinType(118)
CoinType.BITCOIN_CASH = CoinType(145)
CoinType.TRON = CoinType(195)
CoinType.POLKADOT = CoinType(354)
CoinType.SOLANA = CoinType(501)
CoinType.BINANCE_COIN = CoinType(714)
CoinType.CARDANO = CoinType(1815)


def _validate_account(instance, attribute, value):
    if not isinstance(value, int):
        raise TypeError('account must be an integer')
    if not 0 <= value < HARDENED:
        raise InvalidAccount(f'invalid account index: {value}')


def _validate_address_index(instance, attribute, value):
    if not isinstance(value, int):
        raise TypeError('address index must be an integer')
    if not 0 <= value <= UINT32_MAX:
        raise InvalidDerivationPath(f'invalid address index: {value}')


@attr.s(slots=True, frozen=True, repr=False)
class Bip44Path:
    '''A five-level path with the fixed hardening shape of BIP44.

    The address index may take any 32-bit value.  Indices of 2^31 and above map to the
    same wire index in a DerivationPath, which is therefore hardened.
    '''
    purpose = attr.ib(converter=Purpose.from_value)
    coin_type = attr.ib(converter=CoinType.from_value)
    account = attr.ib(default=0, validator=_validate_account)
    chain = attr.ib(default=Chain.EXTERNAL, converter=Chain.from_value)
    address_index = attr.ib(default=0, validator=_validate_address_index)

    @classmethod
    def from_string(cls, text):
        '''Parse a path such as m/44'/60'/0'/0/5.  The first three levels must be hardened
        and the last two must not.'''
        if not isinstance(text, str):
            raise TypeError(f'path {text} must be a string')
        parts = text.split('/')
        if len(parts) != 6 or parts[0] != 'm':
            raise InvalidDerivationPath(f'a BIP44 path must have 5 levels: {text}')

        values = []
        for level, part in enumerate(parts[1:]):
            match = LEVEL_REGEX.fullmatch(part)
            if not match:
                raise InvalidDerivationPath(f'invalid derivation path: {text}')
            is_hardened = bool(match.group(2))
            if is_hardened != (level < 3):
                raise InvalidDerivationPath(f'invalid hardening at level {level + 1}: {text}')
            values.append(int(match.group(1)))

        purpose, coin_type, account, chain, address_index = values
        return cls(purpose, coin_type, account, chain, address_index)

    @classmethod
    def from_derivation_path(cls, path):
        '''Construct from a five-level DerivationPath.'''
        child_numbers = list(path)
        if len(child_numbers) != 5:
            raise InvalidDerivationPath(f'a BIP44 path must have 5 levels: {path}')
        if not all(cn.hardened for cn in child_numbers[:3]) or child_numbers[3].hardened:
            raise InvalidDerivationPath(f'invalid hardening in BIP44 path: {path}')
        purpose, coin_type, account, chain, last = child_numbers
        return cls(purpose.index, coin_type.index, account.index, chain.index,
                   last.to_index())

    def to_derivation_path(self):
        return DerivationPath((
            ChildNumber(self.purpose.value, True),
            ChildNumber(self.coin_type.index, True),
            ChildNumber(self.account, True),
            ChildNumber(self.chain.value),
            ChildNumber.from_index(self.address_index),
        ))

    def account_path(self):
        '''Return the three-level DerivationPath of the account.'''
        return DerivationPath(self.to_derivation_path()[:3])

    def with_chain(self, chain):
        return attr.evolve(self, chain=chain)

    def with_address_index(self, address_index):
        return attr.evolve(self, address_index=address_index)

    def next_address(self):
        '''Return the path of the following address, or None at the last index.'''
        if self.address_index == UINT32_MAX:
            return None
        return self.with_address_index(self.address_index + 1)

    def __str__(self):
        return (f"m/{self.purpose.value}'/{self.coin_type.index}'/{self.account}'/"
                f"{self.chain.value}/{self.address_index}")

    def __repr__(self):
        return f"Bip44Path('{self}')"
