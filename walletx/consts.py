# Copyright (c) 2021-2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#


__all__ = (
    'CURVE_ORDER', 'HALF_CURVE_ORDER', 'HARDENED', 'UINT32_MAX', 'UINT128_MAX', 'UINT256_MAX',
    'MAX_DEPTH', 'DEFAULT_GAP_LIMIT', 'TRANSFER_GAS', 'TOKEN_TRANSFER_GAS', 'GWEI', 'ETHER',
    'PERSONAL_MESSAGE_PREFIX', 'ChainId',
)


from enum import IntEnum


UINT32_MAX = 0xffffffff
UINT128_MAX = (1 << 128) - 1
UINT256_MAX = (1 << 256) - 1

CURVE_ORDER = 0xfffffffffffffffffffffffffffffffebaaedce6af48a03bbfd25e8cd0364141
HALF_CURVE_ORDER = CURVE_ORDER // 2

# BIP32
HARDENED = 1 << 31
MAX_DEPTH = 255
# BIP44 recommends stopping after 20 consecutive unused addresses
DEFAULT_GAP_LIMIT = 20

# EVM
TRANSFER_GAS = 21_000
TOKEN_TRANSFER_GAS = 65_000
GWEI = 10 ** 9
ETHER = 10 ** 18
PERSONAL_MESSAGE_PREFIX = b'\x19Ethereum Signed Message:\n'


class ChainId(IntEnum):
    '''Well-known EVM chain IDs.  Any integer is accepted where a chain ID is expected.'''
    ETHEREUM = 1
    BSC_MAINNET = 56
    BSC_TESTNET = 97
