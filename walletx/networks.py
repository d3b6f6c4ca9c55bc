# Copyright (c) 2018-2024 Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#


__all__ = (
    'Bitcoin', 'BitcoinTestnet', 'Network', 'all_networks', 'networks_by_name',
)

from .errors import VersionMismatch


class Network:
    '''The parts of a network that matter for extended keys: the version bytes of
    extended private and public keys.'''

    def __init__(self, *, name, full_name, xpub_verbytes_hex, xprv_verbytes_hex,
                 is_testnet):
        self.name = name
        self.full_name = full_name
        self.xpub_verbytes = bytes.fromhex(xpub_verbytes_hex)
        self.xprv_verbytes = bytes.fromhex(xprv_verbytes_hex)
        self.is_testnet = is_testnet

    @classmethod
    def lookup_xver_bytes(cls, xver_bytes):
        '''Returns a (network, is_public_key) pair.'''
        for network in all_networks:
            if xver_bytes == network.xpub_verbytes:
                return network, True
            if xver_bytes == network.xprv_verbytes:
                return network, False
        raise VersionMismatch(f'unknown extended key version bytes {bytes(xver_bytes).hex()}')

    @classmethod
    def from_name(cls, name):
        try:
            return networks_by_name[name]
        except KeyError:
            raise ValueError(f'unknown network {name}') from None

    def __str__(self):
        return self.name

    def __repr__(self):
        return f'<Network {self.name}>'


Bitcoin = Network(
    name='mainnet',
    full_name='Bitcoin mainnet',
    xpub_verbytes_hex="0488b21e",
    xprv_verbytes_hex="0488ade4",
    is_testnet=False,
)


BitcoinTestnet = Network(
    name='testnet',
    full_name='Bitcoin testnet',
    xpub_verbytes_hex="043587cf",
    xprv_verbytes_hex="04358394",
    is_testnet=True,
)


all_networks = (Bitcoin, BitcoinTestnet)
networks_by_name = {network.name: network for network in all_networks}
