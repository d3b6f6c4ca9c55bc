import pytest

from walletx import Bitcoin, BitcoinTestnet, Network, VersionMismatch, all_networks


@pytest.mark.parametrize("network, xprv, xpub, is_testnet", (
    (Bitcoin, '0488ade4', '0488b21e', False),
    (BitcoinTestnet, '04358394', '043587cf', True),
))
def test_version_bytes(network, xprv, xpub, is_testnet):
    assert network.xprv_verbytes.hex() == xprv
    assert network.xpub_verbytes.hex() == xpub
    assert network.is_testnet is is_testnet
    assert Network.lookup_xver_bytes(bytes.fromhex(xprv)) == (network, False)
    assert Network.lookup_xver_bytes(bytes.fromhex(xpub)) == (network, True)


def test_lookup_xver_bytes_unknown():
    with pytest.raises(VersionMismatch):
        Network.lookup_xver_bytes(bytes.fromhex('049d7878'))


def test_from_name():
    assert Network.from_name('mainnet') is Bitcoin
    assert Network.from_name('testnet') is BitcoinTestnet
    with pytest.raises(ValueError):
        Network.from_name('regtest')


def test_all_networks():
    assert all_networks == (Bitcoin, BitcoinTestnet)


def test_str():
    assert str(Bitcoin) == 'mainnet'
    assert repr(BitcoinTestnet) == '<Network testnet>'
    assert Bitcoin.full_name == 'Bitcoin mainnet'
