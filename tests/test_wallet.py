import logging

import pytest

from walletx import (
    Account, AddressIterator, Address, BIP32PrivateKey, BIP32PublicKey, BIP39Mnemonic, Bip44Path,
    BitcoinTestnet, Chain, CoinType, DerivedAddress, InvalidAccount, InvalidChecksum,
    InvalidDerivationPath, InvalidSeed, Purpose, Wallet, base58_encode_check,
)

from .utils import ABANDON_PHRASE, TREZOR_SEED


# The first addresses of m/44'/60'/0'/0 for the "abandon ... about" phrase
ETH_ADDRESSES = [
    '0x9858EfFD232B4033E47d90003D41EC34EcaEda94',
    '0x6Fac4D18c912343BF86fa7049364Dd4E424Ab9C0',
    '0xb6716976A3ebe8D39aCEB04372f22Ff8e6802D7A',
]
BTC_ACCOUNT_XPUB = ('xpub6BosfCnifzxcFwrSzQiqu2DBVTshkCXacvNsWGYJVVhhawA7d4R5WSWGFNbi8Aw6'
                    'ZRc1brxMyWMzG3DSSSSoekkudhUd9yLb6qx39T9nMdj')


def p2pkh_address(derived):
    return base58_encode_check(b'\0' + derived.public_key().hash160())


class TestWallet:

    def test_constructors(self, wallet):
        master = wallet.master_key()
        assert Wallet.from_english_mnemonic(ABANDON_PHRASE).master_key() == master
        mnemonic = BIP39Mnemonic.from_phrase(ABANDON_PHRASE)
        assert Wallet.from_mnemonic(mnemonic).master_key() == master
        assert Wallet.from_seed(mnemonic.to_seed()).master_key() == master
        assert Wallet(master).master_key() is master

    def test_passphrase(self):
        wallet = Wallet.from_mnemonic(ABANDON_PHRASE, 'TREZOR')
        assert wallet.master_key() == BIP32PrivateKey.from_seed(TREZOR_SEED)

    def test_bad_mnemonic(self):
        with pytest.raises(InvalidChecksum):
            Wallet.from_mnemonic(' '.join(['abandon'] * 12))

    def test_bad_seed(self):
        with pytest.raises(InvalidSeed):
            Wallet.from_seed(bytes(8))

    def test_bad_master(self):
        with pytest.raises(TypeError):
            Wallet(TREZOR_SEED)

    def test_network(self, wallet):
        assert wallet.network().name == 'mainnet'
        testnet = Wallet.from_seed(TREZOR_SEED, BitcoinTestnet)
        assert testnet.network() is BitcoinTestnet
        account = testnet.get_account(Purpose.BIP44, CoinType.BITCOIN_TESTNET)
        assert account.network() is BitcoinTestnet
        assert account.account_xpub().to_extended_key_string().startswith('tpub')

    def test_repr(self, wallet):
        wallet.get_account(Purpose.BIP44, CoinType.ETHEREUM)
        assert repr(wallet) == 'Wallet([REDACTED], mainnet, 1 accounts)'

    def test_eth_addresses(self, wallet):
        for index, text in enumerate(ETH_ADDRESSES):
            derived = wallet.derive_address(f"m/44'/60'/0'/0/{index}")
            assert derived.evm_address() == Address.from_string(text)
            assert derived.evm_address().to_checksum_string() == text

    def test_btc(self, wallet):
        account = wallet.get_account(Purpose.BIP44, CoinType.BITCOIN)
        assert account.account_xpub().to_extended_key_string() == BTC_ACCOUNT_XPUB
        derived = account.derive_address(Chain.EXTERNAL, 0)
        assert p2pkh_address(derived) == '1LqBGSKuX5yYUonjxT5qGfpUsXKYYWeabA'

        # Extended keys at m/44'/0'/0'/0/0
        xprv = derived.key().to_extended_key_string()
        xpub = derived.public_key().to_extended_key_string()
        assert xprv.startswith('xprv') and xpub.startswith('xpub')
        assert wallet.derive_path("m/44'/0'/0'/0/0").to_extended_key_string() == xprv
        assert account.account_xpub().child(0).child(0).to_extended_key_string() == xpub
        key = BIP32PrivateKey.from_extended_key_string(xprv)
        assert key.depth() == 5 and key.child_number() == 0
        assert key.to_extended_key_string() == xprv
        assert key.public_key.to_extended_key_string() == xpub
        pubkey = BIP32PublicKey.from_extended_key_string(xpub)
        assert pubkey.parent_fingerprint() == account.account_xpub().child(0).fingerprint()
        assert base58_encode_check(b'\0' + pubkey.hash160()) == '1LqBGSKuX5yYUonjxT5qGfpUsXKYYWeabA'

    def test_derive_address_forms(self, wallet):
        path = Bip44Path(Purpose.BIP44, CoinType.ETHEREUM, 0, Chain.INTERNAL, 3)
        by_path = wallet.derive_address(path)
        by_string = wallet.derive_address("m/44'/60'/0'/1/3")
        assert by_path.key() == by_string.key()
        assert by_path.path() == path
        assert wallet.derive_path("m/44'/60'/0'/1/3") == by_path.key()

    def test_derive_address_bad(self, wallet):
        with pytest.raises(InvalidDerivationPath):
            wallet.derive_address("m/44'/60'/0'/0")

    def test_account_cache(self, wallet):
        assert wallet.cached_account_count() == 0
        account = wallet.get_account(Purpose.BIP44, CoinType.ETHEREUM, 0)
        assert wallet.get_account(44, 60, 0) is account
        assert wallet.get_account(Purpose.BIP44, CoinType.ETHEREUM) is account
        assert wallet.cached_account_count() == 1
        wallet.get_account(Purpose.BIP44, CoinType.ETHEREUM, 1)
        wallet.get_account(Purpose.BIP84, CoinType.ETHEREUM, 0)
        wallet.get_account(Purpose.BIP44, CoinType.BITCOIN, 0)
        assert wallet.cached_account_count() == 4
        wallet.clear_cache()
        assert wallet.cached_account_count() == 0
        again = wallet.get_account(Purpose.BIP44, CoinType.ETHEREUM, 0)
        assert again is not account
        assert again.extended_key() == account.extended_key()

    def test_account_logging(self, wallet, caplog):
        with caplog.at_level(logging.DEBUG, logger='walletx.wallet'):
            wallet.get_account(Purpose.BIP44, CoinType.ETHEREUM, 0)
            wallet.get_account(Purpose.BIP44, CoinType.ETHEREUM, 0)
        messages = [record.getMessage() for record in caplog.records]
        assert messages == ["deriving account m/44'/60'/0'"]

    @pytest.mark.parametrize("account_index", (-1, 1 << 31))
    def test_get_account_bad(self, wallet, account_index):
        with pytest.raises(InvalidAccount):
            wallet.get_account(Purpose.BIP44, CoinType.ETHEREUM, account_index)

    def test_zeroize(self):
        wallet = Wallet.from_seed(TREZOR_SEED)
        account = wallet.get_account(Purpose.BIP44, CoinType.ETHEREUM)
        account.external_chain_key()
        wallet.zeroize()
        assert wallet.cached_account_count() == 0
        assert wallet.master_key().to_bytes() == bytes(32)
        assert account.extended_key().to_bytes() == bytes(32)


class TestAccount:

    def test_attributes(self, eth_account):
        assert eth_account.purpose() is Purpose.BIP44
        assert eth_account.coin_type() == CoinType.ETHEREUM
        assert eth_account.account_index() == 0
        assert str(eth_account.path()) == "m/44'/60'/0'"
        assert repr(eth_account) == "Account('m/44'/60'/0'')"
        assert eth_account.extended_key().depth() == 3
        assert eth_account.account_xpub() == eth_account.extended_key().public_key

    def test_chain_keys(self, eth_account):
        external = eth_account.external_chain_key()
        assert eth_account.chain_key(Chain.EXTERNAL) is external
        assert eth_account.chain_key(0) is external
        assert eth_account.internal_chain_key() is eth_account.chain_key(1)
        assert external.depth() == 4
        assert external != eth_account.internal_chain_key()

    def test_derive_key(self, eth_account, wallet):
        key = eth_account.derive_external(5)
        assert key == wallet.derive_path("m/44'/60'/0'/0/5")
        assert eth_account.derive_key(Chain.EXTERNAL, 5) == key
        assert eth_account.derive_internal(5) == wallet.derive_path("m/44'/60'/0'/1/5")

    def test_watch_only(self, eth_account):
        # The account xpub derives the same public keys as the private key
        xpub = eth_account.account_xpub()
        for index in range(3):
            public_key = xpub.child(0).child(index)
            derived = eth_account.derive_address(Chain.EXTERNAL, index)
            assert public_key.to_address() == Address.from_string(ETH_ADDRESSES[index])
            assert public_key == derived.public_key()

    def test_derived_address(self, eth_account):
        derived = eth_account.derive_address(Chain.INTERNAL, 7)
        assert isinstance(derived, DerivedAddress)
        assert str(derived.path()) == "m/44'/60'/0'/1/7"
        assert repr(derived) == "DerivedAddress('m/44'/60'/0'/1/7')"
        assert derived.chain() is Chain.INTERNAL
        assert derived.index() == 7
        assert derived.purpose() is Purpose.BIP44
        assert derived.coin_type() == CoinType.ETHEREUM
        assert derived.account_index() == 0
        assert derived.is_internal() and not derived.is_external()
        assert derived.private_key() is derived.key()
        assert derived.public_key() == derived.key().public_key
        assert derived.network().name == 'mainnet'

    def test_high_address_index(self, eth_account):
        derived = eth_account.derive_address(Chain.EXTERNAL, 0xffffffff)
        assert derived.key().child_number().hardened
        assert derived.index() == 0xffffffff
        with pytest.raises(InvalidDerivationPath):
            eth_account.derive_address(Chain.EXTERNAL, 1 << 32)

    def test_derive_address_range(self, eth_account):
        addresses = eth_account.derive_address_range(Chain.EXTERNAL, 0, 3)
        assert [d.evm_address().to_checksum_string() for d in addresses] == ETH_ADDRESSES
        assert eth_account.derive_address_range(Chain.EXTERNAL, 5, 0) == []

    def test_derive_address_range_saturates(self, eth_account):
        addresses = eth_account.derive_address_range(Chain.EXTERNAL, 0xfffffffe, 10)
        assert [d.index() for d in addresses] == [0xfffffffe, 0xffffffff]

    def test_from_extended_key(self, eth_account, wallet):
        account = Account.from_extended_key(eth_account.extended_key(), 44, 60, 0)
        assert account.derive_external(0) == eth_account.derive_external(0)
        with pytest.raises(InvalidDerivationPath):
            Account.from_extended_key(wallet.master_key(), 44, 60, 0)


class TestAddressIterator:

    def test_iteration(self, eth_account):
        iterator = eth_account.addresses()
        assert isinstance(iterator, AddressIterator)
        assert iter(iterator) is iterator
        assert iterator.chain() is Chain.EXTERNAL
        assert iterator.current_index() == 0
        first = [next(iterator) for _ in range(3)]
        assert [d.evm_address().to_checksum_string() for d in first] == ETH_ADDRESSES
        assert iterator.current_index() == 3

    def test_bounded(self, eth_account):
        iterator = eth_account.addresses(Chain.INTERNAL, start=4, max_index=6)
        assert [d.index() for d in iterator] == [4, 5, 6]
        assert all(d.is_internal() for d in eth_account.addresses(1, 0, 1))
        with pytest.raises(StopIteration):
            next(iterator)

    def test_stops_at_last_index(self, eth_account):
        iterator = AddressIterator(eth_account, Chain.EXTERNAL, 0xfffffffe, 1 << 40)
        assert [d.index() for d in iterator] == [0xfffffffe, 0xffffffff]

    def test_empty(self, eth_account):
        assert list(eth_account.addresses(start=5, max_index=4)) == []
