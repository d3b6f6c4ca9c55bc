import pytest

from walletx import (
    HARDENED, Bip44Path, Chain, ChildNumber, CoinType, DerivationPath, InvalidAccount,
    InvalidChain, InvalidCoinType, InvalidDerivationPath, InvalidPurpose, Purpose,
)


class TestPurpose:

    @pytest.mark.parametrize("value, name, description", (
        (44, 'BIP-44', 'Legacy P2PKH'),
        (49, 'BIP-49', 'SegWit (P2SH-wrapped)'),
        (84, 'BIP-84', 'Native SegWit'),
        (86, 'BIP-86', 'Taproot'),
    ))
    def test_from_value(self, value, name, description):
        purpose = Purpose.from_value(value)
        assert purpose == value
        assert purpose.display_name() == name
        assert purpose.description() == description

    @pytest.mark.parametrize("value", (0, 45, 2147483692))
    def test_bad(self, value):
        with pytest.raises(InvalidPurpose):
            Purpose.from_value(value)


class TestChain:

    def test_from_value(self):
        assert Chain.from_value(0) is Chain.EXTERNAL
        assert Chain.from_value(1) is Chain.INTERNAL
        assert Chain.EXTERNAL.is_external() and not Chain.EXTERNAL.is_internal()
        assert Chain.INTERNAL.is_internal() and not Chain.INTERNAL.is_external()

    @pytest.mark.parametrize("value", (-1, 2, HARDENED))
    def test_bad(self, value):
        with pytest.raises(InvalidChain):
            Chain.from_value(value)


class TestCoinType:

    @pytest.mark.parametrize("coin, index, symbol, name", (
        (CoinType.BITCOIN, 0, 'BTC', 'Bitcoin'),
        (CoinType.BITCOIN_TESTNET, 1, 'tBTC', 'Bitcoin Testnet'),
        (CoinType.ETHEREUM, 60, 'ETH', 'Ethereum'),
        (CoinType.BINANCE_COIN, 714, 'BNB', 'Binance Coin'),
        (CoinType.CARDANO, 1815, 'ADA', 'Cardano'),
    ))
    def test_known(self, coin, index, symbol, name):
        assert coin.index == index
        assert int(coin) == index
        assert coin.symbol() == symbol
        assert coin.name() == name
        assert str(coin) == symbol
        assert not coin.is_custom()
        assert CoinType.from_value(index) == coin

    def test_custom(self):
        coin = CoinType.from_value(999999)
        assert coin.is_custom()
        assert coin.symbol() == 'CUSTOM'
        assert str(coin) == 'Custom(999999)'
        assert repr(coin) == 'CoinType(999999)'
        assert not coin.is_evm_compatible()
        assert CoinType.from_value(coin) is coin

    @pytest.mark.parametrize("value", (-1, HARDENED))
    def test_bad(self, value):
        with pytest.raises(InvalidCoinType):
            CoinType(value)

    def test_bad_type(self):
        with pytest.raises(TypeError):
            CoinType('60')

    def test_properties(self):
        assert CoinType.BITCOIN_TESTNET.is_testnet()
        assert not CoinType.BITCOIN.is_testnet()
        for coin in (CoinType.ETHEREUM, CoinType.ETHEREUM_CLASSIC, CoinType.TRON,
                     CoinType.BINANCE_COIN):
            assert coin.is_evm_compatible()
        assert not CoinType.BITCOIN.is_evm_compatible()
        assert not CoinType.SOLANA.is_evm_compatible()
        assert CoinType.BITCOIN.default_purpose() is Purpose.BIP84
        assert CoinType.LITECOIN.default_purpose() is Purpose.BIP84
        assert CoinType.ETHEREUM.default_purpose() is Purpose.BIP44


class TestBip44Path:

    def test_defaults(self):
        path = Bip44Path(Purpose.BIP44, CoinType.ETHEREUM)
        assert path.account == 0
        assert path.chain is Chain.EXTERNAL
        assert path.address_index == 0
        assert str(path) == "m/44'/60'/0'/0/0"
        assert repr(path) == "Bip44Path('m/44'/60'/0'/0/0')"

    @pytest.mark.parametrize("text", (
        "m/44'/60'/0'/0/0",
        "m/84'/0'/5'/1/19",
        "m/86'/1'/2147483647'/0/4294967295",
    ))
    def test_string_round_trip(self, text):
        path = Bip44Path.from_string(text)
        assert str(path) == text
        assert Bip44Path.from_string(text.replace("'", 'h')) == path

    @pytest.mark.parametrize("text, exc", (
        ("m/44'/60'/0'/0", InvalidDerivationPath),
        ("m/44'/60'/0'/0/0/0", InvalidDerivationPath),
        ("44'/60'/0'/0/0", InvalidDerivationPath),
        ("m/44/60'/0'/0/0", InvalidDerivationPath),
        ("m/44'/60/0'/0/0", InvalidDerivationPath),
        ("m/44'/60'/0/0/0", InvalidDerivationPath),
        ("m/44'/60'/0'/0'/0", InvalidDerivationPath),
        ("m/44'/60'/0'/0/0'", InvalidDerivationPath),
        ("m/44'/60'/0'/0/x", InvalidDerivationPath),
        ("m/45'/60'/0'/0/0", InvalidPurpose),
        ("m/44'/60'/0'/2/0", InvalidChain),
        ("m/44'/2147483648'/0'/0/0", InvalidCoinType),
        ("m/44'/60'/2147483648'/0/0", InvalidAccount),
        ("m/44'/60'/0'/0/4294967296", InvalidDerivationPath),
    ))
    def test_from_string_bad(self, text, exc):
        with pytest.raises(exc):
            Bip44Path.from_string(text)

    def test_from_string_type(self):
        with pytest.raises(TypeError):
            Bip44Path.from_string(None)

    def test_derivation_path(self):
        path = Bip44Path(44, 60, 2, 1, 7)
        dpath = path.to_derivation_path()
        assert str(dpath) == "m/44'/60'/2'/1/7"
        assert dpath == DerivationPath.from_string("m/44'/60'/2'/1/7")
        assert Bip44Path.from_derivation_path(dpath) == path
        assert str(path.account_path()) == "m/44'/60'/2'"

    def test_high_address_index(self):
        # Indices of 2^31 and above are hardened on the wire
        path = Bip44Path(44, 60, 0, 0, HARDENED + 5)
        dpath = path.to_derivation_path()
        assert dpath[-1] == ChildNumber(5, True)
        assert Bip44Path.from_derivation_path(dpath) == path

    @pytest.mark.parametrize("text", ("m/44'/60'/0'/0", "m/44/60'/0'/0/0", "m/44'/60'/0'/1'/0"))
    def test_from_derivation_path_bad(self, text):
        with pytest.raises(InvalidDerivationPath):
            Bip44Path.from_derivation_path(DerivationPath.from_string(text))

    def test_with(self):
        path = Bip44Path(44, 60)
        assert str(path.with_chain(Chain.INTERNAL)) == "m/44'/60'/0'/1/0"
        assert str(path.with_address_index(9)) == "m/44'/60'/0'/0/9"
        assert str(path.next_address()) == "m/44'/60'/0'/0/1"
        assert path.with_address_index(0xffffffff).next_address() is None
        # Immutable
        assert path.address_index == 0
        with pytest.raises(InvalidChain):
            path.with_chain(5)

    def test_eq_hash(self):
        a = Bip44Path(44, 60, 0, 0, 1)
        b = Bip44Path.from_string("m/44'/60'/0'/0/1")
        assert a == b
        assert len({a, b}) == 1
        assert a != a.with_chain(1)

    @pytest.mark.parametrize("kwargs, exc", (
        ({'account': -1}, InvalidAccount),
        ({'account': HARDENED}, InvalidAccount),
        ({'address_index': -1}, InvalidDerivationPath),
        ({'address_index': 1 << 32}, InvalidDerivationPath),
        ({'account': '0'}, TypeError),
    ))
    def test_constructor_bad(self, kwargs, exc):
        with pytest.raises(exc):
            Bip44Path(44, 60, **kwargs)
