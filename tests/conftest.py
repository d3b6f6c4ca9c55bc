# Pytest looks here for fixtures

import pytest

from walletx import Wallet, EvmSigner, Purpose, CoinType

from .utils import ABANDON_PHRASE, PRIVKEY_ONES


@pytest.fixture(scope='session')
def abandon_wallet():
    # PBKDF2 is slow; derive the seed once per session
    return Wallet.from_mnemonic(ABANDON_PHRASE)


@pytest.fixture
def wallet(abandon_wallet):
    abandon_wallet.clear_cache()
    return abandon_wallet


@pytest.fixture
def eth_account(wallet):
    return wallet.get_account(Purpose.BIP44, CoinType.ETHEREUM, 0)


@pytest.fixture
def signer():
    return EvmSigner.from_private_key(PRIVKEY_ONES)
