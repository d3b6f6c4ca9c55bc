import os.path
import re
import setuptools


def find_version(filename):
    with open(filename) as f:
        text = f.read()
    match = re.search(r"^_version_str = '(.*)'$", text, re.MULTILINE)
    if not match:
        raise RuntimeError('cannot find version')
    return match.group(1)


tld = os.path.abspath(os.path.dirname(__file__))
version = find_version(os.path.join(tld, 'walletx', '__init__.py'))


setuptools.setup(
    name='walletX',
    version=version,
    packages=['walletx'],
    python_requires='>=3.8',
    install_requires=[
        'attrs',
        'coincurve',
        'mnemonic',
        'pycryptodomex',
    ],
    extras_require={
        'test': ['pytest'],
    },
    description='Hierarchical deterministic wallets and EVM signing',
    long_description=(
        'Library of HD wallet functions covering BIP32 extended keys, BIP39 mnemonics, '
        'BIP44 accounts and address discovery, and EVM signing: EIP-55 addresses, '
        'EIP-1559 transactions, EIP-712 typed data and ERC-4337 user operations.'
    ),
)
