# Copyright (c) 2021-2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Exception hierarchy.'''

__all__ = (
    'Base58Error', 'InvalidChecksum',
    'MnemonicError', 'InvalidEntropyLength', 'InvalidWord', 'InvalidWordCount',
    'BIP32Error', 'InvalidSeed', 'InvalidPrivateKey', 'InvalidPublicKey', 'KeyOverflow',
    'MaxDepthExceeded', 'UnsupportedHardenedFromPublic', 'InvalidDerivationPath',
    'VersionMismatch', 'PrefixMismatch', 'MalformedMetadata',
    'BIP44Error', 'InvalidPurpose', 'InvalidCoinType', 'InvalidChain', 'InvalidAccount',
    'EVMError', 'InvalidAddress', 'InvalidSignature', 'ValidationError', 'RLPError',
)


#
# Exception Hierarchy
#


class Base58Error(ValueError):
    '''Exception used for Base58 errors.'''


class InvalidChecksum(ValueError):
    '''Raised on a mnemonic checksum mismatch, or a Base58Check payload checksum mismatch.'''


class MnemonicError(ValueError):
    '''Base class of BIP39 mnemonic errors.'''


class InvalidEntropyLength(MnemonicError):
    '''Raised when mnemonic entropy is not 16, 20, 24, 28 or 32 bytes.'''


class InvalidWord(MnemonicError):
    '''Raised when a mnemonic word is not in the language's wordlist.'''

    def __init__(self, position, word):
        super().__init__(position, word)
        self.position = position
        self.word = word

    def __str__(self):
        return f'word {self.position} "{self.word}" is not in the wordlist'


class InvalidWordCount(MnemonicError):
    '''Raised when a mnemonic does not have 12, 15, 18, 21 or 24 words.'''

    def __init__(self, count):
        super().__init__(count)
        self.count = count

    def __str__(self):
        return f'invalid mnemonic word count: {self.count}'


class BIP32Error(ValueError):
    '''Base class of BIP32 key and derivation errors.'''


class InvalidSeed(BIP32Error):
    '''Raised when a seed is not 16 to 64 bytes, or the derived master key is invalid.'''


class InvalidPrivateKey(BIP32Error):
    '''Raised when a private key is not 32 bytes or is not in the range [1, n-1].'''


class InvalidPublicKey(BIP32Error):
    '''Raised for a bad public key encoding, a point off the curve or the point at infinity.'''


class KeyOverflow(BIP32Error):
    '''Raised when a child key derivation produces an invalid key.  The caller should
    move on to the next index.'''


class MaxDepthExceeded(BIP32Error):
    '''Raised when a derivation would exceed a depth of 255.'''


class UnsupportedHardenedFromPublic(BIP32Error):
    '''Raised on an attempt to derive a hardened child from a public key.'''


class InvalidDerivationPath(BIP32Error):
    '''Raised when a derivation path is malformed.'''


class VersionMismatch(BIP32Error):
    '''Raised when extended key version bytes are unknown or do not match the expected
    network.'''


class PrefixMismatch(BIP32Error):
    '''Raised when an extended key's payload does not match its version: public key data
    in a private key, or vice versa.'''


class MalformedMetadata(BIP32Error):
    '''Raised when a depth-zero extended key has a non-zero parent fingerprint or child
    number.'''


class BIP44Error(ValueError):
    '''Base class of BIP44 path errors.'''


class InvalidPurpose(BIP44Error):
    '''Raised for a purpose other than 44, 49, 84 or 86.'''


class InvalidCoinType(BIP44Error):
    '''Raised for a coin type that is not a valid unhardened index.'''


class InvalidChain(BIP44Error):
    '''Raised for a chain other than 0 (external) or 1 (internal).'''


class InvalidAccount(BIP44Error):
    '''Raised for an account index that is not below 2^31.'''


class EVMError(ValueError):
    '''Base class of EVM signing errors.'''


class InvalidAddress(EVMError):
    '''Raised for an address that is not 20 bytes, has bad hex or a bad EIP-55 checksum.'''


class InvalidSignature(EVMError):
    '''Raised when r or s is out of range, or public key recovery fails.'''


class ValidationError(EVMError):
    '''Raised when a transaction or user operation violates a construction rule.'''


class RLPError(EVMError):
    '''Raised when RLP data is truncated or not canonically encoded.'''
