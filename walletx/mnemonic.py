# Copyright (c) 2021-2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''BIP39 mnemonic handling.

A mnemonic encodes 128 to 256 bits of entropy plus a checksum as 12 to 24 words from a
2048-word list.  The seed is derived from the normalized phrase text, so wordlists only
matter when converting between entropy and phrase and when checking a phrase.

It is not possible to derive the mnemonic from the seed, so a wallet must store the
mnemonic a user supplied if it wants to be able to display it later.
'''

__all__ = (
    'Language', 'Wordlists', 'BIP39Mnemonic',
    'bip39_normalize_mnemonic', 'bip39_mnemonic_to_seed',
)


from enum import Enum
from os import urandom
from unicodedata import normalize

from mnemonic import Mnemonic

from .errors import InvalidEntropyLength, InvalidWord, InvalidWordCount, InvalidChecksum
from .hashes import sha256, pbkdf2_sha512
from .misc import int_to_be_bytes, be_bytes_to_int


# Entropy length in bytes -> word count
WORD_COUNTS = {16: 12, 20: 15, 24: 18, 28: 21, 32: 24}
ENTROPY_LENGTHS = {count: length for length, count in WORD_COUNTS.items()}


class Language(Enum):
    '''Languages with a BIP39 wordlist.  The value is the wordlist name.'''
    ENGLISH = 'english'
    JAPANESE = 'japanese'
    KOREAN = 'korean'
    FRENCH = 'french'
    ITALIAN = 'italian'
    SPANISH = 'spanish'
    CHINESE_SIMPLIFIED = 'chinese_simplified'
    CHINESE_TRADITIONAL = 'chinese_traditional'
    CZECH = 'czech'

    def __str__(self):
        return self.value


class Wordlists:
    '''Validate, read and cache word lists.'''

    cache = {}
    index_cache = {}

    @classmethod
    def _text_to_wordlist(cls, text, expected_count):
        '''Convert text to a normalized bip39 wordlist.  Every line is assumed to be a word unless
        it starts with a '#' character or is empty.  Leading and trailing whitespace in
        lines is not significant, and words are converted to lower case.

        Raises: SyntaxError if any word contains a space, or if expected_count is not None
        and the count differs.
        '''
        text = _normalize_text(text)
        lines = [line.strip() for line in text.split('\n')]
        words = [line.lower() for line in lines if line and not line.startswith('#')]
        if any(' ' in word for word in words):
            raise SyntaxError('some words contain whitespace')
        if expected_count is not None and len(words) != expected_count:
            raise SyntaxError(f'text should contain {expected_count} words')
        return words

    @classmethod
    def bip39_wordlist(cls, language):
        '''Return the normalized 2048-word list of a Language.'''
        language = Language(language)
        result = cls.cache.get(language)
        if not result:
            text = '\n'.join(Mnemonic(language.value).wordlist)
            result = cls.cache[language] = cls._text_to_wordlist(text, 2048)
        return result

    @classmethod
    def bip39_word_index(cls, language):
        '''Return a word -> index map for a Language.'''
        language = Language(language)
        result = cls.index_cache.get(language)
        if not result:
            wordlist = cls.bip39_wordlist(language)
            result = cls.index_cache[language] = {word: n for n, word in enumerate(wordlist)}
        return result


class BIP39Mnemonic:
    '''A BIP39 mnemonic: a normalized phrase, its language and the entropy it encodes.

    Construct with from_entropy(), from_phrase() or generate().  The phrase is stored
    NFKD-normalized, lower case and single-space separated.
    '''

    def __init__(self, phrase, language, entropy):
        self._phrase = phrase
        self._language = language
        self._entropy = bytes(entropy)

    def __eq__(self, other):
        return (isinstance(other, BIP39Mnemonic) and self._phrase == other._phrase
                and self._language == other._language)

    def __hash__(self):
        return hash((self._phrase, self._language))

    def __repr__(self):
        return f'BIP39Mnemonic([REDACTED], {self._language}, {self.word_count()} words)'

    __str__ = __repr__

    # This function is split out for testing purposes
    @classmethod
    def _from_entropy(cls, entropy, wordlist):
        size = len(entropy)
        cs_bits = size // 4
        checksum = be_bytes_to_int(sha256(entropy)) >> (256 - cs_bits)
        entropy_cs = be_bytes_to_int(entropy) * (1 << cs_bits) + checksum

        m_len = 3 * size // 4
        parts = []
        for _ in range(m_len):
            entropy_cs, part = divmod(entropy_cs, 2048)
            parts.append(part)

        return ' '.join(wordlist[part] for part in reversed(parts))

    @classmethod
    def from_entropy(cls, entropy, language=Language.ENGLISH):
        '''Construct from 16, 20, 24, 28 or 32 bytes of entropy.'''
        if not isinstance(entropy, (bytes, bytearray)):
            raise TypeError('entropy must be bytes')
        if len(entropy) not in WORD_COUNTS:
            raise InvalidEntropyLength(f'invalid entropy length: {len(entropy)} bytes')
        language = Language(language)
        phrase = cls._from_entropy(entropy, Wordlists.bip39_wordlist(language))
        return cls(phrase, language, entropy)

    @classmethod
    def from_phrase(cls, phrase, language=Language.ENGLISH):
        '''Construct from a phrase, checking its words and checksum.  Matching is done on the
        normalized phrase so is case-insensitive.'''
        language = Language(language)
        words = cls.normalize(phrase).split()

        m_len = len(words)
        if m_len not in ENTROPY_LENGTHS:
            raise InvalidWordCount(m_len)

        word_index = Wordlists.bip39_word_index(language)
        parts = []
        for position, word in enumerate(words):
            part = word_index.get(word)
            if part is None:
                raise InvalidWord(position, word)
            parts.append(part)

        value = 0
        for part in parts:
            value = value * 2048 + part

        ent_bytes = ENTROPY_LENGTHS[m_len]
        cs_bits = m_len // 3
        cs_mod = 1 << cs_bits

        checksum = value % cs_mod
        entropy = int_to_be_bytes(value // cs_mod, size=ent_bytes)

        expected_checksum = be_bytes_to_int(sha256(entropy)) >> (256 - cs_bits)
        if checksum != expected_checksum:
            raise InvalidChecksum('invalid mnemonic checksum')

        return cls(' '.join(words), language, entropy)

    @classmethod
    def generate(cls, word_count=12, language=Language.ENGLISH, *, source=urandom):
        '''Return a new mnemonic of word_count (12, 15, 18, 21 or 24) words using entropy
        from source.'''
        if word_count not in ENTROPY_LENGTHS:
            raise InvalidWordCount(word_count)
        return cls.from_entropy(source(ENTROPY_LENGTHS[word_count]), language)

    @classmethod
    def normalize(cls, mnemonic):
        '''Return the normalized mnemonic. Leading and trailing whitespace is removed, whitespace
        is collapsed to a single space, and the mnemonic is converted to lower case.
        '''
        return ' '.join(_normalize_text(mnemonic).split()).lower()

    @classmethod
    def is_valid(cls, mnemonic, language=Language.ENGLISH):
        '''Return true if the mnemonic is valid, i.e., has a correct number of words from the
        wordlist and the checksum is good.
        '''
        try:
            cls.from_phrase(mnemonic, language)
            return True
        except (InvalidWordCount, InvalidWord, InvalidChecksum):
            return False

    def phrase(self):
        return self._phrase

    def language(self):
        return self._language

    def entropy(self):
        return self._entropy

    def words(self):
        return self._phrase.split(' ')

    def word_count(self):
        return WORD_COUNTS[len(self._entropy)]

    def to_seed(self, passphrase=''):
        '''Return the 64-byte seed for this mnemonic and the passphrase.'''
        return bip39_mnemonic_to_seed(self._phrase, passphrase)


def _normalize_text(text):
    '''Return the normalized text. No elimination of leading or trailing whitespace is
    done, nor is whitespace collapsed.
    '''
    return normalize('NFKD', text)


def bip39_normalize_mnemonic(text):
    '''Return the normalized mnemonic. Leading and trailing whitespace is removed and
    whitespace is collapsed to a single space.  Case is preserved.
    '''
    return ' '.join(_normalize_text(text).split())


def bip39_mnemonic_to_seed(mnemonic, passphrase=''):
    '''Return a 512-bit seed generated from the mnemonic.  The validity of the mnemonic is not
    checked.
    '''
    mnemonic = bip39_normalize_mnemonic(mnemonic).encode()
    passphrase = _normalize_text(passphrase).encode()
    return pbkdf2_sha512(mnemonic, b'mnemonic' + passphrase, 2048)
