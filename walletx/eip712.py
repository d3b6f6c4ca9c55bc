# Copyright (c) 2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''EIP-712 typed structured data hashing and signing.

Two ways of describing a message are supported.  A subclass of Eip712Type supplies its
own type string and encoded data, which is fast and explicit.  TypedData takes the JSON
form used by eth_signTypedData_v4 (types, primaryType, domain and message dictionaries)
and derives both.
'''

__all__ = (
    'Eip712Type', 'Eip712Domain', 'TypedData', 'hash_typed_data', 'sign_typed_data',
    'verify_typed_data', 'encode_address', 'encode_uint256', 'encode_int256',
    'encode_bool', 'encode_bytes32', 'encode_string', 'encode_bytes', 'encode_array',
)

import re
from abc import ABC, abstractmethod

import attr

from .address import Address, as_address
from .errors import InvalidSignature, ValidationError
from .hashes import keccak256
from .misc import hex_to_bytes
from .packing import pack_address_word, pack_bool_word, pack_int256, pack_uint256
from .signature import recover_signer


# Word encoders.  Each returns exactly 32 bytes.

def encode_address(address):
    return pack_address_word(as_address(address).to_bytes())


def encode_uint256(value):
    try:
        return pack_uint256(value)
    except ValueError as e:
        raise ValidationError(str(e)) from None


def encode_int256(value):
    if not -(1 << 255) <= value < (1 << 255):
        raise ValidationError(f'value {value} out of range for int256')
    return pack_int256(value)


def encode_bool(value):
    return pack_bool_word(value)


def encode_bytes32(value):
    '''A fixed-size bytesN value, right-padded with zeroes.'''
    value = bytes(value)
    if len(value) > 32:
        raise ValidationError(f'fixed bytes value of {len(value)} bytes exceeds 32')
    return value.ljust(32, b'\0')


def encode_string(value):
    return keccak256(value.encode())


def encode_bytes(value):
    return keccak256(bytes(value))


def encode_array(encoded_items):
    '''An array is the hash of the concatenation of its encoded elements.'''
    return keccak256(b''.join(encoded_items))


class Eip712Type(ABC):
    '''Base class of a struct type with a hand-written encoding.

    Subclasses give the canonical type string, with referenced struct types appended in
    alphabetical order, and encode_data() returning one 32-byte word per field.
    '''

    @classmethod
    @abstractmethod
    def type_string(cls):
        '''For example "Mail(Person from,Person to,string contents)Person(string name,address
        wallet)".'''

    @abstractmethod
    def encode_data(self):
        pass

    @classmethod
    def type_hash(cls):
        return keccak256(cls.type_string().encode())

    def hash_struct(self):
        return keccak256(self.type_hash() + self.encode_data())


def _optional(converter):
    return attr.converters.optional(converter)


@attr.s(slots=True, frozen=True, kw_only=True)
class Eip712Domain(Eip712Type):
    '''The EIP712Domain struct.  Only the fields that are present appear in its type
    string and encoding.'''
    name = attr.ib(default=None)
    version = attr.ib(default=None)
    chain_id = attr.ib(default=None, converter=_optional(int))
    verifying_contract = attr.ib(default=None, converter=_optional(as_address))
    salt = attr.ib(default=None, converter=_optional(bytes))

    # (attribute, JSON key, solidity type, encoder) in canonical order
    FIELDS = (
        ('name', 'name', 'string', encode_string),
        ('version', 'version', 'string', encode_string),
        ('chain_id', 'chainId', 'uint256', encode_uint256),
        ('verifying_contract', 'verifyingContract', 'address', encode_address),
        ('salt', 'salt', 'bytes32', encode_bytes32),
    )

    def _present_fields(self):
        return [field for field in self.FIELDS if getattr(self, field[0]) is not None]

    def type_string(self):
        parts = ','.join(f'{solidity_type} {key}'
                         for _attr, key, solidity_type, _enc in self._present_fields())
        return f'EIP712Domain({parts})'

    def type_hash(self):
        return keccak256(self.type_string().encode())

    def encode_data(self):
        return b''.join(encoder(getattr(self, attr_name))
                        for attr_name, _key, _type, encoder in self._present_fields())

    def domain_separator(self):
        return self.hash_struct()

    @classmethod
    def from_dict(cls, domain):
        '''Construct from the JSON form, e.g. {"name": ..., "chainId": ...}.'''
        keys = {key: attr_name for attr_name, key, _type, _enc in cls.FIELDS}
        kwargs = {}
        for key, value in domain.items():
            if key not in keys:
                raise ValidationError(f'invalid EIP712Domain field: {key}')
            if key == 'salt' and isinstance(value, str):
                value = hex_to_bytes(value)
            elif key == 'chainId' and isinstance(value, str):
                value = int(value, 0)
            kwargs[keys[key]] = value
        return cls(**kwargs)

    def to_dict(self):
        result = {}
        for attr_name, key, _type, _enc in self._present_fields():
            value = getattr(self, attr_name)
            if isinstance(value, Address):
                value = value.to_checksum_string()
            result[key] = value
        return result


def hash_typed_data(domain, message):
    '''Return the 32-byte digest keccak256(0x19 0x01 || domainSeparator || hashStruct).'''
    return keccak256(b'\x19\x01' + domain.domain_separator() + message.hash_struct())


def sign_typed_data(signer, domain, message):
    return signer.sign_hash(hash_typed_data(domain, message))


def verify_typed_data(domain, message, signature, expected_signer):
    '''Return True if signature over message in domain was made by expected_signer.'''
    try:
        signer = recover_signer(hash_typed_data(domain, message), signature)
    except InvalidSignature:
        return False
    return signer == as_address(expected_signer)


#
# Dictionary-driven typed data
#

ARRAY_REGEX = re.compile(r'^(.+)\[(\d*)\]$')
INT_REGEX = re.compile(r'^(u?)int(\d+)$')
BYTES_REGEX = re.compile(r'^bytes(\d+)$')


def _base_type(type_name):
    return type_name.split('[')[0].strip()


def _to_int(value):
    if isinstance(value, str):
        return int(value, 0)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f'expected an integer, got {value!r}')
    return value


def _to_bytes(value):
    if isinstance(value, str):
        return hex_to_bytes(value)
    return bytes(value)


@attr.s(slots=True, frozen=True, kw_only=True)
class TypedData:
    '''EIP-712 typed data in the JSON form.

    types maps each struct name to a list of {"name": ..., "type": ...} dictionaries.  An
    EIP712Domain entry, if present, is ignored: the domain's shape comes from which of its
    fields are present.
    '''
    types = attr.ib()
    primary_type = attr.ib()
    domain = attr.ib(converter=lambda d: d if isinstance(d, Eip712Domain)
                     else Eip712Domain.from_dict(d))
    message = attr.ib()

    def __attrs_post_init__(self):
        if self.primary_type not in self.types:
            raise ValidationError(f'primary type {self.primary_type} is not defined')

    @classmethod
    def from_dict(cls, full_message):
        '''Construct from a dictionary with types, primaryType, domain and message keys.'''
        return cls(types=full_message['types'], primary_type=full_message['primaryType'],
                   domain=full_message['domain'], message=full_message['message'])

    def _struct_types(self):
        return {name: fields for name, fields in self.types.items() if name != 'EIP712Domain'}

    def dependencies(self, type_name, found=None):
        '''Return the set of struct types type_name refers to, including itself.'''
        if found is None:
            found = set()
        type_name = _base_type(type_name)
        struct_types = self._struct_types()
        if type_name in found or type_name not in struct_types:
            return found
        found.add(type_name)
        for field in struct_types[type_name]:
            self.dependencies(field['type'], found)
        return found

    def encode_type(self, type_name):
        '''The type string: type_name's definition followed by those of its dependencies
        in alphabetical order.'''
        deps = self.dependencies(type_name)
        deps.discard(type_name)
        struct_types = self._struct_types()
        return ''.join(
            name + '(' + ','.join(f'{field["type"]} {field["name"]}'
                                  for field in struct_types[name]) + ')'
            for name in [type_name] + sorted(deps))

    def type_hash(self, type_name):
        return keccak256(self.encode_type(type_name).encode())

    def encode_value(self, type_name, value):
        '''Encode a single value of type type_name as a 32-byte word.'''
        if value is None:
            raise ValidationError(f'missing value of type {type_name}')
        match = ARRAY_REGEX.match(type_name)
        if match:
            item_type, size = match.groups()
            if not isinstance(value, (list, tuple)):
                raise ValidationError(f'{type_name} value must be a list')
            if size and len(value) != int(size):
                raise ValidationError(f'{type_name} requires {size} items, got {len(value)}')
            return encode_array(self.encode_value(item_type, item) for item in value)
        if type_name in self._struct_types():
            return self.hash_struct(type_name, value)
        if type_name == 'address':
            return encode_address(value)
        if type_name == 'bool':
            if not isinstance(value, bool):
                raise ValidationError(f'bool value must be True or False, got {value!r}')
            return encode_bool(value)
        if type_name == 'string':
            return encode_string(value)
        if type_name == 'bytes':
            return encode_bytes(_to_bytes(value))
        match = BYTES_REGEX.match(type_name)
        if match:
            size = int(match.group(1))
            value = _to_bytes(value)
            if not 1 <= size <= 32 or len(value) != size:
                raise ValidationError(f'{type_name} value has {len(value)} bytes')
            return encode_bytes32(value)
        match = INT_REGEX.match(type_name)
        if match:
            unsigned, bits = match.group(1), int(match.group(2))
            if bits % 8 or not 8 <= bits <= 256:
                raise ValidationError(f'invalid integer type {type_name}')
            value = _to_int(value)
            if unsigned:
                if not 0 <= value < (1 << bits):
                    raise ValidationError(f'value {value} out of range for {type_name}')
                return encode_uint256(value)
            if not -(1 << (bits - 1)) <= value < (1 << (bits - 1)):
                raise ValidationError(f'value {value} out of range for {type_name}')
            return encode_int256(value)
        raise ValidationError(f'unknown EIP-712 type {type_name}')

    def encode_data(self, type_name, data):
        struct_types = self._struct_types()
        return b''.join(self.encode_value(field['type'], data.get(field['name']))
                        for field in struct_types[type_name])

    def hash_struct(self, type_name=None, data=None):
        '''Hash a struct.  With no arguments, hash the primary message.'''
        if type_name is None:
            type_name, data = self.primary_type, self.message
        return keccak256(self.type_hash(type_name) + self.encode_data(type_name, data))

    def signing_hash(self):
        return hash_typed_data(self.domain, self)
