# Copyright (c) 2024, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Conversion of EVM amounts between wei, gwei and ether.

Amounts are plain integers counting wei.  Larger units are expressed as Decimal, or as
strings and integers that convert to one exactly.  Floats are refused: 0.1 ether is
not representable as a float.
'''

__all__ = (
    'validate_wei', 'wei_from_gwei', 'wei_from_ether', 'gwei_from_wei', 'ether_from_wei',
)

from decimal import Decimal, InvalidOperation, localcontext

from .consts import ETHER, GWEI, UINT256_MAX
from .errors import ValidationError


# Enough digits to hold any 256-bit integer exactly
PRECISION = 100


def validate_wei(amount):
    '''Return amount if it is an integer number of wei that fits in 256 bits.'''
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f'a wei amount must be an integer, not {type(amount).__name__}')
    if not 0 <= amount <= UINT256_MAX:
        raise ValidationError(f'invalid wei amount: {amount}')
    return amount


def _to_wei(amount, unit):
    if isinstance(amount, (bool, float)):
        raise TypeError(f'cannot convert {type(amount).__name__} to wei')
    if isinstance(amount, int):
        return validate_wei(amount * unit)
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f'invalid amount: {amount!r}') from None
    if not value.is_finite():
        raise ValidationError(f'invalid amount: {amount}')
    with localcontext() as context:
        context.prec = PRECISION
        wei = value * unit
    if wei != wei.to_integral_value():
        raise ValidationError(f'{amount} is not a whole number of wei')
    return validate_wei(int(wei))


def _from_wei(amount, unit):
    validate_wei(amount)
    with localcontext() as context:
        context.prec = PRECISION
        return (Decimal(amount) / unit).normalize()


def wei_from_gwei(amount):
    '''Return the wei in amount gwei, e.g. wei_from_gwei('1.5') == 1_500_000_000.'''
    return _to_wei(amount, GWEI)


def wei_from_ether(amount):
    return _to_wei(amount, ETHER)


def gwei_from_wei(amount):
    '''Return an exact Decimal; fractions of a gwei are kept.'''
    return _from_wei(amount, GWEI)


def ether_from_wei(amount):
    return _from_wei(amount, ETHER)
