from .address import *
from .base58 import *
from .bip32 import *
from .bip44 import *
from .consts import *
from .discovery import *
from .eip712 import *
from .erc4337 import *
from .errors import *
from .hashes import *
from .keys import *
from .misc import *
from .mnemonic import *
from .networks import *
from .packing import *
from .rlp import *
from .signature import *
from .signer import *
from .tx import *
from .units import *
from .wallet import *

_version_str = '0.1'
_version = tuple(int(part) for part in _version_str.split('.'))

__all__ = sum((
    address.__all__,
    base58.__all__,
    bip32.__all__,
    bip44.__all__,
    consts.__all__,
    discovery.__all__,
    eip712.__all__,
    erc4337.__all__,
    errors.__all__,
    hashes.__all__,
    keys.__all__,
    misc.__all__,
    mnemonic.__all__,
    networks.__all__,
    packing.__all__,
    rlp.__all__,
    signature.__all__,
    signer.__all__,
    tx.__all__,
    units.__all__,
    wallet.__all__,
), ())
