from walletx import AddressDiscovery


ABANDON_PHRASE = ('abandon abandon abandon abandon abandon abandon abandon abandon '
                  'abandon abandon abandon about')
TREZOR_SEED = bytes.fromhex(
    'c55257c360c07c72029aebc1b53c05ed0362ada38ead3e3e9efa3708e53495531f09a6987599d182'
    '64c1e1c92f2cf141630c7a3c4ab7c81b2f001698e7463b04'
)
PRIVKEY_ONE = bytes(31) + b'\1'
PRIVKEY_ONE_ADDRESS = '0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf'
PRIVKEY_ONES = bytes([1]) * 32


class MockBlockchain(AddressDiscovery):
    '''Reports the given indices as used and records every query.'''

    def __init__(self, used_indices=()):
        self.used_indices = set(used_indices)
        self.queries = []

    def is_address_used(self, address_index):
        self.queries.append(address_index)
        return address_index in self.used_indices


class FixedSource:
    '''A replacement for os.urandom returning predetermined bytes.'''

    def __init__(self, *chunks):
        self.chunks = list(chunks)
        self.requests = []

    def __call__(self, size):
        self.requests.append(size)
        return self.chunks.pop(0)[:size]
