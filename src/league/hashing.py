"""
Deterministic name ordering.

Used to seed players without standings and to break pool ties that no
other rule separates. The order depends only on the names themselves.
"""
from typing import Iterable, List


def name_hash(name: str) -> int:
    """Fold the UTF-16 code units of a name into a signed 32-bit hash.

    h = h * 31 + code, wrapping at 32 bits, starting from 0.
    """
    h = 0
    data = name.encode('utf-16-le')
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        h = (h * 31 + code) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def order_deterministically(names: Iterable[str]) -> List[str]:
    """Sort names ascending by hash (name breaks equal hashes)."""
    return sorted(names, key=lambda n: (name_hash(n), n))
