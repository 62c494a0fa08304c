"""
Points awards and game targets for league matchdays.
"""

SUPPORTED_SIZES = (4, 5, 6, 7, 8)

# Awards by roster size and placement rank
POINTS_TABLE = {
    4: {'label': 'Challenger', 'awards': {1: 250, 2: 100}},
    5: {'label': 'Challenger', 'awards': {1: 300, 2: 100, 5: 50}},
    6: {'label': 'Signature', 'awards': {1: 600, 2: 300, 3: 100}},
    7: {'label': 'Signature', 'awards': {1: 700, 2: 400, 3: 100, 7: 50}},
    8: {'label': 'Slam', 'awards': {1: 1000, 2: 600, 3: 250, 4: 100}},
}

# Title counter incremented for a rank-1 finish at each tier
TITLE_FIELDS = {
    'Slam': 'slam_wins',
    'Signature': 'signature_wins',
    'Challenger': 'challenger_wins',
}

POOL_TARGET = 11
POOL_WIN_BY = 1
BRACKET_TARGET = 15
BRACKET_WIN_BY = 2


def get_tier(size):
    """Return the tier label for a roster size, or None if unsupported."""
    info = POINTS_TABLE.get(size)
    return info['label'] if info else None


def get_awards(size):
    """Return the rank -> points mapping for a size (empty if unsupported)."""
    info = POINTS_TABLE.get(size)
    return dict(info['awards']) if info else {}


def is_supported_size(size) -> bool:
    return size in POINTS_TABLE
