"""
Fixed pairing designs for each roster size.

Pool pairings are written in pool letters, bracket pairings in bracket
letters (assigned after pool play). A bracket side may instead reference an
earlier bracket match by label: "Winner SF" or "Loser SF1".
"""
import string

from league.points import SUPPORTED_SIZES

LETTERS = string.ascii_uppercase

POOL_TEMPLATES = {
    4: [('AB', 'CD'), ('AD', 'BC'), ('AC', 'BD')],
    5: [('AC', 'DE'), ('AE', 'BD'), ('AD', 'BC'), ('AE', 'BC'), ('BE', 'CD')],
    6: [('AB', 'CD'), ('AF', 'BE'), ('CD', 'EF'), ('AD', 'BC'), ('AE', 'BF'), ('CF', 'DE')],
    7: [('AG', 'CE'), ('BF', 'DG'), ('AC', 'EF'), ('BD', 'EG'), ('AD', 'CF'), ('BC', 'AF'), ('BG', 'DE')],
    8: [('AC', 'EG'), ('BD', 'FH'), ('AG', 'CE'), ('BH', 'DF'), ('AE', 'CG'), ('BF', 'DH')],
}

# (label, side1, side2) in play order; references only name earlier labels
BRACKET_TEMPLATES = {
    4: [('Final', 'AB', 'CD')],
    5: [('Final', 'AB', 'CD')],
    6: [('SF', 'CD', 'EF'), ('Final', 'AB', 'Winner SF')],
    7: [('SF', 'CD', 'EF'), ('Final', 'AB', 'Winner SF')],
    8: [
        ('SF1', 'AB', 'GH'),
        ('SF2', 'CD', 'EF'),
        ('Bronze', 'Loser SF1', 'Loser SF2'),
        ('Final', 'Winner SF1', 'Winner SF2'),
    ],
}

# Bracket letter that sits out the bracket and is placed by structure
STRUCTURAL_PLACES = {
    5: {5: 'E'},
    7: {7: 'G'},
}


def letters_for_size(size: int) -> str:
    """Return the letters used by a roster of the given size ('ABCD' for 4)."""
    return LETTERS[:size]


def check_size(size) -> int:
    if size not in SUPPORTED_SIZES:
        raise ValueError(f'Unsupported event size: {size} (supported: {list(SUPPORTED_SIZES)})')
    return size


def pool_template(size):
    return list(POOL_TEMPLATES[check_size(size)])


def bracket_template(size):
    return list(BRACKET_TEMPLATES[check_size(size)])


def structural_places(size):
    """Return {rank: letter} for players placed without playing the bracket."""
    return dict(STRUCTURAL_PLACES.get(check_size(size), {}))
