from typing import Optional

from mtp_tickler.models.keystream import Keystream

SPACE = 0x20


def is_letter_coincident(x: int) -> bool:
    """True if x is in [A-Z] or [a-z], i.e. what a space XOR a letter produces."""
    return 0x41 <= x <= 0x5A or 0x61 <= x <= 0x7A


def classify(c1: int, c2: int, c3: int) -> Optional[int]:
    """
    Guess the keystream byte for one aligned position of three ciphertexts.

    If one plaintext is a space and the other two are letters, the space
    ciphertext XORed with each of the others lands in the letter range while
    the letter/letter pair usually does not. Exactly one of three two-out-of-three
    patterns must match, checked in a fixed order:
    - X13 and X23: ciphertext 3 carries the space.
    - X12 and X23: ciphertext 2 carries the space.
    - X12 and X13: ciphertext 1 carries the space.
    Returns the keystream byte, or None when the position is inconclusive.
    """
    # Equal bytes XOR to zero and carry no signal.
    if c1 == c2 or c1 == c3 or c2 == c3:
        return None

    a12 = is_letter_coincident(c1 ^ c2)
    a13 = is_letter_coincident(c1 ^ c3)
    a23 = is_letter_coincident(c2 ^ c3)

    # X23 == X12 ^ X13 and every letter has bit 0x40 set, so at most two can match.
    if a13 and a23:
        return c3 ^ SPACE
    elif a12 and a23:
        return c2 ^ SPACE
    elif a12 and a13:
        return c1 ^ SPACE
    return None


def resolve_position(keystream: Keystream, position: int, c1: int, c2: int, c3: int) -> bool:
    """Classify one position and commit it if still unknown. Returns True on a new resolution."""
    if keystream.is_resolved(position):
        return False

    value = classify(c1, c2, c3)
    if value is None:
        return False
    return keystream.resolve(position, value)
