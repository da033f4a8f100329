from __future__ import annotations
from typing import Iterator, Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]

UNKNOWN_HEX = "??"
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class Keystream:
    """Fixed-size keystream buffer where each position is either unknown or resolved.

    Positions are stored as ``None`` (unknown) or an ``int`` (resolved). Once a
    position is resolved it is never overwritten.
    """

    def __init__(self, length: int):
        if length < 0:
            raise ValueError("Keystream length must be non-negative")
        self.__positions: list[Optional[int]] = [None] * length

    @classmethod
    def from_hex(cls, text: str, placeholder: str = UNKNOWN_HEX) -> 'Keystream':
        """Parse the output of ``hex()``: two hex digits per byte, the placeholder for unknown."""
        text = text.strip()
        if len(placeholder) != 2:
            raise ValueError("Placeholder must be two characters wide")
        if len(text) % 2 != 0:
            raise ValueError("Keystream hex must have an even number of characters")

        keystream = cls(len(text) // 2)
        for position in range(len(keystream)):
            pair = text[position * 2:position * 2 + 2]
            if pair == placeholder:
                continue
            if not all(ch in HEX_DIGITS for ch in pair):
                raise ValueError(f"Invalid keystream byte {pair!r} at position {position}")
            keystream.resolve(position, int(pair, 16))
        return keystream

    def resolve(self, position: int, value: int) -> bool:
        """Resolve a position if it is still unknown. Returns True if it was written."""
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Keystream byte out of range: {value}")
        if self.__positions[position] is not None:
            return False
        self.__positions[position] = value
        return True

    def is_resolved(self, position: int) -> bool:
        return self.__positions[position] is not None

    @property
    def known_count(self) -> int:
        return sum(1 for value in self.__positions if value is not None)

    def hex(self, placeholder: str = UNKNOWN_HEX, sep: str = "") -> str:
        return sep.join(placeholder if value is None else f"{value:02x}" for value in self.__positions)

    def __len__(self) -> int:
        return len(self.__positions)

    def __getitem__(self, position: int) -> Optional[int]:
        return self.__positions[position]

    def __iter__(self) -> Iterator[Optional[int]]:
        return iter(self.__positions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Keystream):
            return NotImplemented
        return list(self) == list(other)

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"Keystream(known={self.known_count}, total={len(self)})"
