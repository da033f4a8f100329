from dataclasses import dataclass
from typing import List, Sequence

from mtp_tickler.models.keystream import Keystream, BytesLike

PLACEHOLDER = "_"


@dataclass(frozen=True, slots=True)
class RecoveryStats:
    known: int
    total: int

    @property
    def ratio(self) -> float:
        return self.known / self.total if self.total else 0.0

    def __str__(self) -> str:
        return f"{self.known}/{self.total}"


def decode_with_keystream(ciphertext: BytesLike, keystream: Keystream, placeholder: str = PLACEHOLDER) -> str:
    """XOR the ciphertext with the keystream; unknown positions become the placeholder."""
    n = min(len(ciphertext), len(keystream))
    out = []
    for i in range(n):
        key_byte = keystream[i]
        if key_byte is None:
            out.append(placeholder)
        else:
            out.append(chr(ciphertext[i] ^ key_byte))
    return "".join(out)


def decode_corpus(ciphertexts: Sequence[BytesLike], keystream: Keystream, placeholder: str = PLACEHOLDER) -> List[str]:
    return [decode_with_keystream(ct, keystream, placeholder) for ct in ciphertexts]


def recovery_stats(keystream: Keystream) -> RecoveryStats:
    return RecoveryStats(known=keystream.known_count, total=len(keystream))
