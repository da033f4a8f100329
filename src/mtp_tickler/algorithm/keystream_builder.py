from itertools import combinations
from math import comb
from typing import Callable, Iterator, Optional, Sequence, Tuple

import structlog

from mtp_tickler.algorithm.position_resolver import resolve_position
from mtp_tickler.models.keystream import Keystream, BytesLike
from mtp_tickler.state_snapshot import RecoveryState

log = structlog.get_logger()

ProgressFn = Callable[[RecoveryState], None]


def iter_triples(m: int) -> Iterator[Tuple[int, int, int]]:
    """Yield every (i, j, k) with i < j < k < m in ascending order. Empty when m < 3."""
    return combinations(range(max(m, 0)), 3)


def update_keystream(keystream: Keystream, c1: BytesLike, c2: BytesLike, c3: BytesLike) -> int:
    """Run the position resolver over the common prefix of one triple.
    Returns the number of newly resolved positions."""
    n = min(len(keystream), len(c1), len(c2), len(c3))
    resolved = 0
    for position in range(n):
        if resolve_position(keystream, position, c1[position], c2[position], c3[position]):
            resolved += 1
    return resolved


def build_keystream(
    ciphertexts: Sequence[BytesLike],
    length: int,
    *,
    seed: Optional[Keystream] = None,
    on_progress: Optional[ProgressFn] = None,
) -> Keystream:
    """
    Recover a best-effort keystream from ciphertexts encrypted under the same key.
    - ciphertexts: the corpus, target included, in a fixed order
    - length: keystream length, usually the target's length
    - seed: bytes resolved by an earlier run; they are kept as already resolved
    Every triple is swept in i<j<k order; the first triple to classify a
    position wins and later triples never overwrite it.
    """
    keystream = Keystream(length)
    if seed is not None:
        for position, value in enumerate(seed):
            if position < length and value is not None:
                keystream.resolve(position, value)
    triple_count = comb(len(ciphertexts), 3)
    log.debug("building keystream", corpus=len(ciphertexts), length=length, triples=triple_count)

    state_version = 0
    for triple_index, (i, j, k) in enumerate(iter_triples(len(ciphertexts))):
        resolved = update_keystream(keystream, ciphertexts[i], ciphertexts[j], ciphertexts[k])
        if resolved:
            log.debug("triple resolved bytes", triple=(i, j, k), resolved=resolved, known=keystream.known_count)

        if on_progress is not None:
            state_version += 1
            on_progress(RecoveryState(
                state_version=state_version,
                complete=False,
                triple_count=triple_count,
                triple_index=triple_index,
                triple=(i, j, k),
                known=keystream.known_count,
                total=len(keystream),
                keystream=tuple(keystream),
            ))

    if on_progress is not None:
        on_progress(RecoveryState(
            state_version=state_version + 1,
            complete=True,
            triple_count=triple_count,
            triple_index=max(triple_count - 1, 0),
            triple=(0, 0, 0),
            known=keystream.known_count,
            total=len(keystream),
            keystream=tuple(keystream),
        ))

    return keystream
