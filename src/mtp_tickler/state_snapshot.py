from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class RecoveryState:
    """Immutable snapshot of keystream recovery progress."""

    state_version: int
    complete: bool
    triple_count: int
    triple_index: int
    triple: Tuple[int, int, int]
    known: int
    total: int

    keystream: Tuple[Optional[int], ...] = field(default_factory=tuple)

    @property
    def completion_percent(self) -> float:
        if self.total == 0:
            return 0.0
        return self.known / self.total * 100
