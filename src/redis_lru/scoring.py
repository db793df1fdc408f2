"""Score generation for the recency/frequency index."""

from __future__ import annotations

import time
from typing import Callable, Union

Number = Union[int, float]
ScoreFn = Callable[[str], Number]


def wall_clock_ms(key: str) -> int:
    """Current wall-clock time in milliseconds. Yields LRU ordering."""
    return time.time_ns() // 1_000_000


def constant_score(key: str) -> int:
    """Every access weighs 1. Combined with increment this yields LFU ordering."""
    return 1


class ScoringPolicy:
    """Turns a logical key into the score written to the index.

    The index is read in ascending order, so raw scores are negated: the
    most recent (or most frequent) key always sits at rank 0.
    """

    def __init__(self, score_fn: ScoreFn, increment: bool = False) -> None:
        self._score_fn = score_fn
        self.increment = increment

    def score(self, key: str) -> float:
        return -self._score_fn(key)

    @staticmethod
    def raw(index_score: float | None) -> float | None:
        """Map a stored index score back to the value the score function produced."""
        if index_score is None:
            return None
        return -index_score
