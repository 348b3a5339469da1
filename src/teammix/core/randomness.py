from __future__ import annotations

import hashlib
import random
from typing import Any, Sequence

from teammix.contracts import RandomSource


class PythonRandomSource(RandomSource):
    """Random draws for mixing: per-position flips, picks and named substreams.

    An unseeded source spawns unseeded children; a seeded one derives each child
    seed from its own seed and the substream name, so batches replay exactly.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, items: Sequence[Any]) -> Any:
        if not items:
            raise ValueError("cannot pick from an empty pool")
        return self._rng.choice(items)

    def spawn(self, substream_id: str) -> RandomSource:
        if self._seed is None:
            return mix_random()
        key = f"{self._seed}:{substream_id}".encode("utf-8")
        return seeded_random(int.from_bytes(hashlib.sha256(key).digest()[:8], "big"))


def mix_random() -> PythonRandomSource:
    return PythonRandomSource()


def seeded_random(seed: int) -> PythonRandomSource:
    return PythonRandomSource(seed=seed)
