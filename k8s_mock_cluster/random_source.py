"""Seeded random streams used by every generator.

Each generator receives its own :class:`RandomSource`. Sub-streams are derived
from the profile seed and a stream name, so the number of values drawn by one
generator never shifts the output of another.
"""

from __future__ import annotations

import hashlib
import random
import string
import uuid
from typing import Sequence, TypeVar

T = TypeVar("T")

ALPHANUMERIC = string.ascii_letters + string.digits


class RandomSource:
    """Reproducible stream of integers, floats, tokens and choices."""

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self._random = random.Random(seed)

    @classmethod
    def derive(cls, base_seed: int, stream: str) -> "RandomSource":
        """Return an independent stream for ``stream`` under ``base_seed``."""

        digest = hashlib.sha256(f"{base_seed}:{stream}".encode("utf-8")).digest()
        return cls(int.from_bytes(digest[:8], "big"))

    def integer(self, minimum: int, maximum: int) -> int:
        """Uniform integer in ``[minimum, maximum]``."""

        if maximum < minimum:
            minimum, maximum = maximum, minimum
        return self._random.randint(minimum, maximum)

    def uniform(self, minimum: float, maximum: float) -> float:
        return self._random.uniform(minimum, maximum)

    def choice(self, options: Sequence[T]) -> T:
        return self._random.choice(options)

    def alphanumeric(self, length: int) -> str:
        return "".join(self._random.choices(ALPHANUMERIC, k=length))

    def ipv4(self) -> str:
        return (
            f"{self._random.randint(1, 254)}.{self._random.randint(0, 255)}."
            f"{self._random.randint(0, 255)}.{self._random.randint(1, 254)}"
        )

    def uuid4(self) -> str:
        return str(uuid.UUID(int=self._random.getrandbits(128), version=4))


__all__ = ["RandomSource"]
