"""Random source interface shared by the draw services."""

from typing import Protocol


class RandomSource(Protocol):
    """Uniform random generator. ``random.Random`` satisfies it."""

    def random(self) -> float:
        """Return a float uniformly drawn from [0, 1)."""

    def randint(self, a: int, b: int) -> int:
        """Return an integer uniformly drawn from [a, b]."""
