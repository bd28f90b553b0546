# rng.py
# Random sources consumed by the board engine. The engine only ever asks for
# "the next float in [0, 1)", so any object with next_float() will do.

import random
import re
import time
from typing import Optional, Protocol

UINT32_MASK = 0xFFFFFFFF
_TWO_POW_32 = 4294967296.0
_MULBERRY_INCREMENT = 0x6D2B79F5

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class RandomSource(Protocol):
    """Anything able to produce a float in [0, 1) on demand."""

    def next_float(self) -> float:
        ...


class SeededRandom:
    """
    Deterministic mulberry32 generator.
    The same seed driven through the same sequence of calls yields the same
    values on every platform, which is what makes seeded games shareable.
    Args:
        seed (int): Any integer; it is reduced modulo 2**32.
    """

    def __init__(self, seed: int):
        self._state = int(seed) & UINT32_MASK

    @classmethod
    def from_state(cls, state: int) -> "SeededRandom":
        """Resumes a sequence from a previously captured `state`."""
        return cls(state)

    @property
    def state(self) -> int:
        """Current 32-bit internal state; feed it to from_state() to resume."""
        return self._state

    def next_float(self) -> float:
        self._state = (self._state + _MULBERRY_INCREMENT) & UINT32_MASK
        t = self._state
        r = ((t ^ (t >> 15)) * (t | 1)) & UINT32_MASK
        r = ((r + (((r ^ (r >> 7)) * (r | 61)) & UINT32_MASK)) & UINT32_MASK) ^ r
        return ((r ^ (r >> 14)) & UINT32_MASK) / _TWO_POW_32

    __call__ = next_float

    def __repr__(self) -> str:
        return f"SeededRandom(state={self._state})"


class SystemRandom:
    """Adapter exposing a `random.Random` instance as a RandomSource."""

    def __init__(self, random_instance: Optional[random.Random] = None):
        self._random = random_instance if random_instance is not None else random.Random()

    def next_float(self) -> float:
        return self._random.random()

    __call__ = next_float


def create_seeded_rng(seed: int) -> SeededRandom:
    """
    Creates a fresh deterministic generator for `seed`.
    Args:
        seed (int): The game seed.
    Returns:
        SeededRandom: A generator positioned at the start of the seed's sequence.
    """
    return SeededRandom(seed)


def parse_seed(text: Optional[str]) -> Optional[int]:
    """
    Reads the leading integer of a seed string ("42abc" -> 42).
    Returns None when the text has no leading integer.
    """
    if text is None:
        return None
    match = _LEADING_INT.match(text)
    if not match:
        return None
    return int(match.group(1))


def rng_from_seed_text(text: Optional[str]) -> RandomSource:
    """
    Picks the random source for a game from user supplied seed text.
    Blank text means an unseeded game. Text that is not a number still gives a
    seeded game, seeded from the current time in milliseconds.
    Args:
        text (Optional[str]): Seed as typed by the user or read from a URL.
    Returns:
        RandomSource: SystemRandom for blank text, SeededRandom otherwise.
    """
    if text is None or text.strip() == "":
        return SystemRandom()
    seed = parse_seed(text)
    if seed is None:
        seed = int(time.time() * 1000)
    return create_seeded_rng(seed)
