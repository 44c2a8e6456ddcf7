"""Seeded random streams shared by hazard, injury, and event rolls."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import hashlib
from typing import Callable, Dict, Protocol, TypeVar, runtime_checkable

from numpy.random import BitGenerator, Generator, PCG64

BitGeneratorFactory = Callable[[int], BitGenerator]

T = TypeVar("T")


@runtime_checkable
class RandomSource(Protocol):
    """Anything producing uniform floats in ``[0, 1)``.

    :class:`numpy.random.Generator` satisfies this protocol, as do the
    scripted sources used in tests.
    """

    def random(self) -> float:  # noqa: D401
        ...


def _default_bit_generator(seed: int) -> BitGenerator:
    return PCG64(seed)


_BITGEN_MODULUS = 2**128


def _stable_hash(value: str, *, modulo: int) -> int:
    """Return a deterministic hash of ``value`` bounded by ``modulo``."""

    digest = hashlib.blake2b(value.encode("utf-8"), digest_size=16).digest()
    return int.from_bytes(digest, "big") % modulo


@dataclass
class SalvageRandomness:
    """Provides independent seeded RNG streams derived from one expedition seed."""

    seed: int
    bit_generator_factory: BitGeneratorFactory = _default_bit_generator
    _generators: Dict[str, Generator] = field(default_factory=dict)

    def _derive_seed(self, namespace: str) -> int:
        token = f"{self.seed}:{namespace}"
        return _stable_hash(token, modulo=_BITGEN_MODULUS) or 1

    def generator(self, stream: str = "default") -> Generator:
        """Return (and cache) a ``numpy.random.Generator`` for ``stream``."""

        if stream not in self._generators:
            bit_gen = self.bit_generator_factory(self._derive_seed(f"rng:{stream}"))
            self._generators[stream] = Generator(bit_gen)
        return self._generators[stream]


def roll_chance(rng: RandomSource, probability: float) -> bool:
    """Return ``True`` with ``probability`` using a single draw from ``rng``."""

    return float(rng.random()) < probability


def roll_percent(rng: RandomSource) -> float:
    """Return a uniform roll on the ``[0, 100)`` scale."""

    return float(rng.random()) * 100.0


def choose(rng: RandomSource, options: Sequence[T]) -> T:
    """Pick one element of ``options`` uniformly."""

    if not options:
        raise ValueError("cannot choose from an empty sequence")
    index = int(float(rng.random()) * len(options))
    return options[min(index, len(options) - 1)]


__all__ = [
    "RandomSource",
    "SalvageRandomness",
    "choose",
    "roll_chance",
    "roll_percent",
]
