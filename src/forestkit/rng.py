"""Deterministic MT19937 pseudo-random generator.

The generator uses integer arithmetic only, so a given seed produces the same
32-bit sequence on every platform. Determinism holds only under strictly
sequential access; instances are not thread-safe and must not be shared
between worker threads.
"""

from __future__ import annotations

from typing import Final

_N: Final[int] = 624
_M: Final[int] = 397
_MATRIX_A: Final[int] = 0x9908B0DF
_UPPER_MASK: Final[int] = 0x80000000
_LOWER_MASK: Final[int] = 0x7FFFFFFF
_U32_MASK: Final[int] = 0xFFFFFFFF

DEFAULT_SEED: Final[int] = 44


class MersenneTwister:
    """MT19937 generator with a 624-word state.

    Examples:
        >>> MersenneTwister(5489).next_u32()
        3499211612
    """

    def __init__(self, seed: int = DEFAULT_SEED) -> None:
        self._state = [0] * _N
        self._index = _N
        self.seed(seed)

    def seed(self, seed: int) -> None:
        """Re-initialize the state from a 32-bit seed.

        Args:
            seed (int): Seed value; only the low 32 bits are used.
        """
        state = self._state
        state[0] = seed & _U32_MASK
        for i in range(1, _N):
            prev = state[i - 1]
            state[i] = (1812433253 * (prev ^ (prev >> 30)) + i) & _U32_MASK
        self._index = _N

    def _twist(self) -> None:
        state = self._state
        for kk in range(_N):
            y = (state[kk] & _UPPER_MASK) | (state[(kk + 1) % _N] & _LOWER_MASK)
            value = state[(kk + _M) % _N] ^ (y >> 1)
            if y & 0x1:
                value ^= _MATRIX_A
            state[kk] = value
        self._index = 0

    def next_u32(self) -> int:
        """Advance the state and return the next 32-bit value.

        Returns:
            int: A value in `[0, 2**32)`.
        """
        if self._index >= _N:
            self._twist()

        y = self._state[self._index]
        self._index += 1

        y ^= y >> 11
        y ^= (y << 7) & 0x9D2C5680
        y ^= (y << 15) & 0xEFC60000
        y ^= y >> 18
        return y & _U32_MASK

    def next_bounded(self, n: int) -> int:
        """Return `next_u32() % n`.

        The modulo bias is accepted.

        Args:
            n (int): Exclusive upper bound; must be positive.

        Returns:
            int: A value in `[0, n)`.

        Raises:
            ValueError: If `n` is not positive.
        """
        if n <= 0:
            raise ValueError(f"Upper bound must be positive, got {n}")
        return self.next_u32() % n


def derive_seeds(master_seed: int, count: int) -> list[int]:
    """Expand a master seed into `count` per-task seeds.

    Draws are taken sequentially from a fresh generator, so the result depends
    only on `master_seed` and `count`.

    Args:
        master_seed (int): The seed for the master generator.
        count (int): Number of seeds to derive.

    Returns:
        list[int]: One 32-bit seed per task.
    """
    master = MersenneTwister(master_seed)
    return [master.next_u32() for _ in range(count)]
