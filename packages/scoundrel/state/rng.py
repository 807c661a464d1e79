"""
Deterministic RNG for deck shuffles and session seeds.

Every random decision in the engine goes through a seeded XorShift128
generator, so a game is fully reproducible from its seed:

- Seed strings ("ABC123") are converted to integers with a base-35 alphabet
  (0-9, A-Z without O; O is read as 0). Purely numeric strings are plain ints.
- ``Random`` wraps the generator with the two draws the engine needs: bounded
  ints for shuffles and raw longs for deriving the next game seed.
"""

from typing import Union

MASK_64 = 0xFFFFFFFFFFFFFFFF

SEED_CHARACTERS = "0123456789ABCDEFGHIJKLMNPQRSTUVWXYZ"


class XorShift128:
    """XorShift128+ generator over two 64-bit words of state."""

    def __init__(self, seed: int):
        if seed == 0:
            # An all-zero state would only ever produce zeros
            seed = -0x8000000000000000
        self.seed0 = self._murmur_hash3(seed)
        self.seed1 = self._murmur_hash3(self.seed0)

    @staticmethod
    def _murmur_hash3(x: int) -> int:
        """MurmurHash3 finalizer, spreads a raw seed over all 64 bits."""
        x &= MASK_64
        x ^= x >> 33
        x = (x * 0xff51afd7ed558ccd) & MASK_64
        x ^= x >> 33
        x = (x * 0xc4ceb9fe1a85ec53) & MASK_64
        x ^= x >> 33
        return x

    def _next_long(self) -> int:
        """Advance the state and return the next unsigned 64-bit value."""
        s1 = self.seed0
        s0 = self.seed1
        self.seed0 = s0
        s1 ^= (s1 << 23) & MASK_64
        self.seed1 = (s1 ^ s0 ^ (s1 >> 17) ^ (s0 >> 26)) & MASK_64
        return (self.seed0 + self.seed1) & MASK_64

    def next_int(self, bound: int) -> int:
        """Uniform int in [0, bound)."""
        if bound <= 0:
            raise ValueError("bound must be positive")

        # Rejection sampling on 63 bits keeps the result unbiased
        limit = (1 << 63) - ((1 << 63) % bound)
        while True:
            bits = self._next_long() >> 1
            if bits < limit:
                return bits % bound


class Random:
    """Seeded stream of shuffle indices and child seeds."""

    def __init__(self, seed: int):
        self._rng = XorShift128(seed)

    def random_int(self, range_val: int) -> int:
        """Random int in [0, range_val] INCLUSIVE."""
        return self._rng.next_int(range_val + 1)

    def random_long(self) -> int:
        """Raw non-negative 63-bit value, used to derive child seeds."""
        return self._rng._next_long() >> 1


def seed_to_long(seed: Union[str, int]) -> int:
    """
    Convert a seed string (e.g. "ABC123") or int to the numeric seed.

    Numeric strings (including negative ones) are read as decimal so that
    seeds printed by ``long_to_seed`` on small values and seeds pasted from
    logs both round-trip.
    """
    if isinstance(seed, bool):
        raise ValueError(f"Invalid seed: {seed!r}")
    if isinstance(seed, int):
        return seed
    if not isinstance(seed, str):
        raise ValueError(f"Seed must be str or int, got {type(seed).__name__}")

    seed_string = seed.strip()
    if not seed_string:
        raise ValueError("Seed string is empty")
    if seed_string.lstrip("-").isdigit():
        return int(seed_string)

    seed_string = seed_string.upper().replace("O", "0")
    result = 0
    for char in seed_string:
        remainder = SEED_CHARACTERS.find(char)
        if remainder == -1:
            continue  # Skip separators and other noise
        result = result * len(SEED_CHARACTERS) + remainder
    return result


def long_to_seed(seed_long: int) -> str:
    """Render a numeric seed in the base-35 seed alphabet."""
    if seed_long == 0:
        return "0"

    leftover = seed_long & MASK_64
    chars = []
    while leftover != 0:
        leftover, remainder = divmod(leftover, len(SEED_CHARACTERS))
        chars.append(SEED_CHARACTERS[remainder])
    return "".join(reversed(chars))
