# rng/random_number_generator.py

import random
import secrets
from typing import List, TypeVar, Sequence, Optional

T = TypeVar('T')

SEED_BITS = 64
SEED_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def parse_seed(text: str) -> int:
    """Parse a base-36 seed name into a 64 bit integer.

    Raises:
        ValueError: text is not base 36 or doesn't fit in 64 bits.
    """
    try:
        seed = int(text.strip(), 36)
    except ValueError:
        raise ValueError(f"Seed name must be a valid base36 64 bit number: {text!r}") from None
    if not 0 <= seed < 2**SEED_BITS:
        raise ValueError(f"Seed name must be a valid base36 64 bit number: {text!r}")
    return seed


def format_seed(seed: int) -> str:
    """Render a seed as a lowercase base-36 name."""
    if seed < 0:
        raise ValueError(f"seed must not be negative: {seed}")
    digits = []
    while True:
        seed, digit = divmod(seed, 36)
        digits.append(SEED_ALPHABET[digit])
        if seed == 0:
            break
    return ''.join(reversed(digits))


def random_seed() -> int:
    """Draw a fresh 64 bit seed from the OS."""
    return secrets.randbits(SEED_BITS)


class RandomNumberGenerator:
    """Deterministic RNG manager for the randomizer.

    This class wraps Python's random.Random to provide deterministic
    randomization across all randomizer operations. All randomization
    should use this class instead of the global random module to ensure
    reproducibility with the same seed.

    The API mirrors Python's random.Random class for consistency and
    ease of substitution.

    Usage:
        rng = RandomNumberGenerator(12345)
        value = rng.randint(1, 100)
        rng.shuffle(my_list)
    """

    def __init__(self, seed: int):
        """Initialize RNG with a seed.

        Args:
            seed: Integer seed for deterministic random generation
        """
        self._seed = seed
        self._rng = random.Random(seed)
        self._initial_state = self._rng.getstate()

    @classmethod
    def from_seed_name(cls, name: Optional[str] = None) -> 'RandomNumberGenerator':
        """Create an RNG from a base-36 seed name, or a random seed if None."""
        return cls(parse_seed(name) if name is not None else random_seed())

    @property
    def seed(self) -> int:
        """Get the seed used to initialize this RNG."""
        return self._seed

    @property
    def seed_name(self) -> str:
        """The seed as a base-36 name."""
        return format_seed(self._seed)

    def reset(self) -> None:
        """Reset RNG to initial seeded state."""
        self._rng.setstate(self._initial_state)

    # ========================================================================
    # Random operation methods (mirror random.Random API)
    # ========================================================================

    def randint(self, a: int, b: int) -> int:
        """Return random integer in range [a, b], including both end points."""
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        return self._rng.choice(seq)

    def shuffle(self, x: List) -> None:
        """Shuffle list x in-place, and return None."""
        self._rng.shuffle(x)
