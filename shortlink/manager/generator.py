"""
Short-code generation for the Shortlink Platform.

Provided generators:
- RandomCodeGenerator: uniform random code of length L over the 62-symbol
  alphanumeric alphabet (A-Z, a-z, 0-9). L defaults to 6.

Collisions are expected, not exceptional: at 62^6 (~5.7e10) codes a busy table
will eventually draw a used one. The allocator absorbs them with a bounded
retry loop, so the generator stays a stateless function of its random source.

Configuration (via shortlink.config.settings):
- CODE_LENGTH: default length of generated codes (default 6; clamped 3..16)

Notes:
- `random.SystemRandom` draws from os.urandom; predictable codes would let
  anyone enumerate the links of other users.
- Generated codes never contain "_" or "-", so they are always valid aliases
  too and need no further validation.
"""

import random
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from shortlink.config import settings

ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
DEFAULT_CODE_LENGTH = 6


class BaseCodeGenerator(ABC):
    """Abstract base for code generators."""

    @abstractmethod
    def generate(self) -> str:
        """Return one candidate short code."""
        raise NotImplementedError


@dataclass(frozen=True)
class RandomCodeGenerator(BaseCodeGenerator):
    """Random codes of a fixed length; uniqueness is left to storage (insert-if-absent + retry)."""

    length: int = DEFAULT_CODE_LENGTH
    alphabet: str = ALPHABET
    _rng: random.SystemRandom = field(default_factory=random.SystemRandom, init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.length < 1:
            raise ValueError("length must be positive")
        if not self.alphabet:
            raise ValueError("alphabet must not be empty")

    def generate(self) -> str:
        choice = self._rng.choice
        return "".join(choice(self.alphabet) for _ in range(self.length))


def get_generator_from_config(length: Optional[int] = None) -> BaseCodeGenerator:
    """Build the default generator using settings.CODE_LENGTH unless `length` is given."""
    return RandomCodeGenerator(length=length or settings.CODE_LENGTH)
