"""
Utility functions for room code generation
"""
import random
from typing import Container, Optional

from .exceptions import CodeSpaceExhausted

CODE_MIN = 1000
CODE_MAX = 9999


def generate_room_code(rng: Optional[random.Random] = None) -> str:
    """Generate a random 4-digit room code"""
    rng = rng or random
    return str(rng.randint(CODE_MIN, CODE_MAX))


def generate_unique_room_code(
    taken: Container[str],
    rng: Optional[random.Random] = None,
    max_attempts: int = 10000,
) -> str:
    """
    Draw codes until one is not in `taken`

    Raises:
        CodeSpaceExhausted: after `max_attempts` collisions in a row
    """
    for _ in range(max_attempts):
        code = generate_room_code(rng)
        if code not in taken:
            return code
    raise CodeSpaceExhausted(max_attempts)
