"""
Modular exponentiation mapping for display.

Maps every index i in [0, count) to (i^e mod n) mod count. When n <= count
this is the map i -> i^e mod n itself (a permutation of Z_n when e is a
valid RSA exponent). When n > count the trailing ``mod count`` folds the
values back into the drawable range, so the result is only an
approximation of the real mapping.
"""

from typing import List

from ..config import MAPPING_MAX_COUNT
from ..errors import InvalidInputError
from ..logging_setup import get_logger
from .rsa_math import mod_exp


log = get_logger(__name__)


def map_mod_exp(exponent: int, modulus: int, count: int,
                max_count: int = MAPPING_MAX_COUNT) -> List[int]:
    """
    Compute the display mapping i -> (i^exponent mod modulus) mod count.

    Args:
        exponent: Non-negative exponent e
        modulus: Positive modulus n
        count: Number of indices; clamped to ``max_count``
        max_count: Safety cap on the mapping length

    Returns:
        List of length min(count, max_count)

    Raises:
        InvalidInputError: If count or exponent is negative, or modulus <= 0
    """
    if count < 0:
        raise InvalidInputError(f"Count must be non-negative, got {count}")
    if exponent < 0:
        raise InvalidInputError(f"Exponent must be non-negative, got {exponent}")
    if modulus <= 0:
        raise InvalidInputError(f"Modulus must be positive, got {modulus}")

    if count > max_count:
        log.warning("mapping.count_clamped", requested=count, cap=max_count)
        count = max_count

    return [mod_exp(i, exponent, modulus) % count for i in range(count)]
