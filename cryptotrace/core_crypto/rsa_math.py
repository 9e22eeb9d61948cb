"""
Integer Kernel

Arbitrary-precision number theory used by every tracer:
- Modular exponentiation (square-and-multiply algorithm)
- GCD / LCM and the iterative Extended Euclidean Algorithm
- Modular inverse (absent inverse is reported as None)
- Miller-Rabin primality testing and prime generation
- Big-endian byte <-> integer codec

Note: This implementation avoids using Python's built-in pow(a, b, mod).
      All modular exponentiation uses the square-and-multiply algorithm.
"""

import secrets
from typing import Optional, Tuple

from ..errors import InvalidInputError


# Witnesses for the Miller-Rabin test. Using the first twelve primes makes
# the test deterministic for every n < 3.3 * 10^24.
MILLER_RABIN_WITNESSES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)


def _require_positive_modulus(modulus: int) -> None:
    if modulus <= 0:
        raise InvalidInputError(f"Modulus must be positive, got {modulus}")


def mod_exp(base: int, exponent: int, modulus: int) -> int:
    """
    Modular exponentiation using square-and-multiply algorithm.

    Algorithm (right-to-left binary method):
    1. Start with result = 1
    2. For each bit of exponent (from LSB to MSB):
       - If bit is 1, multiply result by base (mod modulus)
       - Square the base (mod modulus)

    Time complexity: O(log exponent) multiplications

    Args:
        base: The base number (negative bases are reduced first)
        exponent: The exponent (must be non-negative)
        modulus: The modulus (must be positive)

    Returns:
        (base^exponent) mod modulus, always in [0, modulus)

    Raises:
        InvalidInputError: If exponent < 0 or modulus <= 0
    """
    if exponent < 0:
        raise InvalidInputError(f"Exponent must be non-negative, got {exponent}")
    _require_positive_modulus(modulus)
    if modulus == 1:
        return 0

    base = base % modulus
    result = 1

    while exponent > 0:
        if exponent & 1:
            result = (result * base) % modulus
        base = (base * base) % modulus
        exponent >>= 1

    return result


def gcd(a: int, b: int) -> int:
    """
    Compute the greatest common divisor using Euclidean algorithm.

    Args:
        a: First integer
        b: Second integer

    Returns:
        Non-negative GCD of a and b (gcd(0, 0) = 0)
    """
    a, b = abs(a), abs(b)
    while b:
        a, b = b, a % b
    return a


def lcm(a: int, b: int) -> int:
    """Least common multiple; lcm(0, x) = 0 by convention."""
    if a == 0 or b == 0:
        return 0
    return abs(a // gcd(a, b) * b)


def extended_gcd(a: int, b: int) -> Tuple[int, int, int]:
    """
    Extended Euclidean Algorithm (iterative).

    Finds integers x, y such that: a*x + b*y = gcd(a, b)

    The returned triple is identical to the classic recursive definition
        egcd(a, 0) = (a, 1, 0)
        egcd(a, b) = (g, y1, x1 - (a // b) * y1)  where (g, x1, y1) = egcd(b, a % b)
    except that the sign is flipped when g comes out negative, so the gcd
    is always non-negative.

    Args:
        a: First integer
        b: Second integer

    Returns:
        Tuple (gcd, x, y) where a*x + b*y = gcd
    """
    old_r, r = a, b
    old_x, x = 1, 0
    old_y, y = 0, 1

    while r != 0:
        quotient = old_r // r
        old_r, r = r, old_r - quotient * r
        old_x, x = x, old_x - quotient * x
        old_y, y = y, old_y - quotient * y

    if old_r < 0:
        return -old_r, -old_x, -old_y
    return old_r, old_x, old_y


def mod_inverse(a: int, m: int) -> Optional[int]:
    """
    Compute modular multiplicative inverse using Extended Euclidean Algorithm.

    Finds x such that (a * x) mod m = 1

    Args:
        a: The number to find inverse of
        m: The modulus (must be positive)

    Returns:
        Modular inverse of a mod m in [0, m), or None when gcd(a, m) != 1

    Raises:
        InvalidInputError: If m <= 0
    """
    _require_positive_modulus(m)
    g, x, _ = extended_gcd(a % m, m)

    if g != 1:
        return None

    return x % m


def totient_phi(p: int, q: int) -> int:
    """Euler's totient of n = p*q: (p-1)(q-1)."""
    return (p - 1) * (q - 1)


def totient_lambda(p: int, q: int) -> int:
    """Carmichael's function of n = p*q: lcm(p-1, q-1)."""
    return lcm(p - 1, q - 1)


def is_probable_prime(n: int) -> bool:
    """
    Miller-Rabin primality test with a fixed witness set.

    Algorithm:
    1. Write n-1 as 2^r * d (factor out powers of 2)
    2. For each witness a:
       - Compute x = a^d mod n
       - If x = 1 or x = n-1, continue
       - Square x up to r-1 times, looking for n-1
       - If never found, n is composite

    The witnesses are fixed, so the answer depends only on n.

    Args:
        n: Number to test for primality

    Returns:
        True if n is (probably) prime, False if definitely composite
    """
    if n < 2:
        return False
    for p in MILLER_RABIN_WITNESSES:
        if n == p:
            return True
        if n % p == 0:
            return False

    r, d = 0, n - 1
    while d % 2 == 0:
        r += 1
        d //= 2

    for a in MILLER_RABIN_WITNESSES:
        x = mod_exp(a, d, n)
        if x == 1 or x == n - 1:
            continue

        composite = True
        for _ in range(r - 1):
            x = (x * x) % n
            if x == n - 1:
                composite = False
                break

        if composite:
            return False

    return True


def generate_prime(bits: int, rng=None) -> int:
    """
    Generate a random prime number of specified bit length.

    Args:
        bits: Desired bit length of the prime
        rng: Optional object with a ``getrandbits`` method (e.g. a seeded
             ``random.Random``); defaults to the ``secrets`` module

    Returns:
        A prime number with exactly ``bits`` bits

    Raises:
        InvalidInputError: If bits < 2
    """
    if bits < 2:
        raise InvalidInputError("Bit length must be at least 2")

    randbits = rng.getrandbits if rng is not None else secrets.randbits

    while True:
        # Set MSB for the exact bit length and LSB to make it odd
        candidate = randbits(bits)
        candidate |= (1 << (bits - 1))
        candidate |= 1

        if is_probable_prime(candidate):
            return candidate


def bytes_to_int(data: bytes) -> int:
    """Convert bytes to a non-negative integer (big-endian)."""
    return int.from_bytes(bytes(data), byteorder='big')


def int_to_bytes(n: int, length: Optional[int] = None) -> bytes:
    """
    Convert a non-negative integer to bytes (big-endian).

    Without ``length`` the minimal representation is returned, so 0 encodes
    to b"" and no leading zero byte is ever added.

    Raises:
        InvalidInputError: If n is negative or does not fit in ``length``
    """
    if n < 0:
        raise InvalidInputError(f"Cannot encode negative integer {n}")
    if length is None:
        length = (n.bit_length() + 7) // 8
    try:
        return n.to_bytes(length, byteorder='big')
    except OverflowError:
        raise InvalidInputError(f"{n} does not fit in {length} bytes")


def text_to_int(text: str) -> int:
    """Interpret the UTF-8 encoding of ``text`` as a big-endian integer."""
    return bytes_to_int(text.encode('utf-8'))


def int_to_text(n: int) -> Optional[str]:
    """
    Decode an integer produced by ``text_to_int``.

    Returns:
        The decoded string, or None when the bytes are not valid UTF-8
    """
    try:
        return int_to_bytes(n).decode('utf-8')
    except UnicodeDecodeError:
        return None
