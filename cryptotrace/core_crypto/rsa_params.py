"""
RSA Parameter Derivation

Given two primes p and q, derives the modulus, the totient (Euler phi or
Carmichael lambda) and a public/private exponent pair (e, d) with:
    1 < e < T,  gcd(e, T) = 1,  e * d = 1 (mod T),  e != d

Exponents that are their own inverse (e == d) are skipped as degenerate.
The exponent search is bounded; running out of attempts raises
KeySearchExhaustedError instead of returning a weak pair.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..config import DEFAULT_PUBLIC_EXPONENT, EXPONENT_SEARCH_LIMIT
from ..errors import InvalidInputError, KeySearchExhaustedError
from ..logging_setup import get_logger
from .rsa_math import (
    gcd, generate_prime, mod_exp, mod_inverse, totient_lambda, totient_phi,
)


log = get_logger(__name__)

SMALL_PRIME_LIMIT = 200  # Upper bound for pick_small_primes_in_range


@dataclass(frozen=True)
class KeyParameters:
    """
    Derived RSA parameters.

    ``totient`` is phi(n) or lambda(n) depending on ``use_carmichael``.
    """
    p: int
    q: int
    n: int
    totient: int
    e: int
    d: int
    use_carmichael: bool = False

    @property
    def public_key(self) -> Tuple[int, int]:
        return self.e, self.n

    @property
    def private_key(self) -> Tuple[int, int]:
        return self.d, self.n

    def encrypt(self, message: int) -> int:
        """Compute message^e mod n."""
        return rsa_encrypt(message, self.public_key)

    def decrypt(self, ciphertext: int) -> int:
        """Compute ciphertext^d mod n."""
        return rsa_decrypt(ciphertext, self.private_key)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "p": str(self.p),
            "q": str(self.q),
            "n": str(self.n),
            "totient": str(self.totient),
            "e": str(self.e),
            "d": str(self.d),
            "use_carmichael": self.use_carmichael,
        }


def compute_totient(p: int, q: int, use_carmichael: bool = False) -> int:
    """
    Totient used as the exponent modulus.

    Raises:
        InvalidInputError: If p or q is below 2
    """
    if p < 2 or q < 2:
        raise InvalidInputError(f"p and q must both be at least 2, got p={p}, q={q}")
    if use_carmichael:
        return totient_lambda(p, q)
    return totient_phi(p, q)


def _start_candidate(totient: int, exponent_hint: Optional[int]) -> int:
    if exponent_hint is not None and 1 < exponent_hint < totient:
        return exponent_hint
    if DEFAULT_PUBLIC_EXPONENT < totient:
        return DEFAULT_PUBLIC_EXPONENT
    return 3


def _exponent_candidates(start: int, totient: int) -> Iterator[int]:
    """
    Walk upward from ``start`` through odd values below the totient, then
    wrap around to 3 and continue up to ``start``.
    """
    e = start
    while e < totient:
        yield e
        e = e + 1 if e % 2 == 0 else e + 2

    e = 3
    while e < min(start, totient):
        yield e
        e += 2


def derive_key_parameters(p: int, q: int, use_carmichael: bool = False,
                          exponent_hint: Optional[int] = None,
                          max_attempts: int = EXPONENT_SEARCH_LIMIT) -> KeyParameters:
    """
    Derive n, T, e and d from two distinct primes.

    Primality of p and q is the caller's responsibility; they are only
    checked for being distinct and at least 2.

    Args:
        p: First prime
        q: Second prime (must differ from p)
        use_carmichael: Use lambda(n) = lcm(p-1, q-1) instead of phi(n)
        exponent_hint: Preferred public exponent; ignored when out of range
        max_attempts: Number of exponent candidates to try

    Returns:
        KeyParameters satisfying 1 < e < T, gcd(e, T) = 1, e*d = 1 mod T, e != d

    Raises:
        InvalidInputError: If p == q or either is below 2
        KeySearchExhaustedError: If no acceptable exponent was found
    """
    if p == q:
        raise InvalidInputError(f"p and q must be distinct, both are {p}")
    totient = compute_totient(p, q, use_carmichael)

    start = _start_candidate(totient, exponent_hint)
    attempts = 0

    for e in _exponent_candidates(start, totient):
        if attempts >= max_attempts:
            break
        attempts += 1

        if gcd(e, totient) != 1:
            continue

        d = mod_inverse(e, totient)
        if d == e:
            log.warning("rsa.fixed_point_skipped", e=e, totient=totient)
            continue

        log.debug("rsa.derived", p=p, q=q, totient=totient, e=e, d=d,
                  attempts=attempts)
        return KeyParameters(p=p, q=q, n=p * q, totient=totient, e=e, d=d,
                             use_carmichael=use_carmichael)

    raise KeySearchExhaustedError(totient, attempts)


def private_exponent_for(e: int, p: int, q: int,
                         use_carmichael: bool = False) -> Optional[int]:
    """
    Private exponent matching a caller-chosen e.

    Returns:
        e^-1 mod T, or None when e is not invertible modulo the totient
    """
    totient = compute_totient(p, q, use_carmichael)
    if totient < 2:
        return None
    return mod_inverse(e, totient)


def _small_primes(limit: int) -> List[int]:
    sieve = [True] * (limit + 1)
    sieve[0] = sieve[1] = False
    i = 2
    while i * i <= limit:
        if sieve[i]:
            for j in range(i * i, limit + 1, i):
                sieve[j] = False
        i += 1
    return [i for i, prime in enumerate(sieve) if prime]


def pick_small_primes_in_range(n_min: int, n_max: int) -> Optional[Tuple[int, int, int]]:
    """
    Pick primes p < q <= 200 whose product lies in [n_min, n_max].

    The product closest to the midpoint of the range wins (the first pair
    found on ties). An ``n_max`` of 0 means no upper bound, in which case
    the product closest to ``n_min`` is chosen.

    Returns:
        Tuple (p, q, n) or None when no pair fits
    """
    primes = _small_primes(SMALL_PRIME_LIMIT)
    target = n_min if n_max == 0 else (n_min + n_max) // 2

    best = None
    best_diff = None
    for index, p in enumerate(primes):
        for q in primes[index + 1:]:
            product = p * q
            if product < n_min:
                continue
            if n_max != 0 and product > n_max:
                break
            diff = abs(product - target)
            if best_diff is None or diff < best_diff:
                best = (p, q, product)
                best_diff = diff

    return best


def generate_key_parameters(bits: int, use_carmichael: bool = False,
                            rng=None) -> KeyParameters:
    """
    Generate a random RSA key with a modulus of roughly ``bits`` bits.

    Args:
        bits: Target modulus size (each prime gets bits // 2)
        use_carmichael: Derive d modulo lambda(n) instead of phi(n)
        rng: Optional seeded random source passed to generate_prime
    """
    prime_bits = bits // 2
    if prime_bits < 2:
        raise InvalidInputError(f"Modulus size must be at least 4 bits, got {bits}")

    p = generate_prime(prime_bits, rng)
    q = generate_prime(prime_bits, rng)
    while p == q:
        q = generate_prime(prime_bits, rng)

    return derive_key_parameters(p, q, use_carmichael)


def rsa_encrypt(message: int, public_key: Tuple[int, int]) -> int:
    """
    RSA encryption of a message.

    Computes ciphertext = message^e mod n

    Args:
        message: Integer message (must be in [0, n))
        public_key: Tuple (e, n)

    Returns:
        Encrypted ciphertext as integer
    """
    e, n = public_key
    if not 0 <= message < n:
        raise InvalidInputError("Message must be in the range [0, n)")
    return mod_exp(message, e, n)


def rsa_decrypt(ciphertext: int, private_key: Tuple[int, int]) -> int:
    """
    RSA decryption of a ciphertext.

    Computes message = ciphertext^d mod n

    Args:
        ciphertext: Encrypted integer (must be in [0, n))
        private_key: Tuple (d, n)

    Returns:
        Decrypted message as integer
    """
    d, n = private_key
    if not 0 <= ciphertext < n:
        raise InvalidInputError("Ciphertext must be in the range [0, n)")
    return mod_exp(ciphertext, d, n)
