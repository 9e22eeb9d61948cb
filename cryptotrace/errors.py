"""
Error types raised by the trace engine.

Every tracer validates its own inputs and raises one of these before any
partial trace is produced. An absent modular inverse is NOT an error: it is
reported as ``None`` by ``mod_inverse``.
"""


class TraceError(Exception):
    """Base class for all trace engine failures."""
    pass


class InvalidInputError(TraceError, ValueError):
    """Raised for malformed or out-of-range input (bad text, modulus <= 0, p == q)."""
    pass


class KeySearchExhaustedError(TraceError):
    """Raised when no acceptable RSA exponent is found within the attempt budget."""

    def __init__(self, totient: int, attempts: int):
        self.totient = totient
        self.attempts = attempts
        super().__init__(
            f"No exponent e with gcd(e, {totient}) = 1 and e != d "
            f"found after {attempts} attempts"
        )
