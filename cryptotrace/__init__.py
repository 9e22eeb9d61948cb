# CryptoTrace
"""
Step-by-step traces of classical cryptographic algorithms: RSA parameter
derivation, Diffie-Hellman, discrete logarithm search, AES-128 and SHA-256.
"""

from .engine import TraceEngine, get_engine
from .errors import InvalidInputError, KeySearchExhaustedError, TraceError

__version__ = "1.0.0"

__all__ = [
    'TraceEngine',
    'get_engine',
    'TraceError',
    'InvalidInputError',
    'KeySearchExhaustedError',
]
