"""
Trace Engine Handle

Text boundary over the tracers. Every numeric argument and result crossing
this boundary is a base-10 string so arbitrarily large values survive a
narrow numeric interface; byte arrays are sequences of 0-255 ints; trace
records are returned as plain dictionaries.

The process-wide handle is created lazily by ``get_engine`` exactly once,
even when several threads ask for it at the same time.
"""

import re
import threading
from typing import Any, Dict, List, Optional, Sequence, Union

from .config import EngineConfig
from .core_crypto import rsa_math
from .core_crypto.aes_trace import aes_encrypt_trace
from .core_crypto.bijection import map_mod_exp
from .core_crypto.rsa_params import (
    derive_key_parameters, pick_small_primes_in_range, private_exponent_for,
    rsa_decrypt, rsa_encrypt,
)
from .core_crypto.sha256 import sha256_trace
from .errors import InvalidInputError
from .exchange.diffie_hellman import diffie_hellman_exchange
from .exchange.discrete_log import SolverMethod, get_solver
from .logging_setup import get_logger


log = get_logger(__name__)

IntText = Union[str, int]

_INTEGER_TEXT = re.compile(r"^[+-]?[0-9]+$")


def parse_int(value: IntText, name: str = "value") -> int:
    """
    Parse a base-10 integer from text.

    Plain ints are accepted as-is. Anything else (floats, bools, empty or
    non-decimal text) is rejected.

    Raises:
        InvalidInputError: If the value is not a base-10 integer
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if _INTEGER_TEXT.match(text):
            try:
                return int(text, 10)
            except ValueError:
                # int/str conversion limit (sys.get_int_max_str_digits)
                raise InvalidInputError(
                    f"{name} has {len(text.lstrip('+-'))} digits, more than this "
                    "interpreter converts from text")
    raise InvalidInputError(f"{name} must be a base-10 integer, got {value!r}")


def format_int(value: int, name: str = "result") -> str:
    """
    Render an integer as base-10 text.

    Raises:
        InvalidInputError: If the value exceeds the interpreter's int/str
            conversion limit
    """
    try:
        return str(value)
    except ValueError:
        raise InvalidInputError(f"{name} has more digits than this interpreter converts to text")


def _record(trace) -> Dict[str, Any]:
    try:
        return trace.to_dict()
    except ValueError:
        raise InvalidInputError("Trace holds a value with more digits than this "
                                "interpreter converts to text")


class TraceEngine:
    """
    Pure, stateless facade over the tracers.

    The only state is the immutable configuration, so one instance can be
    shared freely between threads.

    Example:
        >>> engine = get_engine()
        >>> engine.mod_pow("4", "13", "497")
        '445'
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self._config = config if config is not None else EngineConfig()

    @property
    def config(self) -> EngineConfig:
        return self._config

    # ------------------------------------------------------------------
    # Integer kernel
    # ------------------------------------------------------------------

    def mod_pow(self, base: IntText, exponent: IntText, modulus: IntText) -> str:
        return format_int(rsa_math.mod_exp(parse_int(base, "base"),
                                             parse_int(exponent, "exponent"),
                                             parse_int(modulus, "modulus")))

    def gcd(self, a: IntText, b: IntText) -> str:
        return format_int(rsa_math.gcd(parse_int(a, "a"), parse_int(b, "b")))

    def lcm(self, a: IntText, b: IntText) -> str:
        return format_int(rsa_math.lcm(parse_int(a, "a"), parse_int(b, "b")))

    def egcd(self, a: IntText, b: IntText) -> Dict[str, str]:
        g, x, y = rsa_math.extended_gcd(parse_int(a, "a"), parse_int(b, "b"))
        return {"g": format_int(g), "x": format_int(x), "y": format_int(y)}

    def mod_inv(self, a: IntText, m: IntText) -> Optional[str]:
        """Inverse of a modulo m, or None when none exists."""
        inverse = rsa_math.mod_inverse(parse_int(a, "a"), parse_int(m, "m"))
        return None if inverse is None else format_int(inverse)

    def is_prime(self, n: IntText) -> bool:
        return rsa_math.is_probable_prime(parse_int(n, "n"))

    def generate_prime(self, bits: IntText) -> str:
        return format_int(rsa_math.generate_prime(parse_int(bits, "bits")))

    def text_to_int(self, text: str) -> str:
        return format_int(rsa_math.text_to_int(text))

    def int_to_text(self, n: IntText) -> Optional[str]:
        return rsa_math.int_to_text(parse_int(n, "n"))

    # ------------------------------------------------------------------
    # RSA
    # ------------------------------------------------------------------

    def derive_key_parameters(self, p: IntText, q: IntText, use_carmichael: bool = False,
                              exponent_hint: Optional[IntText] = None) -> Dict[str, Any]:
        hint = None if exponent_hint is None else parse_int(exponent_hint, "exponent_hint")
        params = derive_key_parameters(
            parse_int(p, "p"), parse_int(q, "q"), use_carmichael, hint,
            max_attempts=self._config.exponent_search_limit,
        )
        return _record(params)

    def private_exponent_for(self, e: IntText, p: IntText, q: IntText,
                             use_carmichael: bool = False) -> Optional[str]:
        d = private_exponent_for(parse_int(e, "e"), parse_int(p, "p"),
                                 parse_int(q, "q"), use_carmichael)
        return None if d is None else format_int(d)

    def pick_small_primes_in_range(self, n_min: IntText,
                                   n_max: IntText) -> Optional[Dict[str, str]]:
        picked = pick_small_primes_in_range(parse_int(n_min, "n_min"),
                                            parse_int(n_max, "n_max"))
        if picked is None:
            return None
        p, q, n = picked
        return {"p": format_int(p), "q": format_int(q), "n": format_int(n)}

    def rsa_encrypt(self, message: IntText, e: IntText, n: IntText) -> str:
        return format_int(rsa_encrypt(parse_int(message, "message"),
                                        (parse_int(e, "e"), parse_int(n, "n"))))

    def rsa_decrypt(self, ciphertext: IntText, d: IntText, n: IntText) -> str:
        return format_int(rsa_decrypt(parse_int(ciphertext, "ciphertext"),
                                        (parse_int(d, "d"), parse_int(n, "n"))))

    # ------------------------------------------------------------------
    # Key exchange and discrete log
    # ------------------------------------------------------------------

    def diffie_hellman_exchange(self, p: IntText, g: IntText, alice_private: IntText,
                                bob_private: IntText) -> Dict[str, Any]:
        trace = diffie_hellman_exchange(
            parse_int(p, "p"), parse_int(g, "g"),
            parse_int(alice_private, "alice_private"),
            parse_int(bob_private, "bob_private"),
        )
        return _record(trace)

    def discrete_log(self, base: IntText, target: IntText, modulus: IntText,
                     max_steps: Optional[IntText] = None,
                     method: Union[SolverMethod, str] = SolverMethod.BRUTE_FORCE) -> Dict[str, Any]:
        """Run the selected discrete log strategy; max_steps defaults from config."""
        if max_steps is None:
            steps = self._config.default_max_steps
        else:
            steps = parse_int(max_steps, "max_steps")
        trace = get_solver(method).solve(
            parse_int(base, "base"), parse_int(target, "target"),
            parse_int(modulus, "modulus"), steps,
        )
        return _record(trace)

    def discrete_log_brute_force(self, base: IntText, target: IntText, modulus: IntText,
                                 max_steps: Optional[IntText] = None) -> Dict[str, Any]:
        return self.discrete_log(base, target, modulus, max_steps, SolverMethod.BRUTE_FORCE)

    def discrete_log_bsgs(self, base: IntText, target: IntText, modulus: IntText,
                          max_steps: Optional[IntText] = None) -> Dict[str, Any]:
        return self.discrete_log(base, target, modulus, max_steps, SolverMethod.BSGS)

    # ------------------------------------------------------------------
    # Mapping, block cipher, hash
    # ------------------------------------------------------------------

    def map_mod_exp(self, exponent: IntText, modulus: IntText, count: IntText) -> List[int]:
        return map_mod_exp(parse_int(exponent, "exponent"), parse_int(modulus, "modulus"),
                           parse_int(count, "count"),
                           max_count=self._config.mapping_max_count)

    def aes_encrypt_trace(self, plaintext: Sequence[int], key: Sequence[int]) -> Dict[str, Any]:
        return _record(aes_encrypt_trace(plaintext, key))

    def sha256_trace(self, message: Sequence[int]) -> Dict[str, Any]:
        return _record(sha256_trace(message))


# ============================================================================
# Process-wide handle
# ============================================================================

_engine: Optional[TraceEngine] = None
_engine_lock = threading.Lock()


def get_engine() -> TraceEngine:
    """
    Shared engine handle, created on first use.

    Initialization happens at most once: the lock is only taken while the
    handle does not exist yet, and the check is repeated under the lock.
    """
    global _engine
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                config = EngineConfig.from_env()
                _engine = TraceEngine(config)
                log.debug("engine.initialized",
                          exponent_search_limit=config.exponent_search_limit,
                          mapping_max_count=config.mapping_max_count,
                          default_max_steps=config.default_max_steps)
    return _engine
