"""
Diffie-Hellman Key Exchange Trace

Computes both parties' public keys and their independently derived shared
secrets:

    A = g^a mod p        B = g^b mod p
    K_alice = B^a mod p  K_bob = A^b mod p

No primality or generator check is made on (p, g). Both shared secrets are
reported as computed; agreement is left for the caller to observe.
"""

import secrets
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from ..core_crypto.rsa_math import generate_prime, is_probable_prime, mod_exp
from ..errors import InvalidInputError
from ..logging_setup import get_logger


log = get_logger(__name__)


@dataclass(frozen=True)
class DHStep:
    """One step of the exchange with its formatted computation."""
    step: int
    description: str
    value: int
    computation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": str(self.step),
            "description": self.description,
            "value": str(self.value),
            "computation": self.computation,
        }


@dataclass(frozen=True)
class DHExchangeTrace:
    """Result of one Diffie-Hellman exchange."""
    p: int
    g: int
    alice_private: int
    bob_private: int
    alice_public: int
    bob_public: int
    alice_shared: int
    bob_shared: int
    steps: Tuple[DHStep, ...]

    @property
    def shared_secrets_match(self) -> bool:
        return self.alice_shared == self.bob_shared

    def to_dict(self) -> Dict[str, Any]:
        return {
            "p": str(self.p),
            "g": str(self.g),
            "alice_private": str(self.alice_private),
            "bob_private": str(self.bob_private),
            "alice_public": str(self.alice_public),
            "bob_public": str(self.bob_public),
            "alice_shared": str(self.alice_shared),
            "bob_shared": str(self.bob_shared),
            "steps": [s.to_dict() for s in self.steps],
        }


def diffie_hellman_exchange(p: int, g: int, alice_private: int,
                            bob_private: int) -> DHExchangeTrace:
    """
    Run a Diffie-Hellman exchange and record its four steps.

    Args:
        p: Modulus (must be positive)
        g: Generator
        alice_private: Alice's secret exponent a (non-negative)
        bob_private: Bob's secret exponent b (non-negative)

    Returns:
        DHExchangeTrace with public keys, both shared secrets and 4 steps

    Raises:
        InvalidInputError: If p <= 0 or a private exponent is negative
    """
    if p <= 0:
        raise InvalidInputError(f"Modulus p must be positive, got {p}")
    if alice_private < 0 or bob_private < 0:
        raise InvalidInputError("Private exponents must be non-negative")

    alice_public = mod_exp(g, alice_private, p)
    bob_public = mod_exp(g, bob_private, p)
    alice_shared = mod_exp(bob_public, alice_private, p)
    bob_shared = mod_exp(alice_public, bob_private, p)

    steps = (
        DHStep(1, "Alice computes her public key", alice_public,
               f"A = g^a mod p = {g}^{alice_private} mod {p}"),
        DHStep(2, "Bob computes his public key", bob_public,
               f"B = g^b mod p = {g}^{bob_private} mod {p}"),
        DHStep(3, "Alice computes shared secret using Bob's public key", alice_shared,
               f"K = B^a mod p = {bob_public}^{alice_private} mod {p}"),
        DHStep(4, "Bob computes shared secret using Alice's public key", bob_shared,
               f"K = A^b mod p = {alice_public}^{bob_private} mod {p}"),
    )

    if alice_shared != bob_shared:
        log.warning("dh.shared_mismatch", p=p, g=g,
                    alice_shared=alice_shared, bob_shared=bob_shared)
    else:
        log.debug("dh.exchanged", p=p, g=g, shared=alice_shared)

    return DHExchangeTrace(
        p=p,
        g=g,
        alice_private=alice_private,
        bob_private=bob_private,
        alice_public=alice_public,
        bob_public=bob_public,
        alice_shared=alice_shared,
        bob_shared=bob_shared,
        steps=steps,
    )


def generate_dh_parameters(bits: int, rng=None) -> Tuple[int, int]:
    """
    Generate a safe prime p = 2q + 1 and a generator candidate g.

    g is drawn from [2, p - 1) until g^q mod p != 1, i.e. g does not lie
    in the subgroup of order q.

    Args:
        bits: Bit length of p (at least 3)
        rng: Optional object with ``getrandbits`` / ``randrange``
             (e.g. a seeded ``random.Random``)

    Returns:
        Tuple (p, g)
    """
    if bits < 3:
        raise InvalidInputError("Safe prime needs at least 3 bits")

    while True:
        q = generate_prime(bits - 1, rng)
        p = 2 * q + 1
        if is_probable_prime(p):
            break

    while True:
        if rng is None:
            g = 2 + secrets.randbelow(p - 3)
        else:
            g = rng.randrange(2, p - 1)
        if mod_exp(g, q, p) != 1:
            log.debug("dh.parameters_generated", p=p, g=g)
            return p, g
