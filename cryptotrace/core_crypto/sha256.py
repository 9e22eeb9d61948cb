"""
SHA-256 Hash Implementation (From Scratch) with Round Trace

Implements the SHA-256 cryptographic hash function as defined in FIPS 180-4
and records the working variables of every compression round.

Components:
- Padding: Pads message to multiple of 512 bits
- Message Schedule: Expands 16 words to 64 words
- Compression: 64 rounds of compression function
- Output: 256-bit (32-byte) digest
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..errors import InvalidInputError
from ..logging_setup import get_logger


log = get_logger(__name__)


# Initial hash values: first 32 bits of fractional parts of square roots of first 8 primes
H_INITIAL = [
    0x6a09e667, 0xbb67ae85, 0x3c6ef372, 0xa54ff53a,
    0x510e527f, 0x9b05688c, 0x1f83d9ab, 0x5be0cd19
]

# Round constants: first 32 bits of fractional parts of cube roots of first 64 primes
K = [
    0x428a2f98, 0x71374491, 0xb5c0fbcf, 0xe9b5dba5,
    0x3956c25b, 0x59f111f1, 0x923f82a4, 0xab1c5ed5,
    0xd807aa98, 0x12835b01, 0x243185be, 0x550c7dc3,
    0x72be5d74, 0x80deb1fe, 0x9bdc06a7, 0xc19bf174,
    0xe49b69c1, 0xefbe4786, 0x0fc19dc6, 0x240ca1cc,
    0x2de92c6f, 0x4a7484aa, 0x5cb0a9dc, 0x76f988da,
    0x983e5152, 0xa831c66d, 0xb00327c8, 0xbf597fc7,
    0xc6e00bf3, 0xd5a79147, 0x06ca6351, 0x14292967,
    0x27b70a85, 0x2e1b2138, 0x4d2c6dfc, 0x53380d13,
    0x650a7354, 0x766a0abb, 0x81c2c92e, 0x92722c85,
    0xa2bfe8a1, 0xa81a664b, 0xc24b8b70, 0xc76c51a3,
    0xd192e819, 0xd6990624, 0xf40e3585, 0x106aa070,
    0x19a4c116, 0x1e376c08, 0x2748774c, 0x34b0bcb5,
    0x391c0cb3, 0x4ed8aa4a, 0x5b9cca4f, 0x682e6ff3,
    0x748f82ee, 0x78a5636f, 0x84c87814, 0x8cc70208,
    0x90befffa, 0xa4506ceb, 0xbef9a3f7, 0xc67178f2
]

# Mask for 32-bit arithmetic
MASK_32 = 0xFFFFFFFF


# ============================================================================
# Data Structures
# ============================================================================

@dataclass(frozen=True)
class SHA256Step:
    """
    Working variables a..h at the start of one compression round, together
    with the schedule word, round constant and temporaries used by it.
    """
    block: int
    step: int
    description: str
    a: int
    b: int
    c: int
    d: int
    e: int
    f: int
    g: int
    h: int
    w: int
    k: int
    temp1: int
    temp2: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "block": self.block,
            "step": self.step,
            "description": self.description,
            "a": self.a, "b": self.b, "c": self.c, "d": self.d,
            "e": self.e, "f": self.f, "g": self.g, "h": self.h,
            "w": self.w,
            "k": self.k,
            "temp1": self.temp1,
            "temp2": self.temp2,
        }


@dataclass(frozen=True)
class SHA256Trace:
    """Padding, message schedules and round-by-round state of one hash."""
    message: Tuple[int, ...]
    padded_message: Tuple[int, ...]
    hash: Tuple[int, ...]
    schedules: Tuple[Tuple[int, ...], ...]
    steps: Tuple[SHA256Step, ...]

    @property
    def digest(self) -> bytes:
        return b''.join(word.to_bytes(4, byteorder='big') for word in self.hash)

    @property
    def hex_digest(self) -> str:
        return self.digest.hex()

    @property
    def binary_digest(self) -> str:
        """The 256-bit digest as a string of '0'/'1' characters."""
        return ''.join(format(word, '032b') for word in self.hash)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": list(self.message),
            "padded_message": list(self.padded_message),
            "hash": list(self.hash),
            "hex_digest": self.hex_digest,
            "binary_digest": self.binary_digest,
            "schedules": [list(w) for w in self.schedules],
            "steps": [s.to_dict() for s in self.steps],
        }


# ============================================================================
# Round Functions
# ============================================================================

def _right_rotate(value: int, amount: int) -> int:
    """Right rotate a 32-bit integer by the specified amount."""
    return ((value >> amount) | (value << (32 - amount))) & MASK_32


def _ch(x: int, y: int, z: int) -> int:
    """Choice function: if x then y else z (bitwise)."""
    return ((x & y) ^ (~x & z)) & MASK_32


def _maj(x: int, y: int, z: int) -> int:
    """Majority function: majority vote of bits."""
    return (x & y) ^ (x & z) ^ (y & z)


def _sigma0(x: int) -> int:
    """Lowercase sigma 0: used in message schedule."""
    return _right_rotate(x, 7) ^ _right_rotate(x, 18) ^ (x >> 3)


def _sigma1(x: int) -> int:
    """Lowercase sigma 1: used in message schedule."""
    return _right_rotate(x, 17) ^ _right_rotate(x, 19) ^ (x >> 10)


def _big_sigma0(x: int) -> int:
    """Uppercase Sigma 0: used in compression."""
    return _right_rotate(x, 2) ^ _right_rotate(x, 13) ^ _right_rotate(x, 22)


def _big_sigma1(x: int) -> int:
    """Uppercase Sigma 1: used in compression."""
    return _right_rotate(x, 6) ^ _right_rotate(x, 11) ^ _right_rotate(x, 25)


def _pad_message(data: bytes) -> bytes:
    """
    Pad the message according to SHA-256 specification.

    Padding rules:
    1. Append bit '1' to message (0x80 byte)
    2. Append zeros until message length = 448 (mod 512)
    3. Append original message length as 64-bit big-endian integer

    Args:
        data: The original message bytes

    Returns:
        Padded message as bytes (length is multiple of 64 bytes / 512 bits)
    """
    original_bit_length = len(data) * 8

    data += b'\x80'

    # We need: (current_length + padding_zeros) % 64 == 56
    padding_length = (56 - (len(data) % 64)) % 64
    data += b'\x00' * padding_length

    data += original_bit_length.to_bytes(8, byteorder='big')

    return data


def _bytes_to_words(chunk: bytes) -> List[int]:
    """Convert a 64-byte chunk into 16 32-bit words (big-endian)."""
    return [int.from_bytes(chunk[i:i+4], byteorder='big') for i in range(0, 64, 4)]


def _create_message_schedule(words: List[int]) -> List[int]:
    """
    Expand 16 words into 64 words for the message schedule.

    For i from 16 to 63:
        W[i] = sigma1(W[i-2]) + W[i-7] + sigma0(W[i-15]) + W[i-16]
    """
    w = words.copy()
    for i in range(16, 64):
        s0 = _sigma0(w[i - 15])
        s1 = _sigma1(w[i - 2])
        w.append((w[i - 16] + s0 + w[i - 7] + s1) & MASK_32)
    return w


RoundCallback = Callable[[int, Tuple[int, ...], int, int], None]


def _compress(state: List[int], w: List[int],
              on_round: Optional[RoundCallback] = None) -> List[int]:
    """
    Perform 64 rounds of compression on the state.

    Args:
        state: Current hash state (8 32-bit words)
        w: Message schedule (64 32-bit words)
        on_round: Called before each round update with
                  (round, (a..h), temp1, temp2)

    Returns:
        Updated hash state
    """
    a, b, c, d, e, f, g, h = state

    for i in range(64):
        t1 = (h + _big_sigma1(e) + _ch(e, f, g) + K[i] + w[i]) & MASK_32
        t2 = (_big_sigma0(a) + _maj(a, b, c)) & MASK_32

        if on_round is not None:
            on_round(i, (a, b, c, d, e, f, g, h), t1, t2)

        h = g
        g = f
        f = e
        e = (d + t1) & MASK_32
        d = c
        c = b
        b = a
        a = (t1 + t2) & MASK_32

    # Add compressed chunk to current hash value
    return [(x + y) & MASK_32 for x, y in zip(state, (a, b, c, d, e, f, g, h))]


BlockCallback = Callable[[int, List[int]], Optional[RoundCallback]]


def _digest_blocks(padded: bytes, on_block: Optional[BlockCallback] = None) -> List[int]:
    """
    Run the compression function over every 64-byte block of a padded message.

    Args:
        padded: Output of _pad_message
        on_block: Called with (block index, message schedule) before the
                  block is compressed; may return a round callback for it

    Returns:
        Final hash state (8 32-bit words)
    """
    state = H_INITIAL.copy()

    for block_index, offset in enumerate(range(0, len(padded), 64)):
        w = _create_message_schedule(_bytes_to_words(padded[offset:offset + 64]))
        on_round = on_block(block_index, w) if on_block is not None else None
        state = _compress(state, w, on_round)

    return state


# ============================================================================
# Public API
# ============================================================================

def sha256(data: bytes) -> bytes:
    """
    Compute the SHA-256 hash of the input data.

    Args:
        data: Input bytes to hash

    Returns:
        256-bit (32-byte) digest as bytes

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    state = _digest_blocks(_pad_message(bytes(data)))
    return b''.join(word.to_bytes(4, byteorder='big') for word in state)


def sha256_hex(data: bytes) -> str:
    """Compute SHA-256 hash and return as hexadecimal string."""
    return sha256(data).hex()


def sha256_trace(message: Sequence[int]) -> SHA256Trace:
    """
    Hash a message and record every compression round of every block.

    Each step holds a..h as they are at the start of the round, so the
    first step of block 0 shows the IV and the running state after the
    last block is the final hash.

    Args:
        message: Message bytes (bytes or a sequence of ints 0-255)

    Returns:
        SHA256Trace with 64 steps per padded block

    Raises:
        InvalidInputError: If an element is not a byte value
    """
    if any(not isinstance(b, int) or not 0 <= b <= 255 for b in message):
        raise InvalidInputError("Message bytes must be integers in 0-255")
    data = bytes(message)

    padded = _pad_message(data)
    schedules = []
    steps: List[SHA256Step] = []

    def on_block(block_index, w):
        schedules.append(tuple(w))

        def on_round(i, working, t1, t2):
            steps.append(SHA256Step(
                block=block_index,
                step=i,
                description=f"Block {block_index} round {i} compression",
                a=working[0], b=working[1], c=working[2], d=working[3],
                e=working[4], f=working[5], g=working[6], h=working[7],
                w=w[i],
                k=K[i],
                temp1=t1,
                temp2=t2,
            ))

        return on_round

    state = _digest_blocks(padded, on_block)

    log.debug("sha256.traced", message_length=len(data),
              blocks=len(schedules), steps=len(steps))

    return SHA256Trace(
        message=tuple(data),
        padded_message=tuple(padded),
        hash=tuple(state),
        schedules=tuple(schedules),
        steps=tuple(steps),
    )


# Self-test when run directly
if __name__ == "__main__":
    # Test vectors from NIST
    test_cases = [
        (b"", "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"),
        (b"abc", "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"),
    ]

    for data, expected in test_cases:
        trace = sha256_trace(data)
        status = "PASS" if trace.hex_digest == expected else "FAIL"
        print(f"[{status}] {data!r}: {trace.hex_digest} ({len(trace.steps)} rounds)")
