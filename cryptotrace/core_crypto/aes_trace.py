"""
AES-128 Encryption Trace

Encrypts a single 16-byte block and records the 4x4 state matrix after
every sub-step so each transformation can be replayed on its own:

    Round 0:     Initial State, AddRoundKey(round key 0)
    Rounds 1-9:  SubBytes, ShiftRows, MixColumns, AddRoundKey(round key r)
    Round 10:    SubBytes, ShiftRows, AddRoundKey(round key 10)

The state is column-major as in FIPS-197: state[row][col] = block[4*col + row].
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..errors import InvalidInputError
from ..logging_setup import get_logger
from .aes_key_schedule import NUM_ROUNDS, S_BOX, aes128_key_expansion, format_key_hex


log = get_logger(__name__)

BLOCK_SIZE = 16

State = List[List[int]]
Matrix = Tuple[Tuple[int, ...], ...]


# ============================================================================
# Data Structures
# ============================================================================

@dataclass(frozen=True)
class AESRoundState:
    """State matrix captured right after one sub-step."""
    round: int
    step: str
    state: Matrix
    description: str
    intermediate_values: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round,
            "step": self.step,
            "state": [list(row) for row in self.state],
            "description": self.description,
            "intermediate_values": list(self.intermediate_values),
        }


@dataclass(frozen=True)
class AESTrace:
    """Full trace of one AES-128 block encryption."""
    plaintext: Tuple[int, ...]
    key: Tuple[int, ...]
    ciphertext: Tuple[int, ...]
    round_keys: Tuple[Tuple[int, ...], ...]
    rounds: Tuple[AESRoundState, ...]

    def rounds_for(self, round_number: int) -> List[AESRoundState]:
        """All sub-step records belonging to one round."""
        return [r for r in self.rounds if r.round == round_number]

    @property
    def ciphertext_hex(self) -> str:
        return bytes(self.ciphertext).hex()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plaintext": list(self.plaintext),
            "key": list(self.key),
            "ciphertext": list(self.ciphertext),
            "round_keys": [list(rk) for rk in self.round_keys],
            "rounds": [r.to_dict() for r in self.rounds],
        }


# ============================================================================
# Round Transformations
# ============================================================================

def _gmul(a: int, b: int) -> int:
    """Multiply two bytes in GF(2^8) modulo x^8 + x^4 + x^3 + x + 1."""
    result = 0
    for _ in range(8):
        if b & 1:
            result ^= a
        high_bit = a & 0x80
        a = (a << 1) & 0xFF
        if high_bit:
            a ^= 0x1b
        b >>= 1
    return result


def _block_to_state(block: Sequence[int]) -> State:
    return [[block[4 * col + row] for col in range(4)] for row in range(4)]


def _state_to_block(state: State) -> List[int]:
    return [state[row][col] for col in range(4) for row in range(4)]


def sub_bytes(state: State) -> State:
    return [[S_BOX[b] for b in row] for row in state]


def shift_rows(state: State) -> State:
    # Row r is rotated left by r positions
    return [row[r:] + row[:r] for r, row in enumerate(state)]


def mix_columns(state: State) -> State:
    out = [[0] * 4 for _ in range(4)]
    for c in range(4):
        s0, s1, s2, s3 = (state[r][c] for r in range(4))
        out[0][c] = _gmul(2, s0) ^ _gmul(3, s1) ^ s2 ^ s3
        out[1][c] = s0 ^ _gmul(2, s1) ^ _gmul(3, s2) ^ s3
        out[2][c] = s0 ^ s1 ^ _gmul(2, s2) ^ _gmul(3, s3)
        out[3][c] = _gmul(3, s0) ^ s1 ^ s2 ^ _gmul(2, s3)
    return out


def add_round_key(state: State, round_key: bytes) -> State:
    key_state = _block_to_state(round_key)
    return [[state[r][c] ^ key_state[r][c] for c in range(4)] for r in range(4)]


def _freeze(state: State) -> Matrix:
    return tuple(tuple(row) for row in state)


def _state_hex(state: State) -> str:
    return "State: " + format_key_hex(bytes(_state_to_block(state)))


def _validate_block(name: str, data: Sequence[int]) -> bytes:
    if len(data) != BLOCK_SIZE:
        raise InvalidInputError(f"{name} must be exactly 16 bytes, got {len(data)}")
    if any(not isinstance(b, int) or not 0 <= b <= 255 for b in data):
        raise InvalidInputError(f"{name} bytes must be integers in 0-255")
    return bytes(data)


# ============================================================================
# Encryption Trace
# ============================================================================

def aes_encrypt_trace(plaintext: Sequence[int], key: Sequence[int]) -> AESTrace:
    """
    Encrypt one block with AES-128 and record every sub-step.

    Args:
        plaintext: 16 bytes (bytes or a sequence of ints 0-255)
        key: 16-byte key

    Returns:
        AESTrace with 41 sub-step records and the ciphertext

    Raises:
        InvalidInputError: If either input is not 16 bytes of 0-255
    """
    plaintext = _validate_block("Plaintext", plaintext)
    key = _validate_block("Key", key)
    round_keys = aes128_key_expansion(key)

    records: List[AESRoundState] = []

    def record(round_number: int, step: str, state: State,
               description: str, note: str) -> None:
        records.append(AESRoundState(
            round=round_number,
            step=step,
            state=_freeze(state),
            description=description,
            intermediate_values=(note, _state_hex(state)),
        ))

    state = _block_to_state(plaintext)
    record(0, "Initial State", state,
           "Initial plaintext arranged in 4x4 state matrix",
           f"Plaintext: {format_key_hex(plaintext)}")

    state = add_round_key(state, round_keys[0])
    record(0, "AddRoundKey", state, "XOR state with round key 0",
           f"Round Key 0: {format_key_hex(round_keys[0])}")

    for round_number in range(1, NUM_ROUNDS + 1):
        final = round_number == NUM_ROUNDS

        state = sub_bytes(state)
        record(round_number, "SubBytes", state,
               "Final SubBytes" if final else "Substitute bytes using S-box",
               "Each byte replaced by S-box lookup")

        state = shift_rows(state)
        record(round_number, "ShiftRows", state,
               "Final ShiftRows" if final else "Cyclically shift rows left",
               "Row 0: no shift, Row 1: 1 left, Row 2: 2 left, Row 3: 3 left")

        if not final:
            state = mix_columns(state)
            record(round_number, "MixColumns", state,
                   "Mix columns using GF(2^8) multiplication",
                   "Each column multiplied by fixed polynomial")

        state = add_round_key(state, round_keys[round_number])
        record(round_number, "AddRoundKey", state,
               "Final AddRoundKey" if final else f"XOR state with round key {round_number}",
               f"Round Key {round_number}: {format_key_hex(round_keys[round_number])}")

    ciphertext = tuple(_state_to_block(state))
    log.debug("aes.encrypted", ciphertext=bytes(ciphertext).hex(), records=len(records))

    return AESTrace(
        plaintext=tuple(plaintext),
        key=tuple(key),
        ciphertext=ciphertext,
        round_keys=tuple(tuple(rk) for rk in round_keys),
        rounds=tuple(records),
    )


def reference_encrypt(plaintext: bytes, key: bytes) -> bytes:
    """Encrypt one block with the ``cryptography`` package's AES-ECB."""
    plaintext = _validate_block("Plaintext", plaintext)
    key = _validate_block("Key", key)
    encryptor = Cipher(algorithms.AES(key), modes.ECB(), backend=default_backend()).encryptor()
    return encryptor.update(plaintext) + encryptor.finalize()


def verify_trace(trace: AESTrace) -> bool:
    """Check a trace's ciphertext against the reference implementation."""
    expected = reference_encrypt(bytes(trace.plaintext), bytes(trace.key))
    return bytes(trace.ciphertext) == expected
