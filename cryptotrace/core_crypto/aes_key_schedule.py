"""
AES-128 Key Expansion (Rijndael Key Schedule)

Implements the AES-128 key schedule algorithm to expand a 128-bit key
into 11 round keys (initial + 10 rounds).

Components:
- S-box (Rijndael substitution box)
- RotWord: Rotate word left by 1 byte
- SubWord: Apply S-box substitution
- Rcon: Round constants
- Key expansion algorithm for 128-bit keys
"""

from typing import List

from ..errors import InvalidInputError


# Rijndael S-box (Substitution box)
# This is the standard AES S-box - a non-linear substitution table
S_BOX = [
    0x63, 0x7c, 0x77, 0x7b, 0xf2, 0x6b, 0x6f, 0xc5, 0x30, 0x01, 0x67, 0x2b, 0xfe, 0xd7, 0xab, 0x76,
    0xca, 0x82, 0xc9, 0x7d, 0xfa, 0x59, 0x47, 0xf0, 0xad, 0xd4, 0xa2, 0xaf, 0x9c, 0xa4, 0x72, 0xc0,
    0xb7, 0xfd, 0x93, 0x26, 0x36, 0x3f, 0xf7, 0xcc, 0x34, 0xa5, 0xe5, 0xf1, 0x71, 0xd8, 0x31, 0x15,
    0x04, 0xc7, 0x23, 0xc3, 0x18, 0x96, 0x05, 0x9a, 0x07, 0x12, 0x80, 0xe2, 0xeb, 0x27, 0xb2, 0x75,
    0x09, 0x83, 0x2c, 0x1a, 0x1b, 0x6e, 0x5a, 0xa0, 0x52, 0x3b, 0xd6, 0xb3, 0x29, 0xe3, 0x2f, 0x84,
    0x53, 0xd1, 0x00, 0xed, 0x20, 0xfc, 0xb1, 0x5b, 0x6a, 0xcb, 0xbe, 0x39, 0x4a, 0x4c, 0x58, 0xcf,
    0xd0, 0xef, 0xaa, 0xfb, 0x43, 0x4d, 0x33, 0x85, 0x45, 0xf9, 0x02, 0x7f, 0x50, 0x3c, 0x9f, 0xa8,
    0x51, 0xa3, 0x40, 0x8f, 0x92, 0x9d, 0x38, 0xf5, 0xbc, 0xb6, 0xda, 0x21, 0x10, 0xff, 0xf3, 0xd2,
    0xcd, 0x0c, 0x13, 0xec, 0x5f, 0x97, 0x44, 0x17, 0xc4, 0xa7, 0x7e, 0x3d, 0x64, 0x5d, 0x19, 0x73,
    0x60, 0x81, 0x4f, 0xdc, 0x22, 0x2a, 0x90, 0x88, 0x46, 0xee, 0xb8, 0x14, 0xde, 0x5e, 0x0b, 0xdb,
    0xe0, 0x32, 0x3a, 0x0a, 0x49, 0x06, 0x24, 0x5c, 0xc2, 0xd3, 0xac, 0x62, 0x91, 0x95, 0xe4, 0x79,
    0xe7, 0xc8, 0x37, 0x6d, 0x8d, 0xd5, 0x4e, 0xa9, 0x6c, 0x56, 0xf4, 0xea, 0x65, 0x7a, 0xae, 0x08,
    0xba, 0x78, 0x25, 0x2e, 0x1c, 0xa6, 0xb4, 0xc6, 0xe8, 0xdd, 0x74, 0x1f, 0x4b, 0xbd, 0x8b, 0x8a,
    0x70, 0x3e, 0xb5, 0x66, 0x48, 0x03, 0xf6, 0x0e, 0x61, 0x35, 0x57, 0xb9, 0x86, 0xc1, 0x1d, 0x9e,
    0xe1, 0xf8, 0x98, 0x11, 0x69, 0xd9, 0x8e, 0x94, 0x9b, 0x1e, 0x87, 0xe9, 0xce, 0x55, 0x28, 0xdf,
    0x8c, 0xa1, 0x89, 0x0d, 0xbf, 0xe6, 0x42, 0x68, 0x41, 0x99, 0x2d, 0x0f, 0xb0, 0x54, 0xbb, 0x16,
]

# Round constants (Rcon) for key expansion
# Rcon[i] = [rc[i], 0, 0, 0] where rc[i] = 2^(i-1) in GF(2^8)
# Only the first byte is stored; AES-128 uses Rcon[1..10]
RCON = [
    0x00,  # Not used (index 0)
    0x01, 0x02, 0x04, 0x08, 0x10, 0x20, 0x40, 0x80, 0x1b, 0x36,
]

KEY_SIZE = 16  # AES-128 key length in bytes
NUM_ROUNDS = 10


def sub_word(word: List[int]) -> List[int]:
    """
    Apply S-box substitution to each byte in a 4-byte word.

    Args:
        word: List of 4 bytes

    Returns:
        List of 4 substituted bytes
    """
    return [S_BOX[b] for b in word]


def rot_word(word: List[int]) -> List[int]:
    """
    Rotate a 4-byte word left by one byte.
    [a, b, c, d] -> [b, c, d, a]
    """
    return word[1:] + word[:1]


def xor_words(word1: List[int], word2: List[int]) -> List[int]:
    """XOR two 4-byte words together."""
    return [a ^ b for a, b in zip(word1, word2)]


def bytes_to_words(key: bytes) -> List[List[int]]:
    """
    Convert a byte array into a list of 4-byte words.

    Args:
        key: Input bytes (must be multiple of 4)

    Returns:
        List of words, each word is a list of 4 bytes
    """
    return [[key[i], key[i+1], key[i+2], key[i+3]] for i in range(0, len(key), 4)]


def words_to_bytes(words: List[List[int]]) -> bytes:
    """Convert a list of 4-byte words back to bytes."""
    result = []
    for word in words:
        result.extend(word)
    return bytes(result)


def aes128_key_expansion(key: bytes) -> List[bytes]:
    """
    Perform AES-128 key expansion (Rijndael key schedule).

    Expands a 128-bit (16-byte) key into 11 round keys (176 bytes total).
    AES-128 uses 10 rounds, plus an initial key addition.

    Args:
        key: 128-bit (16-byte) encryption key

    Returns:
        List of 11 round keys, each 16 bytes (128 bits)

    Raises:
        InvalidInputError: If key is not 16 bytes

    Example:
        >>> round_keys = aes128_key_expansion(bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c"))
        >>> round_keys[10].hex()
        'd014f9a8c9ee2589e13f0cc8b6630ca6'
    """
    if len(key) != KEY_SIZE:
        raise InvalidInputError(f"AES-128 requires 16-byte key, got {len(key)} bytes")

    Nk = 4   # Number of 32-bit words in the key (128/32 = 4)
    Nb = 4   # Number of 32-bit words in a block (128/32 = 4)

    # Total words needed: 4 * (Nr + 1) = 4 * 11 = 44 words
    total_words = Nb * (NUM_ROUNDS + 1)

    w = bytes_to_words(key)

    for i in range(Nk, total_words):
        temp = w[i - 1].copy()

        if i % Nk == 0:
            # Every Nk words: RotWord + SubWord + Rcon
            temp = rot_word(temp)
            temp = sub_word(temp)
            temp[0] ^= RCON[i // Nk]

        w.append(xor_words(w[i - Nk], temp))

    # Group into 16-byte round keys (4 words each)
    return [words_to_bytes(w[i:i + 4]) for i in range(0, total_words, 4)]


def format_key_hex(key: bytes, group_size: int = 4) -> str:
    """Format a key as grouped hex string for display."""
    hex_str = bytes(key).hex()
    groups = [hex_str[i:i + group_size * 2] for i in range(0, len(hex_str), group_size * 2)]
    return ' '.join(groups)
