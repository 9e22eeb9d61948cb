"""
Unit tests for Core Crypto modules.

Tests:
- Integer kernel (RSA math)
- RSA parameter derivation
- Modular exponentiation mapping
- AES-128 key schedule and encryption trace
- SHA-256 trace
"""

import hashlib
import random

import pytest
from cryptotrace.core_crypto.sha256 import H_INITIAL, K, sha256, sha256_hex, sha256_trace
from cryptotrace.core_crypto.aes_key_schedule import (
    aes128_key_expansion, sub_word, rot_word, S_BOX
)
from cryptotrace.core_crypto.aes_trace import (
    aes_encrypt_trace, reference_encrypt, verify_trace
)
from cryptotrace.core_crypto.bijection import map_mod_exp
from cryptotrace.core_crypto.rsa_math import (
    mod_exp, is_probable_prime, generate_prime, gcd, lcm, extended_gcd,
    mod_inverse, totient_phi, totient_lambda, bytes_to_int, int_to_bytes,
    text_to_int, int_to_text
)
from cryptotrace.core_crypto.rsa_params import (
    derive_key_parameters, private_exponent_for, pick_small_primes_in_range,
    generate_key_parameters, rsa_encrypt, rsa_decrypt
)
from cryptotrace.errors import InvalidInputError, KeySearchExhaustedError


def _recursive_egcd(a, b):
    """Textbook recursive definition used as the reference."""
    if b == 0:
        return a, 1, 0
    g, x1, y1 = _recursive_egcd(b, a % b)
    return g, y1, x1 - (a // b) * y1


class TestSHA256:
    """Unit tests for SHA-256 implementation."""

    def test_empty_string(self):
        """Test SHA-256 of empty string."""
        expected = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        assert sha256_hex(b"") == expected
        assert sha256_trace(b"").hex_digest == expected

    def test_abc(self):
        """Test SHA-256 of 'abc'."""
        expected = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        assert sha256_hex(b"abc") == expected
        assert sha256_trace(b"abc").hex_digest == expected

    def test_long_message(self):
        """Test SHA-256 of a two-block message."""
        msg = b"abcdbcdecdefdefgefghfghighijhijkijkljklmklmnlmnomnopnopq"
        expected = "248d6a61d20638b8e5c026930c3e6039a33ce45964ff2167f6ecedd419db06c1"
        trace = sha256_trace(msg)
        assert trace.hex_digest == expected
        assert len(trace.padded_message) == 128
        assert len(trace.steps) == 128

    @pytest.mark.parametrize("length", [0, 1, 55, 56, 63, 64, 65, 200])
    def test_matches_hashlib_at_padding_boundaries(self, length):
        """Trace digest should match hashlib around the padding boundaries."""
        msg = bytes((i * 7) & 0xFF for i in range(length))
        trace = sha256_trace(msg)
        assert trace.digest == hashlib.sha256(msg).digest()
        assert sha256(msg) == hashlib.sha256(msg).digest()

    def test_padding_layout(self):
        """Padding appends 0x80, zeros and the 64-bit bit length."""
        trace = sha256_trace(b"abc")
        padded = bytes(trace.padded_message)
        assert len(padded) % 64 == 0
        assert padded[:3] == b"abc"
        assert padded[3] == 0x80
        assert padded[4:56] == bytes(52)
        assert int.from_bytes(padded[56:], "big") == 24

    def test_first_round_starts_from_iv(self):
        """The first step shows the initial hash values."""
        step = sha256_trace(b"abc").steps[0]
        assert (step.a, step.b, step.c, step.d, step.e, step.f, step.g, step.h) == tuple(H_INITIAL)

    def test_second_round_matches_fips_example(self):
        """After round 0 of 'abc', a = 5d6aebcd and e = fa2a4622."""
        step = sha256_trace(b"abc").steps[1]
        assert step.a == 0x5d6aebcd
        assert step.b == H_INITIAL[0]
        assert step.e == 0xfa2a4622

    def test_steps_carry_schedule_word_and_constant(self):
        """Each step carries W[i] and K[i] of its round."""
        trace = sha256_trace(b"abc")
        assert trace.schedules[0][0] == 0x61626380
        for step in trace.steps:
            assert step.w == trace.schedules[step.block][step.step]
            assert step.k == K[step.step]

    def test_binary_digest(self):
        """Binary digest is the 256-bit string form of the hash."""
        trace = sha256_trace(b"hello")
        assert len(trace.binary_digest) == 256
        assert int(trace.binary_digest, 2) == int(trace.hex_digest, 16)

    def test_returns_32_bytes(self):
        """SHA-256 should return 32 bytes."""
        assert len(sha256(b"test")) == 32
        assert len(sha256_trace(b"test").hash) == 8

    def test_digest_helper_agrees_with_trace(self):
        """sha256() and the trace share one compression path."""
        for msg in (b"", b"abc", bytes(range(130))):
            trace = sha256_trace(msg)
            assert sha256(msg) == trace.digest
            assert sha256_hex(msg) == trace.hex_digest
        # 130 bytes pad to three blocks
        assert len(sha256_trace(bytes(range(130))).schedules) == 3

    def test_to_dict(self):
        """Trace dictionary exposes steps and hex digest."""
        data = sha256_trace(b"").to_dict()
        assert data["message"] == []
        assert len(data["steps"]) == 64
        assert data["steps"][0]["k"] == K[0]


class TestAESKeySchedule:
    """Unit tests for AES-128 Key Schedule."""

    def test_key_expansion_length(self):
        """Key expansion should produce 11 round keys of 16 bytes."""
        round_keys = aes128_key_expansion(bytes(range(16)))
        assert len(round_keys) == 11
        assert all(len(rk) == 16 for rk in round_keys)

    def test_fips197_round_keys(self):
        """Round keys for the FIPS-197 Appendix A.1 key."""
        key = bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c")
        round_keys = aes128_key_expansion(key)
        assert round_keys[0] == key
        assert round_keys[1].hex() == "a0fafe1788542cb123a339392a6c7605"
        assert round_keys[10].hex() == "d014f9a8c9ee2589e13f0cc8b6630ca6"

    def test_invalid_key_length(self):
        """Invalid key length should raise error."""
        with pytest.raises(InvalidInputError):
            aes128_key_expansion(bytes(32))

    def test_word_helpers(self):
        """RotWord rotates left, SubWord applies the S-box."""
        assert rot_word([1, 2, 3, 4]) == [2, 3, 4, 1]
        assert sub_word([0x00, 0x53]) == [0x63, 0xed]

    def test_sbox_bijective(self):
        """S-box should be bijective (256 unique outputs)."""
        assert len(set(S_BOX)) == 256


class TestAESTrace:
    """Unit tests for the AES-128 encryption trace."""

    PLAINTEXT = bytes.fromhex("00112233445566778899aabbccddeeff")
    KEY = bytes.fromhex("000102030405060708090a0b0c0d0e0f")

    def test_known_answer(self):
        """FIPS-197 Appendix C.1 vector."""
        trace = aes_encrypt_trace(self.PLAINTEXT, self.KEY)
        assert trace.ciphertext_hex == "69c4e0d86a7b0430d8cdb78070b4c55a"

    def test_appendix_b_vector(self):
        """FIPS-197 Appendix B vector."""
        trace = aes_encrypt_trace(bytes.fromhex("3243f6a8885a308d313198a2e0370734"),
                                  bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c"))
        assert trace.ciphertext_hex == "3925841d02dc09fbdc118597196a0b32"

    def test_intermediate_states_match_appendix_b(self):
        """Sub-step states for round 1 of the Appendix B example."""
        trace = aes_encrypt_trace(bytes.fromhex("3243f6a8885a308d313198a2e0370734"),
                                  bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c"))
        after_key0 = trace.rounds_for(0)[1]
        assert after_key0.step == "AddRoundKey"
        assert after_key0.state == (
            (0x19, 0xa0, 0x9a, 0xe9),
            (0x3d, 0xf4, 0xc6, 0xf8),
            (0xe3, 0xe2, 0x8d, 0x48),
            (0xbe, 0x2b, 0x2a, 0x08),
        )
        sub, shift, mix, _ = trace.rounds_for(1)
        assert sub.state[0] == (0xd4, 0xe0, 0xb8, 0x1e)
        assert shift.state[1] == (0xbf, 0xb4, 0x41, 0x27)
        assert mix.state == (
            (0x04, 0xe0, 0x48, 0x28),
            (0x66, 0xcb, 0xf8, 0x06),
            (0x81, 0x19, 0xd3, 0x26),
            (0xe5, 0x9a, 0x7a, 0x4c),
        )

    def test_round_structure(self):
        """Round 0 has two records, rounds 1-9 four, round 10 three."""
        trace = aes_encrypt_trace(self.PLAINTEXT, self.KEY)
        assert len(trace.rounds) == 41
        assert [r.step for r in trace.rounds_for(0)] == ["Initial State", "AddRoundKey"]
        for n in range(1, 10):
            assert [r.step for r in trace.rounds_for(n)] == [
                "SubBytes", "ShiftRows", "MixColumns", "AddRoundKey"]
        assert [r.step for r in trace.rounds_for(10)] == [
            "SubBytes", "ShiftRows", "AddRoundKey"]

    def test_initial_state_is_column_major(self):
        """state[row][col] holds plaintext[4*col + row]."""
        trace = aes_encrypt_trace(self.PLAINTEXT, self.KEY)
        state = trace.rounds[0].state
        assert state[0] == (0x00, 0x44, 0x88, 0xcc)
        assert state[1] == (0x11, 0x55, 0x99, 0xdd)

    def test_final_state_is_ciphertext(self):
        """Last record's state read column-major is the ciphertext."""
        trace = aes_encrypt_trace(self.PLAINTEXT, self.KEY)
        state = trace.rounds[-1].state
        flat = tuple(state[r][c] for c in range(4) for r in range(4))
        assert flat == trace.ciphertext

    def test_intermediate_values_show_state(self):
        """Every record lists its state bytes in hex."""
        trace = aes_encrypt_trace(self.PLAINTEXT, self.KEY)
        for record in trace.rounds:
            assert record.intermediate_values[-1].startswith("State: ")
        assert "Round Key 0" in trace.rounds[1].intermediate_values[0]

    def test_matches_cryptography_library(self):
        """Random blocks agree with the cryptography package."""
        rng = random.Random(364)
        for _ in range(5):
            pt = bytes(rng.randrange(256) for _ in range(16))
            key = bytes(rng.randrange(256) for _ in range(16))
            trace = aes_encrypt_trace(pt, key)
            assert bytes(trace.ciphertext) == reference_encrypt(pt, key)
            assert verify_trace(trace)

    def test_accepts_int_lists(self):
        """Byte arrays may be given as lists of ints."""
        trace = aes_encrypt_trace(list(self.PLAINTEXT), list(self.KEY))
        assert trace.ciphertext_hex == "69c4e0d86a7b0430d8cdb78070b4c55a"
        assert trace.to_dict()["plaintext"] == list(self.PLAINTEXT)


class TestRSAMath:
    """Unit tests for the integer kernel."""

    def test_mod_exp_basic(self):
        """Test modular exponentiation."""
        assert mod_exp(2, 10, 1000) == 24
        assert mod_exp(4, 13, 497) == 445

    def test_mod_exp_edge_cases(self):
        """Modulus 1 gives 0; negative bases are reduced."""
        assert mod_exp(5, 0, 1) == 0
        assert mod_exp(5, 0, 7) == 1
        assert mod_exp(-2, 3, 7) == 6

    def test_mod_exp_large(self):
        """Results match the built-in for big operands."""
        base, exp, mod = 3 ** 100, 2 ** 200 + 17, 2 ** 127 - 1
        assert mod_exp(base, exp, mod) == pow(base, exp, mod)

    def test_gcd_lcm(self):
        """Test GCD and LCM."""
        assert gcd(48, 18) == 6
        assert gcd(17, 13) == 1
        assert gcd(-12, 8) == 4
        assert lcm(4, 6) == 12
        assert lcm(0, 5) == 0

    def test_extended_gcd_values(self):
        """Known Bezout coefficients."""
        assert extended_gcd(240, 46) == (2, -9, 47)

    def test_extended_gcd_matches_recursive_definition(self):
        """Iterative version returns the same triple as the recursive one."""
        for a in range(-30, 31, 7):
            for b in range(-25, 26, 6):
                expected = _recursive_egcd(a, b)
                if expected[0] < 0:
                    expected = tuple(-v for v in expected)
                g, x, y = extended_gcd(a, b)
                assert (g, x, y) == expected
                assert a * x + b * y == g
                assert g >= 0

    def test_mod_inverse(self):
        """Test modular inverse."""
        assert mod_inverse(3, 11) == 4
        assert mod_inverse(17, 3120) == 2753
        for a in range(1, 50):
            if gcd(a, 50) == 1:
                assert (a * mod_inverse(a, 50)) % 50 == 1

    def test_mod_inverse_absent(self):
        """No inverse is reported as None, not an exception."""
        assert mod_inverse(6, 9) is None
        assert mod_inverse(0, 7) is None

    def test_totients(self):
        """phi and lambda for the classic 61 * 53 example."""
        assert totient_phi(61, 53) == 3120
        assert totient_lambda(61, 53) == 780

    def test_miller_rabin_primes(self):
        """Miller-Rabin should identify primes."""
        for p in [2, 3, 5, 7, 11, 13, 17, 19, 23, 97, 101, 7919, 2 ** 61 - 1]:
            assert is_probable_prime(p), f"{p} should be prime"

    def test_miller_rabin_composites(self):
        """Miller-Rabin should reject composites, including Carmichael numbers."""
        for c in [0, 1, 4, 6, 9, 15, 21, 100, 561, 1105, 2 ** 61 + 1]:
            assert not is_probable_prime(c), f"{c} should not be prime"

    def test_generate_prime(self):
        """Generated primes have the requested size and pass the test."""
        p = generate_prime(64)
        assert p.bit_length() == 64
        assert is_probable_prime(p)

    def test_generate_prime_seeded(self):
        """A seeded source gives reproducible primes."""
        assert generate_prime(32, random.Random(7)) == generate_prime(32, random.Random(7))

    def test_byte_codec(self):
        """Big-endian with minimal length."""
        assert int_to_bytes(0) == b""
        assert int_to_bytes(256) == b"\x01\x00"
        assert bytes_to_int(b"") == 0
        assert bytes_to_int(b"\x00\x01") == 1
        assert bytes_to_int(int_to_bytes(2 ** 100 + 5)) == 2 ** 100 + 5
        assert int_to_bytes(1, 4) == b"\x00\x00\x00\x01"

    def test_text_codec(self):
        """Text round trips through its UTF-8 integer form."""
        assert text_to_int("Hi") == 0x4869
        assert int_to_text(0x4869) == "Hi"
        assert int_to_text(text_to_int("héllo")) == "héllo"
        assert int_to_text(0xFF) is None


class TestRSAParams:
    """Unit tests for RSA parameter derivation."""

    def test_classic_example(self):
        """61 * 53 with Euler's totient."""
        params = derive_key_parameters(61, 53)
        assert params.n == 3233
        assert params.totient == 3120
        assert (params.e, params.d) == (7, 1783)

    def test_carmichael(self):
        """61 * 53 with Carmichael's function."""
        params = derive_key_parameters(61, 53, use_carmichael=True)
        assert params.totient == 780
        assert (params.e, params.d) == (7, 223)

    def test_hint_is_used(self):
        """A valid hint is taken as the exponent."""
        params = derive_key_parameters(61, 53, exponent_hint=17)
        assert (params.e, params.d) == (17, 2753)

    def test_out_of_range_hint_ignored(self):
        """A hint >= T falls back to the default search."""
        assert derive_key_parameters(61, 53, exponent_hint=5000).e == 7

    def test_default_exponent_for_large_totient(self):
        """65537 is preferred when it fits below the totient."""
        assert derive_key_parameters(1009, 1013).e == 65537

    def test_fixed_point_skipped(self):
        """1561 is its own inverse mod 3120 and must be skipped."""
        assert mod_inverse(1561, 3120) == 1561
        params = derive_key_parameters(61, 53, exponent_hint=1561)
        assert params.e == 1567
        assert params.e != params.d

    def test_all_units_self_inverse_exhausts(self):
        """Every unit mod 24 is its own inverse."""
        with pytest.raises(KeySearchExhaustedError):
            derive_key_parameters(5, 7)

    def test_attempt_budget(self):
        """A tiny budget is exhausted before reaching a coprime exponent."""
        with pytest.raises(KeySearchExhaustedError) as excinfo:
            derive_key_parameters(61, 53, max_attempts=2)
        assert excinfo.value.attempts == 2

    @pytest.mark.parametrize("p,q", [(61, 53), (11, 13), (17, 19), (101, 103), (1009, 1013)])
    @pytest.mark.parametrize("use_carmichael", [False, True])
    def test_invariants(self, p, q, use_carmichael):
        """1 < e < T, gcd(e, T) = 1, e*d = 1 mod T and e != d."""
        params = derive_key_parameters(p, q, use_carmichael)
        t = params.totient
        assert 1 < params.e < t
        assert gcd(params.e, t) == 1
        assert (params.e * params.d) % t == 1
        assert params.e != params.d

    @pytest.mark.parametrize("use_carmichael", [False, True])
    def test_encrypt_decrypt_roundtrip(self, use_carmichael):
        """encrypt(decrypt(c)) == c and decrypt(encrypt(m)) == m for all values < n."""
        params = derive_key_parameters(61, 53, use_carmichael)
        for value in range(0, params.n, 37):
            assert params.encrypt(params.decrypt(value)) == value
            assert params.decrypt(params.encrypt(value)) == value

    def test_module_level_encrypt_decrypt(self):
        """Module-level helpers match the textbook example."""
        assert rsa_encrypt(65, (17, 3233)) == 2790
        assert rsa_decrypt(2790, (2753, 3233)) == 65

    def test_message_out_of_range(self):
        """Messages must be below n."""
        with pytest.raises(InvalidInputError):
            rsa_encrypt(3233, (17, 3233))

    def test_private_exponent_for(self):
        """d for a caller-chosen e, or None."""
        assert private_exponent_for(17, 61, 53) == 2753
        assert private_exponent_for(6, 61, 53) is None

    def test_pick_small_primes_in_range(self):
        """Product closest to the middle of [30, 60]."""
        assert pick_small_primes_in_range(30, 60) == (2, 23, 46)
        assert pick_small_primes_in_range(1, 5) is None

    def test_pick_small_primes_without_upper_bound(self):
        """n_max = 0 means no upper bound."""
        p, q, n = pick_small_primes_in_range(100, 0)
        assert p < q
        assert n == p * q
        assert n >= 100

    def test_generate_key_parameters(self):
        """Random keys satisfy the same invariants."""
        params = generate_key_parameters(64, rng=random.Random(11))
        assert params.p != params.q
        assert (params.e * params.d) % params.totient == 1
        assert params.decrypt(params.encrypt(42)) == 42

    def test_to_dict_uses_decimal_text(self):
        """Numbers leave as base-10 strings."""
        data = derive_key_parameters(61, 53).to_dict()
        assert data["n"] == "3233"
        assert data["e"] == "7"


class TestModExpMapping:
    """Unit tests for the modular exponentiation mapping."""

    def test_matches_mod_exp(self):
        """mapping[i] == (i^e mod n) mod count."""
        mapping = map_mod_exp(7, 100, 30)
        assert mapping == [mod_exp(i, 7, 100) % 30 for i in range(30)]

    def test_rsa_exponent_is_permutation(self):
        """With count == n and a valid RSA exponent the map is a bijection."""
        mapping = map_mod_exp(3, 33, 33)
        assert sorted(mapping) == list(range(33))

    def test_count_is_clamped(self):
        """Counts above the cap are clamped, not rejected."""
        assert len(map_mod_exp(3, 10 ** 6, 5000)) == 2000
        assert len(map_mod_exp(3, 33, 50, max_count=10)) == 10

    def test_empty(self):
        """Zero count gives an empty mapping."""
        assert map_mod_exp(3, 33, 0) == []
