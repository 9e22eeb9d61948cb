#!/usr/bin/env python
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                         CRYPTOTRACE LIVE DEMO                                 ║
║                  Step-by-step cryptographic algorithm traces                  ║
╚══════════════════════════════════════════════════════════════════════════════╝

This script walks a presenter through the traces CryptoTrace computes:
- RSA parameter derivation and encryption of a short message
- Diffie-Hellman key exchange
- Recovering a private key with a discrete log search
- The modular exponent mapping
- AES-128 rounds on the FIPS-197 example block
- SHA-256 compression rounds

Pass --no-pause to run straight through.
"""

import sys

from cryptotrace.engine import get_engine
from cryptotrace.logging_setup import configure_logging


PAUSE = "--no-pause" not in sys.argv[1:]


def print_header(title):
    """Print a formatted section header"""
    print("\n" + "═" * 70)
    print(f"  {title}")
    print("═" * 70)


def print_step(step_num, description):
    """Print a numbered step"""
    print(f"\n  [{step_num}] {description}")


def pause(message="Press ENTER to continue..."):
    """Pause for presenter to explain"""
    if not PAUSE:
        return
    print(f"\n  [PAUSE] {message}")
    input()


def print_matrix(state, indent="      "):
    """Print a 4x4 AES state in hex, one row per line"""
    for row in state:
        print(indent + " ".join(f"{b:02x}" for b in row))


def main():
    configure_logging("warning")
    engine = get_engine()

    print("\n" * 2)
    print("╔" + "═" * 68 + "╗")
    print("║" + " " * 68 + "║")
    print("║" + "        CRYPTOTRACE - ALGORITHM TRACE ENGINE".center(68) + "║")
    print("║" + " " * 68 + "║")
    print("║" + "                     Live Demo".center(68) + "║")
    print("║" + " " * 68 + "║")
    print("╚" + "═" * 68 + "╝")

    print("\n  This demonstration showcases:")
    print("  • RSA key derivation with Euler and Carmichael totients")
    print("  • Diffie-Hellman key exchange")
    print("  • Discrete log by brute force and baby-step giant-step")
    print("  • AES-128 encryption round by round")
    print("  • SHA-256 compression round by round")

    pause("Press ENTER to begin the demonstration...")

    print_header("PART 1: RSA")

    print_step("1.1", "Deriving Parameters from p = 61, q = 53")

    params = engine.derive_key_parameters("61", "53")
    print(f"\n  n = p * q      = {params['n']}")
    print(f"  phi(n)         = {params['totient']}")
    print(f"  Public  (e, n) = ({params['e']}, {params['n']})")
    print(f"  Private (d, n) = ({params['d']}, {params['n']})")

    carmichael = engine.derive_key_parameters("61", "53", use_carmichael=True)
    print(f"\n  With lambda(n) = {carmichael['totient']}: "
          f"e = {carmichael['e']}, d = {carmichael['d']}")

    pause()

    print_step("1.2", "Encrypting a Message")

    big = engine.derive_key_parameters("1009", "1013")
    message = "Hi"
    m = engine.text_to_int(message)
    c = engine.rsa_encrypt(m, big["e"], big["n"])
    recovered = engine.int_to_text(engine.rsa_decrypt(c, big["d"], big["n"]))
    print(f"\n  Key: n = {big['n']}, e = {big['e']}")
    print(f"  Message '{message}' as integer: {m}")
    print(f"  Ciphertext: {c}")
    print(f"  Decrypted: '{recovered}'")
    print(f"\n  [OK] Round trip: {recovered == message}")

    pause()

    print_header("PART 2: DIFFIE-HELLMAN KEY EXCHANGE")

    print_step("2.1", "Alice and Bob Agree on p = 23, g = 5")

    exchange = engine.diffie_hellman_exchange("23", "5", "6", "15")
    for step in exchange["steps"]:
        print(f"\n  Step {step['step']}: {step['description']}")
        print(f"      {step['computation']} = {step['value']}")

    match = exchange["alice_shared"] == exchange["bob_shared"]
    print(f"\n  [{'OK' if match else 'X'}] Shared secrets match: {match}")

    pause()

    print_header("PART 3: DISCRETE LOGARITHM")

    print_step("3.1", "Eve Sees A and Searches for Alice's Secret (Brute Force)")

    brute = engine.discrete_log_brute_force("5", exchange["alice_public"], "23", "100")
    for step in brute["steps"]:
        marker = "  <-- found" if step["found"] else ""
        print(f"      {step['description']}{marker}")
    print(f"\n  Recovered a = {brute['solution']} in {len(brute['steps'])} steps")

    pause()

    print_step("3.2", "Same Search with Baby-step Giant-step")

    bsgs = engine.discrete_log_bsgs("3", "8", "17", "100")
    print("\n  Solving 3^x = 8 (mod 17)")
    for step in bsgs["steps"]:
        print(f"      [{step['method']}] {step['description']}")
    print(f"\n  x = {bsgs['solution']} ({bsgs['method_used']})")
    for warning in bsgs["warnings"]:
        print(f"  [!] {warning}")

    pause()

    print_header("PART 4: MODULAR EXPONENT MAPPING")

    print_step("4.1", "i -> i^3 mod 33")

    mapping = engine.map_mod_exp("3", "33", "33")
    for i in range(0, 33, 11):
        row = mapping[i:i + 11]
        print("      " + " ".join(f"{v:2d}" for v in row))
    print(f"\n  Permutation: {sorted(mapping) == list(range(33))}")

    pause()

    print_header("PART 5: AES-128")

    plaintext = list(bytes.fromhex("00112233445566778899aabbccddeeff"))
    key = list(range(16))
    trace = engine.aes_encrypt_trace(plaintext, key)

    print_step("5.1", "Round 1 Sub-steps")

    for record in trace["rounds"]:
        if record["round"] != 1:
            continue
        print(f"\n  {record['step']}: {record['description']}")
        print_matrix(record["state"])

    pause()

    print_step("5.2", "Final Ciphertext")

    print(f"\n  Plaintext:  {bytes(plaintext).hex()}")
    print(f"  Key:        {bytes(key).hex()}")
    print(f"  Ciphertext: {bytes(trace['ciphertext']).hex()}")

    pause()

    print_header("PART 6: SHA-256")

    print_step("6.1", "Hashing 'abc'")

    digest = engine.sha256_trace(list(b"abc"))
    print(f"\n  Padded to {len(digest['padded_message'])} bytes, "
          f"{len(digest['steps'])} compression rounds")
    for step in digest["steps"][:3]:
        print(f"\n  Round {step['step']}: a={step['a']:08x} e={step['e']:08x} "
              f"W={step['w']:08x} K={step['k']:08x}")
    print(f"\n  Digest: {digest['hex_digest']}")

    print("\n\n" + "═" * 70)
    print("  DEMONSTRATION COMPLETE!")
    print("═" * 70)


if __name__ == "__main__":
    main()
