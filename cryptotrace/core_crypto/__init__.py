# Core Cryptography Module
"""
Core trace computations including:
- Integer kernel (modular exponentiation, extended Euclid, inverses)
- RSA parameter derivation
- Modular exponentiation mapping
- AES-128 key schedule and encryption trace
- SHA-256 compression trace
"""
