# CryptoTrace Test Suite
"""
Test suite including:
- Unit tests per tracer
- Integration tests through the engine handle and CLI
- Security tests (invalid inputs)

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
