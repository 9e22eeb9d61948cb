"""
CryptoTrace - Command Line Entry Point

Runs one tracer per command and prints its record as JSON:

    cryptotrace modpow 4 13 497
    cryptotrace rsa 61 53 --carmichael
    cryptotrace dh 23 5 6 15
    cryptotrace dlog 3 13 17 --method bsgs
    cryptotrace map 3 33 33
    cryptotrace aes 00112233445566778899aabbccddeeff 000102030405060708090a0b0c0d0e0f
    cryptotrace sha256 abc
"""

import json

import click

from .config import EngineConfig
from .engine import get_engine
from .errors import TraceError
from .logging_setup import LEVELS, configure_logging


def _emit(record) -> None:
    click.echo(json.dumps(record, indent=2, ensure_ascii=False))


def _parse_block(ctx, param, value: str) -> list:
    try:
        data = bytes.fromhex(value)
    except ValueError:
        raise click.BadParameter("must be hexadecimal")
    if len(data) != 16:
        raise click.BadParameter(f"must be 16 bytes (32 hex digits), got {len(data)} bytes")
    return list(data)


def _run(func, *args, **kwargs) -> None:
    try:
        _emit(func(*args, **kwargs))
    except TraceError as exc:
        raise click.ClickException(str(exc))


@click.group()
@click.option("--log-level", type=click.Choice(sorted(LEVELS)), default=None,
              help="Log level (defaults to CRYPTOTRACE_LOG_LEVEL or warning).")
@click.option("--json-logs", is_flag=True, help="Render log events as JSON.")
@click.pass_context
def cli(ctx, log_level, json_logs):
    """Compute cryptographic algorithm traces for step-by-step replay."""
    try:
        config = EngineConfig.from_env()
    except TraceError as exc:
        raise click.ClickException(str(exc))
    level = log_level or config.log_level
    if level not in LEVELS:
        raise click.ClickException(f"Unknown log level {level!r}")
    configure_logging(level, json_output=json_logs)
    ctx.obj = get_engine()


@cli.command()
@click.argument("base")
@click.argument("exponent")
@click.argument("modulus")
@click.pass_obj
def modpow(engine, base, exponent, modulus):
    """Compute BASE^EXPONENT mod MODULUS."""
    _run(engine.mod_pow, base, exponent, modulus)


@cli.command()
@click.argument("p")
@click.argument("q")
@click.option("--carmichael", is_flag=True, help="Use lambda(n) instead of phi(n).")
@click.option("-e", "--exponent", "exponent_hint", default=None,
              help="Preferred public exponent.")
@click.pass_obj
def rsa(engine, p, q, carmichael, exponent_hint):
    """Derive n, e and d from primes P and Q."""
    _run(engine.derive_key_parameters, p, q, carmichael, exponent_hint)


@cli.command()
@click.argument("p")
@click.argument("g")
@click.argument("alice_private")
@click.argument("bob_private")
@click.pass_obj
def dh(engine, p, g, alice_private, bob_private):
    """Trace a Diffie-Hellman exchange."""
    _run(engine.diffie_hellman_exchange, p, g, alice_private, bob_private)


@cli.command()
@click.argument("base")
@click.argument("target")
@click.argument("modulus")
@click.option("--max-steps", default=None, help="Step budget for the search.")
@click.option("--method", type=click.Choice(["brute-force", "bsgs"]),
              default="brute-force", show_default=True)
@click.pass_obj
def dlog(engine, base, target, modulus, max_steps, method):
    """Find x with BASE^x = TARGET (mod MODULUS)."""
    _run(engine.discrete_log, base, target, modulus, max_steps,
         method.replace("-", "_"))


@cli.command(name="map")
@click.argument("exponent")
@click.argument("modulus")
@click.argument("count")
@click.pass_obj
def map_command(engine, exponent, modulus, count):
    """Map i -> (i^EXPONENT mod MODULUS) mod COUNT for i < COUNT."""
    _run(engine.map_mod_exp, exponent, modulus, count)


@cli.command()
@click.argument("plaintext", callback=_parse_block)
@click.argument("key", callback=_parse_block)
@click.pass_obj
def aes(engine, plaintext, key):
    """Trace AES-128 encryption of one hex block under a hex key."""
    _run(engine.aes_encrypt_trace, plaintext, key)


@cli.command()
@click.argument("message")
@click.option("--hex", "is_hex", is_flag=True, help="MESSAGE is hex-encoded bytes.")
@click.pass_obj
def sha256(engine, message, is_hex):
    """Trace SHA-256 of MESSAGE (UTF-8 text unless --hex)."""
    if is_hex:
        try:
            data = bytes.fromhex(message)
        except ValueError:
            raise click.BadParameter("must be hexadecimal", param_hint="MESSAGE")
    else:
        data = message.encode("utf-8")
    _run(engine.sha256_trace, list(data))


def main():
    """Main entry point for CryptoTrace."""
    cli()


if __name__ == "__main__":
    main()
