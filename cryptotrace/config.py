"""
Engine configuration.

Tunable limits live here as module-level constants. ``EngineConfig`` bundles
them for the engine handle and can be overridden through environment
variables prefixed with ``CRYPTOTRACE_``.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import InvalidInputError


# ============================================================================
# Constants
# ============================================================================

DEFAULT_PUBLIC_EXPONENT = 65537  # 2^16 + 1, the usual RSA choice
EXPONENT_SEARCH_LIMIT = 5000  # Candidates tried before giving up on e
MAPPING_MAX_COUNT = 2000  # Safety cap for the modular exponent mapping
DEFAULT_MAX_STEPS = 1000  # Discrete log step budget when none is given
DEFAULT_LOG_LEVEL = "warning"

ENV_PREFIX = "CRYPTOTRACE_"


def _read_positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip(), 10)
    except ValueError:
        raise InvalidInputError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise InvalidInputError(f"{ENV_PREFIX}{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class EngineConfig:
    """
    Limits used by the engine handle.

    Attributes:
        exponent_search_limit: Maximum RSA exponent candidates to try
        mapping_max_count: Upper bound on the mapping length
        default_max_steps: Discrete log budget used when the caller passes none
        log_level: Level name handed to ``configure_logging``
    """
    exponent_search_limit: int = EXPONENT_SEARCH_LIMIT
    mapping_max_count: int = MAPPING_MAX_COUNT
    default_max_steps: int = DEFAULT_MAX_STEPS
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'EngineConfig':
        """
        Build a configuration from environment variables.

        Args:
            env: Mapping to read from (defaults to ``os.environ``)

        Returns:
            EngineConfig with overrides applied

        Raises:
            InvalidInputError: If a variable is set but not a positive integer
        """
        if env is None:
            env = os.environ
        return cls(
            exponent_search_limit=_read_positive_int(
                env, "EXPONENT_SEARCH_LIMIT", EXPONENT_SEARCH_LIMIT),
            mapping_max_count=_read_positive_int(
                env, "MAPPING_MAX_COUNT", MAPPING_MAX_COUNT),
            default_max_steps=_read_positive_int(
                env, "DEFAULT_MAX_STEPS", DEFAULT_MAX_STEPS),
            log_level=env.get(ENV_PREFIX + "LOG_LEVEL", DEFAULT_LOG_LEVEL).lower(),
        )
