"""
Settings models for lazy collection envelopes.

Policies that decide how envelopes materialize their backing collection,
how bounded decorators treat negative counts, and the constants used by the
structural hash.
"""

import logging
import os
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator


class RefreshPolicy(str, Enum):
    """When an envelope rebuilds its backing collection"""
    RECOMPUTE = "recompute"
    CACHE = "cache"


class NegativeCountPolicy(str, Enum):
    """How bounded decorators treat a negative element count"""
    REJECT = "reject"
    CLAMP = "clamp"


class EnvelopeSettings(BaseModel):
    """Process-wide envelope configuration"""
    hash_seed: int = Field(
        42,
        description="Initial value of the structural hash fold"
    )
    hash_multiplier: int = Field(
        37,
        ge=1,
        description="Multiplier applied to the running hash for each element"
    )
    default_refresh: RefreshPolicy = Field(
        RefreshPolicy.RECOMPUTE,
        description="Refresh policy for envelopes that do not name their own"
    )
    negative_count: NegativeCountPolicy = Field(
        NegativeCountPolicy.REJECT,
        description="Policy for negative counts given to head/skip decorators"
    )
    log_level: str = Field(
        "WARNING",
        description="Level of the 'envelope' logger"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is a known logging level name"""
        name = str(v).strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown log level: {v}")
        return name


_ENV_FIELDS = {
    "ENVELOPE_HASH_SEED": "hash_seed",
    "ENVELOPE_HASH_MULTIPLIER": "hash_multiplier",
    "ENVELOPE_DEFAULT_REFRESH": "default_refresh",
    "ENVELOPE_NEGATIVE_COUNT": "negative_count",
    "ENVELOPE_LOG_LEVEL": "log_level",
}

_settings: Optional[EnvelopeSettings] = None


def load_settings(env: Optional[Mapping[str, str]] = None) -> EnvelopeSettings:
    """Build settings from ENVELOPE_* environment variables"""
    env = os.environ if env is None else env
    values = {}
    for var, field_name in _ENV_FIELDS.items():
        raw = env.get(var)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip().lower() if field_name in (
                "default_refresh", "negative_count"
            ) else raw.strip()
    return EnvelopeSettings(**values)


def get_settings() -> EnvelopeSettings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def configure(**overrides) -> EnvelopeSettings:
    """Replace the process-wide settings, starting from the environment"""
    global _settings
    base = load_settings().model_dump()
    base.update(overrides)
    _settings = EnvelopeSettings(**base)
    return _settings


def reset_settings():
    """Forget the cached settings so the next lookup re-reads the environment"""
    global _settings
    _settings = None
