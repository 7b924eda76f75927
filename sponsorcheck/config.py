"""
Runtime settings for the page monitor.

All delays are in seconds. Values can be overridden with SPONSORCHECK_*
environment variables, typically from a .env file in the working directory.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

from .env import load_env

ENV_PREFIX = "SPONSORCHECK_"


@dataclass(frozen=True)
class Settings:
    debounce_delay: float = 0.3
    poll_interval: float = 2.0
    navigation_delay: float = 0.1
    navigation_settle_delay: float = 0.2
    retry_delay: float = 0.3
    click_delay: float = 0.5
    highlight_delay: float = 0.1
    max_extraction_retries: int = 10
    min_description_length: int = 100
    fingerprint_prefix: int = 200
    log_level: str = "INFO"
    log_dir: Optional[str] = None


def _coerce(name: str, raw: str, kind):
    try:
        if kind is int:
            value = int(raw)
        elif kind is float:
            value = float(raw)
        else:
            return raw
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name.upper()} must be a valid {kind.__name__}, got {raw!r}")
    if value < 0:
        raise ValueError(f"{ENV_PREFIX}{name.upper()} must not be negative, got {raw!r}")
    return value


_KINDS = {"debounce_delay": float, "poll_interval": float, "navigation_delay": float,
          "navigation_settle_delay": float, "retry_delay": float, "click_delay": float,
          "highlight_delay": float, "max_extraction_retries": int,
          "min_description_length": int, "fingerprint_prefix": int,
          "log_level": str, "log_dir": str}


def settings_from_mapping(env: Mapping[str, str]) -> Settings:
    """Build Settings from a mapping of SPONSORCHECK_* variables."""
    overrides = {}
    for f in fields(Settings):
        raw = env.get(ENV_PREFIX + f.name.upper())
        if raw is None or raw.strip() == "":
            continue
        overrides[f.name] = _coerce(f.name, raw.strip(), _KINDS[f.name])
    if "log_level" in overrides:
        overrides["log_level"] = overrides["log_level"].upper()
    return Settings(**overrides)


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Load .env (if any) and read settings from the process environment."""
    load_env(env_file)
    return settings_from_mapping(os.environ)
