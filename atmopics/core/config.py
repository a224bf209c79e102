"""
Runtime settings.

Values come from ``ATMOPICS_*`` environment variables, falling back to the
defaults below. Lookups are tolerant: a malformed number falls back to its
default instead of failing startup.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = "ATMOPICS_"

DEFAULTS: Dict[str, Any] = {
    "handle_resolver_url": "https://public.api.bsky.app",
    "plc_directory_url": "https://plc.directory",
    "cdn_url": "https://cdn.bsky.app",
    "public_origin": "https://atmo.pics",
    "connect_timeout": 10,
    "read_timeout": 30,
    "identity_cache_ttl": 0,
    "identity_cache_size": 256,
    "log_dir": str(Path.home() / ".atmopics" / "logs"),
    "log_level": "INFO",
}


class Settings:
    """Read-only view over environment-provided configuration."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None, **overrides: Any):
        self._environ = os.environ if environ is None else environ
        self._overrides = overrides

    def get_config(self, key: str, default: Any = None) -> Any:
        if key in self._overrides:
            return self._overrides[key]
        raw = self._environ.get(ENV_PREFIX + key.upper())
        if raw is None or raw == "":
            return default if default is not None else DEFAULTS.get(key)
        return raw

    def get_int(self, key: str) -> int:
        value = self.get_config(key)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid integer for {key}: {value!r}, using default")
            return int(DEFAULTS[key])

    def get_float(self, key: str) -> float:
        value = self.get_config(key)
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid number for {key}: {value!r}, using default")
            return float(DEFAULTS[key])

    def get_url(self, key: str) -> str:
        return str(self.get_config(key)).rstrip("/")

    @property
    def handle_resolver_url(self) -> str:
        return self.get_url("handle_resolver_url")

    @property
    def plc_directory_url(self) -> str:
        return self.get_url("plc_directory_url")

    @property
    def cdn_url(self) -> str:
        return self.get_url("cdn_url")

    @property
    def public_origin(self) -> str:
        return self.get_url("public_origin")

    @property
    def log_dir(self) -> Path:
        return Path(self.get_config("log_dir"))
