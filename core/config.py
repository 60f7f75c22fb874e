"""Settings read from the environment."""

import os
from dataclasses import dataclass
from typing import Self

from core.errors import ConfigError

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    """Runtime settings.

    Attributes:
        supabase_url: Base URL of the Supabase project
        supabase_key: Anon API key sent with every request
        timeout: HTTP timeout in seconds for backend calls
        log_level: Root logging level name
    """
    supabase_url: str
    supabase_key: str
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Self:
        """Load settings, raising ConfigError if the backend isn't configured."""
        env = os.environ if environ is None else environ

        url = env.get("SUPABASE_URL", "").rstrip("/")
        key = env.get("SUPABASE_ANON_KEY", "")
        if not url or not key:
            raise ConfigError("Missing Supabase environment variables "
                              "(SUPABASE_URL, SUPABASE_ANON_KEY)")

        raw_timeout = env.get("SUPABASE_TIMEOUT", "")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ConfigError(f"SUPABASE_TIMEOUT must be a number, got {raw_timeout!r}")

        return cls(
            supabase_url=url,
            supabase_key=key,
            timeout=timeout,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
