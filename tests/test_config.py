"""Tests for environment settings."""

import pytest

from core.config import DEFAULT_TIMEOUT, Settings
from core.errors import ConfigError


class TestSettings:
    def test_from_env(self):
        settings = Settings.from_env({
            "SUPABASE_URL": "https://project.supabase.co/",
            "SUPABASE_ANON_KEY": "anon-key",
            "SUPABASE_TIMEOUT": "5",
            "LOG_LEVEL": "debug",
        })
        assert settings.supabase_url == "https://project.supabase.co"
        assert settings.timeout == 5.0
        assert settings.log_level == "DEBUG"

    def test_defaults(self):
        settings = Settings.from_env({
            "SUPABASE_URL": "https://project.supabase.co",
            "SUPABASE_ANON_KEY": "anon-key",
        })
        assert settings.timeout == DEFAULT_TIMEOUT
        assert settings.log_level == "INFO"

    @pytest.mark.parametrize("env", [
        {},
        {"SUPABASE_URL": "https://project.supabase.co"},
        {"SUPABASE_ANON_KEY": "anon-key"},
    ])
    def test_missing_backend(self, env):
        with pytest.raises(ConfigError, match="Missing Supabase"):
            Settings.from_env(env)

    def test_bad_timeout(self):
        with pytest.raises(ConfigError, match="SUPABASE_TIMEOUT"):
            Settings.from_env({
                "SUPABASE_URL": "https://project.supabase.co",
                "SUPABASE_ANON_KEY": "anon-key",
                "SUPABASE_TIMEOUT": "soon",
            })
