"""Tests for settings loading."""

from piece_payroll.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("ENGINE_VERSION", "PAYROLL_STRICT_RATES", "PAYROLL_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.engine_version == "1.0.0"
        assert settings.strict_rates is False
        assert settings.log_level == "INFO"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ENGINE_VERSION", "2.3.0")
        monkeypatch.setenv("PAYROLL_STRICT_RATES", "True")
        monkeypatch.setenv("PAYROLL_LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.engine_version == "2.3.0"
        assert settings.strict_rates is True
        assert settings.log_level == "DEBUG"
