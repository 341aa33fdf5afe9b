"""Tests for environment configuration."""

import logging

from gst_engine.config import (
    configure_logging,
    load_company_profile,
    load_settings,
)


class TestLoadSettings:
    """Tests for settings loaded from the environment."""

    def test_company_profile(self, monkeypatch):
        monkeypatch.setenv('COMPANY_STATE', 'Punjab')
        monkeypatch.setenv('COMPANY_GSTIN', '03AVNPR3936N1ZI')

        profile = load_company_profile()

        assert profile.state == 'Punjab'
        assert profile.gstin == '03AVNPR3936N1ZI'

    def test_defaults(self, monkeypatch):
        """Test settings when nothing is configured."""
        for name in ('COMPANY_STATE', 'COMPANY_GSTIN', 'DEFAULT_UQC',
                     'LOG_LEVEL'):
            monkeypatch.delenv(name, raising=False)

        settings = load_settings()

        assert settings.company.state == ''
        assert settings.company.gstin is None
        assert settings.default_uqc == 'NOS'
        assert settings.log_level == 'INFO'

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv('DEFAULT_UQC', 'PCS')
        monkeypatch.setenv('LOG_LEVEL', 'debug')

        settings = load_settings()

        assert settings.default_uqc == 'PCS'
        assert settings.log_level == 'DEBUG'


class TestConfigureLogging:
    """Tests for logging setup."""

    def test_configure_logging(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            logging, 'basicConfig', lambda **kwargs: calls.append(kwargs)
        )

        configure_logging('warning')
        configure_logging('nonsense')

        assert calls == [{'level': logging.WARNING}, {'level': logging.INFO}]
