"""Tests for environment-driven settings."""

from pathlib import Path

import pytest

from storefront.application.create_order import DeductionFailurePolicy
from storefront.infrastructure.config import DEFAULT_DATA_DIR, ConfigError, Settings

VARIABLES = (
    "STOREFRONT_DATA_DIR",
    "STOREFRONT_OPS_EMAIL",
    "STOREFRONT_DEDUCTION_POLICY",
    "STOREFRONT_NOTIFY_WORKERS",
    "STOREFRONT_LOG_LEVEL",
)


@pytest.fixture
def env(monkeypatch):
    for name in VARIABLES:
        monkeypatch.delenv(name, raising=False)

    def _set(**values):
        for name, value in values.items():
            monkeypatch.setenv(f"STOREFRONT_{name.upper()}", value)

    return _set


class TestSettings:

    def test_defaults(self, env):
        settings = Settings.from_env()
        assert settings.data_dir == DEFAULT_DATA_DIR
        assert settings.ops_email is None
        assert settings.deduction_policy == DeductionFailurePolicy.FLAG_FOR_REVIEW
        assert settings.notify_workers == 2
        assert settings.log_level == "WARNING"

    def test_overrides(self, env):
        env(
            data_dir="/srv/storefront",
            ops_email="ops@example.com",
            deduction_policy="COMPENSATE",
            notify_workers="4",
            log_level="info",
        )
        settings = Settings.from_env()
        assert settings.data_dir == Path("/srv/storefront")
        assert settings.ops_email == "ops@example.com"
        assert settings.deduction_policy == DeductionFailurePolicy.COMPENSATE
        assert settings.notify_workers == 4
        assert settings.log_level == "INFO"

    def test_blank_values_fall_back(self, env):
        env(data_dir="", ops_email="")
        settings = Settings.from_env()
        assert settings.data_dir == DEFAULT_DATA_DIR
        assert settings.ops_email is None

    @pytest.mark.parametrize(
        "values, variable",
        [
            ({"deduction_policy": "rollback"}, "STOREFRONT_DEDUCTION_POLICY"),
            ({"notify_workers": "many"}, "STOREFRONT_NOTIFY_WORKERS"),
            ({"notify_workers": "0"}, "STOREFRONT_NOTIFY_WORKERS"),
            ({"log_level": "chatty"}, "STOREFRONT_LOG_LEVEL"),
        ],
    )
    def test_bad_values(self, env, values, variable):
        env(**values)
        with pytest.raises(ConfigError, match=variable):
            Settings.from_env()

    def test_settings_are_frozen(self, env):
        settings = Settings.from_env()
        with pytest.raises(Exception):
            settings.notify_workers = 8
