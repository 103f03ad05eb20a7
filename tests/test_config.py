"""
Tests for engine settings.
"""

import pytest

from enrichment_core.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("WATERFALL_QUALITY_THRESHOLD", "WATERFALL_MAX_PROVIDERS", "SCORE_WEIGHT_ICP_FIT"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.WATERFALL_QUALITY_THRESHOLD == 0.7
        assert settings.WATERFALL_MAX_PROVIDERS == 3
        assert settings.SCORE_WEIGHT_ICP_FIT == pytest.approx(0.35)
        settings.validate_settings()

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("WATERFALL_MAX_PROVIDERS", "5")
        monkeypatch.setenv("apollo_api_key", "from-env")

        settings = Settings(_env_file=None)

        assert settings.WATERFALL_MAX_PROVIDERS == 5
        assert settings.APOLLO_API_KEY == "from-env"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"WATERFALL_QUALITY_THRESHOLD": 1.5},
            {"WATERFALL_MAX_PROVIDERS": 0},
            {"CREDIT_GATE_AMOUNT": -1},
        ],
    )
    def test_validate_settings_rejects_bad_values(self, overrides):
        settings = Settings(_env_file=None, **overrides)

        with pytest.raises(ValueError):
            settings.validate_settings()
