"""
Tests for settings loading and the settings service.
"""

import pytest

from relief_engine.services import thresholds
from relief_engine.services.settings import AllSettings, SettingsService, load_settings


class TestLoadSettings:

    def test_defaults(self):
        settings = load_settings({})
        assert settings.duplicate_detection.duplicate_threshold == thresholds.DUPLICATE_THRESHOLD
        assert settings.duplicate_detection.min_similarity == 0.70
        assert settings.duplicate_detection.min_reasons == 2
        assert settings.matching.min_match_score == 40
        assert settings.matching.max_matches == 5
        assert settings.matching.enable_external_scoring is False

    def test_environment_overrides(self):
        settings = load_settings({
            "RELIEF_DUPLICATE_THRESHOLD": "0.9",
            "RELIEF_CLUSTER_THRESHOLD": "0.65",
            "RELIEF_MAX_POOL_SIZE": "50",
            "RELIEF_ENABLE_EXTERNAL_SCORING": "yes",
            "RELIEF_SCORER_TIMEOUT": "2.5",
            "RELIEF_LLM_PROVIDER": "ollama",
            "RELIEF_LLM_MODEL": "llama3.1",
        })
        assert settings.duplicate_detection.duplicate_threshold == 0.9
        assert settings.duplicate_detection.min_similarity == 0.65
        assert settings.duplicate_detection.max_pool_size == 50
        assert settings.matching.enable_external_scoring is True
        assert settings.matching.scorer_timeout_seconds == 2.5
        assert settings.llm.provider == "ollama"
        assert settings.llm.model == "llama3.1"

    def test_invalid_values_ignored(self, caplog):
        settings = load_settings({"RELIEF_MIN_REASONS": "two", "RELIEF_DUPLICATE_THRESHOLD": ""})
        assert settings.duplicate_detection.min_reasons == 2
        assert settings.duplicate_detection.duplicate_threshold == 0.85
        assert "RELIEF_MIN_REASONS" in caplog.text

    def test_instances_are_independent(self):
        first = load_settings({})
        first.matching.urgency_bonus["low"] = 99
        assert load_settings({}).matching.urgency_bonus["low"] == 0


class TestSettingsService:

    def test_get_all_sections(self):
        service = SettingsService()
        assert set(service.get_all()) == {"similarity", "duplicate_detection", "matching", "llm"}

    def test_update_section(self):
        settings = AllSettings()
        service = SettingsService(settings)
        updated = service.update_section("duplicate_detection", {"duplicate_threshold": 0.9, "bogus": 1})
        assert updated["duplicate_threshold"] == 0.9
        assert "bogus" not in updated
        assert settings.duplicate_detection.duplicate_threshold == 0.9

    def test_unknown_section(self):
        service = SettingsService()
        with pytest.raises(KeyError):
            service.get_section("nope")
        with pytest.raises(KeyError):
            service.update_section("nope", {})
