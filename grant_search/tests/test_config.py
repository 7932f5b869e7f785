"""Tests for configuration loading and validation."""

import os
from unittest.mock import patch

import pytest

from grant_search.config.config import Config, load_config, validate_config
from grant_search.models import SourceId


class TestConfigValidation:
    """Test startup config validation."""

    VALID_ENV = {
        "SUPABASE_URL": "https://test.supabase.co",
        "SUPABASE_KEY": "test-key-123",
        "SAM_API_KEY": "test-sam-key",
        "GRANTS_GOV_ATTRIBUTION": "Test Pipeline",
        "ENABLED_SOURCES": "grants_gov, SAM_GOV,nsf",
        "MATCH_THRESHOLD": "40",
        "DAILY_SEARCH_TERMS": "water, energy ,,housing",
        "DAILY_RUN_HOUR": "14",
        "LOG_LEVEL": "DEBUG",
    }

    def test_valid_config_loads_successfully(self):
        with patch.dict(os.environ, self.VALID_ENV, clear=True):
            config = validate_config(require_persistence=True)

        assert config.supabase_url == "https://test.supabase.co"
        assert config.sam_api_key == "test-sam-key"
        assert config.grants_gov_attribution == "Test Pipeline"
        assert config.sources == [SourceId.GRANTS_GOV, SourceId.SAM_GOV, SourceId.NSF]
        assert config.match_threshold == 40
        assert config.search_terms == ["water", "energy", "housing"]
        assert config.daily_run_hour == 14
        assert config.log_level == "DEBUG"
        assert config.has_persistence is True

    def test_everything_optional_by_default(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()

        assert config.has_persistence is False
        assert config.sources == list(SourceId)
        assert config.match_threshold == 30
        assert config.search_terms == ["education", "health", "environment", "technology", "community"]

    def test_missing_persistence_lists_all_vars(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError) as exc_info:
                validate_config(require_persistence=True)

        message = str(exc_info.value)
        assert "SUPABASE_URL" in message
        assert "SUPABASE_KEY" in message

    def test_unknown_source_rejected_at_startup(self):
        with patch.dict(os.environ, {"ENABLED_SOURCES": "grants_gov,sbir_gov"}, clear=True):
            with pytest.raises(ValueError, match="sbir_gov"):
                validate_config()

    def test_run_hour_out_of_range(self):
        with patch.dict(os.environ, {"DAILY_RUN_HOUR": "24"}, clear=True):
            with pytest.raises(ValueError, match="DAILY_RUN_HOUR"):
                validate_config()

    def test_non_numeric_value_reported(self):
        with patch.dict(os.environ, {"MATCH_THRESHOLD": "high"}, clear=True):
            with pytest.raises(ValueError, match="MATCH_THRESHOLD"):
                validate_config()


def test_explicit_values_override_environment():
    with patch.dict(os.environ, {"SAM_API_KEY": "from-env"}, clear=True):
        config = Config(_env_file=None, sam_api_key="explicit")
    assert config.sam_api_key == "explicit"
