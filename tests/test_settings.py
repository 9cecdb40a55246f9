"""Tests for seedble.settings module."""

import os
from unittest.mock import patch

import pytest

from seedble.errors import ValidationError
from seedble.settings import load_settings


class TestLoadSettings:
    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        settings = load_settings()
        assert settings.data_path == "seedble_data.json"
        assert settings.team_size == 4
        assert settings.auto_select == 3
        assert settings.variance_threshold is None
        assert settings.ai_enabled is True
        assert settings.log_level == "INFO"

    @patch.dict(os.environ, {
        "SEEDBLE_DATA_PATH": "/tmp/s.json",
        "SEEDBLE_TEAM_SIZE": "6",
        "SEEDBLE_AUTO_SELECT": "2",
        "SEEDBLE_VARIANCE_THRESHOLD": "2.5",
        "SEEDBLE_AI_ENABLED": "off",
        "SEEDBLE_LOG_LEVEL": "debug",
    }, clear=True)
    def test_reads_environment(self):
        settings = load_settings()
        assert settings.data_path == "/tmp/s.json"
        assert settings.team_size == 6
        assert settings.auto_select == 2
        assert settings.variance_threshold == 2.5
        assert settings.ai_enabled is False
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("name,value", [
        ("SEEDBLE_TEAM_SIZE", "four"),
        ("SEEDBLE_VARIANCE_THRESHOLD", "high"),
        ("SEEDBLE_AI_ENABLED", "maybe"),
    ])
    def test_unparsable_value_names_variable(self, name, value):
        with patch.dict(os.environ, {name: value}, clear=True):
            with pytest.raises(ValidationError, match=name):
                load_settings()

    @patch.dict(os.environ, {"SEEDBLE_TEAM_SIZE": "0"}, clear=True)
    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError, match="Invalid settings"):
            load_settings()

    @patch.dict(os.environ, {
        "OPENAI_API_KEY": " test-key ",
        "OPENAI_MODEL_NAME": "gpt-4o",
        "OPENAI_BASE_URL": "http://localhost:8045/v1",
        "OPENROUTER_API_KEY": "or-key",
        "OPENROUTER_MODEL_NAME": "openai/gpt-4o",
    }, clear=True)
    def test_reads_llm_environment(self):
        llm = load_settings().llm
        assert llm.api_key == "test-key"
        assert llm.model_name == "gpt-4o"
        assert llm.base_url == "http://localhost:8045/v1"
        assert llm.primary_configured
        assert llm.openrouter_configured

    @patch.dict(os.environ, {}, clear=True)
    def test_llm_unconfigured_by_default(self):
        llm = load_settings().llm
        assert not llm.primary_configured
        assert not llm.openrouter_configured
