"""
Tests for configuration resolution: environment > config.json > defaults.
"""

import json

import pytest

from imagesurvey.codes import DEFAULT_CODE_ATTEMPTS
from imagesurvey.config import ENV_KEYS, get_setting, get_settings, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for env_name in ENV_KEYS.values():
        monkeypatch.delenv(env_name, raising=False)


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.json"


class TestLoadConfig:

    def test_missing_file(self, config_path):
        assert load_config(config_path) == {}

    def test_corrupt_file(self, config_path):
        config_path.write_text("{oops", encoding="utf-8")
        assert load_config(config_path) == {}


class TestSettings:

    def test_defaults(self, config_path):
        settings = get_settings(config_path)
        assert settings["storage_backend"] == "file"
        assert settings["code_attempts"] == DEFAULT_CODE_ATTEMPTS
        assert settings["data_dir"].endswith("db")

    def test_config_file(self, config_path, tmp_path):
        config_path.write_text(json.dumps({"data_dir": str(tmp_path / "data"), "code_attempts": 7}))
        settings = get_settings(config_path)
        assert settings["data_dir"] == str(tmp_path / "data")
        assert settings["code_attempts"] == 7

    def test_env_overrides_file(self, config_path, monkeypatch):
        config_path.write_text(json.dumps({"storage_backend": "file"}))
        monkeypatch.setenv("IMAGESURVEY_BACKEND", "supabase")
        monkeypatch.setenv("IMAGESURVEY_CODE_ATTEMPTS", "12")
        settings = get_settings(config_path)
        assert settings["storage_backend"] == "supabase"
        assert settings["code_attempts"] == 12

    def test_invalid_attempts(self, config_path, monkeypatch):
        monkeypatch.setenv("IMAGESURVEY_CODE_ATTEMPTS", "lots")
        assert get_settings(config_path)["code_attempts"] == DEFAULT_CODE_ATTEMPTS

    def test_attempts_at_least_one(self, config_path):
        config_path.write_text(json.dumps({"code_attempts": 0}))
        assert get_settings(config_path)["code_attempts"] == 1

    def test_get_setting_default(self):
        assert get_setting("supabase_url", {}, "fallback") == "fallback"
