"""
Tests for API key and model configuration.
"""

import asyncio
import json
from unittest.mock import patch

import pytest

from sirzmail import config


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    monkeypatch.setattr(config, "get_config_path", lambda: path)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("SIRZ_MAIL_MODEL", raising=False)
    return path


def test_env_key_wins(config_path, monkeypatch):
    config_path.write_text(json.dumps({"openai_api_key": "sk-file"}))
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    assert config.get_api_key() == "sk-env"


def test_key_from_config_file(config_path):
    config_path.write_text(json.dumps({"openai_api_key": "sk-file"}))
    assert config.get_api_key() == "sk-file"
    assert config.ensure_api_key_in_env()


def test_no_key(config_path):
    assert config.get_api_key() is None
    assert config.ensure_api_key_in_env() is False


def test_set_api_key_persists(config_path, monkeypatch):
    config.set_api_key("sk-new")
    assert json.loads(config_path.read_text())["openai_api_key"] == "sk-new"
    monkeypatch.delenv("OPENAI_API_KEY")
    assert config.get_api_key() == "sk-new"


def test_unreadable_config_is_empty(config_path):
    config_path.write_text("{broken")
    assert config.load_config() == {}


def test_model_resolution(config_path, monkeypatch):
    assert config.get_model() == config.DEFAULT_MODEL
    config_path.write_text(json.dumps({"model": "gpt-file"}))
    assert config.get_model() == "gpt-file"
    monkeypatch.setenv("SIRZ_MAIL_MODEL", "gpt-env")
    assert config.get_model() == "gpt-env"


def test_validate_rejects_bad_prefix():
    assert config.validate_api_key("") == (False, "API key is empty")
    assert config.validate_api_key("abc") == (False, "API key should start with 'sk-'")


def test_validate_maps_auth_errors():
    with patch("openai.OpenAI") as openai_cls:
        openai_cls.return_value.models.list.side_effect = RuntimeError("Error code: 401 - invalid_api_key")
        assert config.validate_api_key("sk-bad") == (False, "Invalid API key")


def test_validation_runs_through_runner_and_stores_valid_key(config_path, monkeypatch):
    calls = []

    async def runner(func, *args):
        calls.append(func)
        return func(*args)

    monkeypatch.setattr(config, "validate_api_key", lambda key: (True, "API key is valid."))
    result = asyncio.run(config.validate_and_store_api_key("sk-good", runner))

    assert result == (True, "API key is valid.")
    assert calls == [config.validate_api_key]
    assert json.loads(config_path.read_text())["openai_api_key"] == "sk-good"


def test_invalid_key_is_not_stored(config_path, monkeypatch):
    async def runner(func, *args):
        return func(*args)

    monkeypatch.setattr(config, "validate_api_key", lambda key: (False, "Invalid API key"))
    assert asyncio.run(config.validate_and_store_api_key("sk-bad", runner)) == (False, "Invalid API key")
    assert not config_path.exists()
    assert config.get_api_key() is None
