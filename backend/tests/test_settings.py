"""Tests for Settings and the process entry point."""

import pytest

import gamejudge.__main__ as entry
from gamejudge.settings import ConfigurationError, Settings


def test_defaults():
	cfg = Settings(OPENAI_API_KEY="sk-test")
	assert cfg.openai_model == "gpt-4o-mini"
	assert cfg.eval_temperature == 0.3
	assert cfg.eval_max_tokens == 250
	assert cfg.min_answer_length == 5
	assert cfg.fallback_min_length == 50
	assert cfg.port == 3000


def test_environment_overrides(monkeypatch):
	monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
	monkeypatch.setenv("MIN_ANSWER_LENGTH", "10")
	monkeypatch.setenv("FALLBACK_MIN_LENGTH", "80")
	cfg = Settings()
	assert cfg.require_api_key() == "sk-env"
	assert cfg.min_answer_length == 10
	assert cfg.fallback_min_length == 80


@pytest.mark.parametrize("key", [None, "", "   "])
def test_require_api_key_fails_fast(key):
	with pytest.raises(ConfigurationError) as exc_info:
		Settings(OPENAI_API_KEY=key).require_api_key()
	assert "OPENAI_API_KEY" in str(exc_info.value)


def test_masked_api_key_hides_the_secret():
	cfg = Settings(OPENAI_API_KEY="sk-proj-abcdefghijklmnop")
	assert cfg.masked_api_key() == "sk-proj-..."
	assert Settings(OPENAI_API_KEY="").masked_api_key() == "<unset>"


def test_cors_origin_list():
	cfg = Settings(OPENAI_API_KEY="k", CORS_ORIGINS="http://a.test, http://b.test ,")
	assert cfg.cors_origin_list() == ["http://a.test", "http://b.test"]


def test_main_exits_when_key_missing(monkeypatch):
	monkeypatch.setenv("OPENAI_API_KEY", "")
	runs = []
	monkeypatch.setattr(entry.uvicorn, "run", lambda *a, **kw: runs.append((a, kw)))
	assert entry.main() == 1
	assert runs == []


def test_main_runs_server_on_configured_port(monkeypatch):
	monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
	monkeypatch.setenv("PORT", "8123")
	runs = []
	monkeypatch.setattr(entry.uvicorn, "run", lambda *a, **kw: runs.append((a, kw)))
	assert entry.main() == 0
	(args, kwargs), = runs
	assert args == ("gamejudge.main:app",)
	assert kwargs["port"] == 8123
