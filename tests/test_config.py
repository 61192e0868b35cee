"""Tests for config_store.py and config.py."""

from __future__ import annotations

import logging

import pytest

import lexterm.config_store as config_store
from lexterm.api import DEFAULT_TASK_LIMIT
from lexterm.client import build_client
from lexterm.config import API_URL_ENV, resolve_api_base, resolve_session_path
from lexterm.config_store import Config, clear_config_cache, load_config, save_config
from lexterm.gateway import DEFAULT_TIMEOUT
from lexterm.importer import COMPLETION_GRACE_SECONDS, FAILURE_PREVIEW_LIMIT, POLL_INTERVAL_SECONDS
from lexterm.log import setup_logging
from lexterm.review.session import DEFAULT_LIMIT


@pytest.fixture(autouse=True)
def _temp_config_dir(monkeypatch, tmp_path):
    clear_config_cache()
    config_dir = tmp_path / "lexterm"
    monkeypatch.setattr(config_store, "_get_config_dir", lambda: config_dir)
    monkeypatch.delenv(API_URL_ENV, raising=False)
    yield config_dir
    clear_config_cache()


def test_defaults_without_file():
    config = load_config()

    assert config == Config()
    assert config.poll_interval == 2.0
    assert config.review_limit == 20


def test_defaults_match_engine_constants():
    config = Config()

    assert config.request_timeout == DEFAULT_TIMEOUT
    assert config.poll_interval == POLL_INTERVAL_SECONDS
    assert config.completion_grace == COMPLETION_GRACE_SECONDS
    assert config.review_limit == DEFAULT_LIMIT
    assert config.failure_preview == FAILURE_PREVIEW_LIMIT
    assert DEFAULT_TASK_LIMIT == DEFAULT_LIMIT


def test_client_passes_completion_grace_to_tracker():
    client = build_client(Config(completion_grace=5.0, poll_interval=0.5), persist=False)
    try:
        tracker = client.import_tracker()
    finally:
        client.close()

    assert tracker.completion_grace == 5.0


def test_save_then_load_keeps_values():
    save_config(Config(api_base_url="https://vocab.example/api/v1", review_limit=50))
    clear_config_cache()

    config = load_config()

    assert config.api_base_url == "https://vocab.example/api/v1"
    assert config.review_limit == 50


def test_unknown_keys_are_ignored(_temp_config_dir):
    _temp_config_dir.mkdir(parents=True)
    (_temp_config_dir / "config.json").write_text(
        '{"review_limit": 5, "theme": "dark"}', encoding="utf-8"
    )

    assert load_config().review_limit == 5


def test_corrupt_config_falls_back_to_defaults(_temp_config_dir):
    _temp_config_dir.mkdir(parents=True)
    (_temp_config_dir / "config.json").write_text("{oops", encoding="utf-8")

    assert load_config() == Config()


def test_env_overrides_api_base(monkeypatch):
    monkeypatch.setenv(API_URL_ENV, "https://other.example/api/v1/")

    assert resolve_api_base(Config()) == "https://other.example/api/v1"


def test_invalid_api_base_is_rejected():
    with pytest.raises(ValueError):
        resolve_api_base(Config(api_base_url="ftp://nope"))


def test_session_path_lives_in_config_dir(_temp_config_dir):
    assert resolve_session_path() == _temp_config_dir / "session.json"


def test_setup_logging_is_idempotent(tmp_path):
    logger = logging.getLogger("lexterm")
    before = list(logger.handlers)
    try:
        setup_logging(tmp_path / "log")
        setup_logging(tmp_path / "log")

        added = [h for h in logger.handlers if h not in before]
        assert len(added) == 1
        assert (tmp_path / "log").is_dir()
    finally:
        for handler in logger.handlers[:]:
            if handler not in before:
                logger.removeHandler(handler)
                handler.close()
