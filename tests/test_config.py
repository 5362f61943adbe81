import logging

import pytest

import taskboard.config as config_module
from taskboard.config import (
    AppConfig,
    configure_logging,
    env_bool,
    env_csv,
    env_float,
    env_int,
    env_str,
    get_config,
    reset_config,
)


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


def test_defaults(monkeypatch):
    for name in ("TASKBOARD_API_URL", "TASKBOARD_API_TIMEOUT", "TASKBOARD_ELEVATED_ROLES", "TASKBOARD_DASHBOARD_LIMIT"):
        monkeypatch.delenv(name, raising=False)
    config = AppConfig.from_env()
    assert config.api_base_url == "http://localhost:5000/api"
    assert config.timeout_seconds == 10.0
    assert config.dashboard_limit == 100
    assert config.elevated_roles == frozenset({"admin"})


def test_from_env(monkeypatch):
    monkeypatch.setenv("TASKBOARD_API_URL", "https://tasks.example.com/")
    monkeypatch.setenv("TASKBOARD_API_TIMEOUT", "2.5")
    monkeypatch.setenv("TASKBOARD_VERIFY_SSL", "no")
    monkeypatch.setenv("TASKBOARD_DASHBOARD_LIMIT", "0")
    monkeypatch.setenv("TASKBOARD_ELEVATED_ROLES", "Admin, manager")
    config = AppConfig.from_env()
    assert config.api_base_url == "https://tasks.example.com/api"
    assert config.timeout_seconds == 2.5
    assert config.verify_ssl is False
    assert config.dashboard_limit == 1
    assert config.elevated_roles == frozenset({"admin", "manager"})


def test_get_config_is_cached(monkeypatch):
    monkeypatch.setenv("TASKBOARD_API_URL", "http://one")
    first = get_config()
    monkeypatch.setenv("TASKBOARD_API_URL", "http://two")
    assert get_config() is first
    reset_config()
    assert get_config().api_url == "http://two"


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("FLAG", "maybe")
    assert env_bool("FLAG", True) is True
    monkeypatch.setenv("ROLES", " , ")
    assert env_csv("ROLES", ["admin"]) == ["admin"]
    monkeypatch.setenv("LIMIT", "ten")
    assert env_int("LIMIT", 7) == 7
    monkeypatch.setenv("TIMEOUT", " 1.5 ")
    assert env_float("TIMEOUT", 10.0) == 1.5
    monkeypatch.delenv("MISSING", raising=False)
    assert env_str("MISSING", "fallback") == "fallback"


def test_only_used_env_helpers_are_exported():
    helpers = {name for name in dir(config_module) if name.startswith("env_")}
    assert helpers == {"env_str", "env_bool", "env_int", "env_float", "env_csv"}


def test_configure_logging_is_idempotent():
    logger = configure_logging("debug")
    count = len(logger.handlers)
    configure_logging("warning")
    assert len(logger.handlers) == count
    assert logger.level == logging.WARNING
