"""Tests for log event filtering."""

import structlog

from app.config import Environment, Settings
from app.logging_config import (
    _filter_sensitive_data,
    _hash_identifiers,
    _select_renderer,
)


def test_tokens_redacted():
    event = _filter_sensitive_data(
        None, "info", {"event": "x", "github_token": "ghp_abc", "Authorization": "Bearer y"}
    )
    assert event["github_token"] == "[REDACTED]"
    assert event["Authorization"] == "[REDACTED]"
    assert event["event"] == "x"


def test_identifiers_hashed_consistently():
    first = _hash_identifiers(None, "info", {"username": "Octocat", "user_id": "u1"})
    second = _hash_identifiers(None, "info", {"username": "octocat"})

    assert first["username"].startswith("id:")
    assert "octocat" not in first["username"].lower()
    assert first["username"] == second["username"]
    assert first["user_id"] != first["username"]


def test_other_fields_untouched():
    event = _hash_identifiers(None, "info", {"repo_count": 3, "username": None})
    assert event == {"repo_count": 3, "username": None}


def test_renderer_per_environment():
    production = Settings(environment=Environment.PRODUCTION)
    development = Settings(environment=Environment.DEVELOPMENT)
    assert isinstance(_select_renderer(production), structlog.processors.JSONRenderer)
    assert isinstance(_select_renderer(development), structlog.dev.ConsoleRenderer)
