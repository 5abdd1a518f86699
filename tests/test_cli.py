"""Tests for CLI interface"""

from __future__ import annotations

import json
import logging
import sys

import click
import pytest
import requests
import yaml
from click.testing import CliRunner

from babylon.cli import JsonFormatter, _die, cli, setup_logging


def _make_response(status_code: int, payload: dict) -> requests.Response:
    r = requests.Response()
    r.status_code = status_code
    r.url = "http://example.test"
    r._content = json.dumps(payload).encode("utf-8")  # type: ignore[attr-defined]
    r.headers["Content-Type"] = "application/json"
    return r


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / ".babylon.yml"
    path.write_text(
        yaml.safe_dump(
            {
                "api": {"base_url": "http://example.test", "token": "secret"},
                "retry": {"max_attempts": 1},
            }
        ),
        encoding="utf-8",
    )
    return path


class TestSetupLogging:
    """Tests for setup_logging function"""

    def test_setup_logging_info_level(self):
        setup_logging(verbose=False)
        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_debug_level(self):
        setup_logging(verbose=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_level_from_config(self):
        setup_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_setup_logging_json(self):
        setup_logging(json_output=True)
        assert any(isinstance(h.formatter, JsonFormatter) for h in logging.getLogger().handlers)
        setup_logging()


class TestJsonFormatter:
    def test_format(self):
        record = logging.LogRecord("babylon.test", logging.WARNING, __file__, 1, "retry %d", (2,), None)
        entry = json.loads(JsonFormatter().format(record))
        assert entry["level"] == "warning"
        assert entry["logger"] == "babylon.test"
        assert entry["message"] == "retry 2"
        assert "error" not in entry

    def test_format_with_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        entry = json.loads(JsonFormatter().format(record))
        assert "ValueError: boom" in entry["error"]


class TestDie:
    def test_die_without_exception(self):
        with pytest.raises(click.ClickException, match="Test error"):
            _die("Test error", verbose=False)

    def test_die_with_exception_verbose(self):
        with pytest.raises(click.ClickException, match="Test error"):
            _die("Test error", verbose=True, exc=ValueError("Test exception"))


class TestConfigCommand:
    def test_prints_config_with_masked_token(self, config_file):
        result = CliRunner().invoke(cli, ["--config", str(config_file), "config"], obj={})

        assert result.exit_code == 0, result.output
        assert "base_url: http://example.test" in result.output
        assert "max_attempts: 1" in result.output
        assert "secret" not in result.output

    def test_invalid_config(self, tmp_path):
        path = tmp_path / ".babylon.yml"
        path.write_text("retry:\n  max_attempts: 0\n", encoding="utf-8")

        result = CliRunner().invoke(cli, ["--config", str(path), "config"], obj={})

        assert result.exit_code != 0
        assert "retry.max_attempts" in result.output


class TestUserCommand:
    def test_prints_profile(self, monkeypatch, config_file):
        calls = []

        def fake_request(method, url, **kwargs):
            calls.append(url)
            return _make_response(
                200,
                {
                    "id": "u1",
                    "username": "alice",
                    "displayName": "Alice",
                    "bio": "Hello",
                    "postsCount": 3,
                    "followersCount": 10,
                    "followingCount": 2,
                },
            )

        monkeypatch.setattr(requests, "request", fake_request)

        result = CliRunner().invoke(cli, ["--config", str(config_file), "user", "alice"], obj={})

        assert result.exit_code == 0, result.output
        assert "Alice (@alice)" in result.output
        assert "Followers: 10" in result.output
        assert calls == ["http://example.test/api/identity/users/by-username/alice"]

    def test_not_found(self, monkeypatch, config_file):
        monkeypatch.setattr(
            requests,
            "request",
            lambda *a, **k: _make_response(
                404, {"success": False, "error": {"code": "NOT_FOUND", "message": "User not found: bob"}}
            ),
        )

        result = CliRunner().invoke(cli, ["--config", str(config_file), "user", "bob"], obj={})

        assert result.exit_code == 1
        assert "NOT_FOUND: User not found: bob" in result.output

    def test_api_url_override(self, monkeypatch, config_file):
        calls = []

        def fake_request(method, url, **kwargs):
            calls.append(url)
            return _make_response(200, {"username": "alice"})

        monkeypatch.setattr(requests, "request", fake_request)

        CliRunner().invoke(
            cli,
            ["--config", str(config_file), "user", "alice", "--api-url", "http://other.test/"],
            obj={},
        )

        assert calls[0].startswith("http://other.test/api/")

    def test_unexpected_error_detail_shown_in_development(self, monkeypatch, config_file):
        def explode(*args, **kwargs):
            raise ValueError("secret detail")

        monkeypatch.setattr(requests, "request", explode)

        result = CliRunner().invoke(cli, ["--config", str(config_file), "user", "alice"], obj={})

        assert result.exit_code == 1
        assert "Fatal error: secret detail" in result.output

    def test_unexpected_error_hidden_in_production(self, monkeypatch, config_file):
        def explode(*args, **kwargs):
            raise ValueError("secret detail")

        monkeypatch.setattr(requests, "request", explode)
        monkeypatch.setenv("BABYLON_ENV", "production")

        result = CliRunner().invoke(cli, ["--config", str(config_file), "user", "alice"], obj={})

        assert result.exit_code == 1
        assert "Fatal error: An unexpected error occurred" in result.output
        assert "secret detail" not in result.output

    def test_invalid_username_rejected_before_request(self, monkeypatch, config_file):
        calls = []
        monkeypatch.setattr(requests, "request", lambda *a, **k: calls.append(a))
        monkeypatch.setenv("BABYLON_ENV", "production")

        result = CliRunner().invoke(
            cli, ["--config", str(config_file), "username-available", "Not Valid!"], obj={}
        )

        assert result.exit_code == 1
        assert "Username must be 3-50 characters" in result.output
        assert calls == []


class TestUsernameAvailableCommand:
    @pytest.mark.parametrize("available,word", [(True, "available"), (False, "taken")])
    def test_availability(self, monkeypatch, config_file, available, word):
        monkeypatch.setattr(
            requests, "request", lambda *a, **k: _make_response(200, {"available": available})
        )

        result = CliRunner().invoke(
            cli, ["--config", str(config_file), "username-available", "alice"], obj={}
        )

        assert result.exit_code == 0, result.output
        assert f"alice is {word}" in result.output


class TestHealthCommand:
    def test_healthy(self, monkeypatch, config_file):
        report = {
            "status": "healthy",
            "services": {"database": {"status": "up", "latencyMs": 4}},
        }
        monkeypatch.setattr(requests, "request", lambda *a, **k: _make_response(200, report))

        result = CliRunner().invoke(cli, ["--config", str(config_file), "health"], obj={})

        assert result.exit_code == 0, result.output
        assert "Status: healthy" in result.output
        assert "database: up (4 ms)" in result.output

    def test_degraded(self, monkeypatch, config_file):
        report = {
            "status": "degraded",
            "services": {"database": {"status": "down", "latencyMs": 12, "error": "connection refused"}},
        }
        monkeypatch.setattr(requests, "request", lambda *a, **k: _make_response(200, report))

        result = CliRunner().invoke(cli, ["--config", str(config_file), "health"], obj={})

        assert result.exit_code == 1
        assert "connection refused" in result.output
        assert "Server is degraded" in result.output

    def test_unreachable(self, monkeypatch, config_file):
        def refuse(*args, **kwargs):
            raise requests.exceptions.ConnectionError("Connection refused")

        monkeypatch.setattr(requests, "request", refuse)

        result = CliRunner().invoke(cli, ["--config", str(config_file), "health"], obj={})

        assert result.exit_code == 1
        assert "Health check failed" in result.output
