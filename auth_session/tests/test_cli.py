"""
Tests for the command-line front-end.
"""
import json

import httpx
import pytest

from auth_session import config
from auth_session.cli import main, parse_fields

API = ["--api-url", "http://auth.test", "--quiet"]


class TestParseFields:

    def test_pairs(self):
        assert parse_fields(["bio=Hello there", "city=Zurich", "empty="]) == {
            "bio": "Hello there",
            "city": "Zurich",
            "empty": "",
        }

    def test_missing_equals(self):
        with pytest.raises(ValueError):
            parse_fields(["bio"])


class TestCommands:

    def test_me_without_session(self, backend, capsys):
        backend.reply("GET", "/api/auth/me", 401, {"message": "Not authenticated"})

        code = main(API + ["me"], http_transport=httpx.MockTransport(backend))

        assert code == 1
        assert capsys.readouterr().out.strip() == "null"

    def test_me_with_session(self, backend, alice, capsys):
        backend.reply("GET", "/api/auth/me", 200, {"user": alice})

        code = main(API + ["me"], http_transport=httpx.MockTransport(backend))

        assert code == 0
        assert json.loads(capsys.readouterr().out) == alice

    def test_login(self, backend, alice, capsys):
        backend.reply("GET", "/api/auth/me", 401, {"message": "Not authenticated"})
        backend.reply("POST", "/api/auth/login", 200, {"user": alice})

        code = main(
            API + ["login", "alice@example.com", "--password", "pw"],
            http_transport=httpx.MockTransport(backend),
        )

        assert code == 0
        assert json.loads(capsys.readouterr().out)["email"] == "alice@example.com"

    def test_login_rejected_prints_notification(self, backend, capsys):
        backend.reply("GET", "/api/auth/me", 401, {"message": "Not authenticated"})
        backend.reply("POST", "/api/auth/login", 401, {"message": "bad credentials"})

        code = main(
            API + ["login", "alice@example.com", "--password", "wrong"],
            http_transport=httpx.MockTransport(backend),
        )

        assert code == 1
        assert "bad credentials" in capsys.readouterr().err

    def test_set_handle_logs_in_first(self, backend, alice, capsys):
        backend.reply("GET", "/api/auth/me", 401, {"message": "Not authenticated"})
        backend.reply("POST", "/api/auth/login", 200, {"user": alice})
        updated = {**alice, "apiHandles": {**alice["apiHandles"], "github": "octo"}}
        backend.reply("POST", "/api/auth/update-handles", 200, {"user": updated})

        code = main(
            API + ["set-handle", "github", "octo", "--email", "alice@example.com", "--password", "pw"],
            http_transport=httpx.MockTransport(backend),
        )

        assert code == 0
        assert json.loads(capsys.readouterr().out)["apiHandles"]["github"] == "octo"

    def test_set_handle_rejected_exits_nonzero(self, backend, alice, monkeypatch, capsys):
        monkeypatch.setenv("AUTH_ROLLBACK_FAILED_HANDLE_UPDATES", "false")
        monkeypatch.setattr(config, "_settings", None)
        backend.reply("GET", "/api/auth/me", 200, {"user": alice})
        backend.reply("POST", "/api/auth/update-handles", 400, {"message": "Unknown platform"})

        code = main(API + ["set-handle", "myspace", "tom"], http_transport=httpx.MockTransport(backend))

        assert code == 1
        # Optimistic value stays because rollback is disabled
        assert json.loads(capsys.readouterr().out)["apiHandles"]["myspace"] == "tom"

    def test_set_handle_requires_session(self, backend):
        backend.reply("GET", "/api/auth/me", 401, {"message": "Not authenticated"})

        code = main(API + ["set-handle", "github", "octo"], http_transport=httpx.MockTransport(backend))

        assert code == 1
        assert backend.calls("POST", "/api/auth/update-handles") == []

    def test_delete_account(self, backend, alice, capsys):
        backend.reply("GET", "/api/auth/me", 200, {"user": alice})
        backend.reply("DELETE", "/api/auth/delete", 200, {"message": "Account deleted"})

        code = main(API + ["delete-account"], http_transport=httpx.MockTransport(backend))

        assert code == 0
        assert capsys.readouterr().out.strip() == "null"

    def test_update_profile_bad_field(self, backend):
        with pytest.raises(SystemExit) as exc_info:
            main(API + ["update-profile", "bio"], http_transport=httpx.MockTransport(backend))

        assert exc_info.value.code == 2
        assert backend.requests == []
