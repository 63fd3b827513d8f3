"""Tests for the dsgs-server entry point."""

import uvicorn

from dsgs import logging_config
from dsgs.config import settings
from dsgs.server_cli import main


def test_bind_address_reaches_app_without_touching_settings(monkeypatch):
    calls = {}

    def fake_run(app, **kwargs):
        calls["app"] = app
        calls.update(kwargs)

    monkeypatch.setattr(uvicorn, "run", fake_run)
    monkeypatch.setattr(logging_config, "configure_logging", lambda **kwargs: None)
    configured = (settings.host, settings.port)

    main(["--host", "0.0.0.0", "--port", "8123", "--max-connections", "7"])

    assert (settings.host, settings.port) == configured
    assert calls["factory"] is True
    assert calls["limit_concurrency"] == 7
    assert (calls["host"], calls["port"]) == ("0.0.0.0", 8123)

    app = calls["app"]()
    assert (app.state.host, app.state.port) == ("0.0.0.0", 8123)
