from __future__ import annotations

import importlib

import settings


def test_parse_aliases_from_env_string() -> None:
    assert settings.parse_aliases(" tics ai, ticsaibot ,, ") == ["tics ai", "ticsaibot"]


def test_parse_aliases_from_list() -> None:
    assert settings.parse_aliases(["TICS AI", " "]) == ["TICS AI"]
    assert settings.parse_aliases(None) == []


def test_defaults_are_valid() -> None:
    assert settings.RATE_LIMIT_MAX_REQUESTS >= 1
    assert settings.RATE_LIMIT_WINDOW_SECONDS > 0
    assert settings.PERSONA


def test_malformed_numbers_are_reported_not_raised(monkeypatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "two")
    monkeypatch.setenv("RATE_LIMIT_WINDOW_SECONDS", "half a minute")
    monkeypatch.setenv("PERSONA_FILE", "/nonexistent/persona.txt")
    try:
        reloaded = importlib.reload(settings)

        assert reloaded.RATE_LIMIT_MAX_REQUESTS == 2
        assert reloaded.RATE_LIMIT_WINDOW_SECONDS == 30.0
        assert reloaded.PERSONA == reloaded.DEFAULT_PERSONA
        assert any("RATE_LIMIT_MAX_REQUESTS" in error for error in reloaded.CONFIG_ERRORS)
        assert any("RATE_LIMIT_WINDOW_SECONDS" in error for error in reloaded.CONFIG_ERRORS)
        assert any("PERSONA_FILE" in error for error in reloaded.CONFIG_ERRORS)
    finally:
        monkeypatch.undo()
        importlib.reload(settings)


def test_check_reports_config_errors(monkeypatch, capsys) -> None:
    import app

    monkeypatch.setattr(settings, "CONFIG_ERRORS", ["RATE_LIMIT_MAX_REQUESTS must be a number, got 'two'"])

    assert app._check() == 1
    assert "ERROR: RATE_LIMIT_MAX_REQUESTS must be a number" in capsys.readouterr().out
