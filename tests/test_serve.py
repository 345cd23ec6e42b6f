"""Tests for the server entry point."""

from unittest.mock import patch

from src.serve import main, parse_serve_args


def test_parse_defaults(monkeypatch):
    monkeypatch.delenv("HOST", raising=False)
    monkeypatch.delenv("PORT", raising=False)
    args = parse_serve_args([])
    assert args.host == "127.0.0.1"
    assert args.port == 8080
    assert args.reload is False


def test_port_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", "9001")
    assert parse_serve_args([]).port == 9001


def test_main_runs_uvicorn():
    with patch("src.serve.uvicorn.run") as run:
        main(["--host", "0.0.0.0", "--port", "8123"])
    run.assert_called_once()
    _, kwargs = run.call_args
    assert run.call_args.args[0] == "src.api.main:app"
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 8123
