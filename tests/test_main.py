"""Tests for the command line entry point."""

import json

import pytest

from hastebin_core import __main__ as cli
from hastebin_core.service import Hastebin


@pytest.fixture
def served(monkeypatch):
    """Record serve() calls instead of starting uvicorn."""
    calls: list[tuple[Hastebin, str | None, int | None]] = []

    def fake_serve(self, host=None, port=None):
        calls.append((self, host, port))

    monkeypatch.setattr(Hastebin, "serve", fake_serve)
    return calls


class TestMain:
    """Tests for main()."""

    def test_serves_with_config(self, tmp_path, served):
        """A valid config starts the server with CLI overrides."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"storage": {"type": "memory"}, "key_length": 4}))

        assert cli.main(["--config", str(path), "--port", "8080"]) == 0

        service, host, port = served[0]
        assert service.config.key_length == 4
        assert host is None
        assert port == 8080

    def test_unknown_backend(self, tmp_path, served, capsys):
        """An unknown backend exits with status 2 before serving."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"storage": {"type": "cassandra"}}))

        assert cli.main(["--config", str(path)]) == 2
        assert served == []
        assert "cassandra" in capsys.readouterr().err

    def test_unknown_key_generator(self, tmp_path, served):
        """An unknown key generator exits with status 2."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"key_generator": "dictionary"}))

        assert cli.main(["--config", str(path)]) == 2
        assert served == []

    def test_invalid_file(self, tmp_path, served, capsys):
        """A config file that does not parse exits with status 2."""
        path = tmp_path / "config.yaml"
        path.write_text("storage: [unclosed")

        assert cli.main(["--config", str(path)]) == 2
        assert "Failed to parse" in capsys.readouterr().err
