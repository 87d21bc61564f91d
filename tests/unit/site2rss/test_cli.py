"""Tests for site2rss.cli module."""

from unittest.mock import patch

import pytest

from site2rss.cli import main, parse_args

CONFIG = """
sites:
  - name: example
    url: https://ex.com
    query:
      item: li
      link: a@href
      title: a
"""


class TestParseArgs:
    def test_defaults(self, monkeypatch) -> None:
        for key in ("CONFIG", "CACHE", "INTERVAL", "LISTEN", "FETCH_TIMEOUT", "LOG_LEVEL"):
            monkeypatch.delenv(key, raising=False)

        args = parse_args([])

        assert args.config == "config.yaml"
        assert args.cache == "cache"
        assert args.interval == 3600.0
        assert args.listen == ("0.0.0.0", 8080)
        assert args.timeout == 10.0

    def test_environment_defaults(self, monkeypatch) -> None:
        monkeypatch.setenv("INTERVAL", "15m")
        monkeypatch.setenv("LISTEN", "127.0.0.1:9000")
        monkeypatch.setenv("CACHE", "/var/cache/site2rss")

        args = parse_args([])

        assert args.interval == 900.0
        assert args.listen == ("127.0.0.1", 9000)
        assert args.cache == "/var/cache/site2rss"

    def test_flags_override_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("INTERVAL", "15m")

        args = parse_args(["--interval", "30s", "--config", "sites.yaml"])

        assert args.interval == 30.0
        assert args.config == "sites.yaml"

    def test_invalid_interval_exits(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--interval", "often"])


class TestMain:
    @patch("site2rss.cli.uvicorn")
    def test_serves_app(self, mock_uvicorn, tmp_path) -> None:
        config_path = tmp_path / "config.yaml"
        config_path.write_text(CONFIG)

        main(["--config", str(config_path), "--cache", str(tmp_path / "cache"), "--listen", ":9999"])

        mock_uvicorn.run.assert_called_once()
        app = mock_uvicorn.run.call_args.args[0]
        assert "example" in app.state.sites
        assert mock_uvicorn.run.call_args.kwargs["port"] == 9999

    @patch("site2rss.cli.uvicorn")
    def test_invalid_config_exits(self, mock_uvicorn, tmp_path) -> None:
        config_path = tmp_path / "config.yaml"
        config_path.write_text("sites:\n  - name: example\n")

        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(config_path)])

        assert exc_info.value.code == 1
        mock_uvicorn.run.assert_not_called()
