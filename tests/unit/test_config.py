"""
Unit tests for configuration and the command line.
"""

import argparse
import logging
import socket
from pathlib import Path

import pytest

from fileserver.config import ServerConfig
from fileserver.__main__ import config_from_args, main, parse_redirect


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HOST", "PORT", "ROOT", "TIMEOUT", "LOG_LEVEL"):
        monkeypatch.delenv(f"FILESERVER_{name}", raising=False)


@pytest.fixture
def package_log_level():
    """Undo the level main() puts on the package logger."""
    package_logger = logging.getLogger("fileserver")
    level = package_logger.level
    yield
    package_logger.setLevel(level)


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 6789
        assert config.document_root == "."
        assert config.timeout == 30.0
        assert config.redirects == {}
        assert config.reject_malformed is False
        config.validate()

    def test_from_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("FILESERVER_HOST", "0.0.0.0")
        monkeypatch.setenv("FILESERVER_PORT", "8080")
        monkeypatch.setenv("FILESERVER_ROOT", str(tmp_path))
        monkeypatch.setenv("FILESERVER_TIMEOUT", "2.5")
        monkeypatch.setenv("FILESERVER_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.document_root == str(tmp_path)
        assert config.timeout == 2.5
        assert config.log_level == "DEBUG"

    def test_from_env_zero_timeout_means_none(self, monkeypatch):
        monkeypatch.setenv("FILESERVER_TIMEOUT", "0")
        assert ServerConfig.from_env().timeout is None

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"document_root": "/definitely/not/here"},
        {"backlog": 0},
        {"timeout": 0},
        {"timeout": -1.0},
        {"max_line_size": 100},
        {"max_headers": 0},
        {"log_level": "LOUD"},
        {"log_format": "xml"},
        {"redirects": {"no-slash": "/index.html"}},
        {"redirects": {"/empty": ""}},
    ])
    def test_validate_rejects(self, overrides):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_validate_accepts_no_timeout(self):
        ServerConfig(timeout=None).validate()


class TestCommandLine:
    """Tests for argument handling."""

    def test_parse_redirect(self):
        assert parse_redirect("/home=/index.html") == ("/home", "/index.html")
        assert parse_redirect("/a=/b=c") == ("/a", "/b=c")

    @pytest.mark.parametrize("value", ["/home", "=/x", "/home="])
    def test_parse_redirect_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_redirect(value)

    def test_defaults(self):
        config = config_from_args([])

        assert config.port == 6789
        assert config.host == "127.0.0.1"
        assert config.timeout == 30.0
        assert config.redirects == {}

    def test_flags(self, tmp_path: Path):
        config = config_from_args([
            "--host", "0.0.0.0",
            "-p", "8000",
            "-r", str(tmp_path),
            "--timeout", "0",
            "--redirect", "/home=/index.html",
            "--redirect", "/old=/new.html",
            "--reject-malformed",
            "-l", "debug",
            "--log-format", "json",
        ])

        assert config.host == "0.0.0.0"
        assert config.port == 8000
        assert config.document_root == str(tmp_path)
        assert config.timeout is None
        assert config.redirects == {"/home": "/index.html", "/old": "/new.html"}
        assert config.reject_malformed is True
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_flags_override_env(self, monkeypatch):
        monkeypatch.setenv("FILESERVER_PORT", "9000")

        assert config_from_args([]).port == 9000
        assert config_from_args(["--port", "9001"]).port == 9001

    def test_main_reports_bad_root(self, capsys):
        assert main(["--root", "/definitely/not/here"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_main_reports_bind_failure(self, tmp_path: Path, capsys, package_log_level):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
            taken.bind(("127.0.0.1", 0))
            taken.listen(1)
            port = taken.getsockname()[1]

            status = main(["--port", str(port), "--root", str(tmp_path), "-l", "error"])

        assert status == 1
        assert "Error:" in capsys.readouterr().err
