"""
Unit tests for server configuration and command-line handling.
"""

import os
from pathlib import Path

import pytest

from simplehttp.config import ServerConfig
from simplehttp.__main__ import build_parser, config_from_args, main


class TestServerConfig:
    """Tests for ServerConfig defaults and validation."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 5500
        assert config.buffer_size == 1024
        assert config.concurrency == "pool"
        assert config.legacy_line_endings is False
        assert config.root == os.getcwd()

    def test_root_captured_at_creation(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        expected = os.getcwd()
        config = ServerConfig()
        monkeypatch.chdir(tmp_path.parent)

        assert config.root == expected

    def test_valid_config(self, serve_root: Path):
        ServerConfig(root=str(serve_root)).validate()

    @pytest.mark.parametrize("overrides, message", [
        ({"port": 70000}, "Invalid port"),
        ({"port": -1}, "Invalid port"),
        ({"concurrency": "forking"}, "Invalid concurrency"),
        ({"min_workers": 0}, "min_workers"),
        ({"min_workers": 4, "max_workers": 2}, "max_workers"),
        ({"queue_size": 0}, "queue_size"),
        ({"buffer_size": 8}, "buffer_size"),
        ({"timeout": 0}, "timeout"),
    ])
    def test_invalid_values(self, serve_root: Path, overrides, message):
        config = ServerConfig(root=str(serve_root), **overrides)

        with pytest.raises(ValueError, match=message):
            config.validate()

    def test_root_must_be_directory(self, serve_root: Path):
        config = ServerConfig(root=str(serve_root / "readme.txt"))

        with pytest.raises(ValueError, match="not a directory"):
            config.validate()

    def test_from_env(self, serve_root: Path, monkeypatch):
        monkeypatch.setenv("SIMPLEHTTP_HOST", "0.0.0.0")
        monkeypatch.setenv("SIMPLEHTTP_PORT", "8080")
        monkeypatch.setenv("SIMPLEHTTP_ROOT", str(serve_root))
        monkeypatch.setenv("SIMPLEHTTP_WORKERS", "3")
        monkeypatch.setenv("SIMPLEHTTP_CONCURRENCY", "serial")
        monkeypatch.setenv("SIMPLEHTTP_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.root == str(serve_root)
        assert config.max_workers == 3
        assert config.concurrency == "serial"
        assert config.log_level == "DEBUG"

    def test_from_env_defaults(self, monkeypatch):
        for name in ("HOST", "PORT", "ROOT", "WORKERS", "CONCURRENCY", "LOG_LEVEL"):
            monkeypatch.delenv(f"SIMPLEHTTP_{name}", raising=False)

        config = ServerConfig.from_env()

        assert config.port == 5500
        assert config.root == os.getcwd()


class TestCommandLine:
    """Tests for argument parsing."""

    def test_args_override_env(self, serve_root: Path, monkeypatch):
        monkeypatch.setenv("SIMPLEHTTP_PORT", "8080")
        args = build_parser().parse_args([
            "--port", "9000",
            "--root", str(serve_root),
            "--concurrency", "serial",
            "--legacy-line-endings",
            "-l", "WARNING",
        ])

        config = config_from_args(args)

        assert config.port == 9000
        assert config.root == str(serve_root)
        assert config.concurrency == "serial"
        assert config.legacy_line_endings is True
        assert config.log_level == "WARNING"

    def test_env_used_when_flag_absent(self, monkeypatch):
        monkeypatch.setenv("SIMPLEHTTP_PORT", "8080")
        config = config_from_args(build_parser().parse_args([]))

        assert config.port == 8080

    def test_workers_lowers_min_workers(self):
        config = config_from_args(build_parser().parse_args(["-w", "1"]))

        assert config.max_workers == 1
        assert config.min_workers == 1

    def test_invalid_concurrency_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--concurrency", "forking"])

    def test_main_reports_bad_root(self, tmp_path: Path, capsys):
        assert main(["--root", str(tmp_path / "gone")]) == 1
        assert "not a directory" in capsys.readouterr().err
