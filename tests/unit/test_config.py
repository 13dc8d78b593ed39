"""
Unit tests for server configuration and the command line.
"""

from pathlib import Path

import pytest

from minihttpd.config import ServerConfig
from minihttpd.__main__ import build_parser, main


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 4221
        assert config.directory is None
        assert config.timeout is None
        config.validate()

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"timeout": 0},
        {"timeout": -1.5},
        {"max_line_size": 10},
        {"log_level": "LOUD"},
        {"directory": "/definitely/not/a/real/dir"},
    ])
    def test_validate_rejects(self, overrides):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_validate_directory_must_be_dir(self, tmp_path: Path):
        path = tmp_path / "file"
        path.write_bytes(b"")

        with pytest.raises(ValueError):
            ServerConfig(directory=str(path)).validate()

    def test_validate_accepts_directory(self, storage_dir: Path):
        ServerConfig(directory=str(storage_dir), port=0, timeout=2.5).validate()

    def test_from_env(self, monkeypatch, storage_dir: Path):
        monkeypatch.setenv("HTTP_HOST", "127.0.0.1")
        monkeypatch.setenv("HTTP_PORT", "8080")
        monkeypatch.setenv("HTTP_DIRECTORY", str(storage_dir))
        monkeypatch.setenv("HTTP_TIMEOUT", "3")
        monkeypatch.setenv("HTTP_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.directory == str(storage_dir)
        assert config.timeout == 3.0
        assert config.log_level == "DEBUG"

    def test_from_env_defaults(self, monkeypatch):
        for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_DIRECTORY", "HTTP_TIMEOUT", "HTTP_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        assert ServerConfig.from_env() == ServerConfig()

    def test_from_env_bad_port(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "not-a-port")

        with pytest.raises(ValueError):
            ServerConfig.from_env()


class TestCommandLine:

    def test_parser_defaults_from_config(self):
        args = build_parser(ServerConfig(port=9000)).parse_args([])

        assert args.port == 9000
        assert args.directory is None
        assert args.log_level == "INFO"

    def test_parser_flags(self, storage_dir: Path):
        args = build_parser(ServerConfig()).parse_args([
            "--directory", str(storage_dir),
            "-p", "8081",
            "-H", "127.0.0.1",
            "--timeout", "1.5",
            "-l", "debug",
        ])

        assert args.directory == str(storage_dir)
        assert args.port == 8081
        assert args.host == "127.0.0.1"
        assert args.timeout == 1.5
        assert args.log_level == "DEBUG"

    def test_main_bad_directory(self, tmp_path: Path, capsys):
        status = main(["--directory", str(tmp_path / "missing")])

        assert status == 1
        assert "does not exist" in capsys.readouterr().err

    def test_main_bad_env(self, monkeypatch, capsys):
        monkeypatch.setenv("HTTP_PORT", "abc")

        assert main([]) == 1
        assert "environment" in capsys.readouterr().err
