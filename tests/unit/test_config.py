"""
Unit tests for ServerConfig and ClientConfig.
"""

import dataclasses
import logging

import pytest

from lineserver.config import ServerConfig, ClientConfig


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_defaults_are_valid(self):
        config = ServerConfig()
        config.validate()

        assert config.host == "0.0.0.0"
        assert config.buffer_size == 255
        assert config.max_sessions is None

    def test_frozen(self):
        config = ServerConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.port = 9000

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"buffer_size": 0},
        {"buffer_size": 256},
        {"max_sessions": 0},
        {"accept_timeout": 0},
        {"log_level": "LOUD"},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_level(self):
        assert ServerConfig(log_level="debug").level == logging.DEBUG
        assert ServerConfig().level == logging.INFO

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LINESERVER_HOST", "127.0.0.1")
        monkeypatch.setenv("LINESERVER_PORT", "9000")
        monkeypatch.setenv("LINESERVER_BACKLOG", "16")
        monkeypatch.setenv("LINESERVER_MAX_SESSIONS", "50")
        monkeypatch.setenv("LINESERVER_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 9000
        assert config.backlog == 16
        assert config.max_sessions == 50
        assert config.log_level == "DEBUG"

    def test_from_env_overrides_win(self, monkeypatch):
        monkeypatch.setenv("LINESERVER_PORT", "9000")
        monkeypatch.delenv("LINESERVER_MAX_SESSIONS", raising=False)

        config = ServerConfig.from_env(port=7000, host=None)

        assert config.port == 7000
        assert config.host == "0.0.0.0"
        assert config.max_sessions is None


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_line_limit_leaves_room(self):
        assert ClientConfig("localhost", 9000).max_line == 254

    def test_prompt(self):
        assert ClientConfig().prompt == "> "
