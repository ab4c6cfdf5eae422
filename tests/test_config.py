"""
Unit tests for configuration

Tests ServerConfig defaults, validation and environment loading.
"""

import dataclasses

import pytest

from config import ServerConfig, parse_bool


class TestServerConfig:
    """Tests for ServerConfig"""

    def test_defaults(self):
        """Test default values"""
        # Act
        config = ServerConfig()

        # Assert
        assert config.host == "127.0.0.1"
        assert config.port == 4723
        assert config.connection_timeout == 5.0
        assert config.read_timeout == 10.0
        assert config.startup_retries == 3
        assert config.retry_delay == 2.0
        assert config.log_file_path == "appium-server.log"
        assert dict(config.environment) == {}
        assert config.show_logs is False

    def test_status_url(self):
        """Test status URL includes the base path"""
        # Act
        config = ServerConfig(host="0.0.0.0", port=4800)

        # Assert
        assert config.server_url == "http://0.0.0.0:4800/wd/hub"
        assert config.status_url == "http://0.0.0.0:4800/wd/hub/status"

    @pytest.mark.parametrize("base_path, expected", [
        ("/", ""),
        ("", ""),
        ("wd/hub/", "/wd/hub"),
        ("/custom", "/custom"),
    ])
    def test_base_path_normalized(self, base_path, expected):
        """Test base path normalization"""
        # Act
        config = ServerConfig(base_path=base_path)

        # Assert
        assert config.base_path == expected
        assert config.status_url == f"http://127.0.0.1:4723{expected}/status"

    def test_environment_defensive_copy(self):
        """Test later changes to the caller's dict do not leak in"""
        # Arrange
        env = {"ANDROID_HOME": "/sdk"}
        config = ServerConfig(environment=env)

        # Act
        env["ANDROID_HOME"] = "/elsewhere"
        env["NEW"] = "1"

        # Assert
        assert dict(config.environment) == {"ANDROID_HOME": "/sdk"}

    def test_environment_read_only(self):
        """Test the stored environment cannot be mutated"""
        # Arrange
        config = ServerConfig(environment={"A": "1"})

        # Act & Assert
        with pytest.raises(TypeError):
            config.environment["A"] = "2"

    def test_frozen(self):
        """Test fields cannot be reassigned"""
        # Arrange
        config = ServerConfig()

        # Act & Assert
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.port = 1

    def test_replace_keeps_environment(self):
        """Test dataclasses.replace re-validates and keeps the environment"""
        # Arrange
        config = ServerConfig(environment={"A": "1"})

        # Act
        updated = dataclasses.replace(config, port=4800)

        # Assert
        assert updated.port == 4800
        assert dict(updated.environment) == {"A": "1"}

    @pytest.mark.parametrize("kwargs", [
        {"startup_retries": 0},
        {"port": 0},
        {"port": 70000},
        {"retry_delay": -1},
        {"connection_timeout": -0.5},
    ])
    def test_invalid_values_rejected(self, kwargs):
        """Test validation errors"""
        # Act & Assert
        with pytest.raises(ValueError):
            ServerConfig(**kwargs)


class TestFromEnv:
    """Tests for ServerConfig.from_env"""

    def test_reads_variables(self):
        """Test APPIUM_* variables are parsed"""
        # Arrange
        environ = {
            "APPIUM_HOST": "0.0.0.0",
            "APPIUM_PORT": "4800",
            "APPIUM_STARTUP_RETRIES": "5",
            "APPIUM_RETRY_DELAY": "0.5",
            "APPIUM_SHOW_LOGS": "yes",
            "APPIUM_LOG_FILE": "/tmp/appium.log",
        }

        # Act
        config = ServerConfig.from_env(environ)

        # Assert
        assert config.host == "0.0.0.0"
        assert config.port == 4800
        assert config.startup_retries == 5
        assert config.retry_delay == 0.5
        assert config.show_logs is True
        assert config.log_file_path == "/tmp/appium.log"

    def test_overrides_win_and_none_ignored(self):
        """Test keyword overrides beat the environment"""
        # Arrange
        environ = {"APPIUM_PORT": "4800", "APPIUM_HOST": "0.0.0.0"}

        # Act
        config = ServerConfig.from_env(environ, port=4900, host=None)

        # Assert
        assert config.port == 4900
        assert config.host == "0.0.0.0"

    def test_empty_environment_gives_defaults(self):
        """Test nothing set means defaults"""
        # Act
        config = ServerConfig.from_env({})

        # Assert
        assert config == ServerConfig()

    def test_malformed_value_names_variable(self):
        """Test parse errors mention the variable"""
        # Act & Assert
        with pytest.raises(ValueError, match="APPIUM_PORT"):
            ServerConfig.from_env({"APPIUM_PORT": "not-a-port"})


class TestParseBool:
    """Tests for parse_bool"""

    @pytest.mark.parametrize("value, expected", [
        ("1", True), ("TRUE", True), ("on", True),
        ("0", False), ("no", False), ("", False),
    ])
    def test_values(self, value, expected):
        assert parse_bool(value) is expected

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_bool("maybe")
