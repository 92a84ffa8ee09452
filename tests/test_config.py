"""Tests for service configuration.

These tests cover:
1. Default values
2. Environment variable loading
3. Validation rules
4. The configuration singleton
"""

import pytest
from pydantic import ValidationError

from library_lending.config import ServerConfig, get_config, reset_config


class TestServerConfig:
    """Test configuration behavior."""

    def test_default_configuration(self, monkeypatch, tmp_path):
        """Defaults apply when nothing is set in the environment."""
        for key in (
            "LIBRARY_LENDING_DATABASE_PATH",
            "LIBRARY_LENDING_PASSWORD_HASH_ITERATIONS",
            "LIBRARY_LENDING_SECRET_KEY",
        ):
            monkeypatch.delenv(key)
        monkeypatch.chdir(tmp_path)

        config = ServerConfig()

        assert config.server_name == "library-lending"
        assert config.server_version == "0.1.0"
        assert config.transport == "stdio"
        assert config.api_prefix == "/api"
        assert config.api_port == 3000
        assert config.cors_origins == ["http://localhost:5173"]
        assert config.token_ttl_minutes == 1440
        assert config.password_hash_iterations == 260_000

        # Relative path is resolved against the working directory and created
        assert config.database_path == tmp_path / "data" / "library.db"
        assert (tmp_path / "data").is_dir()

    def test_environment_variable_loading(self, monkeypatch, tmp_path):
        """Settings are read from LIBRARY_LENDING_* variables."""
        monkeypatch.setenv("LIBRARY_LENDING_SERVER_NAME", "test-library")
        monkeypatch.setenv("LIBRARY_LENDING_API_PORT", "4000")
        monkeypatch.setenv("LIBRARY_LENDING_DATABASE_PATH", str(tmp_path / "env.db"))
        monkeypatch.setenv("LIBRARY_LENDING_DEBUG", "true")
        monkeypatch.setenv("LIBRARY_LENDING_TOKEN_TTL_MINUTES", "15")

        config = ServerConfig()

        assert config.server_name == "test-library"
        assert config.api_port == 4000
        assert config.database_path == tmp_path / "env.db"
        assert config.debug is True
        assert config.token_ttl_minutes == 15

    def test_server_name_validation(self):
        """Server names are short lowercase slugs."""
        for name in ("library-lending", "lib-01", "abc"):
            assert ServerConfig(server_name=name).server_name == name

        for name in ("Library_Lending", "library lending", "ab", "a" * 51):
            with pytest.raises(ValidationError):
                ServerConfig(server_name=name)

    def test_port_validation(self):
        """Privileged and commonly reserved ports are rejected."""
        with pytest.raises(ValidationError):
            ServerConfig(api_port=80)

        with pytest.raises(ValidationError):
            ServerConfig(http_port=5432)

        assert ServerConfig(api_port=8000).api_port == 8000

    def test_transport_validation(self):
        assert ServerConfig(transport="streamable_http").transport == "streamable_http"

        with pytest.raises(ValidationError):
            ServerConfig(transport="websocket")

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("/api", "/api"),
            ("api", "/api"),
            ("/api/", "/api"),
            ("/v1/library/", "/v1/library"),
            ("/", ""),
        ],
    )
    def test_api_prefix_normalization(self, raw, expected):
        assert ServerConfig(api_prefix=raw).api_prefix == expected

    def test_secret_key_hidden_from_repr(self):
        config = ServerConfig(secret_key="super-secret-value")

        assert "super-secret-value" not in repr(config)

    def test_secret_key_minimum_length(self):
        with pytest.raises(ValidationError):
            ServerConfig(secret_key="short")

    def test_effective_log_level(self):
        assert ServerConfig(log_level="WARNING").effective_log_level == "WARNING"
        assert ServerConfig(log_level="WARNING", debug=True).effective_log_level == "DEBUG"

    def test_database_url(self, tmp_path):
        """An explicit URL wins over the SQLite path."""
        config = ServerConfig(database_path=tmp_path / "lib.db")
        assert config.get_database_url() == f"sqlite:///{tmp_path / 'lib.db'}"

        config = ServerConfig(database_url="postgresql://localhost/library")
        assert config.get_database_url() == "postgresql://localhost/library"

    def test_server_info(self):
        info = ServerConfig().server_info

        assert info == {"name": "library-lending", "version": "0.1.0", "transport": "stdio"}


class TestConfigSingleton:
    """Test the process-wide configuration accessor."""

    def test_get_config_returns_same_instance(self):
        assert get_config() is get_config()

    def test_reset_config_picks_up_new_environment(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("LIBRARY_LENDING_SERVER_NAME", "changed-name")

        # Cached until reset
        assert get_config() is first

        reset_config()
        second = get_config()

        assert second is not first
        assert second.server_name == "changed-name"
