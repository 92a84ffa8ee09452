"""Configuration management for the Library Lending service.

Both surfaces of the service read the same settings object:
1. REST API - host, port, route prefix, CORS origins
2. MCP server - name, version and transport for the protocol handshake
3. Persistence - SQLite path or a full SQLAlchemy URL
4. Security - token signing secret and password hashing cost
5. Observability - optional Logfire tracing
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseSettings):
    """Service configuration loaded from the environment.

    Every field can be overridden with a ``LIBRARY_LENDING_`` prefixed
    environment variable or through a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        # Use LIBRARY_LENDING_ prefix for all env vars
        env_prefix="LIBRARY_LENDING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Server Metadata ===

    server_name: str = Field(
        default="library-lending",
        description="Server name used in the MCP handshake and the API title",
        pattern=r"^[a-z0-9-]+$",
    )

    server_version: str = Field(
        default="0.1.0",
        description="Server version reported to clients",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$",
    )

    # === Database Configuration ===

    database_path: Path = Field(
        default=Path("data/library.db"),
        description="SQLite database file path",
    )

    database_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL; takes precedence over database_path",
    )

    # === MCP Transport Configuration ===

    transport: str = Field(
        default="stdio",
        description="MCP transport mechanism",
        pattern=r"^(stdio|streamable_http)$",
    )

    http_host: str = Field(
        default="127.0.0.1",
        description="Host for the MCP Streamable HTTP transport",
    )

    http_port: int = Field(
        default=8080,
        description="Port for the MCP Streamable HTTP transport",
        ge=1024,  # Avoid privileged ports
        le=65535,
    )

    # === REST API Configuration ===

    api_host: str = Field(
        default="127.0.0.1",
        description="Host the REST API binds to",
    )

    api_port: int = Field(
        default=3000,
        description="Port the REST API listens on",
        ge=1024,
        le=65535,
    )

    api_prefix: str = Field(
        default="/api",
        description="Common prefix for every REST route",
    )

    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the REST API from a browser",
    )

    # === Security Configuration ===

    secret_key: str = Field(
        default="dev-secret-change-me",
        description="Secret used to sign bearer tokens",
        min_length=8,
        repr=False,  # Hide from string representation
    )

    token_ttl_minutes: int = Field(
        default=24 * 60,
        description="Lifetime of an issued bearer token in minutes",
        ge=1,
    )

    password_hash_iterations: int = Field(
        default=260_000,
        description="PBKDF2 iteration count for new password hashes",
        ge=1,
    )

    # === Observability Configuration ===

    logfire_enabled: bool = Field(
        default=False,
        description="Emit Logfire traces and metrics for API requests and MCP calls",
    )

    logfire_token: str | None = Field(
        default=None,
        description="Logfire write token; without one nothing is sent",
        repr=False,
    )

    environment: str = Field(
        default="development",
        description="Deployment environment reported with traces",
    )

    # === Development Configuration ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    # === Validation Methods ===

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, v: Path) -> Path:
        """Ensure the database directory exists."""
        abs_path = v.absolute()
        abs_path.parent.mkdir(parents=True, exist_ok=True)

        if not abs_path.parent.is_dir():
            raise ValueError(f"Database directory {abs_path.parent} is not accessible")

        return abs_path

    @field_validator("server_name")
    @classmethod
    def validate_server_name(cls, v: str) -> str:
        """Validate server name length."""
        if len(v) < 3:
            raise ValueError("Server name must be at least 3 characters")
        if len(v) > 50:
            raise ValueError("Server name must not exceed 50 characters")
        return v

    @field_validator("http_port", "api_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Reject ports that are commonly taken by other services."""
        reserved_ports = {22, 25, 80, 443, 3306, 5432}
        if v in reserved_ports:
            raise ValueError(f"Port {v} is commonly reserved, choose another")
        return v

    @field_validator("api_prefix")
    @classmethod
    def normalize_api_prefix(cls, v: str) -> str:
        """Normalize the prefix to a leading slash and no trailing slash."""
        v = v.strip().strip("/")
        return f"/{v}" if v else ""

    # === Computed Properties ===

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.debug or self.log_level == "DEBUG"

    @property
    def effective_log_level(self) -> str:
        """Log level after applying the debug flag."""
        return "DEBUG" if self.debug else self.log_level

    @property
    def server_info(self) -> dict[str, str]:
        """Server information sent to MCP clients during initialization."""
        return {
            "name": self.server_name,
            "version": self.server_version,
            "transport": self.transport,
        }

    def get_database_url(self) -> str:
        """Get the SQLAlchemy database URL."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.database_path}"


class _ConfigStore:
    """Internal storage for configuration singleton."""

    _instance: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Get or create the global configuration instance."""
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        _ConfigStore._instance = ServerConfig()  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]
