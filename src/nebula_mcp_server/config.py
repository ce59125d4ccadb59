"""Configuration management for the MCP server and NebulaGraph connection.

Loads configuration from environment variables and an optional .env file
in the project root.

Example .env:

    NEBULA_HOSTS=127.0.0.1,127.0.0.2
    NEBULA_PORT=9669
    NEBULA_USER=root
    NEBULA_PASSWORD=nebula
    NEBULA_SPACE=my_space
    LOG_LEVEL=INFO
"""

from typing import Annotated, Any, Dict, List, Mapping

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .errors import ConfigError

# Keys accepted in a raw `nebula_info` style section, mapped to env aliases.
_SECTION_KEYS: Dict[str, str] = {
    "host": "NEBULA_HOSTS",
    "port": "NEBULA_PORT",
    "user": "NEBULA_USER",
    "password": "NEBULA_PASSWORD",
    "space": "NEBULA_SPACE",
}


class Config(BaseSettings):
    """Application configuration loaded from environment / .env file.

    We use explicit aliases so the mapping to env vars is obvious and
    easy to consume from scripts.
    """

    # NebulaGraph configuration
    nebula_hosts: Annotated[List[str], NoDecode] = Field(
        ...,
        alias="NEBULA_HOSTS",
        description="Comma-separated graphd hosts, e.g. 127.0.0.1,127.0.0.2",
    )
    nebula_port: int = Field(
        9669,
        alias="NEBULA_PORT",
        description="graphd port shared by all hosts",
    )
    nebula_user: str = Field(
        ...,
        alias="NEBULA_USER",
        description="NebulaGraph username",
    )
    nebula_password: str = Field(
        "",
        alias="NEBULA_PASSWORD",
        description="NebulaGraph password",
    )
    nebula_space: str = Field(
        ...,
        alias="NEBULA_SPACE",
        description="Graph space selected with USE before every statement",
    )
    nebula_max_connection_pool_size: int = Field(
        10,
        alias="NEBULA_MAX_CONNECTION_POOL_SIZE",
        description="Maximum number of connections in the NebulaGraph pool",
    )
    nebula_timeout: int = Field(
        0,
        alias="NEBULA_TIMEOUT",
        description="Socket timeout in milliseconds, 0 means no timeout",
    )
    nebula_idle_time: int = Field(
        0,
        alias="NEBULA_IDLE_TIME",
        description="Idle time in milliseconds before a pooled connection is dropped, 0 keeps it",
    )

    # Server configuration
    log_level: str = Field(
        "INFO",
        alias="LOG_LEVEL",
        description="Log level for server / CLI (e.g. DEBUG, INFO, WARN, ERROR)",
    )
    mcp_host: str = Field(
        "0.0.0.0",
        alias="MCP_HOST",
        description="Bind address of the MCP server",
    )
    mcp_port: int = Field(
        8000,
        alias="MCP_PORT",
        description="Port of the MCP server",
    )

    # Pydantic v2 settings for env loading
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,  # we use explicit aliases, so keep env lookup strict
        extra="ignore",
        populate_by_name=False,
    )

    @field_validator("nebula_hosts", mode="before")
    @classmethod
    def _split_hosts(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            hosts = [str(host).strip() for host in value]
            if not hosts or any(host == "" for host in hosts):
                raise ValueError("invalid nebula host config, empty string found")
            return hosts
        return value

    @field_validator("nebula_port")
    @classmethod
    def _check_port(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("invalid nebula port config")
        return value

    @field_validator("nebula_user", "nebula_space")
    @classmethod
    def _check_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()

    @classmethod
    def from_mapping(cls, section: Mapping[str, Any]) -> "Config":
        """Build a config from a raw key/value section.

        The section uses the short keys of a YAML ``nebula_info`` block
        (``host``, ``port``, ``user``, ``password``, ``space``). Anything not
        given in the section still falls back to the environment.

        Raises:
            ConfigError: If a key is not recognized or a value is invalid.
        """
        values: Dict[str, Any] = {}
        for key, value in section.items():
            alias = _SECTION_KEYS.get(key)
            if alias is None:
                raise ConfigError(f"unrecognized field '{key}' in 'nebula_info' config")
            values[alias] = value
        return load_config(**values)


def load_config(**values: Any) -> Config:
    """Load and validate configuration, raising ``ConfigError`` when invalid."""
    try:
        return Config(**values)
    except ValidationError as e:
        raise ConfigError(f"Nebula config not correct. {e}") from e


def describe_hosts(config: Config) -> str:
    """Render the configured graphd addresses for log and error messages."""
    return ", ".join(f"{host}:{config.nebula_port}" for host in config.nebula_hosts)
