"""
capfilter Configuration Module

Centralized configuration management using pydantic-settings.
Loads settings from environment variables and .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Find the project root (where .env is located)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        env_prefix="CAPFILTER_",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")

    # ==========================================================================
    # Logging Configuration
    # ==========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )

    # ==========================================================================
    # Filter Compilation
    # ==========================================================================
    protocols_file: Path = Field(
        default=Path("/etc/protocols"),
        description="System protocol database (name -> number)",
    )
    # Pseudo interfaces that never carry 802.1Q tags
    no_vlan_interface_prefixes: list[str] = Field(
        default=[
            "lo",
            "enc",
            "gif",
            "gre",
            "tun",
            "ovpn",
            "ipsec",
            "pflog",
            "pfsync",
            "wg",
            "l2tp",
            "ppp",
        ],
        description="Interface name prefixes that cannot filter on VLAN tags",
    )

    @field_validator("protocols_file", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path) -> Path:
        """Ensure protocols_file is a Path object."""
        return Path(v) if isinstance(v, str) else v

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @property
    def has_protocols_file(self) -> bool:
        """Check if the protocol database exists on this system."""
        return self.protocols_file.is_file()


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience alias
settings = get_settings()
