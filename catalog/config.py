"""
Service Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from .env file using python-dotenv.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

root_env = Path(__file__).resolve().parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)


@dataclass
class ServiceConfig:
    """Service configuration."""

    # Upstream catalog (RAWG-style REST API)
    rawg_api_key: Optional[str] = None
    rawg_base_url: str = "https://api.rawg.io/api"

    # Store-link lookup (IGDB via Twitch client credentials)
    igdb_client_id: Optional[str] = None
    igdb_client_secret: Optional[str] = None
    igdb_base_url: str = "https://api.igdb.com/v4"
    twitch_token_url: str = "https://id.twitch.tv/oauth2/token"

    # Seconds per upstream HTTP call
    request_timeout: float = 10.0

    # Where seen map and preference profile JSON files live
    data_dir: Path = Path(__file__).parent.parent / "data"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Load configuration from environment variables."""
        base_dir = Path(__file__).parent.parent
        data_dir = Path(os.getenv("DATA_DIR", str(base_dir / "data")))
        if not data_dir.is_absolute():
            data_dir = (base_dir / data_dir).resolve()
        return cls(
            rawg_api_key=os.getenv("RAWG_API_KEY") or os.getenv("API_KEY"),
            rawg_base_url=os.getenv("RAWG_BASE_URL", "https://api.rawg.io/api").rstrip("/"),
            igdb_client_id=os.getenv("IGDB_CLIENT_ID") or os.getenv("IGDB_CLIENT"),
            igdb_client_secret=os.getenv("IGDB_CLIENT_SECRET") or os.getenv("IGDB_KEY"),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "10")),
            data_dir=data_dir,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def seen_path(self) -> Path:
        return self.data_dir / "seen.json"

    @property
    def profile_path(self) -> Path:
        return self.data_dir / "profile.json"

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if not self.rawg_api_key:
            errors.append("RAWG_API_KEY is not set; upstream catalog requests will be rejected")

        if bool(self.igdb_client_id) != bool(self.igdb_client_secret):
            errors.append("IGDB_CLIENT_ID and IGDB_CLIENT_SECRET must be set together")

        if self.request_timeout <= 0:
            errors.append(f"REQUEST_TIMEOUT must be positive, got {self.request_timeout}")

        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"Unknown LOG_LEVEL: {self.log_level}")

        return len(errors) == 0, errors

    def ensure_directories(self):
        """Create required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str = "INFO") -> None:
    """Apply a process-wide logging format and level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Global config instance
_config: Optional[ServiceConfig] = None


def get_config() -> ServiceConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServiceConfig.from_env()
        _config.ensure_directories()
    return _config


def reload_config() -> ServiceConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
