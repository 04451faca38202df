"""
Configuration management for CineSearch.

Loads configuration from environment variables and provides
a centralized Config dataclass for all settings.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    """Centralized configuration from environment variables."""

    # TMDB API
    api_key: str
    bearer_token: str = ""
    base_url: str = "https://api.themoviedb.org/3"
    request_timeout: float = 8.0

    # Response cache
    cache_ttl_seconds: int = 600
    cache_check_period: int = 120

    # Abuse control (per client address, trailing window)
    rate_limit_window_seconds: int = 60
    rate_limit_max: int = 40
    slow_down_after: int = 30
    slow_down_step_ms: int = 500

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    environment: str = "production"
    trust_proxy: bool = True

    # CORS settings
    allowed_origins: List[str] = field(default_factory=list)

    # Logging
    log_dir: Optional[Path] = None
    log_level: str = "INFO"

    @property
    def is_test(self) -> bool:
        return self.environment.lower() == "test"

    @property
    def abuse_control_enabled(self) -> bool:
        """Rate limiting and slow-down are skipped while the test suite runs."""
        return not self.is_test

    @classmethod
    def from_env(cls, env_path: Optional[str] = None) -> "Config":
        """
        Load configuration from environment variables.

        Args:
            env_path: Optional path to .env file. If not provided,
                     looks for .env in the current directory.

        Returns:
            Config instance with loaded values.

        Raises:
            ValueError: If required environment variables are missing.
        """
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        # Required variables
        api_key = os.getenv("TMDB_API_KEY")
        if not api_key:
            raise ValueError("TMDB_API_KEY environment variable is required")

        bearer_token = os.getenv("TMDB_BEARER_TOKEN", "")
        base_url = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3")

        # API settings
        api_host = os.getenv("API_HOST", "0.0.0.0")
        api_port = int(os.getenv("PORT", "3000"))
        environment = os.getenv("APP_ENV", "production")
        trust_proxy = _env_flag("TRUST_PROXY", "true")

        # CORS settings
        origins_str = os.getenv("ALLOWED_ORIGINS", "")
        allowed_origins = [o.strip() for o in origins_str.split(",") if o.strip()]

        # Logging
        log_dir_str = os.getenv("LOG_DIR", "")
        log_dir = Path(log_dir_str) if log_dir_str else None
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        return cls(
            api_key=api_key,
            bearer_token=bearer_token,
            base_url=base_url.rstrip("/"),
            api_host=api_host,
            api_port=api_port,
            environment=environment,
            trust_proxy=trust_proxy,
            allowed_origins=allowed_origins,
            log_dir=log_dir,
            log_level=log_level,
        )

    def get_headers(self) -> dict:
        """Get headers for TMDB API requests."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"
        return headers
