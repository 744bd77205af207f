"""
API process settings: storage and Kafka wiring, token, host allow-list.
Domain tunables (intervals, attempts, timeouts) live in ``core.config``.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    return os.getenv(name, "true" if default else "false").strip().lower() in (
        "1",
        "true",
        "yes",
    )


@dataclass
class Settings:
    # Durable store
    redis_url: str
    redis_enabled: bool

    # Status event publishing
    kafka_enabled: bool
    kafka_bootstrap_servers: str
    kafka_topic: str

    # OpenAPI metadata
    api_title: str
    api_version: str
    api_description: str

    environment: str
    debug: bool
    api_token: Optional[str]
    allowed_hosts: str

    @classmethod
    def load_from_env(cls) -> "Settings":
        return cls(
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
            redis_enabled=_env_flag("REDIS_ENABLED", True),
            kafka_enabled=_env_flag("KAFKA_ENABLED", False),
            kafka_bootstrap_servers=os.getenv(
                "KAFKA_BOOTSTRAP_SERVERS", "localhost:29092"
            ),
            kafka_topic=os.getenv("KAFKA_TOPIC", "dte-status-events"),
            api_title="DTE Contingency API",
            api_version="1.0.0",
            api_description=(
                "Submits electronic tax documents, queues them while the tax "
                "authority is unreachable and tracks their status until final"
            ),
            environment=os.getenv("ENVIRONMENT", "development"),
            debug=_env_flag("DEBUG", False),
            api_token=cls._read_api_token(),
            allowed_hosts=os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1"),
        )

    @staticmethod
    def _read_api_token() -> Optional[str]:
        """API_AUTH_TOKEN wins; API_AUTH_TOKEN_FILE is for mounted secrets."""
        token = os.getenv("API_AUTH_TOKEN", "").strip()
        if token:
            return token

        token_file = os.getenv("API_AUTH_TOKEN_FILE")
        if not token_file:
            return None
        path = Path(token_file)
        try:
            token = path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            logger.warning(f"API token file not found: {token_file}")
            return None
        except OSError as exc:
            logger.error(f"Cannot read API token file {token_file}: {exc}")
            return None
        if not token:
            logger.warning(f"API token file {token_file} is empty")
        return token or None

    def is_production(self) -> bool:
        return self.environment == "production"

    def get_allowed_hosts(self) -> List[str]:
        return [host.strip() for host in self.allowed_hosts.split(",") if host.strip()]


settings = Settings.load_from_env()
logger.info(
    f"API settings loaded: environment={settings.environment}, "
    f"redis={'on' if settings.redis_enabled else 'off'}, "
    f"kafka={'on' if settings.kafka_enabled else 'off'}"
)
