"""
External worker configuration.

The worker base URL, request timeouts and webhook secret are carried in an
explicit WorkerSettings value that is handed to the worker client and the
ingestion job dispatcher at construction time.

Usage:
    from docu_service.config.worker import WorkerSettings

    settings = WorkerSettings.from_env()
    client = WorkerClient(settings)
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_WORKER_BASE_URL = "http://localhost:8000/api"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_RETRIES = 3


def _read_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero, got {raw!r}")
    return value


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < 0:
        raise ValueError(f"{name} cannot be negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class WorkerSettings:
    """
    Settings for talking to the external ingestion worker.

    Attributes:
        base_url: Worker API base URL (trigger/cancel endpoints hang off it)
        timeout_seconds: Total timeout for a single worker request
        connect_timeout_seconds: Connection establishment timeout
        webhook_secret: Shared secret for signed status callbacks (None = unsigned)
        default_max_retries: Retry budget given to new jobs
    """
    base_url: str = DEFAULT_WORKER_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    webhook_secret: Optional[str] = None
    default_max_retries: int = DEFAULT_MAX_RETRIES

    @property
    def trigger_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/ingestion/trigger"

    @property
    def cancel_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/ingestion/cancel"

    @property
    def requires_signed_webhooks(self) -> bool:
        return bool(self.webhook_secret)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "WorkerSettings":
        """
        Build settings from environment variables.

        Environment variables:
            WORKER_BASE_URL: Worker API base URL
            WORKER_TIMEOUT_SECONDS: Request timeout
            WORKER_CONNECT_TIMEOUT_SECONDS: Connect timeout
            INGESTION_WEBHOOK_SECRET: Shared secret for status callbacks
            INGESTION_MAX_RETRIES: Default retry budget for new jobs

        Raises:
            ValueError: If a numeric variable is malformed
        """
        env = os.environ if env is None else env

        settings = cls(
            base_url=(env.get("WORKER_BASE_URL") or DEFAULT_WORKER_BASE_URL).rstrip("/"),
            timeout_seconds=_read_float(env, "WORKER_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
            connect_timeout_seconds=_read_float(
                env, "WORKER_CONNECT_TIMEOUT_SECONDS", DEFAULT_CONNECT_TIMEOUT_SECONDS
            ),
            webhook_secret=env.get("INGESTION_WEBHOOK_SECRET") or None,
            default_max_retries=_read_int(env, "INGESTION_MAX_RETRIES", DEFAULT_MAX_RETRIES),
        )

        logger.info(
            "Worker settings loaded",
            extra={
                "worker_base_url": settings.base_url,
                "timeout_seconds": settings.timeout_seconds,
                "signed_webhooks": settings.requires_signed_webhooks,
                "default_max_retries": settings.default_max_retries,
            },
        )
        return settings
