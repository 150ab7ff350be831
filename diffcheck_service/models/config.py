"""Service configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_GITHUB_API_URL = "https://api.github.com"


class ConfigError(Exception):
    """Raised when the service cannot start with the given configuration."""

    pass


def _required(env: Mapping[str, str], name: str) -> str:
    value = env.get(name, "")
    if not value:
        raise ConfigError(f"missing {name} env")
    return value


def _number[T: (int, float)](env: Mapping[str, str], name: str, default: T, kind: type[T]) -> T:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigError(f"invalid {name} env: {raw!r}") from e


@dataclass(frozen=True)
class ServiceConfig:
    """Runtime settings, loaded once at startup.

    The webhook secret must match the one configured for the webhook on
    GitHub. It is handed to the intake explicitly; nothing reads it from
    module state.
    """

    webhook_secret: bytes
    port: int
    github_api_url: str = DEFAULT_GITHUB_API_URL
    github_token: str | None = None
    github_timeout: int = 10
    check_workers: int = 8
    shutdown_grace: float = 5.0
    host: str = "0.0.0.0"

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.webhook_secret:
            raise ConfigError("webhook secret cannot be empty")

        if not 0 < self.port < 65536:
            raise ConfigError(f"port must be between 1 and 65535, got {self.port}")

        if isinstance(self.github_timeout, bool) or not isinstance(self.github_timeout, int):
            raise ConfigError(
                f"github_timeout must be whole seconds, got {self.github_timeout!r}"
            )

        if self.github_timeout <= 0:
            raise ConfigError(f"github_timeout must be positive, got {self.github_timeout}")

        if self.check_workers < 1:
            raise ConfigError(f"check_workers must be at least 1, got {self.check_workers}")

        if self.shutdown_grace < 0:
            raise ConfigError(f"shutdown_grace cannot be negative, got {self.shutdown_grace}")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ServiceConfig:
        """Load configuration from environment variables.

        ``PORT`` and ``WEBHOOK_SECRET`` are required; everything else has a
        default.

        Args:
            env: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            ServiceConfig instance.

        Raises:
            ConfigError: If a required variable is missing or a value is invalid.
        """
        if env is None:
            env = os.environ

        secret = _required(env, "WEBHOOK_SECRET")
        port = _required(env, "PORT")
        try:
            port_number = int(port)
        except ValueError as e:
            raise ConfigError(f"invalid PORT env: {port!r}") from e

        return cls(
            webhook_secret=secret.encode(),
            port=port_number,
            github_api_url=env.get("GITHUB_API_URL") or DEFAULT_GITHUB_API_URL,
            github_token=env.get("GITHUB_TOKEN") or None,
            github_timeout=_number(env, "GITHUB_TIMEOUT", 10, int),
            check_workers=_number(env, "CHECK_WORKERS", 8, int),
            shutdown_grace=_number(env, "SHUTDOWN_GRACE", 5.0, float),
            host=env.get("HOST") or "0.0.0.0",
        )
