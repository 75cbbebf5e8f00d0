import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Optional
from dotenv import load_dotenv

from ..core.exceptions import ConfigurationError

load_dotenv()

DEFAULT_GITLAB_URL = "https://gitlab.com"
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class ServerConfiguration:
    """Snapshot of the GitLab server settings."""
    server_url: str
    private_token: str = ""
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.server_url:
            raise ConfigurationError("GitLab server URL is required")
        if not self.server_url.startswith(('http://', 'https://')):
            raise ConfigurationError(f"Invalid GitLab server URL: {self.server_url}")
        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be a positive number of seconds")

        # Base URL is stored without a trailing slash
        object.__setattr__(self, "server_url", self.server_url.rstrip("/"))

    def has_private_token(self) -> bool:
        return bool(self.private_token)


class ConfigurationProvider(ABC):
    """Source of the current server configuration."""

    @abstractmethod
    def get(self) -> ServerConfiguration:
        """Return the current configuration snapshot."""


class StaticConfigurationProvider(ConfigurationProvider):
    """Provider that always returns the same configuration."""

    def __init__(self, config: ServerConfiguration):
        self.config = config

    def get(self) -> ServerConfiguration:
        return self.config


class ConfigurationStore(ConfigurationProvider):
    """Mutable, process-wide GitLab configuration."""

    def __init__(self, config: ServerConfiguration):
        self._config = config
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls) -> 'ConfigurationStore':
        """Create configuration from environment variables."""
        url = os.getenv("GITLAB_URL", DEFAULT_GITLAB_URL)
        token = os.getenv("GITLAB_TOKEN", "")
        timeout_str = os.getenv("GITLAB_TIMEOUT", str(DEFAULT_TIMEOUT))

        try:
            timeout = float(timeout_str)
        except ValueError:
            raise ConfigurationError(f"GITLAB_TIMEOUT must be a number, got {timeout_str!r}")

        return cls(ServerConfiguration(server_url=url, private_token=token, timeout=timeout))

    def get(self) -> ServerConfiguration:
        with self._lock:
            return self._config

    def update(self, server_url: Optional[str] = None, private_token: Optional[str] = None,
               timeout: Optional[float] = None) -> ServerConfiguration:
        """Replace the stored configuration, keeping unspecified values."""
        changes = {}
        if server_url is not None:
            changes["server_url"] = server_url
        if private_token is not None:
            changes["private_token"] = private_token
        if timeout is not None:
            changes["timeout"] = timeout

        with self._lock:
            # replace() re-runs validation, so a bad value leaves the old snapshot in place
            self._config = replace(self._config, **changes)
            return self._config

    def get_summary(self) -> dict:
        """Get configuration summary for debugging."""
        config = self.get()
        return {
            "gitlab": {
                "url": config.server_url,
                "private_token": "***" if config.has_private_token() else None,
                "timeout": config.timeout
            }
        }
