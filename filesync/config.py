"""Configuration management for filesync.

Settings are read from environment variables first and then from
``~/.config/filesync/config``, a file of ``KEY=VALUE`` lines using the same
variable names. Credentials for S3 are not handled here; boto3 resolves them
through its usual chain (environment, shared credentials file, profiles,
instance roles).
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "filesync"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config"

DEFAULT_S3_MAX_ATTEMPTS = 5
DEFAULT_S3_TIMEOUT = 60.0

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


class Config:
    """Configuration values for filesync."""

    def __init__(self, config_file: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_file: Path of the KEY=VALUE file (defaults to
                ~/.config/filesync/config)
        """
        self.config_file = config_file or DEFAULT_CONFIG_FILE
        self._file_values: Optional[dict[str, str]] = None

    def _load_file(self) -> dict[str, str]:
        if self._file_values is not None:
            return self._file_values

        values: dict[str, str] = {}
        if self.config_file.exists():
            try:
                lines = self.config_file.read_text(encoding="utf-8").splitlines()
            except OSError as e:
                raise ConfigError(f"Cannot read {self.config_file}: {e}") from e
            for number, line in enumerate(lines, start=1):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    raise ConfigError(
                        f"{self.config_file}:{number}: expected KEY=VALUE, got {line!r}"
                    )
                key, value = line.split("=", 1)
                values[key.strip()] = value.strip().strip('"').strip("'")
            logger.debug(f"Loaded {len(values)} setting(s) from {self.config_file}")

        self._file_values = values
        return values

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a raw setting (environment wins over the config file)."""
        value = os.environ.get(key)
        if value:
            return value
        return self._load_file().get(key, default)

    def _get_number(self, key: str, default: float) -> float:
        value = self.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError as e:
            raise ConfigError(f"{key} must be a number, got {value!r}") from e

    def _get_bool(self, key: str, default: bool) -> bool:
        value = self.get(key)
        if value is None:
            return default
        if value.lower() in TRUE_VALUES:
            return True
        if value.lower() in FALSE_VALUES:
            return False
        raise ConfigError(f"{key} must be true or false, got {value!r}")

    @property
    def s3_endpoint_url(self) -> Optional[str]:
        """Custom S3 endpoint (MinIO, Ceph, R2, ...)."""
        return self.get("FILESYNC_S3_ENDPOINT_URL")

    @property
    def s3_region(self) -> Optional[str]:
        """Region for the S3 client."""
        return self.get("FILESYNC_S3_REGION")

    @property
    def s3_profile(self) -> Optional[str]:
        """Named AWS profile to use for credentials."""
        return self.get("FILESYNC_S3_PROFILE")

    @property
    def s3_max_attempts(self) -> int:
        """Total attempts per S3 request, including retries."""
        attempts = int(self._get_number("FILESYNC_S3_MAX_ATTEMPTS", DEFAULT_S3_MAX_ATTEMPTS))
        if attempts < 1:
            raise ConfigError("FILESYNC_S3_MAX_ATTEMPTS must be at least 1")
        return attempts

    @property
    def s3_timeout(self) -> float:
        """Connect and read timeout for S3 requests in seconds."""
        timeout = self._get_number("FILESYNC_S3_TIMEOUT", DEFAULT_S3_TIMEOUT)
        if timeout <= 0:
            raise ConfigError("FILESYNC_S3_TIMEOUT must be positive")
        return timeout

    @property
    def s3_etag_as_md5(self) -> bool:
        """Use plain 32-hex ETags as MD5 digests (disable for SSE-KMS/SSE-C)."""
        return self._get_bool("FILESYNC_S3_ETAG_AS_MD5", True)


config = Config()
