"""Tests for configuration handling."""

from unittest.mock import MagicMock, patch

import pytest

from filesync.config import DEFAULT_S3_MAX_ATTEMPTS, DEFAULT_S3_TIMEOUT, Config
from filesync.exceptions import ConfigError
from filesync.sources import LocalFiles, S3Files, create_s3_client, open_source, parse_s3_location

ENV_KEYS = [
    "FILESYNC_S3_ENDPOINT_URL",
    "FILESYNC_S3_REGION",
    "FILESYNC_S3_PROFILE",
    "FILESYNC_S3_MAX_ATTEMPTS",
    "FILESYNC_S3_TIMEOUT",
    "FILESYNC_S3_ETAG_AS_MD5",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove filesync variables from the environment."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfig:
    """Tests for the Config class."""

    def test_defaults(self, tmp_path):
        """Without env or file the defaults should apply."""
        cfg = Config(config_file=tmp_path / "config")

        assert cfg.s3_endpoint_url is None
        assert cfg.s3_region is None
        assert cfg.s3_profile is None
        assert cfg.s3_max_attempts == DEFAULT_S3_MAX_ATTEMPTS
        assert cfg.s3_timeout == DEFAULT_S3_TIMEOUT
        assert cfg.s3_etag_as_md5 is True

    def test_reads_config_file(self, tmp_path):
        """KEY=VALUE lines should be read, comments skipped."""
        path = tmp_path / "config"
        path.write_text(
            "# filesync settings\n"
            "FILESYNC_S3_ENDPOINT_URL=http://localhost:9000\n"
            'FILESYNC_S3_REGION="eu-central-1"\n'
            "\n"
            "FILESYNC_S3_MAX_ATTEMPTS = 3\n"
        )
        cfg = Config(config_file=path)

        assert cfg.s3_endpoint_url == "http://localhost:9000"
        assert cfg.s3_region == "eu-central-1"
        assert cfg.s3_max_attempts == 3

    def test_environment_wins(self, tmp_path, monkeypatch):
        """Environment variables should override the config file."""
        path = tmp_path / "config"
        path.write_text("FILESYNC_S3_REGION=us-east-1\n")
        monkeypatch.setenv("FILESYNC_S3_REGION", "ap-south-1")

        assert Config(config_file=path).s3_region == "ap-south-1"

    def test_malformed_line(self, tmp_path):
        """Lines without '=' should raise ConfigError."""
        path = tmp_path / "config"
        path.write_text("FILESYNC_S3_REGION\n")

        with pytest.raises(ConfigError, match="KEY=VALUE"):
            Config(config_file=path).s3_region

    def test_invalid_numbers(self, tmp_path, monkeypatch):
        """Non-numeric and out-of-range numbers should be rejected."""
        cfg = Config(config_file=tmp_path / "config")

        monkeypatch.setenv("FILESYNC_S3_TIMEOUT", "soon")
        with pytest.raises(ConfigError, match="must be a number"):
            cfg.s3_timeout

        monkeypatch.setenv("FILESYNC_S3_TIMEOUT", "0")
        with pytest.raises(ConfigError, match="positive"):
            cfg.s3_timeout

        monkeypatch.setenv("FILESYNC_S3_MAX_ATTEMPTS", "0")
        with pytest.raises(ConfigError, match="at least 1"):
            cfg.s3_max_attempts


class TestOpenSource:
    """Tests for building sources from location strings."""

    def test_parse_s3_location(self):
        """Bucket and prefix should be split and trimmed."""
        assert parse_s3_location("s3://bucket/a/b/") == ("bucket", "a/b")
        assert parse_s3_location("s3://bucket") == ("bucket", "")

    def test_parse_s3_location_without_bucket(self):
        """A location without bucket should be rejected."""
        with pytest.raises(ConfigError):
            parse_s3_location("s3:///prefix")

    def test_local_path(self, tmp_path):
        """Plain paths should open a LocalFiles source."""
        source = open_source(str(tmp_path), missing_ok=True, ignore_patterns=["*.tmp"])

        assert isinstance(source, LocalFiles)
        assert source.missing_ok is True
        assert source.scanner.ignore_patterns == ["*.tmp"]

    def test_s3_location_with_client(self):
        """s3:// locations should open an S3Files source."""
        client = MagicMock()

        source = open_source("s3://bucket/site", client=client)

        assert isinstance(source, S3Files)
        assert source.client is client
        assert source.bucket == "bucket"
        assert source.prefix == "site"

    def test_unknown_scheme(self):
        """Other URL schemes should be rejected."""
        with pytest.raises(ConfigError, match="Unsupported"):
            open_source("ftp://host/dir")

    def test_s3_location_creates_client(self, tmp_path):
        """Without a client one should be created from the config."""
        cfg = Config(config_file=tmp_path / "config")
        with patch("filesync.sources.create_s3_client") as mock_create:
            open_source("s3://bucket", cfg=cfg)

        mock_create.assert_called_once_with(cfg)

    def test_create_s3_client_uses_config(self, tmp_path, monkeypatch):
        """The boto3 client should get endpoint, region, retries and timeouts."""
        monkeypatch.setenv("FILESYNC_S3_ENDPOINT_URL", "http://localhost:9000")
        monkeypatch.setenv("FILESYNC_S3_REGION", "eu-west-1")
        monkeypatch.setenv("FILESYNC_S3_MAX_ATTEMPTS", "2")
        monkeypatch.setenv("FILESYNC_S3_TIMEOUT", "7")
        cfg = Config(config_file=tmp_path / "config")

        with patch("boto3.session.Session") as mock_session:
            create_s3_client(cfg)

        mock_session.assert_called_once_with(profile_name=None)
        kwargs = mock_session.return_value.client.call_args.kwargs
        assert kwargs["endpoint_url"] == "http://localhost:9000"
        assert kwargs["region_name"] == "eu-west-1"
        assert kwargs["config"].retries == {"max_attempts": 2, "mode": "standard"}
        assert kwargs["config"].connect_timeout == 7.0
        assert kwargs["config"].read_timeout == 7.0

    def test_etag_setting_reaches_s3_source(self, tmp_path, monkeypatch):
        """FILESYNC_S3_ETAG_AS_MD5=false should disable the ETag shortcut."""
        monkeypatch.setenv("FILESYNC_S3_ETAG_AS_MD5", "false")
        cfg = Config(config_file=tmp_path / "config")

        source = open_source("s3://bucket", cfg=cfg, client=MagicMock())

        assert source.use_etag_as_hash is False

    def test_explicit_etag_argument_wins(self, tmp_path, monkeypatch):
        """An explicit use_etag_as_hash should override the setting."""
        monkeypatch.setenv("FILESYNC_S3_ETAG_AS_MD5", "no")
        cfg = Config(config_file=tmp_path / "config")

        source = open_source(
            "s3://bucket", cfg=cfg, client=MagicMock(), use_etag_as_hash=True
        )

        assert source.use_etag_as_hash is True

    def test_invalid_etag_setting(self, tmp_path, monkeypatch):
        """Values other than true/false should be rejected."""
        monkeypatch.setenv("FILESYNC_S3_ETAG_AS_MD5", "maybe")

        with pytest.raises(ConfigError, match="true or false"):
            Config(config_file=tmp_path / "config").s3_etag_as_md5

    def test_destination_can_skip_ignore_files(self, tmp_path):
        """use_ignore_files should reach the local scanner."""
        source = open_source(str(tmp_path), use_ignore_files=False)

        assert source.scanner.use_ignore_files is False
