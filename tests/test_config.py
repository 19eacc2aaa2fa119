"""Tests for config.py module."""

from pathlib import Path

import pytest

from kubeseal_keyring.config import Settings
from kubeseal_keyring.exceptions import ConfigurationError


class TestSettingsDefaults:
    """Tests for default settings."""

    def test_defaults(self):
        """Test the built-in names and key parameters."""
        settings = Settings()

        assert settings.secret_name == "scholar-spark/sealed-secrets/master-key"
        assert settings.backup_secret_name == "scholar-spark/sealed-secrets/master-key-backups"
        assert settings.backup_dir == Path("./key-backup")
        assert settings.key_bits == 4096
        assert settings.validity_days == 3650
        assert settings.region is None

    def test_tag_list(self):
        """Test tags are rendered the way boto3 expects."""
        assert Settings().tag_list == [
            {"Key": "Environment", "Value": "Production"},
            {"Key": "Application", "Value": "ScholarSpark"},
        ]


class TestSettingsFromEnv:
    """Tests for Settings.from_env."""

    def test_empty_environment_gives_defaults(self):
        """Test no variables means default settings."""
        assert Settings.from_env({}) == Settings()

    def test_prefixed_variables(self):
        """Test prefixed variables override fields."""
        settings = Settings.from_env(
            {
                "KUBESEAL_KEYRING_SECRET_NAME": "team/key",
                "KUBESEAL_KEYRING_BACKUP_DIR": "/tmp/backups",
                "KUBESEAL_KEYRING_KEY_BITS": "2048",
                "KUBESEAL_KEYRING_BUCKET": "",
            }
        )

        assert settings.secret_name == "team/key"
        assert settings.backup_dir == Path("/tmp/backups")
        assert settings.key_bits == 2048
        assert settings.bucket == Settings().bucket

    def test_aws_variables(self):
        """Test the standard AWS variables set region and profile."""
        settings = Settings.from_env({"AWS_DEFAULT_REGION": "us-west-2", "AWS_PROFILE": "ops"})

        assert settings.region == "us-west-2"
        assert settings.profile == "ops"

    def test_aws_region_wins_over_default_region(self):
        """Test AWS_REGION takes precedence over AWS_DEFAULT_REGION."""
        settings = Settings.from_env({"AWS_REGION": "eu-west-1", "AWS_DEFAULT_REGION": "us-west-2"})

        assert settings.region == "eu-west-1"

    @pytest.mark.parametrize("raw", ["many", "0", "-5"])
    def test_invalid_integers(self, raw):
        """Test non-positive or non-numeric integers are rejected."""
        with pytest.raises(ConfigurationError, match="KUBESEAL_KEYRING_VALIDITY_DAYS"):
            Settings.from_env({"KUBESEAL_KEYRING_VALIDITY_DAYS": raw})


class TestSettingsReplace:
    """Tests for Settings.replace."""

    def test_none_values_are_ignored(self):
        """Test None leaves a field untouched."""
        settings = Settings(secret_name="a").replace(secret_name=None, region="eu-west-1")

        assert settings.secret_name == "a"
        assert settings.region == "eu-west-1"

    def test_backup_dir_becomes_path(self):
        """Test a string backup directory is converted to a Path."""
        assert Settings().replace(backup_dir="/srv/keys").backup_dir == Path("/srv/keys")
