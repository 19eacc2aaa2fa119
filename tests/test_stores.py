"""Tests for the Secrets Manager and S3 wrappers."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from kubeseal_keyring.core.object_store import ObjectStore, s3_uri
from kubeseal_keyring.core.secret_store import SecretStore
from kubeseal_keyring.exceptions import ObjectStoreError, SecretNotFoundError, SecretStoreError


def client_error(code, operation, message):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class TestSecretStore:
    """Tests for SecretStore."""

    def test_missing_secret(self, fake_secretsmanager):
        """Test a missing secret is reported as not found."""
        store = SecretStore(fake_secretsmanager)

        assert store.exists("absent") is False
        with pytest.raises(SecretNotFoundError, match="absent"):
            store.get("absent")

    def test_put_creates_then_updates(self, fake_secretsmanager):
        """Test put creates a missing secret and updates an existing one."""
        store = SecretStore(fake_secretsmanager)

        assert store.put("key", "v1", description="d", tags=[{"Key": "a", "Value": "b"}]) is True
        assert store.put("key", "v2", description="d", tags=[]) is False
        assert store.get("key") == "v2"
        assert store.get("key", version_stage="AWSPREVIOUS") == "v1"
        assert fake_secretsmanager.secrets["key"]["tags"] == [{"Key": "a", "Value": "b"}]

    def test_archive_creates_tagged_secret(self, fake_secretsmanager):
        """Test the first archive creates the backup secret and labels its version."""
        store = SecretStore(fake_secretsmanager)

        version_id = store.archive("backups", "v1", tag="Initial-20240101-000000", description="d", tags=[])

        assert store.get("backups", version_stage="Initial-20240101-000000") == "v1"
        assert store.get("backups", version_id=version_id) == "v1"

    def test_archive_keeps_older_tags(self, fake_secretsmanager):
        """Test later archives stay reachable next to older ones."""
        store = SecretStore(fake_secretsmanager)
        store.archive("backups", "v1", tag="Initial-1", description="d", tags=[])
        store.archive("backups", "v2", tag="Backup-2", description="d", tags=[])

        assert store.get("backups") == "v2"
        assert store.get("backups", version_stage="Initial-1") == "v1"
        assert store.get("backups", version_stage="Backup-2") == "v2"

    def test_list_versions_newest_first(self, fake_secretsmanager):
        """Test versions are listed newest first with their stages."""
        store = SecretStore(fake_secretsmanager)
        store.archive("backups", "v1", tag="Initial-1", description="d", tags=[])
        store.archive("backups", "v2", tag="Backup-2", description="d", tags=[])

        versions = store.list_versions("backups")

        assert len(versions) == 2
        assert "Backup-2" in versions[0].stages
        assert "Initial-1" in versions[1].stages

    def test_list_versions_follows_pages(self):
        """Test every page of versions is collected."""
        client = MagicMock()
        client.list_secret_version_ids.side_effect = [
            {"Versions": [{"VersionId": "a", "VersionStages": ["AWSCURRENT"], "CreatedDate": "2024"}], "NextToken": "t"},
            {"Versions": [{"VersionId": "b", "VersionStages": [], "CreatedDate": "2023"}]},
        ]

        versions = SecretStore(client).list_versions("backups")

        assert [v.version_id for v in versions] == ["a", "b"]
        assert client.list_secret_version_ids.call_args.kwargs["NextToken"] == "t"

    def test_empty_value_is_not_found(self):
        """Test a secret without a string value is treated as missing."""
        client = MagicMock()
        client.get_secret_value.return_value = {"SecretString": ""}

        with pytest.raises(SecretNotFoundError):
            SecretStore(client).get("key")

    def test_access_denied(self):
        """Test other client errors raise SecretStoreError."""
        client = MagicMock()
        client.update_secret.side_effect = client_error("AccessDeniedException", "UpdateSecret", "denied")

        with pytest.raises(SecretStoreError, match="denied"):
            SecretStore(client).update("key", "value")

    def test_connection_failure(self):
        """Test botocore failures raise SecretStoreError."""
        client = MagicMock()
        client.describe_secret.side_effect = EndpointConnectionError(endpoint_url="https://example")

        with pytest.raises(SecretStoreError):
            SecretStore(client).exists("key")


class TestObjectStore:
    """Tests for ObjectStore."""

    def test_s3_uri(self):
        """Test URI formatting."""
        assert s3_uri("bucket", "a/b.json") == "s3://bucket/a/b.json"

    def test_bucket_exists(self, fake_s3):
        """Test head_bucket results are mapped to booleans."""
        fake_s3.buckets["present"] = {}
        store = ObjectStore(fake_s3)

        assert store.bucket_exists("present") is True
        assert store.bucket_exists("absent") is False

    def test_forbidden_bucket_is_an_error(self):
        """Test a bucket owned by someone else is not reported as missing."""
        client = MagicMock()
        client.head_bucket.side_effect = client_error("403", "HeadBucket", "Forbidden")

        with pytest.raises(ObjectStoreError, match="Cannot access bucket"):
            ObjectStore(client).bucket_exists("theirs")

    def test_create_bucket_outside_us_east_1(self, fake_s3):
        """Test bucket creation sets location, versioning and encryption."""
        ObjectStore(fake_s3).create_bucket("backups", "eu-west-1")

        config = fake_s3.bucket_config["backups"]
        assert config["location"] == {"LocationConstraint": "eu-west-1"}
        assert config["versioning"] == {"Status": "Enabled"}
        rule = config["encryption"]["Rules"][0]
        assert rule["ApplyServerSideEncryptionByDefault"]["SSEAlgorithm"] == "AES256"

    def test_create_bucket_in_us_east_1(self, fake_s3):
        """Test us-east-1 buckets are created without a location constraint."""
        ObjectStore(fake_s3).create_bucket("backups", "us-east-1")

        assert fake_s3.bucket_config["backups"]["location"] is None

    def test_upload_uses_sse(self, fake_s3, tmp_path):
        """Test uploads request server-side encryption and return the URI."""
        fake_s3.buckets["backups"] = {}
        path = tmp_path / "key.json"
        path.write_text("{}")

        uri = ObjectStore(fake_s3).upload(path, "backups", "prefix/key.json")

        assert uri == "s3://backups/prefix/key.json"
        assert fake_s3.buckets["backups"]["prefix/key.json"] == b"{}"
        assert fake_s3.upload_args == [{"ServerSideEncryption": "AES256"}]

    def test_upload_failure(self, fake_s3, tmp_path):
        """Test a failed upload raises ObjectStoreError."""
        path = tmp_path / "key.json"
        path.write_text("{}")

        with pytest.raises(ObjectStoreError, match="Failed to upload"):
            ObjectStore(fake_s3).upload(path, "absent", "key.json")

    def test_download_missing_object(self, fake_s3, tmp_path):
        """Test downloading a missing object raises ObjectStoreError."""
        with pytest.raises(ObjectStoreError, match="does not exist"):
            ObjectStore(fake_s3).download("backups", "nope.json", tmp_path / "x.json")
