"""S3 access for off-site backup copies."""

from pathlib import Path
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from icecream import ic

from kubeseal_keyring.exceptions import ObjectStoreError

SSE_ALGORITHM = "AES256"
_MISSING_BUCKET_CODES = {"404", "NoSuchBucket", "NotFound"}
_MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound"}


def s3_uri(bucket: str, key: str) -> str:
    """Return the ``s3://`` URI of an object."""
    return f"s3://{bucket}/{key}"


class ObjectStore:
    """Uploads and downloads backup files.

    Attributes:
        client: A boto3 ``s3`` client.

    """

    def __init__(self, client: Any) -> None:
        """Initialize ObjectStore.

        Args:
            client: A boto3 ``s3`` client (or a compatible fake).

        """
        self.client = client

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        region = getattr(getattr(self.client, "meta", None), "region_name", None)
        return f"ObjectStore(region={region!r})"

    def bucket_exists(self, bucket: str) -> bool:
        """Check whether a bucket exists and is reachable.

        Args:
            bucket: Bucket name.

        Returns:
            True if ``head_bucket`` succeeds.

        Raises:
            ObjectStoreError: For failures other than a missing bucket.

        """
        ic(bucket)
        try:
            self.client.head_bucket(Bucket=bucket)
        except ClientError as err:
            code = str(err.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_BUCKET_CODES:
                return False
            raise ObjectStoreError(f"Cannot access bucket '{bucket}': {err}") from err
        except BotoCoreError as err:
            raise ObjectStoreError(f"Cannot access bucket '{bucket}': {err}") from err
        return True

    def create_bucket(self, bucket: str, region: str | None) -> None:
        """Create a versioned bucket with default server-side encryption.

        Args:
            bucket: Bucket name.
            region: Region to create the bucket in; None or us-east-1 need no constraint.

        Raises:
            ObjectStoreError: If any of the calls fail.

        """
        kwargs: dict[str, Any] = {"Bucket": bucket}
        if region and region != "us-east-1":
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}

        try:
            self.client.create_bucket(**kwargs)
            self.client.put_bucket_versioning(
                Bucket=bucket,
                VersioningConfiguration={"Status": "Enabled"},
            )
            self.client.put_bucket_encryption(
                Bucket=bucket,
                ServerSideEncryptionConfiguration={
                    "Rules": [{"ApplyServerSideEncryptionByDefault": {"SSEAlgorithm": SSE_ALGORITHM}}]
                },
            )
        except (ClientError, BotoCoreError) as err:
            raise ObjectStoreError(f"Failed to create bucket '{bucket}': {err}") from err

    def upload(self, path: Path, bucket: str, key: str) -> str:
        """Upload a file with server-side encryption.

        Args:
            path: Local file.
            bucket: Destination bucket.
            key: Destination object key.

        Returns:
            The object's ``s3://`` URI.

        Raises:
            ObjectStoreError: If the upload fails.

        """
        ic(path, bucket, key)
        try:
            self.client.upload_file(
                str(path),
                bucket,
                key,
                ExtraArgs={"ServerSideEncryption": SSE_ALGORITHM},
            )
        except (ClientError, BotoCoreError) as err:
            raise ObjectStoreError(f"Failed to upload {path} to {s3_uri(bucket, key)}: {err}") from err
        return s3_uri(bucket, key)

    def download(self, bucket: str, key: str, dest: Path) -> Path:
        """Download an object to a local file.

        Args:
            bucket: Source bucket.
            key: Source object key.
            dest: Local destination.

        Returns:
            The destination path.

        Raises:
            ObjectStoreError: If the object is missing or the download fails.

        """
        ic(bucket, key, dest)
        try:
            self.client.download_file(bucket, key, str(dest))
        except ClientError as err:
            code = str(err.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_OBJECT_CODES:
                raise ObjectStoreError(f"Object {s3_uri(bucket, key)} does not exist") from err
            raise ObjectStoreError(f"Failed to download {s3_uri(bucket, key)}: {err}") from err
        except BotoCoreError as err:
            raise ObjectStoreError(f"Failed to download {s3_uri(bucket, key)}: {err}") from err
        return dest
