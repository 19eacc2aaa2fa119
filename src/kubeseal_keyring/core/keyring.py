"""Keyring facade class.

This module provides the Keyring class which serves as the main entry point
for all master key operations, wiring the AWS clients, the settings and the
run timestamp into the individual procedures.
"""

from datetime import datetime
from typing import Any

import boto3
from icecream import ic

from kubeseal_keyring import console, prompts
from kubeseal_keyring.config import Settings
from kubeseal_keyring.core.object_store import ObjectStore
from kubeseal_keyring.core.secret_store import SecretStore
from kubeseal_keyring.host import create_session, require_binaries
from kubeseal_keyring.keys.openssl import OPENSSL
from kubeseal_keyring.models import TIMESTAMP_FORMAT, ArchivedKey, BackupResult
from kubeseal_keyring.procedures.backup import backup_master_key
from kubeseal_keyring.procedures.provision import setup_master_key
from kubeseal_keyring.procedures.recovery import RecoveryRequest, recover_master_key
from kubeseal_keyring.procedures.rotation import rotate_master_key


class Keyring:
    """Manages the sealed-secrets master key stored in AWS.

    Every artifact produced during one Keyring's lifetime shares the same
    timestamp, so the files of one run sort together.

    Attributes:
        settings: Names, paths and key parameters.
        session: The boto3 session used for every client.
        started_at: Local time the run started.
        timestamp: ``started_at`` formatted for file names and version tags.
        secrets: Secrets Manager access.

    """

    def __init__(
        self,
        settings: Settings,
        *,
        session: boto3.Session | None = None,
        started_at: datetime | None = None,
    ) -> None:
        """Initialize Keyring and resolve AWS credentials.

        Args:
            settings: Names, paths and key parameters.
            session: Pre-built session, resolved from settings when omitted.
            started_at: Run start time, defaults to now.

        Raises:
            CredentialsError: If no AWS credentials are available.

        """
        self.settings: Settings = settings
        self.session: boto3.Session = session if session is not None else create_session(settings)
        self.started_at: datetime = started_at or datetime.now()
        self.timestamp: str = self.started_at.strftime(TIMESTAMP_FORMAT)
        self._clients: list[Any] = []
        self.secrets: SecretStore = SecretStore(self._client("secretsmanager"))
        self._objects: ObjectStore | None = None
        ic(self.settings, self.timestamp)

    def __enter__(self) -> "Keyring":
        """Enter context manager.

        Returns:
            The Keyring instance.

        """
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        """Exit context manager and close the AWS clients."""
        self.close()

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Keyring(secret={self.settings.secret_name!r}, timestamp={self.timestamp!r})"

    def _client(self, service: str) -> Any:
        client = self.session.client(service)
        self._clients.append(client)
        return client

    def close(self) -> None:
        """Close every client created by this instance."""
        for client in self._clients:
            closer = getattr(client, "close", None)
            if callable(closer):
                closer()
        self._clients.clear()

    @property
    def objects(self) -> ObjectStore:
        """S3 access, created on first use."""
        if self._objects is None:
            self._objects = ObjectStore(self._client("s3"))
        return self._objects

    @property
    def region(self) -> str | None:
        """The region the session resolved."""
        return self.session.region_name

    def _offer_backup(self) -> None:
        if prompts.confirm("Do you want to run the backup now?", default=True):
            console.newline()
            console.action("Running backup")
            self.backup()

    def setup(self) -> ArchivedKey:
        """Generate a new master key and store it as the current record.

        Returns:
            The YAML mirror and backup tag of the new key.

        """
        require_binaries(OPENSSL)
        return setup_master_key(store=self.secrets, settings=self.settings, timestamp=self.timestamp)

    def backup(
        self,
        *,
        encrypt: bool | None = None,
        upload: bool | None = None,
        to_aws_backup: bool | None = None,
        bucket: str | None = None,
    ) -> BackupResult:
        """Back up the current master key.

        Args:
            encrypt: Encrypt local copies; None asks.
            upload: Upload copies to S3; None asks.
            to_aws_backup: Archive in the backup secret; None asks.
            bucket: Bucket overriding the configured one.

        Returns:
            Where the copies ended up.

        """
        return backup_master_key(
            store=self.secrets,
            objects=lambda: self.objects,
            settings=self.settings,
            timestamp=self.timestamp,
            encrypt=encrypt,
            upload=upload,
            to_aws_backup=to_aws_backup,
            bucket=bucket,
            region=self.region,
            check_encryption_tools=lambda: require_binaries(OPENSSL),
        )

    def rotate(self) -> ArchivedKey:
        """Replace the current master key with a new one of the same name.

        Returns:
            The local copies of the new key and the archive tag of the old one.

        """
        require_binaries(OPENSSL)
        result = rotate_master_key(
            store=self.secrets,
            settings=self.settings,
            timestamp=self.timestamp,
            now=self.started_at,
        )
        self._offer_backup()
        return result

    def recover(self, request: RecoveryRequest) -> ArchivedKey:
        """Restore a backed-up record as the current master key.

        Args:
            request: The validated replacement source.

        Returns:
            The YAML mirror of the restored key and the archive tag of the prior one.

        """
        result = recover_master_key(
            request,
            store=self.secrets,
            objects=lambda: self.objects,
            settings=self.settings,
            timestamp=self.timestamp,
            now=self.started_at,
        )
        self._offer_backup()
        return result
