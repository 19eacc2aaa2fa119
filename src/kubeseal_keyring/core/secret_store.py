"""AWS Secrets Manager access.

This module provides the SecretStore class, the only place that talks to
Secrets Manager. Every botocore failure is translated into the package's
exception hierarchy here.
"""

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from icecream import ic

from kubeseal_keyring.exceptions import SecretNotFoundError, SecretStoreError
from kubeseal_keyring.models import SecretVersion

NOT_FOUND = "ResourceNotFoundException"
CURRENT_STAGE = "AWSCURRENT"


def _error_code(err: ClientError) -> str:
    return str(err.response.get("Error", {}).get("Code", ""))


def _error_message(err: ClientError) -> str:
    return str(err.response.get("Error", {}).get("Message", "")) or str(err)


class SecretStore:
    """Reads and writes versioned secret strings.

    Attributes:
        client: A boto3 ``secretsmanager`` client.

    """

    def __init__(self, client: Any) -> None:
        """Initialize SecretStore.

        Args:
            client: A boto3 ``secretsmanager`` client (or a compatible fake).

        """
        self.client = client

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        region = getattr(getattr(self.client, "meta", None), "region_name", None)
        return f"SecretStore(region={region!r})"

    def _call(self, operation: str, secret_id: str, **kwargs: Any) -> dict[str, Any]:
        ic(operation, secret_id)
        try:
            return getattr(self.client, operation)(**kwargs)
        except ClientError as err:
            if _error_code(err) == NOT_FOUND:
                raise SecretNotFoundError(f"Secret '{secret_id}' not found in AWS Secrets Manager") from err
            raise SecretStoreError(f"{operation} on '{secret_id}' failed: {_error_message(err)}") from err
        except BotoCoreError as err:
            raise SecretStoreError(f"{operation} on '{secret_id}' failed: {err}") from err

    def exists(self, secret_id: str) -> bool:
        """Check whether a secret exists.

        Args:
            secret_id: Name or ARN of the secret.

        Returns:
            True if the secret exists.

        """
        try:
            self._call("describe_secret", secret_id, SecretId=secret_id)
        except SecretNotFoundError:
            return False
        return True

    def get(
        self,
        secret_id: str,
        *,
        version_id: str | None = None,
        version_stage: str | None = None,
    ) -> str:
        """Fetch a secret string.

        Args:
            secret_id: Name or ARN of the secret.
            version_id: Fetch a specific version.
            version_stage: Fetch the version carrying this stage label.

        Returns:
            The SecretString.

        Raises:
            SecretNotFoundError: If the secret or version does not exist or is empty.

        """
        kwargs: dict[str, Any] = {"SecretId": secret_id}
        if version_id:
            kwargs["VersionId"] = version_id
        if version_stage:
            kwargs["VersionStage"] = version_stage

        response = self._call("get_secret_value", secret_id, **kwargs)
        value = response.get("SecretString")
        if not value:
            raise SecretNotFoundError(f"Secret '{secret_id}' has no string value")
        return str(value)

    def create(self, secret_id: str, value: str, *, description: str, tags: list[dict[str, str]]) -> str:
        """Create a new secret.

        Returns:
            The VersionId of the initial version.

        """
        response = self._call(
            "create_secret",
            secret_id,
            Name=secret_id,
            Description=description,
            SecretString=value,
            Tags=tags,
        )
        return str(response.get("VersionId", ""))

    def update(self, secret_id: str, value: str) -> str:
        """Replace the current value of an existing secret.

        Returns:
            The VersionId of the new version.

        """
        response = self._call("update_secret", secret_id, SecretId=secret_id, SecretString=value)
        return str(response.get("VersionId", ""))

    def put(self, secret_id: str, value: str, *, description: str, tags: list[dict[str, str]]) -> bool:
        """Update a secret, creating it when it does not exist yet.

        Returns:
            True if the secret was created, False if it was updated.

        """
        if self.exists(secret_id):
            self.update(secret_id, value)
            return False
        self.create(secret_id, value, description=description, tags=tags)
        return True

    def archive(
        self,
        secret_id: str,
        value: str,
        *,
        tag: str,
        description: str,
        tags: list[dict[str, str]],
    ) -> str:
        """Store a value as a new version of the backup secret labelled ``tag``.

        The backup secret is created on first use; its initial version is
        labelled as well, so every archive can be fetched by its tag.

        Args:
            secret_id: The backup secret.
            value: The record to archive.
            tag: Version stage label, e.g. ``Backup-20240101-120000``.
            description: Description used if the secret is created.
            tags: Resource tags used if the secret is created.

        Returns:
            The VersionId holding the archive.

        """
        if self.exists(secret_id):
            response = self._call(
                "put_secret_value",
                secret_id,
                SecretId=secret_id,
                SecretString=value,
                VersionStages=[CURRENT_STAGE, tag],
            )
            return str(response.get("VersionId", ""))

        version_id = self.create(secret_id, value, description=description, tags=tags)
        self._call(
            "update_secret_version_stage",
            secret_id,
            SecretId=secret_id,
            VersionStage=tag,
            MoveToVersionId=version_id,
        )
        return version_id

    def list_versions(self, secret_id: str) -> list[SecretVersion]:
        """List every version of a secret, newest first.

        Args:
            secret_id: Name or ARN of the secret.

        Returns:
            The versions, including deprecated ones.

        """
        entries: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {"SecretId": secret_id, "IncludeDeprecated": True}
        while True:
            response = self._call("list_secret_version_ids", secret_id, **kwargs)
            entries.extend(response.get("Versions", []))
            token = response.get("NextToken")
            if not token:
                break
            kwargs["NextToken"] = token

        entries.sort(key=lambda v: str(v.get("CreatedDate", "")), reverse=True)
        return [
            SecretVersion(
                version_id=str(entry["VersionId"]),
                stages=tuple(entry.get("VersionStages", [])),
                created=str(entry.get("CreatedDate", "")),
            )
            for entry in entries
        ]
