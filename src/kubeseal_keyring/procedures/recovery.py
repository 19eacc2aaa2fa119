"""Emergency recovery of the master key.

Restores a previously backed-up record as the current master key. The
replacement can come from a local file, from S3 or from a version of the
backup secret. Whatever is currently stored is archived first.
"""

import re
import tempfile
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import NamedTuple

from icecream import ic

from kubeseal_keyring import console, prompts
from kubeseal_keyring.config import Settings
from kubeseal_keyring.core.object_store import ObjectStore, s3_uri
from kubeseal_keyring.core.secret_store import SecretStore
from kubeseal_keyring.exceptions import RecoverySourceError, SecretNotFoundError
from kubeseal_keyring.keys.audit import RECOVERY_LOG, append_log, format_when
from kubeseal_keyring.keys.records import KeyRecord, load_record_file
from kubeseal_keyring.models import ArchivedKey, KeySource, TagPrefix, version_tag
from kubeseal_keyring.procedures.common import (
    archive_in_backup_secret,
    artifact_path,
    master_key_description,
    save_local_copies,
)

# Secrets Manager version ids are UUIDs; anything else is treated as a stage label
_VERSION_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{8}-(?:[0-9a-fA-F]{4}-){3}[0-9a-fA-F]{12}$")

_BANNER = (
    "This will replace the current Sealed Secrets master key in AWS Secrets Manager.",
    "This is a sensitive operation that should only be performed:",
    "  - By authorized team leads",
    "  - In emergency situations when the current key is compromised or lost",
    "  - After notifying all team members",
    "",
    "The recovery process:",
    "  1. Backs up the current key from AWS (if it exists)",
    "  2. Restores the backup key to AWS Secrets Manager",
    "  3. Creates a YAML version of the key for Kubernetes applications",
)


class RecoveryRequest(NamedTuple):
    """A validated choice of replacement key.

    Attributes:
        source: Where the key comes from.
        key_file: Local JSON record (file source).
        s3_key: Object key inside the bucket (s3 source).
        bucket: Bucket to read from (s3 source).
        version: Version id or stage label (aws-backup source).

    """

    source: KeySource
    key_file: Path | None = None
    s3_key: str | None = None
    bucket: str | None = None
    version: str | None = None

    def describe(self, settings: Settings) -> str:
        """Human readable origin, used in logs and summaries."""
        match self.source:
            case KeySource.FILE:
                return str(self.key_file)
            case KeySource.S3:
                return s3_uri(self.bucket or settings.bucket, self.s3_key or "")
            case _:
                return f"{settings.backup_secret_name} (version: {self.version})"


def build_request(
    *,
    key_file: str | None,
    from_s3: bool,
    s3_key: str | None,
    bucket: str | None,
    from_aws_backup: bool,
    aws_version_id: str | None,
) -> RecoveryRequest:
    """Validate the recovery source options.

    Raises:
        RecoverySourceError: If the options do not name exactly one complete source.

    """
    flags = (
        ("--key-file", bool(key_file)),
        ("--from-s3", from_s3),
        ("--from-aws-backup", from_aws_backup),
    )
    chosen = [name for name, picked in flags if picked]
    if not chosen:
        raise RecoverySourceError(
            "No key source specified. Please specify one of: --key-file, --from-aws-backup, or --from-s3."
        )
    if len(chosen) > 1:
        raise RecoverySourceError(f"Only one key source may be specified, got: {', '.join(chosen)}")
    if s3_key and not from_s3:
        raise RecoverySourceError("--s3-key requires --from-s3.")
    if bucket and not from_s3:
        raise RecoverySourceError("--bucket requires --from-s3.")
    if aws_version_id and not from_aws_backup:
        raise RecoverySourceError("--aws-version-id requires --from-aws-backup.")

    if from_aws_backup:
        if not aws_version_id:
            raise RecoverySourceError("--aws-version-id is required with --from-aws-backup.")
        return RecoveryRequest(source=KeySource.AWS_BACKUP, version=aws_version_id)

    if from_s3:
        if not s3_key:
            raise RecoverySourceError("--s3-key is required with --from-s3.")
        return RecoveryRequest(source=KeySource.S3, s3_key=s3_key, bucket=bucket)

    return RecoveryRequest(source=KeySource.FILE, key_file=Path(str(key_file)))


def is_version_id(value: str) -> bool:
    """Return True when value looks like a Secrets Manager version id."""
    return bool(_VERSION_ID_PATTERN.match(value))


def _load_from_backup_secret(store: SecretStore, settings: Settings, version: str) -> KeyRecord:
    console.action("Retrieving key from AWS Secrets Manager backup")
    if not store.exists(settings.backup_secret_name):
        raise SecretNotFoundError("Backup secret not found in AWS Secrets Manager.")

    versions = store.list_versions(settings.backup_secret_name)
    console.versions_table(
        "Available backup versions",
        [(v.version_id, ", ".join(v.stages) or "-", v.created) for v in versions],
    )

    if is_version_id(version):
        text = store.get(settings.backup_secret_name, version_id=version)
    else:
        text = store.get(settings.backup_secret_name, version_stage=version)
    console.success("Key retrieved from AWS Secrets Manager backup.")
    return KeyRecord.from_json(text)


def _load_from_s3(objects: ObjectStore, bucket: str, key: str) -> KeyRecord:
    console.action("Retrieving key from AWS S3")
    with tempfile.TemporaryDirectory(prefix="kubeseal-keyring-") as tmp:
        dest = Path(tmp) / "s3-key.json"
        with console.spinner(f"Downloading {s3_uri(bucket, key)}..."):
            objects.download(bucket, key, dest)
        record = load_record_file(dest)
    console.success("Key retrieved from AWS S3.")
    return record


def load_replacement(
    request: RecoveryRequest,
    *,
    store: SecretStore,
    objects: Callable[[], ObjectStore],
    settings: Settings,
) -> KeyRecord:
    """Fetch and validate the replacement record.

    Raises:
        KeyRecordError: If the record is not valid.
        KeyFileNotFoundError: If the local file does not exist.
        SecretNotFoundError: If the backup secret or version does not exist.
        ObjectStoreError: If the S3 object cannot be downloaded.

    """
    ic(request)
    match request.source:
        case KeySource.AWS_BACKUP:
            return _load_from_backup_secret(store, settings, str(request.version))
        case KeySource.S3:
            return _load_from_s3(objects(), request.bucket or settings.bucket, str(request.s3_key))
        case _:
            return load_record_file(Path(str(request.key_file)))


def recover_master_key(
    request: RecoveryRequest,
    *,
    store: SecretStore,
    objects: Callable[[], ObjectStore],
    settings: Settings,
    timestamp: str,
    now: datetime,
) -> ArchivedKey:
    """Restore a backed-up record as the current master key.

    Args:
        request: The validated replacement source.
        store: Secrets Manager access.
        objects: Factory for S3 access, only called for the s3 source.
        settings: Names and paths.
        timestamp: Run timestamp shared by every artifact.
        now: Wall clock time of the run, used for log entries.

    Returns:
        The YAML mirror of the restored key and the tag of the archived prior key.

    Raises:
        PreconditionError: If the team was not notified.
        OperationCancelled: If the operator declines.

    """
    console.warning_banner("!!! EMERGENCY RECOVERY PROCEDURE !!!", _BANNER)
    prompts.require_precondition(
        "Have you notified the team about this emergency recovery?",
        "Please notify the team before proceeding with emergency recovery.",
    )
    prompts.require_confirmation("Are you sure you want to proceed with emergency recovery?")

    replacement = load_replacement(request, store=store, objects=objects, settings=settings)
    console.success(f"Replacement key {console.highlight(replacement.name)} is valid")

    previous_path: Path | None = None
    tag: str | None = None
    if store.exists(settings.secret_name):
        console.action("Backing up current master key from AWS")
        # Stored verbatim: the current value may be exactly what is broken
        current_text = store.get(settings.secret_name)
        previous_path = artifact_path(settings, "before-recovery", timestamp, ".json")
        previous_path.parent.mkdir(parents=True, exist_ok=True)
        previous_path.write_bytes(current_text.encode("utf-8"))
        tag = archive_in_backup_secret(store, settings, current_text, version_tag(TagPrefix.RECOVERY, timestamp))
        console.success(f"Current key backed up to {console.highlight(str(previous_path))}")

    console.action("Restoring backup key to AWS Secrets Manager")
    with console.spinner("Writing master key..."):
        created = store.put(
            settings.secret_name,
            replacement.to_json(),
            description=master_key_description(settings, emergency=True),
            tags=settings.tag_list,
        )
    if created:
        console.warning("Secret was not found in AWS Secrets Manager and has been created.")

    local = save_local_copies(replacement, settings, label="recovered", timestamp=timestamp, json_copy=False)

    log_path = settings.backup_dir / RECOVERY_LOG
    lines = [
        f"Emergency recovery performed on {format_when(now)}",
        f"Restored from: {request.describe(settings)}",
    ]
    if previous_path is not None:
        lines.append(f"Previous key backed up to: {previous_path}")
        lines.append(f"Previous key backed up to AWS Secrets Manager with version tag: {tag}")
    lines.append(f"YAML version created at: {local.yaml_path}")
    append_log(log_path, lines)

    summary = {
        "Key": settings.secret_name,
        "Restored from": request.describe(settings),
        "YAML": str(local.yaml_path),
        "Log": str(log_path),
    }
    if tag is not None:
        summary["Previous key"] = f"{settings.backup_secret_name} (version: {tag})"
    console.newline()
    console.summary_panel("Emergency Recovery Complete", summary)
    console.warning(
        "Distribute the YAML key file to all developers who need to update their sealed-secrets-controller."
    )
    console.next_steps(
        [
            "Run the backup command to create additional backups of the restored key",
            "Store backups in secure locations according to security policy",
            "Distribute the YAML key file to developers to update their sealed-secrets-controller",
            "Document this incident according to your incident response policy",
        ]
    )
    return local._replace(tag=tag)
