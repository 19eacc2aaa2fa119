"""Helpers shared by the key procedures."""

from pathlib import Path

from kubeseal_keyring import console
from kubeseal_keyring.config import Settings
from kubeseal_keyring.core.secret_store import SecretStore
from kubeseal_keyring.keys.records import KeyRecord, write_record_json, write_record_yaml
from kubeseal_keyring.models import ArchivedKey

FILE_STEM = "sealed-secrets-key"


def artifact_path(settings: Settings, label: str, timestamp: str, suffix: str) -> Path:
    """Build the path of a timestamped local artifact.

    Args:
        settings: Settings carrying the backup directory.
        label: Middle part of the name, e.g. ``before-rotation``; empty for none.
        timestamp: Run timestamp.
        suffix: File suffix including the dot, e.g. ``.json``.

    Returns:
        ``<backup_dir>/sealed-secrets-key[-<label>]-<timestamp><suffix>``

    """
    middle = f"-{label}" if label else ""
    return settings.backup_dir / f"{FILE_STEM}{middle}-{timestamp}{suffix}"


def save_local_copies(
    record: KeyRecord,
    settings: Settings,
    *,
    label: str,
    timestamp: str,
    json_copy: bool = True,
    yaml_copy: bool = True,
) -> ArchivedKey:
    """Write the JSON record and/or its YAML mirror to the backup directory.

    Returns:
        The paths written, None for skipped copies.

    """
    json_path = None
    yaml_path = None
    if json_copy:
        json_path = write_record_json(record, artifact_path(settings, label, timestamp, ".json"))
        console.success(f"Key saved to {console.highlight(str(json_path))}")
    if yaml_copy:
        yaml_path = write_record_yaml(record, artifact_path(settings, label, timestamp, ".yaml"))
        console.success(f"YAML version created at {console.highlight(str(yaml_path))}")
    return ArchivedKey(json_path=json_path, yaml_path=yaml_path)


def backup_description(settings: Settings) -> str:
    """Description of the backup secret when it has to be created."""
    return f"Backups of Sealed Secrets master keys for {settings.application}"


def master_key_description(settings: Settings, *, emergency: bool = False) -> str:
    """Description of the current master key secret when it has to be created."""
    suffix = " (Emergency Recovery)" if emergency else ""
    return f"Sealed Secrets master key for {settings.application}{suffix}"


def archive_in_backup_secret(store: SecretStore, settings: Settings, value: str, tag: str) -> str:
    """Store a record as a tagged version of the backup secret.

    Returns:
        The tag, for reporting.

    """
    with console.spinner("Archiving key in AWS Secrets Manager..."):
        store.archive(
            settings.backup_secret_name,
            value,
            tag=tag,
            description=backup_description(settings),
            tags=settings.tag_list,
        )
    console.success(f"Key archived in {console.highlight(settings.backup_secret_name)} with version tag {console.highlight(tag)}")
    return tag
