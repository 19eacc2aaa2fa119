"""Initial master key setup.

Generates a new master key and stores it as the current record, archiving
whatever was stored before when the operator asks for it.
"""

from kubeseal_keyring import console, prompts
from kubeseal_keyring.config import Settings
from kubeseal_keyring.core.secret_store import SecretStore
from kubeseal_keyring.keys.generation import generate_key_pair
from kubeseal_keyring.keys.records import KeyRecord
from kubeseal_keyring.models import ArchivedKey, TagPrefix, version_tag
from kubeseal_keyring.procedures.common import (
    archive_in_backup_secret,
    master_key_description,
    save_local_copies,
)

_BANNER = (
    "This will generate a new Sealed Secrets master key and store it in AWS Secrets Manager.",
    "This is a sensitive operation that should only be performed:",
    "  - By authorized team leads",
    "  - During initial setup",
    "  - After a planned key rotation",
    "",
    "If you need to rotate an existing key, use the rotate command instead.",
)


def _back_up_existing(store: SecretStore, settings: Settings, timestamp: str) -> ArchivedKey:
    console.action("Backing up existing key")
    existing = KeyRecord.from_json(store.get(settings.secret_name))
    tag = archive_in_backup_secret(
        store, settings, existing.to_json(), version_tag(TagPrefix.BACKUP, timestamp)
    )
    local = save_local_copies(existing, settings, label="backup", timestamp=timestamp)
    return local._replace(tag=tag)


def setup_master_key(*, store: SecretStore, settings: Settings, timestamp: str) -> ArchivedKey:
    """Generate a new master key and store it as the current record.

    Args:
        store: Secrets Manager access.
        settings: Names, paths and key parameters.
        timestamp: Run timestamp shared by every artifact.

    Returns:
        The YAML mirror of the new key and its backup secret tag.

    Raises:
        OperationCancelled: If the operator declines.

    """
    console.warning_banner("!!! WARNING !!!", _BANNER)
    prompts.require_confirmation("Are you sure you want to proceed?")

    previous: ArchivedKey | None = None
    if store.exists(settings.secret_name):
        console.warning("A master key already exists in AWS Secrets Manager.")
        if prompts.confirm("Do you want to back up the existing key before proceeding?", default=True):
            previous = _back_up_existing(store, settings, timestamp)
        prompts.require_confirmation("Do you want to continue and overwrite the existing key?")

    console.action("Generating new master key")
    pair = generate_key_pair(subject=settings.subject, days=settings.validity_days, bits=settings.key_bits)
    record = KeyRecord.from_pem(
        name=settings.key_name,
        namespace=settings.namespace,
        cert=pair.cert,
        key=pair.key,
    )
    value = record.to_json()

    console.action("Storing master key in AWS Secrets Manager")
    with console.spinner("Writing master key..."):
        created = store.put(
            settings.secret_name,
            value,
            description=master_key_description(settings),
            tags=settings.tag_list,
        )
    console.success(f"Master key {'created' if created else 'updated'} in {console.highlight(settings.secret_name)}")

    tag = archive_in_backup_secret(store, settings, value, version_tag(TagPrefix.INITIAL, timestamp))
    local = save_local_copies(record, settings, label="", timestamp=timestamp, json_copy=False)

    summary = {
        "Key": settings.secret_name,
        "Backup": f"{settings.backup_secret_name} (version: {tag})",
        "YAML": str(local.yaml_path),
    }
    if previous is not None:
        summary["Previous key"] = f"{previous.yaml_path} (version: {previous.tag})"

    console.newline()
    console.summary_panel("Master Key Setup Complete", summary)
    console.warning("Distribute the YAML key file to developers who need to update their sealed-secrets-controller.")
    console.next_steps(
        [
            "Run the backup command to create additional backups",
            "Store backups in secure locations according to security policy",
            "Distribute the YAML key file to developers",
        ]
    )
    return local._replace(tag=tag)
