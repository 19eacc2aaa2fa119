"""Master key rotation.

Archives the current record, replaces it with freshly generated material
under the same name and records both steps in ``rotation-log.txt``.
"""

from datetime import datetime, timezone

from kubeseal_keyring import console, prompts
from kubeseal_keyring.config import Settings
from kubeseal_keyring.core.secret_store import SecretStore
from kubeseal_keyring.exceptions import SecretNotFoundError
from kubeseal_keyring.keys.audit import ROTATION_LOG, append_log, format_when
from kubeseal_keyring.keys.generation import generate_key_pair
from kubeseal_keyring.keys.records import KeyRecord
from kubeseal_keyring.models import ArchivedKey, TagPrefix, version_tag
from kubeseal_keyring.procedures.common import archive_in_backup_secret, save_local_copies

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_BANNER = (
    "This will rotate the Sealed Secrets master key.",
    "This is a sensitive operation that should only be performed:",
    "  - By authorized team leads",
    "  - During scheduled maintenance windows",
    "  - After notifying all team members",
    "",
    "The rotation process:",
    "  1. Backs up the current key from AWS Secrets Manager",
    "  2. Generates a new key",
    "  3. Updates the key in AWS Secrets Manager",
    "  4. Creates both JSON and YAML versions of the new key",
    "",
    "After rotation, notify all developers to update their sealed-secrets-controller.",
)


def confirm_rotation() -> None:
    """Run the three rotation prompts.

    Raises:
        PreconditionError: If the team was not notified or no maintenance window is open.
        OperationCancelled: If the operator declines the final confirmation.

    """
    console.warning_banner("WARNING", _BANNER)
    prompts.require_precondition(
        "Have you notified the team about this rotation?",
        "Please notify the team before proceeding with key rotation.",
    )
    prompts.require_precondition(
        "Are you performing this rotation during a scheduled maintenance window?",
        "Please only perform key rotation during scheduled maintenance windows.",
    )
    prompts.require_confirmation("Are you sure you want to proceed with key rotation?")


def rotate_master_key(
    *,
    store: SecretStore,
    settings: Settings,
    timestamp: str,
    now: datetime,
) -> ArchivedKey:
    """Replace the current master key with a new one of the same name.

    Args:
        store: Secrets Manager access.
        settings: Names, paths and key parameters.
        timestamp: Run timestamp shared by every artifact.
        now: Wall clock time of the run, used for log entries.

    Returns:
        The local copies of the new key and the tag of the archived old key.

    Raises:
        SecretNotFoundError: If there is no current master key.

    """
    confirm_rotation()

    console.action("Checking for master key in AWS Secrets Manager")
    if not store.exists(settings.secret_name):
        raise SecretNotFoundError(
            "Master key not found in AWS Secrets Manager. Run the setup command first to create the master key."
        )

    console.action("Backing up current master key")
    with console.spinner("Fetching master key..."):
        current = KeyRecord.from_json(store.get(settings.secret_name))
    before = save_local_copies(current, settings, label="before-rotation", timestamp=timestamp)

    log_path = settings.backup_dir / ROTATION_LOG
    append_log(
        log_path,
        [
            f"Key rotation performed on {format_when(now)}",
            f"Previous key backed up to {before.json_path} and {before.yaml_path}",
        ],
    )

    console.action("Generating new key pair")
    pair = generate_key_pair(subject=settings.subject, days=settings.validity_days, bits=settings.key_bits)
    replacement = KeyRecord.from_pem(
        name=current.name,
        namespace=current.namespace,
        cert=pair.cert,
        key=pair.key,
        creation_timestamp=datetime.now(timezone.utc).strftime(ISO_FORMAT),
    )
    new = save_local_copies(replacement, settings, label="new", timestamp=timestamp)

    console.action("Updating key in AWS Secrets Manager")
    with console.spinner("Writing master key..."):
        store.update(settings.secret_name, replacement.to_json())
    console.success(f"Master key updated in {console.highlight(settings.secret_name)}")

    tag = archive_in_backup_secret(store, settings, current.to_json(), version_tag(TagPrefix.ROTATION, timestamp))

    append_log(
        log_path,
        [
            f"New key deployed to AWS Secrets Manager successfully on {format_when(datetime.now())}",
            f"New key backed up to {new.json_path} and {new.yaml_path}",
            f"Previous key archived in {settings.backup_secret_name} with version tag {tag}",
        ],
    )

    console.newline()
    console.summary_panel(
        "Master Key Rotation Complete",
        {
            "Key": f"{settings.secret_name} ({replacement.name})",
            "Previous key": f"{settings.backup_secret_name} (version: {tag})",
            "New key YAML": str(new.yaml_path),
            "Log": str(log_path),
        },
    )
    console.warning(
        "Distribute the new YAML key file to all developers who need to update their sealed-secrets-controller."
    )
    console.next_steps(
        [
            "Run the backup command to create additional backups of the new key",
            "Store backups in secure locations according to security policy",
            "Notify developers to update their sealed-secrets-controller with the new key",
            "Verify functionality of all applications using sealed secrets after developers update",
        ]
    )
    return new._replace(tag=tag)
