"""Master key backup.

Fetches the current record and keeps copies of it: local JSON and YAML
files, optionally passphrase-encrypted, optionally archived in the backup
secret and optionally uploaded to S3.
"""

import contextlib
from collections.abc import Callable

from kubeseal_keyring import console, prompts
from kubeseal_keyring.config import Settings
from kubeseal_keyring.core.object_store import ObjectStore
from kubeseal_keyring.core.secret_store import SecretStore
from kubeseal_keyring.exceptions import SecretNotFoundError
from kubeseal_keyring.keys.encryption import decrypt_command, encrypt_file, generate_passphrase
from kubeseal_keyring.keys.records import KeyRecord, write_record_json, write_record_yaml
from kubeseal_keyring.models import BackupResult, TagPrefix, version_tag
from kubeseal_keyring.procedures.common import archive_in_backup_secret, artifact_path


def _encrypt_copies(result: BackupResult, settings: Settings, timestamp: str) -> BackupResult:
    passphrase = generate_passphrase()
    console.action("Encrypting backup files")
    with console.spinner("Encrypting with openssl..."):
        enc_json = encrypt_file(result.json_path, artifact_path(settings, "", timestamp, ".enc.json"), passphrase)
        enc_yaml = encrypt_file(result.yaml_path, artifact_path(settings, "", timestamp, ".enc.yaml"), passphrase)

    for plain in (result.json_path, result.yaml_path):
        with contextlib.suppress(FileNotFoundError):
            plain.unlink()

    console.success("Backups encrypted to:")
    console.step(f"JSON format: {console.highlight(str(enc_json))}")
    console.step(f"YAML format: {console.highlight(str(enc_yaml))}")
    console.secret_value("Encryption password", passphrase)
    console.warning("IMPORTANT: Store this password securely in your password manager!")
    console.info(f"Decrypt with: {decrypt_command(enc_json)}")

    result.json_path = enc_json
    result.yaml_path = enc_yaml
    result.encrypted = True
    result.passphrase = passphrase
    return result


def _upload_copies(
    result: BackupResult,
    objects: ObjectStore,
    settings: Settings,
    *,
    bucket: str,
    region: str | None,
) -> bool:
    if not objects.bucket_exists(bucket):
        console.warning(f"Bucket {console.highlight(bucket)} does not exist.")
        if not prompts.confirm("Do you want to create it?", default=True):
            console.error("Cannot upload to S3 without a valid bucket.")
            console.warning("Please store the backup file manually in a secure location.")
            return False
        with console.spinner("Creating S3 bucket..."):
            objects.create_bucket(bucket, region)
        console.success(f"Created versioned, encrypted bucket {console.highlight(bucket)}")

    uris: list[str] = []
    with console.spinner("Uploading backups to AWS S3..."):
        for path in (result.json_path, result.yaml_path):
            uris.append(objects.upload(path, bucket, f"{settings.bucket_prefix}/{path.name}"))

    console.success("Backups uploaded to:")
    for uri in uris:
        console.step(console.highlight(uri))
    result.s3_uris = tuple(uris)
    return True


def backup_master_key(
    *,
    store: SecretStore,
    objects: Callable[[], ObjectStore],
    settings: Settings,
    timestamp: str,
    encrypt: bool | None = None,
    upload: bool | None = None,
    to_aws_backup: bool | None = None,
    bucket: str | None = None,
    region: str | None = None,
    check_encryption_tools: Callable[[], object] | None = None,
) -> BackupResult:
    """Back up the current master key.

    Choices left as None are asked interactively.

    Args:
        store: Secrets Manager access.
        objects: Factory for S3 access, only called when uploading.
        settings: Names, paths and defaults.
        timestamp: Run timestamp shared by every artifact.
        encrypt: Encrypt the local copies.
        upload: Upload the copies to S3.
        to_aws_backup: Archive the record in the backup secret.
        bucket: Bucket overriding ``settings.bucket``.
        region: Region used if the bucket has to be created.
        check_encryption_tools: Called before encrypting, to verify openssl.

    Returns:
        Where the copies ended up.

    Raises:
        SecretNotFoundError: If there is no current master key.

    """
    console.action("Checking for master key in AWS Secrets Manager")
    if not store.exists(settings.secret_name):
        raise SecretNotFoundError(
            "Master key not found in AWS Secrets Manager. Run the setup command first to create the master key."
        )

    with console.spinner("Fetching master key..."):
        record = KeyRecord.from_json(store.get(settings.secret_name))

    json_path = write_record_json(record, artifact_path(settings, "", timestamp, ".json"))
    console.success(f"Key backed up to {console.highlight(str(json_path))}")
    yaml_path = write_record_yaml(record, artifact_path(settings, "", timestamp, ".yaml"))
    console.success(f"YAML version created at {console.highlight(str(yaml_path))}")
    result = BackupResult(json_path=json_path, yaml_path=yaml_path)

    if encrypt is None:
        console.warning("It is recommended to encrypt the backup files for additional security.")
    if prompts.resolve_choice(encrypt, "Do you want to encrypt the backup files?", default=True):
        if check_encryption_tools is not None:
            check_encryption_tools()
        result = _encrypt_copies(result, settings, timestamp)

    if prompts.resolve_choice(
        to_aws_backup,
        f"Do you want to archive the key in {settings.backup_secret_name}?",
        default=False,
    ):
        result.tag = archive_in_backup_secret(
            store, settings, record.to_json(), version_tag(TagPrefix.BACKUP, timestamp)
        )

    if upload is None:
        console.warning("It is recommended to store the backup in a secure location such as AWS S3.")
    if prompts.resolve_choice(upload, "Do you want to upload the backup to AWS S3?", default=True):
        _upload_copies(result, objects(), settings, bucket=bucket or settings.bucket, region=region)

    summary = {
        "JSON": str(result.json_path),
        "YAML": str(result.yaml_path),
        "Encrypted": "yes" if result.encrypted else "no",
    }
    if result.tag:
        summary["AWS backup"] = f"{settings.backup_secret_name} (version: {result.tag})"
    if result.s3_uris:
        summary["S3"] = "\n".join(result.s3_uris)
    console.newline()
    console.summary_panel("Backup Complete", summary)
    console.warning("Remember to also store a copy of the backup in secure offline storage.")
    console.warning("Follow your organization's security policy for handling sensitive cryptographic material.")
    return result
