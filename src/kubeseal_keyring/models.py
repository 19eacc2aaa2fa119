"""Data models for kubeseal-keyring.

This module provides the small typed structures passed between the
procedures, in place of loosely-typed dictionaries.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import NamedTuple

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


class KeySource(str, Enum):
    """Where a replacement key is recovered from.

    Inherits from str to allow direct use in string contexts
    (e.g., log lines, summary panels).
    """

    FILE = "file"
    S3 = "s3"
    AWS_BACKUP = "aws-backup"


class TagPrefix(str, Enum):
    """Version stage prefixes used when archiving into the backup secret."""

    BACKUP = "Backup"
    INITIAL = "Initial"
    ROTATION = "Rotation"
    RECOVERY = "Recovery"


def version_tag(prefix: TagPrefix, timestamp: str) -> str:
    """Build a backup secret version stage label.

    Args:
        prefix: The kind of archive.
        timestamp: Run timestamp in TIMESTAMP_FORMAT.

    Returns:
        A label such as ``Rotation-20240101-120000``.

    """
    return f"{prefix.value}-{timestamp}"


class KeyPair(NamedTuple):
    """PEM encoded certificate and private key.

    Attributes:
        cert: The self-signed certificate (PEM bytes).
        key: The RSA private key (PEM bytes).

    """

    cert: bytes
    key: bytes


class ArchivedKey(NamedTuple):
    """Local (and optionally remote) copies of a key record.

    Attributes:
        json_path: Path of the JSON copy, if one was written.
        yaml_path: Path of the YAML mirror, if one was written.
        tag: Backup secret version stage, if the record was archived there.

    """

    json_path: Path | None
    yaml_path: Path | None
    tag: str | None = None


class SecretVersion(NamedTuple):
    """One version of a Secrets Manager secret."""

    version_id: str
    stages: tuple[str, ...]
    created: str


@dataclass(slots=True)
class BackupResult:
    """Outcome of a backup run.

    Attributes:
        json_path: Final JSON artifact (encrypted or not).
        yaml_path: Final YAML artifact (encrypted or not).
        encrypted: Whether the local artifacts were encrypted.
        passphrase: The generated passphrase when encrypted.
        s3_uris: Uploaded object URIs.
        tag: Backup secret version stage, when archived there.

    """

    json_path: Path
    yaml_path: Path
    encrypted: bool = False
    passphrase: str | None = None
    s3_uris: tuple[str, ...] = ()
    tag: str | None = None
