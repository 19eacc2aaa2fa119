"""kubeseal-keyring: lifecycle management for the Sealed Secrets master key.

This package sets up, backs up, rotates and recovers the TLS key pair a
Sealed Secrets controller decrypts with, keeping it in AWS Secrets Manager
with archived copies in a backup secret, local files and S3.

Example usage:
    from kubeseal_keyring import Keyring, Settings

    with Keyring(Settings.from_env()) as keyring:
        keyring.backup(encrypt=True, upload=False, to_aws_backup=True)
"""

__version__ = "0.1.0"

from kubeseal_keyring.cli import cli
from kubeseal_keyring.config import Settings
from kubeseal_keyring.core.keyring import Keyring
from kubeseal_keyring.exceptions import (
    BinaryNotFoundError,
    CommandError,
    ConfigurationError,
    CredentialsError,
    KeyFileNotFoundError,
    KeyRecordError,
    KeyringError,
    ObjectStoreError,
    OperationCancelled,
    PreconditionError,
    RecoverySourceError,
    SecretNotFoundError,
    SecretStoreError,
)
from kubeseal_keyring.keys.records import KeyRecord

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Classes
    "Keyring",
    "KeyRecord",
    "Settings",
    # Exceptions
    "KeyringError",
    "BinaryNotFoundError",
    "CommandError",
    "ConfigurationError",
    "CredentialsError",
    "KeyFileNotFoundError",
    "KeyRecordError",
    "ObjectStoreError",
    "OperationCancelled",
    "PreconditionError",
    "RecoverySourceError",
    "SecretNotFoundError",
    "SecretStoreError",
]
