"""Core infrastructure subpackage.

This package contains the Keyring facade class along with the AWS
Secrets Manager and S3 adapters it drives.
"""

from kubeseal_keyring.core.keyring import Keyring
from kubeseal_keyring.core.object_store import ObjectStore
from kubeseal_keyring.core.secret_store import SecretStore

__all__ = [
    "Keyring",
    "ObjectStore",
    "SecretStore",
]
