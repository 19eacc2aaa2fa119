"""Key material subpackage.

This package contains modules for key record parsing, key pair generation,
backup encryption and the append-only operation logs.
"""

from kubeseal_keyring.keys.audit import append_log
from kubeseal_keyring.keys.encryption import decrypt_command, encrypt_file, generate_passphrase
from kubeseal_keyring.keys.generation import generate_key_pair
from kubeseal_keyring.keys.records import KeyRecord, load_record_file, write_record_json, write_record_yaml

__all__ = [
    # records
    "KeyRecord",
    "load_record_file",
    "write_record_json",
    "write_record_yaml",
    # generation
    "generate_key_pair",
    # encryption
    "generate_passphrase",
    "encrypt_file",
    "decrypt_command",
    # audit
    "append_log",
]
