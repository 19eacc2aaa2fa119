"""Key lifecycle procedures subpackage.

This package contains the four operator procedures: setup, backup,
rotate and emergency recovery.
"""

from kubeseal_keyring.procedures.backup import backup_master_key
from kubeseal_keyring.procedures.provision import setup_master_key
from kubeseal_keyring.procedures.recovery import RecoveryRequest, build_request, recover_master_key
from kubeseal_keyring.procedures.rotation import rotate_master_key

__all__ = [
    "setup_master_key",
    "backup_master_key",
    "rotate_master_key",
    "RecoveryRequest",
    "build_request",
    "recover_master_key",
]
