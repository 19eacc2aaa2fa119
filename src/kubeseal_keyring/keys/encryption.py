"""Passphrase encryption of local backup files.

Files are encrypted with ``openssl enc`` so they can be restored on any
machine with nothing but openssl installed.
"""

import base64
import secrets
from pathlib import Path

from kubeseal_keyring.keys.openssl import run_openssl

CIPHER = "-aes-256-cbc"
PASSPHRASE_BYTES = 32


def generate_passphrase() -> str:
    """Return 32 random bytes, base64 encoded."""
    return base64.b64encode(secrets.token_bytes(PASSPHRASE_BYTES)).decode("ascii")


def encrypt_file(src: Path, dest: Path, passphrase: str) -> Path:
    """Encrypt a file with a passphrase.

    The passphrase is written to openssl's stdin so it never shows up in
    the process table.

    Args:
        src: Plain file to encrypt.
        dest: Encrypted output file.
        passphrase: Passphrase to derive the key from.

    Returns:
        The encrypted file path.

    Raises:
        CommandError: If openssl fails.

    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    run_openssl(
        ["enc", CIPHER, "-salt", "-pbkdf2", "-in", str(src), "-out", str(dest), "-pass", "stdin"],
        input_data=f"{passphrase}\n".encode(),
    )
    return dest


def decrypt_command(path: Path) -> str:
    """Return the openssl command line that decrypts an encrypted backup.

    Args:
        path: The encrypted file.

    Returns:
        A shell command writing the plain file next to the encrypted one.

    """
    plain = path.with_name(path.name.replace(".enc", ""))
    return f"openssl enc -d {CIPHER} -pbkdf2 -in {path} -out {plain}"
