"""Master key generation.

The key pair is produced by openssl in a private temporary directory; only
the PEM bytes leave this module.
"""

import tempfile
from pathlib import Path

from kubeseal_keyring import console
from kubeseal_keyring.keys.openssl import run_openssl
from kubeseal_keyring.models import KeyPair


def generate_key_pair(*, subject: str, days: int, bits: int) -> KeyPair:
    """Generate an RSA private key and a self-signed certificate.

    Args:
        subject: X.509 subject, e.g. ``/CN=sealed-secrets/O=Example``.
        days: Certificate validity in days.
        bits: RSA key size.

    Returns:
        The PEM encoded certificate and private key.

    Raises:
        BinaryNotFoundError: If openssl is not installed.
        CommandError: If openssl fails.

    """
    with tempfile.TemporaryDirectory(prefix="kubeseal-keyring-") as tmp:
        key_file = Path(tmp) / "tls.key"
        cert_file = Path(tmp) / "tls.crt"

        with console.spinner(f"Generating {bits}-bit RSA key pair..."):
            run_openssl(
                [
                    "req",
                    "-x509",
                    "-nodes",
                    "-newkey",
                    f"rsa:{bits}",
                    "-sha256",
                    "-days",
                    str(days),
                    "-subj",
                    subject,
                    "-keyout",
                    str(key_file),
                    "-out",
                    str(cert_file),
                ]
            )

        pair = KeyPair(cert=cert_file.read_bytes(), key=key_file.read_bytes())

    console.success(f"Generated new key pair for {console.highlight(subject)}")
    return pair
