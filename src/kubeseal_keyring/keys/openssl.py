"""Thin wrapper around the openssl binary."""

import subprocess

from icecream import ic

from kubeseal_keyring.exceptions import BinaryNotFoundError, CommandError

OPENSSL = "openssl"

_ERR_OPENSSL_NOT_FOUND = "openssl not found; please install openssl and ensure it's on PATH"
_ERR_OPENSSL_FAILED = "openssl {command} failed (exit code {code}){details}"


def run_openssl(args: list[str], *, input_data: bytes | None = None) -> bytes:
    """Run an openssl subcommand and return its stdout.

    Args:
        args: Arguments after the binary name, e.g. ``["req", "-x509", ...]``.
        input_data: Optional bytes to pass to stdin.

    Returns:
        The captured stdout.

    Raises:
        BinaryNotFoundError: If openssl is not installed.
        CommandError: If openssl exits with a non-zero status.

    """
    cmd = [OPENSSL, *args]
    # Never log stdin, it may carry a passphrase
    ic(cmd)

    try:
        result = subprocess.run(
            cmd,
            input=input_data,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=True,
        )
    except FileNotFoundError as err:
        raise BinaryNotFoundError(_ERR_OPENSSL_NOT_FOUND) from err
    except subprocess.CalledProcessError as err:
        stderr_msg = err.stderr.decode(errors="replace").strip() if err.stderr else ""
        details = f" - {stderr_msg}" if stderr_msg else ""
        raise CommandError(
            _ERR_OPENSSL_FAILED.format(command=args[0] if args else "", code=err.returncode, details=details)
        ) from err

    return result.stdout
