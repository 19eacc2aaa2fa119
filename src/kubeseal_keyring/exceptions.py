"""Custom exceptions for kubeseal-keyring.

This module defines the exception hierarchy used throughout the application
to provide meaningful error messages and proper error handling.
"""


class KeyringError(Exception):
    """Base exception for all kubeseal-keyring errors.

    All failures that should stop a procedure with exit code 1 inherit
    from this class, so the CLI can report them with a single except clause.
    """

    pass


class ConfigurationError(KeyringError):
    """Raised when settings taken from the environment are invalid."""

    pass


class BinaryNotFoundError(KeyringError):
    """Raised when a required binary (openssl) is not found.

    This can occur when:
    - The binary is not installed
    - The binary is not in the system PATH
    """

    pass


class CredentialsError(KeyringError):
    """Raised when no AWS credentials can be resolved.

    boto3 looks at the environment, the shared credentials file, the AWS CLI
    configuration and instance metadata before giving up.
    """

    pass


class SecretNotFoundError(KeyringError):
    """Raised when a secret (or a requested version of it) does not exist."""

    pass


class SecretStoreError(KeyringError):
    """Raised when an AWS Secrets Manager call fails."""

    pass


class ObjectStoreError(KeyringError):
    """Raised when an S3 call fails or an object is missing."""

    pass


class KeyRecordError(KeyringError):
    """Raised when a key record cannot be parsed.

    This can occur when:
    - The document is not valid JSON
    - metadata.name is missing
    - tls.crt or tls.key are missing or not valid base64
    """

    pass


class KeyFileNotFoundError(KeyRecordError):
    """Raised when a local key record file does not exist."""

    pass


class CommandError(KeyringError):
    """Raised when an external command exits with a non-zero status."""

    pass


class RecoverySourceError(KeyringError):
    """Raised when no recovery source, or more than one, is selected."""

    pass


class PreconditionError(KeyringError):
    """Raised when the operator refuses a mandatory precondition prompt."""

    pass


class OperationCancelled(Exception):
    """Raised when the operator declines to proceed.

    Not a KeyringError; the CLI exits with status 0 on cancellation.
    """

    pass
