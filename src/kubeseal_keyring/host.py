"""Host system utilities for kubeseal-keyring.

This module checks for the external binaries the procedures shell out to
and resolves the AWS session every procedure talks through.
"""

import shutil

import boto3
from botocore.exceptions import BotoCoreError, ProfileNotFound
from icecream import ic

from kubeseal_keyring import console
from kubeseal_keyring.config import Settings
from kubeseal_keyring.exceptions import BinaryNotFoundError, CredentialsError

# boto3 credential provider method -> human readable origin
_CREDENTIAL_SOURCES = {
    "env": "environment variables",
    "shared-credentials-file": "AWS CLI credentials file",
    "config-file": "AWS CLI configuration",
    "custom-process": "credential process",
    "assume-role": "assumed role",
    "sso": "AWS SSO",
    "iam-role": "instance role",
    "container-role": "container role",
}


def require_binaries(*names: str) -> dict[str, str]:
    """Ensure every named binary is on PATH.

    Args:
        names: Binaries to look up, e.g. ``"openssl"``.

    Returns:
        Mapping of binary name to its resolved path.

    Raises:
        BinaryNotFoundError: For the first binary that cannot be found.

    """
    console.step("Checking prerequisites")
    resolved: dict[str, str] = {}
    for name in names:
        path = shutil.which(name)
        if path is None:
            raise BinaryNotFoundError(f"{name} is required but not installed")
        resolved[name] = path
    ic(resolved)
    return resolved


def create_session(settings: Settings) -> boto3.Session:
    """Create a boto3 session and verify credentials are available.

    Credentials are resolved the standard boto3 way: environment variables,
    the shared credentials file, the AWS CLI configuration and finally
    instance or container roles.

    Args:
        settings: Settings carrying the optional profile and region.

    Returns:
        A session with resolvable credentials.

    Raises:
        CredentialsError: If the profile is unknown or no credentials exist.

    """
    try:
        session = boto3.Session(profile_name=settings.profile, region_name=settings.region)
        credentials = session.get_credentials()
    except ProfileNotFound as err:
        raise CredentialsError(f"AWS profile '{settings.profile}' not found") from err
    except BotoCoreError as err:
        raise CredentialsError(f"Failed to resolve AWS credentials: {err}") from err

    if credentials is None:
        raise CredentialsError(
            "AWS credentials not found in environment or AWS CLI configuration. "
            "Set AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY or configure the AWS CLI."
        )

    method = getattr(credentials, "method", "") or ""
    ic(method, session.region_name)
    source = _CREDENTIAL_SOURCES.get(method, method or "default provider chain")
    console.info(f"Using AWS credentials from {console.highlight(source)}")

    if session.region_name:
        console.info(f"Using AWS region {console.highlight(session.region_name)}")
    else:
        console.warning("No AWS region configured; set AWS_REGION or pass --region")

    return session
