"""Runtime settings for kubeseal-keyring.

Defaults match the Scholar Spark deployment.
Every field can be overridden from the environment, and the CLI overrides
individual fields again from its options.
"""

import dataclasses
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from kubeseal_keyring.exceptions import ConfigurationError

ENV_PREFIX = "KUBESEAL_KEYRING_"

DEFAULT_TAGS: tuple[tuple[str, str], ...] = (
    ("Environment", "Production"),
    ("Application", "ScholarSpark"),
)


@dataclass(frozen=True, slots=True)
class Settings:
    """Names, paths and key parameters used by every procedure.

    Attributes:
        secret_name: Secrets Manager id of the current master key.
        backup_secret_name: Secrets Manager id holding archived versions.
        backup_dir: Local directory for timestamped artifacts and logs.
        bucket: S3 bucket for off-site backups.
        bucket_prefix: Key prefix inside the bucket.
        key_name: metadata.name of freshly generated records.
        namespace: Namespace of the sealed-secrets controller.
        subject: X.509 subject of generated certificates.
        validity_days: Certificate validity.
        key_bits: RSA key size.
        region: AWS region, None to let boto3 resolve it.
        profile: AWS profile, None for the default chain.
        application: Name used in secret descriptions.
        tags: Tags attached to created secrets.

    """

    secret_name: str = "scholar-spark/sealed-secrets/master-key"
    backup_secret_name: str = "scholar-spark/sealed-secrets/master-key-backups"
    backup_dir: Path = Path("./key-backup")
    bucket: str = "scholar-spark-key-backups"
    bucket_prefix: str = "sealed-secrets-keys"
    key_name: str = "sealed-secrets-key"
    namespace: str = "kube-system"
    subject: str = "/CN=sealed-secrets/O=Scholar-Spark"
    validity_days: int = 3650
    key_bits: int = 4096
    region: str | None = None
    profile: str | None = None
    application: str = "Scholar Spark"
    tags: tuple[tuple[str, str], ...] = field(default=DEFAULT_TAGS)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``.

        Returns:
            Settings with every variable that is set applied.

        Raises:
            ConfigurationError: If a numeric variable is not an integer.

        """
        env = os.environ if environ is None else environ
        overrides: dict[str, object] = {}

        for f in dataclasses.fields(cls):
            if f.name in ("tags", "region", "profile"):
                continue
            raw = env.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None or raw == "":
                continue
            overrides[f.name] = _coerce(f.name, raw)

        region = env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION")
        if region:
            overrides["region"] = region
        if env.get("AWS_PROFILE"):
            overrides["profile"] = env["AWS_PROFILE"]

        return cls(**overrides)  # type: ignore[arg-type]

    def replace(self, **changes: object) -> "Settings":
        """Return a copy with the given non-None fields replaced."""
        applied = {name: value for name, value in changes.items() if value is not None}
        if "backup_dir" in applied:
            applied["backup_dir"] = Path(str(applied["backup_dir"]))
        return dataclasses.replace(self, **applied)  # type: ignore[arg-type]

    @property
    def tag_list(self) -> list[dict[str, str]]:
        """Tags in the shape boto3 expects."""
        return [{"Key": key, "Value": value} for key, value in self.tags]


def _coerce(name: str, raw: str) -> object:
    match name:
        case "validity_days" | "key_bits":
            try:
                value = int(raw)
            except ValueError as err:
                raise ConfigurationError(
                    f"{ENV_PREFIX}{name.upper()} must be an integer, got '{raw}'"
                ) from err
            if value <= 0:
                raise ConfigurationError(f"{ENV_PREFIX}{name.upper()} must be positive, got {value}")
            return value
        case "backup_dir":
            return Path(raw)
        case _:
            return raw
