"""Key record parsing and serialisation.

A key record is the JSON form of the ``kubernetes.io/tls`` Secret holding
the sealed-secrets master key. It is stored as-is in Secrets Manager and
mirrored to a YAML manifest that can be applied to a cluster.
"""

import base64
import binascii
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from kubeseal_keyring.exceptions import KeyFileNotFoundError, KeyRecordError

TLS_CERT_FIELD = "tls.crt"
TLS_KEY_FIELD = "tls.key"
SECRET_TYPE = "kubernetes.io/tls"
DEFAULT_NAMESPACE = "kube-system"

# Label the sealed-secrets controller uses to discover custom keys
ACTIVE_KEY_LABEL = "sealedsecrets.bitnami.com/sealed-secrets-key"


def _require_base64(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value:
        raise KeyRecordError(f"Key record field data.{field_name} is missing or empty")
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as err:
        raise KeyRecordError(f"Key record field data.{field_name} is not valid base64") from err
    return value


@dataclass(frozen=True, slots=True)
class KeyRecord:
    """A sealed-secrets master key record.

    Attributes:
        name: metadata.name of the Secret.
        namespace: metadata.namespace of the Secret.
        tls_crt: Base64 encoded PEM certificate.
        tls_key: Base64 encoded PEM private key.
        creation_timestamp: metadata.creationTimestamp, kept verbatim.
        raw: The exact text the record was parsed from, if any.

    """

    name: str
    tls_crt: str
    tls_key: str
    namespace: str = DEFAULT_NAMESPACE
    creation_timestamp: str | None = None
    raw: str | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_json(cls, text: str) -> "KeyRecord":
        """Parse and validate a JSON key record.

        Args:
            text: The JSON document.

        Returns:
            The parsed record, remembering the original text.

        Raises:
            KeyRecordError: If the document is not a valid key record.

        """
        try:
            document = json.loads(text)
        except json.JSONDecodeError as err:
            raise KeyRecordError(f"Key record is not valid JSON: {err.msg} (line {err.lineno})") from err

        if not isinstance(document, dict):
            raise KeyRecordError("Key record must be a JSON object")

        metadata = document.get("metadata")
        if not isinstance(metadata, dict) or not metadata.get("name"):
            raise KeyRecordError("Key record is missing metadata.name")

        data = document.get("data")
        if not isinstance(data, dict):
            raise KeyRecordError("Key record is missing the data map")

        return cls(
            name=str(metadata["name"]),
            namespace=str(metadata.get("namespace") or DEFAULT_NAMESPACE),
            creation_timestamp=metadata.get("creationTimestamp"),
            tls_crt=_require_base64(data.get(TLS_CERT_FIELD), TLS_CERT_FIELD),
            tls_key=_require_base64(data.get(TLS_KEY_FIELD), TLS_KEY_FIELD),
            raw=text,
        )

    @classmethod
    def from_pem(
        cls,
        *,
        name: str,
        cert: bytes,
        key: bytes,
        namespace: str = DEFAULT_NAMESPACE,
        creation_timestamp: str | None = None,
    ) -> "KeyRecord":
        """Build a record from freshly generated PEM material."""
        return cls(
            name=name,
            namespace=namespace,
            creation_timestamp=creation_timestamp,
            tls_crt=base64.b64encode(cert).decode("ascii"),
            tls_key=base64.b64encode(key).decode("ascii"),
        )

    def to_document(self) -> dict[str, Any]:
        """Return the record as a JSON-compatible dictionary."""
        return {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "creationTimestamp": self.creation_timestamp,
            },
            "data": {
                TLS_CERT_FIELD: self.tls_crt,
                TLS_KEY_FIELD: self.tls_key,
            },
            "type": SECRET_TYPE,
        }

    def to_json(self) -> str:
        """Serialise the record; parsed records return their original text."""
        if self.raw is not None:
            return self.raw
        return json.dumps(self.to_document(), indent=2)

    def to_manifest(self) -> dict[str, Any]:
        """Return the Kubernetes manifest mirroring this record.

        The base64 fields are carried over verbatim.
        """
        return {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "labels": {ACTIVE_KEY_LABEL: "active"},
            },
            "data": {
                TLS_CERT_FIELD: self.tls_crt,
                TLS_KEY_FIELD: self.tls_key,
            },
            "type": SECRET_TYPE,
        }

    def to_yaml(self) -> str:
        """Render the manifest as YAML."""
        return yaml.safe_dump(self.to_manifest(), sort_keys=False, default_flow_style=False)


def write_record_json(record: KeyRecord, path: Path) -> Path:
    """Write a record's JSON form, creating parent directories.

    Args:
        record: The record to write.
        path: Destination file.

    Returns:
        The path written.

    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(record.to_json().encode("utf-8"))
    return path


def write_record_yaml(record: KeyRecord, path: Path) -> Path:
    """Write a record's YAML manifest, creating parent directories.

    Args:
        record: The record to mirror.
        path: Destination file.

    Returns:
        The path written.

    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(record.to_yaml())
    return path


def load_record_file(path: Path) -> KeyRecord:
    """Read and validate a JSON key record from disk.

    Args:
        path: Path to the JSON file.

    Returns:
        The parsed record.

    Raises:
        KeyFileNotFoundError: If the file does not exist.
        KeyRecordError: If the file is not UTF-8 text or not a valid key record.

    """
    # Decoded from bytes so line endings survive unchanged
    try:
        text = path.read_bytes().decode("utf-8")
    except FileNotFoundError as err:
        raise KeyFileNotFoundError(f"Key file not found: {path}") from err
    except IsADirectoryError as err:
        raise KeyFileNotFoundError(f"Key file is a directory: {path}") from err
    except UnicodeDecodeError as err:
        raise KeyRecordError(
            f"Key file {path} is not valid UTF-8 JSON (is it an encrypted .enc backup?)"
        ) from err
    return KeyRecord.from_json(text)
