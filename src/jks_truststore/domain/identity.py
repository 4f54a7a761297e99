"""
Artifact identity — base64 encoding and the content-derived identifier.

The identifier is computed over the base64 text rather than the raw store
bytes, so it is a pure function of the `jks` output value.
"""

from __future__ import annotations

import base64
import hashlib

from jks_truststore.domain.models import TrustStoreArtifact


def encode_store(store_bytes: bytes) -> str:
    """Standard base64 (with padding) of the serialized keystore."""
    return base64.b64encode(store_bytes).decode("ascii")


def artifact_id(jks: str) -> str:
    """Lowercase hex SHA-1 of the UTF-8 bytes of the base64 string."""
    return hashlib.sha1(jks.encode("utf-8")).hexdigest()


def build_artifact(store_bytes: bytes) -> TrustStoreArtifact:
    jks = encode_store(store_bytes)
    return TrustStoreArtifact(store_bytes=store_bytes, jks=jks, id=artifact_id(jks))
