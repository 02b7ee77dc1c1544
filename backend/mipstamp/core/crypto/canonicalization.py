"""Canonical signing payload for MIP stamps.

The payload is RFC 8785 (JCS) JSON over the stamp's six signable fields.
Signer and verifier must produce identical bytes for identical field values,
so every value is normalized here before canonicalization.
"""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

import rfc8785

from mipstamp.core.crypto.errors import PayloadSerializationError

if TYPE_CHECKING:
    from mipstamp.core.crypto.stamp import MIPStamp

PAYLOAD_FIELDS: tuple[str, ...] = (
    "commit_sha",
    "merkle_root",
    "tree_hash",
    "author_id",
    "parent_stamp_id",
    "timestamp",
)


def canonicalize_jcs_bytes(data: Any) -> bytes:
    """Return RFC 8785 (JCS) canonical bytes."""
    canonical = rfc8785.dumps(data)
    if isinstance(canonical, bytes):
        return canonical
    return str(canonical).encode("utf-8")


def is_timezone_aware(value: datetime) -> bool:
    """Whether ``value`` carries a usable UTC offset."""
    return value.tzinfo is not None and value.utcoffset() is not None


def format_timestamp(value: datetime) -> str:
    """Render a timezone-aware datetime as ``YYYY-MM-DDTHH:MM:SS.ffffffZ``.

    Raises
    ------
    PayloadSerializationError
        If ``value`` is naive; its instant would be ambiguous.
    """
    if not is_timezone_aware(value):
        raise PayloadSerializationError("Stamp timestamp must be timezone-aware")
    utc_value = value.astimezone(UTC).replace(tzinfo=None)
    return utc_value.isoformat(timespec="microseconds") + "Z"


def _payload_dict(
    *,
    commit_sha: str,
    merkle_root: str,
    tree_hash: str,
    author_id: int,
    parent_stamp_id: UUID | None,
    timestamp: datetime,
) -> dict[str, Any]:
    if isinstance(author_id, bool) or not isinstance(author_id, int):
        raise PayloadSerializationError(
            f"author_id must be an integer, got {type(author_id).__name__}"
        )
    for name, value in (
        ("commit_sha", commit_sha),
        ("merkle_root", merkle_root),
        ("tree_hash", tree_hash),
    ):
        if not isinstance(value, str):
            raise PayloadSerializationError(
                f"{name} must be a string, got {type(value).__name__}"
            )
    if parent_stamp_id is not None and not isinstance(parent_stamp_id, UUID):
        raise PayloadSerializationError(
            f"parent_stamp_id must be a UUID, got {type(parent_stamp_id).__name__}"
        )

    return {
        "commit_sha": commit_sha,
        "merkle_root": merkle_root,
        "tree_hash": tree_hash,
        "author_id": author_id,
        "parent_stamp_id": str(parent_stamp_id) if parent_stamp_id is not None else None,
        "timestamp": format_timestamp(timestamp),
    }


def build_payload(
    *,
    commit_sha: str,
    merkle_root: str,
    tree_hash: str,
    author_id: int,
    parent_stamp_id: UUID | None,
    timestamp: datetime,
) -> bytes:
    """Build the canonical signing payload from individual field values.

    Returns
    -------
    bytes
        UTF-8 encoded RFC 8785 JSON.

    Raises
    ------
    PayloadSerializationError
        If a field has an unsupported type or value.
    """
    payload = _payload_dict(
        commit_sha=commit_sha,
        merkle_root=merkle_root,
        tree_hash=tree_hash,
        author_id=author_id,
        parent_stamp_id=parent_stamp_id,
        timestamp=timestamp,
    )
    try:
        return canonicalize_jcs_bytes(payload)
    except rfc8785.CanonicalizationError as exc:
        raise PayloadSerializationError(f"Failed to canonicalize stamp payload: {exc}") from exc


def build_stamp_payload(stamp: MIPStamp) -> bytes:
    """Build the canonical payload from a stamp's current field values.

    ``created_at`` is used as the payload ``timestamp``.
    """
    return build_payload(
        commit_sha=stamp.commit_sha,
        merkle_root=stamp.merkle_root,
        tree_hash=stamp.tree_hash,
        author_id=stamp.author_id,
        parent_stamp_id=stamp.parent_stamp_id,
        timestamp=stamp.created_at,
    )


def payload_digest(stamp: MIPStamp) -> str:
    """SHA-256 hex digest of a stamp's canonical payload."""
    return hashlib.sha256(build_stamp_payload(stamp)).hexdigest()
