"""
Stamp chain verification.

Provides functions to verify a single stamp and a full repository chain.
Chain order is always derived from ``created_at``; the order in which the
caller passes stamps is never trusted. These are pure functions, decoupled
from any storage layer.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from mipstamp.core.crypto.canonicalization import is_timezone_aware
from mipstamp.core.crypto.errors import StampError
from mipstamp.core.crypto.signing import verify_stamp_signature
from mipstamp.core.crypto.stamp import MIPStamp


@dataclass
class ChainVerification:
    """Result of verifying a chain of stamps.

    Attributes
    ----------
    valid:
        ``True`` if the entire chain is intact.
    broken_at:
        Id of the first stamp at which verification failed, or ``None``.
    error:
        Human-readable description of the failure, empty when valid.
    verified_count:
        Number of stamps that passed before the walk stopped.
    """

    valid: bool = True
    broken_at: UUID | None = None
    error: str = ""
    verified_count: int = 0


def verify_stamp(stamp: MIPStamp | None, public_key: bytes) -> bool:
    """Verify the signature of a single stamp.

    Raises
    ------
    ValueError
        If ``stamp`` is ``None``, or a ``StampError`` subclass for
        key and signature format problems.
    """
    if stamp is None:
        raise ValueError("nil stamp")
    return verify_stamp_signature(stamp, public_key)


def _broken(stamp: MIPStamp, message: str, verified_count: int) -> ChainVerification:
    return ChainVerification(
        valid=False,
        broken_at=stamp.id,
        error=f"Stamp {stamp.id}: {message}",
        verified_count=verified_count,
    )


def verify_chain(
    stamps: Sequence[MIPStamp],
    public_key: bytes,
    *,
    strict_ordering: bool = False,
) -> ChainVerification:
    """Verify a repository's sequence of stamps.

    A stamp with a naive ``created_at`` breaks the chain before any ordering
    is attempted. Otherwise stamps are stable-sorted by ``created_at``.
    Each stamp's signature is verified, then every stamp after the first must reference its immediate
    predecessor through ``parent_stamp_id``. Verification stops at the first
    failure.

    Parameters
    ----------
    stamps:
        Stamps of one repository, in any order. The sequence is not modified.
    public_key:
        Raw 32-byte Ed25519 public key.
    strict_ordering:
        Reject stamps whose ``created_at`` equals their predecessor's instead
        of ordering them by input position.

    Returns
    -------
    ChainVerification
        Detailed verification outcome.
    """
    if not stamps:
        return ChainVerification()

    # Naive and aware datetimes cannot be ordered against each other.
    for stamp in stamps:
        if not is_timezone_aware(stamp.created_at):
            return _broken(stamp, "created_at must be timezone-aware", 0)

    ordered = sorted(stamps, key=lambda stamp: stamp.created_at)

    for i, stamp in enumerate(ordered):
        try:
            valid = verify_stamp(stamp, public_key)
        except StampError as exc:
            return _broken(stamp, str(exc), i)
        if not valid:
            return _broken(stamp, "invalid signature", i)

        if i == 0:
            continue

        prev = ordered[i - 1]
        if strict_ordering and stamp.created_at == prev.created_at:
            return _broken(
                stamp,
                f"created_at {stamp.created_at.isoformat()} duplicates previous stamp {prev.id}",
                i,
            )
        if stamp.parent_stamp_id is None:
            return _broken(
                stamp,
                f"no parent, but is not the first in chain (prev: {prev.id})",
                i,
            )
        if stamp.parent_stamp_id != prev.id:
            return _broken(
                stamp,
                f"parent mismatch: expected {prev.id}, got {stamp.parent_stamp_id}",
                i,
            )

    return ChainVerification(valid=True, verified_count=len(ordered))
