"""
MIP stamp data model and factory.

A stamp attests to the content of one commit at one point in time. Stamps
are created unsigned; ``signing.sign_stamp()`` fills in the signature.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID


@dataclass
class MIPStamp:
    """Cryptographic integrity stamp for a Git commit.

    Attributes
    ----------
    id:
        Unique identifier assigned at creation.
    repo_id:
        The repository owning this stamp's chain.
    commit_sha:
        The commit this stamp attests.
    merkle_root:
        Root hash over the commit's file entries.
    tree_hash:
        Independent tree-content hash supplied by the caller.
    author_id:
        The stamping author.
    parent_stamp_id:
        Previous stamp in the repository chain, ``None`` for the first.
    signature:
        Hex-encoded Ed25519 signature, empty until signed.
    verified:
        Caller-managed cache of the last verification outcome. Never written
        by the signing or verification functions.
    created_at:
        UTC creation instant, the chain ordering key.
    """

    repo_id: int
    commit_sha: str
    merkle_root: str
    tree_hash: str
    author_id: int
    parent_stamp_id: UUID | None = None
    id: UUID = field(default_factory=uuid.uuid4)
    signature: str = ""
    verified: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_signed(self) -> bool:
        return bool(self.signature)


def create_stamp(
    repo_id: int,
    commit_sha: str,
    merkle_root: str,
    tree_hash: str,
    author_id: int,
    parent_stamp_id: UUID | None = None,
) -> MIPStamp:
    """Initialize a new, unsigned stamp with a fresh id and timestamp."""
    return MIPStamp(
        id=uuid.uuid4(),
        repo_id=repo_id,
        commit_sha=commit_sha,
        merkle_root=merkle_root,
        tree_hash=tree_hash,
        author_id=author_id,
        parent_stamp_id=parent_stamp_id,
        signature="",
        verified=False,
        created_at=datetime.now(UTC),
    )
