"""Pydantic schemas for stamp records and chain verification responses."""

from __future__ import annotations

from uuid import UUID

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from mipstamp.core.crypto.merkle import FileEntry
from mipstamp.core.crypto.stamp import MIPStamp
from mipstamp.core.crypto.verification import ChainVerification


class FileEntrySchema(BaseModel):
    """A file path and its content hash, as supplied by the git layer."""

    path: str = Field(..., min_length=1)
    hash: str = Field(..., min_length=1)

    def to_entry(self) -> FileEntry:
        return FileEntry(path=self.path, hash=self.hash)


class MIPStampRecord(BaseModel):
    """Structured record of a stamp for storage or API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    repo_id: int
    commit_sha: str
    merkle_root: str
    tree_hash: str
    author_id: int
    parent_stamp_id: UUID | None = None
    signature: str = ""
    verified: bool = False
    created_at: AwareDatetime

    def to_stamp(self) -> MIPStamp:
        """Rebuild the core stamp from this record."""
        return MIPStamp(
            id=self.id,
            repo_id=self.repo_id,
            commit_sha=self.commit_sha,
            merkle_root=self.merkle_root,
            tree_hash=self.tree_hash,
            author_id=self.author_id,
            parent_stamp_id=self.parent_stamp_id,
            signature=self.signature,
            verified=self.verified,
            created_at=self.created_at,
        )


class ChainVerificationResponse(BaseModel):
    """Result of verifying the stamp chain for a repository."""

    valid: bool
    broken_at: UUID | None = None
    error: str | None = None
    verified_count: int = 0
    repo_id: int | None = None

    @classmethod
    def from_result(
        cls, result: ChainVerification, *, repo_id: int | None = None
    ) -> ChainVerificationResponse:
        return cls(
            valid=result.valid,
            broken_at=result.broken_at,
            error=result.error or None,
            verified_count=result.verified_count,
            repo_id=repo_id,
        )
