"""Service layer for stamping commits and verifying repository chains."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from uuid import UUID

from mipstamp.core.config import Settings, get_settings
from mipstamp.core.crypto.canonicalization import payload_digest
from mipstamp.core.crypto.merkle import FileEntry, compute_merkle_root
from mipstamp.core.crypto.signing import SIGNATURE_ALGORITHM, sign_stamp
from mipstamp.core.crypto.stamp import MIPStamp, create_stamp
from mipstamp.core.crypto.verification import ChainVerification, verify_chain
from mipstamp.core.logging import get_logger

logger = get_logger(__name__)


class VerificationLedger:
    """Caller-owned record of verification outcomes, keyed by stamp id.

    Verification itself never writes to stamps; the ledger is where outcomes
    are kept until the caller decides to persist them.
    """

    def __init__(self) -> None:
        self._outcomes: dict[UUID, bool] = {}

    def record(self, stamps: Sequence[MIPStamp], result: ChainVerification) -> None:
        """Store the outcome of a chain verification for each stamp.

        Stamps ordered before the break are recorded as verified, the
        offending stamp as not verified. Stamps after the break were never
        checked and keep whatever status they had.
        """
        if not result.valid and result.verified_count == 0:
            # Nothing passed; the stamps may not even be orderable.
            self._outcomes[result.broken_at] = False
            return
        ordered = sorted(stamps, key=lambda stamp: stamp.created_at)
        for stamp in ordered:
            if not result.valid and stamp.id == result.broken_at:
                self._outcomes[stamp.id] = False
                break
            self._outcomes[stamp.id] = True

    def status(self, stamp_id: UUID) -> bool | None:
        """Last recorded outcome for a stamp, or ``None`` if never checked."""
        return self._outcomes.get(stamp_id)

    def apply(self, stamps: Iterable[MIPStamp]) -> None:
        """Copy recorded outcomes onto the stamps' ``verified`` cache field."""
        for stamp in stamps:
            outcome = self._outcomes.get(stamp.id)
            if outcome is not None:
                stamp.verified = outcome

    def commit_flags(self, stamps: Iterable[MIPStamp]) -> dict[str, bool]:
        """Map each stamped commit SHA to its ``mip_verified`` flag."""
        return {stamp.commit_sha: self._outcomes.get(stamp.id) is True for stamp in stamps}

    def __len__(self) -> int:
        return len(self._outcomes)


class StampService:
    """Build signed stamps for commits and verify repository stamp chains."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        ledger: VerificationLedger | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.ledger = ledger if ledger is not None else VerificationLedger()

    def stamp_commit(
        self,
        *,
        repo_id: int,
        commit_sha: str,
        files: Sequence[FileEntry],
        tree_hash: str,
        author_id: int,
        parent_stamp_id: UUID | None = None,
        private_key: bytes | None = None,
    ) -> MIPStamp:
        """Compute the Merkle root for a commit and return a signed stamp."""
        key_id: str | None = None
        if private_key is None:
            private_key = self._settings.signing_key_bytes()
            key_id = self._settings.mip_signing_key_id
        if private_key is None:
            raise ValueError("MIP_SIGNING_KEY is not configured")

        merkle_root = compute_merkle_root(files)
        stamp = create_stamp(
            repo_id=repo_id,
            commit_sha=commit_sha,
            merkle_root=merkle_root,
            tree_hash=tree_hash,
            author_id=author_id,
            parent_stamp_id=parent_stamp_id,
        )
        sign_stamp(stamp, private_key)

        logger.info(
            "mip_stamp_signed",
            stamp_id=str(stamp.id),
            repo_id=repo_id,
            commit_sha=commit_sha,
            file_count=len(files),
            merkle_root=merkle_root,
            payload_digest=payload_digest(stamp),
            signature_algorithm=SIGNATURE_ALGORITHM,
            signature_kid=key_id,
        )
        return stamp

    def verify_repository_chain(
        self,
        stamps: Sequence[MIPStamp],
        *,
        public_key: bytes | None = None,
        strict_ordering: bool | None = None,
    ) -> ChainVerification:
        """Verify one repository's chain and record the outcome in the ledger."""
        public_key = self._verify_key(public_key)
        if strict_ordering is None:
            strict_ordering = self._settings.mip_strict_ordering

        result = verify_chain(stamps, public_key, strict_ordering=strict_ordering)
        self.ledger.record(stamps, result)

        repo_id = stamps[0].repo_id if stamps else None
        if result.valid:
            logger.info(
                "mip_chain_verified",
                repo_id=repo_id,
                stamp_count=len(stamps),
            )
        else:
            logger.warning(
                "mip_chain_broken",
                repo_id=repo_id,
                stamp_count=len(stamps),
                broken_at=str(result.broken_at),
                verified_count=result.verified_count,
                error=result.error,
            )
        return result

    def verify_repositories(
        self,
        stamps: Iterable[MIPStamp],
        *,
        public_key: bytes | None = None,
        strict_ordering: bool | None = None,
    ) -> dict[int, ChainVerification]:
        """Group stamps by repository and verify each chain independently."""
        public_key = self._verify_key(public_key)
        by_repo: dict[int, list[MIPStamp]] = {}
        for stamp in stamps:
            by_repo.setdefault(stamp.repo_id, []).append(stamp)

        return {
            repo_id: self.verify_repository_chain(
                repo_stamps,
                public_key=public_key,
                strict_ordering=strict_ordering,
            )
            for repo_id, repo_stamps in sorted(by_repo.items())
        }

    def _verify_key(self, public_key: bytes | None) -> bytes:
        if public_key is None:
            public_key = self._settings.verify_key_bytes()
        if public_key is None:
            raise ValueError("MIP_VERIFY_KEY is not configured")
        return public_key
