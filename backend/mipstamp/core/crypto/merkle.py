"""
Merkle tree construction over repository file entries.

Reduces an unordered set of ``(path, content hash)`` pairs to one root hash.
Entries are sorted by path before hashing so the root does not depend on the
order in which the caller listed the files. Inclusion proofs allow verifying
that a single file is part of a stamped root without the full file list.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass, field

# SHA-256 of the empty byte string, the root of a tree with no files.
EMPTY_TREE_ROOT: str = hashlib.sha256(b"").hexdigest()


@dataclass(frozen=True)
class FileEntry:
    """A repository file identified by its relative path and content hash."""

    path: str
    hash: str


def _sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _hash_pair(left: str, right: str) -> str:
    """Hash two hex-encoded digests together (concatenated, in order)."""
    hasher = hashlib.sha256()
    hasher.update(left.encode("utf-8"))
    hasher.update(right.encode("utf-8"))
    return hasher.hexdigest()


def hash_file_content(data: bytes) -> str:
    """Return the hex SHA-256 digest of raw file contents."""
    return hashlib.sha256(data).hexdigest()


def leaf_hash(entry: FileEntry) -> str:
    """Compute the leaf hash ``SHA256(path + ":" + hash)`` for a file entry."""
    return _sha256_hex(f"{entry.path}:{entry.hash}")


def _sorted_entries(entries: Sequence[FileEntry]) -> list[FileEntry]:
    # Secondary key keeps duplicate paths independent of input order.
    return sorted(entries, key=lambda entry: (entry.path, entry.hash))


def _next_level(level: list[str]) -> list[str]:
    next_level: list[str] = []
    for i in range(0, len(level), 2):
        left = level[i]
        right = level[i + 1] if i + 1 < len(level) else level[i]
        next_level.append(_hash_pair(left, right))
    return next_level


def compute_merkle_root(entries: Sequence[FileEntry]) -> str:
    """Compute the Merkle root for a set of file entries.

    Entries are sorted by path, hashed into leaves, then reduced pairwise.
    If a level has an odd number of nodes, the last node is paired with
    itself.

    Parameters
    ----------
    entries:
        File entries in any order. The sequence is not modified.

    Returns
    -------
    str
        Hex-encoded SHA-256 root. ``EMPTY_TREE_ROOT`` for an empty input.
    """
    if not entries:
        return EMPTY_TREE_ROOT

    level = [leaf_hash(entry) for entry in _sorted_entries(entries)]
    while len(level) > 1:
        level = _next_level(level)

    return level[0]


def compute_inclusion_proof(
    entries: Sequence[FileEntry], path: str
) -> list[tuple[str, str]]:
    """Compute an inclusion proof for the file at ``path``.

    The proof is a list of ``(sibling_hash, side)`` tuples where ``side``
    is ``"left"`` or ``"right"`` indicating which side the sibling sits on.

    Raises
    ------
    ValueError
        If ``entries`` is empty or no entry has the given path.
    """
    if not entries:
        raise ValueError("Cannot compute proof from empty file list")

    ordered = _sorted_entries(entries)
    idx = next((i for i, entry in enumerate(ordered) if entry.path == path), None)
    if idx is None:
        raise ValueError(f"Path {path!r} not found in file list")

    proof: list[tuple[str, str]] = []
    level = [leaf_hash(entry) for entry in ordered]

    while len(level) > 1:
        if idx % 2 == 0:
            sibling_idx = idx + 1
            if sibling_idx < len(level):
                proof.append((level[sibling_idx], "right"))
            else:
                proof.append((level[idx], "right"))
        else:
            proof.append((level[idx - 1], "left"))

        idx = idx // 2
        level = _next_level(level)

    return proof


def verify_inclusion_proof(
    leaf: str,
    proof: list[tuple[str, str]],
    root: str,
) -> bool:
    """Verify that a leaf hash is included in a tree with the given root.

    Parameters
    ----------
    leaf:
        Leaf hash as returned by ``leaf_hash()``.
    proof:
        Inclusion proof as returned by ``compute_inclusion_proof()``.
    root:
        Expected Merkle root hash.
    """
    current = leaf
    for sibling_hash, side in proof:
        if side == "left":
            current = _hash_pair(sibling_hash, current)
        else:
            current = _hash_pair(current, sibling_hash)
    return current == root


@dataclass
class MerkleTree:
    """A Merkle tree built from a commit's file entries."""

    entries: list[FileEntry] = field(default_factory=list)
    root: str = ""

    def __post_init__(self) -> None:
        if not self.root:
            self.root = compute_merkle_root(self.entries)

    def inclusion_proof(self, path: str) -> list[tuple[str, str]]:
        """Return the inclusion proof for the file at ``path``."""
        return compute_inclusion_proof(self.entries, path)

    def verify(self, entry: FileEntry, proof: list[tuple[str, str]]) -> bool:
        """Verify an inclusion proof for ``entry`` against this tree's root."""
        return verify_inclusion_proof(leaf_hash(entry), proof, self.root)

    @property
    def size(self) -> int:
        """Number of files in the tree."""
        return len(self.entries)
