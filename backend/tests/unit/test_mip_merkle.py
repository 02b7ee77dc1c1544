"""Tests for the file-entry Merkle tree module."""

from __future__ import annotations

import hashlib

import pytest

from mipstamp.core.crypto.merkle import (
    EMPTY_TREE_ROOT,
    FileEntry,
    MerkleTree,
    compute_inclusion_proof,
    compute_merkle_root,
    hash_file_content,
    leaf_hash,
    verify_inclusion_proof,
)


def _sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode()).hexdigest()


def _entries(count: int) -> list[FileEntry]:
    return [FileEntry(path=f"src/file_{i}.py", hash=_sha256_hex(f"content{i}")) for i in range(count)]


class TestComputeMerkleRoot:
    """Tests for Merkle root computation."""

    def test_empty_returns_empty_tree_constant(self) -> None:
        assert compute_merkle_root([]) == EMPTY_TREE_ROOT
        assert compute_merkle_root([]) == compute_merkle_root([])
        assert EMPTY_TREE_ROOT == hashlib.sha256(b"").hexdigest()

    def test_single_file(self) -> None:
        root = compute_merkle_root([FileEntry(path="a", hash="h1")])
        assert root == _sha256_hex("a:h1")

    def test_two_files(self) -> None:
        root = compute_merkle_root([FileEntry("a", "h1"), FileEntry("b", "h2")])
        expected = _sha256_hex(_sha256_hex("a:h1") + _sha256_hex("b:h2"))
        assert root == expected

    def test_odd_node_is_paired_with_itself(self) -> None:
        """Three files: the orphaned third leaf is duplicated, not carried over."""
        entries = [FileEntry("a", "h1"), FileEntry("b", "h2"), FileEntry("c", "h3")]
        l0, l1, l2 = (_sha256_hex(f"{e.path}:{e.hash}") for e in entries)
        expected = _sha256_hex(_sha256_hex(l0 + l1) + _sha256_hex(l2 + l2))
        carried_over = _sha256_hex(_sha256_hex(l0 + l1) + l2)

        root = compute_merkle_root(entries)
        assert root == expected
        assert root != carried_over

    def test_order_independent(self) -> None:
        r1 = compute_merkle_root([FileEntry("b", "h2"), FileEntry("a", "h1")])
        r2 = compute_merkle_root([FileEntry("a", "h1"), FileEntry("b", "h2")])
        assert r1 == r2

    def test_order_independent_many_files(self) -> None:
        entries = _entries(9)
        assert compute_merkle_root(entries) == compute_merkle_root(list(reversed(entries)))

    def test_duplicate_paths_order_independent(self) -> None:
        r1 = compute_merkle_root([FileEntry("a", "h2"), FileEntry("a", "h1")])
        r2 = compute_merkle_root([FileEntry("a", "h1"), FileEntry("a", "h2")])
        assert r1 == r2

    def test_changed_hash_changes_root(self) -> None:
        assert compute_merkle_root([FileEntry("a", "h1")]) != compute_merkle_root(
            [FileEntry("a", "h2")]
        )

    def test_changed_path_changes_root(self) -> None:
        assert compute_merkle_root([FileEntry("a", "h1")]) != compute_merkle_root(
            [FileEntry("b", "h1")]
        )

    def test_added_file_changes_root(self) -> None:
        entries = _entries(4)
        assert compute_merkle_root(entries) != compute_merkle_root(entries[:3])

    def test_input_not_mutated(self) -> None:
        entries = [FileEntry("b", "h2"), FileEntry("a", "h1")]
        compute_merkle_root(entries)
        assert entries == [FileEntry("b", "h2"), FileEntry("a", "h1")]

    def test_root_is_sha256_hex(self) -> None:
        root = compute_merkle_root(_entries(5))
        assert len(root) == 64
        int(root, 16)


class TestInclusionProof:
    """Tests for file inclusion proofs."""

    def test_all_files_in_odd_tree(self) -> None:
        entries = _entries(5)
        root = compute_merkle_root(entries)
        for entry in entries:
            proof = compute_inclusion_proof(entries, entry.path)
            assert verify_inclusion_proof(leaf_hash(entry), proof, root)

    def test_all_files_in_even_tree(self) -> None:
        entries = _entries(8)
        root = compute_merkle_root(entries)
        for entry in entries:
            proof = compute_inclusion_proof(entries, entry.path)
            assert verify_inclusion_proof(leaf_hash(entry), proof, root)

    def test_proof_independent_of_input_order(self) -> None:
        entries = _entries(6)
        shuffled = entries[3:] + entries[:3]
        assert compute_inclusion_proof(entries, entries[2].path) == compute_inclusion_proof(
            shuffled, entries[2].path
        )

    def test_single_file_empty_proof(self) -> None:
        entry = FileEntry("solo", "h")
        assert compute_inclusion_proof([entry], "solo") == []
        assert verify_inclusion_proof(leaf_hash(entry), [], compute_merkle_root([entry]))

    def test_modified_file_fails(self) -> None:
        entries = _entries(4)
        root = compute_merkle_root(entries)
        proof = compute_inclusion_proof(entries, entries[0].path)
        tampered = FileEntry(entries[0].path, _sha256_hex("tampered"))
        assert not verify_inclusion_proof(leaf_hash(tampered), proof, root)

    def test_empty_raises(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            compute_inclusion_proof([], "a")

    def test_unknown_path_raises(self) -> None:
        with pytest.raises(ValueError, match="not found"):
            compute_inclusion_proof(_entries(2), "missing.py")


class TestMerkleTree:
    """Tests for the MerkleTree dataclass."""

    def test_auto_computes_root(self) -> None:
        entries = _entries(3)
        tree = MerkleTree(entries=entries)
        assert tree.root == compute_merkle_root(entries)
        assert tree.size == 3

    def test_empty_tree(self) -> None:
        tree = MerkleTree()
        assert tree.root == EMPTY_TREE_ROOT
        assert tree.size == 0

    def test_inclusion_proof_and_verify(self) -> None:
        entries = _entries(7)
        tree = MerkleTree(entries=entries)
        for entry in entries:
            assert tree.verify(entry, tree.inclusion_proof(entry.path))


def test_hash_file_content() -> None:
    assert hash_file_content(b"hello") == hashlib.sha256(b"hello").hexdigest()
