"""Tests for the mip_chain operator CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mipstamp.core.crypto.merkle import FileEntry, compute_merkle_root, hash_file_content
from tools.mip_chain import collect_file_entries, main


def _write_tree(root: Path) -> None:
    (root / "src").mkdir()
    (root / "src" / "app.py").write_text("print('hello')\n")
    (root / "README.md").write_text("# demo\n")
    (root / ".git").mkdir()
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n")


def _run_json(capsys: pytest.CaptureFixture[str], argv: list[str]) -> tuple[int, object]:
    code = main(argv)
    out = capsys.readouterr().out
    return code, json.loads(out) if out.strip() else None


def test_collect_file_entries_skips_git_dir(tmp_path: Path) -> None:
    _write_tree(tmp_path)
    entries = collect_file_entries(tmp_path)
    assert sorted(entries, key=lambda e: e.path) == [
        FileEntry("README.md", hash_file_content(b"# demo\n")),
        FileEntry("src/app.py", hash_file_content(b"print('hello')\n")),
    ]


def test_keygen(capsys: pytest.CaptureFixture[str]) -> None:
    code, data = _run_json(capsys, ["keygen"])
    assert code == 0
    assert isinstance(data, dict)
    assert len(bytes.fromhex(data["private_key"])) == 32
    assert len(bytes.fromhex(data["public_key"])) == 32


def test_merkle(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write_tree(tmp_path)
    code, data = _run_json(capsys, ["merkle", str(tmp_path)])
    assert code == 0
    assert data == {
        "merkle_root": compute_merkle_root(collect_file_entries(tmp_path)),
        "file_count": 2,
    }


def test_merkle_missing_directory(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["merkle", str(tmp_path / "missing")]) == 2
    assert "is not a directory" in capsys.readouterr().err


def test_stamp_and_verify_chain(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    keypair: tuple[bytes, bytes],
) -> None:
    private_key, public_key = keypair
    tree = tmp_path / "tree"
    tree.mkdir()
    _write_tree(tree)

    base_args = ["stamp", str(tree), "--repo-id", "4", "--tree-hash", "t", "--author-id", "2"]
    code, first = _run_json(
        capsys,
        [*base_args, "--commit-sha", "c1", "--signing-key", private_key.hex()],
    )
    assert code == 0
    assert isinstance(first, dict)
    code, second = _run_json(
        capsys,
        [
            *base_args,
            "--commit-sha",
            "c2",
            "--parent-stamp-id",
            first["id"],
            "--signing-key",
            private_key.hex(),
        ],
    )
    assert code == 0
    assert isinstance(second, dict)
    assert second["parent_stamp_id"] == first["id"]

    stamps_file = tmp_path / "stamps.json"
    stamps_file.write_text(json.dumps([second, first]))

    code, results = _run_json(
        capsys, ["verify", str(stamps_file), "--public-key", public_key.hex()]
    )
    assert code == 0
    assert results == [
        {"valid": True, "broken_at": None, "error": None, "verified_count": 2, "repo_id": 4}
    ]

    second["commit_sha"] = "tampered"
    stamps_file.write_text(json.dumps([first, second]))
    code, results = _run_json(
        capsys, ["verify", str(stamps_file), "--public-key", public_key.hex()]
    )
    assert code == 1
    assert isinstance(results, list)
    assert results[0]["broken_at"] == second["id"]


def test_verify_uses_configured_key(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("MIP_VERIFY_KEY", "22" * 32)
    stamps_file = tmp_path / "stamps.json"
    stamps_file.write_text("[]")
    code, results = _run_json(capsys, ["verify", str(stamps_file)])
    assert code == 0
    assert results == []


def test_verify_without_key_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    stamps_file = tmp_path / "stamps.json"
    stamps_file.write_text("[]")
    assert main(["verify", str(stamps_file)]) == 2
    assert "MIP_VERIFY_KEY" in capsys.readouterr().err


def test_stamp_with_bad_key(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write_tree(tmp_path)
    code = main(
        [
            "stamp",
            str(tmp_path),
            "--repo-id",
            "1",
            "--commit-sha",
            "c",
            "--tree-hash",
            "t",
            "--author-id",
            "1",
            "--signing-key",
            "abcd",
        ]
    )
    assert code == 2
    assert "private key size" in capsys.readouterr().err
