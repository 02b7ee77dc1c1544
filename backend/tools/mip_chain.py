"""Operator CLI for generating keys, stamping working trees and verifying stamp chains."""

from __future__ import annotations

import argparse
import binascii
import json
import sys
from pathlib import Path
from uuid import UUID

from pydantic import TypeAdapter

from mipstamp.core.config import get_settings
from mipstamp.core.crypto.merkle import FileEntry, compute_merkle_root, hash_file_content
from mipstamp.core.crypto.signing import generate_signing_keypair
from mipstamp.core.logging import configure_logging
from mipstamp.modules.stamps.schemas import ChainVerificationResponse, MIPStampRecord
from mipstamp.modules.stamps.service import StampService

_SKIPPED_DIRS = {".git"}
_records_adapter = TypeAdapter(list[MIPStampRecord])


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create and verify Mutable Integrity Proof stamps for repository commits."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("keygen", help="Generate a hex-encoded Ed25519 key pair.")

    merkle = sub.add_parser("merkle", help="Print the Merkle root of a directory tree.")
    merkle.add_argument("directory", type=Path)

    stamp = sub.add_parser("stamp", help="Create a signed stamp for a directory tree.")
    stamp.add_argument("directory", type=Path)
    stamp.add_argument("--repo-id", type=int, required=True)
    stamp.add_argument("--commit-sha", required=True)
    stamp.add_argument("--tree-hash", required=True)
    stamp.add_argument("--author-id", type=int, required=True)
    stamp.add_argument(
        "--parent-stamp-id",
        type=UUID,
        default=None,
        help="Id of the previous stamp in this repository's chain.",
    )
    stamp.add_argument(
        "--signing-key",
        default=None,
        help="Hex-encoded private key. Defaults to MIP_SIGNING_KEY.",
    )

    verify = sub.add_parser("verify", help="Verify the stamp chains in a JSON file.")
    verify.add_argument("stamps_file", type=Path)
    verify.add_argument(
        "--public-key",
        default=None,
        help="Hex-encoded public key. Defaults to MIP_VERIFY_KEY.",
    )
    verify.add_argument(
        "--strict-ordering",
        action="store_true",
        default=None,
        help="Reject stamps sharing a created_at value with their predecessor.",
    )
    return parser.parse_args(argv)


def _hex_key(value: str | None) -> bytes | None:
    if value is None:
        return None
    try:
        return binascii.unhexlify(value.strip())
    except ValueError as exc:
        raise ValueError(f"key must be hex-encoded: {exc}") from exc


def collect_file_entries(directory: Path) -> list[FileEntry]:
    """Hash every regular file under ``directory`` into repository-relative entries."""
    if not directory.is_dir():
        raise ValueError(f"{directory} is not a directory")
    entries: list[FileEntry] = []
    for path in directory.rglob("*"):
        relative = path.relative_to(directory)
        if _SKIPPED_DIRS.intersection(relative.parts) or not path.is_file():
            continue
        entries.append(
            FileEntry(path=relative.as_posix(), hash=hash_file_content(path.read_bytes()))
        )
    return entries


def _run(args: argparse.Namespace) -> int:
    if args.command == "keygen":
        private_key, public_key = generate_signing_keypair()
        print(json.dumps({"private_key": private_key.hex(), "public_key": public_key.hex()}))
        return 0

    if args.command == "merkle":
        entries = collect_file_entries(args.directory)
        print(json.dumps({"merkle_root": compute_merkle_root(entries), "file_count": len(entries)}))
        return 0

    service = StampService(get_settings())

    if args.command == "stamp":
        stamp = service.stamp_commit(
            repo_id=args.repo_id,
            commit_sha=args.commit_sha,
            files=collect_file_entries(args.directory),
            tree_hash=args.tree_hash,
            author_id=args.author_id,
            parent_stamp_id=args.parent_stamp_id,
            private_key=_hex_key(args.signing_key),
        )
        print(MIPStampRecord.model_validate(stamp).model_dump_json(indent=2))
        return 0

    records = _records_adapter.validate_json(args.stamps_file.read_bytes())
    results = service.verify_repositories(
        [record.to_stamp() for record in records],
        public_key=_hex_key(args.public_key),
        strict_ordering=args.strict_ordering,
    )
    responses = [
        ChainVerificationResponse.from_result(result, repo_id=repo_id).model_dump(mode="json")
        for repo_id, result in results.items()
    ]
    print(json.dumps(responses, indent=2))
    return 0 if all(result.valid for result in results.values()) else 1


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        configure_logging()
        return _run(args)
    except (ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
