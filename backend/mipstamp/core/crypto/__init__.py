"""
Mutable Integrity Proof (MIP) primitives.

Pure library modules for tamper-evident commit stamps:
- **merkle**: Merkle root over a commit's file entries, with inclusion proofs
- **canonicalization**: RFC 8785 signing payload for a stamp
- **stamp**: the stamp record and its factory
- **signing**: Ed25519 signing and verification of stamps
- **verification**: single-stamp and full-chain verification
"""

from mipstamp.core.crypto.canonicalization import (
    build_payload,
    build_stamp_payload,
    canonicalize_jcs_bytes,
    payload_digest,
)
from mipstamp.core.crypto.errors import (
    InvalidKeySizeError,
    KeyPairMismatchError,
    MalformedSignatureError,
    MissingSignatureError,
    PayloadSerializationError,
    StampError,
)
from mipstamp.core.crypto.merkle import (
    EMPTY_TREE_ROOT,
    FileEntry,
    MerkleTree,
    compute_inclusion_proof,
    compute_merkle_root,
    verify_inclusion_proof,
)
from mipstamp.core.crypto.signing import (
    generate_signing_keypair,
    sign_stamp,
    verify_stamp_signature,
)
from mipstamp.core.crypto.stamp import MIPStamp, create_stamp
from mipstamp.core.crypto.verification import (
    ChainVerification,
    verify_chain,
    verify_stamp,
)

__all__ = [
    "build_payload",
    "build_stamp_payload",
    "canonicalize_jcs_bytes",
    "payload_digest",
    "StampError",
    "InvalidKeySizeError",
    "KeyPairMismatchError",
    "MissingSignatureError",
    "MalformedSignatureError",
    "PayloadSerializationError",
    "EMPTY_TREE_ROOT",
    "FileEntry",
    "MerkleTree",
    "compute_merkle_root",
    "compute_inclusion_proof",
    "verify_inclusion_proof",
    "generate_signing_keypair",
    "sign_stamp",
    "verify_stamp_signature",
    "MIPStamp",
    "create_stamp",
    "ChainVerification",
    "verify_chain",
    "verify_stamp",
]
