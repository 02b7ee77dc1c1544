"""
Ed25519 signing and verification for MIP stamps.

Uses the ``cryptography`` library with raw key bytes. The signature covers
the stamp's canonical payload, rebuilt from the live field values on every
call so that tampering with any signable field is detected.
"""

from __future__ import annotations

import binascii

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from mipstamp.core.crypto.canonicalization import build_stamp_payload
from mipstamp.core.crypto.errors import (
    InvalidKeySizeError,
    KeyPairMismatchError,
    MalformedSignatureError,
    MissingSignatureError,
)
from mipstamp.core.crypto.stamp import MIPStamp

SIGNATURE_ALGORITHM = "Ed25519"
PRIVATE_KEY_SIZE = 32
EXPANDED_PRIVATE_KEY_SIZE = 64
PUBLIC_KEY_SIZE = 32
SIGNATURE_SIZE = 64


def generate_signing_keypair() -> tuple[bytes, bytes]:
    """Generate a new Ed25519 key pair for stamp signing.

    Returns
    -------
    tuple[bytes, bytes]
        ``(private_key, public_key)`` as raw 32-byte values.
    """
    private_key = Ed25519PrivateKey.generate()
    private_raw = private_key.private_bytes(
        encoding=Encoding.Raw,
        format=PrivateFormat.Raw,
        encryption_algorithm=NoEncryption(),
    )
    public_raw = private_key.public_key().public_bytes(
        encoding=Encoding.Raw,
        format=PublicFormat.Raw,
    )
    return private_raw, public_raw


def _load_private_key(private_key: bytes) -> Ed25519PrivateKey:
    """Load a raw seed, or the expanded seed followed by its public key."""
    if len(private_key) == EXPANDED_PRIVATE_KEY_SIZE:
        seed, public_half = private_key[:PRIVATE_KEY_SIZE], private_key[PRIVATE_KEY_SIZE:]
        key = Ed25519PrivateKey.from_private_bytes(seed)
        derived = key.public_key().public_bytes(encoding=Encoding.Raw, format=PublicFormat.Raw)
        if derived != public_half:
            raise KeyPairMismatchError("expanded private key does not match its public half")
        return key
    if len(private_key) != PRIVATE_KEY_SIZE:
        raise InvalidKeySizeError(
            f"invalid private key size: expected {PRIVATE_KEY_SIZE} or "
            f"{EXPANDED_PRIVATE_KEY_SIZE} bytes, got {len(private_key)}"
        )
    return Ed25519PrivateKey.from_private_bytes(private_key)


def _load_public_key(public_key: bytes) -> Ed25519PublicKey:
    if len(public_key) != PUBLIC_KEY_SIZE:
        raise InvalidKeySizeError(
            f"invalid public key size: expected {PUBLIC_KEY_SIZE} bytes, got {len(public_key)}"
        )
    return Ed25519PublicKey.from_public_bytes(public_key)


def public_key_from_private(private_key: bytes) -> bytes:
    """Derive the raw public key for a raw private key."""
    return _load_private_key(private_key).public_key().public_bytes(
        encoding=Encoding.Raw,
        format=PublicFormat.Raw,
    )


def sign_stamp(stamp: MIPStamp, private_key: bytes) -> None:
    """Sign a stamp in place with an Ed25519 private key.

    Only ``stamp.signature`` is modified.

    Parameters
    ----------
    stamp:
        The stamp to sign.
    private_key:
        Raw 32-byte Ed25519 seed, or the 64-byte seed followed by the
        public key.

    Raises
    ------
    InvalidKeySizeError
        If the key is neither 32 nor 64 bytes long.
    KeyPairMismatchError
        If a 64-byte key's public half does not belong to its seed.
    PayloadSerializationError
        If the canonical payload cannot be built.
    """
    key = _load_private_key(private_key)
    payload = build_stamp_payload(stamp)
    stamp.signature = key.sign(payload).hex()


def _decode_signature(signature: str) -> bytes:
    try:
        sig_bytes = binascii.unhexlify(signature)
    except ValueError as exc:
        raise MalformedSignatureError(f"invalid signature hex: {exc}") from exc
    if len(sig_bytes) != SIGNATURE_SIZE:
        raise MalformedSignatureError(
            f"invalid signature size: expected {SIGNATURE_SIZE} bytes, got {len(sig_bytes)}"
        )
    return sig_bytes


def verify_stamp_signature(stamp: MIPStamp, public_key: bytes) -> bool:
    """Verify a stamp's Ed25519 signature against its current fields.

    Parameters
    ----------
    stamp:
        The stamp to verify.
    public_key:
        Raw 32-byte Ed25519 public key.

    Returns
    -------
    bool
        ``True`` if the signature matches the stamp's current payload.

    Raises
    ------
    InvalidKeySizeError
        If the key is not 32 bytes long.
    MissingSignatureError
        If the stamp has not been signed.
    MalformedSignatureError
        If the signature is not hex or does not decode to 64 bytes.
    """
    key = _load_public_key(public_key)
    if not stamp.signature:
        raise MissingSignatureError("signature is missing")
    sig_bytes = _decode_signature(stamp.signature)

    payload = build_stamp_payload(stamp)
    try:
        key.verify(sig_bytes, payload)
        return True
    except InvalidSignature:
        return False
