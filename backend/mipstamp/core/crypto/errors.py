"""Error taxonomy for stamp signing and verification.

Chain breakage is deliberately absent: a broken chain is reported through
``ChainVerification.valid`` rather than raised.
"""

from __future__ import annotations


class StampError(ValueError):
    """Base class for stamp signing and verification failures."""


class InvalidKeySizeError(StampError):
    """Raised when a signing or verification key has the wrong byte length."""


class MissingSignatureError(StampError):
    """Raised when verification is attempted on an unsigned stamp."""


class MalformedSignatureError(StampError):
    """Raised when a signature is not valid hex or has the wrong length."""


class PayloadSerializationError(StampError):
    """Raised when the canonical signing payload cannot be built."""


class KeyPairMismatchError(StampError):
    """Raised when an expanded private key's public half does not match its seed."""
