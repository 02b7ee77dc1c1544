"""Commit stamping and chain verification module."""

from mipstamp.modules.stamps.schemas import (
    ChainVerificationResponse,
    FileEntrySchema,
    MIPStampRecord,
)
from mipstamp.modules.stamps.service import StampService, VerificationLedger

__all__ = [
    "StampService",
    "VerificationLedger",
    "ChainVerificationResponse",
    "FileEntrySchema",
    "MIPStampRecord",
]
