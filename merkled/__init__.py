"""Merkled - seal folders with a Merkle root and detect tampering later."""

from merkled.config import MerkledConfig, load_config
from merkled.merkle import (
    FileHash,
    Manifest,
    VerificationResult,
    build_manifest,
    build_root,
    decode_manifest,
    encode_manifest,
    hash_files,
    seal,
    verify,
    verify_files,
)

__version__ = "0.1.0"

__all__ = [
    "FileHash",
    "Manifest",
    "MerkledConfig",
    "VerificationResult",
    "build_manifest",
    "build_root",
    "decode_manifest",
    "encode_manifest",
    "hash_files",
    "load_config",
    "seal",
    "verify",
    "verify_files",
]
