"""Integrity engine: hashing, Merkle roots, manifests and verification."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from merkled.merkle.codec import decode_manifest, encode_manifest, load_manifest, save_manifest
from merkled.merkle.hasher import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_IGNORE,
    IgnoreRule,
    RawFile,
    compute_hash,
    hash_file,
    hash_files,
)
from merkled.merkle.manifest import MANIFEST_VERSION, build_manifest
from merkled.merkle.models import (
    EmptyInputError,
    FileHash,
    FormatError,
    HashingError,
    Manifest,
    ManifestMetadata,
    MerkledError,
    VerificationResult,
)
from merkled.merkle.scanner import FolderScanner
from merkled.merkle.tree import (
    ODD_LEAF_POLICY,
    MerkleTree,
    OddLeafPolicy,
    build_root,
    combine_pair,
)
from merkled.merkle.verifier import ManifestVerifier, verify


def seal(
    raw_files: Iterable[RawFile],
    metadata: ManifestMetadata | Mapping[str, object] | None = None,
    *,
    ignore: Callable[[str], bool] = DEFAULT_IGNORE,
    max_workers: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Manifest:
    """Hash *raw_files*, compute their root, and return the sealed Manifest."""
    hashes = hash_files(raw_files, ignore=ignore, max_workers=max_workers, chunk_size=chunk_size)
    root = build_root(fh.hash for fh in hashes)
    return build_manifest(hashes, root, metadata)


def verify_files(
    raw_files: Iterable[RawFile],
    manifest: Manifest,
    *,
    ignore: Callable[[str], bool] = DEFAULT_IGNORE,
    max_workers: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> VerificationResult:
    """Hash *raw_files* and verify them against *manifest*."""
    hashes = hash_files(raw_files, ignore=ignore, max_workers=max_workers, chunk_size=chunk_size)
    return verify(hashes, manifest)


__all__ = [
    "DEFAULT_IGNORE",
    "MANIFEST_VERSION",
    "ODD_LEAF_POLICY",
    "EmptyInputError",
    "FileHash",
    "FolderScanner",
    "FormatError",
    "HashingError",
    "IgnoreRule",
    "Manifest",
    "ManifestMetadata",
    "ManifestVerifier",
    "MerkleTree",
    "MerkledError",
    "OddLeafPolicy",
    "RawFile",
    "VerificationResult",
    "build_manifest",
    "build_root",
    "combine_pair",
    "compute_hash",
    "decode_manifest",
    "encode_manifest",
    "hash_file",
    "hash_files",
    "load_manifest",
    "save_manifest",
    "seal",
    "verify",
    "verify_files",
]
