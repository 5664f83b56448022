"""Canonical JSON encoding of manifests."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from merkled.merkle.models import FormatError, Manifest

logger = logging.getLogger(__name__)

SUPPORTED_MAJOR_VERSIONS = frozenset({1})


def encode_manifest(manifest: Manifest) -> bytes:
    """Serialize *manifest* to UTF-8 JSON with camelCase keys and 2-space indent.

    Absent metadata and metadata fields that were never set are left out.
    Metadata keys that were given, null or not, are written as they are.
    """
    data = manifest.model_dump(mode="json", by_alias=True, exclude={"metadata"})
    if manifest.metadata is not None:
        data["metadata"] = manifest.metadata.model_dump(
            mode="json", by_alias=True, exclude_unset=True
        )
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


def _check_version(version: object, strict: bool) -> None:
    if not isinstance(version, str) or not version:
        raise FormatError(f"Manifest version must be a non-empty string, got {version!r}")
    major = version.split(".", 1)[0]
    if major.isdigit() and int(major) in SUPPORTED_MAJOR_VERSIONS:
        return
    if strict:
        raise FormatError(f"Unsupported manifest version: {version}")
    logger.warning("Accepting manifest with unrecognized version %s", version)


def decode_manifest(data: bytes | str, *, strict_version: bool = True) -> Manifest:
    """Parse a manifest document produced by encode_manifest().

    Raises FormatError on malformed JSON, missing or invalid fields, totals
    that disagree with the file list, or (when *strict_version*) a major
    version this release does not understand.
    """
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise FormatError(f"Manifest is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise FormatError(f"Manifest must be a JSON object, got {type(raw).__name__}")
    if "version" not in raw:
        raise FormatError("Manifest is missing required field 'version'")
    _check_version(raw["version"], strict_version)

    try:
        return Manifest.model_validate(raw)
    except ValidationError as e:
        raise FormatError(f"Invalid manifest: {e}") from e


def save_manifest(manifest: Manifest, path: Path) -> None:
    """Write *manifest* to *path*."""
    path.write_bytes(encode_manifest(manifest))


def load_manifest(path: Path, *, strict_version: bool = True) -> Manifest:
    """Read and decode a manifest file."""
    return decode_manifest(path.read_bytes(), strict_version=strict_version)
