"""Manifest assembly."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone

from merkled.merkle.models import FileHash, Manifest, ManifestMetadata

logger = logging.getLogger(__name__)

MANIFEST_VERSION = "1.0"


def build_manifest(
    file_hashes: Sequence[FileHash],
    root: str,
    metadata: ManifestMetadata | Mapping[str, object] | None = None,
    *,
    timestamp: datetime | None = None,
) -> Manifest:
    """Aggregate hashed files and their root into a Manifest.

    Sizes are summed and files counted; metadata is attached as given.
    *root* is trusted as the caller computed it.
    """
    if metadata is not None and not isinstance(metadata, ManifestMetadata):
        metadata = ManifestMetadata.model_validate(dict(metadata))

    manifest = Manifest(
        version=MANIFEST_VERSION,
        timestamp=timestamp or datetime.now(timezone.utc),
        merkle_root=root,
        total_files=len(file_hashes),
        total_size=sum(fh.size for fh in file_hashes),
        files=tuple(file_hashes),
        metadata=metadata,
    )
    logger.info(
        "Sealed %d file(s), %d bytes, root %s",
        manifest.total_files,
        manifest.total_size,
        manifest.merkle_root,
    )
    return manifest
