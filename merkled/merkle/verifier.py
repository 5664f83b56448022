"""Verification of a file set against a sealed manifest."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from merkled.merkle.models import FileHash, Manifest, VerificationResult
from merkled.merkle.tree import build_root

logger = logging.getLogger(__name__)


class ManifestVerifier:
    """Recomputes the root of a file set and diffs it against a manifest."""

    @staticmethod
    def verify(current_files: Sequence[FileHash], manifest: Manifest) -> VerificationResult:
        """Compare *current_files* with *manifest*.

        Raises EmptyInputError when *current_files* is empty: an empty set
        cannot be verified, which is different from failing verification.
        """
        current_root = build_root(fh.hash for fh in current_files)
        root_match = current_root == manifest.merkle_root

        sealed = {fh.relative_path: fh.hash for fh in manifest.files}
        current = {fh.relative_path: fh.hash for fh in current_files}

        tampered: list[str] = []
        missing: list[str] = []
        for path, sealed_hash in sealed.items():
            current_hash = current.get(path)
            if current_hash is None:
                missing.append(path)
            elif current_hash != sealed_hash:
                tampered.append(path)

        extra = [p for p in current if p not in sealed]

        # Undercounts when files are missing and extra at the same time
        matched = len(current_files) - len(tampered) - len(extra)

        result = VerificationResult(
            is_valid=root_match and not tampered and not missing and not extra,
            merkle_root_match=root_match,
            files_matched=matched,
            files_total=manifest.total_files,
            tampered_files=tuple(tampered),
            missing_files=tuple(missing),
            extra_files=tuple(extra),
        )
        if result.is_valid:
            logger.info("Verification passed: %d/%d files matched", matched, manifest.total_files)
        else:
            logger.warning(
                "Verification failed: root_match=%s tampered=%d missing=%d extra=%d",
                root_match,
                len(tampered),
                len(missing),
                len(extra),
            )
        return result


def verify(current_files: Sequence[FileHash], manifest: Manifest) -> VerificationResult:
    """Convenience wrapper around ManifestVerifier.verify()."""
    return ManifestVerifier.verify(current_files, manifest)
