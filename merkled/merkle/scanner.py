"""Filesystem file provider: walks a folder and yields raw files to hash."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from merkled.config.models import HashingConfig
from merkled.merkle.hasher import IgnoreRule, RawFile

logger = logging.getLogger(__name__)


class FolderScanner:
    """Collects the regular files below a folder, skipping system artifacts."""

    def __init__(self, config: HashingConfig | None = None) -> None:
        self.config = config or HashingConfig()
        self.ignore = IgnoreRule(
            names=frozenset(self.config.ignore_names),
            skip_hidden=self.config.skip_hidden,
        )

    def iter_files(self, root: Path) -> Iterator[RawFile]:
        root = root.resolve()
        if not root.exists():
            raise FileNotFoundError(f"Folder not found: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Not a folder: {root}")

        for p in sorted(root.rglob("*")):
            if not p.is_file():
                continue
            rel = p.relative_to(root).as_posix()
            if self.ignore(rel):
                logger.debug("Skipping system file: %s", rel)
                continue
            yield RawFile.from_path(p, root)

    def scan(self, root: Path) -> list[RawFile]:
        """Return every non-ignored regular file below *root*."""
        files = list(self.iter_files(root))
        logger.info("Scanned %s: %d file(s)", root, len(files))
        return files
