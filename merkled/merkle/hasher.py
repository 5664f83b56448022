"""Content hashing for individual files and file batches."""

from __future__ import annotations

import hashlib
import io
import logging
from collections import Counter
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from merkled.merkle.models import FileHash, HashingError

logger = logging.getLogger(__name__)

# OS-generated artifacts that never belong in a sealed set
DEFAULT_IGNORE_NAMES = frozenset({"Thumbs.db", "desktop.ini"})

DEFAULT_CHUNK_SIZE = 1024 * 1024


def compute_hash(content: bytes) -> str:
    """SHA-256 hex digest of *content*."""
    return hashlib.sha256(content).hexdigest()


def normalize_relative_path(rel: str) -> str:
    """Slash-delimited form of *rel* with no leading ``./`` or ``/``."""
    parts = [p for p in rel.replace("\\", "/").split("/") if p not in ("", ".")]
    return "/".join(parts)


@dataclass(frozen=True)
class IgnoreRule:
    """Predicate deciding which paths are system artifacts to skip.

    A path is ignored when any of its components is hidden (starts with a
    dot) or is one of the known OS-generated file names.
    """

    names: frozenset[str] = DEFAULT_IGNORE_NAMES
    skip_hidden: bool = True

    def matches_name(self, name: str) -> bool:
        if self.skip_hidden and name.startswith("."):
            return True
        return name in self.names

    def __call__(self, relative_path: str) -> bool:
        return any(self.matches_name(part) for part in PurePosixPath(relative_path).parts)


DEFAULT_IGNORE = IgnoreRule()


@dataclass(frozen=True)
class RawFile:
    """One file as handed over by a file provider, not yet hashed.

    ``opener`` returns a fresh binary stream each time it is called; the
    hasher closes it when done.
    """

    relative_path: str
    opener: Callable[[], BinaryIO] = field(repr=False, compare=False)
    size: int
    mtime: datetime

    @classmethod
    def from_bytes(
        cls, relative_path: str, content: bytes, mtime: datetime | None = None
    ) -> RawFile:
        return cls(
            relative_path=normalize_relative_path(relative_path),
            opener=lambda: io.BytesIO(content),
            size=len(content),
            mtime=mtime or datetime.now(timezone.utc),
        )

    @classmethod
    def from_path(cls, path: Path, root: Path) -> RawFile:
        """Describe *path* relative to *root* using its on-disk stat data."""
        st = path.stat()
        return cls(
            relative_path=path.relative_to(root).as_posix(),
            opener=lambda: path.open("rb"),
            size=st.st_size,
            mtime=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )


def hash_file(raw: RawFile, chunk_size: int = DEFAULT_CHUNK_SIZE) -> FileHash:
    """Read *raw*'s bytes and return its FileHash.

    The digest depends on content only. Any OSError while opening or
    reading is re-raised as HashingError.
    """
    h = hashlib.sha256()
    try:
        with raw.opener() as fh:
            for chunk in iter(lambda: fh.read(chunk_size), b""):
                h.update(chunk)
    except OSError as e:
        raise HashingError(raw.relative_path, e) from e

    return FileHash(
        path=PurePosixPath(raw.relative_path).name,
        relative_path=raw.relative_path,
        hash=h.hexdigest(),
        size=raw.size,
        last_modified=raw.mtime,
    )


def hash_files(
    raw_files: Iterable[RawFile],
    *,
    ignore: Callable[[str], bool] = DEFAULT_IGNORE,
    max_workers: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[FileHash]:
    """Hash a batch of files and return them sorted by relative path.

    Ignored paths are dropped before hashing. With ``max_workers > 1`` the
    files are hashed on a thread pool; the result order never depends on
    completion order. The first unreadable file aborts the whole batch.
    """
    candidates: list[RawFile] = []
    for raw in raw_files:
        if ignore(raw.relative_path):
            logger.debug("Skipping system file: %s", raw.relative_path)
            continue
        candidates.append(raw)

    dupes = sorted(p for p, n in Counter(r.relative_path for r in candidates).items() if n > 1)
    if dupes:
        raise ValueError(f"Duplicate relative paths in batch: {', '.join(dupes)}")

    logger.info("Hashing %d file(s) with %d worker(s)", len(candidates), max_workers)

    results: list[FileHash] = []
    if max_workers <= 1 or len(candidates) <= 1:
        for raw in candidates:
            results.append(hash_file(raw, chunk_size))
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [pool.submit(hash_file, raw, chunk_size) for raw in candidates]
            try:
                for fut in as_completed(futures):
                    results.append(fut.result())
            except BaseException:
                for fut in futures:
                    fut.cancel()
                raise

    # Python's str ordering is code point order, which equals UTF-8 byte order
    results.sort(key=lambda fh: fh.relative_path)
    return results
