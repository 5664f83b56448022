"""Shared test fixtures for Merkled."""

import logging
from datetime import datetime, timezone

import pytest

from merkled.config.models import MerkledConfig
from merkled.merkle import RawFile

FIXED_MTIME = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


def _raw(rel: str, content: bytes) -> RawFile:
    return RawFile.from_bytes(rel, content, mtime=FIXED_MTIME)


@pytest.fixture(autouse=True)
def _reset_merkled_logger():
    """CLI tests install handlers on the package logger; undo that between tests."""
    logger = logging.getLogger("merkled")
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield
    logger.handlers, logger.level, logger.propagate = handlers, level, propagate


@pytest.fixture
def make_raw():
    """Factory for in-memory RawFile values with a fixed mtime."""
    return _raw


@pytest.fixture
def raw_ab():
    """Two one-byte files, the smallest interesting sealed set."""
    return [_raw("a", b"a"), _raw("b", b"b")]


@pytest.fixture
def sample_config():
    return MerkledConfig()


@pytest.fixture
def evidence_dir(tmp_path):
    """A small folder on disk with nested files and some system artifacts."""
    root = tmp_path / "evidence"
    (root / "photos").mkdir(parents=True)
    (root / "notes.txt").write_text("chain of custody")
    (root / "photos" / "img1.jpg").write_bytes(b"\xff\xd8\xff\xe0 fake jpeg")
    (root / "photos" / "img2.jpg").write_bytes(b"\xff\xd8\xff\xe0 another")
    (root / "photos" / "Thumbs.db").write_bytes(b"cache")
    (root / ".DS_Store").write_bytes(b"finder")
    (root / ".git").mkdir()
    (root / ".git" / "config").write_text("[core]")
    return root
