"""Merkle tree construction over ordered leaf digests."""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Iterable
from enum import Enum

from merkled.merkle.models import EmptyInputError

logger = logging.getLogger(__name__)

_HEX64_RE = re.compile(r"[0-9a-fA-F]{64}")


class OddLeafPolicy(str, Enum):
    """What happens to the unpaired trailing digest of an odd-sized level."""

    PROMOTE = "promote"
    DUPLICATE = "duplicate"


# Sealing and verification always use this policy; manifests do not record it
ODD_LEAF_POLICY = OddLeafPolicy.PROMOTE


def _to_bytes(digest: str) -> bytes:
    if not isinstance(digest, str) or not _HEX64_RE.fullmatch(digest):
        raise ValueError(f"leaf must be a 64-char hex digest, got {digest!r}")
    return bytes.fromhex(digest)


def combine_pair(left: str, right: str) -> str:
    """Parent digest of two siblings.

    The siblings are ordered by unsigned byte comparison of their raw
    digests, so ``combine_pair(a, b) == combine_pair(b, a)``. The parent is
    the SHA-256 of the 64-byte concatenation.
    """
    a, b = _to_bytes(left), _to_bytes(right)
    if b < a:
        a, b = b, a
    return hashlib.sha256(a + b).hexdigest()


class MerkleTree:
    """Every level of a Merkle tree, leaves first, root last.

    Only the root is persisted; the levels exist for inspection and tests.
    """

    def __init__(self, levels: list[list[str]], policy: OddLeafPolicy) -> None:
        self.levels = levels
        self.policy = policy

    @property
    def root(self) -> str:
        return self.levels[-1][0]

    @property
    def leaves(self) -> list[str]:
        return self.levels[0]

    @property
    def depth(self) -> int:
        """Number of levels above the leaves."""
        return len(self.levels) - 1

    @classmethod
    def from_leaves(
        cls,
        leaves: Iterable[str],
        policy: OddLeafPolicy = ODD_LEAF_POLICY,
    ) -> MerkleTree:
        """Build all levels from already-hashed *leaves*, keeping their order."""
        level = [_to_bytes(d).hex() for d in leaves]
        if not level:
            raise EmptyInputError("Cannot build Merkle tree: no leaves provided")

        levels = [level]
        while len(level) > 1:
            parents: list[str] = []
            for i in range(0, len(level) - 1, 2):
                parents.append(combine_pair(level[i], level[i + 1]))
            if len(level) % 2 == 1:
                last = level[-1]
                if policy is OddLeafPolicy.DUPLICATE:
                    parents.append(combine_pair(last, last))
                else:
                    parents.append(last)
            levels.append(parents)
            level = parents

        logger.debug("Built Merkle tree: %d leaves, depth %d", len(levels[0]), len(levels) - 1)
        return cls(levels, policy)


def build_root(leaves: Iterable[str], policy: OddLeafPolicy = ODD_LEAF_POLICY) -> str:
    """Return the Merkle root of *leaves*.

    Raises EmptyInputError when *leaves* is empty.
    """
    return MerkleTree.from_leaves(leaves, policy).root
