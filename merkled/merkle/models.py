"""Data models and error types for the integrity subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

DIGEST_PATTERN = r"^[0-9a-f]{64}$"


class MerkledError(Exception):
    """Base class for integrity engine failures."""


class HashingError(MerkledError, OSError):
    """A file's bytes could not be read while hashing a batch."""

    def __init__(self, path: str, cause: Exception) -> None:
        self.path = path
        super().__init__(f"Failed to hash file {path}: {cause}")
        self.__cause__ = cause


class EmptyInputError(MerkledError, ValueError):
    """No leaves were supplied, so no root can be produced."""


class FormatError(MerkledError, ValueError):
    """A manifest document could not be decoded."""


def _to_utc_millis(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def format_timestamp(value: datetime) -> str:
    """Render *value* the way ``Date.toISOString()`` does: UTC, milliseconds, ``Z``."""
    return _to_utc_millis(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _ManifestModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class FileHash(_ManifestModel):
    """Digest and stat data for one sealed file."""

    path: str
    relative_path: str = Field(min_length=1)
    hash: str = Field(pattern=DIGEST_PATTERN)
    size: int = Field(ge=0)
    last_modified: datetime

    @field_validator("last_modified")
    @classmethod
    def _normalize_mtime(cls, v: datetime) -> datetime:
        return _to_utc_millis(v)

    @field_serializer("last_modified", when_used="json")
    def _serialize_mtime(self, v: datetime) -> str:
        return format_timestamp(v)


class ManifestMetadata(_ManifestModel):
    """Case details attached to a manifest.

    Values are never checked; unknown keys and explicit nulls are kept verbatim.
    """

    model_config = ConfigDict(extra="allow")

    case_number: Any = None
    description: Any = None
    investigator: Any = None
    organization: Any = None


class Manifest(_ManifestModel):
    """The sealed record binding a Merkle root to per-file digests."""

    version: str
    timestamp: datetime
    merkle_root: str = Field(pattern=DIGEST_PATTERN)
    total_files: int = Field(ge=0)
    total_size: int = Field(ge=0)
    files: tuple[FileHash, ...]
    metadata: ManifestMetadata | None = None

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, v: datetime) -> datetime:
        return _to_utc_millis(v)

    @field_serializer("timestamp", when_used="json")
    def _serialize_timestamp(self, v: datetime) -> str:
        return format_timestamp(v)

    @model_validator(mode="after")
    def _check_totals(self) -> Manifest:
        if self.total_files != len(self.files):
            raise ValueError(
                f"totalFiles is {self.total_files} but {len(self.files)} file entries are listed"
            )
        size = sum(f.size for f in self.files)
        if self.total_size != size:
            raise ValueError(f"totalSize is {self.total_size} but file sizes sum to {size}")
        return self


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of checking a file set against a manifest."""

    is_valid: bool
    merkle_root_match: bool
    files_matched: int
    files_total: int
    tampered_files: tuple[str, ...] = ()
    missing_files: tuple[str, ...] = ()
    extra_files: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """camelCase view matching the manifest's key style."""
        return {
            "isValid": self.is_valid,
            "merkleRootMatch": self.merkle_root_match,
            "filesMatched": self.files_matched,
            "filesTotal": self.files_total,
            "tamperedFiles": list(self.tampered_files),
            "missingFiles": list(self.missing_files),
            "extraFiles": list(self.extra_files),
        }
