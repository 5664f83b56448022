from pydantic import BaseModel, Field
from typing import Literal


class HashingConfig(BaseModel):
    max_workers: int = Field(default=4, gt=0)
    chunk_size: int = Field(default=1024 * 1024, gt=0)
    skip_hidden: bool = True
    ignore_names: list[str] = Field(default_factory=lambda: ["Thumbs.db", "desktop.ini"])


class ManifestConfig(BaseModel):
    output_dir: str = "."
    strict_version: bool = True


class MerkledConfig(BaseModel):
    hashing: HashingConfig = Field(default_factory=HashingConfig)
    manifest: ManifestConfig = Field(default_factory=ManifestConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
