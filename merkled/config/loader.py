"""Locate, read and validate merkled.yaml."""

import os
import re
from collections.abc import Iterator
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import MerkledConfig

ENV_VAR = "MERKLED_CONFIG"
PROJECT_CONFIG = Path("merkled.yaml")
USER_CONFIG = Path("~/.merkled/config.yaml")

# ${NAME} or ${NAME:-fallback}
_ENV_REF = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def _candidate_paths(cli_path: str | None) -> Iterator[Path]:
    """Config files in priority order: --config, $MERKLED_CONFIG, ./merkled.yaml, ~/.merkled."""
    for explicit in (cli_path, os.environ.get(ENV_VAR)):
        if explicit:
            yield Path(explicit)
    yield PROJECT_CONFIG
    yield USER_CONFIG.expanduser()


def _read_yaml(path: Path) -> dict | None:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config in {path}: top level must be a mapping")
    return data


def load_config(cli_path: str | None = None) -> MerkledConfig:
    """Return the first non-empty config file found, or the defaults."""
    for path in _candidate_paths(cli_path):
        if not path.is_file():
            continue
        data = _read_yaml(path)
        if data is None:
            continue
        try:
            return MerkledConfig.model_validate(_expand_env_vars(data))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
    return MerkledConfig()


def _expand_env_vars(value: object) -> object:
    """Substitute ${NAME} and ${NAME:-fallback} in every string of a parsed document."""
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), value)
    if isinstance(value, list):
        return [_expand_env_vars(v) for v in value]
    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    return value


# Default YAML template for `merkled config init`
DEFAULT_CONFIG_TEMPLATE = """\
# merkled.yaml

# Hashing
hashing:
  max_workers: 4               # 1 = hash sequentially
  chunk_size: 1048576          # bytes read per chunk
  skip_hidden: true            # skip dotfiles and anything under dot-directories
  ignore_names:
    - Thumbs.db
    - desktop.ini

# Manifests
manifest:
  output_dir: "."              # where `merkled seal` writes manifests
  strict_version: true         # reject manifests with an unknown major version

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
