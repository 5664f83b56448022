from .loader import load_config
from .models import HashingConfig, ManifestConfig, MerkledConfig

__all__ = [
    "HashingConfig",
    "ManifestConfig",
    "MerkledConfig",
    "load_config",
]
