"""Configuration schema for the reader.

All public classes are re-exported from this module for convenient imports.
"""

from pecreader.schema.base import SubscriptableModel
from pecreader.schema.config import (
    ReaderConfig,
    ReweightingConfig,
    SystematicsConfig,
    load_config,
)

__all__ = [
    "SubscriptableModel",
    "ReaderConfig",
    "ReweightingConfig",
    "SystematicsConfig",
    "load_config",
]
