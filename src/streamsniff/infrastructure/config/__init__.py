from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, ExtractionConfig

__all__ = ["AppConfig", "EnvOverrides", "ExtractionConfig", "load_config"]
