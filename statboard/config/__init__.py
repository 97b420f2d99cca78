"""
Config package for statboard.

Responsible for:
- config models (GlobalConfig, SourceConfig)
- config I/O helpers (load_global_config / load_sources / load_data_source)
"""

from .model import GlobalConfig, SourceConfig
from .io import load_data_source, load_global_config, load_sources

__all__ = ["GlobalConfig", "SourceConfig", "load_data_source", "load_global_config", "load_sources"]
