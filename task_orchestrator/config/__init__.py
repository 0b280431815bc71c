"""
Configuration module - Settings and configuration management
"""

from .engine_config import EngineConfig
from .env_config import EnvConfig

__all__ = [
    'EngineConfig',
    'EnvConfig',
]
