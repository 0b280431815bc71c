"""
Environment configuration - Load settings from .env files
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv


class EnvConfig:
    """
    Load and read configuration from environment variables and .env files.

    Priority:
    1. Environment variables already set in the process (highest)
    2. .env file in the current directory or up to 3 parent directories
    """

    @staticmethod
    def find_env_file(start: Optional[Path] = None) -> Optional[Path]:
        """Search the start directory and up to 3 parents for a .env file."""
        current = start or Path.cwd()
        for _ in range(4):
            candidate = current / ".env"
            if candidate.exists():
                return candidate
            if current.parent == current:
                break
            current = current.parent
        return None

    @staticmethod
    def load_env_file(path: Optional[str] = None) -> bool:
        """
        Load environment variables from a .env file.

        Args:
            path: Path to .env file (default: search current dir and parents)

        Returns:
            True if a file was loaded, False otherwise
        """
        env_path = Path(path) if path else EnvConfig.find_env_file()
        if env_path and env_path.exists():
            # Variables already set in the process win over the file
            load_dotenv(env_path, override=False)
            return True
        return False

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> Optional[str]:
        """Get environment variable with optional default."""
        return os.getenv(key, default)

    @staticmethod
    def get_bool(key: str, default: bool = False) -> bool:
        """Get boolean environment variable."""
        value = os.getenv(key, str(default)).lower()
        return value in ('true', '1', 'yes', 'on')

    @staticmethod
    def get_int(key: str, default: int = 0) -> int:
        """Get integer environment variable."""
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    @staticmethod
    def get_float(key: str, default: float = 0.0) -> float:
        """Get float environment variable."""
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    @staticmethod
    def get_json(key: str, default: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """Get JSON environment variable."""
        value = os.getenv(key)
        if not value:
            return default
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return default
