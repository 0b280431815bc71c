"""
Built-in tools available to every engine
"""

import logging
from typing import Any, Dict

from task_orchestrator.utils.logger import get_logger

from .registry import ToolRegistry

logger = get_logger(__name__)


def log_message(params: Dict[str, Any]) -> Dict[str, Any]:
    """Write a message to the log; has no other effect."""
    message = str(params.get("message", ""))
    level = str(params.get("level", "info")).lower()
    logger.log(getattr(logging, level.upper(), logging.INFO), f"[TOOLS] {message}")
    return {"logged": True, "message": message, "level": level}


BUILTIN_TOOLS = {
    "log_message": (log_message, "Log a message at the given level"),
}


def register_builtin_tools(registry: ToolRegistry) -> ToolRegistry:
    for name, (implementation, description) in BUILTIN_TOOLS.items():
        if name not in registry:
            registry.register(name, implementation, description)
    return registry
