"""
Utilities module - Logging and the exception hierarchy
"""

from .logger import get_logger, configure_logging, set_log_level
from .exceptions import (
    OrchestratorError,
    TaskNotFoundError,
    ToolError,
    ToolNotFoundError,
    ToolRegistrationError,
    ToolExecutionError,
    wrap_exception,
)

__all__ = [
    'get_logger',
    'configure_logging',
    'set_log_level',
    'OrchestratorError',
    'TaskNotFoundError',
    'ToolError',
    'ToolNotFoundError',
    'ToolRegistrationError',
    'ToolExecutionError',
    'wrap_exception',
]
