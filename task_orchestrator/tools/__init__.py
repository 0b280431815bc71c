"""
Tools module - Tool registry and built-in tool implementations
"""

from .registry import ToolRegistry, ToolInput, call_implementation
from .builtin import log_message, register_builtin_tools

__all__ = [
    'ToolRegistry',
    'ToolInput',
    'call_implementation',
    'log_message',
    'register_builtin_tools',
]
