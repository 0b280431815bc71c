"""
Exception hierarchy for the Task Orchestrator

Exception Categories:
- Task Errors: Lookups of unknown tasks
- Tool Errors: Registry lookups, registration and tool invocation failures

Step failures are never raised out of the engine: the scheduler records
them on the step and the recovery policy decides by message content. The
classes below exist for the surfaces that do raise (``execute_task`` on an
unknown id, the tool registry) and for wrapping tool failures without
losing the original message.

Usage:
    from task_orchestrator.utils.exceptions import TaskNotFoundError

    task = store.get(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
"""

from typing import Any, Dict, Optional


# ============================================================================
# Base Exception
# ============================================================================

class OrchestratorError(Exception):
    """
    Base exception for all Task Orchestrator errors.

    ``str()`` yields the plain message so it can drive message-based
    recovery decisions; structured context lives in ``details``.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        return self.message


# ============================================================================
# Task Errors
# ============================================================================

class TaskNotFoundError(OrchestratorError):
    """Raised when a task id is not present in the task store."""

    def __init__(self, task_id: str):
        super().__init__(
            message=f"Task {task_id} not found",
            error_code="TASK_NOT_FOUND",
            details={"task_id": task_id}
        )
        self.task_id = task_id


# ============================================================================
# Tool Errors
# ============================================================================

class ToolError(OrchestratorError):
    """Base class for tool registry and invocation errors."""
    pass


class ToolNotFoundError(ToolError):
    """Raised when no implementation is registered for a tool name."""

    def __init__(self, tool_name: str):
        super().__init__(
            message=f"Tool '{tool_name}' not found in registry",
            error_code="TOOL_NOT_FOUND",
            details={"tool_name": tool_name}
        )
        self.tool_name = tool_name


class ToolRegistrationError(ToolError):
    """Raised when a tool implementation cannot be registered."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(
            message=f"Cannot register tool '{tool_name}': {message}",
            error_code="TOOL_REGISTRATION_ERROR",
            details={"tool_name": tool_name}
        )
        self.tool_name = tool_name


class ToolExecutionError(ToolError):
    """Raised when a tool implementation fails; keeps the original message."""

    def __init__(
        self,
        tool_name: str,
        message: str,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=f"Tool '{tool_name}' failed: {message}",
            error_code="TOOL_EXEC_ERROR",
            details={
                "tool_name": tool_name,
                "original_error": str(original_error) if original_error else None
            }
        )
        self.tool_name = tool_name
        self.original_error = original_error


# ============================================================================
# Convenience Functions
# ============================================================================

def wrap_exception(
    original_error: Exception,
    tool_name: str
) -> OrchestratorError:
    """
    Wrap a generic exception raised by a tool implementation.

    Args:
        original_error: The original exception to wrap
        tool_name: The tool whose implementation raised

    Returns:
        The error itself if it already belongs to the hierarchy, otherwise
        a ToolExecutionError carrying the original message
    """
    if isinstance(original_error, OrchestratorError):
        return original_error

    message = str(original_error) or original_error.__class__.__name__
    return ToolExecutionError(tool_name, message, original_error=original_error)


__all__ = [
    "OrchestratorError",
    "TaskNotFoundError",
    "ToolError",
    "ToolNotFoundError",
    "ToolRegistrationError",
    "ToolExecutionError",
    "wrap_exception",
]
