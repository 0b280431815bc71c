"""
Enums module - Task, step and improvement enumeration types
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Enumeration of possible task statuses"""
    PLANNING = "planning"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
    RETHINKING = "rethinking"
    SELF_IMPROVING = "self_improving"


class StepStatus(str, Enum):
    """Enumeration of possible step statuses"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ImprovementCategory(str, Enum):
    """Kinds of upgrade that can be applied to an existing tool"""
    OPTIMIZE_PERFORMANCE = "optimize_performance"
    ADD_ERROR_HANDLING = "add_error_handling"
    ADD_LOGGING = "add_logging"
