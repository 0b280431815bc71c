"""
Models module - Data structures and enums for the Task Orchestrator
"""

from .enums import TaskStatus, StepStatus, ImprovementCategory
from .task import Task, Step, new_task_id
from .results import (
    TaskResponse,
    ToolDefinition,
    ImprovementAnalysis,
    SelfImprovementResult,
    RethinkDecision,
)

__all__ = [
    'TaskStatus',
    'StepStatus',
    'ImprovementCategory',
    'Task',
    'Step',
    'new_task_id',
    'TaskResponse',
    'ToolDefinition',
    'ImprovementAnalysis',
    'SelfImprovementResult',
    'RethinkDecision',
]
