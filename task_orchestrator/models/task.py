"""
Task module - Task and step structure definitions
"""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .enums import StepStatus, TaskStatus


@dataclass
class Step:
    """
    Atomic unit of work bound to one tool and one parameter set.

    Attributes:
        id: Identifier, unique within the owning task
        tool: Name of the tool the executor is asked to run
        params: Parameters, possibly containing ``${path}`` placeholders
        dependencies: Ids of steps that must be completed first
        status: Current step status
        result: Value produced by the executor (or a skip marker)
        error: Message of the most recent failure
        reasoning: Why the step exists / why it was last changed
        generated_by: Name of the mutation rule that appended the step
    """
    id: str
    tool: str
    params: Dict[str, Any] = field(default_factory=dict)
    dependencies: List[str] = field(default_factory=list)
    status: StepStatus = StepStatus.PENDING
    result: Any = None
    error: Optional[str] = None
    reasoning: str = ""
    generated_by: Optional[str] = None

    @property
    def is_skipped(self) -> bool:
        """True when the step was completed by skipping it."""
        return (
            self.status == StepStatus.COMPLETED
            and isinstance(self.result, dict)
            and self.result.get("skipped") is True
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tool": self.tool,
            "params": self.params,
            "dependencies": list(self.dependencies),
            "status": self.status.value,
            "result": self.result,
            "error": self.error,
            "reasoning": self.reasoning,
            "generated_by": self.generated_by,
        }


def new_task_id() -> str:
    """Time-derived task id with a random suffix."""
    return f"task_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


@dataclass
class Task:
    """
    Ordered, dynamically extensible collection of steps working toward one goal.

    ``progress`` is a high-water mark: steps appended at runtime grow the
    denominator, but the reported percentage never goes backwards.
    """
    id: str
    description: str
    steps: List[Step] = field(default_factory=list)
    context: Dict[str, Any] = field(default_factory=dict)
    status: TaskStatus = TaskStatus.PLANNING
    results: Dict[str, Any] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    retry_count: int = 0
    max_retries: int = 3
    improvement_attempts: int = 0
    progress: float = 0.0
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def get_step(self, step_id: str) -> Optional[Step]:
        return next((s for s in self.steps if s.id == step_id), None)

    def dependencies_met(self, step: Step) -> bool:
        """Every dependency names an existing, completed step."""
        for dep_id in step.dependencies:
            dependency = self.get_step(dep_id)
            if dependency is None or dependency.status != StepStatus.COMPLETED:
                return False
        return True

    def dependents_of(self, step_id: str) -> List[Step]:
        return [s for s in self.steps if step_id in s.dependencies]

    def steps_with_status(self, status: StepStatus) -> List[Step]:
        return [s for s in self.steps if s.status == status]

    def has_incomplete_steps(self) -> bool:
        return any(
            s.status in (StepStatus.PENDING, StepStatus.RUNNING) for s in self.steps
        )

    def all_steps_completed(self) -> bool:
        return all(s.status == StepStatus.COMPLETED for s in self.steps)

    def last_completed_step(self) -> Optional[Step]:
        """Most recently completed step by list order, not by time."""
        for step in reversed(self.steps):
            if step.status == StepStatus.COMPLETED:
                return step
        return None

    def retry_budget_exhausted(self) -> bool:
        return self.retry_count >= self.max_retries

    def record_progress(self) -> float:
        """Update and return the monotonic completion percentage."""
        if self.steps:
            completed = len(self.steps_with_status(StepStatus.COMPLETED))
            current = completed / len(self.steps) * 100
            self.progress = max(self.progress, current)
        return self.progress

    def touch(self) -> None:
        self.updated_at = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "steps": [s.to_dict() for s in self.steps],
            "context": self.context,
            "status": self.status.value,
            "results": self.results,
            "errors": list(self.errors),
            "retry_count": self.retry_count,
            "max_retries": self.max_retries,
            "improvement_attempts": self.improvement_attempts,
            "progress": self.progress,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
