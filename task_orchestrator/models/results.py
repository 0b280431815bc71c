"""
Result models - Values exchanged between the engine and its collaborators
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


@dataclass
class TaskResponse:
    """Structured response returned by plan and execute calls."""
    task_id: str
    status: str
    progress: float
    results: Dict[str, Any] = field(default_factory=dict)
    next_actions: List[str] = field(default_factory=list)
    reasoning: str = ""
    current_step: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "status": self.status,
            "current_step": self.current_step,
            "progress": self.progress,
            "results": self.results,
            "next_actions": self.next_actions,
            "reasoning": self.reasoning,
            "errors": self.errors,
        }


@dataclass
class ToolDefinition:
    """
    Description of a tool the self-improvement workflow may create.

    ``implementation`` is the callable registered for the tool; when it is
    None the improvement engine registers a placeholder.
    """
    name: str
    description: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    category: str = "utility"
    dependencies: List[str] = field(default_factory=list)
    implementation: Optional[Callable[..., Any]] = None


@dataclass
class ImprovementAnalysis:
    """Diagnosis of a missing capability behind a step failure."""
    missing_capability: str
    suggested_tool: ToolDefinition
    confidence: float
    reasoning: str


@dataclass
class SelfImprovementResult:
    improved: bool
    reasoning: str
    new_tool: Optional[str] = None
    tool_modified: Optional[str] = None


@dataclass
class RethinkDecision:
    """
    Verdict of the autonomous rethink policy for a failed step.

    At most one of ``should_retry`` / ``should_skip`` is set; when neither
    is, the step stays failed.
    """
    should_retry: bool
    should_skip: bool
    new_params: Dict[str, Any]
    new_reasoning: str
    skip_reason: Optional[str] = None
    new_tool: Optional[str] = None
