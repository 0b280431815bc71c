"""
Step Mutator - Appends follow-up steps after a step completes

Each rule inspects the completed step's tool and the shape of its result.
A matching rule appends one step that depends only on the trigger. Rules do
not fire on steps they generated themselves, which keeps follow-up chains
finite. The scheduler re-scans the step list every pass, so appended steps
are picked up without further coordination.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from task_orchestrator.models import Step, Task
from task_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)


def dig(value: Any, *path: str) -> Any:
    """Nested mapping lookup returning None on any miss."""
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


@dataclass(frozen=True)
class MutationRule:
    name: str
    trigger_tool: str
    condition: Callable[[Any], bool]
    tool: str
    params: Callable[[Task, Step], Dict[str, Any]]
    reasoning: str

    def applies_to(self, step: Step) -> bool:
        return (
            step.tool == self.trigger_tool
            and step.generated_by != self.name
            and self.condition(step.result)
        )


DEFAULT_MUTATION_RULES: Sequence[MutationRule] = (
    MutationRule(
        name="analysis",
        trigger_tool="web_intelligence",
        condition=lambda r: bool(dig(r, "content")),
        tool="analytics_brain",
        params=lambda task, step: {"action": "analyze", "data": step.result},
        reasoning="Auto-generated: Statistical analysis of web intelligence data",
    ),
    MutationRule(
        name="correlation",
        trigger_tool="analytics_brain",
        condition=lambda r: bool(dig(r, "results", "descriptive_stats")),
        tool="analytics_brain",
        params=lambda task, step: {"action": "correlate", "data": step.result["results"]},
        reasoning="Auto-generated: Correlation analysis of statistical results",
    ),
    MutationRule(
        name="text_analysis",
        trigger_tool="vision_intelligence",
        condition=lambda r: bool(dig(r, "results", "text")),
        tool="analytics_brain",
        params=lambda task, step: {"action": "analyze", "data": step.result["results"]["text"]},
        reasoning="Auto-generated: Analysis of extracted text data",
    ),
    MutationRule(
        name="chart_data",
        trigger_tool="vision_intelligence",
        condition=lambda r: bool(dig(r, "results", "charts")),
        tool="analytics_brain",
        params=lambda task, step: {"action": "analyze", "data": step.result["results"]["charts"]},
        reasoning="Auto-generated: Statistical analysis of chart data",
    ),
    MutationRule(
        name="factcheck",
        trigger_tool="cognitive_search",
        condition=lambda r: dig(r, "analysis", "fact_check_status") == "disputed",
        tool="cognitive_search",
        params=lambda task, step: {"action": "fact_check", "query": task.description},
        reasoning="Auto-generated: Additional fact-checking due to disputed information",
    ),
)


class StepMutator:
    """Grows a task's step list based on completed-step results."""

    def __init__(self, rules: Optional[Sequence[MutationRule]] = None):
        self.rules: List[MutationRule] = list(DEFAULT_MUTATION_RULES if rules is None else rules)

    def after_step_completion(self, task: Task, completed_step: Step) -> List[Step]:
        """
        Append follow-up steps for a completed step.

        Returns:
            The steps appended to ``task.steps`` (possibly none)
        """
        appended: List[Step] = []
        for rule in self.rules:
            if not rule.applies_to(completed_step):
                continue
            step = Step(
                id=self._fresh_id(task, rule.name),
                tool=rule.tool,
                params=rule.params(task, completed_step),
                dependencies=[completed_step.id],
                reasoning=rule.reasoning,
                generated_by=rule.name,
            )
            task.steps.append(step)
            appended.append(step)
            logger.info(f"[MUTATE] {completed_step.id} -> appended {step.id} ({step.tool})")
        return appended

    @staticmethod
    def _fresh_id(task: Task, rule_name: str) -> str:
        base = f"auto_{rule_name}_{time.time_ns()}"
        step_id, suffix = base, 1
        while task.get_step(step_id) is not None:
            step_id = f"{base}_{suffix}"
            suffix += 1
        return step_id
