"""
Autonomous Rethink - Failure decision policy for steps

Evaluated after self-improvement did not recover a step. Decisions are made
on the lower-cased failure message; the first matching rule wins:

0. permission / not-found failures: skip, never retry
1. escalation (continuous failures >= threshold): alternative tool, else
   skip non-critical steps
2. missing parameter: synthesize it from the task and retry
3. rate limiting: double ``delay`` and retry
4. network / timeout / fetch: double ``timeout``, add retries and a fallback
5. format / parse / invalid: relax parsing and retry
6. anything else: simplified retry until the failure budget is spent

``decide`` is total: every input reaches exactly one decision and nothing
raises out of it.
"""

import re
from typing import Any, Dict, FrozenSet, Optional, Tuple

from task_orchestrator.models import RethinkDecision, Step, Task
from task_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)

CRITICAL_TOOLS: FrozenSet[str] = frozenset({"web_intelligence", "cognitive_search"})

DEFAULT_TIMEOUT_MS = 7500
DEFAULT_DELAY_MS = 1000

PERMISSION_MARKERS = ("permission", "unauthorized", "forbidden")
NOT_FOUND_MARKERS = ("not found", "404")

MISSING_PARAM_PATTERNS = (
    re.compile(r"([a-zA-Z_]+) parameter (?:is )?required"),
    re.compile(r"missing (?:required )?(?:parameter|argument|field)s?:?\s*['\"]?([a-zA-Z_]+)"),
    re.compile(r"required (?:parameter|argument|field):?\s*['\"]?([a-zA-Z_]+)"),
)


def _contains(text: str, *needles: str) -> bool:
    return any(needle in text for needle in needles)


class AutonomousRethink:
    """
    Parameter/strategy adjustment after an unrecovered step failure.

    Args:
        escalation_threshold: Continuous failures that trigger alternatives/skips
        max_failures: Continuous failures after which no more retries are offered
        critical_tools: Tools whose steps are never skipped by escalation
        critical_dependents: Dependent-step count that makes a step critical
    """

    def __init__(
        self,
        escalation_threshold: int = 3,
        max_failures: int = 5,
        critical_tools: FrozenSet[str] = CRITICAL_TOOLS,
        critical_dependents: int = 3,
    ):
        self.escalation_threshold = escalation_threshold
        self.max_failures = max_failures
        self.critical_tools = critical_tools
        self.critical_dependents = critical_dependents

    def decide(self, task: Task, step: Step, error: str, continuous_failures: int) -> RethinkDecision:
        lowered = (error or "").lower()
        params = dict(step.params)

        if _contains(lowered, *PERMISSION_MARKERS):
            return self._skip(params, "Insufficient permissions", "Skipped due to permission issues")

        if _contains(lowered, *NOT_FOUND_MARKERS):
            return self._skip(params, "Resource not available", "Skipped due to resource not found")

        if continuous_failures >= self.escalation_threshold:
            alternative = self.find_alternative(task, step, lowered)
            if alternative is not None:
                tool, alt_params, reasoning = alternative
                return RethinkDecision(
                    should_retry=True,
                    should_skip=False,
                    new_params=alt_params,
                    new_reasoning=f"Autonomous rethink: {reasoning}",
                    new_tool=tool,
                )

            if not self.is_critical(step, task):
                return self._skip(
                    params,
                    "Non-critical step skipped after multiple failures",
                    "Autonomous decision: Skipping to maintain progress",
                )

        if _contains(lowered, "parameter required", "required parameter", "missing"):
            return self._retry(
                self.generate_smart_params(step, task, error),
                "Autonomous fix: Generated missing parameters from context",
            )

        if _contains(lowered, "rate limit", "too many requests", "429"):
            params["delay"] = self._number(params.get("delay"), DEFAULT_DELAY_MS) * 2
            return self._retry(params, f"Autonomous fix: Backing off, delay now {params['delay']}ms")

        if _contains(lowered, "network", "timeout", "timed out", "fetch"):
            params["timeout"] = self._number(params.get("timeout"), DEFAULT_TIMEOUT_MS) * 2
            params["retries"] = 3
            params["fallback"] = True
            return self._retry(params, f"Autonomous fix: Enhanced network resilience, timeout now {params['timeout']}ms")

        if _contains(lowered, "format", "parse", "invalid"):
            params.update({"format": "json", "strict": False, "fallback": True})
            return self._retry(params, "Autonomous fix: Relaxed format constraints")

        if continuous_failures < self.max_failures:
            params.update({"simplified": True, "autonomous": True})
            return self._retry(
                params,
                f"Autonomous retry {continuous_failures}/{self.max_failures}: Progressive simplification",
            )

        return RethinkDecision(
            should_retry=False,
            should_skip=False,
            new_params=params,
            new_reasoning="Maximum retries exceeded, marking as failed",
        )

    @staticmethod
    def is_unrecoverable(error: str) -> bool:
        """Permission and not-found failures are skipped, never retried."""
        lowered = (error or "").lower()
        return _contains(lowered, *PERMISSION_MARKERS, *NOT_FOUND_MARKERS)

    def find_alternative(
        self, task: Task, step: Step, lowered_error: str
    ) -> Optional[Tuple[str, Dict[str, Any], str]]:
        """Alternative (tool, params, reasoning) for network-class failures."""
        if not _contains(lowered_error, "network", "timeout", "timed out"):
            return None

        if step.tool == "web_intelligence":
            return (
                "cognitive_search",
                {"action": "search", "query": task.description, "engines": ["duckduckgo"]},
                "Switched to cognitive_search as alternative to web_intelligence",
            )

        if step.tool == "cognitive_search":
            return (
                "web_intelligence",
                {"action": "fetch", "query": task.description, "options": {"timeout": 5000}},
                "Switched to web_intelligence with reduced timeout",
            )

        return None

    def is_critical(self, step: Step, task: Task) -> bool:
        dependents = len(task.dependents_of(step.id))
        return step.tool in self.critical_tools or dependents >= self.critical_dependents

    def generate_smart_params(self, step: Step, task: Task, error: str) -> Dict[str, Any]:
        params = dict(step.params)

        missing = None
        for pattern in MISSING_PARAM_PATTERNS:
            match = pattern.search(error)
            if match:
                missing = match.group(1)
                break

        if missing is None:
            return params

        if missing in ("query", "description"):
            params[missing] = task.description
        elif missing == "action":
            params[missing] = self.infer_action(step.tool, task.description)
        elif missing == "data":
            params[missing] = self.find_previous_result(task, "data")
        else:
            params[missing] = "auto-generated"
        return params

    @staticmethod
    def infer_action(tool: str, description: str) -> str:
        lowered = (description or "").lower()

        if tool == "web_intelligence":
            if "scrape" in lowered:
                return "scrape"
            if "analyze" in lowered:
                return "analyze"
            return "fetch"

        if tool == "cognitive_search":
            if "fact" in lowered:
                return "fact_check"
            if "trend" in lowered:
                return "trend_analysis"
            return "search"

        return "default"

    @staticmethod
    def find_previous_result(task: Task, key: str) -> Any:
        """First non-empty ``key`` field among the results so far."""
        for result in task.results.values():
            if isinstance(result, dict) and result.get(key):
                return result[key]
        return {}

    @staticmethod
    def _number(value: Any, default: int) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            return default
        return value

    @staticmethod
    def _retry(params: Dict[str, Any], reasoning: str) -> RethinkDecision:
        return RethinkDecision(
            should_retry=True, should_skip=False, new_params=params, new_reasoning=reasoning
        )

    @staticmethod
    def _skip(params: Dict[str, Any], reason: str, reasoning: str) -> RethinkDecision:
        return RethinkDecision(
            should_retry=False,
            should_skip=True,
            new_params=params,
            new_reasoning=reasoning,
            skip_reason=reason,
        )
