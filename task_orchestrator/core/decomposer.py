"""
Task Decomposer - Keyword-driven breakdown of a description into steps

The decomposer is a pure function of the lower-cased description: a table
of rules is evaluated in registration order and every rule whose predicate
matches contributes one step. Rules are independent (several may match the
same description). Rules that consume a prior result depend on the
immediately preceding step and reference it through ``${previous.result}``.

Afterwards:
- two or more steps get a terminal ``summary`` step depending on all of them
- no match at all yields a single ``direct_execution`` step
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from task_orchestrator.models import Step
from task_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)

PREVIOUS_RESULT = "${previous.result}"
IMAGE_URL = "${image_url}"

ParamsFactory = Callable[[str, Dict[str, Any]], Dict[str, Any]]


def keywords(*words: str) -> Callable[[str], bool]:
    """Predicate matching when any of the words occurs as a substring."""
    return lambda text: any(word in text for word in words)


@dataclass(frozen=True)
class DecompositionRule:
    """
    One ``(predicate, step template)`` pair.

    Attributes:
        step_id: Id given to the produced step
        tool: Tool the step is bound to
        predicate: Test applied to the lower-cased description
        params: Builds the step params from (description, context)
        reasoning: Why the step was produced
        chains_previous: Depend on the step produced just before, if any
    """
    step_id: str
    tool: str
    predicate: Callable[[str], bool]
    params: ParamsFactory
    reasoning: str
    chains_previous: bool = False

    def matches(self, lowered: str) -> bool:
        return self.predicate(lowered)

    def build(self, description: str, context: Dict[str, Any], previous_id: Optional[str]) -> Step:
        dependencies = [previous_id] if self.chains_previous and previous_id else []
        return Step(
            id=self.step_id,
            tool=self.tool,
            params=self.params(description, context),
            dependencies=dependencies,
            reasoning=self.reasoning,
        )


DEFAULT_RULES: Sequence[DecompositionRule] = (
    DecompositionRule(
        step_id="web_fetch",
        tool="web_intelligence",
        predicate=keywords("web", "fetch", "scrape", "online"),
        params=lambda d, c: {"action": "fetch", "query": d, "context": dict(c)},
        reasoning="Detected need for web data gathering based on keywords",
    ),
    DecompositionRule(
        step_id="cognitive_search",
        tool="cognitive_search",
        predicate=keywords("search", "find", "research", "investigate"),
        params=lambda d, c: {"action": "search", "query": d},
        reasoning="Detected need for intelligent search and research capabilities",
    ),
    DecompositionRule(
        step_id="fact_check",
        tool="cognitive_search",
        predicate=keywords("fact", "verify", "truth", "check"),
        params=lambda d, c: {"action": "fact_check", "query": d},
        reasoning="Fact-checking required for information verification",
    ),
    DecompositionRule(
        step_id="trend_analysis",
        tool="cognitive_search",
        predicate=keywords("trend", "popular", "trending"),
        params=lambda d, c: {"action": "trend_analysis", "query": d},
        reasoning="Trend analysis needed to understand current patterns",
    ),
    DecompositionRule(
        step_id="data_analysis",
        tool="analytics_brain",
        predicate=keywords("analyze", "statistical", "correlation", "data"),
        params=lambda d, c: {"action": "analyze", "data": PREVIOUS_RESULT},
        reasoning="Statistical analysis required for data insights",
        chains_previous=True,
    ),
    DecompositionRule(
        step_id="forecast_analysis",
        tool="analytics_brain",
        predicate=keywords("forecast", "predict", "future"),
        params=lambda d, c: {
            "action": "forecast",
            "data": PREVIOUS_RESULT,
            "options": {"time_window": "30"},
        },
        reasoning="Forecasting analysis needed for future predictions",
        chains_previous=True,
    ),
    DecompositionRule(
        step_id="anomaly_detection",
        tool="analytics_brain",
        predicate=keywords("anomaly", "outlier", "unusual"),
        params=lambda d, c: {"action": "anomaly_detect", "data": PREVIOUS_RESULT},
        reasoning="Anomaly detection needed to identify unusual patterns",
        chains_previous=True,
    ),
    DecompositionRule(
        step_id="image_analysis",
        tool="vision_intelligence",
        predicate=keywords("image", "photo", "picture", "visual"),
        params=lambda d, c: {
            "action": "analyze",
            "image_url": IMAGE_URL,
            "options": {"extract_text": True, "detect_faces": True},
        },
        reasoning="Image analysis required for visual content understanding",
    ),
    DecompositionRule(
        step_id="text_extraction",
        tool="vision_intelligence",
        predicate=lambda t: "ocr" in t or ("text" in t and ("extract" in t or "read" in t)),
        params=lambda d, c: {
            "action": "ocr",
            "image_url": IMAGE_URL,
            "options": {"language": "en"},
        },
        reasoning="OCR needed to extract text from visual content",
    ),
    DecompositionRule(
        step_id="chart_analysis",
        tool="vision_intelligence",
        predicate=keywords("chart", "graph", "table"),
        params=lambda d, c: {
            "action": "extract_data",
            "image_url": IMAGE_URL,
            "options": {"analyze_charts": True},
        },
        reasoning="Chart analysis needed to extract structured data from visuals",
    ),
    DecompositionRule(
        step_id="data_transform",
        tool="transform_data",
        predicate=keywords("transform", "convert", "format"),
        params=lambda d, c: {"data": PREVIOUS_RESULT, "from_format": "json", "to_format": "json"},
        reasoning="Data transformation needed for optimal processing",
        chains_previous=True,
    ),
)


class TaskDecomposer:
    """
    Turns a free-text description into an ordered list of steps.

    Stateless apart from its rule table; safe to share between engines.
    """

    SUMMARY_STEP_ID = "summary"
    FALLBACK_STEP_ID = "direct_execution"
    LOGGING_TOOL = "log_message"

    def __init__(self, rules: Optional[Sequence[DecompositionRule]] = None):
        self.rules: List[DecompositionRule] = list(DEFAULT_RULES if rules is None else rules)

    def decompose(self, description: str, context: Optional[Dict[str, Any]] = None) -> List[Step]:
        """
        Create the initial step list for a description.

        Args:
            description: Natural-language task description
            context: Caller-supplied context, copied into params where used

        Returns:
            Steps in execution order; never empty
        """
        description = description or ""
        context = context or {}
        lowered = description.lower()

        steps: List[Step] = []
        for rule in self.rules:
            if not rule.matches(lowered):
                continue
            previous_id = steps[-1].id if steps else None
            step = rule.build(description, context, previous_id)
            steps.append(step)
            logger.debug(f"[PLAN] Rule '{rule.step_id}' matched -> {step.tool}")

        if len(steps) > 1:
            steps.append(Step(
                id=self.SUMMARY_STEP_ID,
                tool=self.LOGGING_TOOL,
                params={"message": "Task completed with cognitive orchestration", "level": "info"},
                dependencies=[s.id for s in steps],
                reasoning="Summary step for cognitive closure and result presentation",
            ))

        if not steps:
            steps.append(Step(
                id=self.FALLBACK_STEP_ID,
                tool=self.LOGGING_TOOL,
                params={"message": description, "level": "info"},
                reasoning="Direct execution as no complex patterns detected",
            ))

        logger.info(f"[PLAN] Decomposed into {len(steps)} step(s): {[s.id for s in steps]}")
        return steps
