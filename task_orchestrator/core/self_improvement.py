"""
Self-Improvement - Acquiring or upgrading tools in response to failures

Two parts:

``SelfImprovementEngine``
    The consumed capability: diagnose a missing capability, create a tool,
    improve an existing tool. ``RegistryImprovementEngine`` is the default
    implementation; "creating" a tool means registering an implementation
    in the ``ToolRegistry`` at runtime.

``SelfImprovementPolicy``
    The decision made by the scheduler when a step fails, before any
    parameter-level rethink. It never raises.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Set

from task_orchestrator.models import (
    ImprovementAnalysis,
    ImprovementCategory,
    SelfImprovementResult,
    Step,
    Task,
    ToolDefinition,
)
from task_orchestrator.tools.registry import ToolRegistry
from task_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)


class SelfImprovementEngine(ABC):
    """
    Interface of the capability-acquisition collaborator.

    All methods are coroutines; implementations report failure through
    their return values.
    """

    @abstractmethod
    async def analyze_failure(
        self,
        description: str,
        reason: str,
        available_tools: List[str],
    ) -> Optional[ImprovementAnalysis]:
        """Diagnose the capability missing behind a failure, or None."""

    @abstractmethod
    async def create_tool(self, definition: ToolDefinition) -> bool:
        """Make a new tool available; True on success."""

    @abstractmethod
    async def improve_tool(self, name: str, category: str) -> bool:
        """Apply an improvement category to an existing tool; True on success."""


# Capability catalogue: (keywords in the task description, tool definition, confidence)
CAPABILITY_CATALOGUE = (
    (
        ("api", "rest", "graphql"),
        "API Integration",
        ToolDefinition(
            name="api_client",
            description="API client for REST, GraphQL, and webhook integrations",
            parameters={
                "action": {"type": "string", "enum": ["get", "post", "put", "delete", "graphql", "webhook"]},
                "url": {"type": "string"},
                "headers": {"type": "object"},
                "data": {"type": "object"},
            },
            category="integration",
        ),
        0.9,
    ),
    (
        ("file", "document", "pdf"),
        "File Processing",
        ToolDefinition(
            name="file_processor",
            description="File processing for documents, PDFs, images, and archives",
            parameters={
                "action": {"type": "string", "enum": ["read", "convert", "extract", "compress", "merge"]},
                "file_path": {"type": "string"},
                "format": {"type": "string"},
            },
            category="utility",
        ),
        0.85,
    ),
    (
        ("ml", "model", "train"),
        "Machine Learning",
        ToolDefinition(
            name="ml_engine",
            description="Machine learning model training, inference, and evaluation",
            parameters={
                "action": {"type": "string", "enum": ["train", "predict", "evaluate", "optimize"]},
                "model_type": {"type": "string"},
                "data": {"type": "object"},
            },
            category="ai",
        ),
        0.8,
    ),
)


def placeholder_implementation(definition: ToolDefinition):
    """Implementation registered for a tool that has only a definition."""
    async def run(params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "success": True,
            "tool": definition.name,
            "action": params.get("action", "execute"),
            "result": "Implementation needed",
        }
    return run


class RegistryImprovementEngine(SelfImprovementEngine):
    """Default engine backed by a ``ToolRegistry``."""

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    async def analyze_failure(
        self,
        description: str,
        reason: str,
        available_tools: List[str],
    ) -> Optional[ImprovementAnalysis]:
        lowered = (description or "").lower()
        for words, capability, definition, confidence in CAPABILITY_CATALOGUE:
            if definition.name in available_tools:
                continue
            if any(word in lowered for word in words):
                return ImprovementAnalysis(
                    missing_capability=capability,
                    suggested_tool=definition,
                    confidence=confidence,
                    reasoning=f"Task requires {capability.lower()} capabilities not in current toolset",
                )
        return None

    async def create_tool(self, definition: ToolDefinition) -> bool:
        implementation = definition.implementation or placeholder_implementation(definition)
        self.registry.register(definition.name, implementation, definition.description)
        return True

    async def improve_tool(self, name: str, category: str) -> bool:
        return self.registry.improve(name, category)


def identify_tool_improvement(failure_reason: str) -> Optional[ImprovementCategory]:
    """Map failure text to an improvement category."""
    lowered = failure_reason.lower()

    if "timeout" in lowered or "slow" in lowered:
        return ImprovementCategory.OPTIMIZE_PERFORMANCE

    if "error" in lowered or "exception" in lowered:
        return ImprovementCategory.ADD_ERROR_HANDLING

    if "debug" in lowered or "trace" in lowered:
        return ImprovementCategory.ADD_LOGGING

    return None


class SelfImprovementPolicy:
    """
    Decides whether a failed step can be recovered by acquiring or
    upgrading a tool.

    Args:
        engine: Capability-acquisition collaborator
        confidence_threshold: Diagnosis confidence needed to create a tool
    """

    def __init__(self, engine: SelfImprovementEngine, confidence_threshold: float = 0.7):
        self.engine = engine
        self.confidence_threshold = confidence_threshold

    async def attempt(
        self,
        task: Task,
        step: Step,
        error: str,
        available_tools: Set[str],
    ) -> SelfImprovementResult:
        """
        Try to recover a failed step.

        Nothing is attempted without a diagnosis. On success with a new
        tool, the name is added to ``available_tools`` and the step is
        rebound to it.
        """
        try:
            analysis = await self.engine.analyze_failure(
                task.description, error, sorted(available_tools)
            )

            if analysis is None:
                return SelfImprovementResult(
                    improved=False, reasoning="No improvement opportunity identified"
                )

            if analysis.confidence > self.confidence_threshold:
                definition = analysis.suggested_tool
                if await self.engine.create_tool(definition):
                    available_tools.add(definition.name)
                    step.tool = definition.name
                    logger.info(f"[RECOVERY] Created tool '{definition.name}' for step {step.id}")
                    return SelfImprovementResult(
                        improved=True,
                        reasoning=(
                            f"Created new tool '{definition.name}' to handle "
                            f"{analysis.missing_capability}"
                        ),
                        new_tool=definition.name,
                    )

            if step.tool in available_tools:
                category = identify_tool_improvement(error)
                if category is not None and await self.engine.improve_tool(step.tool, category.value):
                    logger.info(f"[RECOVERY] Improved tool '{step.tool}' with {category.value}")
                    return SelfImprovementResult(
                        improved=True,
                        reasoning=f"Improved existing tool '{step.tool}' with {category.value}",
                        tool_modified=step.tool,
                    )

            return SelfImprovementResult(
                improved=False, reasoning="Self-improvement attempt unsuccessful"
            )

        except Exception as e:
            logger.warning(f"[RECOVERY] Self-improvement failed for step {step.id}: {e}")
            return SelfImprovementResult(
                improved=False, reasoning=f"Self-improvement failed: {e}"
            )
