"""
Task Orchestrator - Planning and execution facade

Ties the components together:

    TaskDecomposer -> TaskStore -> StepScheduler
        (TemplateResolver -> executor -> StepMutator / recovery policies)

Example:
    >>> engine = TaskOrchestrator()
    >>> plan = engine.plan_task("fetch data from the web and analyze it")
    >>> response = await engine.execute_task(plan.task_id, executor)
    >>> response.status, response.progress
"""

from typing import Any, Dict, Optional, Set

from task_orchestrator.config import EngineConfig
from task_orchestrator.models import Task, TaskResponse, new_task_id
from task_orchestrator.tools import ToolRegistry, register_builtin_tools
from task_orchestrator.utils.logger import get_logger, set_log_level

from .decomposer import TaskDecomposer
from .rethink import AutonomousRethink
from .scheduler import Executor, StepScheduler
from .self_improvement import (
    RegistryImprovementEngine,
    SelfImprovementEngine,
    SelfImprovementPolicy,
)
from .step_mutator import StepMutator
from .task_store import InMemoryTaskStore, TaskStore
from .template_resolver import TemplateResolver

logger = get_logger(__name__)


DEFAULT_TOOLS = frozenset({
    'typewrite', 'infer_type', 'cast_type', 'log_message',
    'generate_n8n_workflow', 'transform_data', 'validate_data',
    'evaluate_expression', 'manage_secrets', 'web_intelligence',
    'cognitive_search', 'analytics_brain', 'vision_intelligence',
    'orchestrator_brain', 'system_intelligence', 'memory_brain',
    'database_intelligence',
})


class TaskOrchestrator:
    """
    Plans tasks from descriptions and executes them with adaptive recovery.

    All collaborators can be injected; defaults are an in-memory store, a
    tool registry holding the built-in tools, and an improvement engine
    backed by that registry.

    Concurrent ``execute_task`` calls on the same task id are not
    serialized here; callers must not overlap them.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        store: Optional[TaskStore] = None,
        registry: Optional[ToolRegistry] = None,
        improvement_engine: Optional[SelfImprovementEngine] = None,
        decomposer: Optional[TaskDecomposer] = None,
        mutator: Optional[StepMutator] = None,
    ):
        self.config = config or EngineConfig()
        set_log_level(self.config.log_level)
        self.store = store if store is not None else InMemoryTaskStore()
        self.registry = registry if registry is not None else register_builtin_tools(ToolRegistry())
        self.improvement_engine = improvement_engine or RegistryImprovementEngine(self.registry)
        self.decomposer = decomposer or TaskDecomposer()
        self.autonomous_mode = self.config.autonomous_mode

        self._available_tools: Set[str] = set(DEFAULT_TOOLS) | set(self.registry.names())

        self.scheduler = StepScheduler(
            store=self.store,
            config=self.config,
            available_tools=self._available_tools,
            improvement=SelfImprovementPolicy(
                self.improvement_engine,
                confidence_threshold=self.config.improvement_confidence_threshold,
            ),
            rethink=AutonomousRethink(
                escalation_threshold=self.config.rethink_escalation_threshold,
                max_failures=self.config.max_continuous_failures,
            ),
            resolver=TemplateResolver(),
            mutator=mutator or StepMutator(),
        )

        logger.debug(f"Task orchestrator initialized with {len(self._available_tools)} known tools")

    @property
    def available_tools(self) -> Set[str]:
        return set(self._available_tools)

    def plan_task(self, description: str, context: Optional[Dict[str, Any]] = None) -> TaskResponse:
        """
        Decompose a description into steps and store the new task.

        Never fails; at least the fallback step is always produced.
        """
        context = dict(context or {})
        steps = self.decomposer.decompose(description, context)

        task = Task(
            id=new_task_id(),
            description=description or "",
            steps=steps,
            context=context,
            max_retries=self.config.max_retries,
        )
        self.store.save(task)

        logger.info(f"[PLAN] Planned task {task.id} with {len(steps)} step(s)")
        return TaskResponse(
            task_id=task.id,
            status="planned",
            progress=0,
            results={},
            next_actions=[s.reasoning for s in steps],
            reasoning=f"Decomposed task into {len(steps)} steps based on cognitive analysis",
        )

    async def execute_task(self, task_id: str, executor: Optional[Executor] = None) -> TaskResponse:
        """
        Execute a planned task.

        Args:
            task_id: Id returned by ``plan_task``
            executor: ``(tool, params) -> result`` (sync or async); defaults
                to the tool registry

        Raises:
            TaskNotFoundError: if the task id is unknown
        """
        return await self.scheduler.execute(task_id, executor or self.registry.as_executor())

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.store.get(task_id)

    def set_autonomous_mode(self, enabled: bool) -> None:
        # Stored only; no code path reads it yet
        self.autonomous_mode = enabled

    def add_dynamic_tool(self, name: str) -> None:
        """Register a tool name as available without an implementation."""
        self._available_tools.add(name)
        logger.info(f"[TOOLS] Added dynamic tool '{name}'")
