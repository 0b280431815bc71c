"""
Step Scheduler - Dependency-resolution execution loop

The loop is a small LangGraph workflow:

    run_pass ──(progress made, budget left)──► run_pass
        │
        └──(no runnable step / nothing incomplete / failure budget spent)──► END

Each pass walks a snapshot of the task's step list in order and runs every
step whose dependencies are all completed. Steps never run concurrently;
the only suspension point is the awaited executor call. Failures go through
self-improvement first, then the autonomous rethink policy; permission and
not-found failures go straight to rethink, which skips them.

The task itself stays in the task store; the graph state only carries
counters, so nothing in the state needs copying or serializing.
"""

import inspect
from typing import Any, Awaitable, Callable, Dict, List, Literal, Set, TypedDict, Union

from langgraph.graph import END, StateGraph

from task_orchestrator.config import EngineConfig
from task_orchestrator.models import Step, StepStatus, Task, TaskResponse, TaskStatus
from task_orchestrator.utils.exceptions import TaskNotFoundError
from task_orchestrator.utils.logger import get_logger

from .rethink import AutonomousRethink
from .self_improvement import SelfImprovementPolicy
from .step_mutator import StepMutator
from .task_store import TaskStore
from .template_resolver import TemplateResolver

logger = get_logger(__name__)

Executor = Callable[[str, Dict[str, Any]], Union[Awaitable[Any], Any]]


class SchedulerState(TypedDict):
    """Counters threaded through the pass loop."""
    task_id: str
    continuous_failures: int
    passes: int
    steps_executed: int


class StepScheduler:
    """
    Runs a planned task to completion, stall, or failure-budget exhaustion.

    Args:
        store: Repository the task is read from
        config: Engine configuration (failure budget, pass bound, toggles)
        available_tools: Shared set of known tool names, mutated by self-improvement
        improvement: Self-improvement policy
        rethink: Autonomous rethink policy
        resolver: Template resolver for step params
        mutator: Step mutator for follow-up steps
    """

    def __init__(
        self,
        store: TaskStore,
        config: EngineConfig,
        available_tools: Set[str],
        improvement: SelfImprovementPolicy,
        rethink: AutonomousRethink,
        resolver: TemplateResolver,
        mutator: StepMutator,
    ):
        self.store = store
        self.config = config
        self.available_tools = available_tools
        self.improvement = improvement
        self.rethink = rethink
        self.resolver = resolver
        self.mutator = mutator

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def execute(self, task_id: str, executor: Executor) -> TaskResponse:
        """
        Execute a task's steps.

        Raises:
            TaskNotFoundError: if the task id is unknown

        Any other failure inside the loop marks the task failed and is
        reported in the returned response.
        """
        task = self.store.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        logger.info("=" * 80)
        logger.info(f"[EXEC] Executing task {task_id}: {task.description[:100]}")
        logger.info("=" * 80)

        task.status = TaskStatus.EXECUTING

        try:
            workflow = self.build_workflow(executor)
            final_state = await workflow.ainvoke(
                SchedulerState(task_id=task_id, continuous_failures=0, passes=0, steps_executed=0),
                config={"recursion_limit": self.config.max_passes},
            )
            self._finalize(task)
            logger.info(
                f"[EXEC] Task {task_id} finished as {task.status.value} after "
                f"{final_state['passes']} pass(es)"
            )
            return self.build_response(task)

        except Exception as e:
            logger.error(f"[EXEC] Task {task_id} aborted: {e}", exc_info=True)
            task.status = TaskStatus.FAILED
            task.errors.append(str(e) or "Task execution failed")
            self.store.save(task)
            return TaskResponse(
                task_id=task_id,
                status=TaskStatus.FAILED.value,
                progress=0,
                results=dict(task.results),
                next_actions=["Task failed - consider replanning"],
                reasoning=f"Task execution failed: {', '.join(task.errors)}",
                errors=list(task.errors),
            )

    def build_workflow(self, executor: Executor):
        """Compile the pass-loop graph bound to one executor."""
        async def run_pass(state: SchedulerState) -> Dict[str, Any]:
            return await self._run_pass(state, executor)

        workflow = StateGraph(SchedulerState)
        workflow.add_node("run_pass", run_pass)
        workflow.set_entry_point("run_pass")
        workflow.add_conditional_edges(
            "run_pass",
            self._route_after_pass,
            {
                "run_pass": "run_pass",
                "complete": END,
            }
        )
        return workflow.compile()

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def _should_continue(self, task: Task, continuous_failures: int) -> bool:
        return (
            continuous_failures < self.config.max_continuous_failures
            and task.has_incomplete_steps()
        )

    def _route_after_pass(self, state: SchedulerState) -> Literal["run_pass", "complete"]:
        task = self.store.get(state["task_id"])
        if task is None or state["steps_executed"] == 0:
            return "complete"
        if not self._should_continue(task, state["continuous_failures"]):
            return "complete"
        return "run_pass"

    async def _run_pass(self, state: SchedulerState, executor: Executor) -> Dict[str, Any]:
        task = self.store.get(state["task_id"])
        if task is None:
            raise TaskNotFoundError(state["task_id"])

        continuous_failures = state["continuous_failures"]
        executed = 0

        if self._should_continue(task, continuous_failures):
            # Steps appended during this pass are picked up by the next one
            for step in list(task.steps):
                if step.status == StepStatus.COMPLETED:
                    continue
                if not task.dependencies_met(step):
                    continue

                executed += 1
                continuous_failures = await self._run_step(task, step, executor, continuous_failures)

        passes = state["passes"] + 1
        logger.debug(
            f"[EXEC] Pass {passes}: executed {executed} step(s), "
            f"continuous failures {continuous_failures}"
        )
        if executed == 0 and task.has_incomplete_steps():
            stalled = [s.id for s in task.steps_with_status(StepStatus.PENDING)]
            logger.warning(f"[EXEC] No runnable steps; stalled: {stalled}")

        self.store.save(task)
        return {
            "continuous_failures": continuous_failures,
            "passes": passes,
            "steps_executed": executed,
        }

    async def _run_step(self, task: Task, step: Step, executor: Executor, continuous_failures: int) -> int:
        """Run one step; returns the updated continuous-failure count."""
        step.status = StepStatus.RUNNING
        params = self.resolver.enrich(step.params, task)
        logger.info(f"[EXEC] Running step {step.id} with {step.tool}")

        try:
            result = executor(step.tool, params)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            return await self._handle_failure(task, step, e, continuous_failures)

        step.status = StepStatus.COMPLETED
        step.result = result
        step.error = None
        task.results[step.id] = result
        logger.info(f"[EXEC] Step {step.id} completed")

        if self.config.auto_generate_steps:
            self.mutator.after_step_completion(task, step)
        return 0

    # ------------------------------------------------------------------
    # Failure recovery
    # ------------------------------------------------------------------

    async def _handle_failure(self, task: Task, step: Step, error: Exception, continuous_failures: int) -> int:
        message = str(error) or error.__class__.__name__
        step.error = message
        step.status = StepStatus.FAILED
        continuous_failures += 1
        logger.warning(
            f"[RECOVERY] Step {step.id} failed ({continuous_failures} in a row): {message}"
        )

        if (
            self.config.self_improvement_enabled
            and task.improvement_attempts < self.config.max_improvement_attempts
            and not self.rethink.is_unrecoverable(message)
        ):
            task.status = TaskStatus.SELF_IMPROVING
            outcome = await self.improvement.attempt(task, step, message, self.available_tools)
            task.status = TaskStatus.EXECUTING

            if outcome.improved:
                task.improvement_attempts += 1
                step.status = StepStatus.PENDING
                step.reasoning = outcome.reasoning
                logger.info(f"[RECOVERY] Step {step.id} recovered: {outcome.reasoning}")
                return 0

        task.status = TaskStatus.RETHINKING
        decision = self.rethink.decide(task, step, message, continuous_failures)
        task.status = TaskStatus.EXECUTING

        if decision.should_retry:
            step.status = StepStatus.PENDING
            step.params = decision.new_params
            if decision.new_tool:
                step.tool = decision.new_tool
            step.reasoning = decision.new_reasoning
            task.retry_count += 1
            logger.info(f"[RECOVERY] Retrying step {step.id}: {decision.new_reasoning}")
        elif decision.should_skip:
            step.status = StepStatus.COMPLETED
            step.result = {"skipped": True, "reason": decision.skip_reason}
            step.reasoning = decision.new_reasoning
            task.results[step.id] = step.result
            continuous_failures = 0
            logger.info(f"[RECOVERY] Skipped step {step.id}: {decision.skip_reason}")
        else:
            task.errors.append(f"Step {step.id} failed: {message}")
            logger.error(f"[RECOVERY] Step {step.id} failed permanently: {message}")

        return continuous_failures

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _finalize(self, task: Task) -> None:
        if task.steps and task.all_steps_completed():
            task.status = TaskStatus.COMPLETED
        elif task.errors and task.retry_budget_exhausted():
            task.status = TaskStatus.FAILED
        task.record_progress()
        self.store.save(task)

    def build_response(self, task: Task) -> TaskResponse:
        running = task.steps_with_status(StepStatus.RUNNING)
        return TaskResponse(
            task_id=task.id,
            status=task.status.value,
            current_step=running[0].id if running else None,
            progress=task.record_progress(),
            results=dict(task.results),
            next_actions=self.generate_next_actions(task),
            reasoning=self.generate_reasoning(task),
            errors=list(task.errors),
        )

    @staticmethod
    def generate_next_actions(task: Task) -> List[str]:
        actions = []

        pending = task.steps_with_status(StepStatus.PENDING)
        if pending:
            actions.append(f"Execute {len(pending)} pending steps")

        failed = task.steps_with_status(StepStatus.FAILED)
        if failed:
            actions.append(f"Rethink {len(failed)} failed steps")

        if task.status == TaskStatus.COMPLETED:
            actions.append("Task completed successfully")

        return actions

    @staticmethod
    def generate_reasoning(task: Task) -> str:
        completed = len(task.steps_with_status(StepStatus.COMPLETED))
        failed = len(task.steps_with_status(StepStatus.FAILED))
        skipped = sum(1 for s in task.steps if s.is_skipped)

        reasoning = f"Cognitive analysis: {completed}/{len(task.steps)} steps completed"

        if skipped:
            reasoning += f" ({skipped} skipped)"

        if failed:
            reasoning += f", {failed} failed (retry count: {task.retry_count}/{task.max_retries})"

        if task.improvement_attempts:
            reasoning += f", {task.improvement_attempts} self-improvements made"

        if task.status == TaskStatus.COMPLETED:
            reasoning += ". Task successfully completed through cognitive orchestration."
        elif task.status == TaskStatus.FAILED:
            reasoning += ". Task failed after cognitive rethinking attempts."
        else:
            reasoning += ". Continuing execution with adaptive reasoning."

        return reasoning
