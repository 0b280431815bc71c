"""
Task Orchestrator - Keyword-planned, self-recovering task execution engine

Decomposes a natural-language task into interdependent steps, executes them
through a caller-supplied tool executor, and recovers from step failures by
acquiring or upgrading tools, retrying with adjusted parameters, or skipping
non-critical work.

Features:
- Deterministic keyword decomposition into a dependency chain
- LangGraph-driven pass loop over dependency-satisfied steps
- ``${path}`` templates resolved from earlier results at run time
- Follow-up steps appended from the shape of completed results
- Self-improvement through a runtime tool registry (langchain-core tools)
- Environment-based configuration

Installation:
pip install langgraph langchain-core python-dotenv

Example:
    >>> import asyncio
    >>> from task_orchestrator import TaskOrchestrator, EngineConfig
    >>>
    >>> engine = TaskOrchestrator(config=EngineConfig.from_env())
    >>> plan = engine.plan_task("fetch data from the web and analyze it")
    >>> response = asyncio.run(engine.execute_task(plan.task_id, my_executor))
    >>> print(response.status, response.progress)
"""

__version__ = "1.0.0"
__all__ = [
    'TaskOrchestrator',
    'EngineConfig',
    'EnvConfig',
    'TaskStatus',
    'StepStatus',
    'Task',
    'Step',
    'TaskResponse',
    'ToolRegistry',
    'TaskNotFoundError',
]

from task_orchestrator.core import TaskOrchestrator
from task_orchestrator.config import EngineConfig, EnvConfig
from task_orchestrator.models import TaskStatus, StepStatus, Task, Step, TaskResponse
from task_orchestrator.tools import ToolRegistry
from task_orchestrator.utils.exceptions import TaskNotFoundError
