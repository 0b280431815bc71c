"""
Tool Registry - Runtime registration and invocation of tool implementations

Tools are plain callables taking a single ``params`` mapping (sync or
async). Each one is wrapped in a langchain-core ``StructuredTool`` with a
shared input schema, so registration at runtime is all it takes for the
self-improvement workflow to "create" a tool.

Usage:
    registry = ToolRegistry()
    registry.register("echo", lambda params: params, "Return the parameters")

    executor = registry.as_executor()
    result = await executor("echo", {"value": 1})
"""

import inspect
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional

from langchain_core.tools import BaseTool, StructuredTool
from pydantic import BaseModel, Field

from task_orchestrator.models import ImprovementCategory
from task_orchestrator.utils.exceptions import (
    ToolNotFoundError,
    ToolRegistrationError,
    wrap_exception,
)
from task_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)

ToolImplementation = Callable[[Dict[str, Any]], Any]
Executor = Callable[[str, Dict[str, Any]], Awaitable[Any]]


class ToolInput(BaseModel):
    """Input schema shared by every registered tool."""
    params: Dict[str, Any] = Field(default_factory=dict)


async def call_implementation(func: ToolImplementation, params: Dict[str, Any]) -> Any:
    """Call a sync or async implementation and return its value."""
    result = func(params)
    if inspect.isawaitable(result):
        result = await result
    return result


def _with_logging(name: str, func: ToolImplementation) -> ToolImplementation:
    async def logged(params: Dict[str, Any]) -> Any:
        logger.info(f"[TOOLS] Executing {name} with params: {sorted(params)}")
        result = await call_implementation(func, params)
        logger.info(f"[TOOLS] {name} returned {type(result).__name__}")
        return result
    return logged


def _with_error_handling(name: str, func: ToolImplementation) -> ToolImplementation:
    async def guarded(params: Dict[str, Any]) -> Any:
        try:
            return await call_implementation(func, params)
        except Exception as e:
            raise wrap_exception(e, name) from e
    return guarded


def _with_result_cache(name: str, func: ToolImplementation) -> ToolImplementation:
    cache: Dict[str, Any] = {}

    async def cached(params: Dict[str, Any]) -> Any:
        key = json.dumps(params, sort_keys=True, default=str)
        if key in cache:
            logger.debug(f"[TOOLS] {name} served from cache")
            return cache[key]
        result = await call_implementation(func, params)
        cache[key] = result
        return result
    return cached


IMPROVEMENT_WRAPPERS = {
    ImprovementCategory.ADD_LOGGING: _with_logging,
    ImprovementCategory.ADD_ERROR_HANDLING: _with_error_handling,
    ImprovementCategory.OPTIMIZE_PERFORMANCE: _with_result_cache,
}


class ToolRegistry:
    """
    Registry mapping tool names to callable implementations.

    Only one logical owner mutates the registry (the engine and its
    improvement workflow); no locking is performed.
    """

    def __init__(self):
        self._implementations: Dict[str, ToolImplementation] = {}
        self._tools: Dict[str, BaseTool] = {}
        self._descriptions: Dict[str, str] = {}
        self._improvements: Dict[str, List[str]] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> List[str]:
        return list(self._tools)

    def get(self, name: str) -> Optional[BaseTool]:
        return self._tools.get(name)

    def improvements(self, name: str) -> List[str]:
        """Improvement categories applied to a tool, in order."""
        return list(self._improvements.get(name, []))

    def register(
        self,
        name: str,
        implementation: ToolImplementation,
        description: str = "",
    ) -> BaseTool:
        """
        Register (or replace) the implementation of a tool.

        Args:
            name: Tool name used by steps
            implementation: Callable taking the params mapping, sync or async
            description: Human-readable description

        Returns:
            The langchain-core tool wrapping the implementation
        """
        if not name or not callable(implementation):
            raise ToolRegistrationError(name or "<empty>", "a name and a callable are required")

        description = description or self._descriptions.get(name) or f"Dynamically registered tool '{name}'"
        tool = self._build_tool(name, implementation, description)

        replaced = name in self._tools
        self._implementations[name] = implementation
        self._descriptions[name] = description
        self._tools[name] = tool
        if not replaced:
            self._improvements[name] = []

        logger.info(f"[TOOLS] {'Replaced' if replaced else 'Registered'} tool '{name}'")
        return tool

    def unregister(self, name: str) -> bool:
        if name not in self._tools:
            return False
        for mapping in (self._implementations, self._tools, self._descriptions, self._improvements):
            mapping.pop(name, None)
        logger.info(f"[TOOLS] Unregistered tool '{name}'")
        return True

    def improve(self, name: str, category: str) -> bool:
        """
        Apply an improvement category to a registered implementation.

        Returns:
            False when the tool is unknown or the category is not supported
        """
        if name not in self._implementations:
            logger.warning(f"[TOOLS] Cannot improve unknown tool '{name}'")
            return False

        try:
            wrapper = IMPROVEMENT_WRAPPERS[ImprovementCategory(category)]
        except ValueError:
            logger.warning(f"[TOOLS] Unsupported improvement '{category}' for '{name}'")
            return False

        improved = wrapper(name, self._implementations[name])
        self._implementations[name] = improved
        self._tools[name] = self._build_tool(name, improved, self._descriptions[name])
        self._improvements[name].append(ImprovementCategory(category).value)
        logger.info(f"[TOOLS] Applied {category} to '{name}'")
        return True

    async def invoke(self, name: str, params: Dict[str, Any]) -> Any:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return await tool.ainvoke({"params": dict(params)})

    def as_executor(self) -> Executor:
        """Executor callable ``(tool, params) -> awaitable result`` backed by this registry."""
        async def execute(tool: str, params: Dict[str, Any]) -> Any:
            return await self.invoke(tool, params)
        return execute

    @staticmethod
    def _build_tool(name: str, implementation: ToolImplementation, description: str) -> BaseTool:
        # Implementations may name their single argument freely
        async def run(params: Dict[str, Any]) -> Any:
            return await call_implementation(implementation, params)

        return StructuredTool.from_function(
            coroutine=run,
            name=name,
            description=description,
            args_schema=ToolInput,
        )
