"""
Tests for the tool registry and built-in tools.
"""

import asyncio

import pytest
from langchain_core.tools import BaseTool

from task_orchestrator.tools import ToolRegistry, log_message, register_builtin_tools
from task_orchestrator.utils.exceptions import (
    ToolExecutionError,
    ToolNotFoundError,
    ToolRegistrationError,
)


class Counter:
    """Implementation double counting its calls."""

    def __init__(self, fail_with=None):
        self.calls = 0
        self.fail_with = fail_with

    def __call__(self, params):
        self.calls += 1
        if self.fail_with:
            raise self.fail_with
        return {"echo": params, "call": self.calls}


class TestToolRegistry:
    """Test ToolRegistry registration and invocation."""

    def setup_method(self):
        self.registry = ToolRegistry()

    def test_register_returns_langchain_tool(self):
        tool = self.registry.register("echo", lambda params: params, "Echo params")

        assert isinstance(tool, BaseTool)
        assert tool.name == "echo"
        assert tool.description == "Echo params"
        assert "echo" in self.registry
        assert self.registry.names() == ["echo"]

    def test_invoke_sync_implementation(self):
        self.registry.register("echo", lambda params: {"got": params})

        result = asyncio.run(self.registry.invoke("echo", {"a": 1}))

        assert result == {"got": {"a": 1}}

    def test_invoke_async_implementation(self):
        async def shout(params):
            return params["text"].upper()

        self.registry.register("shout", shout)

        assert asyncio.run(self.registry.invoke("shout", {"text": "hi"})) == "HI"

    def test_invoke_unknown_tool_raises(self):
        with pytest.raises(ToolNotFoundError) as exc_info:
            asyncio.run(self.registry.invoke("nope", {}))

        assert str(exc_info.value) == "Tool 'nope' not found in registry"

    def test_implementation_errors_propagate_unchanged(self):
        self.registry.register("bad", Counter(fail_with=ValueError("rate limit exceeded")))

        with pytest.raises(ValueError, match="rate limit exceeded"):
            asyncio.run(self.registry.invoke("bad", {}))

    def test_register_requires_callable(self):
        with pytest.raises(ToolRegistrationError):
            self.registry.register("broken", "not callable")

        with pytest.raises(ToolRegistrationError):
            self.registry.register("", lambda params: None)

    def test_replace_keeps_description(self):
        self.registry.register("echo", lambda params: 1, "Original description")
        tool = self.registry.register("echo", lambda params: 2)

        assert tool.description == "Original description"
        assert asyncio.run(self.registry.invoke("echo", {})) == 2
        assert len(self.registry) == 1

    def test_unregister(self):
        self.registry.register("echo", lambda params: params)

        assert self.registry.unregister("echo")
        assert not self.registry.unregister("echo")
        assert self.registry.get("echo") is None

    def test_executor_delegates_to_registry(self):
        self.registry.register("echo", lambda params: params)
        executor = self.registry.as_executor()

        assert asyncio.run(executor("echo", {"x": 1})) == {"x": 1}

    def test_performance_improvement_caches_results(self):
        counter = Counter()
        self.registry.register("slow", counter)

        assert self.registry.improve("slow", "optimize_performance")
        first = asyncio.run(self.registry.invoke("slow", {"q": 1}))
        second = asyncio.run(self.registry.invoke("slow", {"q": 1}))
        asyncio.run(self.registry.invoke("slow", {"q": 2}))

        assert first == second
        assert counter.calls == 2
        assert self.registry.improvements("slow") == ["optimize_performance"]

    def test_error_handling_improvement_wraps_failures(self):
        self.registry.register("bad", Counter(fail_with=KeyError("missing")))
        self.registry.improve("bad", "add_error_handling")

        with pytest.raises(ToolExecutionError) as exc_info:
            asyncio.run(self.registry.invoke("bad", {}))

        assert exc_info.value.tool_name == "bad"
        assert "missing" in str(exc_info.value)

    def test_logging_improvement_keeps_behaviour(self):
        self.registry.register("echo", lambda params: params)
        self.registry.improve("echo", "add_logging")

        assert asyncio.run(self.registry.invoke("echo", {"k": "v"})) == {"k": "v"}

    def test_improvements_stack_in_order(self):
        self.registry.register("echo", lambda params: params)
        self.registry.improve("echo", "add_logging")
        self.registry.improve("echo", "optimize_performance")

        assert self.registry.improvements("echo") == ["add_logging", "optimize_performance"]

    def test_improve_rejects_unknown_tool_and_category(self):
        self.registry.register("echo", lambda params: params)

        assert not self.registry.improve("ghost", "add_logging")
        assert not self.registry.improve("echo", "make_it_better")
        assert self.registry.improvements("echo") == []


class TestBuiltinTools:
    """Test the built-in logging tool."""

    def test_log_message_reports_what_was_logged(self):
        assert log_message({"message": "hello", "level": "WARNING"}) == {
            "logged": True,
            "message": "hello",
            "level": "warning",
        }

    def test_log_message_defaults(self):
        assert log_message({}) == {"logged": True, "message": "", "level": "info"}

    def test_register_builtin_tools_keeps_existing(self):
        registry = ToolRegistry()
        registry.register("log_message", lambda params: "custom")

        register_builtin_tools(registry)

        assert asyncio.run(registry.invoke("log_message", {})) == "custom"

    def test_register_builtin_tools(self):
        registry = register_builtin_tools(ToolRegistry())

        result = asyncio.run(registry.invoke("log_message", {"message": "hi"}))

        assert result["logged"] is True
