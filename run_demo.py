#!/usr/bin/env python
"""
Task Orchestrator - Demo Execution

Plans a sample task and executes it against a handful of demo tools
registered in the tool registry. The web tool fails with a timeout on its
first call to show the recovery path.
"""

import asyncio
import sys
from typing import Any, Dict

from task_orchestrator import TaskOrchestrator, EngineConfig, EnvConfig, ToolRegistry
from task_orchestrator.tools import register_builtin_tools


def build_demo_registry() -> ToolRegistry:
    """Registry with deterministic stand-ins for the external tools."""
    registry = register_builtin_tools(ToolRegistry())
    calls = {"web_intelligence": 0}

    def web_intelligence(params: Dict[str, Any]) -> Dict[str, Any]:
        calls["web_intelligence"] += 1
        if calls["web_intelligence"] == 1:
            raise RuntimeError("network timeout while fetching page")
        return {"content": f"Page content for: {params.get('query')}", "timeout": params.get("timeout")}

    def analytics_brain(params: Dict[str, Any]) -> Dict[str, Any]:
        if params.get("action") == "correlate":
            return {"correlations": {"x_y": 0.42}}
        return {"results": {"descriptive_stats": {"count": 3, "mean": 2.0}}}

    registry.register("web_intelligence", web_intelligence, "Fetch web content")
    registry.register("analytics_brain", analytics_brain, "Statistical analysis")
    return registry


async def run(description: str) -> int:
    EnvConfig.load_env_file()
    config = EngineConfig.from_env()
    engine = TaskOrchestrator(config=config, registry=build_demo_registry())

    print("=" * 70)
    print("Task Orchestrator - Demo Execution")
    print("=" * 70)
    print(f"Description: {description}")
    print()

    plan = engine.plan_task(description)
    print(f"Planned task {plan.task_id}:")
    for action in plan.next_actions:
        print(f"  - {action}")
    print()

    response = await engine.execute_task(plan.task_id)
    task = engine.get_task(plan.task_id)

    print(f"Status:   {response.status}")
    print(f"Progress: {response.progress:.0f}%")
    print(f"Reasoning: {response.reasoning}")
    print()
    print("Steps:")
    for step in task.steps:
        print(f"  {step.id:<32} {step.tool:<20} {step.status.value}")
    if response.errors:
        print()
        print("Errors:")
        for error in response.errors:
            print(f"  - {error}")

    return 0 if response.status == "completed" else 1


def main():
    description = " ".join(sys.argv[1:]) or "fetch data from the web and analyze it"
    sys.exit(asyncio.run(run(description)))


if __name__ == "__main__":
    main()
