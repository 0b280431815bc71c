"""
Core module - Planning, scheduling and recovery
"""

from .engine import TaskOrchestrator, DEFAULT_TOOLS
from .decomposer import TaskDecomposer, DecompositionRule, DEFAULT_RULES
from .scheduler import StepScheduler, SchedulerState
from .self_improvement import (
    SelfImprovementEngine,
    RegistryImprovementEngine,
    SelfImprovementPolicy,
    identify_tool_improvement,
)
from .rethink import AutonomousRethink, CRITICAL_TOOLS
from .step_mutator import StepMutator, MutationRule, DEFAULT_MUTATION_RULES
from .task_store import TaskStore, InMemoryTaskStore
from .template_resolver import TemplateResolver

__all__ = [
    'TaskOrchestrator',
    'DEFAULT_TOOLS',
    'TaskDecomposer',
    'DecompositionRule',
    'DEFAULT_RULES',
    'StepScheduler',
    'SchedulerState',
    'SelfImprovementEngine',
    'RegistryImprovementEngine',
    'SelfImprovementPolicy',
    'identify_tool_improvement',
    'AutonomousRethink',
    'CRITICAL_TOOLS',
    'StepMutator',
    'MutationRule',
    'DEFAULT_MUTATION_RULES',
    'TaskStore',
    'InMemoryTaskStore',
    'TemplateResolver',
]
