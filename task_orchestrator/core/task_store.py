"""
Task Store - Repository of tasks owned by one engine instance

Tasks live for the lifetime of the process; they are looked up by id and
never deleted. The store is injected into the engine so tests can supply
their own implementation.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterator, List, Optional

from task_orchestrator.models import Task


class TaskStore(ABC):
    """Interface for task repositories."""

    @abstractmethod
    def save(self, task: Task) -> None:
        """Insert or replace a task."""

    @abstractmethod
    def get(self, task_id: str) -> Optional[Task]:
        """Return the task with the given id, or None."""

    @abstractmethod
    def list_ids(self) -> List[str]:
        """Ids of all known tasks in insertion order."""

    def __contains__(self, task_id: str) -> bool:
        return self.get(task_id) is not None

    def __len__(self) -> int:
        return len(self.list_ids())

    def __iter__(self) -> Iterator[Task]:
        for task_id in self.list_ids():
            task = self.get(task_id)
            if task is not None:
                yield task


class InMemoryTaskStore(TaskStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self):
        self._tasks: Dict[str, Task] = {}

    def save(self, task: Task) -> None:
        task.touch()
        self._tasks[task.id] = task

    def get(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def list_ids(self) -> List[str]:
        return list(self._tasks)
