"""
Template Resolver - Runtime substitution of ``${path}`` placeholders

Placeholders are resolved against the results produced so far:

- ``${previous}`` / ``${previous.result}``: result of the most recently
  completed step, by list order
- ``${previous.<field>}``: another field of that step (``id``, ``tool``,
  ``params``, ...) or, failing that, a key inside its result
- ``${<step_id>.<key>...}``: value inside ``task.results[step_id]``
- ``${<name>.<key>...}``: value inside ``task.context[name]``

A parameter that is exactly one placeholder receives the raw value; a
placeholder embedded in longer text is rendered as text. Paths that do not
resolve (or resolve to None) leave the placeholder untouched. Substituted
text is not scanned again.
"""

import json
import re
from dataclasses import fields
from typing import Any, Dict, Mapping, Sequence, Tuple

from task_orchestrator.models import Step, Task

PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")

PREVIOUS = "previous"
STEP_FIELDS = frozenset(f.name for f in fields(Step))

_MISSING = object()


class TemplateResolver:
    """Resolves placeholder strings in step parameters."""

    def enrich(self, params: Mapping[str, Any], task: Task) -> Dict[str, Any]:
        """Return a copy of params with every string value resolved."""
        enriched = dict(params)
        for key, value in enriched.items():
            if isinstance(value, str) and "${" in value:
                enriched[key] = self.resolve(value, task)
        return enriched

    def resolve(self, template: str, task: Task) -> Any:
        whole = PLACEHOLDER.fullmatch(template)
        if whole:
            found, value = self.lookup(whole.group(1), task)
            return value if found else template

        def render(match: "re.Match[str]") -> str:
            found, value = self.lookup(match.group(1), task)
            return self._to_text(value) if found else match.group(0)

        return PLACEHOLDER.sub(render, template)

    def lookup(self, path: str, task: Task) -> Tuple[bool, Any]:
        """Resolve a dotted path; returns (found, value)."""
        segments = [s.strip() for s in path.strip().split(".")]
        if not segments or not segments[0]:
            return False, None

        head, rest = segments[0], segments[1:]

        if head == PREVIOUS:
            step = task.last_completed_step()
            if step is None:
                return False, None
            current = self._from_step(step, rest)
            rest = rest[1:] if rest else rest
        elif head in task.results:
            current = task.results[head]
        elif head in task.context:
            current = task.context[head]
        else:
            return False, None

        for segment in rest:
            current = self._descend(current, segment)
            if current is _MISSING:
                return False, None

        if current is _MISSING or current is None:
            return False, None
        return True, current

    @staticmethod
    def _from_step(step: Step, rest: Sequence[str]) -> Any:
        """Value addressed by the first segment after ``previous``."""
        if not rest or rest[0] == "result":
            return step.result
        if rest[0] in STEP_FIELDS:
            return getattr(step, rest[0])
        return TemplateResolver._descend(step.result, rest[0])

    @staticmethod
    def _descend(current: Any, segment: str) -> Any:
        if isinstance(current, Mapping):
            return current.get(segment, _MISSING)
        if isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if segment.lstrip("-").isdigit():
                index = int(segment)
                if -len(current) <= index < len(current):
                    return current[index]
        return _MISSING

    @staticmethod
    def _to_text(value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, (Mapping, list, tuple)):
            return json.dumps(value, default=str)
        return str(value)
