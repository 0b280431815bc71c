"""
Tests for result-driven follow-up step generation.
"""

from task_orchestrator.core.step_mutator import MutationRule, StepMutator, dig
from task_orchestrator.models import Step, StepStatus, Task


def completed(step_id, tool, result, generated_by=None):
    return Step(id=step_id, tool=tool, status=StepStatus.COMPLETED,
                result=result, generated_by=generated_by)


class TestStepMutator:
    """Test StepMutator.after_step_completion."""

    def setup_method(self):
        self.mutator = StepMutator()

    def _task(self, *steps):
        return Task(id="t1", description="check the claim", steps=list(steps))

    def test_descriptive_stats_append_correlation_step(self):
        stats = {"results": {"descriptive_stats": {"mean": 4.2}}}
        trigger = completed("data_analysis", "analytics_brain", stats)
        task = self._task(trigger)

        appended = self.mutator.after_step_completion(task, trigger)

        assert len(appended) == 1
        step = appended[0]
        assert task.steps[-1] is step
        assert step.id.startswith("auto_correlation_")
        assert step.tool == "analytics_brain"
        assert step.params == {"action": "correlate", "data": stats["results"]}
        assert step.dependencies == ["data_analysis"]
        assert step.status == StepStatus.PENDING
        assert step.generated_by == "correlation"

    def test_web_content_appends_analysis(self):
        trigger = completed("web_fetch", "web_intelligence", {"content": "<html/>"})
        task = self._task(trigger)

        appended = self.mutator.after_step_completion(task, trigger)

        assert [s.params["action"] for s in appended] == ["analyze"]
        assert appended[0].params["data"] == {"content": "<html/>"}

    def test_empty_content_appends_nothing(self):
        trigger = completed("web_fetch", "web_intelligence", {"content": ""})
        task = self._task(trigger)

        assert self.mutator.after_step_completion(task, trigger) == []
        assert len(task.steps) == 1

    def test_vision_result_can_trigger_two_rules(self):
        result = {"results": {"text": "hello", "charts": [{"x": 1}]}}
        trigger = completed("image_analysis", "vision_intelligence", result)
        task = self._task(trigger)

        appended = self.mutator.after_step_completion(task, trigger)

        assert [s.generated_by for s in appended] == ["text_analysis", "chart_data"]
        assert appended[0].params["data"] == "hello"
        assert appended[1].params["data"] == [{"x": 1}]

    def test_disputed_fact_check_requests_another(self):
        result = {"analysis": {"fact_check_status": "disputed"}}
        trigger = completed("fact_check", "cognitive_search", result)
        task = self._task(trigger)

        appended = self.mutator.after_step_completion(task, trigger)

        assert len(appended) == 1
        assert appended[0].params == {"action": "fact_check", "query": "check the claim"}

    def test_confirmed_fact_check_appends_nothing(self):
        result = {"analysis": {"fact_check_status": "confirmed"}}
        trigger = completed("fact_check", "cognitive_search", result)

        assert self.mutator.after_step_completion(self._task(trigger), trigger) == []

    def test_rule_does_not_fire_on_its_own_output(self):
        """A disputed result from a generated fact-check ends the chain."""
        result = {"analysis": {"fact_check_status": "disputed"}}
        trigger = completed("auto_factcheck_1", "cognitive_search", result, generated_by="factcheck")

        assert self.mutator.after_step_completion(self._task(trigger), trigger) == []

    def test_generated_step_can_trigger_other_rules(self):
        result = {"results": {"descriptive_stats": {"n": 3}}}
        trigger = completed("auto_analysis_1", "analytics_brain", result, generated_by="analysis")

        appended = self.mutator.after_step_completion(self._task(trigger), trigger)

        assert [s.generated_by for s in appended] == ["correlation"]

    def test_non_dict_results_are_ignored(self):
        trigger = completed("data_analysis", "analytics_brain", "plain text")

        assert self.mutator.after_step_completion(self._task(trigger), trigger) == []

    def test_generated_ids_are_unique(self):
        stats = {"results": {"descriptive_stats": {"mean": 1}}}
        first = completed("a", "analytics_brain", stats)
        second = completed("b", "analytics_brain", stats)
        task = self._task(first, second)

        self.mutator.after_step_completion(task, first)
        self.mutator.after_step_completion(task, second)

        ids = [s.id for s in task.steps]
        assert len(ids) == len(set(ids)) == 4

    def test_custom_rules(self):
        rule = MutationRule(
            name="notify",
            trigger_tool="transform_data",
            condition=lambda r: True,
            tool="log_message",
            params=lambda task, step: {"message": f"{step.id} done"},
            reasoning="Notify on transform",
        )
        mutator = StepMutator(rules=[rule])
        trigger = completed("data_transform", "transform_data", None)

        appended = mutator.after_step_completion(self._task(trigger), trigger)

        assert appended[0].params == {"message": "data_transform done"}


def test_dig_returns_none_on_miss():
    assert dig({"a": {"b": 1}}, "a", "b") == 1
    assert dig({"a": {"b": 1}}, "a", "c") is None
    assert dig({"a": 5}, "a", "b") is None
    assert dig(None, "a") is None
