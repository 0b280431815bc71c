"""
Tests for keyword-driven task decomposition.
"""

import pytest

from task_orchestrator.core.decomposer import DecompositionRule, TaskDecomposer, keywords
from task_orchestrator.models import StepStatus


class TestTaskDecomposer:
    """Test the TaskDecomposer rule table."""

    def setup_method(self):
        self.decomposer = TaskDecomposer()

    def test_web_fetch_and_analyze_produces_three_steps(self):
        """Web fetch, dependent analysis and a summary over both."""
        steps = self.decomposer.decompose("fetch data from the web and analyze it", {})

        assert [s.id for s in steps] == ["web_fetch", "data_analysis", "summary"]
        assert [s.tool for s in steps] == ["web_intelligence", "analytics_brain", "log_message"]
        assert steps[1].dependencies == ["web_fetch"]
        assert steps[1].params["data"] == "${previous.result}"
        assert steps[2].dependencies == ["web_fetch", "data_analysis"]
        assert all(s.status == StepStatus.PENDING for s in steps)

    def test_empty_description_falls_back_to_direct_execution(self):
        steps = self.decomposer.decompose("", {})

        assert len(steps) == 1
        assert steps[0].id == "direct_execution"
        assert steps[0].tool == "log_message"
        assert steps[0].params == {"message": "", "level": "info"}
        assert steps[0].dependencies == []

    def test_keyword_free_description_falls_back(self):
        steps = self.decomposer.decompose("say hello", None)

        assert [s.id for s in steps] == ["direct_execution"]
        assert steps[0].params["message"] == "say hello"

    def test_single_match_gets_no_summary(self):
        steps = self.decomposer.decompose("search for cats", {})

        assert [s.id for s in steps] == ["cognitive_search"]
        assert steps[0].params == {"action": "search", "query": "search for cats"}

    def test_chained_step_without_predecessor_has_no_dependency(self):
        steps = self.decomposer.decompose("forecast sales", {})

        assert [s.id for s in steps] == ["forecast_analysis"]
        assert steps[0].dependencies == []
        assert steps[0].params["options"] == {"time_window": "30"}

    def test_rules_are_not_mutually_exclusive(self):
        """A description may trigger several intents, in rule order."""
        steps = self.decomposer.decompose(
            "Research trending topics, verify facts and forecast the future", {}
        )

        ids = [s.id for s in steps]
        assert ids == [
            "cognitive_search",
            "fact_check",
            "trend_analysis",
            "forecast_analysis",
            "summary",
        ]
        assert steps[3].dependencies == ["trend_analysis"]
        assert steps[-1].dependencies == ids[:-1]

    def test_ocr_requires_text_with_extract_or_read(self):
        assert "text_extraction" not in [s.id for s in self.decomposer.decompose("text me", {})]
        assert [s.id for s in self.decomposer.decompose("extract text", {})] == ["text_extraction"]
        assert [s.id for s in self.decomposer.decompose("run ocr", {})] == ["text_extraction"]

    def test_vision_steps_reference_image_url_template(self):
        steps = self.decomposer.decompose("describe the photo", {"image_url": "http://x/img.png"})

        assert steps[0].tool == "vision_intelligence"
        assert steps[0].params["image_url"] == "${image_url}"

    def test_web_fetch_copies_context(self):
        context = {"region": "eu"}
        steps = self.decomposer.decompose("scrape the site", context)

        assert steps[0].params["context"] == {"region": "eu"}
        assert steps[0].params["context"] is not context

    def test_decomposition_is_deterministic(self):
        description = "Find popular images and convert the chart table"
        first = [s.to_dict() for s in self.decomposer.decompose(description, {})]
        second = [s.to_dict() for s in self.decomposer.decompose(description, {})]

        assert first == second

    def test_step_ids_are_unique(self):
        steps = self.decomposer.decompose(
            "web search fact trend analyze forecast anomaly image ocr chart transform", {}
        )
        ids = [s.id for s in steps]

        assert len(ids) == len(set(ids)) == 12

    @pytest.mark.parametrize("description,step_id", [
        ("look for an anomaly", "anomaly_detection"),
        ("draw a graph", "chart_analysis"),
        ("transform records", "data_transform"),
        ("check the truth", "fact_check"),
    ])
    def test_individual_intents(self, description, step_id):
        assert self.decomposer.decompose(description, {})[0].id == step_id

    def test_custom_rule_table(self):
        rule = DecompositionRule(
            step_id="ping",
            tool="ping_tool",
            predicate=keywords("ping"),
            params=lambda d, c: {"host": c.get("host")},
            reasoning="Ping requested",
        )
        decomposer = TaskDecomposer(rules=[rule])

        steps = decomposer.decompose("PING the server", {"host": "example.org"})

        assert [s.id for s in steps] == ["ping"]
        assert steps[0].params == {"host": "example.org"}
