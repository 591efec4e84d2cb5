"""Tests for agents.analyzer."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from agents.analyzer import ANALYSIS_SCHEMA, PromptAnalyzerAgent


def _analyze(agent, prompt, context=None):
    return asyncio.run(agent.analyze(prompt, context or {}))


def test_keyword_analysis():
    analysis = _analyze(PromptAnalyzerAgent(), "build a workout tracker with a chart")

    assert analysis.original_prompt == "build a workout tracker with a chart"
    assert analysis.domain == "fitness"
    assert analysis.entities == ["Workout"]
    assert analysis.ui_elements == ["chart"]
    assert analysis.technologies == ["react", "typescript"]
    assert analysis.intent.type == "CREATE_APP"
    assert analysis.confidence == 70
    assert analysis.specification is None


def test_context_overrides_keyword_guesses():
    analysis = _analyze(PromptAnalyzerAgent(), "todo app", {
        "domain": "productivity",
        "complexity": "advanced",
        "framework": "vue",
        "style_preferences": {"theme": "dark"},
    })

    assert analysis.domain == "productivity"
    assert analysis.complexity == "advanced"
    assert analysis.technologies[0] == "vue"
    assert analysis.style_preferences == {"theme": "dark"}


def test_llm_refinement_merges_structured_output():
    completion = MagicMock()
    completion.generate_json = AsyncMock(return_value={
        "entities": ["Workout", "Set"],
        "domain": "Fitness",
        "complexity": "advanced",
        "actions": "not a list",
    })
    agent = PromptAnalyzerAgent(completion=completion, use_llm=True)

    analysis = _analyze(agent, "gym log")

    assert analysis.entities == ["Workout", "Set"]
    assert analysis.domain == "fitness"
    assert analysis.complexity == "advanced"
    assert analysis.actions == []
    assert analysis.confidence == 85
    assert completion.generate_json.call_args.args[1] is ANALYSIS_SCHEMA


def test_llm_failure_keeps_keyword_analysis():
    completion = MagicMock()
    completion.generate_json = AsyncMock(side_effect=RuntimeError("service down"))
    agent = PromptAnalyzerAgent(completion=completion, use_llm=True)

    analysis = _analyze(agent, "hello world")

    assert analysis.domain == "general"
    assert analysis.confidence == 60


def test_llm_not_called_when_disabled():
    completion = MagicMock()
    completion.generate_json = AsyncMock()
    _analyze(PromptAnalyzerAgent(completion=completion), "todo app")
    completion.generate_json.assert_not_awaited()
