"""Prompt analyzer: keyword classification, optionally refined by the LLM."""

import logging

from agents.base import BaseSubsystem
from config.stacks import framework_info
from core.state import Intent, PromptAnalysis
from manager.classifier import (
    INTENTS,
    classify,
    classify_intent,
    estimate_complexity,
    extract_actions,
    extract_entities,
    extract_ui_elements,
)

log = logging.getLogger(__name__)

ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "entities": {"type": "array", "items": {"type": "string"}},
        "actions": {"type": "array", "items": {"type": "string"}},
        "ui_elements": {"type": "array", "items": {"type": "string"}},
        "domain": {"type": "string"},
        "complexity": {"type": "string", "enum": ["simple", "standard", "advanced"]},
        "technologies": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["entities", "domain", "complexity"],
}

_ANALYSIS_PROMPT = (
    "Analyze this application request. List the domain entities as PascalCase "
    "nouns, the user actions, the UI elements it needs, its domain and its "
    "complexity.\n\nRequest: {prompt}"
)


def _string_list(value):
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if isinstance(v, (str, int, float)) and str(v).strip()]


class PromptAnalyzerAgent(BaseSubsystem):
    """Builds a PromptAnalysis from keyword rules.

    With ``use_llm`` and a completion client, the keyword result is refined by
    a structured JSON call; if that call fails the keyword result stands.
    """

    name = "prompt"
    description = "Classifies intent, domain, entities and complexity of a prompt"

    def __init__(self, completion=None, use_llm=False):
        super().__init__()
        self.completion = completion
        self.use_llm = use_llm

    async def analyze(self, prompt, context):
        context = context or {}
        analysis = self.keyword_analysis(prompt, context)
        if self.use_llm and self.completion is not None:
            try:
                data = await self.completion.generate_json(_ANALYSIS_PROMPT.format(prompt=prompt), ANALYSIS_SCHEMA)
            except Exception as e:
                log.warning("LLM prompt analysis failed, keeping keyword analysis: %s", e)
            else:
                self._merge(analysis, data)
        return analysis

    def keyword_analysis(self, prompt, context):
        domain, scores = classify(prompt)
        intent_type = classify_intent(prompt)
        framework = context.get("framework") or scores.get("_explicit_framework") or "react"
        confidence = 70 if domain != "general" else 60

        return PromptAnalysis(
            original_prompt=prompt,
            intent=Intent(type=intent_type, description=INTENTS[intent_type], confidence=confidence),
            entities=extract_entities(prompt),
            actions=extract_actions(prompt),
            ui_elements=extract_ui_elements(prompt),
            domain=context.get("domain") or domain,
            complexity=context.get("complexity") or estimate_complexity(prompt),
            style_preferences=dict(context.get("style_preferences") or {}),
            technologies=[framework, framework_info(framework)["language"]],
            confidence=confidence,
        )

    def _merge(self, analysis, data):
        if not isinstance(data, dict):
            return
        for key in ("entities", "actions", "ui_elements", "technologies"):
            values = _string_list(data.get(key))
            if values:
                setattr(analysis, key, values)
        if isinstance(data.get("domain"), str) and data["domain"].strip():
            analysis.domain = data["domain"].strip().lower()
        if data.get("complexity") in ("simple", "standard", "advanced"):
            analysis.complexity = data["complexity"]
        analysis.confidence = max(analysis.confidence, 85)
        analysis.intent.confidence = analysis.confidence
