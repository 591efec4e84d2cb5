"""Subsystem registry keyed by a closed set of roles."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from agents.analyzer import PromptAnalyzerAgent
from agents.blueprint import BlueprintAgent
from agents.learning import LearningAgent
from agents.optimizer import OptimizerAgent
from agents.quality_analyzer import QualityAnalyzerAgent
from agents.reviewer import ReviewerAgent
from agents.security import SecurityAgent
from agents.tester import TesterAgent
from agents.ui_enhancer import UIEnhancerAgent
from config.defaults import DEFAULTS
from core.contracts import (
    BlueprintParser,
    CodeGenerator,
    LearningRecorder,
    PromptAnalyzer,
    SecurityScanner,
    TemplateLocator,
    UIEnhancer,
    UnitTestGenerator,
    Validator,
)
from core.pipeline import GenerationPipeline
from utils.llm import AnthropicCompletionClient
from utils.template_engine import TemplateLibrary


class SubsystemId(str, Enum):
    PROMPT = "prompt"
    TEMPLATE = "template"
    CODE_GENERATION = "code_generation"
    UI_ENHANCEMENT = "ui_enhancement"
    BLUEPRINT = "blueprint"
    TESTING = "testing"
    SECURITY = "security"
    PROTOCOL = "protocol"
    LEARNING = "learning"


# The interface every handle registered under a role must satisfy
CAPABILITIES = {
    SubsystemId.PROMPT: PromptAnalyzer,
    SubsystemId.TEMPLATE: TemplateLocator,
    SubsystemId.CODE_GENERATION: CodeGenerator,
    SubsystemId.UI_ENHANCEMENT: UIEnhancer,
    SubsystemId.BLUEPRINT: BlueprintParser,
    SubsystemId.TESTING: UnitTestGenerator,
    SubsystemId.SECURITY: SecurityScanner,
    SubsystemId.PROTOCOL: Validator,
    SubsystemId.LEARNING: LearningRecorder,
}


class SubsystemUnavailable(LookupError):
    """No subsystem is registered for the requested role."""


@dataclass
class SubsystemRegistry:
    mapping: Dict[SubsystemId, object]

    def __post_init__(self):
        for subsystem_id, handle in list(self.mapping.items()):
            self._check(subsystem_id, handle)

    @staticmethod
    def _check(subsystem_id, handle):
        protocol = CAPABILITIES[SubsystemId(subsystem_id)]
        if not isinstance(handle, protocol):
            raise TypeError(
                f"{type(handle).__name__} does not implement {protocol.__name__} "
                f"required for '{SubsystemId(subsystem_id).value}'"
            )

    def register(self, subsystem_id: SubsystemId, handle) -> None:
        self._check(subsystem_id, handle)
        self.mapping[SubsystemId(subsystem_id)] = handle

    def unregister(self, subsystem_id: SubsystemId) -> None:
        self.mapping.pop(SubsystemId(subsystem_id), None)

    def get(self, subsystem_id: SubsystemId) -> Optional[object]:
        return self.mapping.get(subsystem_id)

    def require(self, subsystem_id: SubsystemId):
        handle = self.mapping.get(subsystem_id)
        if handle is None:
            raise SubsystemUnavailable(f"No subsystem registered for '{subsystem_id.value}'")
        return handle

    def ids(self):
        return [s for s in SubsystemId if s in self.mapping]

    @staticmethod
    def default(completion=None, pipeline_config=None) -> "SubsystemRegistry":
        """Construct every default subsystem around one completion client."""
        completion = completion or AnthropicCompletionClient()
        analyzer = PromptAnalyzerAgent(completion=completion, use_llm=DEFAULTS["llm_prompt_analysis"])
        templates = TemplateLibrary()
        reviewer = ReviewerAgent()
        pipeline = GenerationPipeline(
            completion,
            analyzer=analyzer,
            templates=templates,
            validator=reviewer,
            quality=QualityAnalyzerAgent(),
            optimizer=OptimizerAgent(),
            config=pipeline_config,
        )
        return SubsystemRegistry(mapping={
            SubsystemId.PROMPT: analyzer,
            SubsystemId.TEMPLATE: templates,
            SubsystemId.CODE_GENERATION: pipeline,
            SubsystemId.UI_ENHANCEMENT: UIEnhancerAgent(),
            SubsystemId.BLUEPRINT: BlueprintAgent(),
            SubsystemId.TESTING: TesterAgent(),
            SubsystemId.SECURITY: SecurityAgent(),
            SubsystemId.PROTOCOL: reviewer,
            SubsystemId.LEARNING: LearningAgent(),
        })
