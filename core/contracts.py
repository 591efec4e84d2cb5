"""Collaborator interfaces consumed by the pipeline and the orchestrator.

Every collaborator method is a coroutine. The registry checks handles against
these protocols at registration time, so call sites never need to cast.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from core.state import (
    FileEntry,
    GenerationRequest,
    GenerationResult,
    Issue,
    PromptAnalysis,
    Template,
)


@dataclass
class Completion:
    content: str
    model: str = ""
    usage: dict = field(default_factory=dict)   # prompt_tokens, completion_tokens, total_tokens


@dataclass
class ValidationResult:
    is_valid: bool
    issues: list[Issue] = field(default_factory=list)
    score: int = 100


@dataclass
class QualityReport:
    overall_score: float
    test_coverage: float = 0.0
    metrics: dict = field(default_factory=dict)


@dataclass
class OptimizationChange:
    type: str               # "PERFORMANCE", "BEST_PRACTICES", ...
    description: str = ""


@dataclass
class OptimizationResult:
    optimized_code: str
    changes: list[OptimizationChange] = field(default_factory=list)


@runtime_checkable
class CompletionClient(Protocol):
    async def complete(self, messages: list[dict], temperature: float, max_tokens: int) -> Completion: ...

    async def generate_json(self, prompt: str, schema: dict) -> Any: ...


@runtime_checkable
class PromptAnalyzer(Protocol):
    async def analyze(self, prompt: str, context: dict) -> PromptAnalysis: ...


@runtime_checkable
class TemplateLocator(Protocol):
    async def search(self, keyword: str, category: str, tags: list[str]) -> list[Template] | dict: ...

    async def render(self, template_id: str, variables: dict) -> str: ...


@runtime_checkable
class Validator(Protocol):
    async def validate(self, code: str, language: str, context: dict) -> ValidationResult: ...


@runtime_checkable
class QualityAnalyzer(Protocol):
    async def analyze(self, code: str, file_name: str, language: str, depth: str) -> QualityReport: ...


@runtime_checkable
class Optimizer(Protocol):
    async def optimize(self, code: str, file_name: str, language: str,
                       optimizations: list[str]) -> OptimizationResult: ...


@runtime_checkable
class CodeGenerator(Protocol):
    async def execute(self, request: GenerationRequest) -> GenerationResult: ...


@runtime_checkable
class UIEnhancer(Protocol):
    async def enhance(self, files: list[FileEntry], context: dict) -> list[FileEntry]: ...


@runtime_checkable
class BlueprintParser(Protocol):
    async def parse(self, files: list[FileEntry]) -> dict: ...


@runtime_checkable
class UnitTestGenerator(Protocol):
    async def generate(self, files: list[FileEntry], framework: str) -> list[FileEntry]: ...


@runtime_checkable
class SecurityScanner(Protocol):
    async def scan(self, files: list[FileEntry], level: str) -> dict: ...


@runtime_checkable
class LearningRecorder(Protocol):
    async def record(self, prompt: str, options: dict, files_generated: int, success: bool) -> dict: ...
