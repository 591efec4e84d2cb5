"""Request, component and result models shared by the pipeline and orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ComponentType(str, Enum):
    COMPONENT = "component"
    PAGE = "page"
    SERVICE = "service"
    API = "api"
    MODEL = "model"
    SCREEN = "screen"


class PipelineStage(str, Enum):
    PREPARE = "prepare"
    GENERATE = "generate"
    VALIDATE = "validate"
    OPTIMIZE = "optimize"
    DONE = "done"
    FAILED = "failed"


class WorkflowType(str, Enum):
    PROMPT_TO_DEPLOY = "prompt-to-deploy"
    BLUEPRINT_TO_DEPLOY = "blueprint-to-deploy"
    TEMPLATE_TO_PROJECT = "template-to-project"
    SECURE_DEPLOYMENT = "secure-deployment"
    COLLABORATIVE_GENERATION = "collaborative-generation"
    MARKETPLACE_PUBLISH = "marketplace-publish"
    ENTERPRISE_ONBOARDING = "enterprise-onboarding"
    CUSTOM = "custom"


class WorkflowStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class Issue:
    source: str         # "validator", "security", ...
    severity: str       # "error", "warning", "info"
    file: str
    line: int | None
    message: str
    suggestion: str = ""


@dataclass(frozen=True)
class RequestContext:
    domain: str | None = None
    complexity: str | None = None
    style_preferences: dict | None = None


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    framework: str | None = None
    language: str | None = None
    context: RequestContext = field(default_factory=RequestContext)
    options: dict = field(default_factory=dict)


@dataclass
class Intent:
    type: str = "CREATE_APP"
    description: str = "Create application from prompt"
    confidence: int = 60


@dataclass
class PromptAnalysis:
    original_prompt: str
    intent: Intent = field(default_factory=Intent)
    entities: list[str] = field(default_factory=list)
    actions: list[str] = field(default_factory=list)
    ui_elements: list[str] = field(default_factory=list)
    domain: str = "general"
    complexity: str = "standard"
    style_preferences: dict = field(default_factory=dict)
    technologies: list[str] = field(default_factory=list)
    specification: dict | None = None
    confidence: int = 60


@dataclass
class Template:
    template_id: str
    name: str
    category: str
    tags: list[str] = field(default_factory=list)
    body: str = ""


def template_ref(template):
    """(template_id, name) of a Template or a template dict from a third-party locator."""
    if isinstance(template, dict):
        template_id = template.get("template_id") or template.get("id")
        name = template.get("name") or template_id
    else:
        template_id = getattr(template, "template_id", None)
        name = getattr(template, "name", None) or template_id
    return template_id, name or "template"


@dataclass
class ProjectScope:
    type: str                       # single_component|fullstack|backend|landing_page|feature_rich|feature
    complexity: str
    confidence: float
    min_files: int
    max_files: int
    include: dict = field(default_factory=dict)


@dataclass
class ComponentCandidate:
    name: str
    code: str
    path: str
    language: str
    type: ComponentType = ComponentType.COMPONENT
    strategy: str = ""


@dataclass
class ComponentMetadata:
    lines_of_code: int = 0
    complexity: int = 1
    generated: bool = True
    validated: bool | None = None
    validation_score: int | None = None
    quality_score: float | None = None
    coverage: float | None = None
    optimized: bool = False
    optimizations: list[str] = field(default_factory=list)
    auto_fixed_naming: bool = False
    original_name: str | None = None


@dataclass
class GeneratedComponent:
    name: str
    type: ComponentType
    code: str
    path: str
    language: str
    framework: str
    dependencies: list[str] = field(default_factory=list)
    metadata: ComponentMetadata = field(default_factory=ComponentMetadata)


@dataclass
class PipelineStageResult:
    success: bool
    data: Any = None
    error: str | None = None


@dataclass
class GenerationResult:
    success: bool
    components: list[GeneratedComponent] = field(default_factory=list)
    quality_score: float = 0
    dependencies: list[str] = field(default_factory=list)
    package_json: str = ""
    readme: str = ""
    error: str | None = None
    scope: ProjectScope | None = None


@dataclass
class FileEntry:
    path: str
    content: str
    language: str


@dataclass
class DetectedContext:
    type: str = "general"
    complexity: str = "standard"
    intent: str = "create"
    entities: list[str] = field(default_factory=list)
    technologies: list[str] = field(default_factory=list)
    style_preferences: dict = field(default_factory=dict)
    color_palette: list[str] = field(default_factory=list)
    personality: str = "professional"


@dataclass
class WorkflowExecutionRequest:
    request_id: str
    user_id: str
    workflow_type: str
    input: dict                             # {"prompt": ..., "options": {...}}
    continue_on_error: bool = True
    rollback_on_error: bool = False         # accepted, no rollback is performed
    parallel: bool = False                  # accepted, steps always run sequentially


@dataclass
class WorkflowStep:
    name: str
    subsystem: str
    status: StepStatus = StepStatus.PENDING
    error: str | None = None


@dataclass
class Workflow:
    workflow_id: str
    workflow_type: WorkflowType
    user_id: str
    request_id: str
    status: WorkflowStatus = WorkflowStatus.PENDING
    steps: list[WorkflowStep] = field(default_factory=list)
    started_at: float = 0.0
    finished_at: float | None = None


@dataclass
class WorkflowExecutionResult:
    execution_id: str
    workflow_id: str
    status: WorkflowStatus
    output: dict = field(default_factory=dict)
    steps_completed: int = 0
    steps_failed: int = 0
    total_duration: int = 0                 # milliseconds
    overall_success: bool = False
    confidence: int = 0
    error: str | None = None


def generation_request_from_dict(data: dict) -> GenerationRequest:
    """Build a GenerationRequest from a JSON-style payload."""
    context = data.get("context") or {}
    return GenerationRequest(
        prompt=(data.get("prompt") or "").strip(),
        framework=data.get("framework"),
        language=data.get("language"),
        context=RequestContext(
            domain=context.get("domain"),
            complexity=context.get("complexity"),
            style_preferences=context.get("style_preferences") or context.get("stylePreferences"),
        ),
        options=dict(data.get("options") or {}),
    )
