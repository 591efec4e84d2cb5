"""Generation pipeline: PREPARE -> GENERATE -> VALIDATE -> OPTIMIZE.

Only an empty prompt and a generate stage that ends up with zero components
fail a run. Every other collaborator failure degrades to a fallback and is
reported through logs and component metadata.
"""

import copy
import html
import logging
import posixpath
import uuid
from dataclasses import dataclass, replace

from config.defaults import DEFAULTS
from core import extractor
from core.manifest import build_package_json, build_readme, project_name
from core.prompting import GENERIC_NAMES, build_enriched_prompt, detect_scope, load_system_prompt, main_entity
from core.quality import (
    calculate_complexity,
    count_lines,
    extract_dependencies,
    mean_quality_score,
    merge_dependencies,
)
from core.state import (
    ComponentMetadata,
    ComponentType,
    GeneratedComponent,
    GenerationRequest,
    GenerationResult,
    Intent,
    PipelineStage,
    PipelineStageResult,
    PromptAnalysis,
    template_ref,
)
from utils.template_engine import load_template, render_string

log = logging.getLogger(__name__)

DEFAULT_QUALITY_SCORE = 75
PLACEHOLDER_QUALITY_SCORE = 60
PLACEHOLDER_TEMPLATE = "react/fallback_page.tmpl"
PLACEHOLDER_FRAMEWORK = "react"   # the fallback page template is React-only
OPTIMIZATIONS = ["PERFORMANCE", "BEST_PRACTICES"]

DEFAULT_SPECIFICATION = {
    "architecture": {
        "style": "modular",
        "layers": ["presentation", "business", "data"],
        "patterns": ["mvc", "repository"],
    },
    "technologies": {
        "frontend": ["react", "typescript"],
        "backend": ["node", "express"],
        "database": ["mongodb"],
        "deployment": ["docker"],
    },
    "quality": {
        "test_coverage": 80,
        "performance": "optimized",
        "accessibility": "WCAG-AA",
    },
}


@dataclass
class PipelineConfig:
    enable_validation: bool = True
    enable_optimization: bool = True
    enable_quality_analysis: bool = True
    temperature: float = 0.7
    max_tokens: int = 8000
    fullstack_max_tokens: int = 32000
    quality_depth: str = "standard"
    default_framework: str = "react"

    @classmethod
    def from_defaults(cls, **overrides):
        values = {name: DEFAULTS[name] for name in cls.__dataclass_fields__}
        values.update(overrides)
        return cls(**values)


def default_analysis(request: GenerationRequest) -> PromptAnalysis:
    """Analysis used when no analyzer is registered or it fails."""
    ctx = request.context
    return PromptAnalysis(
        original_prompt=request.prompt,
        intent=Intent(),
        domain=ctx.domain or "general",
        complexity=ctx.complexity or "standard",
        style_preferences=dict(ctx.style_preferences or {}),
    )


def _jsx_text(text):
    return html.escape(text).replace("{", "&#123;").replace("}", "&#125;")


def _ensure_unique_paths(components):
    seen = set()
    for c in components:
        stem, ext = posixpath.splitext(c.path)
        path, n = c.path, 2
        while path in seen:
            path = f"{stem}-{n}{ext}"
            n += 1
        c.path = path
        seen.add(path)


def _fix_generic_names(components, prompt):
    """Rename Item/Component/Element/Widget after the prompt's main entity."""
    entity = main_entity(prompt)
    if entity in GENERIC_NAMES:
        return
    for c in components:
        if c.name not in GENERIC_NAMES:
            continue
        original = c.name
        directory, filename = posixpath.split(c.path)
        stem, ext = posixpath.splitext(filename)
        if stem == original:
            c.path = posixpath.join(directory, entity + ext)
        c.name = entity
        c.metadata.auto_fixed_naming = True
        c.metadata.original_name = original


class GenerationPipeline:
    """Turns a GenerationRequest into generated components.

    Collaborators are injected; any of them except ``completion`` may be None,
    in which case its part of the pipeline is skipped.
    """

    name = "generation"

    def __init__(self, completion, analyzer=None, templates=None, validator=None,
                 quality=None, optimizer=None, config=None):
        self.completion = completion
        self.analyzer = analyzer
        self.templates = templates
        self.validator = validator
        self.quality = quality
        self.optimizer = optimizer
        self.config = config or PipelineConfig.from_defaults()

    async def execute(self, request: GenerationRequest) -> GenerationResult:
        """Run all stages. Never raises; failures come back as success=False."""
        rid = uuid.uuid4().hex[:8]
        try:
            return await self._run(request, rid)
        except Exception as e:
            log.exception("Pipeline failed", extra={"request_id": rid, "stage": PipelineStage.FAILED.value})
            return self._failure(str(e))

    async def _run(self, request, rid):
        prepared = await self._prepare(request, rid)
        if not prepared.success:
            return self._failure(prepared.error)
        analysis = prepared.data["analysis"]

        generated = await self._generate(request, analysis, prepared.data["templates"], rid)
        if not generated.success:
            return self._failure(generated.error)
        components = generated.data["components"]

        if self.config.enable_validation and self.validator is not None:
            validated = await self._run_stage(PipelineStage.VALIDATE, self._validate, components, rid)
            if validated.success:
                components = validated.data

        if self.config.enable_optimization:
            optimized = await self._run_stage(PipelineStage.OPTIMIZE, self._optimize, components, rid)
            if optimized.success:
                components = optimized.data

        log.info("Generated %d component(s)", len(components),
                 extra={"request_id": rid, "stage": PipelineStage.DONE.value})
        return self._finalize(request, components, generated.data["scope"])

    # --- PREPARE ---

    async def _prepare(self, request, rid):
        extra = {"request_id": rid, "stage": PipelineStage.PREPARE.value}
        if not request.prompt or not request.prompt.strip():
            log.warning("Rejected request with empty prompt", extra=extra)
            return PipelineStageResult(False, error="Prompt is required")

        framework = request.framework or self.config.default_framework
        context = {
            "domain": request.context.domain,
            "complexity": request.context.complexity,
            "style_preferences": request.context.style_preferences,
            "framework": framework,
            "language": request.language,
        }

        analysis = None
        if self.analyzer is not None:
            try:
                analysis = await self.analyzer.analyze(request.prompt, context)
            except Exception as e:
                log.warning("Prompt analysis failed, using defaults: %s", e, extra=extra)
        if analysis is None:
            analysis = default_analysis(request)

        templates = await self._find_templates(analysis, framework, extra)

        if not analysis.specification:
            analysis = replace(analysis, specification=copy.deepcopy(DEFAULT_SPECIFICATION))

        return PipelineStageResult(True, data={"analysis": analysis, "templates": templates})

    async def _find_templates(self, analysis, framework, extra):
        if self.templates is None:
            return []
        try:
            found = await self.templates.search(
                keyword=analysis.intent.description,
                category=framework,
                tags=[analysis.domain],
            )
        except Exception as e:
            log.warning("Template search failed: %s", e, extra=extra)
            return []
        if isinstance(found, dict):
            found = found.get("templates", [])
        return list(found or [])

    # --- GENERATE ---

    async def _generate(self, request, analysis, templates, rid):
        extra = {"request_id": rid, "stage": PipelineStage.GENERATE.value}
        framework = request.framework or self.config.default_framework
        scope = detect_scope(request.prompt)

        user_message = build_enriched_prompt(request.prompt, analysis, framework, request.language, scope)
        if templates:
            user_message += "\n\nReference templates: " + ", ".join(template_ref(t)[1] for t in templates)
        messages = [
            {"role": "system", "content": load_system_prompt()},
            {"role": "user", "content": user_message},
        ]
        max_tokens = self.config.fullstack_max_tokens if scope.type == "fullstack" else self.config.max_tokens

        raw = ""
        if self.completion is None:
            log.warning("No completion client configured, using placeholder", extra=extra)
        else:
            try:
                completion = await self.completion.complete(
                    messages, temperature=self.config.temperature, max_tokens=max_tokens,
                )
                raw = completion.content or ""
            except Exception as e:
                log.warning("Completion failed, falling back to placeholder: %s", e, extra=extra)

        components = []
        if raw.strip():
            candidates = extractor.extract(raw, {
                "prompt": request.prompt,
                "entities": analysis.entities,
                "framework": framework,
            })
            components = [self._build_component(c, framework) for c in candidates if c.code.strip()]
            _fix_generic_names(components, request.prompt)
            _ensure_unique_paths(components)

        if not components:
            components = [self._placeholder(request)]

        if not scope.min_files <= len(components) <= scope.max_files:
            log.warning("Generated %d file(s), expected %d-%d for a %s scope",
                        len(components), scope.min_files, scope.max_files, scope.type, extra=extra)

        return PipelineStageResult(True, data={"components": components, "scope": scope})

    def _build_component(self, candidate, framework):
        return GeneratedComponent(
            name=candidate.name,
            type=candidate.type,
            code=candidate.code,
            path=candidate.path,
            language=candidate.language,
            framework=framework,
            dependencies=extract_dependencies(candidate.code),
            metadata=ComponentMetadata(
                lines_of_code=count_lines(candidate.code),
                complexity=calculate_complexity(candidate.code),
                generated=True,
                quality_score=DEFAULT_QUALITY_SCORE,
            ),
        )

    def _placeholder(self, request):
        """Minimal templated page keyed off the prompt."""
        name = extractor.fallback_name({"prompt": request.prompt})
        code = render_string(load_template(PLACEHOLDER_TEMPLATE), {
            "name": name,
            "title": _jsx_text(request.prompt.strip()),
            "prompt": _jsx_text(request.prompt.strip()),
        })
        return GeneratedComponent(
            name=name,
            type=ComponentType.PAGE,
            code=code,
            path=f"src/{name}.tsx",
            language="typescript",
            framework=PLACEHOLDER_FRAMEWORK,
            dependencies=["react"],
            metadata=ComponentMetadata(
                lines_of_code=count_lines(code),
                complexity=calculate_complexity(code),
                generated=True,
                quality_score=PLACEHOLDER_QUALITY_SCORE,
            ),
        )

    # --- VALIDATE / OPTIMIZE ---

    async def _run_stage(self, stage, func, components, rid):
        """Run an optional stage on a copy; on any error the caller keeps its components."""
        try:
            return await func(copy.deepcopy(components), rid)
        except Exception as e:
            log.warning("%s stage failed, keeping previous components: %s", stage.value, e,
                        extra={"request_id": rid, "stage": stage.value})
            return PipelineStageResult(False, error=str(e))

    async def _validate(self, components, rid):
        for c in components:
            context = {"component": c.name, "path": c.path, "type": c.type.value, "framework": c.framework}
            try:
                result = await self.validator.validate(c.code, c.language, context)
            except Exception as e:
                log.warning("Validation of %s failed: %s", c.path, e,
                            extra={"request_id": rid, "stage": PipelineStage.VALIDATE.value})
                continue
            c.metadata.validated = bool(result.is_valid)
            c.metadata.validation_score = result.score
        return PipelineStageResult(True, data=components)

    async def _optimize(self, components, rid):
        for c in components:
            file_name = posixpath.basename(c.path)
            if self.quality is not None and self.config.enable_quality_analysis:
                report = await self.quality.analyze(c.code, file_name, c.language, self.config.quality_depth)
                c.metadata.quality_score = report.overall_score
                c.metadata.coverage = report.test_coverage
            if self.optimizer is not None:
                result = await self.optimizer.optimize(c.code, file_name, c.language, list(OPTIMIZATIONS))
                if result.optimized_code:
                    c.code = result.optimized_code
                    c.metadata.lines_of_code = count_lines(c.code)
                c.metadata.optimized = True
                c.metadata.optimizations = list(dict.fromkeys(ch.type for ch in result.changes))
        return PipelineStageResult(True, data=components)

    # --- result ---

    def _finalize(self, request, components, scope):
        dependencies = merge_dependencies(*(c.dependencies for c in components))
        return GenerationResult(
            success=True,
            components=components,
            quality_score=mean_quality_score(components),
            dependencies=dependencies,
            package_json=build_package_json(dependencies, project_name(request.prompt)),
            readme=build_readme(components),
            scope=scope,
        )

    def _failure(self, error):
        return GenerationResult(success=False, error=error, quality_score=0)
