"""Workflow orchestrator: runs code generation plus best-effort subsystems.

Steps within one workflow run strictly in sequence. Code generation is the
only step whose failure ends the workflow; every other step is isolated: a
missing collaborator skips it, an exception marks it failed and the run
continues.
"""

import json
import logging
import time
import uuid
from dataclasses import asdict

from config.defaults import DEFAULTS
from config.domains import palette_for, personality_for
from core.health import HealthMonitor
from core.registry import SubsystemId
from core.state import (
    DetectedContext,
    FileEntry,
    GenerationRequest,
    RequestContext,
    StepStatus,
    Workflow,
    WorkflowExecutionResult,
    WorkflowStatus,
    WorkflowStep,
    WorkflowType,
    template_ref,
)
from manager.classifier import classify

log = logging.getLogger(__name__)

SUCCESS_CONFIDENCE = 95
DEGRADED_CONFIDENCE = 75
NOT_IMPLEMENTED_CONFIDENCE = 80


class StepSkipped(Exception):
    """A step had nothing to do (collaborator absent, option off, no input)."""


def _new_id(prefix):
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}"


def _style_preferences(style):
    if isinstance(style, dict):
        return dict(style)
    if style:
        return {"style": style}
    return {}


def default_context(prompt, options):
    """Context used when no analyzer is available: classifier domain plus lookup tables."""
    domain, scores = classify(prompt or "")
    framework = options.get("framework") or scores.get("_explicit_framework") or DEFAULTS["default_framework"]
    return DetectedContext(
        type=domain,
        complexity=options.get("complexity") or "standard",
        intent="create",
        entities=[],
        technologies=[framework],
        style_preferences=_style_preferences(options.get("style")),
        color_palette=list(palette_for(domain)),
        personality=personality_for(domain),
    )


def context_from_analysis(analysis, fallback, options):
    domain = analysis.domain if analysis.domain and analysis.domain != "general" else fallback.type
    style = dict(analysis.style_preferences or {})
    style.update(fallback.style_preferences)
    colors = style.get("colors")
    return DetectedContext(
        type=domain,
        complexity=options.get("complexity") or analysis.complexity or fallback.complexity,
        intent=(analysis.intent.type or "create").lower(),
        entities=list(analysis.entities),
        technologies=list(analysis.technologies) or fallback.technologies,
        style_preferences=style,
        color_palette=list(colors) if isinstance(colors, list) and colors else list(palette_for(domain)),
        personality=personality_for(domain),
    )


class WorkflowOrchestrator:
    """Resolves a workflow type and executes its steps against the registry."""

    def __init__(self, registry, config=None):
        self.registry = registry
        self.config = dict(DEFAULTS, **(config or {}))
        self.health = HealthMonitor(registry, self.config["health_check_interval"])
        self.workflows = {}
        self.executions = {}

    # --- lifecycle / health ---

    def start(self):
        """Begin periodic health polling on the running loop."""
        self.health.start()

    async def stop(self):
        await self.health.stop()

    def system_health(self):
        return self.health.snapshot()

    # --- registry views ---

    def get_execution(self, execution_id):
        return self.executions.get(execution_id)

    def list_executions(self):
        return list(self.executions.values())

    def get_metrics(self):
        results = list(self.executions.values())
        successful = sum(1 for r in results if r.overall_success)
        durations = [r.total_duration for r in results]
        return {
            "total_executions": len(results),
            "successful": successful,
            "failed": len(results) - successful,
            "average_duration": round(sum(durations) / len(durations)) if durations else 0,
        }

    # --- execution ---

    async def execute_workflow(self, request):
        """Run one workflow. Never raises; failures come back as a FAILED result."""
        started = time.monotonic()
        execution_id = _new_id("execution")
        extra = {"request_id": request.request_id, "stage": "workflow"}

        try:
            workflow_type = WorkflowType(request.workflow_type)
        except ValueError:
            log.warning("Unknown workflow type: %s", request.workflow_type, extra=extra)
            result = WorkflowExecutionResult(
                execution_id=execution_id,
                workflow_id="",
                status=WorkflowStatus.FAILED,
                error=f"Unknown workflow type: {request.workflow_type}",
            )
            self.executions[execution_id] = result
            return result

        workflow = Workflow(
            workflow_id=_new_id("workflow"),
            workflow_type=workflow_type,
            user_id=request.user_id,
            request_id=request.request_id,
            started_at=time.time(),
        )
        self.workflows[workflow.workflow_id] = workflow
        workflow.status = WorkflowStatus.RUNNING
        log.info("Starting %s workflow %s", workflow_type.value, workflow.workflow_id, extra=extra)

        try:
            if workflow_type is WorkflowType.PROMPT_TO_DEPLOY:
                result = await self._prompt_to_deploy(workflow, request, execution_id)
            else:
                result = self._not_implemented(workflow, execution_id)
        except Exception as e:
            log.exception("Workflow %s crashed", workflow.workflow_id, extra=extra)
            result = WorkflowExecutionResult(
                execution_id=execution_id,
                workflow_id=workflow.workflow_id,
                status=WorkflowStatus.FAILED,
                error=str(e),
            )

        result.total_duration = int((time.monotonic() - started) * 1000)
        workflow.status = result.status
        workflow.finished_at = time.time()
        self.executions[execution_id] = result
        log.info("Workflow %s %s: %d completed, %d failed, confidence %d",
                 workflow.workflow_id, result.status.value, result.steps_completed,
                 result.steps_failed, result.confidence, extra=extra)
        return result

    def _not_implemented(self, workflow, execution_id):
        log.info("Workflow type %s is not yet implemented, running a no-op pass",
                 workflow.workflow_type.value, extra={"request_id": workflow.request_id, "stage": "workflow"})
        workflow.steps = [WorkflowStep("not_implemented", "", status=StepStatus.COMPLETED)]
        return WorkflowExecutionResult(
            execution_id=execution_id,
            workflow_id=workflow.workflow_id,
            status=WorkflowStatus.COMPLETED,
            output={"message": f"{workflow.workflow_type.value} is not yet implemented"},
            steps_completed=1,
            overall_success=True,
            confidence=NOT_IMPLEMENTED_CONFIDENCE,
        )

    def _prompt_to_deploy_steps(self):
        # (name, subsystem, handler, fatal)
        return [
            ("prompt_analysis", SubsystemId.PROMPT, self._analyze_prompt, False),
            ("template_selection", SubsystemId.TEMPLATE, self._select_template, False),
            ("code_generation", SubsystemId.CODE_GENERATION, self._generate_code, True),
            ("ui_enhancement", SubsystemId.UI_ENHANCEMENT, self._enhance_ui, False),
            ("blueprint_parsing", SubsystemId.BLUEPRINT, self._parse_blueprint, False),
            ("test_generation", SubsystemId.TESTING, self._generate_tests, False),
            ("security_scan", SubsystemId.SECURITY, self._scan_security, False),
            ("protocol_validation", SubsystemId.PROTOCOL, self._validate_protocol, False),
            ("learning_feedback", SubsystemId.LEARNING, self._record_learning, False),
        ]

    async def _prompt_to_deploy(self, workflow, request, execution_id):
        prompt = (request.input or {}).get("prompt", "")
        options = dict((request.input or {}).get("options") or {})
        output = {"prompt": prompt, "options": options}

        plan = self._prompt_to_deploy_steps()
        workflow.steps = [WorkflowStep(name, subsystem_id.value) for name, subsystem_id, _, _ in plan]
        completed = failed = 0

        for step, (name, subsystem_id, handler, fatal) in zip(workflow.steps, plan):
            extra = {"request_id": request.request_id, "stage": name}
            step.status = StepStatus.RUNNING
            try:
                await handler(subsystem_id, output, options)
            except StepSkipped as e:
                step.status = StepStatus.SKIPPED
                log.info("Skipped %s: %s", name, e, extra=extra)
                continue
            except Exception as e:
                step.status = StepStatus.FAILED
                step.error = str(e)
                failed += 1
                if fatal:
                    log.error("Step %s failed, aborting workflow: %s", name, e, extra=extra)
                    return WorkflowExecutionResult(
                        execution_id=execution_id,
                        workflow_id=workflow.workflow_id,
                        status=WorkflowStatus.FAILED,
                        output=output,
                        steps_completed=completed,
                        steps_failed=failed,
                        overall_success=False,
                        confidence=0,
                        error=str(e),
                    )
                log.warning("Step %s failed, continuing: %s", name, e, extra=extra)
                continue
            step.status = StepStatus.COMPLETED
            completed += 1

        return WorkflowExecutionResult(
            execution_id=execution_id,
            workflow_id=workflow.workflow_id,
            status=WorkflowStatus.COMPLETED,
            output=output,
            steps_completed=completed,
            steps_failed=failed,
            overall_success=True,
            confidence=SUCCESS_CONFIDENCE if failed == 0 else DEGRADED_CONFIDENCE,
        )

    # --- step handlers: (subsystem_id, output, options) ---

    async def _analyze_prompt(self, subsystem_id, output, options):
        fallback = default_context(output["prompt"], options)
        # Later steps always find a context, even if the analyzer fails below
        output["detected_context"] = fallback
        analyzer = self.registry.get(subsystem_id)
        if analyzer is None:
            raise StepSkipped("no prompt analyzer registered, using defaults")
        analysis = await analyzer.analyze(output["prompt"], {
            "framework": options.get("framework"),
            "complexity": options.get("complexity"),
            "style_preferences": fallback.style_preferences,
        })
        output["prompt_analysis"] = analysis
        output["detected_context"] = context_from_analysis(analysis, fallback, options)

    async def _select_template(self, subsystem_id, output, options):
        locator = self.registry.get(subsystem_id)
        if locator is None:
            raise StepSkipped("no template locator registered")
        context = output["detected_context"]
        found = await locator.search(
            keyword=output["prompt"],
            category=options.get("framework") or DEFAULTS["default_framework"],
            tags=[context.type],
        )
        if isinstance(found, dict):
            found = found.get("templates", [])
        if not found:
            raise StepSkipped("no matching template")
        template_id, name = template_ref(found[0])
        output["selected_template"] = {"template_id": template_id, "name": name}
        output["rendered_template"] = await locator.render(template_id, {
            "name": "App",
            "title": output["prompt"],
            "prompt": output["prompt"],
            "palette": json.dumps(context.color_palette),
            "personality": context.personality,
        })

    async def _generate_code(self, subsystem_id, output, options):
        generator = self.registry.require(subsystem_id)
        context = output["detected_context"]
        request = GenerationRequest(
            prompt=output["prompt"],
            framework=options.get("framework"),
            language=options.get("language"),
            context=RequestContext(
                domain=context.type,
                complexity=context.complexity,
                style_preferences=context.style_preferences,
            ),
            options=options,
        )
        result = await generator.execute(request)
        if not result.success:
            raise RuntimeError(result.error or "Code generation produced no components")

        files = [FileEntry(path=c.path, content=c.code, language=c.language) for c in result.components]
        if result.package_json:
            files.append(FileEntry(path="package.json", content=result.package_json, language="json"))
        if result.readme:
            files.append(FileEntry(path="README.md", content=result.readme, language="markdown"))
        output["files"] = files
        output["generation"] = {
            "quality_score": result.quality_score,
            "dependencies": result.dependencies,
            "components": [
                {"name": c.name, "type": c.type.value, "path": c.path, "metadata": asdict(c.metadata)}
                for c in result.components
            ],
            "scope": result.scope.type if result.scope else None,
        }

    async def _enhance_ui(self, subsystem_id, output, options):
        enhancer = self.registry.get(subsystem_id)
        if enhancer is None or not output.get("files"):
            raise StepSkipped("no UI enhancer or no files")
        output["files"] = await enhancer.enhance(output["files"], asdict(output["detected_context"]))

    async def _parse_blueprint(self, subsystem_id, output, options):
        parser = self.registry.get(subsystem_id)
        if parser is None or not output.get("files"):
            raise StepSkipped("no blueprint parser or no files")
        output["structure"] = await parser.parse(output["files"])

    async def _generate_tests(self, subsystem_id, output, options):
        if not options.get("include_tests"):
            raise StepSkipped("include_tests is off")
        tester = self.registry.get(subsystem_id)
        if tester is None or not output.get("files"):
            raise StepSkipped("no test generator or no files")
        framework = options.get("framework") or DEFAULTS["default_framework"]
        output["test_files"] = await tester.generate(output["files"], framework)

    async def _scan_security(self, subsystem_id, output, options):
        scanner = self.registry.get(subsystem_id)
        if scanner is None or not output.get("files"):
            raise StepSkipped("no security scanner or no files")
        level = options.get("security_level") or self.config["security_level"]
        output["security_report"] = await scanner.scan(output["files"], level)

    async def _validate_protocol(self, subsystem_id, output, options):
        validator = self.registry.get(subsystem_id)
        if validator is None or not output.get("files"):
            raise StepSkipped("no protocol validator or no files")
        invalid = []
        issues = []
        for f in output["files"]:
            result = await validator.validate(f.content, f.language, {"path": f.path})
            if not result.is_valid:
                invalid.append(f.path)
            issues.extend(result.issues)
        output["protocol_validation"] = {"valid": not invalid, "invalid_files": invalid, "issues": issues}

    async def _record_learning(self, subsystem_id, output, options):
        recorder = self.registry.get(subsystem_id)
        if recorder is None:
            raise StepSkipped("no learning recorder registered")
        output["learning"] = await recorder.record(
            output["prompt"], options, len(output.get("files") or []), True,
        )
