#!/usr/bin/env python3
"""ForgeFlow - LLM code generation with a workflow orchestrator.

Usage:
    python main.py generate --prompt "todo list with filters"              # pipeline only
    python main.py generate --prompt "..." --framework vue --no-optimize
    python main.py build --prompt "todo app" --include-tests               # full prompt-to-deploy workflow
    python main.py list-subsystems
    python main.py health
"""

import argparse
import asyncio
import logging
import sys
import uuid

from core.logging import configure_logging
from core.orchestrator import WorkflowOrchestrator
from core.pipeline import PipelineConfig
from core.registry import SubsystemId, SubsystemRegistry
from core.state import GenerationRequest, RequestContext, WorkflowExecutionRequest, WorkflowType
from utils.folder_naming import get_output_dir
from utils.llm import AnthropicCompletionClient
from utils.writer import write_files


def _format_issues(issues):
    """Format issues for CLI display."""
    lines = []
    for issue in issues:
        loc = issue.file
        if issue.line:
            loc += f":{issue.line}"
        marker = "ERROR" if issue.severity == "error" else "WARN"
        lines.append(f"  [{marker}] {loc}: {issue.message}")
        if issue.suggestion:
            lines.append(f"           Fix: {issue.suggestion}")
    return "\n".join(lines)


async def _generate(pipeline, request, completion):
    try:
        return await pipeline.execute(request)
    finally:
        await completion.aclose()


async def _run_workflow(orchestrator, request, completion):
    """Execute one workflow with the health poll running alongside it."""
    orchestrator.start()
    try:
        return await orchestrator.execute_workflow(request)
    finally:
        await orchestrator.stop()
        await completion.aclose()


def cmd_generate(args):
    """Run the generation pipeline alone and write its components."""
    config = PipelineConfig.from_defaults(
        enable_validation=not args.no_validate,
        enable_optimization=not args.no_optimize,
    )
    completion = AnthropicCompletionClient()
    registry = SubsystemRegistry.default(completion, pipeline_config=config)
    pipeline = registry.require(SubsystemId.CODE_GENERATION)

    request = GenerationRequest(
        prompt=args.prompt,
        framework=args.framework,
        language=args.language,
        context=RequestContext(domain=args.domain),
    )
    result = asyncio.run(_generate(pipeline, request, completion))
    if not result.success:
        print(f"Generation failed: {result.error}", file=sys.stderr)
        sys.exit(1)

    output_dir = args.out or get_output_dir(args.framework or config.default_framework, args.prompt)
    files = [(c.path, c.code) for c in result.components]
    files.append(("package.json", result.package_json))
    files.append(("README.md", result.readme))
    write_files(output_dir, files)

    print(f"Scope:    {result.scope.type if result.scope else '-'}")
    print(f"Quality:  {result.quality_score}")
    print(f"Output:   {output_dir}")
    print(f"\nGenerated {len(result.components)} component(s):")
    for c in result.components:
        flag = "" if c.metadata.validated is not False else "  (failed validation)"
        print(f"  {c.path}  [{c.type.value}]{flag}")
    if result.dependencies:
        print(f"\nDependencies: {', '.join(result.dependencies)}")


def cmd_build(args):
    """Run the prompt-to-deploy workflow."""
    completion = AnthropicCompletionClient()
    orchestrator = WorkflowOrchestrator(SubsystemRegistry.default(completion))
    options = {
        "framework": args.framework,
        "complexity": args.complexity,
        "style": args.style,
        "include_tests": args.include_tests,
    }
    request = WorkflowExecutionRequest(
        request_id=uuid.uuid4().hex[:8],
        user_id="cli",
        workflow_type=WorkflowType.PROMPT_TO_DEPLOY.value,
        input={"prompt": args.prompt, "options": {k: v for k, v in options.items() if v}},
    )
    result = asyncio.run(_run_workflow(orchestrator, request, completion))

    print(f"Workflow:   {result.workflow_id}")
    print(f"Status:     {result.status.value}")
    print(f"Steps:      {result.steps_completed} completed, {result.steps_failed} failed")
    print(f"Confidence: {result.confidence}")
    print(f"Duration:   {result.total_duration} ms")

    workflow = orchestrator.workflows.get(result.workflow_id)
    if workflow is not None and args.verbose:
        for step in workflow.steps:
            suffix = f" ({step.error})" if step.error else ""
            print(f"  {step.name:20s} {step.status.value}{suffix}")

    if not result.overall_success:
        print(f"\nWorkflow failed: {result.error}", file=sys.stderr)
        sys.exit(1)

    output = result.output
    files = list(output.get("files") or []) + list(output.get("test_files") or [])
    output_dir = args.out or get_output_dir(args.framework or "react", args.prompt)
    write_files(output_dir, files)
    print(f"\nOutput: {output_dir}")
    print(f"Generated {len(files)} file(s):")
    for f in files:
        print(f"  {f.path}")

    report = output.get("security_report")
    if report and report["issues"]:
        print(f"\nSecurity ({report['level']}):")
        print(_format_issues(report["issues"]))


def cmd_list_subsystems(args):
    registry = SubsystemRegistry.default()
    print("Registered subsystems:")
    for subsystem_id in registry.ids():
        handle = registry.get(subsystem_id)
        desc = getattr(handle, "description", type(handle).__name__)
        print(f"  {subsystem_id.value:16s} - {desc}")


def cmd_health(args):
    orchestrator = WorkflowOrchestrator(SubsystemRegistry.default())
    report = orchestrator.system_health()
    print(f"System: {report['status']}")
    for name, status in report["subsystems"].items():
        print(f"  {name:16s} {status}")
    if report["status"] == "unhealthy":
        sys.exit(1)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="forgeflow",
        description="LLM code generation pipeline and workflow orchestrator",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging and per-step detail")
    subparsers = parser.add_subparsers(dest="command")

    gen_parser = subparsers.add_parser("generate", help="Run the generation pipeline only")
    gen_parser.add_argument("--prompt", required=True, help="Natural language request")
    gen_parser.add_argument("--framework", help="Target framework (default: react)")
    gen_parser.add_argument("--language", help="Target language")
    gen_parser.add_argument("--domain", help="Domain hint, e.g. ecommerce, saas")
    gen_parser.add_argument("--no-validate", action="store_true", help="Skip the validate stage")
    gen_parser.add_argument("--no-optimize", action="store_true", help="Skip the optimize stage")
    gen_parser.add_argument("--out", help="Output directory (default: generated/<framework>/<name>)")

    build_parser = subparsers.add_parser("build", help="Run the prompt-to-deploy workflow")
    build_parser.add_argument("--prompt", required=True, help="Natural language request")
    build_parser.add_argument("--framework", help="Target framework (default: react)")
    build_parser.add_argument("--complexity", choices=["simple", "standard", "advanced"])
    build_parser.add_argument("--style", help="Style preference, e.g. minimal, playful")
    build_parser.add_argument("--include-tests", action="store_true", help="Generate smoke tests")
    build_parser.add_argument("--out", help="Output directory (default: generated/<framework>/<name>)")

    subparsers.add_parser("list-subsystems", help="List registered subsystems")
    subparsers.add_parser("health", help="Report subsystem health")

    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    commands = {
        "generate": cmd_generate,
        "build": cmd_build,
        "list-subsystems": cmd_list_subsystems,
        "health": cmd_health,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)
    handler(args)


if __name__ == "__main__":
    main()
