"""Tests for core.pipeline: every collaborator is an AsyncMock, no network."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

from agents.optimizer import OptimizerAgent
from agents.quality_analyzer import QualityAnalyzerAgent
from core.contracts import Completion, OptimizationChange, OptimizationResult, QualityReport, ValidationResult
from core.pipeline import GenerationPipeline, PipelineConfig
from core.state import ComponentType, GenerationRequest, PromptAnalysis

TODO_CODE = (
    "import React, { useState } from 'react';\n"
    "\n"
    "export default function TodoList() {\n"
    "  const [items, setItems] = useState([]);\n"
    "  return <ul>{items.map(i => <li key={i}>{i}</li>)}</ul>;\n"
    "}"
)


def _block(name, path, code, kind="component"):
    return f"```{kind}:{name}:tsx:{path}\n{code}\n```\n"


def _completion(text):
    client = MagicMock()
    client.complete = AsyncMock(return_value=Completion(content=text, model="test-model"))
    return client


def _run(pipeline, prompt, **kwargs):
    return asyncio.run(pipeline.execute(GenerationRequest(prompt=prompt, **kwargs)))


def _three_components():
    return (
        _block("TodoList", "src/components/TodoList.tsx", TODO_CODE)
        + _block("TodoItem", "src/components/TodoItem.tsx",
                 "import React from 'react';\nexport function TodoItem() { return <li />; }")
        + _block("api", "src/services/api.ts",
                 "import axios from 'axios';\nexport const load = () => axios.get('/todos');", kind="service")
    )


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------

def test_todo_list_generates_tsx_component():
    completion = _completion(_block("TodoList", "src/components/TodoList.tsx", TODO_CODE))
    pipeline = GenerationPipeline(completion)

    result = _run(pipeline, "Create a todo list component", framework="react")

    assert result.success
    assert len(result.components) == 1
    component = result.components[0]
    assert component.name == "TodoList"
    assert component.path.endswith(".tsx")
    assert component.framework == "react"
    assert component.language == "typescript"
    assert component.dependencies == ["react"]
    assert component.metadata.generated is True
    assert component.metadata.lines_of_code == 6
    assert result.quality_score == 75
    assert json.loads(result.package_json)["dependencies"] == {"react": "latest"}
    assert "**TodoList** (component) - `src/components/TodoList.tsx`" in result.readme
    assert result.scope.type == "single_component"


def test_completion_request_carries_system_prompt_and_scope_budget():
    completion = _completion(_block("TodoList", "src/components/TodoList.tsx", TODO_CODE))
    pipeline = GenerationPipeline(completion)

    _run(pipeline, "full-stack todo app with auth")

    messages = completion.complete.call_args.args[0]
    assert messages[0]["role"] == "system"
    assert messages[1]["role"] == "user"
    assert "full-stack todo app with auth" in messages[1]["content"]
    assert completion.complete.call_args.kwargs["max_tokens"] == PipelineConfig.from_defaults().fullstack_max_tokens


def test_analyzer_output_reaches_the_prompt():
    completion = _completion(_block("TodoList", "src/components/TodoList.tsx", TODO_CODE))
    analyzer = MagicMock()
    analyzer.analyze = AsyncMock(return_value=PromptAnalysis(
        original_prompt="todo", entities=["Todo", "Tag"], domain="productivity",
    ))
    pipeline = GenerationPipeline(completion, analyzer=analyzer)

    _run(pipeline, "todo app with tags")

    user_message = completion.complete.call_args.args[0][1]["content"]
    assert "Entities: Todo, Tag" in user_message
    assert "Domain: productivity" in user_message


def test_analyzer_failure_falls_back_to_defaults():
    completion = _completion(_block("TodoList", "src/components/TodoList.tsx", TODO_CODE))
    analyzer = MagicMock()
    analyzer.analyze = AsyncMock(side_effect=RuntimeError("analyzer down"))
    pipeline = GenerationPipeline(completion, analyzer=analyzer)

    result = _run(pipeline, "todo list")

    assert result.success
    assert "Domain: general" in completion.complete.call_args.args[0][1]["content"]


def test_template_search_failure_is_not_fatal():
    completion = _completion(_block("TodoList", "src/components/TodoList.tsx", TODO_CODE))
    templates = MagicMock()
    templates.search = AsyncMock(side_effect=RuntimeError("index offline"))
    pipeline = GenerationPipeline(completion, templates=templates)

    assert _run(pipeline, "todo list").success


# ---------------------------------------------------------------------------
# Placeholder fallback
# ---------------------------------------------------------------------------

def test_completion_failure_yields_placeholder_page():
    completion = MagicMock()
    completion.complete = AsyncMock(side_effect=RuntimeError("service unavailable"))
    pipeline = GenerationPipeline(completion)

    result = _run(pipeline, "Build a landing page")

    assert result.success
    assert len(result.components) == 1
    placeholder = result.components[0]
    assert placeholder.name == "Build"
    assert placeholder.type == ComponentType.PAGE
    assert placeholder.path == "src/Build.tsx"
    assert placeholder.framework == "react"
    assert placeholder.metadata.quality_score == 60
    assert "export default function Build()" in placeholder.code
    assert result.quality_score == 60


def test_empty_completion_yields_placeholder():
    pipeline = GenerationPipeline(_completion("   "))
    result = _run(pipeline, "weather widget", framework="vue")
    assert result.success
    assert result.components[0].name == "Weather"


def test_placeholder_is_react_for_other_frameworks():
    completion = MagicMock()
    completion.complete = AsyncMock(side_effect=RuntimeError("service unavailable"))
    result = _run(GenerationPipeline(completion), "Build a landing page", framework="vue")

    placeholder = result.components[0]
    assert placeholder.framework == "react"
    assert placeholder.path == "src/Build.tsx"
    assert placeholder.language == "typescript"
    assert result.dependencies == ["react"]


def test_placeholder_escapes_prompt_text():
    completion = MagicMock()
    completion.complete = AsyncMock(side_effect=RuntimeError("down"))
    result = _run(GenerationPipeline(completion), "Show <b>{stats}</b>")
    code = result.components[0].code
    assert "<b>" not in code
    assert "{stats}" not in code


# ---------------------------------------------------------------------------
# Validate / optimize stages
# ---------------------------------------------------------------------------

def test_validation_disabled_never_calls_validator():
    validator = MagicMock()
    validator.validate = AsyncMock(return_value=ValidationResult(is_valid=True))
    pipeline = GenerationPipeline(
        _completion(_three_components()),
        validator=validator,
        config=PipelineConfig.from_defaults(enable_validation=False),
    )

    result = _run(pipeline, "todo app")

    assert result.success
    validator.validate.assert_not_awaited()
    assert all(c.metadata.validated is None for c in result.components)


def test_one_invalid_component_is_still_success():
    validator = MagicMock()
    validator.validate = AsyncMock(side_effect=[
        ValidationResult(is_valid=True, score=100),
        ValidationResult(is_valid=False, score=75),
        ValidationResult(is_valid=True, score=90),
    ])
    pipeline = GenerationPipeline(_completion(_three_components()), validator=validator)

    result = _run(pipeline, "todo app")

    assert result.success
    assert [c.metadata.validated for c in result.components] == [True, False, True]
    assert [c.metadata.validation_score for c in result.components] == [100, 75, 90]


def test_validator_error_on_one_component_keeps_others():
    validator = MagicMock()
    validator.validate = AsyncMock(side_effect=[
        ValidationResult(is_valid=True),
        RuntimeError("validator crashed"),
        ValidationResult(is_valid=True),
    ])
    pipeline = GenerationPipeline(_completion(_three_components()), validator=validator)

    result = _run(pipeline, "todo app")

    assert [c.metadata.validated for c in result.components] == [True, None, True]


def test_optimizer_error_leaves_code_byte_identical():
    optimizer = MagicMock()
    optimizer.optimize = AsyncMock(side_effect=RuntimeError("optimizer crashed"))
    quality = MagicMock()
    quality.analyze = AsyncMock(return_value=QualityReport(overall_score=91))
    pipeline = GenerationPipeline(
        _completion(_block("TodoList", "src/components/TodoList.tsx", TODO_CODE)),
        quality=quality,
        optimizer=optimizer,
    )

    result = _run(pipeline, "todo list")

    assert result.success
    component = result.components[0]
    assert component.code == TODO_CODE
    assert component.metadata.optimized is False
    assert component.metadata.quality_score == 75


def test_optimization_updates_code_and_metadata():
    optimizer = MagicMock()
    optimizer.optimize = AsyncMock(return_value=OptimizationResult(
        optimized_code="export default function TodoList() { return null; }",
        changes=[OptimizationChange("PERFORMANCE"), OptimizationChange("PERFORMANCE"),
                 OptimizationChange("BEST_PRACTICES")],
    ))
    quality = MagicMock()
    quality.analyze = AsyncMock(return_value=QualityReport(overall_score=88, test_coverage=0.0))
    pipeline = GenerationPipeline(
        _completion(_block("TodoList", "src/components/TodoList.tsx", TODO_CODE)),
        quality=quality,
        optimizer=optimizer,
    )

    result = _run(pipeline, "todo list")

    component = result.components[0]
    assert component.code == "export default function TodoList() { return null; }"
    assert component.metadata.optimized is True
    assert component.metadata.optimizations == ["PERFORMANCE", "BEST_PRACTICES"]
    assert component.metadata.quality_score == 88
    assert component.metadata.coverage == 0.0
    assert result.quality_score == 88
    args = optimizer.optimize.call_args.args
    assert args[1] == "TodoList.tsx"
    assert args[3] == ["PERFORMANCE", "BEST_PRACTICES"]


def test_optimization_disabled_skips_quality_and_optimizer():
    optimizer = MagicMock()
    optimizer.optimize = AsyncMock()
    quality = MagicMock()
    quality.analyze = AsyncMock()
    pipeline = GenerationPipeline(
        _completion(_block("TodoList", "src/components/TodoList.tsx", TODO_CODE)),
        quality=quality,
        optimizer=optimizer,
        config=PipelineConfig.from_defaults(enable_optimization=False),
    )

    _run(pipeline, "todo list")

    optimizer.optimize.assert_not_awaited()
    quality.analyze.assert_not_awaited()


def test_real_optimizer_removes_console_statements():
    code = (
        "import React from 'react';\n"
        "export default function TodoList() {\n"
        "  console.log('render');\n"
        "  return <ul />;\n"
        "}"
    )
    pipeline = GenerationPipeline(
        _completion(_block("TodoList", "src/components/TodoList.tsx", code)),
        quality=QualityAnalyzerAgent(),
        optimizer=OptimizerAgent(),
    )

    component = _run(pipeline, "todo list").components[0]

    assert "console.log" not in component.code
    assert "PERFORMANCE" in component.metadata.optimizations


# ---------------------------------------------------------------------------
# Result assembly
# ---------------------------------------------------------------------------

def test_dependencies_deduplicated_in_first_seen_order():
    pipeline = GenerationPipeline(_completion(_three_components()))

    result = _run(pipeline, "todo app")

    assert result.dependencies == ["react", "axios"]
    assert list(json.loads(result.package_json)["dependencies"]) == ["react", "axios"]


def test_generic_component_name_is_fixed():
    completion = _completion(_block(
        "Component", "src/components/Component.tsx",
        "export default function Component() { return <ul />; }",
    ))
    result = _run(GenerationPipeline(completion), "todo list with filters")

    component = result.components[0]
    assert component.name == "TodoList"
    assert component.path == "src/components/TodoList.tsx"
    assert component.metadata.auto_fixed_naming is True
    assert component.metadata.original_name == "Component"


def test_duplicate_paths_get_suffixes():
    text = (
        _block("Card", "src/components/Card.tsx", "export function Card() { return <div />; }")
        + _block("Card", "src/components/Card.tsx", "export function Card() { return <span />; }")
    )
    result = _run(GenerationPipeline(_completion(text)), "card grid")
    assert [c.path for c in result.components] == ["src/components/Card.tsx", "src/components/Card-2.tsx"]


def test_empty_prompt_fails_without_calling_completion():
    completion = _completion("unused")
    result = _run(GenerationPipeline(completion), "   ")

    assert result.success is False
    assert result.error == "Prompt is required"
    assert result.components == []
    assert result.quality_score == 0
    completion.complete.assert_not_awaited()
