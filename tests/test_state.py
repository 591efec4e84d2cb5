"""Tests for core.state models."""

import dataclasses

import pytest

from core.state import (
    ComponentMetadata,
    FileEntry,
    GenerationResult,
    Issue,
    RequestContext,
    WorkflowExecutionRequest,
    WorkflowStatus,
    WorkflowType,
    generation_request_from_dict,
)


def test_file_entry_creation():
    f = FileEntry(path="src/App.tsx", content="export default App;", language="typescript")
    assert f.path == "src/App.tsx"
    assert f.language == "typescript"


def test_issue_no_line():
    i = Issue(source="security", severity="warning", file="app.py", line=None, message="Debug mode enabled")
    assert i.line is None
    assert i.suggestion == ""


def test_component_metadata_defaults():
    meta = ComponentMetadata()
    assert meta.generated is True
    assert meta.validated is None
    assert meta.optimized is False
    assert meta.optimizations == []


def test_generation_result_defaults():
    result = GenerationResult(success=False, error="Prompt is required")
    assert result.components == []
    assert result.quality_score == 0
    assert result.package_json == ""


def test_request_context_is_frozen():
    ctx = RequestContext(domain="fitness")
    with pytest.raises(dataclasses.FrozenInstanceError):
        ctx.domain = "finance"


def test_generation_request_from_dict():
    request = generation_request_from_dict({
        "prompt": "  todo list  ",
        "framework": "vue",
        "context": {"domain": "productivity", "stylePreferences": {"theme": "dark"}},
        "options": {"include_tests": True},
    })
    assert request.prompt == "todo list"
    assert request.framework == "vue"
    assert request.language is None
    assert request.context.domain == "productivity"
    assert request.context.style_preferences == {"theme": "dark"}
    assert request.options == {"include_tests": True}


def test_generation_request_from_empty_dict():
    request = generation_request_from_dict({})
    assert request.prompt == ""
    assert request.context == RequestContext()


def test_workflow_request_defaults():
    request = WorkflowExecutionRequest(request_id="r", user_id="u", workflow_type="custom", input={})
    assert request.continue_on_error is True
    assert request.rollback_on_error is False
    assert request.parallel is False


def test_workflow_enums():
    assert WorkflowType("prompt-to-deploy") is WorkflowType.PROMPT_TO_DEPLOY
    assert len(WorkflowType) == 8
    assert {s.value for s in WorkflowStatus} == {"pending", "running", "completed", "failed"}
