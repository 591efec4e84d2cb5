#!/usr/bin/env python3
"""ForgeFlow HTTP API - generation pipeline and workflow orchestrator over Flask."""

import atexit
import os
import threading
import uuid
from dataclasses import asdict

from flask import Flask, jsonify, request

from core.logging import configure_logging
from core.orchestrator import WorkflowOrchestrator
from core.registry import SubsystemId, SubsystemRegistry
from core.state import WorkflowExecutionRequest, WorkflowType, generation_request_from_dict
from utils.background import BackgroundLoop
from utils.llm import AnthropicCompletionClient

app = Flask(__name__)
completion = AnthropicCompletionClient()
registry = SubsystemRegistry.default(completion)
orchestrator = WorkflowOrchestrator(registry)

# Every coroutine runs on one loop so the health poller and the SDK client
# outlive a single request.
runner = BackgroundLoop("forgeflow-server")
_start_lock = threading.Lock()


async def _start_orchestrator():
    orchestrator.start()


def start_background():
    """Start the shared loop and the orchestrator health poll, once."""
    with _start_lock:
        runner.start()
        if not orchestrator.health.running:
            runner.run(_start_orchestrator())


@atexit.register
def shutdown():
    with _start_lock:
        if not runner.running:
            return
        runner.run(orchestrator.stop())
        runner.run(completion.aclose())
        runner.stop()


@app.before_request
def _ensure_started():
    start_background()


def _execution_to_dict(result):
    """Serialize a WorkflowExecutionResult to a JSON-safe dict."""
    data = asdict(result)
    workflow = orchestrator.workflows.get(result.workflow_id)
    if workflow is not None:
        data["steps"] = [asdict(step) for step in workflow.steps]
    return data


@app.route("/api/subsystems")
def api_subsystems():
    subsystems = []
    for subsystem_id in registry.ids():
        handle = registry.get(subsystem_id)
        subsystems.append({
            "id": subsystem_id.value,
            "name": getattr(handle, "name", type(handle).__name__),
            "description": getattr(handle, "description", ""),
        })
    return jsonify(subsystems)


@app.route("/api/generate", methods=["POST"])
def api_generate():
    """Run the generation pipeline alone."""
    data = request.get_json(silent=True)
    if not data or not (data.get("prompt") or "").strip():
        return jsonify({"error": "Missing prompt"}), 400

    pipeline = registry.get(SubsystemId.CODE_GENERATION)
    if pipeline is None:
        return jsonify({"error": "Code generation is not available"}), 503

    result = runner.run(pipeline.execute(generation_request_from_dict(data)))
    status = 200 if result.success else 422
    return jsonify(asdict(result)), status


@app.route("/api/workflows", methods=["POST"])
def api_workflows():
    """Execute a workflow synchronously and return its result."""
    data = request.get_json(silent=True)
    if not data or not (data.get("prompt") or (data.get("input") or {}).get("prompt") or "").strip():
        return jsonify({"error": "Missing prompt"}), 400

    payload = data.get("input") or {"prompt": data["prompt"], "options": data.get("options") or {}}
    execution_request = WorkflowExecutionRequest(
        request_id=data.get("request_id") or uuid.uuid4().hex[:8],
        user_id=data.get("user_id") or "anonymous",
        workflow_type=data.get("workflow_type") or WorkflowType.PROMPT_TO_DEPLOY.value,
        input=payload,
        continue_on_error=data.get("continue_on_error", True),
        rollback_on_error=data.get("rollback_on_error", False),
        parallel=data.get("parallel", False),
    )
    result = runner.run(orchestrator.execute_workflow(execution_request))
    status = 200 if result.overall_success else 422
    return jsonify(_execution_to_dict(result)), status


@app.route("/api/executions")
def api_executions():
    return jsonify({
        "executions": [_execution_to_dict(r) for r in orchestrator.list_executions()],
        "metrics": orchestrator.get_metrics(),
    })


@app.route("/api/executions/<execution_id>")
def api_execution(execution_id):
    result = orchestrator.get_execution(execution_id)
    if result is None:
        return jsonify({"error": "Execution not found"}), 404
    return jsonify(_execution_to_dict(result))


@app.route("/api/health")
def api_health():
    report = orchestrator.system_health()
    status = 503 if report["status"] == "unhealthy" else 200
    return jsonify(report), status


if __name__ == "__main__":
    configure_logging()
    start_background()
    port = int(os.environ.get("PORT", 5001))
    print(f"ForgeFlow API running at http://localhost:{port}")
    app.run(debug=False, port=port)
