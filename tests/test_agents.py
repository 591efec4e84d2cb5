"""Tests for the default subsystems in agents/. None of them call the LLM."""

import asyncio

from agents.base import SubsystemStatus
from agents.blueprint import BlueprintAgent
from agents.learning import LearningAgent
from agents.optimizer import OptimizerAgent, remove_console_statements
from agents.quality_analyzer import QualityAnalyzerAgent
from agents.reviewer import ReviewerAgent
from agents.security import SecurityAgent
from agents.tester import TesterAgent
from agents.ui_enhancer import THEME_PATH, UIEnhancerAgent
from core.state import FileEntry

VALID_TSX = (
    "import React from 'react';\n"
    "export default function TodoList() {\n"
    "  return <ul className=\"todos\">{[1, 2].map(x => <li key={x}>{x}</li>)}</ul>;\n"
    "}\n"
)


def _run(coro):
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Reviewer
# ---------------------------------------------------------------------------

def test_reviewer_accepts_valid_component():
    result = _run(ReviewerAgent().validate(VALID_TSX, "typescript", {"path": "src/TodoList.tsx", "type": "component"}))
    assert result.is_valid is True
    assert result.issues == []
    assert result.score == 100


def test_reviewer_rejects_empty_file():
    result = _run(ReviewerAgent().validate("  ", "typescript", {}))
    assert result.is_valid is False
    assert result.score == 0


def test_reviewer_flags_unclosed_bracket():
    code = "export function A() {\n  return 1;\n"
    result = _run(ReviewerAgent().validate(code, "typescript", {"path": "src/A.ts"}))
    assert result.is_valid is False
    assert result.issues[0].message == "Unclosed '{'"
    assert result.score == 75


def test_reviewer_ignores_brackets_in_strings():
    code = "export const s = 'a ( b';\nexport const t = \"}\";\n"
    result = _run(ReviewerAgent().validate(code, "javascript", {}))
    assert result.is_valid is True


def test_reviewer_warns_on_unexported_component():
    result = _run(ReviewerAgent().validate(
        "function A() { return null; }", "typescript", {"type": "component"},
    ))
    assert result.is_valid is True
    assert result.issues[0].severity == "warning"
    assert result.score == 90


def test_reviewer_python_syntax_error():
    result = _run(ReviewerAgent().validate("def f(:\n    pass\n", "python", {"path": "app.py"}))
    assert result.is_valid is False
    assert result.issues[0].message.startswith("Syntax error")


def test_reviewer_detects_truncation_marker():
    code = VALID_TSX + "\n<!-- TRUNCATED: Response hit token limit -->"
    result = _run(ReviewerAgent().validate(code, "typescript", {}))
    assert result.is_valid is False


# ---------------------------------------------------------------------------
# Security
# ---------------------------------------------------------------------------

def _files(content, path="src/App.tsx"):
    return [FileEntry(path=path, content=content, language="typescript")]


def test_security_finds_eval_and_secret():
    content = "const apiKey = 'sk-1234567890';\nconst x = eval(input);\n"
    report = _run(SecurityAgent().scan(_files(content)))
    assert report["passed"] is False
    assert report["vulnerabilities"] == 2
    assert {i.line for i in report["issues"]} == {1, 2}
    assert report["files_scanned"] == 1


def test_security_levels_filter_severity():
    content = "<div dangerouslySetInnerHTML={{ __html: html }} />\nfetch('http://example.com/api');\n"
    basic = _run(SecurityAgent().scan(_files(content), level="basic"))
    standard = _run(SecurityAgent().scan(_files(content), level="standard"))
    strict = _run(SecurityAgent().scan(_files(content), level="strict"))
    assert basic["issues"] == []
    assert [i.severity for i in standard["issues"]] == ["warning"]
    assert sorted(i.severity for i in strict["issues"]) == ["info", "warning"]
    assert strict["passed"] is True


def test_security_clean_file_passes():
    report = _run(SecurityAgent().scan(_files(VALID_TSX)))
    assert report["passed"] is True
    assert report["issues"] == []


# ---------------------------------------------------------------------------
# Tester
# ---------------------------------------------------------------------------

def test_tester_writes_smoke_tests():
    files = [
        FileEntry("src/components/TodoList.tsx", VALID_TSX, "typescript"),
        FileEntry("src/services/api.ts", "export const load = () => 1;", "typescript"),
        FileEntry("app/main.py", "print('hi')", "python"),
        FileEntry("src/components/TodoList.test.tsx", "test", "typescript"),
        FileEntry("README.md", "# hi", "markdown"),
    ]
    tests = _run(TesterAgent().generate(files, "react"))

    paths = [t.path for t in tests]
    assert paths == ["src/components/TodoList.test.tsx", "src/services/api.test.ts", "tests/test_main.py"]
    assert "render(<TodoList />)" in tests[0].content
    assert "import * as apiModule from './api'" in tests[1].content
    assert 'importlib.import_module("app.main")' in tests[2].content


# ---------------------------------------------------------------------------
# Optimizer / quality analyzer
# ---------------------------------------------------------------------------

def test_remove_console_statements_keeps_unbraced_bodies():
    code = "function a() {\n  console.log('x');\n  if (y)\n    console.log('y');\n  return 1;\n}"
    cleaned, removed = remove_console_statements(code)
    assert removed == 1
    assert "console.log('y');" in cleaned
    assert "console.log('x');" not in cleaned


def test_optimizer_reports_changes():
    code = "export function a() {\n  console.log('x');\n  return 1;   \n}\n\n\n\nexport const b = 2;"
    result = _run(OptimizerAgent().optimize(code, "a.ts", "typescript", ["PERFORMANCE", "BEST_PRACTICES"]))
    assert "console.log" not in result.optimized_code
    assert "\n\n\n" not in result.optimized_code
    assert [c.type for c in result.changes] == ["PERFORMANCE", "BEST_PRACTICES"]


def test_optimizer_leaves_clean_code_alone():
    result = _run(OptimizerAgent().optimize(VALID_TSX, "TodoList.tsx", "typescript", ["PERFORMANCE"]))
    assert result.optimized_code == VALID_TSX
    assert result.changes == []


def test_quality_analyzer_penalizes_smells():
    clean = _run(QualityAnalyzerAgent().analyze(VALID_TSX, "TodoList.tsx", "typescript"))
    smelly = _run(QualityAnalyzerAgent().analyze(
        "export function a(x: any, y: any) {\n  console.log(x);\n  return y;\n}", "a.ts", "typescript",
    ))
    assert clean.overall_score == 100
    assert clean.test_coverage == 0.0
    assert smelly.overall_score == 92
    assert smelly.metrics["any_types"] == 2


# ---------------------------------------------------------------------------
# UI enhancer / blueprint / learning
# ---------------------------------------------------------------------------

def test_ui_enhancer_adds_theme_and_import():
    files = [FileEntry("src/App.tsx", VALID_TSX, "typescript"), FileEntry("package.json", "{}", "json")]
    context = {"color_palette": ["#111111", "#222222", "#333333"], "personality": "caring"}

    enhanced = _run(UIEnhancerAgent().enhance(files, context))

    assert [f.path for f in enhanced] == ["src/App.tsx", "package.json", THEME_PATH]
    assert enhanced[0].content.startswith("import './theme.css';\n")
    theme = enhanced[-1].content
    assert "/* caring theme */" in theme
    assert "--color-primary: #111111;" in theme
    # Input list is not mutated
    assert files[0].content == VALID_TSX


def test_blueprint_parse():
    files = [
        FileEntry("src/App.tsx",
                  "import TodoList from './components/TodoList';\n"
                  "export default function App() { return <Route path=\"/todos\" />; }",
                  "typescript"),
        FileEntry("src/models/Todo.ts", "export interface Todo { id: string }", "typescript"),
    ]
    structure = _run(BlueprintAgent().parse(files))

    assert structure["routes"] == ["/todos"]
    assert structure["entities"] == ["Todo"]
    assert structure["by_type"] == {"component": ["src/App.tsx"], "model": ["src/models/Todo.ts"]}
    assert structure["modules"][0]["imports"] == ["src/components/TodoList"]
    assert structure["modules"][0]["exports"] == ["App"]


def test_learning_records_outcomes():
    agent = LearningAgent(max_records=2)
    _run(agent.record("a", {"framework": "react"}, 3, True))
    _run(agent.record("b", {}, 0, False))
    summary = _run(agent.record("c", None, 1, True))

    assert summary["recorded"] is True
    assert summary["total"] == 2
    assert summary["success_rate"] == 0.5


def test_subsystem_lifecycle():
    agent = SecurityAgent()
    assert agent.get_status() == SubsystemStatus.RUNNING
    _run(agent.stop())
    assert agent.get_status() == SubsystemStatus.STOPPED
    _run(agent.start())
    assert agent.get_status() == SubsystemStatus.RUNNING
