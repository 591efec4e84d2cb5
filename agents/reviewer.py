"""Reviewer agent: static checks on a single generated file. Zero LLM calls."""

import ast

from agents.base import BaseSubsystem
from config.rules import BRACKET_PAIRS, PLACEHOLDER_PATTERNS
from core.contracts import ValidationResult
from core.quality import issues_score, quality_gates_pass
from core.state import Issue

_JS_LANGUAGES = {"typescript", "javascript"}


def _bracket_issues(code, file):
    """Unbalanced (), [] or {}. Ignores string contents only roughly."""
    closing = {v: k for k, v in BRACKET_PAIRS.items()}
    stack = []
    quote = None
    for i, ch in enumerate(code):
        if quote:
            # Only template literals span lines; a stray apostrophe in JSX text must not
            # swallow the rest of the file.
            if (ch == quote and code[i - 1] != "\\") or (ch == "\n" and quote != "`"):
                quote = None
            continue
        if ch in "'\"`":
            quote = ch
        elif ch in BRACKET_PAIRS:
            stack.append(ch)
        elif ch in closing:
            if not stack or stack[-1] != closing[ch]:
                return [Issue("validator", "error", file, None, f"Unmatched '{ch}'",
                              "Check the file for a missing opening bracket")]
            stack.pop()
    if stack:
        return [Issue("validator", "error", file, None, f"Unclosed '{stack[-1]}'",
                      "The file looks truncated or is missing a closing bracket")]
    return []


class ReviewerAgent(BaseSubsystem):
    """Checks generated code for syntax slips, placeholders and missing exports."""

    name = "validator"
    description = "Static validation of generated files"

    async def validate(self, code, language, context):
        context = context or {}
        file = context.get("path", "")
        issues = []

        if not code or not code.strip():
            issues.append(Issue("validator", "error", file, None, "File is empty", "Regenerate the file"))
            return ValidationResult(is_valid=False, issues=issues, score=0)

        for line_num, line in enumerate(code.split("\n"), 1):
            for pattern in PLACEHOLDER_PATTERNS:
                if pattern.search(line):
                    issues.append(Issue("validator", "error", file, line_num,
                                        "Placeholder or truncated code", "Write the complete implementation"))

        if language == "python":
            try:
                ast.parse(code)
            except SyntaxError as e:
                issues.append(Issue("validator", "error", file, e.lineno, f"Syntax error: {e.msg}", ""))
        elif language in _JS_LANGUAGES:
            issues.extend(_bracket_issues(code, file))
            if context.get("type") in ("component", "page", "screen") and "export" not in code:
                issues.append(Issue("validator", "warning", file, None, "Component is never exported",
                                    "Add a default or named export"))

        return ValidationResult(
            is_valid=quality_gates_pass(issues),
            issues=issues,
            score=issues_score(issues),
        )
