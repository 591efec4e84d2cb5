"""Optimizer: safe textual clean-ups of generated code. Zero LLM calls."""

import re

from agents.base import BaseSubsystem
from core.contracts import OptimizationChange, OptimizationResult

_CONSOLE_STMT = re.compile(r"^[ \t]*console\.(?:log|debug)\([^;]*\);?[ \t]*$")
_TRAILING_WS = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUNS = re.compile(r"\n{3,}")

_JS_LANGUAGES = {"typescript", "javascript"}


def remove_console_statements(code):
    """Drop standalone console.log/debug lines. Returns (code, removed_count).

    A statement that is the unbraced body of an if/else/loop is kept, since
    removing it would pull the next statement into that body.
    """
    out = []
    removed = 0
    for line in code.split("\n"):
        if _CONSOLE_STMT.match(line):
            previous = next((p.strip() for p in reversed(out) if p.strip()), "")
            if not previous or previous.endswith((";", "{", "}")):
                removed += 1
                continue
        out.append(line)
    return "\n".join(out), removed


class OptimizerAgent(BaseSubsystem):
    """Applies only rewrites that keep the behavior of well-formed code."""

    name = "optimizer"
    description = "Removes debug output and tidies generated code"

    async def optimize(self, code, file_name, language, optimizations):
        changes = []
        result = code

        if "PERFORMANCE" in optimizations and language in _JS_LANGUAGES:
            stripped, count = remove_console_statements(result)
            if count:
                result = stripped
                changes.append(OptimizationChange("PERFORMANCE", f"Removed {count} console statement(s)"))

        if "BEST_PRACTICES" in optimizations:
            tidied = _BLANK_RUNS.sub("\n\n", _TRAILING_WS.sub("", result))
            if tidied != result:
                result = tidied
                changes.append(OptimizationChange("BEST_PRACTICES", "Normalized whitespace"))

        return OptimizationResult(optimized_code=result, changes=changes)
