"""Quality analyzer: heuristic 0-100 score for one file. Zero LLM calls."""

import re

from agents.base import BaseSubsystem
from core.contracts import QualityReport
from core.quality import calculate_complexity, count_lines

_ANY_TYPE = re.compile(r":\s*any\b")
_CONSOLE = re.compile(r"\bconsole\.(?:log|debug)\(")
_PRINT = re.compile(r"^\s*print\(", re.MULTILINE)

# How many long lines / complexity points each depth tolerates before penalizing
_DEPTH_LIMITS = {"quick": (40, 30), "standard": (20, 20), "deep": (10, 15)}


class QualityAnalyzerAgent(BaseSubsystem):
    """Scores maintainability from size, complexity and a few smells."""

    name = "quality"
    description = "Heuristic code quality scoring"

    async def analyze(self, code, file_name, language, depth="standard"):
        long_line_limit, complexity_limit = _DEPTH_LIMITS.get(depth, _DEPTH_LIMITS["standard"])
        lines = count_lines(code)
        complexity = calculate_complexity(code)
        long_lines = sum(1 for line in code.splitlines() if len(line) > 120)
        any_types = len(_ANY_TYPE.findall(code)) if language == "typescript" else 0
        debug_output = len(_CONSOLE.findall(code)) + (len(_PRINT.findall(code)) if language == "python" else 0)

        score = 100
        score -= max(0, complexity - complexity_limit)
        score -= 2 * max(0, long_lines - long_line_limit // 4)
        score -= 3 * any_types
        score -= 2 * debug_output
        if lines > 400:
            score -= 10

        return QualityReport(
            overall_score=max(0, min(100, score)),
            test_coverage=0.0,
            metrics={
                "lines_of_code": lines,
                "complexity": complexity,
                "long_lines": long_lines,
                "any_types": any_types,
                "debug_output": debug_output,
            },
        )
