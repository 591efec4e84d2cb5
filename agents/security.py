"""Security agent: static pattern scan of generated files. Zero LLM calls."""

from agents.base import BaseSubsystem
from config.rules import SECURITY_PATTERNS
from core.state import Issue

# Severities reported at each scan level
_LEVELS = {
    "basic": {"error"},
    "standard": {"error", "warning"},
    "strict": {"error", "warning", "info"},
}


class SecurityAgent(BaseSubsystem):
    """Line-by-line regex scan against config.rules.SECURITY_PATTERNS."""

    name = "security"
    description = "Scans generated files for insecure patterns"

    async def scan(self, files, level="standard"):
        severities = _LEVELS.get(level, _LEVELS["standard"])
        issues = []
        for f in files:
            for line_num, line in enumerate(f.content.split("\n"), 1):
                for pattern, severity, message, suggestion in SECURITY_PATTERNS:
                    if severity in severities and pattern.search(line):
                        issues.append(Issue(
                            source="security",
                            severity=severity,
                            file=f.path,
                            line=line_num,
                            message=message,
                            suggestion=suggestion,
                        ))

        errors = sum(1 for i in issues if i.severity == "error")
        return {
            "level": level,
            "files_scanned": len(files),
            "issues": issues,
            "vulnerabilities": errors,
            "passed": errors == 0,
        }
