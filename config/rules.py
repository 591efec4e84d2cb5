"""Security and validation rule patterns for generated code."""

import re

# Patterns that indicate security issues. Each entry:
# (pattern_regex, severity, message, suggestion)
SECURITY_PATTERNS = [
    (
        re.compile(r"""(?:password|secret|api_?key|token)\s*[:=]\s*["'][^"']{4,}["']""", re.IGNORECASE),
        "error",
        "Hardcoded secret or credential",
        "Read secrets from environment variables or a secrets manager",
    ),
    (
        re.compile(r"""\beval\s*\("""),
        "error",
        "Use of eval() is unsafe",
        "Replace eval() with JSON.parse or an explicit dispatch table",
    ),
    (
        re.compile(r"""\bnew\s+Function\s*\("""),
        "error",
        "Dynamic code construction with new Function()",
        "Avoid building functions from strings",
    ),
    (
        re.compile(r"""\bexec\s*\("""),
        "error",
        "Use of exec() is unsafe",
        "Avoid exec(); use explicit function calls instead",
    ),
    (
        re.compile(r"""dangerouslySetInnerHTML"""),
        "warning",
        "dangerouslySetInnerHTML can introduce XSS",
        "Sanitize the HTML (e.g. DOMPurify) or render text content instead",
    ),
    (
        re.compile(r"""\.innerHTML\s*="""),
        "warning",
        "Assigning innerHTML can introduce XSS",
        "Use textContent or a sanitizer",
    ),
    (
        re.compile(r"""\bdocument\.write\s*\("""),
        "warning",
        "document.write() is unsafe and blocks rendering",
        "Manipulate the DOM through the framework instead",
    ),
    (
        re.compile(r"""localStorage\.setItem\(\s*["'](?:token|jwt|auth)""", re.IGNORECASE),
        "warning",
        "Auth token stored in localStorage",
        "Prefer httpOnly cookies for session tokens",
    ),
    (
        re.compile(r"""["']http://(?!localhost|127\.0\.0\.1)[^"']+["']"""),
        "info",
        "Plain HTTP URL",
        "Use https:// for external resources",
    ),
    (
        re.compile(r"""\bdebug\s*[:=]\s*[Tt]rue\b"""),
        "warning",
        "Debug mode enabled",
        "Disable debug mode outside development",
    ),
]

# Severity weights used to turn issue lists into a 0-100 score
SEVERITY_PENALTY = {"error": 25, "warning": 10, "info": 2}

# Markers that show the model left work unfinished
PLACEHOLDER_PATTERNS = [
    re.compile(r"//\s*\.\.\.\s*(?:rest|existing|more)", re.IGNORECASE),
    re.compile(r"#\s*\.\.\.\s*(?:rest|existing|more)", re.IGNORECASE),
    re.compile(r"\b(?:implement|add) (?:this|logic) here\b", re.IGNORECASE),
    re.compile(r"TRUNCATED: Response hit token limit"),
]

BRACKET_PAIRS = {"(": ")", "[": "]", "{": "}"}
