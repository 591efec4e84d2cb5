"""Static metrics for generated code: complexity, dependencies, scores."""

import re
import sys

from config.rules import SEVERITY_PENALTY

_COMPLEXITY_RE = re.compile(r"\b(?:if|else|for|while|switch|case)\b|&&|\|\|")

# (pattern, flavour). Flavour decides how a specifier maps to a package name.
_IMPORT_PATTERNS = [
    (re.compile(r"""^[ \t]*import\s+(?:type\s+)?[^'";]*?\s+from\s+['"]([^'"]+)['"]""", re.MULTILINE), "js"),
    (re.compile(r"""^[ \t]*import\s+['"]([^'"]+)['"]""", re.MULTILINE), "js"),
    (re.compile(r"""^[ \t]*export\s+[^'";]*?\s+from\s+['"]([^'"]+)['"]""", re.MULTILINE), "js"),
    (re.compile(r"""\brequire\(\s*['"]([^'"]+)['"]\s*\)"""), "js"),
    (re.compile(r"""^[ \t]*from\s+([A-Za-z_][\w.]*)\s+import\b""", re.MULTILINE), "py"),
    (re.compile(r"""^[ \t]*import\s+([A-Za-z_][\w.]*)(?:\s+as\s+\w+)?[ \t]*$""", re.MULTILINE), "py"),
]

NODE_BUILTINS = frozenset({
    "assert", "buffer", "child_process", "crypto", "events", "fs", "http",
    "https", "net", "os", "path", "stream", "url", "util", "zlib",
})


def calculate_complexity(code):
    """1 + number of branch keywords and boolean operators."""
    return 1 + len(_COMPLEXITY_RE.findall(code or ""))


def count_lines(code):
    return len((code or "").splitlines())


def _package_name(specifier, flavour):
    """Map an import specifier to the installable name, or None if it is local."""
    if flavour == "py":
        top = specifier.split(".")[0]
        if top in sys.stdlib_module_names:
            return None
        return top

    if specifier.startswith((".", "/", "~", "@/")):
        return None
    if specifier.startswith("node:"):
        return None
    parts = specifier.split("/")
    name = "/".join(parts[:2]) if specifier.startswith("@") else parts[0]
    if name in NODE_BUILTINS:
        return None
    return name


def extract_dependencies(code):
    """Return external package names imported by ``code``, in order of appearance, deduplicated."""
    found = []
    for pattern, flavour in _IMPORT_PATTERNS:
        for m in pattern.finditer(code or ""):
            name = _package_name(m.group(1), flavour)
            if name:
                found.append((m.start(), name))
    found.sort(key=lambda item: item[0])
    return merge_dependencies([name for _, name in found])


def merge_dependencies(*lists):
    """Ordered union of one or more dependency lists."""
    seen = {}
    for deps in lists:
        for dep in deps:
            seen.setdefault(dep, None)
    return list(seen)


def mean_quality_score(components):
    """Arithmetic mean of component quality scores, missing scores count as 0."""
    if not components:
        return 0
    total = sum(c.metadata.quality_score or 0 for c in components)
    return round(total / len(components), 2)


def issues_score(issues):
    """100 minus a per-severity penalty for every issue, floored at 0."""
    penalty = sum(SEVERITY_PENALTY.get(i.severity, 0) for i in issues)
    return max(0, 100 - penalty)


def quality_gates_pass(issues) -> bool:
    """No issue of severity 'error'."""
    return not any(i.severity == "error" for i in issues)
