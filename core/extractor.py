"""Code block extraction: raw completion text -> component candidates.

The completion service has no enforced output schema, so extraction is an
ordered chain of strategies, most structured first. Each strategy is a pure
``(text, context) -> list[ComponentCandidate]`` function and the first one to
return anything wins. The final strategy always returns one candidate, so
``extract`` never comes back empty.

``context`` is a plain dict with the optional keys ``prompt``, ``entities``
and ``framework``.
"""

import json
import logging
import posixpath
import re

from config.stacks import framework_info, guess_language, normalize_language
from core.state import ComponentCandidate, ComponentType

log = logging.getLogger(__name__)

FALLBACK_NAME = "Component"
FALLBACK_APP_NAME = "App"

# Explicit blocks are trusted by construction; inferred formats need a
# higher bar to filter stray fences and empty snippets.
EXPLICIT_MIN_CODE = 10
INFERRED_MIN_CODE = 50

_TYPES = "|".join(t.value for t in ComponentType)

# ```component:TodoList:tsx:src/components/TodoList.tsx
# ...code...
# ```
_EXPLICIT_BLOCK_RE = re.compile(
    r"^[ \t]*(?:```)?[ \t]*(" + _TYPES + r"):([A-Za-z_$][\w$]*):([\w+#.-]+):([^\s`]+)[ \t]*\n"
    r"(.*?)^[ \t]*```[ \t]*$",
    re.MULTILINE | re.DOTALL | re.IGNORECASE,
)

_PATH_SECTION_SPLIT_RE = re.compile(r"(?=^[ \t]*//\s*src/)", re.MULTILINE)
_PATH_MARKER_RE = re.compile(r"^[ \t]*//\s*(src/[\w/\-.]+)[ \t]*(?:\n|$)")

_FENCE_LINE_RE = re.compile(r"^[ \t]*```[^\n`]*$", re.MULTILINE)

# Same shapes the fenced-file parser has always accepted:
#   ```src/App.tsx   ```tsx src/App.tsx   ```App.tsx   ```tsx + "// path" line
_FENCED_BLOCK_RE = re.compile(r"```([^\s`]*)(?:[ \t]+([^\s`]+))?[ \t]*\n(.*?)```", re.DOTALL)
_COMMENT_PATH_RE = re.compile(
    r"^[ \t]*(?:#|//|/\*|<!--)\s*([\w./@-]+\.\w+)\s*(?:\*/|-->)?[ \t]*\n",
)

_DECLARATION_RE = re.compile(
    r"export\s+default\s+function\s+(\w+)"
    r"|export\s+function\s+(\w+)"
    r"|(?:export\s+)?const\s+(\w+)\s*:\s*React\.FC"
)

_NAME_PATTERNS = [
    re.compile(r"export\s+(?:default\s+)?(?:async\s+)?(?:function|const|class)\s+(\w+)"),
    re.compile(r"(?:const|let)\s+(\w+)\s*:\s*React\.FC"),
    re.compile(r"\bfunction\s+([A-Z]\w*)"),
    re.compile(r"\bclass\s+(\w+)"),
]

_TYPE_DIRS = {
    "pages": ComponentType.PAGE,
    "screens": ComponentType.SCREEN,
    "services": ComponentType.SERVICE,
    "middleware": ComponentType.SERVICE,
    "api": ComponentType.API,
    "routes": ComponentType.API,
    "controllers": ComponentType.API,
    "models": ComponentType.MODEL,
    "types": ComponentType.MODEL,
    "schemas": ComponentType.MODEL,
}

# Keys of a JSON backend bundle and the component type of their entries
_BUNDLE_KEYS = {
    "controllers": ComponentType.API,
    "routes": ComponentType.API,
    "services": ComponentType.SERVICE,
    "middleware": ComponentType.SERVICE,
    "models": ComponentType.MODEL,
    "config": ComponentType.SERVICE,
    "utils": ComponentType.SERVICE,
    "validators": ComponentType.SERVICE,
}


# --- shared helpers ---

def derive_name(path=None, code="", explicit=None):
    """Pick a component name: explicit > file stem > declaration in code > 'Component'."""
    if explicit:
        return explicit
    if path:
        stem = posixpath.splitext(posixpath.basename(path.replace("\\", "/")))[0]
        if stem:
            return stem
    for pattern in _NAME_PATTERNS:
        m = pattern.search(code or "")
        if m:
            return m.group(1)
    return FALLBACK_NAME


def infer_component_type(path):
    """Guess the component type from the directories in its path."""
    parts = (path or "").lower().replace("\\", "/").split("/")[:-1]
    for part in reversed(parts):
        if part in _TYPE_DIRS:
            return _TYPE_DIRS[part]
    return ComponentType.COMPONENT


def strip_fences(code):
    """Drop every markdown fence line and surrounding blank lines."""
    return _FENCE_LINE_RE.sub("", code).strip()


def to_identifier(word):
    """'todo-list!' -> 'Todolist'. Returns '' when nothing usable is left."""
    cleaned = re.sub(r"[^\w]", "", word or "")
    if not cleaned:
        return ""
    if cleaned[0].isdigit():
        cleaned = "_" + cleaned
    return cleaned[0].upper() + cleaned[1:]


def _extension(context):
    return framework_info(context.get("framework"))["extension"]


def _language_for(path, context):
    default = framework_info(context.get("framework"))["language"]
    return guess_language(path, default=default)


def _candidate(name, code, path, context, strategy, language=None, kind=None):
    return ComponentCandidate(
        name=name,
        code=code,
        path=path,
        language=language or _language_for(path, context),
        type=kind or infer_component_type(path),
        strategy=strategy,
    )


# --- strategies ---

def explicit_blocks(text, context):
    """Blocks with a ``type:Name:lang:path`` header, closed by a fence line."""
    candidates = []
    for m in _EXPLICIT_BLOCK_RE.finditer(text):
        kind, name, lang, path, code = m.groups()
        code = strip_fences(code)
        if len(code) <= EXPLICIT_MIN_CODE or not name or not path:
            continue
        language = guess_language(path, default=normalize_language(lang))
        candidates.append(_candidate(
            name, code, path, context, "explicit",
            language=language, kind=ComponentType(kind.lower()),
        ))
    return candidates


def json_bundle(text, context):
    """A JSON object of backend files: {"server": {...}, "routes": [{name, path, content}], ...}."""
    try:
        bundle = json.loads(strip_fences(text))
    except ValueError:
        return []
    if not isinstance(bundle, dict):
        return []

    ext = ".ts" if _extension(context) in (".tsx", ".ts") else _extension(context)
    candidates = []

    for key in ("server", "app"):
        entry = bundle.get(key)
        if isinstance(entry, str):
            entry = {"content": entry}
        if isinstance(entry, dict) and entry.get("content"):
            path = entry.get("path") or f"src/{key}{ext}"
            name = derive_name(path, entry["content"], entry.get("name"))
            candidates.append(_candidate(
                name, entry["content"].strip(), path, context, "json_bundle", kind=ComponentType.SERVICE,
            ))

    for key, kind in _BUNDLE_KEYS.items():
        items = bundle.get(key)
        if not isinstance(items, list):
            continue
        for item in items:
            if not isinstance(item, dict) or not isinstance(item.get("content"), str):
                continue
            content = item["content"].strip()
            if not content:
                continue
            name, path = item.get("name"), item.get("path")
            is_file_path = bool(path) and bool(posixpath.splitext(path)[1])
            if name and posixpath.splitext(name)[1]:
                # {"name": "user.controller.ts", "path": "src/controllers"}
                file_name, name = name, posixpath.splitext(name)[0]
            else:
                name = name or derive_name(path if is_file_path else None, content)
                file_name = f"{name}{ext}"
            if not path:
                path = f"src/{key}/{file_name}"
            elif not is_file_path:
                path = posixpath.join(path, file_name)
            candidates.append(_candidate(name, content, path, context, "json_bundle", kind=kind))
    return candidates


def path_comment_sections(text, context):
    """Sections that each start with a ``// src/...`` marker line."""
    candidates = []
    for section in _PATH_SECTION_SPLIT_RE.split(text):
        m = _PATH_MARKER_RE.match(section)
        if not m:
            continue
        path = m.group(1)
        code = strip_fences(section[m.end():])
        if len(code) <= INFERRED_MIN_CODE:
            continue
        candidates.append(_candidate(derive_name(path, code), code, path, context, "path_comment"))
    return candidates


def fenced_blocks(text, context):
    """Any fenced code block, with the path taken from the fence tag or a first-line comment."""
    candidates = []
    for m in _FENCED_BLOCK_RE.finditer(text):
        tag, second, code = m.group(1), m.group(2), m.group(3)
        if ":" in tag:
            # a rejected explicit header, never a file path
            tag = ""

        path = None
        if "/" in tag and "." in tag:
            path = tag
        elif second and "." in second:
            path = second
        elif "." in tag:
            path = tag
        else:
            cm = _COMMENT_PATH_RE.match(code)
            if cm:
                path = cm.group(1).strip()
                code = code[cm.end():]

        code = code.strip()
        if len(code) <= INFERRED_MIN_CODE:
            continue

        language = None
        if path is None:
            name = derive_name(None, code)
            path = f"src/components/{name}{_extension(context)}"
            if tag and "." not in tag:
                language = normalize_language(tag)
        else:
            name = derive_name(path, code)
        candidates.append(_candidate(name, code, path, context, "fenced", language=language))
    return candidates


def declaration_scan(text, context):
    """Split raw text at exported declarations (functions, React.FC constants)."""
    matches = list(_DECLARATION_RE.finditer(text))
    if not matches:
        return []

    ext = _extension(context)
    if len(matches) == 1:
        name = next(g for g in matches[0].groups() if g)
        path = f"src/{name}{ext}"
        return [_candidate(name, strip_fences(text), path, context, "declaration")]

    candidates = []
    for i, m in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        segment = strip_fences(text[m.start():end])
        if len(segment) <= INFERRED_MIN_CODE:
            continue
        name = next(g for g in m.groups() if g)
        path = f"src/components/{name}{ext}"
        candidates.append(_candidate(name, segment, path, context, "declaration"))
    return candidates


def whole_text(text, context):
    """Last resort: the whole response is one component."""
    name = fallback_name(context)
    path = f"src/{name}{_extension(context)}"
    return [_candidate(name, strip_fences(text), path, context, "whole_text")]


def fallback_name(context):
    """Name from the first analysis entity, else the first prompt word, else 'App'."""
    for entity in context.get("entities") or []:
        if isinstance(entity, dict):
            entity = entity.get("name") or entity.get("value") or ""
        name = to_identifier(str(entity))
        if name:
            return name
    for word in (context.get("prompt") or "").split():
        name = to_identifier(word)
        if name:
            return name
    return FALLBACK_APP_NAME


STRATEGIES = (
    explicit_blocks,
    json_bundle,
    path_comment_sections,
    fenced_blocks,
    declaration_scan,
    whole_text,
)


def first_non_empty(strategies, text, context):
    """Run strategies in order and return the first non-empty result."""
    for strategy in strategies:
        try:
            candidates = strategy(text, context)
        except Exception as e:
            log.warning("Extraction strategy %s failed: %s", strategy.__name__, e)
            continue
        if candidates:
            log.debug("Extracted %d candidate(s) via %s", len(candidates), strategy.__name__)
            return candidates
    return []


def extract(raw_text, context=None):
    """Return component candidates for ``raw_text``. Never raises, never empty."""
    context = context or {}
    text = raw_text or ""
    candidates = first_non_empty(STRATEGIES, text, context)
    if not candidates:
        candidates = [_candidate(
            FALLBACK_APP_NAME, text.strip(), f"src/{FALLBACK_APP_NAME}{_extension(context)}",
            context, "whole_text",
        )]
    return candidates
