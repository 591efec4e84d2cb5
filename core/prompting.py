"""Prompt construction for the generate stage: scope detection, enriched prompt, naming."""

import os
import re

from config.stacks import framework_info
from core.state import ProjectScope

_PROMPT_FILE = os.path.join(os.path.dirname(__file__), "prompts", "generator.txt")

GENERIC_NAMES = {"Item", "Component", "Element", "Widget"}

_APP_WORDS = re.compile(r"\b(?:app|application|platform|website|site|system|dashboard)\b")

_SINGLE_COMPONENT = re.compile(
    r"\b(?:a|an|one|single|simple|reusable)\s+(?:\w+\s+){0,2}"
    r"(?:component|button|card|modal|widget|navbar|footer|header|form|dropdown|tooltip)\b"
)

# Ordered: the first matching rule decides the scope.
# (type, pattern, complexity, confidence, min_files, max_files)
_SCOPE_RULES = [
    ("fullstack",
     re.compile(r"\b(?:full[\s-]?stack|frontend and backend|backend and frontend|with an? backend|mern|end[\s-]to[\s-]end)\b"),
     "very_high", 0.95, 30, 60),
    ("backend",
     re.compile(r"\b(?:backend|rest api|api server|express server|microservices?|endpoints?|graphql)\b"),
     "high", 0.9, 10, 20),
    ("landing_page",
     re.compile(r"\b(?:landing page|marketing (?:site|page)|homepage|portfolio)\b"),
     "moderate", 0.85, 8, 15),
    ("feature_rich",
     re.compile(r"\b(?:dashboard|charts?|analytics|admin panel|real[\s-]?time|multi[\s-]?step|kanban)\b"),
     "high", 0.8, 12, 25),
]

_INCLUDES = {
    "single_component": {"routing": False, "state_management": False, "api_layer": False, "backend": False},
    "fullstack": {"routing": True, "state_management": True, "api_layer": True, "backend": True},
    "backend": {"routing": True, "state_management": False, "api_layer": True, "backend": True},
    "landing_page": {"routing": False, "state_management": False, "api_layer": False, "backend": False},
    "feature_rich": {"routing": True, "state_management": True, "api_layer": True, "backend": False},
    "feature": {"routing": True, "state_management": True, "api_layer": False, "backend": False},
}

# Keyword -> entity used when the model falls back on a generic component name
_ENTITY_KEYWORDS = [
    ("todo", "TodoList"), ("button", "Button"), ("card", "Card"), ("modal", "Modal"),
    ("form", "Form"), ("table", "Table"), ("navbar", "Navbar"), ("navigation", "Navigation"),
    ("sidebar", "Sidebar"), ("header", "Header"), ("footer", "Footer"), ("dashboard", "Dashboard"),
    ("chart", "Chart"), ("calendar", "Calendar"), ("gallery", "Gallery"), ("profile", "Profile"),
    ("login", "LoginForm"), ("signup", "SignupForm"), ("cart", "Cart"), ("list", "List"),
]


def load_system_prompt():
    with open(_PROMPT_FILE) as f:
        return f.read()


def detect_scope(prompt):
    """Classify how much code the request calls for."""
    text = (prompt or "").lower()

    if _SINGLE_COMPONENT.search(text) and not _APP_WORDS.search(text):
        return ProjectScope("single_component", "simple", 0.9, 3, 5, dict(_INCLUDES["single_component"]))

    for scope_type, pattern, complexity, confidence, low, high in _SCOPE_RULES:
        if pattern.search(text):
            return ProjectScope(scope_type, complexity, confidence, low, high, dict(_INCLUDES[scope_type]))

    return ProjectScope("feature", "moderate", 0.6, 6, 12, dict(_INCLUDES["feature"]))


def main_entity(prompt):
    """Best specific component name for ``prompt``: keyword map, then first capitalized word."""
    text = prompt or ""
    lowered = text.lower()
    for keyword, entity in _ENTITY_KEYWORDS:
        if re.search(r"\b" + keyword, lowered):
            return entity
    for word in re.findall(r"\b[A-Z][A-Za-z0-9]*\b", text):
        if word not in GENERIC_NAMES:
            return word
    return "Component"


def _listing(values):
    return ", ".join(values) if values else "none detected"


def build_enriched_prompt(prompt, analysis, framework, language, scope):
    """User message for the completion call: request, analysis hints and output format."""
    info = framework_info(framework)
    ext = info["extension"].lstrip(".")
    parts = [
        f"Create a {framework} project for this request:",
        prompt,
        "",
        f"Entities: {_listing(analysis.entities)}",
        f"Actions: {_listing(analysis.actions)}",
        f"UI elements: {_listing(analysis.ui_elements)}",
        f"Domain: {analysis.domain}",
        f"Framework: {framework}",
        f"Language: {language or info['language']}",
        f"Complexity: {analysis.complexity}",
        "",
        f"Project scope: {scope.type.replace('_', ' ')}. "
        f"Generate between {scope.min_files} and {scope.max_files} files.",
    ]
    included = [k.replace("_", " ") for k, v in scope.include.items() if v]
    if included:
        parts.append(f"Include: {', '.join(included)}.")
    parts.extend([
        "",
        "Emit each file as:",
        f"```component:Name:{ext}:src/components/Name.{ext}",
        "...code...",
        "```",
    ])
    return "\n".join(parts)
