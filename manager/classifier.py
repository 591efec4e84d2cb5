"""Keyword-scoring prompt classifier with explicit framework override."""

import re

from config.domains import DOMAIN_KEYWORDS

# Explicit technology mentions that force a framework.
# Checked BEFORE anything else; if the user says "use vue", that wins.
# Each entry: (regex_pattern, framework)
EXPLICIT_TECH = [
    (r'\bnext(?:\.?js)?\b', "next"),
    (r'\breact[\s-]?native\b', "react-native"),
    (r'\breact\b', "react"),
    (r'\bvue(?:\.?js)?\b', "vue"),
    (r'\bsvelte\b', "svelte"),
    (r'\bangular\b', "angular"),
    (r'\bexpress\b', "express"),
    (r'\bfast\s*api\b', "fastapi"),
    (r'\bflask\b', "flask"),
]

INTENTS = {
    "CREATE_APP": "Create application from prompt",
    "ADD_FEATURE": "Add feature to existing application",
    "MODIFY_CODE": "Modify existing code",
    "FIX_BUG": "Fix a defect in existing code",
}

_INTENT_PATTERNS = [
    ("FIX_BUG", r'\b(?:fix|bug|debug|broken|crash(?:es|ing)?)\b'),
    ("MODIFY_CODE", r'\b(?:refactor|modify|rename|rewrite|restyle)\b'),
    ("ADD_FEATURE", r'\b(?:add|extend|integrate)\b.+\b(?:to|into)\s+(?:my|the|our|an?)\b'),
]

# Domain nouns that become entity names
ENTITY_KEYWORDS = {
    "todo": "Todo", "task": "Task", "product": "Product", "user": "User",
    "order": "Order", "post": "Post", "comment": "Comment", "workout": "Workout",
    "course": "Course", "lesson": "Lesson", "patient": "Patient",
    "appointment": "Appointment", "invoice": "Invoice", "transaction": "Transaction",
    "message": "Message", "note": "Note", "event": "Event", "recipe": "Recipe",
    "book": "Book", "contact": "Contact", "expense": "Expense", "project": "Project",
}

ACTIONS = [
    "create", "add", "edit", "update", "delete", "remove", "list", "search",
    "filter", "sort", "login", "register", "upload", "share", "track", "checkout",
]

UI_ELEMENTS = [
    "form", "table", "list", "modal", "button", "card", "chart", "navbar",
    "sidebar", "dropdown", "calendar", "grid", "tabs", "carousel",
]

_SIMPLE = re.compile(r'\b(?:simple|basic|minimal|small|tiny)\b')
_ADVANCED = re.compile(r'\b(?:complex|advanced|enterprise|full[\s-]?stack|scalable|production[\s-]ready)\b')


def _inflected(word):
    return r'\b' + re.escape(word) + r'(?:s|es|ing|ed)?\b'


def classify(prompt):
    """Score a prompt against each domain and return the best match.

    Returns (domain, scores_dict). scores_dict also contains
    '_explicit_framework' if the prompt names a framework.
    Domain is 'general' when nothing scored.
    """
    text = prompt.lower()

    scores = {}
    for domain, kw_map in DOMAIN_KEYWORDS.items():
        score = 0
        for keyword, weight in kw_map.items():
            if re.search(_inflected(keyword), text):
                score += weight
        scores[domain] = score

    framework = detect_framework(prompt)
    if framework:
        scores["_explicit_framework"] = framework

    best = max(DOMAIN_KEYWORDS, key=lambda d: scores[d])
    if scores[best] == 0:
        best = "general"
    return best, scores


def detect_framework(prompt):
    """Return the framework the prompt names explicitly, or None."""
    for pattern, framework in EXPLICIT_TECH:
        if re.search(pattern, prompt, re.IGNORECASE):
            return framework
    return None


def classify_intent(prompt):
    text = prompt.lower()
    for intent, pattern in _INTENT_PATTERNS:
        if re.search(pattern, text):
            return intent
    return "CREATE_APP"


def estimate_complexity(prompt):
    text = prompt.lower()
    if _ADVANCED.search(text):
        return "advanced"
    if _SIMPLE.search(text):
        return "simple"
    return "standard"


def extract_entities(prompt):
    text = prompt.lower()
    return [name for kw, name in ENTITY_KEYWORDS.items() if re.search(_inflected(kw), text)]


def extract_actions(prompt):
    text = prompt.lower()
    return [a for a in ACTIONS if re.search(_inflected(a), text)]


def extract_ui_elements(prompt):
    text = prompt.lower()
    return [u for u in UI_ELEMENTS if re.search(_inflected(u), text)]
