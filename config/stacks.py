"""Framework definitions: default file extension, language and source layout."""

import os

FRAMEWORKS = {
    "react": {"extension": ".tsx", "language": "typescript", "dependencies": ["react"]},
    "next": {"extension": ".tsx", "language": "typescript", "dependencies": ["react", "next"]},
    "react-native": {"extension": ".tsx", "language": "typescript", "dependencies": ["react", "react-native"]},
    "vue": {"extension": ".vue", "language": "vue", "dependencies": ["vue"]},
    "svelte": {"extension": ".svelte", "language": "svelte", "dependencies": ["svelte"]},
    "angular": {"extension": ".ts", "language": "typescript", "dependencies": ["@angular/core"]},
    "express": {"extension": ".ts", "language": "typescript", "dependencies": ["express"]},
    "flask": {"extension": ".py", "language": "python", "dependencies": ["flask"]},
    "fastapi": {"extension": ".py", "language": "python", "dependencies": ["fastapi"]},
}

DEFAULT_FRAMEWORK = "react"

_EXT_LANGUAGES = {
    ".py": "python", ".html": "html", ".css": "css",
    ".js": "javascript", ".jsx": "javascript", ".mjs": "javascript",
    ".ts": "typescript", ".tsx": "typescript",
    ".vue": "vue", ".svelte": "svelte",
    ".json": "json", ".md": "markdown", ".yml": "yaml", ".yaml": "yaml",
}

# Short language tags that models put in fences or block headers
_LANGUAGE_ALIASES = {
    "ts": "typescript", "tsx": "typescript", "typescript": "typescript",
    "js": "javascript", "jsx": "javascript", "javascript": "javascript",
    "py": "python", "python": "python",
}


def framework_info(framework):
    """Return the framework definition, falling back to react."""
    return FRAMEWORKS.get((framework or "").lower(), FRAMEWORKS[DEFAULT_FRAMEWORK])


def guess_language(filepath, default="text"):
    """Guess language from file extension."""
    _, ext = os.path.splitext(filepath)
    return _EXT_LANGUAGES.get(ext.lower(), default)


def normalize_language(tag, default="typescript"):
    """Map a fence tag such as 'tsx' or 'py' to a language name."""
    if not tag:
        return default
    return _LANGUAGE_ALIASES.get(tag.lower(), tag.lower())
