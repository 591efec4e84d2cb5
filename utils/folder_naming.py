"""Folder naming utilities: slug generation, output dirs, dedup."""

import os
import re

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
OUTPUT_ROOT = os.path.join(BASE_DIR, "generated")


def slugify(text):
    """Convert text to a filesystem-safe slug."""
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "_", text)
    return text.strip("_")


def extract_project_name(request):
    """Pull a short project name from the request text."""
    # Remove common filler words to get the core noun
    filler = {
        "build", "me", "a", "an", "the", "create", "make", "generate",
        "write", "for", "to", "with", "using", "that", "and", "app",
        "application", "tool", "program", "please", "can", "you", "i",
        "want", "need", "some", "new", "simple", "react", "vue", "page",
    }
    words = re.sub(r"[^\w\s]", "", request.lower()).split()
    meaningful = [w for w in words if w not in filler]
    name = "_".join(meaningful[:3]) if meaningful else "project"
    return slugify(name)


MAX_DEDUP = 1000


def get_output_dir(framework, request, root=None):
    """Return a deduplicated output directory for the given framework and request."""
    root = root or OUTPUT_ROOT
    base = os.path.join(root, slugify(framework or "react") or "react", extract_project_name(request))

    if not os.path.exists(base):
        return base

    # Dedup with _2, _3, etc.
    for counter in range(2, MAX_DEDUP + 2):
        candidate = f"{base}_{counter}"
        if not os.path.exists(candidate):
            return candidate

    raise RuntimeError(f"Too many duplicate projects (>{MAX_DEDUP}) for: {base}")
