"""Template engine using string.Template for safe rendering."""

import json
import os
from string import Template as StringTemplate

from core.state import Template


def get_templates_dir():
    """Return the absolute path to the templates directory."""
    return os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")


def load_template(relative_path, templates_dir=None):
    """Load a template file and return its contents as a string."""
    templates_dir = templates_dir or get_templates_dir()
    path = os.path.join(templates_dir, relative_path)
    resolved = os.path.realpath(path)
    if not resolved.startswith(os.path.realpath(templates_dir) + os.sep):
        raise ValueError(f"Template path escapes templates directory: {relative_path}")
    with open(resolved, "r") as f:
        return f.read()


def render_string(raw, variables):
    """Render with safe substitution: unknown placeholders are left as-is."""
    return StringTemplate(raw).safe_substitute(variables)


class TemplateLibrary:
    """File-backed template locator driven by templates/catalog.json."""

    name = "templates"

    def __init__(self, templates_dir=None):
        self.templates_dir = templates_dir or get_templates_dir()
        self._catalog = None

    def catalog(self):
        if self._catalog is None:
            with open(os.path.join(self.templates_dir, "catalog.json")) as f:
                entries = json.load(f)
            self._catalog = {e["template_id"]: e for e in entries}
        return self._catalog

    def get(self, template_id):
        entry = self.catalog().get(template_id)
        if entry is None:
            raise KeyError(f"Unknown template: {template_id}")
        return Template(
            template_id=entry["template_id"],
            name=entry["name"],
            category=entry["category"],
            tags=list(entry.get("tags", [])),
            body=load_template(entry["file"], self.templates_dir),
        )

    async def search(self, keyword, category, tags):
        """Templates in ``category`` ranked by tag and keyword overlap; no overlap, no match."""
        wanted = {t.lower() for t in tags or []}
        words = set((keyword or "").lower().split())
        scored = []
        for entry in self.catalog().values():
            if category and entry["category"] != category.lower():
                continue
            entry_tags = {t.lower() for t in entry.get("tags", [])}
            score = 2 * len(entry_tags & wanted) + len(entry_tags & words)
            if score:
                scored.append((score, entry["template_id"]))
        scored.sort(key=lambda item: (-item[0], item[1]))
        return [self.get(template_id) for _, template_id in scored]

    async def render(self, template_id, variables):
        return render_string(self.get(template_id).body, variables)
