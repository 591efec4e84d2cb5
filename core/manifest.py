"""Package manifest and readme synthesized from the generated components."""

import json

from utils.folder_naming import extract_project_name

DEFAULT_PROJECT_NAME = "generated-project"


def project_name(prompt):
    """npm-style project name derived from the request, e.g. 'todo-list'."""
    name = extract_project_name(prompt or "").replace("_", "-")
    if not name or name == "project":
        return DEFAULT_PROJECT_NAME
    return name


def build_package_json(dependencies, name=DEFAULT_PROJECT_NAME):
    """Manifest with every dependency pinned to 'latest'."""
    manifest = {
        "name": name,
        "version": "1.0.0",
        "dependencies": {dep: "latest" for dep in dependencies},
    }
    return json.dumps(manifest, indent=2)


def build_readme(components, title="Generated Project"):
    lines = [f"# {title}", "", "## Components", ""]
    for c in components:
        lines.append(f"- **{c.name}** ({c.type.value}) - `{c.path}`")
    lines.extend([
        "",
        "## Installation",
        "",
        "```bash",
        "npm install",
        "```",
        "",
        "## Usage",
        "",
        "```bash",
        "npm start",
        "```",
        "",
    ])
    return "\n".join(lines)
