"""UI enhancer: adds a theme stylesheet built from the detected palette."""

import posixpath

from agents.base import BaseSubsystem
from config.domains import DOMAIN_PALETTES
from core.state import FileEntry

THEME_PATH = "src/theme.css"

_ROLE_NAMES = ["primary", "secondary", "accent"]


def build_theme_css(palette, personality):
    colors = list(palette) or DOMAIN_PALETTES["default"]
    lines = [f"/* {personality} theme */", ":root {"]
    for role, color in zip(_ROLE_NAMES, colors):
        lines.append(f"  --color-{role}: {color};")
    lines.extend([
        "  --radius: 8px;",
        "  --font-family: system-ui, -apple-system, 'Segoe UI', sans-serif;",
        "}",
        "",
        "@media (prefers-color-scheme: dark) {",
        "  :root {",
        "    --color-background: #111114;",
        "    --color-text: #f2f2f7;",
        "  }",
        "}",
        "",
    ])
    return "\n".join(lines)


class UIEnhancerAgent(BaseSubsystem):
    """Writes src/theme.css and imports it from the entry component."""

    name = "ui_enhancement"
    description = "Applies the detected color palette to the generated UI"

    async def enhance(self, files, context):
        context = context or {}
        css = build_theme_css(context.get("color_palette") or [], context.get("personality", "professional"))
        enhanced = [f for f in files if f.path != THEME_PATH]

        entry = next(
            (f for f in enhanced if posixpath.splitext(f.path)[1] in (".tsx", ".jsx")
             and posixpath.dirname(f.path) == "src"),
            None,
        )
        if entry is not None and "theme.css" not in entry.content:
            idx = enhanced.index(entry)
            enhanced[idx] = FileEntry(
                path=entry.path,
                content=f"import './theme.css';\n{entry.content}",
                language=entry.language,
            )

        enhanced.append(FileEntry(path=THEME_PATH, content=css, language="css"))
        return enhanced
