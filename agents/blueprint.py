"""Blueprint parser: structural summary of a generated file set."""

import posixpath
import re

from agents.base import BaseSubsystem
from core.extractor import infer_component_type
from core.quality import extract_dependencies

_EXPORT_RE = re.compile(r"export\s+(?:default\s+)?(?:async\s+)?(?:function|const|class|interface|type)\s+(\w+)")
_IMPORT_LOCAL_RE = re.compile(r"""from\s+['"](\.{1,2}/[^'"]+)['"]""")
_ROUTE_RE = re.compile(r"""(?:<Route\s+path=|\.(?:get|post|put|patch|delete)\()\s*\{?['"]([^'"]+)['"]""")
_ENTITY_RE = re.compile(r"\b(?:interface|type)\s+([A-Z]\w*)")


class BlueprintAgent(BaseSubsystem):
    """Lists exports, local imports, routes and entity types per file."""

    name = "blueprint"
    description = "Parses generated files into a project structure"

    async def parse(self, files):
        modules = []
        routes = []
        entities = []
        by_type = {}

        for f in files:
            kind = infer_component_type(f.path).value
            by_type.setdefault(kind, []).append(f.path)
            routes.extend(_ROUTE_RE.findall(f.content))
            entities.extend(_ENTITY_RE.findall(f.content))
            modules.append({
                "path": f.path,
                "type": kind,
                "exports": _EXPORT_RE.findall(f.content),
                "imports": [
                    posixpath.normpath(posixpath.join(posixpath.dirname(f.path), spec))
                    for spec in _IMPORT_LOCAL_RE.findall(f.content)
                ],
                "dependencies": extract_dependencies(f.content),
            })

        return {
            "modules": modules,
            "by_type": by_type,
            "routes": list(dict.fromkeys(routes)),
            "entities": list(dict.fromkeys(entities)),
        }
