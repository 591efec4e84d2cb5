"""Default pipeline and orchestrator settings."""

import os

DEFAULTS = {
    "model": os.environ.get("FORGEFLOW_MODEL", "claude-sonnet-4-5-20250929"),
    "max_tokens": 8000,
    "fullstack_max_tokens": 32000,   # fullstack scopes need room for 30+ files
    "json_max_tokens": 4096,
    "temperature": 0.7,
    "json_temperature": 0.2,
    "retry_delay": 2,
    "max_concurrent_completions": 4,
    "enable_validation": True,
    "enable_optimization": True,
    "enable_quality_analysis": True,
    "quality_depth": "standard",
    "default_framework": "react",
    "llm_prompt_analysis": False,   # refine keyword analysis with a JSON completion call
    "security_level": "standard",
    "health_check_interval": 30,     # seconds
    # Reserved; no step or workflow is cancelled yet.
    "step_timeout": 300,
    "workflow_timeout": 3600,
}
