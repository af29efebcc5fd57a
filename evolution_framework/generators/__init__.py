from .documents import (
    GeneratedDocument,
    generate_agent_md,
    generate_claude_md,
    generate_skill_md,
)

__all__ = [
    "GeneratedDocument",
    "generate_agent_md",
    "generate_claude_md",
    "generate_skill_md",
]
