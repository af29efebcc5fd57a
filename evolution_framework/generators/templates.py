"""
Document templates for the level-defining artifacts.

Filled with str.format; placeholders are {name}, {category}, {role}, {date}.
"""

CLAUDE_MD_TEMPLATE = """# {name}

> Project context for AI coding assistants. Generated {date}.

## Overview
Describe what {name} does and who it is for.

## Tech Stack
- Language:
- Frameworks:
- Tooling:

## Conventions
- Code style and lint rules the assistant must follow
- Naming and file layout

## Commands
- Build:
- Test:
- Lint:

## Boundaries
- Files and directories the assistant must not modify
"""

SKILL_MD_TEMPLATE = """# Skill: {name}

- **Category**: {category}
- **Created**: {date}

## Purpose
What this skill lets the assistant do well.

## Knowledge
Domain rules, patterns, and references the assistant should apply.

## Procedure
1. Step-by-step approach for tasks in this skill.

## Quality Bar
How to tell the output is correct.
"""

AGENT_MD_TEMPLATE = """# Agent: {name}

- **Role**: {role}
- **Created**: {date}

## Responsibilities
What the {name} agent owns.

## Inputs
What it receives before starting.

## Outputs
What it hands back, and in which format.

## Review Checklist
- [ ] Changes match the requested scope
- [ ] Tests and lint pass
- [ ] Documentation updated
"""
