"""
Evolution framework -- progressive quality gates for AI-assisted projects.

A project climbs levels 0..5. Each level declares the checks a project
must satisfy before it may advance; the current level is persisted in
a small JSON state file at the project root.
"""

__version__ = "4.0.0"
