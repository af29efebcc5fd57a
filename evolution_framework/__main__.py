"""
Allow running the CLI as a module.

Usage:
    python -m evolution_framework status
"""

import sys

from evolution_framework.main import main

if __name__ == "__main__":
    sys.exit(main())
