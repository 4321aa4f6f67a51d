"""CLI command modules.

Commands:
- install: Install or upgrade a landscape from a landscape file
- status: Show the persisted state of a landscape
- versions: List the supported version bands
- resolve: Show which version band installs a given version
"""

from .landscape import install, status
from .registry import resolve, versions

__all__ = [
    "install",
    "status",
    "resolve",
    "versions",
]
