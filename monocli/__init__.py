"""
monocli: Script runner for multi-module monorepos

A monorepo is anchored by a root document (work.toml); every folder holding
a module document (module.toml) is a module that can carry named scripts.

Distribution: Available as both Python library and CLI
"""

# Replaced by the release pipeline; local checkouts report "dev".
__version__ = "dev"
__all__ = [
    "__version__",
]
