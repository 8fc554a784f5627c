"""
makeshift - Make-like build automation

Parses a declarative Makefile and runs target commands in dependency order,
re-running only targets that are missing, phony, or older than a dependency.

Architecture:
- Parsing Context: preprocessing, variable resolution, phony extraction, graph building
- Execution Context: topological ordering, staleness checks, command execution
"""

__version__ = "0.1.0"
