"""
Parsing Context

Responsibilities:
- Reads the Makefile and inlines includes
- Resolves variables and caller overrides
- Collects phony declarations and rewrites the '%.' placeholder
- Builds the target dependency graph

Owns: Makefile text, variable table, phony set, target graph
Never: Runs target commands or inspects target files
"""

from makeshift.contexts.parsing.makefile import HelpEntry, Makefile, help_entries, parse_makefile

__all__ = ["HelpEntry", "Makefile", "help_entries", "parse_makefile"]
