"""
dotai - AI assistant configuration scaffolder.

Installs skills, agents, commands, rules and prompts into a canonical
.ai/ directory and points every AI assistant at it.
"""

__version__ = "0.3.0"
