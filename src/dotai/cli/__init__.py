"""
CLI commands for dotai.

This package contains all Click command definitions.
"""

from dotai.cli.assistants import assistants_cmd, bridge_cmd, prefs_cmd
from dotai.cli.catalog import index_cmd, lint_cmd, list_cmd, search_cmd, show_cmd
from dotai.cli.install import (
    install_cmd,
    installed_cmd,
    outdated_cmd,
    uninstall_cmd,
)

__all__ = [
    'assistants_cmd',
    'bridge_cmd',
    'prefs_cmd',
    'index_cmd',
    'lint_cmd',
    'list_cmd',
    'search_cmd',
    'show_cmd',
    'install_cmd',
    'installed_cmd',
    'outdated_cmd',
    'uninstall_cmd',
]
