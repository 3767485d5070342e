"""
CLI Commands.

Organized by resource.
"""

from pceclient.cli.commands.label_groups import app as label_groups_app
from pceclient.cli.commands.system import app as system_app

__all__ = [
    "label_groups_app",
    "system_app",
]
