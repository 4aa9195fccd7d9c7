"""
CLI commands for sloth-comments.
"""

from slothcomments.cli.generate import generate_command
from slothcomments.cli.languages import list_languages_command

__all__ = [
    "generate_command",
    "list_languages_command",
]
