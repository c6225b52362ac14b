"""ScrumFlow inbox TUI package."""

from .app import ScrumflowApp, main
from .utils import set_terminal_title

__all__ = ["ScrumflowApp", "main", "set_terminal_title"]
