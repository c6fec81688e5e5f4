"""
Command system for the macro bot.
"""

from .command_registry import CommandRegistry, Command, CommandDefinition
from .macros import (
    MacroTable,
    Trigger,
    classify,
    define,
    forget,
    invoke,
    normalize_name,
    parse_trigger,
    render,
    show,
)

__all__ = [
    "CommandRegistry",
    "Command",
    "CommandDefinition",
    "MacroTable",
    "Trigger",
    "classify",
    "define",
    "forget",
    "invoke",
    "normalize_name",
    "parse_trigger",
    "render",
    "show",
]
