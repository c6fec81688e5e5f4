"""
Macro Resolver
Classification, storage rules and placeholder substitution for channel macros
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

# Storage keys may not contain "$" or "."
FULLWIDTH_DOLLAR = "\uff04"
FULLWIDTH_FULL_STOP = "\uff0e"

TOKEN_MARKER = ":token"
TOKENS_PLACEHOLDER = ":tokens"
NICK_PLACEHOLDER = ":nick"

# [addressee: | addressee,] !name [arguments]
TRIGGER_REGEX = re.compile(r"(?:(\S+)[:,] )?!(\S+)(?: (.+))?")


@dataclass
class MacroTable:
    """Macro table of a single channel."""

    channel: str
    simple_commands: Dict[str, str] = field(default_factory=dict)
    token_commands: Dict[str, str] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the table for the listing endpoint.

        Returns:
            JSON-compatible dict
        """
        return {
            "channel": self.channel,
            "simpleCommands": dict(self.simple_commands),
            "tokenCommands": dict(self.token_commands),
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class Trigger:
    """A parsed `[addressee: ]!name [arguments]` line."""

    name: str
    arguments: str = ""
    addressee: Optional[str] = None

    @classmethod
    def from_match(cls, match: "re.Match[str]") -> "Trigger":
        """Build a trigger from a TRIGGER_REGEX match."""
        addressee, name, arguments = match.groups()
        return cls(name=name, arguments=arguments or "", addressee=addressee)


def normalize_name(raw_name: str) -> str:
    """
    Normalize a user supplied macro name into a storage key.

    Args:
        raw_name: Name as typed in chat

    Returns:
        Key without "$" or "." characters, lowercased
    """
    return (
        raw_name.replace("$", FULLWIDTH_DOLLAR)
        .replace(".", FULLWIDTH_FULL_STOP)
        .lower()
    )


def classify(raw_body: str) -> bool:
    """
    Check whether a reply template is a token template.

    A plain substring test: any ":token" makes it one, even when the text
    was not meant as a placeholder.

    Args:
        raw_body: Reply template

    Returns:
        True for a token template, False for a simple template
    """
    return TOKEN_MARKER in raw_body


def define(table: MacroTable, raw_name: str, raw_body: str) -> str:
    """
    Store a macro, moving it out of the other mapping if needed.

    Args:
        table: Channel macro table
        raw_name: Macro name
        raw_body: Reply template

    Returns:
        Normalized macro name
    """
    name = normalize_name(raw_name)

    if classify(raw_body):
        table.token_commands[name] = raw_body
        table.simple_commands.pop(name, None)
    else:
        table.simple_commands[name] = raw_body
        table.token_commands.pop(name, None)

    return name


def forget(table: MacroTable, raw_name: str) -> bool:
    """
    Remove a macro from both mappings.

    Args:
        table: Channel macro table
        raw_name: Macro name

    Returns:
        True if the macro existed in either mapping
    """
    name = normalize_name(raw_name)

    removed_simple = table.simple_commands.pop(name, None) is not None
    removed_token = table.token_commands.pop(name, None) is not None

    return removed_simple or removed_token


def show(table: MacroTable, raw_name: str) -> List[str]:
    """
    Get the raw templates stored under a name.

    Args:
        table: Channel macro table
        raw_name: Macro name

    Returns:
        Simple template then token template, whichever exist.
        Empty when the macro is unknown.
    """
    name = normalize_name(raw_name)
    templates = []

    if name in table.simple_commands:
        templates.append(table.simple_commands[name])
    if name in table.token_commands:
        templates.append(table.token_commands[name])

    return templates


def render(template: str, argument_string: str, nick: str) -> str:
    """
    Substitute placeholders in a reply template.

    Args:
        template: Reply template
        argument_string: Everything after the macro name
        nick: Effective sender

    Returns:
        Rendered text
    """
    tokens = argument_string.split(" ")
    message = template.replace(TOKENS_PLACEHOLDER, "+".join(tokens))

    # Highest index first
    for index in range(len(tokens), 0, -1):
        message = message.replace(f"{TOKEN_MARKER}{index}", tokens[index - 1])

    return message.replace(NICK_PLACEHOLDER, nick)


def invoke(
    table: MacroTable,
    raw_name: str,
    argument_string: str,
    sender: str,
    addressee: Optional[str] = None,
) -> Optional[str]:
    """
    Resolve and render a `!name args` trigger.

    Token templates are only considered when arguments are present.

    Args:
        table: Channel macro table
        raw_name: Macro name
        argument_string: Arguments after the name ("" when none)
        sender: Author of the chat line
        addressee: Explicit `name:` prefix, replaces the sender for :nick

    Returns:
        Rendered text, or None when no macro applies
    """
    name = normalize_name(raw_name)

    template = None
    if argument_string and name in table.token_commands:
        template = table.token_commands[name]
    elif name in table.simple_commands:
        template = table.simple_commands[name]

    if template is None:
        return None

    return render(template, argument_string, addressee or sender)


def parse_trigger(line: str) -> Optional[Trigger]:
    """
    Find the first macro invocation in a chat line.

    Args:
        line: Chat line

    Returns:
        Trigger or None if the line has no `!name`
    """
    match = TRIGGER_REGEX.search(line)
    if not match:
        return None

    return Trigger.from_match(match)
