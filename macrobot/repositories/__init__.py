"""
Database repositories for the macro bot.
"""

from .macro_repository import MacroRepository, MacroStoreError

__all__ = [
    "MacroRepository",
    "MacroStoreError",
]
