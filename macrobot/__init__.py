"""
Channel command macros for a Discord bot.
"""

__version__ = "1.0.0"
__description__ = "Per-channel !command macros with token substitution"

__all__ = ["__version__"]
