"""
Managers for the macro bot.
"""

from .channel_manager import ChannelManager, ChannelNotReadyError, ChannelSession, SessionState

__all__ = ["ChannelManager", "ChannelNotReadyError", "ChannelSession", "SessionState"]
