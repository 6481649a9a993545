"""Core package exposing the command coordinator, event bus and settings."""

from . import config
from .core import CommandResult, Core, UnknownCommandError
from .events import EventBus, event_bus

__all__ = ["Core", "CommandResult", "UnknownCommandError", "EventBus", "event_bus", "config"]
