"""Dialogue layer: command registries, built-in menu and the router."""

from spotter.dialogue.commands import CallbackRegistry, CommandRegistry
from spotter.dialogue.menu import build_callback_registry, build_command_registry
from spotter.dialogue.router import DialogueRouter

__all__ = [
    "CallbackRegistry",
    "CommandRegistry",
    "DialogueRouter",
    "build_callback_registry",
    "build_command_registry",
]
