"""Command line entry points of the pong service."""

from importlib import import_module
from os import getenv
from types import ModuleType
from typing import Optional, Sequence

PROG = getenv("PONG_COMMAND_NAME", "awala-pong")

# Command name -> summary; each command lives in the module of the same name
COMMANDS = {
    "help": "Print available commands",
    "provision": "Create the identity key and the initial session key",
    "start": "Start the CloudEvents pong server",
    "pohttp": "Start the PoHTTP ingress server",
    "worker": "Start the ping queue worker",
}


def available_commands():
    """List the commands with their summaries."""
    return [{"name": name, "summary": summary} for name, summary in COMMANDS.items()]


def load_command(command: str) -> Optional[ModuleType]:
    """Import the module of a command, or return None for unknown commands."""
    if command not in COMMANDS:
        return None
    return import_module(f"{__package__}.{command}")


def run_command(command: str, argv: Sequence[str] = None):
    """Run a command, showing the help for unknown ones."""
    module = load_command(command) or load_command("help")
    module.execute(argv)
