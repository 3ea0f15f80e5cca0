"""Run a command: `python -m awala_pong <command> [options]`."""

import sys
from typing import Sequence


def run(argv: Sequence[str]):
    """Split the command name off `argv` and run the command."""
    from .commands import run_command

    args = list(argv[1:])
    command = args.pop(0) if args and not args[0].startswith("-") else None
    run_command(command, args)


def main(argv: Sequence[str]):
    """Execute the main line."""
    if __name__ == "__main__":
        run(argv)


main(sys.argv)
