"""Help command listing the available commands."""

from argparse import ArgumentParser, RawDescriptionHelpFormatter
from typing import Sequence

from ..version import __version__


def execute(argv: Sequence[str] = None):
    """Print the usage of every command, or the version with `-v`."""
    from . import PROG, available_commands

    commands = [cmd for cmd in available_commands() if cmd["name"] != "help"]
    width = max(len(cmd["name"]) for cmd in commands)
    parser = ArgumentParser(
        prog=PROG,
        usage=f"{PROG} <command> [options]",
        formatter_class=RawDescriptionHelpFormatter,
        epilog="commands:\n"
        + "\n".join(f"  {cmd['name']:<{width}}  {cmd['summary']}" for cmd in commands)
        + f"\n\nRun '{PROG} <command> --help' for the options of a command.",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="store_true",
        help="print application version and exit",
    )
    args = parser.parse_args(argv)
    if args.version:
        print(__version__)
    else:
        parser.print_help()


def main():
    """Execute the main line."""
    if __name__ == "__main__":
        execute()


main()
