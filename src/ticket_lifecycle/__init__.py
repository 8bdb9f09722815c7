"""
Ticket Lifecycle - configuration-defined ticket state machines.

Usage:
    ticket-lifecycle lifecycle list
    ticket-lifecycle lifecycle show <name>
    ticket-lifecycle lifecycle check-right <name> <from> <to>
"""

import logging

import typer

from ticket_lifecycle.cli.commands import register_commands

__version__ = "0.1.0"

app = typer.Typer(
    name="ticket-lifecycle",
    help="Manage ticket lifecycles: statuses, transitions, rights and actions",
    add_completion=False,
)


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


register_commands(app)


def main():
    app()


if __name__ == "__main__":
    main()
