"""Command-line interface for todolist-client."""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from todolist_client.cli.auth import auth_app
from todolist_client.cli.tasks import tasks_app


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("msal").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


app = typer.Typer(
    name="todo",
    help="Todo list API client with claims challenge support.",
)
app.add_typer(tasks_app)
app.add_typer(auth_app)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Todo list API client with claims challenge support."""
    _setup_logging(verbose)


if __name__ == "__main__":
    app()
