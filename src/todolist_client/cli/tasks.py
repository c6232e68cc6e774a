"""CLI commands for the tasks collection."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import typer
from rich.console import Console

from todolist_client.api.models import ApiResult
from todolist_client.api.tasks import TasksClient
from todolist_client.client import open_tasks_client
from todolist_client.exceptions import AuthError, ConfigurationError

tasks_app = typer.Typer(name="tasks", help="Read and modify tasks.")
console = Console()


async def _call(operation: Callable[[TasksClient], Awaitable[ApiResult]]) -> ApiResult:
    async with open_tasks_client() as client:
        return await operation(client)


def _run(operation: Callable[[TasksClient], Awaitable[ApiResult]]) -> None:
    """Run an operation and print its result, exiting 1 on failure."""
    try:
        result = asyncio.run(_call(operation))
    except (AuthError, ConfigurationError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    if not result.ok:
        console.print(f"[red]Request failed: {result.error}[/red]")
        raise typer.Exit(1)

    if result.value is None:
        console.print("[green]Done[/green]")
    else:
        console.print_json(data=result.value)


def _task(description: str, owner: str | None) -> dict[str, Any]:
    task: dict[str, Any] = {"description": description}
    if owner:
        task["owner"] = owner
    return task


@tasks_app.command("list")
def list_tasks() -> None:
    """List all tasks."""
    _run(lambda client: client.list_tasks())


@tasks_app.command("get")
def get_task(task_id: str) -> None:
    """Show a single task."""
    _run(lambda client: client.get_task(task_id))


@tasks_app.command("create")
def create_task(
    description: str,
    owner: str | None = typer.Option(None, help="Task owner."),
) -> None:
    """Create a task."""
    _run(lambda client: client.create_task(_task(description, owner)))


@tasks_app.command("update")
def update_task(
    task_id: str,
    description: str,
    owner: str | None = typer.Option(None, help="Task owner."),
) -> None:
    """Replace a task's description."""
    task = _task(description, owner)
    task["id"] = int(task_id) if task_id.isdigit() else task_id
    _run(lambda client: client.update_task(task_id, task))


@tasks_app.command("delete")
def delete_task(task_id: str) -> None:
    """Delete a task."""
    _run(lambda client: client.delete_task(task_id))
