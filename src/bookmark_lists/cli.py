"""CLI for bookmark lists (mark, organize, navigate)."""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger

from bookmark_lists.config import DATABASE_FILENAME, load_navigation_config, resolve_data_directory
from bookmark_lists.core.repository.sqlite_repo import SqliteRepository
from bookmark_lists.core.service import BookmarkService
from bookmark_lists.errors import BookmarksError
from bookmark_lists.logging_config import configure_logging
from bookmark_lists.models.node import Bookmark, BookmarkList, Location, Node

app = typer.Typer(help="Bookmark lists: mark code locations, group them, walk through them.")

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Bookmark database directory"),
]
ColOption = Annotated[int, typer.Option("--col", "-c", min=0, help="Cursor column")]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


class _CommandLineLocation:
    """Location provider fed from --file/--line/--col."""

    def __init__(self, location: Location | None) -> None:
        self._location = location

    def current_location(self) -> Location:
        if self._location is None:
            msg = "This command needs --file and --line"
            raise typer.BadParameter(msg)
        return self._location


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


@contextmanager
def _open_service(
    data_dir: Path | None, location: Location | None = None
) -> Iterator[BookmarkService]:
    """Open the database and wrap it in a service; domain errors exit with 1."""
    dst = data_dir or resolve_data_directory()
    repo = SqliteRepository.open(dst / DATABASE_FILENAME)
    try:
        yield BookmarkService(
            repo,
            locations=_CommandLineLocation(location),
            config=load_navigation_config(),
        )
    except BookmarksError as e:
        logger.error("{}", e.message)
        raise typer.Exit(1) from e
    finally:
        repo.close()


def _node_to_dict(node: Node) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": node.id,
        "type": node.type,
        "name": node.name,
        "order": node.order,
    }
    if isinstance(node, BookmarkList):
        data["children"] = [_node_to_dict(c) for c in node.children]
    else:
        loc = node.location
        data["location"] = (
            {"path": loc.path, "line": loc.line, "col": loc.col} if loc is not None else None
        )
        data["visited_at"] = node.visited_at
    return data


def _describe(bookmark: Bookmark) -> str:
    where = f"{bookmark.location.path}:{bookmark.location.line}" if bookmark.location else "?"
    return f"[{bookmark.id}] {bookmark.name or '(unnamed)'}  {where}"


@app.command()
def mark(
    name: str = typer.Argument(..., help="Bookmark name"),
    file: str = typer.Option(..., "--file", "-f", help="File path of the cursor"),
    line: int = typer.Option(..., "--line", "-l", min=1, help="Cursor line (1-based)"),
    col: ColOption = 0,
    list_id: Annotated[
        int | None,
        typer.Option("--list", help="Parent list id (default: active list)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Bookmark a location, or rename the bookmark already there."""
    location = Location(path=file, line=line, col=col)
    with _open_service(data_dir, location) as service:
        bookmark = service.toggle_mark(name, location, list_id)
        typer.echo(_describe(bookmark))


@app.command()
def unmark(
    file: str = typer.Option(..., "--file", "-f", help="File path of the cursor"),
    line: int = typer.Option(..., "--line", "-l", min=1, help="Cursor line (1-based)"),
    data_dir: DataDirOption = None,
) -> None:
    """Remove the bookmark at a location."""
    location = Location(path=file, line=line)
    with _open_service(data_dir, location) as service:
        if service.find_bookmark_by_location(location) is None:
            typer.echo(f"No bookmark at {file}:{line}.")
            raise typer.Exit(1)
        removed = service.toggle_mark("", location)
        typer.echo(f"Removed {_describe(removed)}")


@app.command(name="new-list")
def new_list_cmd(
    name: str = typer.Argument(..., help="List name"),
    parent: Annotated[
        int | None,
        typer.Option("--parent", "-p", help="Parent list id (default: root)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Create a list and make it active."""
    with _open_service(data_dir) as service:
        created = service.create_list(name, parent)
        typer.echo(f"Created list [{created.id}] {created.name} (now active)")


@app.command()
def use(
    list_id: int = typer.Argument(..., help="List id to activate"),
    data_dir: DataDirOption = None,
) -> None:
    """Set the active list."""
    with _open_service(data_dir) as service:
        service.set_active_list(list_id)
        typer.echo(f"Active list is now {list_id}")


@app.command()
def rename(
    node_id: int = typer.Argument(..., help="Bookmark or list id"),
    name: str = typer.Argument(..., help="New name"),
    data_dir: DataDirOption = None,
) -> None:
    """Rename a bookmark or list."""
    with _open_service(data_dir) as service:
        node = service.rename_node(node_id, name)
        typer.echo(f"Renamed [{node.id}] to {node.name}")


@app.command()
def delete(
    node_id: int = typer.Argument(..., help="Bookmark or list id"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete a bookmark, or a list with everything in it."""
    with _open_service(data_dir) as service:
        service.delete_node(node_id)
        typer.echo(f"Deleted {node_id}")


@app.command()
def move(
    node_id: int = typer.Argument(..., help="Bookmark or list id"),
    list_id: int = typer.Argument(..., help="Destination list id"),
    data_dir: DataDirOption = None,
) -> None:
    """Move a node to the end of another list."""
    with _open_service(data_dir) as service:
        node = service.move_node_to_list(node_id, list_id)
        typer.echo(f"Moved [{node.id}] {node.name} to list {list_id}")


@app.command()
def copy(
    node_id: int = typer.Argument(..., help="Bookmark or list id"),
    list_id: int = typer.Argument(..., help="Destination list id"),
    data_dir: DataDirOption = None,
) -> None:
    """Copy a node to the end of another list."""
    with _open_service(data_dir) as service:
        node = service.copy_node_to_list(node_id, list_id)
        typer.echo(f"Copied to [{node.id}] {node.name} in list {list_id}")


@app.command()
def swap(
    first_id: int = typer.Argument(..., help="First node id"),
    second_id: int = typer.Argument(..., help="Second node id (same list)"),
    data_dir: DataDirOption = None,
) -> None:
    """Swap the positions of two nodes in the same list."""
    with _open_service(data_dir) as service:
        first = service.find_node(first_id)
        second = service.find_node(second_id)
        if first is None or second is None:
            typer.echo("Node not found.")
            raise typer.Exit(1)
        service.switch_position(first, second)
        typer.echo(f"Swapped {first_id} and {second_id}")


def _navigate(
    *,
    forward: bool,
    file: str,
    line: int,
    by: str,
    output_json: bool,
    data_dir: Path | None,
) -> None:
    if by not in ("line", "order"):
        msg = "--by must be 'line' or 'order'"
        raise typer.BadParameter(msg)

    location = Location(path=file, line=line)
    with _open_service(data_dir, location) as service:

        def jump(bookmark: Bookmark) -> None:
            visited = service.mark_visited(bookmark.id)
            if output_json:
                typer.echo(json.dumps(_node_to_dict(visited), indent=2))
            else:
                typer.echo(_describe(visited))

        if by == "line":
            step = (
                service.find_next_bookmark_line_order
                if forward
                else service.find_prev_bookmark_line_order
            )
        else:
            step = (
                service.find_next_bookmark_id_order
                if forward
                else service.find_prev_bookmark_id_order
            )
        step(jump)


@app.command(name="next")
def next_cmd(
    file: str = typer.Option(..., "--file", "-f", help="File path of the cursor"),
    line: int = typer.Option(..., "--line", "-l", min=1, help="Cursor line (1-based)"),
    by: str = typer.Option("line", "--by", "-b", help="Ordering: 'line' or 'order'"),
    output_json: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """Print the next bookmark of the active list."""
    _navigate(
        forward=True, file=file, line=line, by=by, output_json=output_json, data_dir=data_dir
    )


@app.command(name="prev")
def prev_cmd(
    file: str = typer.Option(..., "--file", "-f", help="File path of the cursor"),
    line: int = typer.Option(..., "--line", "-l", min=1, help="Cursor line (1-based)"),
    by: str = typer.Option("line", "--by", "-b", help="Ordering: 'line' or 'order'"),
    output_json: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """Print the previous bookmark of the active list."""
    _navigate(
        forward=False, file=file, line=line, by=by, output_json=output_json, data_dir=data_dir
    )


@app.command()
def show(
    list_id: Annotated[
        int | None,
        typer.Argument(help="List id (default: active list)"),
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    output_json: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """Show a list and its contents as markdown."""
    with _open_service(data_dir) as service:
        if output_json:
            target = service.get_active_list() if list_id is None else service.find_node(list_id)
            if target is None:
                typer.echo(f"List '{list_id}' not found.")
                raise typer.Exit(1)
            typer.echo(json.dumps(_node_to_dict(target), indent=2))
        else:
            typer.echo(service.export_list_as_markdown(list_id, max_depth=max_depth), nl=False)
