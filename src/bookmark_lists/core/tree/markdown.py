"""Render bookmark list subtrees as markdown."""

import io

from bookmark_lists.models.node import BookmarkList, Node


def render_list_as_markdown(
    bookmark_list: BookmarkList,
    *,
    max_depth: int | None = None,
    include_descriptions: bool = True,
) -> str:
    """Render a list and its descendants as indented markdown.

    Args:
        bookmark_list: A hydrated list, as returned by the repository.
        max_depth: Max levels below the list to include (None = unlimited).
        include_descriptions: Whether to include node descriptions.

    Returns:
        Markdown string with bullet-list hierarchy. Lists are bold,
        bookmarks are followed by their ``path:line``.
    """
    out = io.StringIO()
    out.write(f"# {bookmark_list.name}\n")
    if max_depth is not None and max_depth < 1:
        return out.getvalue()
    for child in bookmark_list.children:
        _write_node(out, child, 1, max_depth, include_descriptions)
    return out.getvalue()


def _write_node(
    out: io.StringIO,
    node: Node,
    level: int,
    max_depth: int | None,
    include_descriptions: bool,
) -> None:
    indent = "    " * (level - 1)

    if isinstance(node, BookmarkList):
        out.write(f"{indent}- **{node.name}**\n")
    else:
        where = f"{node.location.path}:{node.location.line}" if node.location else "(no location)"
        out.write(f"{indent}- {node.name or '(unnamed)'} `{where}`\n")

    if include_descriptions and node.description:
        for line in node.description.split("\n"):
            out.write(f"{indent}  > {line}\n")

    if not isinstance(node, BookmarkList) or not node.children:
        return

    # Truncation indicator when children are cut off by max_depth
    if max_depth is not None and level >= max_depth:
        count = len(node.children)
        noun = "child" if count == 1 else "children"
        out.write(f"{indent}    - ... ({count} more {noun}, id={node.id})\n")
        return

    for child in node.children:
        _write_node(out, child, level + 1, max_depth, include_descriptions)
