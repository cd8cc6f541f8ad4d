"""Formatters for trackview output.

Converts the node trees and file comparisons built by the CLI commands
to text (rich tree), markdown (Jinja2 templates) or JSON.
"""

import io
import json
import shutil
from typing import List

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from ..models import FilesComparison
from .output import OutputFormat
from .templates import render_template

NODE_STYLES = {
    "tracking-status": "bold",
    "tracking-status-files": "cyan",
    "date-marker": "dim italic",
    "load-more": "yellow",
}


def _node_text(node: dict) -> str:
    text = escape(node["label"])
    style = NODE_STYLES.get(node["type"])
    if style:
        text = f"[{style}]{text}[/{style}]"
    if node.get("description"):
        text += f" [bright_black]{escape(node['description'])}[/bright_black]"
    return text


def _add_children(tree: Tree, node: dict) -> None:
    for child in node["children"]:
        _add_children(tree.add(_node_text(child)), child)


def tree_to_text(branch: str, nodes: List[dict], color: bool = False) -> str:
    buf = io.StringIO()
    console = Console(
        file=buf,
        force_terminal=color,
        no_color=not color,
        width=shutil.get_terminal_size((100, 20)).columns,
        highlight=False,
    )
    root = Tree(f"[bold]{escape(branch)}[/bold]")
    for node in nodes:
        _add_children(root.add(_node_text(node)), node)
    console.print(root)
    return buf.getvalue()


def format_tree(branch: str, nodes: List[dict], format: str, color: bool = False) -> str:
    if format == OutputFormat.JSON.value:
        return json.dumps({"branch": branch, "nodes": nodes}, indent=2) + "\n"
    if format == OutputFormat.MARKDOWN.value:
        return render_template("markdown", "tree", branch=branch, nodes=nodes)
    return tree_to_text(branch, nodes, color=color)


def format_comparison(comparison: FilesComparison, format: str) -> str:
    if format == OutputFormat.JSON.value:
        return json.dumps(comparison.to_dict(), indent=2) + "\n"
    return render_template(format, "comparison", comparison=comparison)
