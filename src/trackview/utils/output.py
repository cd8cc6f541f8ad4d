"""Output format utilities for trackview CLI commands.

This module provides a unified way to handle output formats across commands.
"""

import io
import shutil
import sys
from enum import Enum
from typing import Callable
import click
from rich.console import Console
from rich.markdown import Markdown


class OutputFormat(str, Enum):
    """Supported output formats for CLI commands."""

    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"


def format_option(default: OutputFormat = OutputFormat.TEXT) -> Callable:
    """Create a Click option decorator for output format selection.

    Provides:
    - --format with choices: text, markdown, json
    - --md / --markdown aliases for markdown format
    - --json alias for json format

    Example:
        @click.command()
        @format_option()
        def my_command(format: str):
            ...
    """

    def decorator(func: Callable) -> Callable:
        func = click.option(
            "--format",
            "format",
            type=click.Choice([f.value for f in OutputFormat]),
            default=default.value,
            help=f"Output format (default: {default.value}).",
            show_default=False,
        )(func)

        def set_markdown(ctx, param, value):
            if value:
                ctx.params["format"] = OutputFormat.MARKDOWN.value
            return value

        func = click.option(
            "--md",
            "--markdown",
            "markdown_flag",
            is_flag=True,
            is_eager=True,
            expose_value=False,
            callback=set_markdown,
            help="Output in markdown format (alias for --format markdown).",
        )(func)

        def set_json(ctx, param, value):
            if value:
                ctx.params["format"] = OutputFormat.JSON.value
            return value

        func = click.option(
            "--json",
            "json_flag",
            is_flag=True,
            is_eager=True,
            expose_value=False,
            callback=set_json,
            help="Output in JSON format (alias for --format json).",
        )(func)

        return func

    return decorator


def print_or_page(text: str, format: str = OutputFormat.TEXT.value) -> None:
    """Print text to stdout, using a pager if it doesn't fit the terminal."""
    if not sys.stdout.isatty():
        click.echo(text, nl=False)
        return

    if format == OutputFormat.MARKDOWN.value:
        text = get_rich_markdown(text)

    term_height = shutil.get_terminal_size((80, 20)).lines
    if text.count("\n") + 4 <= term_height:
        click.echo(text, nl=False)
        return

    click.echo_via_pager(text)


def get_rich_markdown(text: str) -> str:
    """Render markdown for the terminal."""
    buf = io.StringIO()
    console = Console(
        file=buf,
        force_terminal=True,
        width=shutil.get_terminal_size((80, 20)).columns,
    )
    console.print(Markdown(text, justify="left"))
    return buf.getvalue()
