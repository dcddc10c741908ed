"""
Command-line interface for novelbar.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from . import __version__
from .config import ConfigManager, bind_reader
from .models import ChapterChoice
from .parser import ChapterParser
from .reader import NovelReader
from .statusbar import ConsoleStatusSink, StatusBar, format_status

console = Console()

READ_HELP = (
    "[dim]Enter/n next · p previous · c chapters · +/- page size · "
    "h hide · s show · q quit[/dim]"
)


def setup_logging(verbose: bool) -> None:
    """Route log records through rich; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def open_reader(
    filepath: Path,
    manager: ConfigManager,
    pattern: Optional[str] = None,
    page_size: Optional[int] = None,
) -> NovelReader:
    """
    Create a reader from config, overridden by command-line options.

    Raises:
        click.ClickException: If the file cannot be read
    """
    config = manager.config
    reader = NovelReader(
        page_size=page_size or config.page_size,
        heading_pattern=pattern or config.heading_pattern,
    )
    if not reader.load_file(filepath):
        raise click.ClickException(reader.message or f"Could not read {filepath}")
    if reader.message:
        console.print(f"[yellow]Warning:[/yellow] {escape(reader.message)}")
    return reader


def display_chapters_table(choices: list[ChapterChoice], title: str = "Chapters"):
    """Display chapters in a table format."""
    table = Table(title=f"📚 {title}", show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=6)
    table.add_column("Chapter", style="cyan")
    table.add_column("Page", justify="right", style="green")
    table.add_column("Progress", justify="right", style="yellow")

    for choice in choices:
        table.add_row(
            str(choice.index + 1),
            escape(choice.name),
            str(choice.page),
            f"{choice.progress_percent:.0f}%",
        )

    console.print(table)


def interactive_chapter_selection(reader: NovelReader) -> Optional[int]:
    """
    Ask the user for a chapter number.

    Returns:
        0-based chapter index, or None if the selection was cancelled
    """
    choices = reader.chapter_choices()
    display_chapters_table(choices)

    while True:
        selection = Prompt.ask(
            "[cyan]Jump to chapter[/cyan] (empty to cancel)",
            default="",
            show_default=False,
            console=console,
        ).strip()
        if not selection:
            return None
        try:
            index = int(selection) - 1
        except ValueError:
            console.print(f"[red]Invalid chapter number: {selection}[/red]")
            continue
        if 0 <= index < len(choices):
            return index
        console.print(f"[red]Chapter must be between 1 and {len(choices)}[/red]")


@click.group()
@click.version_option(version=__version__, prog_name="novelbar")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.novelbar/config.json)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[Path], verbose: bool):
    """
    novelbar - Read plain-text novels one status line at a time.

    Splits a text file into chapters and pages through it a fixed number
    of characters at a time.
    """
    setup_logging(verbose)
    ctx.obj = ConfigManager(config_file)


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, path_type=Path))
@click.option("--pattern", "-r", type=str, help="Chapter heading regex")
@click.option("--page-size", "-n", type=click.IntRange(min=1), help="Page size")
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Display format for chapters",
)
@click.pass_obj
def chapters(
    manager: ConfigManager,
    filepath: Path,
    pattern: Optional[str],
    page_size: Optional[int],
    format: str,
):
    """List the chapters detected in a text file."""
    try:
        reader = open_reader(filepath, manager, pattern, page_size)
        choices = reader.chapter_choices()

        if format == "json":
            data = [
                {
                    "index": choice.index,
                    "name": choice.name,
                    "page": choice.page,
                    "progress": round(choice.progress_percent, 2),
                }
                for choice in choices
            ]
            print(json.dumps(data, indent=2, ensure_ascii=False))
            return

        console.print(
            f"\n[bold]Found {len(choices)} chapter(s) in {filepath.name}[/bold]\n"
        )
        display_chapters_table(choices)

    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, path_type=Path))
@click.option("--position", "-p", type=click.IntRange(min=0), help="Character offset")
@click.option(
    "--chapter", "-c", type=click.IntRange(min=1), help="Chapter number (1-based)"
)
@click.option("--pattern", "-r", type=str, help="Chapter heading regex")
@click.option("--page-size", "-n", type=click.IntRange(min=1), help="Page size")
@click.pass_obj
def peek(
    manager: ConfigManager,
    filepath: Path,
    position: Optional[int],
    chapter: Optional[int],
    pattern: Optional[str],
    page_size: Optional[int],
):
    """Print the status line for one position in a text file."""
    if position is not None and chapter is not None:
        raise click.UsageError("--position and --chapter are mutually exclusive")

    try:
        reader = open_reader(filepath, manager, pattern, page_size)
        reader.show()
        if chapter is not None:
            reader.jump_to_chapter(chapter - 1)
        elif position is not None:
            reader.cursor.position = position

        status = format_status(reader)
        if status is None:
            return
        # Write to stdout (bypass rich console)
        print(status.text)
        print(status.tooltip)

    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


@cli.command()
@click.argument(
    "filepath", required=False, type=click.Path(exists=True, path_type=Path)
)
@click.pass_obj
def read(manager: ConfigManager, filepath: Optional[Path]):
    """
    Read a text file interactively, one line at a time.

    Without FILEPATH the last opened file is read again.
    """
    if filepath is None:
        last = manager.config.file_path
        if not last:
            raise click.UsageError("No file given and no previously opened file")
        filepath = Path(last)

    try:
        reader = open_reader(filepath, manager)
        manager.update(file_path=str(filepath.resolve()))
        bind_reader(manager, reader)

        bar = StatusBar(reader, ConsoleStatusSink(console))
        console.print(READ_HELP)
        reader.show()
        bar.refresh()

        while True:
            key = Prompt.ask(
                ">", default="n", show_default=False, console=console
            ).strip().lower()
            if key == "q":
                break
            if key in ("", "n"):
                reader.advance()
            elif key == "p":
                reader.retreat()
            elif key == "c":
                index = interactive_chapter_selection(reader)
                if index is not None:
                    reader.jump_to_chapter(index)
            elif key in ("+", "-"):
                step = 1 if key == "+" else -1
                manager.update(page_size=max(1, reader.page_size + step))
            elif key == "h":
                reader.hide()
            elif key == "s":
                reader.show()
            else:
                console.print(READ_HELP)
                continue
            bar.refresh()

    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


@cli.group("config")
def config_group():
    """Show or change reader settings."""
    pass


@config_group.command("show")
@click.pass_obj
def config_show(manager: ConfigManager):
    """Display the current settings."""
    config = manager.config
    table = Table(
        title=f"⚙ {manager.config_file}", show_header=True, header_style="bold magenta"
    )
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("heading_pattern", config.heading_pattern)
    table.add_row("page_size", str(config.page_size))
    table.add_row("file_path", config.file_path or "-")
    console.print(table)


@config_group.command("set")
@click.argument("key", type=click.Choice(["heading_pattern", "page_size"]))
@click.argument("value", type=str)
@click.pass_obj
def config_set(manager: ConfigManager, key: str, value: str):
    """Change a setting."""
    if key == "page_size":
        try:
            page_size = int(value)
        except ValueError:
            page_size = 0
        if page_size <= 0:
            raise click.BadParameter(
                f"must be a positive integer, got {value!r}", param_hint="VALUE"
            )
        changed = manager.update(page_size=page_size)
    else:
        error = ChapterParser(value).error
        if error:
            console.print(
                f"[yellow]Warning:[/yellow] {escape(error)}; "
                "documents will be read as a single chapter"
            )
        changed = manager.update(heading_pattern=value)

    if changed:
        console.print(f"[green]✓[/green] {key} updated")
    else:
        console.print(f"[dim]{key} unchanged[/dim]")


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
