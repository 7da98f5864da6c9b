"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from genctl.core.theme import get_rich_theme

if TYPE_CHECKING:
    from genctl.models.generation import Generation, Package
    from genctl.models.store import StorePath


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
_THEME = get_rich_theme()
console = Console(theme=_THEME, color_system=_detect_color_system())
err_console = Console(theme=_THEME, stderr=True, color_system=_detect_color_system())


def _table(title: str) -> Table:
    return Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )


def create_generation_table(title: str = "Generations") -> Table:
    """Create a pre-configured table for displaying generations.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for generation display.
    """
    table = _table(title)
    # Status column: marker icons only, no header text
    table.add_column("", width=3, justify="center")
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("Date", style="muted", no_wrap=True)
    table.add_column("Version", style="text")
    table.add_column("Kernel", style="muted")
    table.add_column("Pkgs", style="info", justify="right")
    table.add_column("Size", style="info", justify="right")
    return table


def format_generation_row(gen: Generation) -> tuple[str, str, str, str, str, str, str]:
    """Format a generation as a table row with markers.

    Current generations get a filled circle, pinned ones a star and
    bootloader entries a "B".

    Args:
        gen: The generation to format.

    Returns:
        Tuple of (markers, id, date, version, kernel, packages, size).
    """
    markers = ""
    if gen.is_current:
        markers += "[current]●[/]"
    if gen.is_pinned:
        markers += "[pinned]★[/]"
    if gen.in_bootloader:
        markers += "[boot]B[/]"

    gen_id = f"[current]{gen.id}[/]" if gen.is_current else str(gen.id)
    return (
        markers,
        gen_id,
        gen.formatted_date,
        gen.version or "-",
        gen.kernel_version or "-",
        str(gen.package_count) if gen.package_count else "-",
        gen.size_human,
    )


def create_package_table(title: str = "Packages") -> Table:
    """Create a pre-configured table for displaying generation packages.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for package display.
    """
    table = _table(title)
    table.add_column("Package", style="text", no_wrap=True)
    table.add_column("Version", style="muted")
    table.add_column("Size", style="info", justify="right")
    return table


def format_package_row(pkg: Package) -> tuple[str, str, str]:
    """Format a package as a table row.

    Args:
        pkg: The package to format.

    Returns:
        Tuple of (name, version, size).
    """
    size = "-" if pkg.size == 0 else pkg.size_human
    return (pkg.name, pkg.version or "-", size)


def create_store_table(title: str = "Store Paths") -> Table:
    """Create a pre-configured table for displaying store paths.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for store path display.
    """
    table = _table(title)
    table.add_column("", width=2, justify="center")
    table.add_column("Name", no_wrap=True, overflow="ellipsis")
    table.add_column("Size", style="info", justify="right")
    return table


def format_store_row(path: StorePath, has_sizes: bool = True) -> tuple[str, str, str]:
    """Format a store path as a table row.

    Dead paths are marked with an empty circle in the dead color, live
    paths with a filled circle.

    Args:
        path: The store path to format.
        has_sizes: Whether size data is meaningful.

    Returns:
        Tuple of (icon, name, size) with Rich markup.
    """
    if path.is_dead:
        icon = "[dead]○[/]"
        name = f"[dead]{path.name}[/]"
    else:
        icon = "[live]●[/]"
        name = f"[text]{path.name}[/]"
    size = path.size_human if has_sizes else "-"
    return (icon, name, size)


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
