"""
Sigil Console Interface
========================

Rich-powered console facade shared by every Sigil front end.  Wraps
:class:`rich.console.Console` with a fixed theme and helpers for section
rules, severity-coloured messages and tables.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

_SIGIL_THEME = Theme(
    {
        "sigil.title": "bold bright_cyan",
        "sigil.section": "bold bright_magenta",
        "sigil.success": "bold green",
        "sigil.warning": "bold yellow",
        "sigil.error": "bold red",
        "sigil.info": "bold bright_blue",
        "sigil.dim": "dim white",
        "sigil.highlight": "bold bright_white",
    }
)


class SigilConsole:
    """Unified console interface for Sigil output.

    Usage::

        con = SigilConsole()
        con.section("Program Headers")
        con.success("Image parsed")
    """

    def __init__(
        self,
        *,
        quiet: bool = False,
        record: bool = False,
        width: int | None = None,
    ) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (library / test mode).
            record: Keep a record of output for :meth:`export_text`.
            width:  Fixed console width; ``None`` autodetects.
        """
        self._console = Console(
            theme=_SIGIL_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
            width=width,
        )

    @property
    def rich(self) -> Console:
        """The underlying Rich console."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Headings
    # ------------------------------------------------------------------ #

    def title(self, text: str, subtitle: str = "") -> None:
        self._console.print(f"[sigil.title]{escape(text)}[/sigil.title]")
        if subtitle:
            self._console.print(f"[sigil.dim]{escape(subtitle)}[/sigil.dim]")
        self._console.print()

    def section(self, title: str) -> None:
        """Print a section rule."""
        self._console.rule(f"  {title}  ", style="sigil.section", characters="─")
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Messages
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(f"[sigil.success][✔] SUCCESS:[/sigil.success] {escape(message)}")

    def warning(self, message: str) -> None:
        self._console.print(f"[sigil.warning][⚠] WARNING:[/sigil.warning] {escape(message)}")

    def error(self, message: str) -> None:
        self._console.print(f"[sigil.error][✘] ERROR:[/sigil.error] {escape(message)}")

    def info(self, message: str) -> None:
        self._console.print(f"[sigil.info][ℹ] INFO:[/sigil.info] {escape(message)}")

    # ------------------------------------------------------------------ #
    #  Tables
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
        justify: Sequence[str] | None = None,
    ) -> None:
        """Render a styled table.

        Args:
            title:   Table title.
            columns: Column header labels.
            rows:    Row tuples; each cell is stringified and escaped.
            caption: Optional footer caption.
            styles:  Optional per-column Rich styles.
            justify: Optional per-column justification (``left``/``right``).
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=False,
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            just = justify[idx] if justify and idx < len(justify) else "left"
            tbl.add_column(col_name, style=style, justify=just)  # type: ignore[arg-type]

        for row in rows:
            tbl.add_row(*(escape(str(cell)) for cell in row))

        self._console.print(tbl)

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._console.print()

    def divider(self, style: str = "dim") -> None:
        self._console.rule(style=style)

    def export_text(self) -> str:
        """Recorded output as plain text (requires ``record=True``)."""
        return self._console.export_text()
