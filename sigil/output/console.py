"""
Sigil Console Output
=====================

Rich-powered terminal display for Sigil inspection results: a file header
panel followed by section, program header and load plan tables, laid out
the way ``readelf -hSl`` groups them.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from shared.console import SigilConsole

from sigil.core.models import (
    HeaderSummary,
    ImageSummary,
    LoadMapping,
    SectionSummary,
    SegmentSummary,
)


# ---------------------------------------------------------------------------
# Colour helpers
# ---------------------------------------------------------------------------

_SEGMENT_TYPE_COLOURS: dict[str, str] = {
    "LOAD": "bright_green",
    "DYNAMIC": "bright_magenta",
    "INTERP": "bright_cyan",
    "TLS": "bright_yellow",
    "GNU_STACK": "dim",
}


def _hex(value: int, width: int) -> str:
    return f"0x{value:0{width}x}"


def _flags_colour(flags: str) -> str:
    """Writable and executable mappings are highlighted."""
    if "W" in flags and ("X" in flags or "E" in flags):
        return "bright_red"
    if "X" in flags or "E" in flags:
        return "bright_yellow"
    if "W" in flags:
        return "bright_cyan"
    return "white"


# ---------------------------------------------------------------------------
# SigilConsoleOutput
# ---------------------------------------------------------------------------

class SigilConsoleOutput:
    """Rich terminal display for :class:`ImageSummary` results.

    Usage::

        output = SigilConsoleOutput()
        output.display(summary)
    """

    def __init__(
        self,
        console: SigilConsole | None = None,
        *,
        show_sections: bool = True,
        show_segments: bool = True,
    ) -> None:
        self._console: SigilConsole = console or SigilConsole()
        self._show_sections = show_sections
        self._show_segments = show_segments

    def display(self, summary: ImageSummary) -> None:
        """Display the complete inspection result."""
        self._console.title("SIGIL -- ELF Image Inspector", summary.path)

        if not summary.ok:
            kind = summary.error_kind.value if summary.error_kind else "io_error"
            self._console.error(f"{kind}: {summary.error}")
            return

        width = 16 if summary.header and summary.header.bits == 64 else 8

        if summary.header is not None:
            self.display_header(summary.header, summary.size)
        if self._show_sections:
            self.display_sections(summary.sections, width)
        if self._show_segments:
            self.display_segments(summary.segments, width)
            if summary.load_plan:
                self.display_load_plan(summary.load_plan, width, summary.memory_span)

        for message in summary.warnings:
            self._console.warning(message)

        self._console.divider()

    def display_header(self, header: HeaderSummary, size: int) -> None:
        """Display the file header panel."""
        lines: list[str] = [
            f"[bold]Class:[/bold]        ELF{header.bits}",
            f"[bold]Data:[/bold]         {header.endian} endian",
            f"[bold]OS/ABI:[/bold]       {escape(header.osabi)}",
            f"[bold]Type:[/bold]         {escape(header.type)}",
            f"[bold]Machine:[/bold]      {escape(header.machine)}",
            f"[bold]Entry Point:[/bold]  0x{header.entry_point:x}",
            f"[bold]Size:[/bold]         {size:,} bytes ({size / 1024:.1f} KiB)",
            f"[bold]Sections:[/bold]     {header.sh_count} at offset "
            f"{header.sh_offset:#x} ({header.sh_entsize} bytes each), "
            f"names in [{header.sh_str_idx}]",
            f"[bold]Segments:[/bold]     {header.ph_count} at offset "
            f"{header.ph_offset:#x} ({header.ph_entsize} bytes each)",
            f"[bold]Flags:[/bold]        {header.flags:#x}",
        ]
        panel = Panel(
            "\n".join(lines),
            title="[bold bright_cyan]ELF Header[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(1, 2),
        )
        self._console.rich.print(panel)
        self._console.blank()

    def display_sections(self, sections: list[SectionSummary], width: int = 16) -> None:
        self._console.section("Section Headers")
        if not sections:
            self._console.info("There are no sections in this file.")
            self._console.blank()
            return

        tbl = Table(
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        tbl.add_column("#", style="dim", justify="right")
        tbl.add_column("Name", style="bold", min_width=12)
        tbl.add_column("Type")
        tbl.add_column("Address", justify="right")
        tbl.add_column("Offset", justify="right")
        tbl.add_column("Size", justify="right")
        tbl.add_column("ES", justify="right")
        tbl.add_column("Flags")
        tbl.add_column("Lk", justify="right")
        tbl.add_column("Inf", justify="right")
        tbl.add_column("Al", justify="right")

        for sec in sections:
            colour = _flags_colour(sec.flags)
            tbl.add_row(
                str(sec.index),
                escape(sec.name),
                escape(sec.type),
                _hex(sec.addr, width),
                _hex(sec.offset, 8),
                _hex(sec.size, 8),
                f"{sec.entsize:x}",
                f"[{colour}]{escape(sec.flags)}[/{colour}]",
                str(sec.link),
                str(sec.info),
                str(sec.addralign),
            )

        self._console.rich.print(tbl)
        self._console.print(
            "[dim]Key: W (write), A (alloc), X (execute), M (merge), "
            "S (strings), I (info), L (link order), T (TLS)[/dim]"
        )
        self._console.blank()

    def display_segments(self, segments: list[SegmentSummary], width: int = 16) -> None:
        self._console.section("Program Headers")
        if not segments:
            self._console.info("There are no program headers in this file.")
            self._console.blank()
            return

        tbl = Table(
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        tbl.add_column("#", style="dim", justify="right")
        tbl.add_column("Type", min_width=10)
        tbl.add_column("Offset", justify="right")
        tbl.add_column("VirtAddr", justify="right")
        tbl.add_column("PhysAddr", justify="right")
        tbl.add_column("FileSiz", justify="right")
        tbl.add_column("MemSiz", justify="right")
        tbl.add_column("Flg")
        tbl.add_column("Align", justify="right")

        for seg in segments:
            type_colour = _SEGMENT_TYPE_COLOURS.get(seg.type, "white")
            flag_colour = _flags_colour(seg.flags)
            tbl.add_row(
                str(seg.index),
                f"[{type_colour}]{escape(seg.type)}[/{type_colour}]",
                _hex(seg.offset, 8),
                _hex(seg.vaddr, width),
                _hex(seg.paddr, width),
                _hex(seg.filesz, 8),
                _hex(seg.memsz, 8),
                f"[{flag_colour}]{escape(seg.flags)}[/{flag_colour}]",
                f"{seg.align:#x}",
            )

        self._console.rich.print(tbl)
        self._console.blank()

    def display_load_plan(
        self,
        plan: list[LoadMapping],
        width: int = 16,
        span: int = 0,
    ) -> None:
        """Display where each loadable segment lands in memory."""
        rows = [
            (
                _hex(m.vaddr, width),
                _hex(m.vaddr + m.file_size + m.zero_fill, width),
                _hex(m.file_offset, 8),
                f"{m.file_size:,}",
                f"{m.zero_fill:,}",
                m.flags,
            )
            for m in plan
        ]
        self._console.table(
            "Load Plan",
            ["Start", "End", "File Offset", "Copied", "Zero-filled", "Flg"],
            rows,
            caption=f"{len(plan)} loadable segment(s), {span:,} bytes of address space",
            justify=["right", "right", "right", "right", "right", "left"],
        )
        self._console.blank()
