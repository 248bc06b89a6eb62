"""
Sigil Data Models
==================

Pydantic models summarising a parsed ELF image for display and reporting.
They are plain value snapshots: building one decodes the header fields out
of the zero-copy views once, so a summary can outlive the source buffer
and be serialised to JSON.

References:
    - TIS Committee. (1995). Executable and Linkable Format (ELF) Specification.
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from sigil.core.errors import ElfErrorKind


# ---------------------------------------------------------------------------
# File header
# ---------------------------------------------------------------------------

class HeaderSummary(BaseModel):
    """Decoded file header fields.

    Attributes:
        bits: Word width (32 or 64).
        endian: ``"little"`` or ``"big"``.
        osabi: OS/ABI name.
        type: Object file type name.
        machine: Architecture name.
        entry_point: Virtual address of the entry point.
        sh_offset: Section header table file offset.
        sh_entsize: Section header entry size.
        sh_count: Number of section headers.
        sh_str_idx: Index of the section-name string table.
        ph_offset: Program header table file offset.
        ph_entsize: Program header entry size.
        ph_count: Number of program headers.
        flags: Processor-specific flags.
    """
    bits: int = 0
    endian: str = "little"
    osabi: str = ""
    type: str = ""
    machine: str = ""
    entry_point: int = 0
    sh_offset: int = 0
    sh_entsize: int = 0
    sh_count: int = 0
    sh_str_idx: int = 0
    ph_offset: int = 0
    ph_entsize: int = 0
    ph_count: int = 0
    flags: int = 0


# ---------------------------------------------------------------------------
# Sections / segments
# ---------------------------------------------------------------------------

class SectionSummary(BaseModel):
    """One section header with its resolved name."""
    index: int = 0
    name: str = ""
    type: str = ""
    flags: str = ""
    addr: int = 0
    offset: int = 0
    size: int = 0
    link: int = 0
    info: int = 0
    addralign: int = 0
    entsize: int = 0


class SegmentSummary(BaseModel):
    """One program header."""
    index: int = 0
    type: str = ""
    flags: str = ""
    offset: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    align: int = 0


class LoadMapping(BaseModel):
    """How a loader would place one ``PT_LOAD`` segment.

    The first ``file_size`` bytes at ``vaddr`` come from the image at
    ``file_offset``; the following ``zero_fill`` bytes are cleared.
    """
    vaddr: int = 0
    file_offset: int = 0
    file_size: int = 0
    zero_fill: int = 0
    flags: str = ""
    align: int = 0


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

class ImageSummary(BaseModel):
    """Complete inspection result for one image.

    Attributes:
        path: Source path (or ``"<memory>"``).
        size: Image size in bytes.
        ok: ``True`` when the image parsed.
        error_kind: Failure category when ``ok`` is ``False``.
        error: Failure message when ``ok`` is ``False``.
        header: Decoded file header.
        sections: Section headers with names.
        segments: Program headers.
        load_plan: Loader placement of each ``PT_LOAD`` segment.
        warnings: Non-fatal observations (e.g. unresolvable names).
    """
    path: str = ""
    size: int = 0
    ok: bool = False
    error_kind: Optional[ElfErrorKind] = None
    error: str = ""
    header: Optional[HeaderSummary] = None
    sections: list[SectionSummary] = Field(default_factory=list)
    segments: list[SegmentSummary] = Field(default_factory=list)
    load_plan: list[LoadMapping] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def memory_span(self) -> int:
        """Bytes of address space covered by the load plan."""
        if not self.load_plan:
            return 0
        low = min(m.vaddr for m in self.load_plan)
        high = max(m.vaddr + m.file_size + m.zero_fill for m in self.load_plan)
        return high - low
