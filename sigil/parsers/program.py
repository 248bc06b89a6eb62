"""
ELF Program Headers
====================

:class:`ProgramHeader` views one entry of the program header table.  Like
the file header it is polymorphic over the word width, and the two layouts
differ in more than field size: ``Elf64_Phdr`` moves ``p_flags`` up next
to ``p_type`` so the 64-bit fields stay naturally aligned.

Program headers are consumed by a loader that maps each ``PT_LOAD``
segment's file bytes at ``p_vaddr`` and zero-fills up to ``p_memsz``.  This
module only describes segments; it never maps anything.
"""

from __future__ import annotations

from sigil.core.extract import Record, field
from sigil.core.word import Word
from sigil.parsers.constants import (
    PF_R,
    PF_W,
    PF_X,
    PT_LOAD,
    segment_flags_str,
    segment_type_name,
)

_ELF32_PHDR: tuple[tuple[str, str], ...] = (
    ("p_type", "I"),
    ("p_offset", "W"),
    ("p_vaddr", "W"),
    ("p_paddr", "W"),
    ("p_filesz", "W"),
    ("p_memsz", "W"),
    ("p_flags", "I"),
    ("p_align", "W"),
)

_ELF64_PHDR: tuple[tuple[str, str], ...] = (
    ("p_type", "I"),
    ("p_flags", "I"),
    ("p_offset", "W"),
    ("p_vaddr", "W"),
    ("p_paddr", "W"),
    ("p_filesz", "W"),
    ("p_memsz", "W"),
    ("p_align", "W"),
)


class ProgramHeader(Record):
    """One program header table entry (a segment)."""
    __slots__ = ()

    p_type = field()
    p_flags = field()
    p_offset = field()
    p_vaddr = field()
    p_paddr = field()
    p_filesz = field()
    p_memsz = field()
    p_align = field()

    @classmethod
    def _fields(cls, word: Word) -> tuple[tuple[str, str], ...]:
        return _ELF32_PHDR if word is Word.W32 else _ELF64_PHDR

    @property
    def type_name(self) -> str:
        return segment_type_name(self.p_type)

    @property
    def flags_str(self) -> str:
        return segment_flags_str(self.p_flags)

    @property
    def is_load(self) -> bool:
        return self.p_type == PT_LOAD

    @property
    def readable(self) -> bool:
        return bool(self.p_flags & PF_R)

    @property
    def writable(self) -> bool:
        return bool(self.p_flags & PF_W)

    @property
    def executable(self) -> bool:
        return bool(self.p_flags & PF_X)

    def file_range(self) -> range:
        """Bytes of the image backing this segment."""
        return range(self.p_offset, self.p_offset + self.p_filesz)

    def memory_range(self) -> range:
        """Virtual addresses the segment occupies once loaded."""
        return range(self.p_vaddr, self.p_vaddr + self.p_memsz)

    def bss_size(self) -> int:
        """Bytes to zero-fill past the file-backed part."""
        return max(self.p_memsz - self.p_filesz, 0)
