"""
ELF Section Headers and String Tables
=======================================

:class:`SectionHeader` views one entry of the section header table
(``Elf32_Shdr`` / ``Elf64_Shdr``).  The section's name is stored as an
index into the section-name string table and is resolved lazily through
:class:`StrTable`.

:class:`StrTable` views a run of NUL-terminated strings.  Its end is not
precomputed; each lookup scans forward from the requested index to the
next NUL, bounded by the end of the underlying buffer.
"""

from __future__ import annotations

from sigil.core.errors import InvalidName
from sigil.core.extract import Buffer, Record, as_view, field
from sigil.parsers.constants import (
    SHF_ALLOC,
    SHF_EXECINSTR,
    SHF_WRITE,
    SHT_NOBITS,
    section_flags_str,
    section_type_name,
)


class SectionHeader(Record):
    """One section header table entry."""
    __slots__ = ()

    _FIELDS = (
        ("sh_name", "I"),
        ("sh_type", "I"),
        ("sh_flags", "W"),
        ("sh_addr", "W"),
        ("sh_offset", "W"),
        ("sh_size", "W"),
        ("sh_link", "I"),
        ("sh_info", "I"),
        ("sh_addralign", "W"),
        ("sh_entsize", "W"),
    )

    sh_name = field()
    sh_type = field()
    sh_flags = field()
    sh_addr = field()
    sh_offset = field()
    sh_size = field()
    sh_link = field()
    sh_info = field()
    sh_addralign = field()
    sh_entsize = field()

    @property
    def type_name(self) -> str:
        return section_type_name(self.sh_type)

    @property
    def flags_str(self) -> str:
        return section_flags_str(self.sh_flags)

    @property
    def is_alloc(self) -> bool:
        return bool(self.sh_flags & SHF_ALLOC)

    @property
    def is_writable(self) -> bool:
        return bool(self.sh_flags & SHF_WRITE)

    @property
    def is_executable(self) -> bool:
        return bool(self.sh_flags & SHF_EXECINSTR)

    @property
    def occupies_file(self) -> bool:
        """``False`` for ``SHT_NOBITS`` sections such as ``.bss``."""
        return self.sh_type != SHT_NOBITS

    def file_range(self) -> range:
        """Byte range of the section contents within the image."""
        if not self.occupies_file:
            return range(self.sh_offset, self.sh_offset)
        return range(self.sh_offset, self.sh_offset + self.sh_size)

    def entry_count(self) -> int:
        """Number of fixed-size entries for table sections (0 otherwise)."""
        if not self.sh_entsize:
            return 0
        return self.sh_size // self.sh_entsize


class StrTable:
    """A view over NUL-terminated strings.

    Usage::

        table = image.sh_str_table()
        name = table.name_at(section.sh_name)
    """
    __slots__ = ("_view",)

    def __init__(self, data: Buffer) -> None:
        self._view = as_view(data)

    @classmethod
    def from_bytes(cls, data: Buffer) -> StrTable:
        return cls(data)

    def __len__(self) -> int:
        return len(self._view)

    def bytes_at(self, index: int) -> bytes:
        """Return the raw name bytes at *index*, excluding the NUL.

        Raises:
            InvalidName: If *index* lies outside the table, or no NUL
                terminator follows it before the end of the buffer.
        """
        view = self._view
        if index < 0 or index >= len(view):
            raise InvalidName(
                f"string index {index:#x} outside table of {len(view)} bytes"
            )
        # memoryview has no find(); scan the tail a chunk at a time
        end = _find_nul(view, index)
        if end < 0:
            raise InvalidName(f"unterminated string at index {index:#x}")
        return bytes(view[index:end])

    def name_at(self, index: int) -> str:
        """Return the name at *index*, decoded as UTF-8.

        Undecodable bytes are replaced rather than rejected; use
        :meth:`bytes_at` for the exact bytes.
        """
        return self.bytes_at(index).decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return f"StrTable({len(self._view)} bytes)"


_SCAN_CHUNK: int = 4096


def _find_nul(view: memoryview, start: int) -> int:
    """Offset of the first NUL at or after *start*, or ``-1``."""
    pos = start
    end = len(view)
    while pos < end:
        stop = min(pos + _SCAN_CHUNK, end)
        hit = bytes(view[pos:stop]).find(b"\x00")
        if hit >= 0:
            return pos + hit
        pos = stop
    return -1
