"""
ELF Image
==========

:class:`Image` binds a parsed file header, the section header table, the
program header table and the original buffer.  It is built in a single
all-or-nothing pass:

    1. Parse the file header at offset 0.
    2. Derive the section and program header table ranges from it.
    3. Extract the section header table.
    4. Extract the program header table.
    5. Assemble the image.

Any failure aborts the whole parse with an :class:`~sigil.core.errors.ElfError`;
there is no partially valid image.  Nothing is copied: every view refers
back into the caller's buffer through one :class:`memoryview`, which also
keeps that buffer alive (and un-resizable) for as long as the image is.

Usage::

    image = Image.parse(Path("vmlinux").read_bytes())
    for ph in image.loadable_segments():
        map_segment(ph.p_vaddr, image.segment_data(ph), ph.p_memsz)
    symtab = image.section_by_name(".symtab")
"""

from __future__ import annotations

from typing import Iterator, Optional

from sigil.core.errors import BufferTooShort, InvalidName
from sigil.core.extract import Buffer, RecordArray, as_view, extract
from sigil.core.word import Word
from sigil.parsers.constants import SHN_UNDEF
from sigil.parsers.file import FileHeader
from sigil.parsers.program import ProgramHeader
from sigil.parsers.section import SectionHeader, StrTable


class Image:
    """A parsed, read-only ELF image borrowing its source buffer.

    Attributes:
        header: The file header.
        sections: The section headers, in table order.
        program_headers: The program headers, in table order.
    """
    __slots__ = ("header", "sections", "program_headers", "_binary")

    def __init__(
        self,
        header: FileHeader,
        sections: RecordArray[SectionHeader],
        program_headers: RecordArray[ProgramHeader],
        binary: memoryview,
    ) -> None:
        self.header = header
        self.sections = sections
        self.program_headers = program_headers
        self._binary = binary

    # ------------------------------------------------------------------ #
    #  Construction
    # ------------------------------------------------------------------ #

    @classmethod
    def parse(cls, data: Buffer, word: Word | None = None) -> Image:
        """Parse *data* into an image.

        Args:
            data: The complete contents of an ELF file.
            word: Required word width; ``None`` accepts either class.

        Raises:
            MalformedIdentification: Bad magic, class or data encoding.
            MisalignedOffset: A header table is not naturally aligned.
            BufferTooShort: A header table runs past the end of *data*.
        """
        view = as_view(data)
        header = FileHeader.parse(view, word)

        sh_range = header.sh_range()
        ph_range = header.ph_range()

        sections = extract(
            view,
            sh_range.start,
            header.sh_count(),
            SectionHeader.layout(header.word, header.byteorder),
        )
        program_headers = extract(
            view,
            ph_range.start,
            header.ph_count(),
            ProgramHeader.layout(header.word, header.byteorder),
        )
        return cls(header, sections, program_headers, view)

    from_bytes = parse

    # ------------------------------------------------------------------ #
    #  Raw data
    # ------------------------------------------------------------------ #

    @property
    def binary(self) -> memoryview:
        """The entire source buffer (header and tables included)."""
        return self._binary

    @property
    def word(self) -> Word:
        return self.header.word

    def __len__(self) -> int:
        return len(self._binary)

    def _slice(self, span: range, what: str) -> memoryview:
        # nothing is read from an empty range, wherever it points
        if not span:
            return self._binary[:0]
        if span.start < 0 or span.stop > len(self._binary):
            raise BufferTooShort(
                f"{what} [{span.start:#x}, {span.stop:#x}) exceeds image of "
                f"{len(self._binary)} bytes"
            )
        return self._binary[span.start:span.stop]

    def section_data(self, section: SectionHeader) -> memoryview:
        """Zero-copy view of a section's contents.

        ``SHT_NOBITS`` sections yield an empty view.

        Raises:
            BufferTooShort: If the section runs past the end of the image.
        """
        return self._slice(section.file_range(), "section")

    def segment_data(self, segment: ProgramHeader) -> memoryview:
        """Zero-copy view of a segment's file-backed bytes.

        Raises:
            BufferTooShort: If the segment runs past the end of the image.
        """
        return self._slice(segment.file_range(), "segment")

    # ------------------------------------------------------------------ #
    #  String table and names
    # ------------------------------------------------------------------ #

    def sh_str_table(self) -> StrTable:
        """Return the section-name string table.

        The table starts at the file offset of section ``sh_str_idx()`` and
        runs to the end of the buffer; its true end is found lazily by each
        lookup.

        Raises:
            InvalidName: If ``sh_str_idx()`` does not name a section, or the
                section's offset lies outside the image.
        """
        index = self.header.sh_str_idx()
        if index == SHN_UNDEF or index >= len(self.sections):
            raise InvalidName(
                f"section name table index {index} does not name one of "
                f"{len(self.sections)} sections"
            )
        start = self.sections[index].sh_offset
        if start > len(self._binary):
            raise InvalidName(
                f"section name table offset {start:#x} outside image of "
                f"{len(self._binary)} bytes"
            )
        return StrTable(self._binary[start:])

    def section_name(self, section: SectionHeader) -> str:
        """Resolve *section*'s name through the section-name string table."""
        return self.sh_str_table().name_at(section.sh_name)

    def named_sections(self) -> Iterator[tuple[str, SectionHeader]]:
        """Yield ``(name, section)`` pairs in table order."""
        table = self.sh_str_table()
        for section in self.sections:
            yield table.name_at(section.sh_name), section

    def section_by_name(self, name: str) -> Optional[SectionHeader]:
        """Return the first section called *name*, or ``None``."""
        for candidate, section in self.named_sections():
            if candidate == name:
                return section
        return None

    # ------------------------------------------------------------------ #
    #  Segments
    # ------------------------------------------------------------------ #

    def loadable_segments(self) -> Iterator[ProgramHeader]:
        """Yield the ``PT_LOAD`` program headers in table order."""
        for ph in self.program_headers:
            if ph.is_load:
                yield ph

    def __repr__(self) -> str:
        return (
            f"Image({self.header.word}, sections={len(self.sections)}, "
            f"program_headers={len(self.program_headers)}, "
            f"size={len(self._binary)})"
        )
