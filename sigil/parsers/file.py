"""
ELF File Header
================

:class:`FileHeader` is a typed view over the first ``e_ehsize`` bytes of an
ELF image.  It is polymorphic over the word width: one class, two layouts
(``Elf32_Ehdr`` at 52 bytes, ``Elf64_Ehdr`` at 64 bytes), selected from the
identification class byte.

The identification block is validated before any numeric field is trusted:
magic, class, then data encoding.  The remaining fields are taken as they
are; the derived geometry (:meth:`FileHeader.sh_range` and friends) is a
pure function of them and is only ever enforced by the extraction
primitive.

Reference:
    TIS Committee. (1995). Executable and Linkable Format (ELF)
    Specification, Version 1.2, Figure 1-3 "ELF Header".
"""

from __future__ import annotations

from sigil.core.errors import MalformedIdentification
from sigil.core.extract import BIG, LITTLE, Buffer, Record, as_view, extract, field
from sigil.core.word import Word
from sigil.parsers.constants import (
    EI_CLASS,
    EI_DATA,
    ELF_MAGIC,
    ELFDATA2LSB,
    ELFDATA2MSB,
)

_BYTEORDERS: dict[int, str] = {
    ELFDATA2LSB: LITTLE,
    ELFDATA2MSB: BIG,
}


class FileHeader(Record):
    """The ELF file header (``ElfN_Ehdr``)."""
    __slots__ = ()

    _FIELDS = (
        ("ei_magic", "4s"),
        ("ei_class", "B"),
        ("ei_data", "B"),
        ("ei_version", "B"),
        ("ei_osabi", "B"),
        ("ei_abiversion", "B"),
        ("ei_pad", "7s"),
        ("e_type", "H"),
        ("e_machine", "H"),
        ("e_version", "I"),
        ("e_entry", "W"),
        ("e_phoff", "W"),
        ("e_shoff", "W"),
        ("e_flags", "I"),
        ("e_ehsize", "H"),
        ("e_phentsize", "H"),
        ("e_phnum", "H"),
        ("e_shentsize", "H"),
        ("e_shnum", "H"),
        ("e_shstrndx", "H"),
    )

    ei_magic = field()
    ei_class = field()
    ei_data = field()
    ei_version = field()
    ei_osabi = field()
    ei_abiversion = field()
    ei_pad = field()
    e_type = field()
    e_machine = field()
    e_version = field()
    e_entry = field()
    e_phoff = field()
    e_shoff = field()
    e_flags = field()
    e_ehsize = field()
    e_phentsize = field()
    e_phnum = field()
    e_shentsize = field()
    e_shnum = field()
    e_shstrndx = field()

    # ------------------------------------------------------------------ #
    #  Parsing
    # ------------------------------------------------------------------ #

    @classmethod
    def identify(cls, data: Buffer, word: Word | None = None) -> tuple[Word, str]:
        """Validate the identification block and pick the layout.

        Args:
            data: Buffer starting with an ELF image.
            word: Required word width, or ``None`` to accept either.

        Returns:
            ``(word, byteorder)`` for the image.

        Raises:
            MalformedIdentification: On a bad magic, an unsupported class,
                a class that does not match *word*, or an unsupported
                data encoding.
        """
        view = as_view(data)
        if bytes(view[:len(ELF_MAGIC)]) != ELF_MAGIC:
            raise MalformedIdentification("not an ELF file")

        elf_class = view[EI_CLASS] if len(view) > EI_CLASS else None
        found = Word.from_class(elf_class) if elf_class is not None else None
        if found is None:
            raise MalformedIdentification(f"unsupported class: {elf_class}")
        if word is not None and found is not word:
            raise MalformedIdentification(
                f"unsupported class: image is {found}, expected {word}"
            )

        encoding = view[EI_DATA] if len(view) > EI_DATA else None
        byteorder = _BYTEORDERS.get(encoding) if encoding is not None else None
        if byteorder is None:
            raise MalformedIdentification(f"unsupported data encoding: {encoding}")

        return found, byteorder

    @classmethod
    def parse(cls, data: Buffer, word: Word | None = None) -> FileHeader:
        """View the file header at offset 0 of *data*.

        Raises:
            MalformedIdentification: See :meth:`identify`.
            BufferTooShort: If *data* is shorter than the header.
        """
        found, byteorder = cls.identify(data, word)
        return extract(data, 0, 1, cls.layout(found, byteorder))[0]

    # ------------------------------------------------------------------ #
    #  Geometry
    # ------------------------------------------------------------------ #

    def sh_range(self) -> range:
        """Byte range of the section header table."""
        start = self.e_shoff
        return range(start, start + self.e_shentsize * self.e_shnum)

    def ph_range(self) -> range:
        """Byte range of the program header table."""
        start = self.e_phoff
        return range(start, start + self.e_phentsize * self.e_phnum)

    def sh_count(self) -> int:
        return self.e_shnum

    def ph_count(self) -> int:
        return self.e_phnum

    def sh_str_idx(self) -> int:
        """Section index of the section-name string table."""
        return self.e_shstrndx

    # ------------------------------------------------------------------ #
    #  Convenience
    # ------------------------------------------------------------------ #

    @property
    def entry_point(self) -> int:
        return self.e_entry

    @property
    def is_64bit(self) -> bool:
        return self.word is Word.W64

    @property
    def is_little_endian(self) -> bool:
        return self.byteorder == LITTLE
