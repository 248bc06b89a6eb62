"""Tests for the aggregate image."""

import struct

import pytest

from sigil.core.errors import (
    BufferTooShort,
    ElfErrorKind,
    InvalidName,
    MalformedIdentification,
    MisalignedOffset,
)
from sigil.core.extract import BIG
from sigil.core.word import Word
from sigil.parsers.constants import PF_R, PF_X, PT_LOAD, PT_NOTE, SHT_PROGBITS
from sigil.parsers.image import Image

from tests.conftest import E_PHOFF, E_SHOFF, E_SHSTRNDX, ENTRY, TEXT, build_elf, sample_image


class TestParse:
    def test_elf64_little_endian(self, elf64):
        image = Image.parse(elf64)

        assert image.word is Word.W64
        assert image.header.entry_point == ENTRY
        assert len(image.sections) == 3
        assert len(image.program_headers) == 2
        assert len(image) == len(elf64)

        names = [name for name, _ in image.named_sections()]
        assert names == ["", ".text", ".shstrtab"]

    def test_program_headers(self, elf64):
        load, note = Image.parse(elf64).program_headers
        assert load.p_type == PT_LOAD
        assert load.p_flags == PF_R | PF_X
        assert load.flags_str == "RX"
        assert load.p_vaddr == 0x400000
        assert load.bss_size() == 0x2000 - (64 + 2 * 56)
        assert note.p_type == PT_NOTE
        assert note.type_name == "NOTE"

    @pytest.mark.parametrize("word", [Word.W32, Word.W64])
    @pytest.mark.parametrize("byteorder", ["<", ">"])
    def test_every_layout(self, word, byteorder):
        image = Image.parse(sample_image(word, byteorder))
        assert image.word is word
        assert image.header.byteorder == byteorder
        assert image.section_name(image.sections[1]) == ".text"
        assert [ph.p_type for ph in image.program_headers] == [PT_LOAD, PT_NOTE]
        assert image.program_headers[0].p_flags == PF_R | PF_X

    def test_from_bytes_alias(self, elf32):
        assert Image.from_bytes(elf32).word is Word.W32

    def test_word_override(self, elf32):
        assert Image.parse(elf32, Word.W32).word is Word.W32
        with pytest.raises(MalformedIdentification):
            Image.parse(elf32, Word.W64)

    def test_no_tables(self):
        data = build_elf()
        struct.pack_into("<H", data, 60, 0)  # e_shnum
        image = Image.parse(data)
        assert len(image.sections) == 0
        assert len(image.program_headers) == 0
        with pytest.raises(InvalidName):
            image.sh_str_table()

    def test_accepts_bytes(self, elf64):
        assert len(Image.parse(bytes(elf64)).sections) == 3


class TestConstructionErrors:
    def test_truncated_section_table(self, elf64):
        with pytest.raises(BufferTooShort) as exc_info:
            Image.parse(elf64[:-4])
        assert exc_info.value.kind is ElfErrorKind.BUFFER_TOO_SHORT

    def test_truncated_elf32(self, elf32):
        with pytest.raises(BufferTooShort):
            Image.parse(elf32[:-1])

    def test_misaligned_section_table(self, elf64):
        shoff = struct.unpack_from("<Q", elf64, E_SHOFF[Word.W64])[0]
        struct.pack_into("<Q", elf64, E_SHOFF[Word.W64], shoff + 4)
        with pytest.raises(MisalignedOffset):
            Image.parse(elf64)

    def test_misaligned_program_headers(self, elf32):
        struct.pack_into("<I", elf32, E_PHOFF[Word.W32], 54)
        with pytest.raises(MisalignedOffset):
            Image.parse(elf32)

    def test_misalignment_reported_before_truncation(self, elf64):
        struct.pack_into("<Q", elf64, E_SHOFF[Word.W64], len(elf64) + 1)
        with pytest.raises(MisalignedOffset):
            Image.parse(elf64)

    def test_section_table_past_end(self, elf64_msb):
        struct.pack_into(">Q", elf64_msb, E_SHOFF[Word.W64], len(elf64_msb) + 8)
        with pytest.raises(BufferTooShort):
            Image.parse(elf64_msb)

    def test_source_buffer_is_not_modified(self, elf64):
        before = bytes(elf64)
        Image.parse(elf64)
        assert bytes(elf64) == before


class TestNames:
    def test_section_by_name(self, elf64):
        image = Image.parse(elf64)
        text = image.section_by_name(".text")
        assert text is not None
        assert text.sh_type == SHT_PROGBITS
        assert text.sh_addr == ENTRY
        assert image.section_by_name(".missing") is None

    def test_names_resolve_through_shstrtab_offset(self, elf64):
        image = Image.parse(elf64)
        table = image.sh_str_table()
        shstrtab = image.sections[image.header.sh_str_idx()]
        assert bytes(table.bytes_at(0)) == b""
        assert image.binary[shstrtab.sh_offset] == 0
        assert table.name_at(shstrtab.sh_name) == ".shstrtab"

    def test_undefined_string_table_index(self, elf64):
        struct.pack_into("<H", elf64, E_SHSTRNDX[Word.W64], 0)
        image = Image.parse(elf64)
        with pytest.raises(InvalidName):
            image.sh_str_table()

    def test_string_table_index_out_of_range(self, elf32):
        struct.pack_into("<H", elf32, E_SHSTRNDX[Word.W32], 9)
        image = Image.parse(elf32)
        with pytest.raises(InvalidName):
            image.section_name(image.sections[1])

    def test_name_index_out_of_range(self, elf64):
        image = Image.parse(elf64)
        shoff = image.header.e_shoff
        # sh_name of section 1 points far past the end of the image
        struct.pack_into("<I", elf64, shoff + 64, 0xFFFF)
        with pytest.raises(InvalidName):
            image.section_name(image.sections[1])

    def test_big_endian_names(self, elf64_msb):
        image = Image.parse(elf64_msb)
        assert image.section_name(image.sections[2]) == ".shstrtab"


class TestData:
    def test_section_data(self, elf64):
        image = Image.parse(elf64)
        assert bytes(image.section_data(image.section_by_name(".text"))) == TEXT

    def test_section_data_is_a_view(self, elf64):
        image = Image.parse(elf64)
        view = image.section_data(image.section_by_name(".text"))
        assert isinstance(view, memoryview)
        elf64[image.section_by_name(".text").sh_offset] = 0
        assert view[0] == 0

    def test_nobits_section_is_empty(self, rich_elf):
        image = Image.parse(rich_elf)
        assert len(image.section_data(image.section_by_name(".bss"))) == 0

    def test_segment_data(self, elf64):
        image = Image.parse(elf64)
        load = image.program_headers[0]
        assert bytes(image.segment_data(load)) == bytes(elf64[: 64 + 2 * 56])

    def test_segment_past_end(self, elf64):
        image = Image.parse(elf64)
        # p_filesz of the first Elf64_Phdr lives at byte 64 + 32
        struct.pack_into("<Q", elf64, 64 + 32, len(elf64) + 1)
        with pytest.raises(BufferTooShort):
            image.segment_data(image.program_headers[0])

    def test_loadable_segments(self, rich_elf):
        image = Image.parse(rich_elf)
        loads = list(image.loadable_segments())
        assert len(loads) == 2
        assert loads[1].writable and not loads[1].executable
        assert loads[1].bss_size() == 0x50
        assert loads[1].memory_range() == range(0x402000, 0x402060)

    def test_repr(self, elf64):
        assert "sections=3" in repr(Image.parse(elf64))


def test_big_endian_is_mirror_of_little(elf64, elf64_msb):
    little = Image.parse(elf64)
    big = Image.parse(elf64_msb)
    lhs, rhs = little.header.as_dict(), big.header.as_dict()
    assert lhs.pop("ei_data") != rhs.pop("ei_data")
    assert lhs == rhs
    assert [s.as_dict() for s in little.sections] == [s.as_dict() for s in big.sections]
    assert little.header.byteorder != big.header.byteorder == BIG


def test_nobits_section_past_end_is_empty(rich_elf):
    image = Image.parse(rich_elf)
    bss = image.section_by_name(".bss")
    # sh_offset of .bss (section 3) sits 24 bytes into its Elf64_Shdr
    struct.pack_into("<Q", rich_elf, image.header.e_shoff + 3 * 64 + 24, len(rich_elf) + 0x1000)
    assert bss.sh_offset > len(rich_elf)
    assert len(image.section_data(bss)) == 0


def test_empty_segment_past_end_is_empty(elf64):
    image = Image.parse(elf64)
    note = image.program_headers[1]
    # p_offset of the second Elf64_Phdr
    struct.pack_into("<Q", elf64, 64 + 56 + 8, len(elf64) + 8)
    assert note.p_filesz == 0
    assert len(image.segment_data(note)) == 0
