"""Tests for file header identification and geometry."""

import struct

import pytest

from sigil.core.errors import (
    BufferTooShort,
    ElfErrorKind,
    MalformedIdentification,
)
from sigil.core.extract import BIG, LITTLE
from sigil.core.word import Word
from sigil.parsers.constants import EI_CLASS, EI_DATA, EM_X86_64, ET_EXEC
from sigil.parsers.file import FileHeader

from tests.conftest import ENTRY, sample_image


class TestIdentify:
    def test_elf64_little_endian(self, elf64):
        assert FileHeader.identify(elf64) == (Word.W64, LITTLE)

    def test_elf32(self, elf32):
        assert FileHeader.identify(elf32) == (Word.W32, LITTLE)

    def test_big_endian(self, elf64_msb):
        assert FileHeader.identify(elf64_msb) == (Word.W64, BIG)

    def test_bad_magic(self, elf64):
        elf64[0] = 0x7E
        with pytest.raises(MalformedIdentification, match="not an ELF file") as exc_info:
            FileHeader.parse(elf64)
        assert exc_info.value.kind is ElfErrorKind.MALFORMED_IDENTIFICATION

    def test_empty_buffer(self):
        with pytest.raises(MalformedIdentification):
            FileHeader.parse(b"")

    def test_magic_only(self):
        with pytest.raises(MalformedIdentification, match="unsupported class"):
            FileHeader.parse(b"\x7fELF")

    @pytest.mark.parametrize("value", [0, 3, 0xFF])
    def test_corrupt_class(self, elf64, value):
        elf64[EI_CLASS] = value
        with pytest.raises(MalformedIdentification, match="unsupported class"):
            FileHeader.parse(elf64)

    def test_corrupt_data_encoding(self, elf64):
        elf64[EI_DATA] = 7
        with pytest.raises(MalformedIdentification, match="data encoding"):
            FileHeader.parse(elf64)

    def test_word_mismatch(self, elf64, elf32):
        with pytest.raises(MalformedIdentification):
            FileHeader.parse(elf64, Word.W32)
        with pytest.raises(MalformedIdentification):
            FileHeader.parse(elf32, Word.W64)

    def test_word_match(self, elf32):
        assert FileHeader.parse(elf32, Word.W32).word is Word.W32

    def test_truncated_header(self, elf64):
        with pytest.raises(BufferTooShort):
            FileHeader.parse(elf64[:40])


class TestFields:
    @pytest.mark.parametrize("word", [Word.W32, Word.W64])
    @pytest.mark.parametrize("byteorder", [LITTLE, BIG])
    def test_decodes_in_every_layout(self, word, byteorder):
        header = FileHeader.parse(sample_image(word, byteorder))
        assert header.word is word
        assert header.byteorder == byteorder
        assert header.e_type == ET_EXEC
        assert header.e_machine == EM_X86_64
        assert header.entry_point == ENTRY
        assert header.e_ehsize == (52 if word is Word.W32 else 64)
        assert header.sh_count() == 3
        assert header.ph_count() == 2
        assert header.sh_str_idx() == 2

    def test_flags(self, elf64, elf64_msb):
        assert FileHeader.parse(elf64).is_64bit
        assert FileHeader.parse(elf64).is_little_endian
        assert not FileHeader.parse(elf64_msb).is_little_endian


class TestGeometry:
    def test_ranges_match_declared_fields(self, elf64):
        header = FileHeader.parse(elf64)
        sh = header.sh_range()
        ph = header.ph_range()
        assert sh.start == header.e_shoff
        assert len(sh) == header.e_shentsize * header.e_shnum
        assert ph.start == header.e_phoff == 64
        assert len(ph) == 2 * 56
        assert sh.stop == len(elf64)

    def test_section_table_is_last(self, elf32):
        header = FileHeader.parse(elf32)
        assert header.sh_range().stop == len(elf32)
        assert header.e_shoff % 4 == 0

    def test_geometry_does_not_drift(self, elf64):
        header = FileHeader.parse(elf64)
        first = (header.sh_range(), header.ph_range(), header.sh_count(), header.ph_count())
        assert (header.sh_range(), header.ph_range(), header.sh_count(), header.ph_count()) == first

    def test_big_endian_phoff(self, elf64_msb):
        raw = struct.unpack_from(">Q", elf64_msb, 32)[0]
        assert FileHeader.parse(elf64_msb).ph_range().start == raw == 64
