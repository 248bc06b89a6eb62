"""Tests for the word abstraction."""

import struct

import pytest

from sigil.core.word import ELFCLASS32, ELFCLASS64, Word


class TestGeometry:
    def test_sizes(self):
        assert Word.W32.size == 4
        assert Word.W64.size == 8
        assert Word.W32.bits == 32
        assert Word.W64.mask == 0xFFFF_FFFF_FFFF_FFFF

    def test_struct_codes(self):
        assert struct.calcsize("<" + Word.W32.code) == 4
        assert struct.calcsize("<" + Word.W64.code) == 8

    def test_str(self):
        assert str(Word.W32) == "32-bit"
        assert str(Word.W64) == "64-bit"


class TestSelection:
    def test_from_class(self):
        assert Word.from_class(ELFCLASS32) is Word.W32
        assert Word.from_class(ELFCLASS64) is Word.W64
        assert Word.from_class(0) is None
        assert Word.from_class(3) is None

    def test_elf_class_round_trip(self):
        for word in Word:
            assert Word.from_class(word.elf_class) is word

    def test_native_matches_pointer_width(self):
        assert Word.native().size == struct.calcsize("P")

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, None),
            ("auto", None),
            ("AUTO ", None),
            ("32", Word.W32),
            (64, Word.W64),
        ],
    )
    def test_from_setting(self, value, expected):
        assert Word.from_setting(value) is expected

    def test_from_setting_native(self):
        assert Word.from_setting("native") is Word.native()

    def test_from_setting_rejects_unknown(self):
        with pytest.raises(ValueError):
            Word.from_setting("16")


class TestArithmetic:
    def test_add_wraps(self):
        assert Word.W32.add(0xFFFF_FFFF, 1) == 0
        assert Word.W64.add(0xFFFF_FFFF, 1) == 0x1_0000_0000

    def test_sub_wraps(self):
        assert Word.W32.sub(0, 1) == 0xFFFF_FFFF

    def test_mul_wraps(self):
        assert Word.W32.mul(0x1_0000, 0x1_0000) == 0

    def test_div_is_unsigned(self):
        assert Word.W32.div(-2, 2) == 0x7FFF_FFFF

    def test_div_by_zero(self):
        with pytest.raises(ZeroDivisionError):
            Word.W64.div(1, 0)

    def test_shifts(self):
        assert Word.W32.shl(1, 31) == 0x8000_0000
        assert Word.W32.shl(1, 32) == 1
        assert Word.W64.shr(0x8000_0000_0000_0000, 63) == 1
