"""
ELF Word Abstraction
=====================

The ELF format threads one native integer width through the file header,
section headers and program headers: 32 bits for ``ELFCLASS32`` objects,
64 bits for ``ELFCLASS64`` objects.  :class:`Word` names that width and
offers the handful of operations the parser needs -- struct format codes
for decoding and wrapping arithmetic that behaves like the fixed-width
unsigned integers of the target.

The width is picked once per image, from the identification class byte,
unless the caller pins one explicitly (e.g. :meth:`Word.native` to accept
only images matching the host pointer width).
"""

from __future__ import annotations

import enum
import struct

# Identification class byte values (e_ident[EI_CLASS])
ELFCLASS32: int = 1
ELFCLASS64: int = 2


class Word(enum.Enum):
    """Unsigned word width of an ELF image."""
    W32 = 32
    W64 = 64

    # ------------------------------------------------------------------ #
    #  Geometry
    # ------------------------------------------------------------------ #

    @property
    def bits(self) -> int:
        return self.value

    @property
    def size(self) -> int:
        """Width in bytes."""
        return self.value // 8

    @property
    def mask(self) -> int:
        return (1 << self.value) - 1

    @property
    def code(self) -> str:
        """:mod:`struct` format character for an unsigned word."""
        return "I" if self is Word.W32 else "Q"

    @property
    def elf_class(self) -> int:
        """The ``EI_CLASS`` byte identifying this width."""
        return ELFCLASS32 if self is Word.W32 else ELFCLASS64

    # ------------------------------------------------------------------ #
    #  Selection
    # ------------------------------------------------------------------ #

    @classmethod
    def from_class(cls, elf_class: int) -> Word | None:
        """Map an ``EI_CLASS`` byte to a width, or ``None`` if unsupported."""
        if elf_class == ELFCLASS32:
            return cls.W32
        if elf_class == ELFCLASS64:
            return cls.W64
        return None

    @classmethod
    def native(cls) -> Word:
        """The width of a pointer on the running interpreter."""
        return cls.W64 if struct.calcsize("P") == 8 else cls.W32

    @classmethod
    def from_setting(cls, value: str | int | None) -> Word | None:
        """Resolve a configuration value (``auto``, ``native``, ``32``, ``64``).

        ``auto`` and ``None`` return ``None``: the width is then taken from
        the image itself.

        Raises:
            ValueError: For any other value.
        """
        if value is None:
            return None
        text = str(value).strip().lower()
        if text == "auto":
            return None
        if text == "native":
            return cls.native()
        if text == "32":
            return cls.W32
        if text == "64":
            return cls.W64
        raise ValueError(f"unknown word setting: {value!r}")

    # ------------------------------------------------------------------ #
    #  Wrapping arithmetic
    # ------------------------------------------------------------------ #

    def wrap(self, value: int) -> int:
        """Reduce *value* modulo 2**bits."""
        return value & self.mask

    def add(self, a: int, b: int) -> int:
        return self.wrap(a + b)

    def sub(self, a: int, b: int) -> int:
        return self.wrap(a - b)

    def mul(self, a: int, b: int) -> int:
        return self.wrap(a * b)

    def div(self, a: int, b: int) -> int:
        """Unsigned floor division.

        Raises:
            ZeroDivisionError: If *b* is zero.
        """
        return self.wrap(a) // self.wrap(b)

    def shl(self, a: int, n: int) -> int:
        return self.wrap(a << (n % self.bits))

    def shr(self, a: int, n: int) -> int:
        return self.wrap(a) >> (n % self.bits)

    def __str__(self) -> str:
        return f"{self.bits}-bit"
