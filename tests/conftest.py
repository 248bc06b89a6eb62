"""Shared fixtures: a small in-memory ELF image builder."""

from __future__ import annotations

import struct
from typing import Any, Sequence

import pytest

from sigil.core.extract import LITTLE
from sigil.core.word import Word
from sigil.parsers.constants import (
    EM_X86_64,
    ET_EXEC,
    PF_R,
    PF_W,
    PF_X,
    PT_LOAD,
    PT_NOTE,
    SHF_ALLOC,
    SHF_EXECINSTR,
    SHF_WRITE,
    SHT_NOBITS,
    SHT_PROGBITS,
    SHT_STRTAB,
)

ENTRY: int = 0x401000
TEXT: bytes = bytes(range(0x90, 0xA0))

# Offsets of the header fields tests patch directly
E_SHOFF = {Word.W32: 32, Word.W64: 40}
E_PHOFF = {Word.W32: 28, Word.W64: 32}
E_SHSTRNDX = {Word.W32: 50, Word.W64: 62}


def _pack(byteorder: str, word: Word, fmt: str, *values: Any) -> bytes:
    return struct.pack(byteorder + fmt.replace("W", word.code), *values)


def build_elf(
    word: Word = Word.W64,
    byteorder: str = LITTLE,
    sections: Sequence[tuple] = (),
    segments: Sequence[dict[str, int]] = (),
    *,
    entry: int = ENTRY,
    machine: int = EM_X86_64,
    elf_type: int = ET_EXEC,
) -> bytearray:
    """Assemble an ELF image.

    Layout: file header, program headers, section contents, the
    ``.shstrtab`` contents, then the section header table (word-aligned,
    last in the file).  A NULL section is prepended and ``.shstrtab`` is
    appended to *sections*.

    Args:
        sections: ``(name, sh_type, sh_flags, data[, sh_addr])`` tuples.
        segments: Dicts with any of ``type flags offset vaddr paddr filesz
            memsz align``.
    """
    ehsize = 52 if word is Word.W32 else 64
    phentsize = 32 if word is Word.W32 else 56
    shentsize = 40 if word is Word.W32 else 64

    names = bytearray(b"\x00")
    name_offsets: list[int] = []
    for entry_ in list(sections) + [(".shstrtab",)]:
        name_offsets.append(len(names))
        names += entry_[0].encode() + b"\x00"

    phoff = ehsize if segments else 0
    cursor = ehsize + phentsize * len(segments)
    body = bytearray()
    headers: list[bytes] = [_pack(byteorder, word, "IIWWWWIIWW", *([0] * 10))]

    for idx, sec in enumerate(sections):
        name, sh_type, sh_flags, data = sec[:4]
        addr = sec[4] if len(sec) > 4 else 0
        offset = cursor + len(body)
        if sh_type != SHT_NOBITS:
            body += data
        headers.append(_pack(
            byteorder, word, "IIWWWWIIWW",
            name_offsets[idx], sh_type, sh_flags, addr, offset, len(data),
            0, 0, word.size, 0,
        ))

    strtab_offset = cursor + len(body)
    body += names
    headers.append(_pack(
        byteorder, word, "IIWWWWIIWW",
        name_offsets[-1], SHT_STRTAB, 0, 0, strtab_offset, len(names), 0, 0, 1, 0,
    ))

    shoff = cursor + len(body)
    pad = (-shoff) % word.size
    body += b"\x00" * pad
    shoff += pad
    shnum = len(headers)

    ident = b"\x7fELF" + bytes([word.elf_class, 1 if byteorder == LITTLE else 2, 1, 0, 0]) + bytes(7)
    header = ident + _pack(
        byteorder, word, "HHIWWWIHHHHHH",
        elf_type, machine, 1, entry, phoff, shoff, 0,
        ehsize, phentsize, len(segments), shentsize, shnum, shnum - 1,
    )

    phdrs = bytearray()
    for seg in segments:
        p = {
            "type": PT_LOAD, "flags": PF_R, "offset": 0, "vaddr": 0, "paddr": 0,
            "filesz": 0, "memsz": 0, "align": 0x1000,
        }
        p.update(seg)
        if word is Word.W32:
            phdrs += _pack(
                byteorder, word, "IWWWWWIW",
                p["type"], p["offset"], p["vaddr"], p["paddr"],
                p["filesz"], p["memsz"], p["flags"], p["align"],
            )
        else:
            phdrs += _pack(
                byteorder, word, "IIWWWWWW",
                p["type"], p["flags"], p["offset"], p["vaddr"], p["paddr"],
                p["filesz"], p["memsz"], p["align"],
            )

    return bytearray(header + phdrs + body + b"".join(headers))


def sample_image(word: Word = Word.W64, byteorder: str = LITTLE) -> bytearray:
    """Three sections (NULL, ``.text``, ``.shstrtab``) and two segments.

    The first ``PT_LOAD`` maps the file header and program headers; the
    ``PT_NOTE`` segment carries no bytes.
    """
    ehsize = 52 if word is Word.W32 else 64
    phentsize = 32 if word is Word.W32 else 56
    return build_elf(
        word,
        byteorder,
        sections=[(".text", SHT_PROGBITS, SHF_ALLOC | SHF_EXECINSTR, TEXT, ENTRY)],
        segments=[
            {
                "type": PT_LOAD, "flags": PF_R | PF_X, "vaddr": 0x400000,
                "paddr": 0x400000, "filesz": ehsize + 2 * phentsize,
                "memsz": 0x2000,
            },
            {"type": PT_NOTE, "flags": PF_R},
        ],
    )


@pytest.fixture
def elf64() -> bytearray:
    return sample_image(Word.W64)


@pytest.fixture
def elf32() -> bytearray:
    return sample_image(Word.W32)


@pytest.fixture
def elf64_msb() -> bytearray:
    return sample_image(Word.W64, ">")


@pytest.fixture
def rich_elf() -> bytearray:
    """A 64-bit image with text, data and bss sections."""
    return build_elf(
        sections=[
            (".text", SHT_PROGBITS, SHF_ALLOC | SHF_EXECINSTR, TEXT, ENTRY),
            (".data", SHT_PROGBITS, SHF_ALLOC | SHF_WRITE, b"\x01\x02\x03\x04", 0x402000),
            (".bss", SHT_NOBITS, SHF_ALLOC | SHF_WRITE, bytes(64), 0x402004),
        ],
        segments=[
            {"type": PT_LOAD, "flags": PF_R | PF_X, "vaddr": 0x400000, "filesz": 0x40, "memsz": 0x40},
            {"type": PT_LOAD, "flags": PF_R | PF_W, "vaddr": 0x402000, "filesz": 0x10, "memsz": 0x60},
        ],
    )


@pytest.fixture
def elf_file(tmp_path, elf64):
    path = tmp_path / "sample.elf"
    path.write_bytes(bytes(elf64))
    return path
