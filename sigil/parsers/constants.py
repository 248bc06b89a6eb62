"""
ELF Constants
==============

Numeric constants from the ELF identification block, file header, section
header and program header, with the display-name tables used by the
diagnostics output.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
    - Linux man page: elf(5).
"""

from __future__ import annotations

from sigil.core.word import ELFCLASS32, ELFCLASS64

# ---------------------------------------------------------------------------
# Identification (e_ident)
# ---------------------------------------------------------------------------

ELF_MAGIC: bytes = b"\x7fELF"
EI_NIDENT: int = 16

EI_MAG0: int = 0
EI_CLASS: int = 4
EI_DATA: int = 5
EI_VERSION: int = 6
EI_OSABI: int = 7
EI_ABIVERSION: int = 8

ELFCLASSNONE: int = 0

_CLASS_NAMES: dict[int, str] = {
    ELFCLASSNONE: "NONE",
    ELFCLASS32: "ELF32",
    ELFCLASS64: "ELF64",
}

# Data encoding (endianness)
ELFDATANONE: int = 0
ELFDATA2LSB: int = 1  # Little-endian
ELFDATA2MSB: int = 2  # Big-endian

_DATA_NAMES: dict[int, str] = {
    ELFDATANONE: "NONE",
    ELFDATA2LSB: "2's complement, little endian",
    ELFDATA2MSB: "2's complement, big endian",
}

EV_NONE: int = 0
EV_CURRENT: int = 1

ELFOSABI_SYSV: int = 0
ELFOSABI_HPUX: int = 1
ELFOSABI_NETBSD: int = 2
ELFOSABI_LINUX: int = 3
ELFOSABI_FREEBSD: int = 9
ELFOSABI_ARM: int = 97
ELFOSABI_STANDALONE: int = 255

_OSABI_NAMES: dict[int, str] = {
    ELFOSABI_SYSV: "UNIX - System V",
    ELFOSABI_HPUX: "UNIX - HP-UX",
    ELFOSABI_NETBSD: "UNIX - NetBSD",
    ELFOSABI_LINUX: "UNIX - GNU",
    ELFOSABI_FREEBSD: "UNIX - FreeBSD",
    ELFOSABI_ARM: "ARM",
    ELFOSABI_STANDALONE: "Standalone App",
}

# ---------------------------------------------------------------------------
# File header (e_type, e_machine)
# ---------------------------------------------------------------------------

ET_NONE: int = 0
ET_REL: int = 1   # Relocatable
ET_EXEC: int = 2  # Executable
ET_DYN: int = 3   # Shared object / PIE
ET_CORE: int = 4  # Core dump

_ET_NAMES: dict[int, str] = {
    ET_NONE: "NONE",
    ET_REL: "REL (Relocatable)",
    ET_EXEC: "EXEC (Executable)",
    ET_DYN: "DYN (Shared object)",
    ET_CORE: "CORE (Core dump)",
}

EM_NONE: int = 0
EM_SPARC: int = 2
EM_386: int = 3
EM_MIPS: int = 8
EM_PPC: int = 20
EM_PPC64: int = 21
EM_ARM: int = 40
EM_X86_64: int = 62
EM_AARCH64: int = 183
EM_RISCV: int = 243

_EM_NAMES: dict[int, str] = {
    EM_NONE: "None",
    EM_SPARC: "SPARC",
    EM_386: "x86",
    EM_MIPS: "MIPS",
    EM_PPC: "PowerPC",
    EM_PPC64: "PowerPC64",
    EM_ARM: "ARM",
    EM_X86_64: "x86_64",
    EM_AARCH64: "AArch64",
    EM_RISCV: "RISC-V",
}

# ---------------------------------------------------------------------------
# Section headers
# ---------------------------------------------------------------------------

# Special section indices
SHN_UNDEF: int = 0
SHN_LORESERVE: int = 0xFF00
SHN_ABS: int = 0xFFF1
SHN_COMMON: int = 0xFFF2
SHN_XINDEX: int = 0xFFFF

SHT_NULL: int = 0
SHT_PROGBITS: int = 1
SHT_SYMTAB: int = 2
SHT_STRTAB: int = 3
SHT_RELA: int = 4
SHT_HASH: int = 5
SHT_DYNAMIC: int = 6
SHT_NOTE: int = 7
SHT_NOBITS: int = 8
SHT_REL: int = 9
SHT_SHLIB: int = 10
SHT_DYNSYM: int = 11
SHT_INIT_ARRAY: int = 14
SHT_FINI_ARRAY: int = 15
SHT_PREINIT_ARRAY: int = 16
SHT_GROUP: int = 17
SHT_SYMTAB_SHNDX: int = 18
SHT_GNU_HASH: int = 0x6FFFFFF6
SHT_GNU_VERDEF: int = 0x6FFFFFFD
SHT_GNU_VERNEED: int = 0x6FFFFFFE
SHT_GNU_VERSYM: int = 0x6FFFFFFF

_SHT_NAMES: dict[int, str] = {
    SHT_NULL: "NULL",
    SHT_PROGBITS: "PROGBITS",
    SHT_SYMTAB: "SYMTAB",
    SHT_STRTAB: "STRTAB",
    SHT_RELA: "RELA",
    SHT_HASH: "HASH",
    SHT_DYNAMIC: "DYNAMIC",
    SHT_NOTE: "NOTE",
    SHT_NOBITS: "NOBITS",
    SHT_REL: "REL",
    SHT_SHLIB: "SHLIB",
    SHT_DYNSYM: "DYNSYM",
    SHT_INIT_ARRAY: "INIT_ARRAY",
    SHT_FINI_ARRAY: "FINI_ARRAY",
    SHT_PREINIT_ARRAY: "PREINIT_ARRAY",
    SHT_GROUP: "GROUP",
    SHT_SYMTAB_SHNDX: "SYMTAB_SHNDX",
    SHT_GNU_HASH: "GNU_HASH",
    SHT_GNU_VERDEF: "GNU_VERDEF",
    SHT_GNU_VERNEED: "GNU_VERNEED",
    SHT_GNU_VERSYM: "GNU_VERSYM",
}

# Section header flags
SHF_WRITE: int = 0x1
SHF_ALLOC: int = 0x2
SHF_EXECINSTR: int = 0x4
SHF_MERGE: int = 0x10
SHF_STRINGS: int = 0x20
SHF_INFO_LINK: int = 0x40
SHF_LINK_ORDER: int = 0x80
SHF_GROUP: int = 0x200
SHF_TLS: int = 0x400

# (flag, letter) in readelf order
_SHF_LETTERS: tuple[tuple[int, str], ...] = (
    (SHF_WRITE, "W"),
    (SHF_ALLOC, "A"),
    (SHF_EXECINSTR, "X"),
    (SHF_MERGE, "M"),
    (SHF_STRINGS, "S"),
    (SHF_INFO_LINK, "I"),
    (SHF_LINK_ORDER, "L"),
    (SHF_GROUP, "G"),
    (SHF_TLS, "T"),
)

# ---------------------------------------------------------------------------
# Program headers
# ---------------------------------------------------------------------------

PT_NULL: int = 0
PT_LOAD: int = 1
PT_DYNAMIC: int = 2
PT_INTERP: int = 3
PT_NOTE: int = 4
PT_SHLIB: int = 5
PT_PHDR: int = 6
PT_TLS: int = 7
PT_GNU_EH_FRAME: int = 0x6474E550
PT_GNU_STACK: int = 0x6474E551
PT_GNU_RELRO: int = 0x6474E552
PT_GNU_PROPERTY: int = 0x6474E553

_PT_NAMES: dict[int, str] = {
    PT_NULL: "NULL",
    PT_LOAD: "LOAD",
    PT_DYNAMIC: "DYNAMIC",
    PT_INTERP: "INTERP",
    PT_NOTE: "NOTE",
    PT_SHLIB: "SHLIB",
    PT_PHDR: "PHDR",
    PT_TLS: "TLS",
    PT_GNU_EH_FRAME: "GNU_EH_FRAME",
    PT_GNU_STACK: "GNU_STACK",
    PT_GNU_RELRO: "GNU_RELRO",
    PT_GNU_PROPERTY: "GNU_PROPERTY",
}

# Program header flags
PF_X: int = 0x1  # Execute
PF_W: int = 0x2  # Write
PF_R: int = 0x4  # Read


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def class_name(value: int) -> str:
    return _CLASS_NAMES.get(value, f"unknown({value})")


def data_name(value: int) -> str:
    return _DATA_NAMES.get(value, f"unknown({value})")


def osabi_name(value: int) -> str:
    return _OSABI_NAMES.get(value, f"unknown({value})")


def type_name(value: int) -> str:
    return _ET_NAMES.get(value, f"unknown({value:#x})")


def machine_name(value: int) -> str:
    return _EM_NAMES.get(value, f"unknown({value})")


def section_type_name(value: int) -> str:
    return _SHT_NAMES.get(value, f"0x{value:x}")


def segment_type_name(value: int) -> str:
    return _PT_NAMES.get(value, f"0x{value:x}")


def section_flags_str(flags: int) -> str:
    """Convert a section flags bitmask to a readelf-style string.

    Args:
        flags: Section header flags value (sh_flags).

    Returns:
        String like ``"WAX"`` for Write+Alloc+Exec, ``"-"`` when empty.
    """
    letters = "".join(letter for bit, letter in _SHF_LETTERS if flags & bit)
    return letters or "-"


def segment_flags_str(flags: int) -> str:
    """Convert program header flags to a readable string.

    Args:
        flags: Program header flags value (p_flags).

    Returns:
        String like ``"RWX"`` for Read+Write+Execute.
    """
    parts: list[str] = []
    if flags & PF_R:
        parts.append("R")
    if flags & PF_W:
        parts.append("W")
    if flags & PF_X:
        parts.append("X")
    return "".join(parts) if parts else "-"
