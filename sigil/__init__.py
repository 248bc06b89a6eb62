"""
Sigil -- ELF Image Parsing Engine
===================================

Sigil inspects and prepares Executable and Linkable Format (ELF) images
for loading: kernels, kernel modules and user programs.  It parses the
file header, section header table and program header table of 32-bit and
64-bit images, in either byte order, directly over the caller's buffer.

Capabilities:
    - Word-generic file, section and program header views
    - Zero-copy record extraction with alignment and bounds checks
    - Section-name resolution through the section-name string table
    - Loadable-segment enumeration and load planning
    - Rich console diagnostics and JSON reports

References:
    - TIS Committee. (1995). ELF Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
"""

from sigil.core.errors import (
    BufferTooShort,
    ElfError,
    ElfErrorKind,
    InvalidName,
    MalformedIdentification,
    MisalignedOffset,
)
from sigil.core.extract import extract
from sigil.core.word import Word
from sigil.parsers.file import FileHeader
from sigil.parsers.image import Image
from sigil.parsers.program import ProgramHeader
from sigil.parsers.section import SectionHeader, StrTable

__version__ = "1.0.0"
__all__ = [
    "BufferTooShort",
    "ElfError",
    "ElfErrorKind",
    "FileHeader",
    "Image",
    "InvalidName",
    "MalformedIdentification",
    "MisalignedOffset",
    "ProgramHeader",
    "SectionHeader",
    "StrTable",
    "Word",
    "extract",
]
