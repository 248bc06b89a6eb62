"""
Sigil ELF Parsers
==================

Typed, zero-copy views over the structures of an ELF image.

Modules:
    - ``sigil.parsers.constants`` -- ELF constants and display names
    - ``sigil.parsers.file``      -- File header
    - ``sigil.parsers.section``   -- Section headers and string tables
    - ``sigil.parsers.program``   -- Program headers
    - ``sigil.parsers.image``     -- The aggregate image
"""

from sigil.parsers.file import FileHeader
from sigil.parsers.image import Image
from sigil.parsers.program import ProgramHeader
from sigil.parsers.section import SectionHeader, StrTable

__all__ = [
    "FileHeader",
    "Image",
    "ProgramHeader",
    "SectionHeader",
    "StrTable",
]
