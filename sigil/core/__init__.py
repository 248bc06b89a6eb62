"""
Sigil Core
===========

Error taxonomy, word abstraction, the record extraction primitive, result
models and the inspection engine.
"""

from sigil.core.errors import (
    BufferTooShort,
    ElfError,
    ElfErrorKind,
    InvalidName,
    MalformedIdentification,
    MisalignedOffset,
)
from sigil.core.extract import Record, RecordArray, RecordLayout, extract
from sigil.core.word import Word

__all__ = [
    "BufferTooShort",
    "ElfError",
    "ElfErrorKind",
    "InvalidName",
    "MalformedIdentification",
    "MisalignedOffset",
    "Record",
    "RecordArray",
    "RecordLayout",
    "Word",
    "extract",
]
