"""
Sigil Error Taxonomy
=====================

Every failure the parsing engine reports on malformed input is an
:class:`ElfError`.  Each error carries a :class:`ElfErrorKind` so callers
can branch on the category (refuse to boot a module, skip an optional one)
without matching on message text.

Construction errors (any of these aborts :meth:`Image.parse`):
    - ``MALFORMED_IDENTIFICATION`` -- magic / class / data-encoding bytes
    - ``MISALIGNED_OFFSET``        -- record table not on its alignment boundary
    - ``BUFFER_TOO_SHORT``         -- declared offset + count past the buffer end

Lookup errors (raised after construction, only when a name is resolved):
    - ``INVALID_NAME``             -- string-table index out of range or unterminated
"""

from __future__ import annotations

import enum


class ElfErrorKind(str, enum.Enum):
    """Closed set of failure categories."""
    MALFORMED_IDENTIFICATION = "malformed_identification"
    MISALIGNED_OFFSET = "misaligned_offset"
    BUFFER_TOO_SHORT = "buffer_too_short"
    INVALID_NAME = "invalid_name"


class ElfError(Exception):
    """Base class for all ELF parsing failures.

    Attributes:
        kind: The failure category.
    """

    kind: ElfErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class MalformedIdentification(ElfError):
    """The buffer does not start with a supported ELF identification."""
    kind = ElfErrorKind.MALFORMED_IDENTIFICATION


class MisalignedOffset(ElfError):
    """A record offset is not a multiple of the record's alignment."""
    kind = ElfErrorKind.MISALIGNED_OFFSET


class BufferTooShort(ElfError):
    """The requested byte range runs past the end of the buffer."""
    kind = ElfErrorKind.BUFFER_TOO_SHORT


class InvalidName(ElfError):
    """A string-table lookup could not be satisfied."""
    kind = ElfErrorKind.INVALID_NAME
