"""
Zero-Copy Record Extraction
============================

Typed, read-only views over ELF records that live inside a caller-owned
byte buffer.  Nothing here copies record bytes: a :class:`Record` holds a
:class:`memoryview` plus an offset and decodes each field on access with
:meth:`struct.Struct.unpack_from`, so the buffer is read in place.

:func:`extract` is the single gateway from raw bytes to records.  It checks
alignment first and bounds second, and only then hands out views.  Every
other component obtains its records through it, so proving it correct
proves every caller in bounds.

Record layouts are described field-by-field the same way the ELF headers
are written down in the System V ABI; the character ``"W"`` stands for
the image's word (``I`` for ELF32, ``Q`` for ELF64).

References:
    - System V Application Binary Interface, Edition 4.1, chapter 4.
    - Python ``struct`` module documentation.
"""

from __future__ import annotations

import operator
import struct
from functools import lru_cache
from typing import Any, ClassVar, Generic, Iterator, Sequence, TypeVar, overload

from sigil.core.errors import BufferTooShort, MisalignedOffset
from sigil.core.word import Word

# Byte-order prefixes understood by :mod:`struct`
LITTLE: str = "<"
BIG: str = ">"

_WORD_CODE: str = "W"

R = TypeVar("R", bound="Record")

Buffer = bytes | bytearray | memoryview


# ---------------------------------------------------------------------------
# Field descriptor
# ---------------------------------------------------------------------------

class field:
    """Descriptor exposing one record field as a read-only attribute.

    The attribute name must match a name in the owning record's field
    table; decoding is delegated to :meth:`Record._read`.
    """
    __slots__ = ("name",)

    def __init__(self) -> None:
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    @overload
    def __get__(self, obj: None, objtype: type | None = None) -> field: ...

    @overload
    def __get__(self, obj: Record, objtype: type | None = None) -> Any: ...

    def __get__(self, obj: Record | None, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return obj._read(self.name)


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

class RecordLayout(Generic[R]):
    """Byte layout of one record type for one word width and byte order.

    Attributes:
        record: The :class:`Record` subclass this layout produces.
        word: Word width the layout was built for.
        byteorder: ``"<"`` or ``">"``.
        size: Record size in bytes (``size_of::<T>()``).
        alignment: Required alignment in bytes (widest scalar field).
        fields: Mapping of field name to ``(Struct, offset)``.
    """
    __slots__ = ("record", "word", "byteorder", "size", "alignment", "fields")

    def __init__(
        self,
        record: type[R],
        word: Word,
        byteorder: str,
        table: Sequence[tuple[str, str]],
    ) -> None:
        self.record = record
        self.word = word
        self.byteorder = byteorder
        self.fields: dict[str, tuple[struct.Struct, int]] = {}

        offset = 0
        alignment = 1
        for name, code in table:
            if code == _WORD_CODE:
                code = word.code
            item = struct.Struct(byteorder + code)
            self.fields[name] = (item, offset)
            offset += item.size
            # byte strings ("4s", "7s") are unaligned
            if not code.endswith("s"):
                alignment = max(alignment, item.size)

        self.size = offset
        self.alignment = alignment

    @property
    def name(self) -> str:
        prefix = "Elf32" if self.word is Word.W32 else "Elf64"
        return f"{prefix}_{self.record.__name__}"

    def __repr__(self) -> str:
        return (
            f"RecordLayout({self.name}, byteorder={self.byteorder!r}, "
            f"size={self.size}, alignment={self.alignment})"
        )


@lru_cache(maxsize=None)
def _build_layout(record: type[R], word: Word, byteorder: str) -> RecordLayout[R]:
    return RecordLayout(record, word, byteorder, record._fields(word))


# ---------------------------------------------------------------------------
# Record base
# ---------------------------------------------------------------------------

class Record:
    """Base class for a typed view over one on-disk ELF record.

    Subclasses declare ``_FIELDS`` (or override :meth:`_fields` when the
    order depends on the word width) and one :class:`field` attribute per
    entry.
    """
    __slots__ = ("_view", "_offset", "_layout")

    _FIELDS: ClassVar[tuple[tuple[str, str], ...]] = ()

    def __init__(self, view: memoryview, offset: int, layout: RecordLayout[Any]) -> None:
        self._view = view
        self._offset = offset
        self._layout = layout

    @classmethod
    def _fields(cls, word: Word) -> tuple[tuple[str, str], ...]:
        return cls._FIELDS

    @classmethod
    def layout(cls: type[R], word: Word, byteorder: str = LITTLE) -> RecordLayout[R]:
        """Return the (cached) layout for *word* and *byteorder*."""
        return _build_layout(cls, word, byteorder)

    def _read(self, name: str) -> Any:
        item, offset = self._layout.fields[name]
        return item.unpack_from(self._view, self._offset + offset)[0]

    # ------------------------------------------------------------------ #
    #  Introspection
    # ------------------------------------------------------------------ #

    @property
    def word(self) -> Word:
        return self._layout.word

    @property
    def byteorder(self) -> str:
        return self._layout.byteorder

    @property
    def size(self) -> int:
        return self._layout.size

    def raw(self) -> memoryview:
        """The record's own bytes, as a view into the source buffer."""
        return self._view[self._offset:self._offset + self._layout.size]

    def as_dict(self) -> dict[str, Any]:
        """Decode every field into a plain dictionary."""
        return {name: self._read(name) for name in self._layout.fields}

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.as_dict() == other.as_dict()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), tuple(self.as_dict().items())))

    def __repr__(self) -> str:
        body = ", ".join(
            f"{k}={v:#x}" if isinstance(v, int) else f"{k}={v!r}"
            for k, v in self.as_dict().items()
        )
        return f"{type(self).__name__}({body})"


# ---------------------------------------------------------------------------
# Record sequence
# ---------------------------------------------------------------------------

class RecordArray(Sequence[R]):
    """A contiguous run of ``n`` records, produced only by :func:`extract`.

    Items are built on demand as views; the array itself never copies.
    """
    __slots__ = ("_view", "_count", "_layout", "_offset")

    def __init__(
        self,
        view: memoryview,
        count: int,
        layout: RecordLayout[R],
        offset: int,
    ) -> None:
        self._view = view
        self._count = count
        self._layout = layout
        self._offset = offset

    def __len__(self) -> int:
        return self._count

    @overload
    def __getitem__(self, index: int) -> R: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[R]: ...

    def __getitem__(self, index: int | slice) -> R | Sequence[R]:
        size = self._layout.size
        if isinstance(index, slice):
            start, stop, step = index.indices(self._count)
            if step != 1:
                return [self[i] for i in range(start, stop, step)]
            stop = max(start, stop)
            return RecordArray(
                self._view[start * size:stop * size],
                stop - start,
                self._layout,
                self._offset + start * size,
            )

        i = operator.index(index)
        if i < 0:
            i += self._count
        if not 0 <= i < self._count:
            raise IndexError("record index out of range")
        return self._layout.record(self._view, i * size, self._layout)

    def __iter__(self) -> Iterator[R]:
        for i in range(self._count):
            yield self[i]

    @property
    def layout(self) -> RecordLayout[R]:
        return self._layout

    @property
    def offset(self) -> int:
        """Offset of the first record within the source buffer."""
        return self._offset

    @property
    def nbytes(self) -> int:
        return self._count * self._layout.size

    def __repr__(self) -> str:
        return (
            f"RecordArray({self._layout.name} x {self._count} "
            f"@ {self._offset:#x})"
        )


# ---------------------------------------------------------------------------
# Extraction primitive
# ---------------------------------------------------------------------------

def as_view(data: Buffer) -> memoryview:
    """Return a flat byte-oriented :class:`memoryview` over *data*."""
    view = data if isinstance(data, memoryview) else memoryview(data)
    if view.ndim != 1 or view.itemsize != 1:
        view = view.cast("B")
    return view


def extract(
    data: Buffer,
    offset: int,
    n: int,
    layout: RecordLayout[R],
) -> RecordArray[R]:
    """View ``n`` contiguous records of *layout* starting at *offset*.

    Checks run in a fixed order: alignment, then bounds.  Only when both
    pass is a view handed out over ``data[offset:offset + size * n]``.

    Caveats:
        ``n == 0`` is legal and yields an empty sequence.

    Args:
        data: The source buffer (any bytes-like object).
        offset: Byte offset of the first record.
        n: Number of records.
        layout: Record layout (see :meth:`Record.layout`).

    Returns:
        A :class:`RecordArray` borrowing *data*.

    Raises:
        MisalignedOffset: If ``offset`` is not a multiple of the layout's
            alignment.
        BufferTooShort: If the buffer cannot hold ``n`` records at
            ``offset`` (or *offset* / *n* is negative).
    """
    view = as_view(data)

    if offset % layout.alignment != 0:
        raise MisalignedOffset(
            f"offset {offset:#x} is not aligned on a {layout.alignment}-byte "
            f"boundary for {layout.name}"
        )

    needed = layout.size * n
    if offset < 0 or n < 0 or len(view) - offset < needed:
        raise BufferTooShort(
            f"buffer of {len(view)} bytes too short to contain {n} x "
            f"{layout.name} ({layout.size} bytes) at offset {offset:#x}"
        )

    return RecordArray(view[offset:offset + needed], n, layout, offset)
