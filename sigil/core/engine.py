"""
Sigil Inspection Engine
========================

Reads an ELF file, parses it into an :class:`~sigil.parsers.image.Image`
and condenses the result into an :class:`~sigil.core.models.ImageSummary`
for the console and report front ends.

Pipeline:
    1. Read the file (bounded by ``loader.max_image_size``)
    2. Parse the image with the configured word width
    3. Summarise the file header
    4. Resolve section names through the section-name string table
    5. Summarise program headers
    6. Plan the placement of every ``PT_LOAD`` segment

Parse failures are logged and reported in the summary (``ok=False`` plus
the error kind) rather than raised; the caller decides whether a bad image
is fatal.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from shared.config import SigilConfig
from shared.logger import SigilLogger

from sigil.core.errors import ElfError
from sigil.core.models import (
    HeaderSummary,
    ImageSummary,
    LoadMapping,
    SectionSummary,
    SegmentSummary,
)
from sigil.core.word import Word
from sigil.parsers.constants import (
    machine_name,
    osabi_name,
    type_name,
)
from sigil.parsers.file import FileHeader
from sigil.parsers.image import Image


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------

def summarize_header(header: FileHeader) -> HeaderSummary:
    """Decode *header* into a :class:`HeaderSummary`."""
    return HeaderSummary(
        bits=header.word.bits,
        endian="little" if header.is_little_endian else "big",
        osabi=osabi_name(header.ei_osabi),
        type=type_name(header.e_type),
        machine=machine_name(header.e_machine),
        entry_point=header.e_entry,
        sh_offset=header.sh_range().start,
        sh_entsize=header.e_shentsize,
        sh_count=header.sh_count(),
        sh_str_idx=header.sh_str_idx(),
        ph_offset=header.ph_range().start,
        ph_entsize=header.e_phentsize,
        ph_count=header.ph_count(),
        flags=header.e_flags,
    )


def plan_load(image: Image) -> list[LoadMapping]:
    """Describe how a loader would place each ``PT_LOAD`` segment.

    Raises:
        BufferTooShort: If a segment's file bytes run past the image.
    """
    plan: list[LoadMapping] = []
    for ph in image.loadable_segments():
        # bounds check only; the view itself is not needed here
        image.segment_data(ph)
        plan.append(LoadMapping(
            vaddr=ph.p_vaddr,
            file_offset=ph.p_offset,
            file_size=ph.p_filesz,
            zero_fill=ph.bss_size(),
            flags=ph.flags_str,
            align=ph.p_align,
        ))
    return plan


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class InspectionEngine:
    """Orchestrates reading, parsing and summarising ELF images.

    Usage::

        engine = InspectionEngine()
        summary = engine.inspect_sync("/boot/vmlinux")
        if summary.ok:
            print(summary.header.entry_point)
    """

    def __init__(
        self,
        config: SigilConfig | None = None,
        logger: SigilLogger | None = None,
        word: Word | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: Sigil configuration.  Defaults are used if omitted.
            logger: Logger instance.  A new one is created if omitted.
            word: Required word width; overrides ``loader.word``.
        """
        self._config: SigilConfig = config or SigilConfig()
        self._logger: SigilLogger = logger or SigilLogger(
            "engine",
            log_level=self._config.global_settings.log_level,
            console_output=False,
        )
        self._word: Word | None = (
            word if word is not None else Word.from_setting(self._config.loader.word)
        )

    @property
    def word(self) -> Word | None:
        return self._word

    # ------------------------------------------------------------------ #
    #  Entry points
    # ------------------------------------------------------------------ #

    async def inspect(self, file_path: str | Path) -> ImageSummary:
        """Read and inspect the image at *file_path*.

        The CPU-bound parse runs in the default executor.
        """
        path = Path(file_path)
        summary = ImageSummary(path=str(path))
        self._logger.info("Inspecting %s", path)

        try:
            file_size = path.stat().st_size
        except OSError as exc:
            summary.error = f"Cannot read {path}: {exc}"
            self._logger.error(summary.error)
            return summary

        max_size = self._config.loader.max_image_size
        if file_size > max_size:
            summary.size = file_size
            summary.error = (
                f"Image too large: {file_size:,} bytes (max: {max_size:,} bytes)"
            )
            self._logger.error(summary.error)
            return summary

        try:
            data = path.read_bytes()
        except OSError as exc:
            summary.error = f"Cannot read {path}: {exc}"
            self._logger.error(summary.error)
            return summary

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self._run_pipeline, data, str(path.resolve())
        )

    def inspect_sync(self, file_path: str | Path) -> ImageSummary:
        """Synchronous wrapper around :meth:`inspect`.

        When called from inside a running event loop the coroutine is
        driven on a worker thread.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop and loop.is_running():
            import concurrent.futures
            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
                return pool.submit(asyncio.run, self.inspect(file_path)).result()
        return asyncio.run(self.inspect(file_path))

    def inspect_data(self, data: bytes | bytearray | memoryview, file_path: str = "<memory>") -> ImageSummary:
        """Inspect an image already in memory."""
        return self._run_pipeline(data, file_path)

    def parse(self, data: bytes | bytearray | memoryview) -> Image:
        """Parse *data* with the engine's word setting.

        Raises:
            ElfError: If the image is malformed.
        """
        with self._logger.operation("parse"), self._logger.timed("image parse"):
            image = Image.parse(data, self._word)
        self._logger.debug(
            "Parsed %s image: %d sections, %d program headers",
            image.word,
            len(image.sections),
            len(image.program_headers),
        )
        return image

    # ------------------------------------------------------------------ #
    #  Pipeline
    # ------------------------------------------------------------------ #

    def _run_pipeline(self, data: bytes | bytearray | memoryview, file_path: str) -> ImageSummary:
        summary = ImageSummary(path=file_path, size=len(memoryview(data)))

        try:
            image = self.parse(data)
        except ElfError as exc:
            summary.error_kind = exc.kind
            summary.error = exc.message
            self._logger.error(
                "Failed to parse %s: %s", file_path, exc, kind=exc.kind.value
            )
            return summary

        summary.header = summarize_header(image.header)
        summary.sections = self._summarize_sections(image, summary.warnings)
        summary.segments = [
            SegmentSummary(
                index=idx,
                type=ph.type_name,
                flags=ph.flags_str,
                offset=ph.p_offset,
                vaddr=ph.p_vaddr,
                paddr=ph.p_paddr,
                filesz=ph.p_filesz,
                memsz=ph.p_memsz,
                align=ph.p_align,
            )
            for idx, ph in enumerate(image.program_headers)
        ]

        with self._logger.operation("load_plan"):
            try:
                summary.load_plan = plan_load(image)
            except ElfError as exc:
                summary.warnings.append(f"load plan unavailable: {exc}")
                self._logger.warning("Load plan unavailable: %s", exc)

        summary.ok = True
        self._logger.info(
            "%s: %d-bit %s, %d sections, %d segments (%d loadable)",
            file_path,
            summary.header.bits,
            summary.header.machine,
            len(summary.sections),
            len(summary.segments),
            len(summary.load_plan),
        )
        return summary

    def _summarize_sections(self, image: Image, warnings: list[str]) -> list[SectionSummary]:
        """Summarise section headers, resolving names where possible.

        Unresolvable names are reported as warnings; they never fail the
        inspection.
        """
        table = None
        if len(image.sections):
            try:
                table = image.sh_str_table()
            except ElfError as exc:
                warnings.append(f"section names unavailable: {exc}")
                self._logger.warning("Section names unavailable: %s", exc)

        result: list[SectionSummary] = []
        for idx, sh in enumerate(image.sections):
            name = ""
            if table is not None:
                try:
                    name = table.name_at(sh.sh_name)
                except ElfError as exc:
                    warnings.append(f"section {idx}: {exc}")
                    name = "<invalid>"
            result.append(SectionSummary(
                index=idx,
                name=name,
                type=sh.type_name,
                flags=sh.flags_str,
                addr=sh.sh_addr,
                offset=sh.sh_offset,
                size=sh.sh_size,
                link=sh.sh_link,
                info=sh.sh_info,
                addralign=sh.sh_addralign,
                entsize=sh.sh_entsize,
            ))
        return result
