"""
Sigil CLI -- ELF Image Inspector
=================================

Click-based command-line interface over the Sigil inspection engine.

Usage::

    # Header, sections, program headers and load plan
    sigil /boot/vmlinux

    # Require a 32-bit image
    sigil kernel.elf --word 32

    # Program headers only
    sigil kernel.elf --no-sections

    # Machine-readable output
    sigil kernel.elf --json
    sigil kernel.elf --output report.json

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from shared.config import SigilConfig
from shared.console import SigilConsole
from shared.logger import SigilLogger

from sigil import __version__
from sigil.core.engine import InspectionEngine
from sigil.output.console import SigilConsoleOutput
from sigil.output.report import SigilReportGenerator


@click.command("sigil")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--word", "-w",
    type=click.Choice(["auto", "32", "64", "native"], case_sensitive=False),
    default=None,
    help="Required word width.  Default: loader.word from the config (auto).",
)
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print the report as JSON to stdout.  Default: loader.output_format.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write a JSON report to this path (relative paths land in output_dir).",
)
@click.option(
    "--sections/--no-sections",
    default=None,
    help="Show the section header table.",
)
@click.option(
    "--segments/--no-segments",
    default=None,
    help="Show program headers and the load plan.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a sigil.toml configuration file.",
)
@click.version_option(__version__, prog_name="sigil")
def sigil_cli(
    path: str,
    word: str | None,
    json_output: bool,
    output_path: str | None,
    sections: bool | None,
    segments: bool | None,
    verbose: bool,
    config_path: str | None,
) -> None:
    """Sigil -- ELF Image Inspector.

    Parse the file header, section headers and program headers of a 32-bit
    or 64-bit ELF image and show how its loadable segments would be placed.

    PATH is the ELF image to inspect.  Exits with status 1 if the image is
    malformed.
    """
    try:
        config = SigilConfig.load(config_path)
    except (OSError, ValueError) as exc:
        SigilConsole().error(f"Invalid configuration: {exc}")
        sys.exit(2)

    json_output = json_output or config.loader.output_format == "json"
    console = SigilConsole(quiet=json_output)

    settings = config.global_settings
    logger = SigilLogger(
        "cli",
        log_level="DEBUG" if verbose or settings.debug else settings.log_level,
        log_file=settings.log_file,
        json_logs=settings.log_json,
        console_output=verbose,
    )

    if word is not None:
        config.loader.word = word.lower()
    engine = InspectionEngine(config=config, logger=logger)

    try:
        summary = asyncio.run(engine.inspect(path))
    except KeyboardInterrupt:
        console.warning("Inspection interrupted by user.")
        sys.exit(130)

    report_gen = SigilReportGenerator()

    if json_output:
        click.echo(report_gen.to_json(summary))
    else:
        show_sections = config.loader.show_sections if sections is None else sections
        show_segments = config.loader.show_segments if segments is None else segments
        SigilConsoleOutput(
            console=console,
            show_sections=show_sections,
            show_segments=show_segments,
        ).display(summary)

    if output_path:
        report_path = report_gen.generate_json(
            summary, _resolve_output(output_path, settings.output_dir)
        )
        console.success(f"JSON report saved: {report_path}")

    if not summary.ok:
        sys.exit(1)


def _resolve_output(output_path: str, output_dir: str) -> Path:
    """Place a relative report path under the configured output directory."""
    path = Path(output_path)
    if path.is_absolute():
        return path
    return Path(output_dir) / path


def main() -> None:
    """Entry point for the ``sigil`` console script and ``python -m sigil``."""
    sigil_cli()


if __name__ == "__main__":
    main()
