"""
Sigil Configuration Management
===============================

Dataclass-based settings for the Sigil toolkit, persisted as TOML.

Layout of a ``sigil.toml`` file::

    [global]
    log_level = "DEBUG"
    log_file = "logs/sigil.log"
    log_json = true

    [loader]
    word = "64"              # auto | native | 32 | 64
    max_image_size = 268435456
    show_sections = true
    show_segments = true

Missing keys fall back to the dataclass defaults and unknown keys are
ignored, so older and newer files load alike.

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "sigil.toml"

_WORD_SETTINGS: frozenset[str] = frozenset({"auto", "native", "32", "64"})
_OUTPUT_FORMATS: frozenset[str] = frozenset({"console", "json"})


# ============================ Loader Settings ==============================


@dataclass(frozen=False, slots=True)
class LoaderConfig:
    """Settings for parsing and inspecting ELF images.

    ``word`` pins the accepted word width: ``auto`` takes it from each
    image's class byte, ``native`` requires the host pointer width.
    ``output_format`` is ``console`` or ``json`` (the report on stdout).
    """

    word: str = "auto"
    max_image_size: int = 268_435_456  # 256 MiB
    show_sections: bool = True
    show_segments: bool = True
    output_format: str = "console"

    def __post_init__(self) -> None:
        self.word = str(self.word).strip().lower()
        if self.word not in _WORD_SETTINGS:
            raise ValueError(
                f"loader.word must be one of {sorted(_WORD_SETTINGS)}, "
                f"got {self.word!r}"
            )
        if self.max_image_size <= 0:
            raise ValueError("loader.max_image_size must be positive")
        self.output_format = str(self.output_format).strip().lower()
        if self.output_format not in _OUTPUT_FORMATS:
            raise ValueError(
                f"loader.output_format must be one of {sorted(_OUTPUT_FORMATS)}, "
                f"got {self.output_format!r}"
            )


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Settings shared by every Sigil component."""

    log_level: str = "INFO"
    log_file: str | None = None
    log_json: bool = False
    output_dir: str = "output"  # base for relative report paths
    debug: bool = False
    version: str = "1.0.0"


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class SigilConfig:
    """Top-level configuration.

    Usage:
        >>> config = SigilConfig.load()               # default path
        >>> config = SigilConfig.load("custom.toml")  # explicit path
        >>> config.loader.word
        'auto'
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    loader: LoaderConfig = field(default_factory=LoaderConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> SigilConfig:
        """Load configuration from a TOML file.

        Args:
            path: Path to a TOML file.  Defaults to ``<project_root>/sigil.toml``.

        Returns:
            A populated :class:`SigilConfig`.

        Raises:
            FileNotFoundError: If an explicitly given *path* does not exist.
            ValueError: If a setting has an invalid value.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            loader=cls._build_section(LoaderConfig, raw.get("loader", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the configuration tree to a plain dictionary."""
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate dataclass *cls* from the keys it declares."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)
