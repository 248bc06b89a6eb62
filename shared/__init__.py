"""
Sigil Shared Module
====================

Configuration, logging and console utilities shared by the Sigil engine
and its command-line front end.
"""

from shared.config import GlobalConfig, LoaderConfig, SigilConfig

__all__ = ["GlobalConfig", "LoaderConfig", "SigilConfig"]
