#!/usr/bin/env python3
"""
Format handlers for translation interchange files.

Supported formats:
- XLIFF: XML Localization Interchange File Format, versions 1.2 and 2.0
"""

from .base import (
    FormatHandler,
    FormatRegistry,
    ParseError,
    TranslationEntry,
)
from .xliff import XliffHandler

FormatRegistry.register(XliffHandler)

__all__ = [
    'FormatHandler',
    'FormatRegistry',
    'ParseError',
    'TranslationEntry',
    'XliffHandler',
]
