#!/usr/bin/env python3
"""
Base classes for format handlers.

FormatHandler is the abstract base class that all format-specific handlers
must implement. TranslationEntry is the format-neutral data structure the
converter moves in and out of message catalogues.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


class ParseError(ValueError):
    """Raised when file content cannot be parsed by a format handler."""


@dataclass
class TranslationEntry:
    """
    Single translatable unit read from, or written to, a translation file.

    Attributes:
        id: Message key (resname in XLIFF 1.2, unit name in XLIFF 2.0)
        text: Translated text
        source: Source text as written in the file, if any
        notes: Free-form notes attached to the unit
    """
    id: str
    text: str
    source: Optional[str] = None
    notes: list[str] = field(default_factory=list)

    def __post_init__(self):
        """Ensure id is string."""
        self.id = str(self.id)


class FormatHandler(ABC):
    """
    Abstract base class for format-specific handlers.

    Each handler converts between one file format and a flat list of
    TranslationEntry objects. Handlers are stateless; one instance may be
    shared between calls.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Format name used for registry lookups."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]:
        """List of file extensions this handler supports (without dot)."""
        pass

    @abstractmethod
    def parse(self, content: str) -> list[TranslationEntry]:
        """
        Parse format-specific content into translation entries.

        Args:
            content: Raw file content as string

        Returns:
            List of TranslationEntry objects

        Raises:
            ParseError: If content is empty or malformed
        """
        pass

    @abstractmethod
    def dump(
        self,
        entries: list[TranslationEntry],
        locale: str,
        options: Optional[dict[str, Any]] = None,
    ) -> str:
        """
        Serialize entries into format-specific content.

        Args:
            entries: Entries to write
            locale: Target locale of the translations
            options: Format-specific options

        Returns:
            Complete file content as string
        """
        pass

    def validate_content(self, content: str) -> list[str]:
        """
        Validate that content is properly formatted for this handler.

        Args:
            content: Raw file content

        Returns:
            List of validation error messages (empty if valid)
        """
        try:
            self.parse(content)
        except ParseError as e:
            return [str(e)]
        return []


class FormatRegistry:
    """Registry of available format handlers."""

    _handlers: dict[str, type[FormatHandler]] = {}

    @classmethod
    def register(cls, handler_class: type[FormatHandler]) -> None:
        """Register a format handler class."""
        handler = handler_class()
        cls._handlers[handler.name.lower()] = handler_class

    @classmethod
    def get_handler(cls, name: str) -> FormatHandler:
        """Get handler instance by name."""
        name_lower = name.lower()
        if name_lower not in cls._handlers:
            available = ', '.join(cls._handlers.keys())
            raise ValueError(f"Unknown format: {name}. Available: {available}")
        return cls._handlers[name_lower]()

    @classmethod
    def list_formats(cls) -> list[dict[str, Any]]:
        """List all registered formats with their extensions."""
        result = []
        for handler_class in cls._handlers.values():
            handler = handler_class()
            result.append({
                'name': handler.name,
                'extensions': handler.file_extensions,
            })
        return result
