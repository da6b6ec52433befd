#!/usr/bin/env python3
"""
Conversion between message catalogues and XLIFF file content.
"""

from typing import Any, Optional, Union

from .catalogue import MessageCatalogue
from .format_handlers import FormatRegistry, ParseError, TranslationEntry

XLIFF_FORMAT = "xliff"


class XliffConverter:
    """Create catalogues from XLIFF content and XLIFF content from catalogues."""

    @staticmethod
    def content_to_catalogue(
        content: Union[str, bytes],
        locale: str,
        domain: str,
    ) -> MessageCatalogue:
        """
        Create a catalogue from the contents of an XLIFF file.

        Args:
            content: XLIFF document; bytes are decoded as UTF-8
            locale: Locale of the new catalogue
            domain: Domain the parsed messages are loaded into

        Returns:
            New MessageCatalogue holding one domain

        Raises:
            ParseError: If the content is not a readable XLIFF document
        """
        if isinstance(content, bytes):
            try:
                content = content.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(f"XLIFF content is not valid UTF-8: {e}")

        handler = FormatRegistry.get_handler(XLIFF_FORMAT)
        catalogue = MessageCatalogue(locale)
        for entry in handler.parse(content):
            catalogue.set(entry.id, entry.text, domain)
            if entry.notes:
                catalogue.set_metadata(entry.id, {"notes": list(entry.notes)}, domain)

        return catalogue

    @staticmethod
    def catalogue_to_content(
        catalogue: MessageCatalogue,
        domain: str,
        options: Optional[dict[str, Any]] = None,
    ) -> str:
        """
        Serialize one domain of a catalogue as an XLIFF document.

        Args:
            catalogue: Catalogue to read from
            domain: Domain to serialize
            options: ``default_locale`` and ``xliff_version``, see XliffHandler.dump

        Returns:
            XLIFF document text
        """
        handler = FormatRegistry.get_handler(XLIFF_FORMAT)
        entries = [
            TranslationEntry(
                id=key,
                text=translation,
                notes=list(catalogue.get_metadata(key, domain).get("notes", [])),
            )
            for key, translation in catalogue.all(domain).items()
        ]
        return handler.dump(entries, catalogue.locale, options)
