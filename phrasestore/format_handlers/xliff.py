#!/usr/bin/env python3
"""
XLIFF format handler.

Reads XLIFF 1.2 and 2.0 documents as written by Symfony's translation
dumpers (the ``symfony_xliff`` format on Phrase) and writes them back.
"""

import base64
import hashlib
import re
from typing import Any, Optional
from xml.etree import ElementTree as ET

from .base import FormatHandler, ParseError, TranslationEntry

XLIFF_12_NS = 'urn:oasis:names:tc:xliff:document:1.2'
XLIFF_20_NS = 'urn:oasis:names:tc:xliff:document:2.0'

# Code points outside the XML 1.0 Char production
_ILLEGAL_XML_CHARS = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]')


def _local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on qualified tags."""
    if tag.startswith('{'):
        return tag.split('}', 1)[1]
    return tag


def _children(elem: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in elem if _local_name(child.tag) == name]


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    found = _children(elem, name)
    return found[0] if found else None


def _text(elem: Optional[ET.Element]) -> Optional[str]:
    """Full text of an element, inline markup included."""
    if elem is None:
        return None
    return ''.join(elem.itertext())


def _first_present(*values: Optional[str]) -> Optional[str]:
    """First value that is not None; an empty string counts as present."""
    for value in values:
        if value is not None:
            return value
    return None


def _check_xml_chars(value: str, what: str) -> None:
    """Reject text that no XML 1.0 document can carry."""
    match = _ILLEGAL_XML_CHARS.search(value)
    if match:
        raise ParseError(f"{what} contains a character not allowed in XML: {match.group()!r}")


def unit_id(key: str) -> str:
    """Short stable identifier for a unit, derived from its key."""
    digest = base64.b64encode(hashlib.sha256(key.encode('utf-8')).digest()).decode('ascii')
    return digest[:7].translate(str.maketrans('/+', '._'))


class XliffHandler(FormatHandler):
    """
    Handler for XLIFF translation files.

    XLIFF 1.2 structure:
    ```xml
    <?xml version="1.0" encoding="utf-8"?>
    <xliff xmlns="urn:oasis:names:tc:xliff:document:1.2" version="1.2">
      <file source-language="en" target-language="fr" datatype="plaintext" original="file.ext">
        <body>
          <trans-unit id="aBc.1_x" resname="welcome">
            <source>welcome</source>
            <target>Bienvenue</target>
            <note>Shown on the landing page</note>
          </trans-unit>
        </body>
      </file>
    </xliff>
    ```

    XLIFF 2.0 uses ``<unit name="...">`` with ``<segment>`` children instead.
    The message key is the resname/name attribute, falling back to the
    source text and then to the unit id.
    """

    @property
    def name(self) -> str:
        return "xliff"

    @property
    def file_extensions(self) -> list[str]:
        return ["xlf", "xliff"]

    def parse(self, content: str) -> list[TranslationEntry]:
        """
        Parse XLIFF content into translation entries.

        Args:
            content: Raw XLIFF document

        Returns:
            List of TranslationEntry objects in document order

        Raises:
            ParseError: On empty content, invalid XML or a non-XLIFF root
        """
        if not content or not content.strip():
            raise ParseError("Empty XLIFF content")

        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise ParseError(f"Invalid XML: {e}")

        if _local_name(root.tag) != 'xliff':
            raise ParseError(f"Root element must be 'xliff', found '{_local_name(root.tag)}'")

        if root.get('version', '1.2').startswith('2'):
            return self._parse_v2(root)
        return self._parse_v1(root)

    def _parse_v1(self, root: ET.Element) -> list[TranslationEntry]:
        entries = []
        for unit in root.iter():
            if _local_name(unit.tag) != 'trans-unit':
                continue

            source = _text(_child(unit, 'source'))
            target = _text(_child(unit, 'target'))
            key = _first_present(unit.get('resname'), source, unit.get('id'))
            if key is None:
                continue

            entries.append(TranslationEntry(
                id=key,
                text=target if target is not None else (source or ''),
                source=source,
                notes=[_text(note) for note in _children(unit, 'note')],
            ))
        return entries

    def _parse_v2(self, root: ET.Element) -> list[TranslationEntry]:
        entries = []
        for unit in root.iter():
            if _local_name(unit.tag) != 'unit':
                continue

            # Only the first segment carries the message
            segment = _child(unit, 'segment')
            if segment is None:
                continue
            source = _text(_child(segment, 'source'))
            target = _text(_child(segment, 'target'))
            key = _first_present(unit.get('name'), source, unit.get('id'))
            if key is None:
                continue

            notes = []
            notes_elem = _child(unit, 'notes')
            if notes_elem is not None:
                notes = [_text(note) for note in _children(notes_elem, 'note')]

            entries.append(TranslationEntry(
                id=key,
                text=target if target is not None else (source or ''),
                source=source,
                notes=notes,
            ))
        return entries

    def dump(
        self,
        entries: list[TranslationEntry],
        locale: str,
        options: Optional[dict[str, Any]] = None,
    ) -> str:
        """
        Serialize entries as an XLIFF document.

        Args:
            entries: Entries to write; ``id`` is the message key
            locale: Target language of the document
            options: ``default_locale`` (declared source language),
                ``xliff_version`` ("1.2" or "2.0"), ``original`` (1.2 file name)

        Returns:
            XLIFF document with XML declaration

        Raises:
            ParseError: If a key, text, note or locale holds a character
                XML 1.0 cannot represent
        """
        options = options or {}
        source_locale = options.get('default_locale') or locale

        _check_xml_chars(locale, "Locale")
        _check_xml_chars(source_locale, "Locale")
        for entry in entries:
            _check_xml_chars(entry.id, "Key")
            _check_xml_chars(entry.text, f"Translation of {entry.id!r}")
            if entry.source is not None:
                _check_xml_chars(entry.source, f"Source of {entry.id!r}")
            for note in entry.notes:
                _check_xml_chars(note, f"Note of {entry.id!r}")

        if str(options.get('xliff_version', '1.2')).startswith('2'):
            root = self._dump_v2(entries, locale, source_locale)
        else:
            root = self._dump_v1(entries, locale, source_locale, options.get('original', 'file.ext'))

        ET.indent(root, space='  ')
        return '<?xml version="1.0" encoding="utf-8"?>\n' + ET.tostring(root, encoding='unicode') + '\n'

    def _dump_v1(
        self,
        entries: list[TranslationEntry],
        locale: str,
        source_locale: str,
        original: str,
    ) -> ET.Element:
        root = ET.Element('xliff', {'xmlns': XLIFF_12_NS, 'version': '1.2'})
        file_elem = ET.SubElement(root, 'file', {
            'source-language': source_locale,
            'target-language': locale,
            'datatype': 'plaintext',
            'original': original,
        })
        header = ET.SubElement(file_elem, 'header')
        ET.SubElement(header, 'tool', {'tool-id': 'phrasestore', 'tool-name': 'phrasestore'})
        body = ET.SubElement(file_elem, 'body')

        for entry in entries:
            unit = ET.SubElement(body, 'trans-unit', {'id': unit_id(entry.id), 'resname': entry.id})
            ET.SubElement(unit, 'source').text = entry.source if entry.source is not None else entry.id
            ET.SubElement(unit, 'target').text = entry.text
            for note in entry.notes:
                ET.SubElement(unit, 'note').text = note

        return root

    def _dump_v2(
        self,
        entries: list[TranslationEntry],
        locale: str,
        source_locale: str,
    ) -> ET.Element:
        root = ET.Element('xliff', {
            'xmlns': XLIFF_20_NS,
            'version': '2.0',
            'srcLang': source_locale,
            'trgLang': locale,
        })
        file_elem = ET.SubElement(root, 'file', {'id': f'translations.{locale}'})

        for entry in entries:
            unit = ET.SubElement(file_elem, 'unit', {'id': unit_id(entry.id), 'name': entry.id})
            if entry.notes:
                notes = ET.SubElement(unit, 'notes')
                for note in entry.notes:
                    ET.SubElement(notes, 'note').text = note
            segment = ET.SubElement(unit, 'segment')
            ET.SubElement(segment, 'source').text = entry.source if entry.source is not None else entry.id
            ET.SubElement(segment, 'target').text = entry.text

        return root
