#!/usr/bin/env python3
"""
Tests for XliffHandler and XliffConverter.

Tests verify:
1. Symfony-style XLIFF 1.2 and XLIFF 2.0 documents are read
2. Key and translation fallbacks (resname -> source -> id, target -> source);
   an empty resname is a key of its own
3. Malformed content raises ParseError
4. Dumped documents declare the right languages and read back identically
5. Characters XML cannot carry are rejected before anything is written
"""

import pytest

from phrasestore.catalogue import MessageCatalogue
from phrasestore.converter import XliffConverter
from phrasestore.format_handlers import FormatRegistry, ParseError, TranslationEntry, XliffHandler
from phrasestore.format_handlers.xliff import unit_id


XLIFF_12 = """<?xml version="1.0" encoding="utf-8"?>
<xliff xmlns="urn:oasis:names:tc:xliff:document:1.2" version="1.2">
  <file source-language="en" target-language="fr" datatype="plaintext" original="file.ext">
    <header>
      <tool tool-id="symfony" tool-name="Symfony"/>
    </header>
    <body>
      <trans-unit id="1" resname="welcome">
        <source>welcome</source>
        <target>Bienvenue</target>
        <note>Landing page title</note>
      </trans-unit>
      <trans-unit id="2">
        <source>Goodbye</source>
        <target>Au revoir</target>
      </trans-unit>
      <trans-unit id="3" resname="untranslated">
        <source>Not yet</source>
      </trans-unit>
      <trans-unit id="4" resname="markup">
        <source>markup</source>
        <target>Cliquez <g id="1">ici</g> &amp; voilà</target>
      </trans-unit>
    </body>
  </file>
</xliff>
"""

XLIFF_20 = """<?xml version="1.0" encoding="utf-8"?>
<xliff xmlns="urn:oasis:names:tc:xliff:document:2.0" version="2.0" srcLang="en" trgLang="fr">
  <file id="messages.fr">
    <unit id="a1" name="welcome">
      <notes>
        <note>Landing page title</note>
      </notes>
      <segment>
        <source>welcome</source>
        <target>Bienvenue</target>
      </segment>
    </unit>
    <unit id="a2">
      <segment>
        <source>Goodbye</source>
        <target>Au revoir</target>
      </segment>
    </unit>
  </file>
</xliff>
"""


@pytest.fixture
def handler():
    return XliffHandler()


def test_registered_by_name():
    assert isinstance(FormatRegistry.get_handler("xliff"), XliffHandler)
    assert {"name": "xliff", "extensions": ["xlf", "xliff"]} in FormatRegistry.list_formats()


def test_unknown_format():
    with pytest.raises(ValueError, match="Unknown format"):
        FormatRegistry.get_handler("tmx")


def test_parse_v12(handler):
    entries = {entry.id: entry for entry in handler.parse(XLIFF_12)}

    assert entries["welcome"].text == "Bienvenue"
    assert entries["welcome"].notes == ["Landing page title"]
    # No resname: the source text is the key
    assert entries["Goodbye"].text == "Au revoir"
    # No target: the source text is the translation
    assert entries["untranslated"].text == "Not yet"
    # Inline markup is flattened to text
    assert entries["markup"].text == "Cliquez ici & voilà"


def test_parse_v20(handler):
    entries = {entry.id: entry for entry in handler.parse(XLIFF_20)}

    assert entries["welcome"].text == "Bienvenue"
    assert entries["welcome"].notes == ["Landing page title"]
    assert entries["Goodbye"].text == "Au revoir"


def test_parse_without_namespace(handler):
    content = (
        '<xliff version="1.2"><file><body>'
        '<trans-unit id="x" resname="k"><source>k</source><target>v</target></trans-unit>'
        '</body></file></xliff>'
    )
    assert [(e.id, e.text) for e in handler.parse(content)] == [("k", "v")]


def test_parse_empty_target_kept(handler):
    content = (
        '<xliff version="1.2"><file><body>'
        '<trans-unit id="x" resname="k"><source>k</source><target></target></trans-unit>'
        '</body></file></xliff>'
    )
    assert handler.parse(content)[0].text == ""


def test_parse_empty_resname_is_the_key(handler):
    content = (
        '<xliff version="1.2"><file><body>'
        '<trans-unit id="x" resname=""><source>Empty</source><target>vide</target></trans-unit>'
        '</body></file></xliff>'
    )
    assert [(e.id, e.text) for e in handler.parse(content)] == [("", "vide")]


@pytest.mark.parametrize("content", [
    "",
    "   \n",
    "<xliff><file><body><trans-unit",
    "not xml at all",
])
def test_parse_malformed(handler, content):
    with pytest.raises(ParseError):
        handler.parse(content)


def test_parse_wrong_root(handler):
    with pytest.raises(ParseError, match="Root element must be 'xliff'"):
        handler.parse('<?xml version="1.0"?><resources><string name="a">b</string></resources>')


def test_validate_content(handler):
    assert handler.validate_content(XLIFF_12) == []
    assert len(handler.validate_content("<broken")) == 1


def test_dump_v12_declares_languages(handler):
    content = handler.dump([TranslationEntry(id="welcome", text="Bienvenue")], "fr", {"default_locale": "en"})

    assert content.startswith('<?xml version="1.0" encoding="utf-8"?>')
    assert 'xmlns="urn:oasis:names:tc:xliff:document:1.2"' in content
    assert 'source-language="en"' in content
    assert 'target-language="fr"' in content
    assert f'id="{unit_id("welcome")}"' in content
    assert 'resname="welcome"' in content


def test_dump_defaults_source_language_to_locale(handler):
    content = handler.dump([TranslationEntry(id="welcome", text="Bienvenue")], "fr")
    assert 'source-language="fr"' in content


def test_dump_v20(handler):
    entries = [TranslationEntry(id="welcome", text="Bienvenue", notes=["Title"])]
    content = handler.dump(entries, "fr", {"xliff_version": "2.0", "default_locale": "en"})

    assert 'version="2.0"' in content
    assert 'srcLang="en"' in content
    assert 'trgLang="fr"' in content
    parsed = handler.parse(content)
    assert [(e.id, e.text, e.notes) for e in parsed] == [("welcome", "Bienvenue", ["Title"])]


def test_unit_id_is_stable_and_short():
    assert unit_id("welcome") == unit_id("welcome")
    assert unit_id("welcome") != unit_id("goodbye")
    assert len(unit_id("welcome")) == 7
    assert "/" not in unit_id("welcome") and "+" not in unit_id("welcome")


def test_content_to_catalogue(handler):
    catalogue = XliffConverter.content_to_catalogue(XLIFF_12, "fr", "messages")

    assert catalogue.locale == "fr"
    assert catalogue.domains() == ["messages"]
    assert catalogue.get("welcome", "messages") == "Bienvenue"
    assert catalogue.get_metadata("welcome", "messages") == {"notes": ["Landing page title"]}


def test_content_to_catalogue_accepts_bytes():
    catalogue = XliffConverter.content_to_catalogue(XLIFF_12.encode("utf-8"), "fr", "messages")
    assert catalogue.get("markup", "messages") == "Cliquez ici & voilà"


def test_content_to_catalogue_invalid_utf8():
    with pytest.raises(ParseError):
        XliffConverter.content_to_catalogue(b"\xff\xfe<xliff", "fr", "messages")


def test_catalogue_to_content_only_serializes_domain():
    catalogue = MessageCatalogue("fr", {
        "messages": {"welcome": "Bienvenue"},
        "validators": {"required": "Obligatoire"},
    })

    content = XliffConverter.catalogue_to_content(catalogue, "messages")

    assert "Bienvenue" in content
    assert "Obligatoire" not in content


def test_round_trip_preserves_messages():
    messages = {
        "welcome": "Bienvenue",
        "escape": "<b>Tom & Jerry</b> \"quoted\"",
        "unicode": "Ça marche — oui",
        "dotted.key.name": "Clé",
        "empty": "",
    }
    catalogue = MessageCatalogue("fr", {"messages": messages})
    catalogue.set_metadata("welcome", {"notes": ["Title"]}, "messages")

    content = XliffConverter.catalogue_to_content(catalogue, "messages", {"default_locale": "en"})
    restored = XliffConverter.content_to_catalogue(content, "fr", "messages")

    assert restored.all("messages") == messages
    assert restored.get_metadata("welcome", "messages") == {"notes": ["Title"]}


@pytest.mark.parametrize("version", ["1.2", "2.0"])
def test_empty_key_survives_round_trip(version):
    catalogue = MessageCatalogue("fr", {"messages": {"": "vide"}})

    content = XliffConverter.catalogue_to_content(catalogue, "messages", {"xliff_version": version})

    assert XliffConverter.content_to_catalogue(content, "fr", "messages").all("messages") == {"": "vide"}


@pytest.mark.parametrize("entry", [
    TranslationEntry(id="welcome", text="Bien\x0bvenue"),
    TranslationEntry(id="bell\x07", text="Bienvenue"),
    TranslationEntry(id="welcome", text="Bienvenue", notes=["nul\x00"]),
    TranslationEntry(id="welcome", text="Bienvenue", source="\ufffe"),
])
def test_dump_rejects_characters_xml_cannot_carry(handler, entry):
    with pytest.raises(ParseError, match="not allowed in XML"):
        handler.dump([entry], "fr")


def test_dump_keeps_tabs_and_newlines(handler):
    content = handler.dump([TranslationEntry(id="multi", text="line one\n\tline two")], "fr")
    assert handler.parse(content)[0].text == "line one\n\tline two"
