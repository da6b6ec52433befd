#!/usr/bin/env python3
"""
In-memory translation data: single messages and per-locale catalogues.

A MessageCatalogue holds the translations of one locale, grouped by domain
and then by message key. Catalogues are built by callers (or by the
converter) and are never persisted by this package.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

DEFAULT_DOMAIN = "messages"


@dataclass(frozen=True)
class Message:
    """
    One translated message addressed by (locale, domain, key).

    Attributes:
        key: Message key inside its domain
        domain: Domain the key belongs to
        locale: Locale of the translation
        translation: Translated text
        meta: Free-form metadata (notes, remote ids, ...)
    """
    key: str
    domain: str
    locale: str
    translation: str
    meta: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        """Freeze metadata so the message stays immutable."""
        object.__setattr__(self, "meta", MappingProxyType(dict(self.meta)))


class MessageCatalogue:
    """
    Translations of a single locale, organized by domain then key.

    Mirrors the subset of Symfony's MessageCatalogue the storage adapter
    needs: read a domain, replace a domain, merge another catalogue.
    """

    def __init__(
        self,
        locale: str,
        messages: Optional[Mapping[str, Mapping[str, str]]] = None,
    ):
        """
        Args:
            locale: Locale of every message in the catalogue
            messages: Optional initial content, ``{domain: {key: translation}}``
        """
        self._locale = locale
        self._messages: dict[str, dict[str, str]] = {}
        self._metadata: dict[str, dict[str, dict[str, Any]]] = {}
        for domain, domain_messages in (messages or {}).items():
            self.add(domain_messages, domain)

    @property
    def locale(self) -> str:
        return self._locale

    def domains(self) -> list[str]:
        """Domains that hold at least one message."""
        return [domain for domain, messages in self._messages.items() if messages]

    def all(self, domain: Optional[str] = None) -> dict:
        """
        Copy of the messages of one domain, or of every domain.

        Args:
            domain: Domain to read; ``None`` returns ``{domain: {key: translation}}``
        """
        if domain is None:
            return {name: dict(messages) for name, messages in self._messages.items()}
        return dict(self._messages.get(domain, {}))

    def get(self, key: str, domain: str = DEFAULT_DOMAIN) -> Optional[str]:
        return self._messages.get(domain, {}).get(key)

    def has(self, key: str, domain: str = DEFAULT_DOMAIN) -> bool:
        return key in self._messages.get(domain, {})

    def set(self, key: str, translation: str, domain: str = DEFAULT_DOMAIN) -> None:
        self._messages.setdefault(domain, {})[key] = translation

    def add(self, messages: Mapping[str, str], domain: str = DEFAULT_DOMAIN) -> None:
        """Merge messages into a domain, overwriting existing keys."""
        self._messages.setdefault(domain, {}).update(messages)

    def replace(self, messages: Mapping[str, str], domain: str = DEFAULT_DOMAIN) -> None:
        """Drop every message (and its metadata) of a domain, then add ``messages``."""
        self._messages.pop(domain, None)
        self._metadata.pop(domain, None)
        self.add(messages, domain)

    def add_catalogue(self, other: "MessageCatalogue") -> None:
        """
        Merge another catalogue of the same locale into this one.

        Raises:
            ValueError: If the locales differ
        """
        if other.locale != self.locale:
            raise ValueError(
                f"Cannot add a catalogue for locale '{other.locale}' "
                f"to a catalogue for locale '{self.locale}'"
            )
        for domain, messages in other.all().items():
            self.add(messages, domain)
        for domain, metadata in other._metadata.items():
            for key, meta in metadata.items():
                self.set_metadata(key, meta, domain)

    def get_metadata(self, key: str, domain: str = DEFAULT_DOMAIN) -> dict[str, Any]:
        return dict(self._metadata.get(domain, {}).get(key, {}))

    def set_metadata(self, key: str, meta: Mapping[str, Any], domain: str = DEFAULT_DOMAIN) -> None:
        self._metadata.setdefault(domain, {})[key] = dict(meta)

    def __len__(self) -> int:
        return sum(len(messages) for messages in self._messages.values())

    def __iter__(self) -> Iterator[Message]:
        for domain, messages in self._messages.items():
            for key, translation in messages.items():
                yield Message(
                    key=key,
                    domain=domain,
                    locale=self._locale,
                    translation=translation,
                    meta=self.get_metadata(key, domain),
                )

    def __repr__(self) -> str:
        return f"MessageCatalogue(locale={self._locale!r}, messages={len(self)})"
