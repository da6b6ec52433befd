#!/usr/bin/env python3
"""
Translation storage backed by Phrase.

PhraseStorage reads and writes single messages through the Phrase API and
transfers whole catalogues as XLIFF files, one file per domain.

Phrase has no notion of domains, so keys are namespaced as
``<domain>::<key>`` and tagged with their domain. Domain and key must not
contain the ``::`` separator themselves.
"""

import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping, Optional, Sequence

from .catalogue import Message, MessageCatalogue
from .client import PhraseApiError, PhraseClient
from .config import StorageConfig
from .converter import XliffConverter
from .format_handlers import ParseError

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "::"
FILE_FORMAT = "symfony_xliff"


class StorageError(Exception):
    """Raised when a storage operation cannot be completed."""


def encode_remote_key(domain: str, key: str) -> str:
    """
    Build the Phrase key name for a message key.

    Raises:
        ValueError: If domain or key contains the separator
    """
    if KEY_SEPARATOR in domain:
        raise ValueError(f"Domain must not contain '{KEY_SEPARATOR}': {domain!r}")
    if KEY_SEPARATOR in key:
        raise ValueError(f"Key must not contain '{KEY_SEPARATOR}': {key!r}")
    return f"{domain}{KEY_SEPARATOR}{key}"


def decode_remote_key(domain: str, name: str) -> Optional[str]:
    """Message key for a Phrase key name, or None if the name is not in ``domain``."""
    prefix = f"{domain}{KEY_SEPARATOR}"
    if not name.startswith(prefix):
        return None
    return name[len(prefix):]


@contextmanager
def _remote_call(action: str) -> Iterator[None]:
    try:
        yield
    except PhraseApiError as e:
        raise StorageError(f"{action} failed: {e}") from e


class PhraseStorage:
    """
    Storage adapter for a Phrase project.

    Single-message operations (get, create, update, delete) map onto Phrase
    translation and key endpoints. export and import_ move whole domains as
    ``symfony_xliff`` files.
    """

    def __init__(self, client: PhraseClient, config: StorageConfig):
        """
        Args:
            client: Phrase API client
            config: Project id, locale mapping, domains and default locale
        """
        self.client = client
        self.config = config

    @classmethod
    def from_parts(
        cls,
        client: PhraseClient,
        project_id: str,
        locale_to_id: Mapping[str, str],
        domains: Sequence[str],
        default_locale: Optional[str] = None,
    ) -> "PhraseStorage":
        return cls(client, StorageConfig(
            project_id=project_id,
            locale_to_id=locale_to_id,
            domains=domains,
            default_locale=default_locale,
        ))

    @property
    def project_id(self) -> str:
        return self.config.project_id

    def get_locale_id(self, locale: str) -> str:
        """
        Phrase locale id configured for a locale.

        Raises:
            StorageError: If the locale is not configured
        """
        try:
            return self.config.locale_to_id[locale]
        except KeyError:
            raise StorageError(f'Id for locale "{locale}" has not been configured.') from None

    def get(self, locale: str, domain: str, key: str) -> Optional[Message]:
        """Fetch one message, or None if Phrase has no translation for it."""
        remote_name = encode_remote_key(domain, key)
        with _remote_call(f"Fetching {remote_name}"):
            translations = self.client.translation.index_locale(
                self.project_id, self.get_locale_id(locale), {"tags": domain}
            )

        for translation in translations:
            if translation.key_name == remote_name:
                return Message(
                    key=key,
                    domain=domain,
                    locale=locale,
                    translation=translation.content,
                )
        return None

    def create(self, message: Message) -> None:
        """
        Create a key and its translation.

        The two remote calls are not atomic: if the translation cannot be
        created, the key is left on Phrase without a translation.
        """
        locale_id = self.get_locale_id(message.locale)
        remote_name = encode_remote_key(message.domain, message.key)

        with _remote_call(f"Creating key {remote_name}"):
            key = self.client.key.create(self.project_id, remote_name, {"tags": message.domain})

        try:
            self.client.translation.create(self.project_id, locale_id, key.id, message.translation)
        except PhraseApiError as e:
            logger.warning("Key %s (%s) was created without a translation: %s", remote_name, key.id, e)
            raise StorageError(f"Creating translation for {remote_name} failed: {e}") from e

    def update(self, message: Message) -> None:
        """Replace an existing translation; does nothing if there is none."""
        remote_name = encode_remote_key(message.domain, message.key)
        with _remote_call(f"Updating {remote_name}"):
            translations = self.client.translation.index_locale(
                self.project_id, self.get_locale_id(message.locale), {"tags": message.domain}
            )
            for translation in translations:
                if translation.key_name == remote_name:
                    self.client.translation.update(self.project_id, translation.id, message.translation)
                    return

        logger.debug("No translation for %s in %s, nothing to update", remote_name, message.locale)

    def delete(self, locale: str, domain: str, key: str) -> None:
        """Delete a key (in every locale); does nothing if it does not exist."""
        remote_name = encode_remote_key(domain, key)
        with _remote_call(f"Deleting {remote_name}"):
            results = self.client.key.search(
                self.project_id,
                self.get_locale_id(locale),
                {"tags": domain, "name": remote_name},
            )
            for result in results:
                if result.name == remote_name:
                    self.client.key.delete(self.project_id, result.id)
                    return

        logger.debug("Key %s not found, nothing to delete", remote_name)

    def export(self, catalogue: MessageCatalogue) -> MessageCatalogue:
        """
        Pull every configured domain from Phrase into ``catalogue``.

        A domain whose download cannot be parsed contributes nothing; the
        other domains are still merged.

        Returns:
            The same catalogue, updated in place

        Raises:
            StorageError: If the locale is unknown or a download fails
        """
        locale = catalogue.locale
        locale_id = self.get_locale_id(locale)

        for domain in self.config.domains:
            with _remote_call(f"Downloading {domain} for {locale}"):
                content = self.client.locale.download(
                    self.project_id, locale_id, FILE_FORMAT, {"tags": domain}
                )

            downloaded = self._load_domain(content, locale, domain)
            if downloaded is None:
                continue
            catalogue.add_catalogue(downloaded)
            logger.info("Exported %d messages of %s for %s", len(downloaded), domain, locale)

        return catalogue

    def _load_domain(self, content: str, locale: str, domain: str) -> Optional[MessageCatalogue]:
        """Parse a downloaded domain and strip the remote key prefix."""
        try:
            remote = XliffConverter.content_to_catalogue(content, locale, domain)
        except ParseError as e:
            logger.warning("Skipping %s for %s: %s", domain, locale, e)
            return None

        result = MessageCatalogue(locale)
        for name, translation in remote.all(domain).items():
            key = decode_remote_key(domain, name)
            if key is None:
                key = name
            result.set(key, translation, domain)
            meta = remote.get_metadata(name, domain)
            if meta:
                result.set_metadata(key, meta, domain)
        return result

    def import_(self, catalogue: MessageCatalogue) -> None:
        """
        Push every configured domain of ``catalogue`` to Phrase.

        Each domain is written to its own temporary XLIFF file, which is
        removed once the upload finished or failed. The catalogue itself is
        left untouched.

        Raises:
            StorageError: If the locale is unknown, a domain cannot be
                serialized or an upload fails
        """
        locale = catalogue.locale
        locale_id = self.get_locale_id(locale)
        options = {"default_locale": self.config.default_locale} if self.config.default_locale else {}

        # Every domain is serialized before the first upload
        contents = []
        for domain in self.config.domains:
            messages = catalogue.all(domain)
            if not messages:
                logger.debug("No messages in %s for %s, skipping upload", domain, locale)
                continue

            try:
                content = self._dump_domain(catalogue, domain, options)
            except ValueError as e:
                raise StorageError(f"Cannot serialize {domain} for {locale}: {e}") from e
            contents.append((domain, content, len(messages)))

        for domain, content, count in contents:
            with tempfile.TemporaryDirectory(prefix="phrasestore-") as tmp_dir:
                file_path = Path(tmp_dir) / f"{domain}.{locale}.xlf"
                file_path.write_text(content, encoding="utf-8")
                with _remote_call(f"Uploading {domain} for {locale}"):
                    self.client.upload.upload(
                        self.project_id,
                        FILE_FORMAT,
                        str(file_path),
                        {"locale_id": locale_id, "tags": domain},
                    )

            logger.info("Imported %d messages of %s for %s", count, domain, locale)

    def _dump_domain(self, catalogue: MessageCatalogue, domain: str, options: dict) -> str:
        """Serialize a domain with keys renamed to their Phrase names."""
        remote = MessageCatalogue(catalogue.locale)
        for key, translation in catalogue.all(domain).items():
            name = encode_remote_key(domain, key)
            remote.set(name, translation, domain)
            meta = catalogue.get_metadata(key, domain)
            if meta:
                remote.set_metadata(name, meta, domain)
        return XliffConverter.catalogue_to_content(remote, domain, options)
