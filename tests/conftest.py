"""Shared fixtures: an in-memory stand-in for the Phrase API."""

import itertools
from pathlib import Path

import pytest

from phrasestore.client import PhraseApiError, RemoteKey, RemoteTranslation
from phrasestore.config import StorageConfig
from phrasestore.storage import PhraseStorage

PROJECT_ID = "project-1"
LOCALES = {"en": "locale-en", "fr": "locale-fr"}
DOMAINS = ["messages", "validators"]


def _tags_match(tags, params):
    wanted = (params or {}).get("tags")
    return wanted is None or wanted in tags


class FakeTranslationApi:
    def __init__(self, backend):
        self.backend = backend

    def index_locale(self, project_id, locale_id, params=None):
        result = []
        for translation_id, row in self.backend.translations.items():
            key = self.backend.keys.get(row["key_id"])
            if key is None or row["locale_id"] != locale_id:
                continue
            if not _tags_match(key.tags, params):
                continue
            result.append(RemoteTranslation(
                id=translation_id,
                content=row["content"],
                key_id=key.id,
                key_name=key.name,
            ))
        return result

    def create(self, project_id, locale_id, key_id, content):
        if self.backend.fail_translation_create:
            raise PhraseApiError("translation create rejected", status_code=422)
        translation_id = f"t{next(self.backend.ids)}"
        self.backend.translations[translation_id] = {
            "key_id": key_id,
            "locale_id": locale_id,
            "content": content,
        }
        return RemoteTranslation(id=translation_id, content=content, key_id=key_id)

    def update(self, project_id, translation_id, content):
        self.backend.translations[translation_id]["content"] = content
        return RemoteTranslation(id=translation_id, content=content)


class FakeKeyApi:
    def __init__(self, backend):
        self.backend = backend

    def create(self, project_id, name, params=None):
        key = RemoteKey(id=f"k{next(self.backend.ids)}", name=name, tags=[(params or {}).get("tags")])
        self.backend.keys[key.id] = key
        return key

    def search(self, project_id, locale_id=None, params=None):
        name = (params or {}).get("name", "")
        # Phrase name search is not exact, mimic that with a substring match
        return [
            key for key in self.backend.keys.values()
            if _tags_match(key.tags, params) and name in key.name
        ]

    def delete(self, project_id, key_id):
        del self.backend.keys[key_id]
        for translation_id in [t for t, row in self.backend.translations.items() if row["key_id"] == key_id]:
            del self.backend.translations[translation_id]


class FakeLocaleApi:
    def __init__(self, backend):
        self.backend = backend

    def download(self, project_id, locale_id, file_format, params=None):
        self.backend.download_calls.append((locale_id, file_format, dict(params or {})))
        content = self.backend.downloads.get((locale_id, (params or {}).get("tags")), "")
        if isinstance(content, Exception):
            raise content
        return content


class FakeUploadApi:
    def __init__(self, backend):
        self.backend = backend

    def upload(self, project_id, file_format, file_path, params=None):
        path = Path(file_path)
        self.backend.uploads.append({
            "path": path,
            "existed": path.exists(),
            "content": path.read_text(encoding="utf-8"),
            "file_format": file_format,
            "params": dict(params or {}),
        })
        if self.backend.upload_error is not None:
            raise self.backend.upload_error
        return {"id": f"u{next(self.backend.ids)}", "state": "enqueued"}


class FakePhraseClient:
    """In-memory Phrase project offering the same resource groups as PhraseClient."""

    def __init__(self):
        self.ids = itertools.count(1)
        self.keys = {}
        self.translations = {}
        self.downloads = {}
        self.download_calls = []
        self.uploads = []
        self.upload_error = None
        self.fail_translation_create = False

        self.translation = FakeTranslationApi(self)
        self.key = FakeKeyApi(self)
        self.locale = FakeLocaleApi(self)
        self.upload = FakeUploadApi(self)


@pytest.fixture
def fake_client():
    return FakePhraseClient()


@pytest.fixture
def config():
    return StorageConfig(
        project_id=PROJECT_ID,
        locale_to_id=LOCALES,
        domains=DOMAINS,
        default_locale="en",
    )


@pytest.fixture
def storage(fake_client, config):
    return PhraseStorage(fake_client, config)


@pytest.fixture
def xliff_document():
    """Build a Symfony-style XLIFF 1.2 document from ``{resname: target}``."""
    def build(messages, locale="fr"):
        units = "\n".join(
            f'      <trans-unit id="u{i}" resname="{name}">\n'
            f'        <source>{name}</source>\n'
            f'        <target>{target}</target>\n'
            f'      </trans-unit>'
            for i, (name, target) in enumerate(messages.items())
        )
        return (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            '<xliff xmlns="urn:oasis:names:tc:xliff:document:1.2" version="1.2">\n'
            f'  <file source-language="en" target-language="{locale}" datatype="plaintext" original="file.ext">\n'
            '    <body>\n'
            f'{units}\n'
            '    </body>\n'
            '  </file>\n'
            '</xliff>\n'
        )
    return build
