#!/usr/bin/env python3
"""
Minimal Phrase Strings API v2 client.

Covers the endpoints the storage adapter talks to: translations by locale,
keys, locale downloads and file uploads. Calls are synchronous, one HTTP
request per call (plus pagination), without retries or caching.

Usage:
    client = PhraseClient(access_token="...")
    translations = client.translation.index_locale(project_id, locale_id, {"tags": "messages"})
    content = client.locale.download(project_id, locale_id, "symfony_xliff", {"tags": "messages"})

See: https://developers.phrase.com/api/
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.phrase.com/v2/"
USER_AGENT = "phrasestore/1.0"
PER_PAGE = 100

_NEEDS_QUOTING = re.compile(r"[\s\"'\\]")


class PhraseApiError(Exception):
    """Raised on transport failures and non-2xx responses."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class RemoteKey:
    """A translation key as stored on Phrase."""
    id: str
    name: str
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "RemoteKey":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            tags=list(data.get("tags") or []),
        )


@dataclass
class RemoteTranslation:
    """A translation of one key into one locale as stored on Phrase."""
    id: str
    content: str
    key_id: Optional[str] = None
    key_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "RemoteTranslation":
        key = data.get("key") or {}
        return cls(
            id=data["id"],
            content=data.get("content") or "",
            key_id=key.get("id"),
            key_name=key.get("name"),
        )


def build_query(params: Optional[dict[str, Any]]) -> Optional[str]:
    """
    Translate filter parameters into Phrase's ``q`` search syntax.

    ``{"tags": "messages", "name": "messages::hello"}`` becomes
    ``"name:messages::hello tags:messages"``. List values are comma-joined.
    Values holding whitespace or quotes are double-quoted, with embedded
    quotes and backslashes escaped, so they stay a single term.
    """
    if not params:
        return None
    terms = []
    for name in ("name", "tags"):
        value = params.get(name)
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            value = ",".join(value)
        terms.append(f"{name}:{_quote_term(str(value))}")
    return " ".join(terms) or None


def _quote_term(value: str) -> str:
    if value and not _NEEDS_QUOTING.search(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class PhraseClient:
    """
    HTTP client for the Phrase Strings API.

    Attributes:
        translation: Translation endpoints
        key: Key endpoints
        locale: Locale endpoints
        upload: Upload endpoints
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            access_token: Phrase API access token
            base_url: API root, ending with a slash
            timeout: Request timeout in seconds
            session: Optional preconfigured requests session
        """
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"token {access_token}",
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        })

        self.translation = TranslationApi(self)
        self.key = KeyApi(self)
        self.locale = LocaleApi(self)
        self.upload = UploadApi(self)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_data: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
        files: Optional[dict[str, Any]] = None,
    ) -> requests.Response:
        """
        Send a request and return the successful response.

        Raises:
            PhraseApiError: On connection problems or a non-2xx status
        """
        url = self.base_url + path.lstrip("/")
        logger.debug("%s %s params=%s", method, url, params)

        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json_data,
                data=data,
                files=files,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise PhraseApiError(f"{method} {path} failed: {e}") from e

        if not response.ok:
            raise PhraseApiError(
                f"{method} {path} returned {response.status_code}: {self._error_message(response)}",
                status_code=response.status_code,
            )
        return response

    def get_paginated(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        method: str = "GET",
        json_data: Optional[dict[str, Any]] = None,
    ) -> list[Any]:
        """Collect every page of a list endpoint."""
        items: list[Any] = []
        page = 1
        while True:
            page_params = dict(params or {}, page=page, per_page=PER_PAGE)
            batch = self.request(method, path, params=page_params, json_data=json_data).json() or []
            items.extend(batch)
            if len(batch) < PER_PAGE:
                return items
            page += 1

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.text[:200]


class _Resource:
    def __init__(self, client: PhraseClient):
        self._client = client

    @staticmethod
    def _project(project_id: str) -> str:
        return f"projects/{quote(project_id, safe='')}"


class TranslationApi(_Resource):
    """Endpoints under ``/projects/:project_id/translations``."""

    def index_locale(
        self,
        project_id: str,
        locale_id: str,
        params: Optional[dict[str, Any]] = None,
    ) -> list[RemoteTranslation]:
        """List every translation of a locale, optionally filtered by tags."""
        query = {}
        q = build_query(params)
        if q:
            query["q"] = q
        path = f"{self._project(project_id)}/locales/{quote(locale_id, safe='')}/translations"
        return [RemoteTranslation.from_dict(item) for item in self._client.get_paginated(path, query)]

    def create(self, project_id: str, locale_id: str, key_id: str, content: str) -> RemoteTranslation:
        response = self._client.request(
            "POST",
            f"{self._project(project_id)}/translations",
            json_data={"locale_id": locale_id, "key_id": key_id, "content": content},
        )
        return RemoteTranslation.from_dict(response.json())

    def update(self, project_id: str, translation_id: str, content: str) -> RemoteTranslation:
        response = self._client.request(
            "PATCH",
            f"{self._project(project_id)}/translations/{quote(translation_id, safe='')}",
            json_data={"content": content},
        )
        return RemoteTranslation.from_dict(response.json())


class KeyApi(_Resource):
    """Endpoints under ``/projects/:project_id/keys``."""

    def create(self, project_id: str, name: str, params: Optional[dict[str, Any]] = None) -> RemoteKey:
        body: dict[str, Any] = {"name": name}
        tags = (params or {}).get("tags")
        if tags:
            body["tags"] = ",".join(tags) if isinstance(tags, (list, tuple)) else tags
        response = self._client.request("POST", f"{self._project(project_id)}/keys", json_data=body)
        return RemoteKey.from_dict(response.json())

    def search(
        self,
        project_id: str,
        locale_id: Optional[str] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> list[RemoteKey]:
        body: dict[str, Any] = {}
        q = build_query(params)
        if q:
            body["q"] = q
        if locale_id:
            body["locale_id"] = locale_id
        items = self._client.get_paginated(
            f"{self._project(project_id)}/keys/search",
            method="POST",
            json_data=body,
        )
        return [RemoteKey.from_dict(item) for item in items]

    def delete(self, project_id: str, key_id: str) -> None:
        self._client.request("DELETE", f"{self._project(project_id)}/keys/{quote(key_id, safe='')}")


class LocaleApi(_Resource):
    """Endpoints under ``/projects/:project_id/locales``."""

    def download(
        self,
        project_id: str,
        locale_id: str,
        file_format: str,
        params: Optional[dict[str, Any]] = None,
    ) -> str:
        """Download a locale rendered in ``file_format`` as text."""
        query = {"file_format": file_format}
        query.update(params or {})
        response = self._client.request(
            "GET",
            f"{self._project(project_id)}/locales/{quote(locale_id, safe='')}/download",
            params=query,
        )
        response.encoding = response.encoding or "utf-8"
        return response.text


class UploadApi(_Resource):
    """Endpoints under ``/projects/:project_id/uploads``."""

    def upload(
        self,
        project_id: str,
        file_format: str,
        file_path: str,
        params: Optional[dict[str, Any]] = None,
    ) -> dict:
        """
        Upload a translation file.

        Args:
            project_id: Project identifier
            file_format: Phrase format name, e.g. ``symfony_xliff``
            file_path: Local file to send
            params: Extra form fields such as ``locale_id`` and ``tags``

        Returns:
            Upload record as returned by the API
        """
        path = Path(file_path)
        form = {"file_format": file_format}
        for name, value in (params or {}).items():
            form[name] = ",".join(value) if isinstance(value, (list, tuple)) else str(value)

        with path.open("rb") as handle:
            response = self._client.request(
                "POST",
                f"{self._project(project_id)}/uploads",
                data=form,
                files={"file": (path.name, handle)},
            )
        return response.json()
