#!/usr/bin/env python3
"""
Storage configuration.

The locale mapping and domain list are fixed when the adapter is built and
never change afterwards. They can be given directly or read from a YAML
file:

    project_id: abc123
    default_locale: en
    domains: [messages, validators]
    locales:
      en: 4f8a0d...
      fr: 9c1b77...
"""

import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

import yaml

ACCESS_TOKEN_ENV = "PHRASE_ACCESS_TOKEN"
DEFAULT_CONFIG_FILE = "phrasestore.yml"


class ConfigError(ValueError):
    """Raised when configuration is missing or malformed."""


@dataclass(frozen=True)
class StorageConfig:
    """
    Immutable adapter configuration.

    Attributes:
        project_id: Phrase project identifier
        locale_to_id: Locale code -> Phrase locale id
        domains: Domains transferred by export and import
        default_locale: Source locale declared in uploaded files
    """
    project_id: str
    locale_to_id: Mapping[str, str]
    domains: Sequence[str]
    default_locale: Optional[str] = None

    def __post_init__(self):
        if not self.project_id:
            raise ValueError("project_id must not be empty")
        object.__setattr__(self, "locale_to_id", MappingProxyType(dict(self.locale_to_id)))
        object.__setattr__(self, "domains", tuple(self.domains))


def load_config(path) -> StorageConfig:
    """
    Read a StorageConfig from a YAML file.

    Raises:
        ConfigError: If the file is missing, unreadable or incomplete
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: root must be a mapping")

    missing = [name for name in ("project_id", "locales", "domains") if not data.get(name)]
    if missing:
        raise ConfigError(f"{config_path}: missing required keys: {', '.join(missing)}")

    locales = data["locales"]
    if not isinstance(locales, dict):
        raise ConfigError(f"{config_path}: 'locales' must map locale codes to Phrase locale ids")

    domains = data["domains"]
    if isinstance(domains, str):
        domains = [domains]
    if not isinstance(domains, list):
        raise ConfigError(f"{config_path}: 'domains' must be a list")

    return StorageConfig(
        project_id=str(data["project_id"]),
        locale_to_id={str(locale): str(locale_id) for locale, locale_id in locales.items()},
        domains=[str(domain) for domain in domains],
        default_locale=data.get("default_locale"),
    )


def access_token_from_env(environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Read the Phrase access token from the environment.

    Raises:
        ConfigError: If ``PHRASE_ACCESS_TOKEN`` is unset or empty
    """
    environ = os.environ if environ is None else environ
    token = environ.get(ACCESS_TOKEN_ENV)
    if not token:
        raise ConfigError(f"{ACCESS_TOKEN_ENV} is not set")
    return token
