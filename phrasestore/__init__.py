"""
phrasestore - Phrase-backed translation storage

Reads and writes single translation messages on a Phrase project and
transfers whole message catalogues as XLIFF files.

Quick start:
    client = PhraseClient(access_token="...")
    storage = PhraseStorage(client, load_config("phrasestore.yml"))
    storage.get("fr", "messages", "welcome")
    catalogue = storage.export(MessageCatalogue("fr"))
"""

__version__ = "1.0.0"

from .catalogue import Message, MessageCatalogue
from .client import PhraseApiError, PhraseClient
from .config import ConfigError, StorageConfig, load_config
from .converter import XliffConverter
from .format_handlers import ParseError
from .storage import PhraseStorage, StorageError, decode_remote_key, encode_remote_key

__all__ = [
    "Message",
    "MessageCatalogue",
    "PhraseApiError",
    "PhraseClient",
    "ConfigError",
    "StorageConfig",
    "load_config",
    "XliffConverter",
    "ParseError",
    "PhraseStorage",
    "StorageError",
    "decode_remote_key",
    "encode_remote_key",
]
