#!/usr/bin/env python3
"""
phrasestore - Phrase translation storage CLI

Reads and writes translations on a Phrase project, one message at a time or
one locale at a time. Every command prints a JSON object to stdout.

Commands:
    get      - Show one translation
    create   - Create a key and its translation
    update   - Change an existing translation
    delete   - Delete a key
    export   - Download every configured domain as XLIFF files
    import   - Upload XLIFF files for every configured domain
    locales  - Show the configured locales and domains
    formats  - List supported file formats

Configuration is read from phrasestore.yml (see --config); the access token
comes from the PHRASE_ACCESS_TOKEN environment variable.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .catalogue import Message, MessageCatalogue
from .client import PhraseClient
from .config import DEFAULT_CONFIG_FILE, access_token_from_env, load_config
from .converter import XLIFF_FORMAT, XliffConverter
from .format_handlers import FormatRegistry
from .storage import PhraseStorage


def build_storage(args) -> PhraseStorage:
    """Create the storage adapter from the config file and environment."""
    config = load_config(args.config)
    client = PhraseClient(access_token=access_token_from_env())
    return PhraseStorage(client, config)


def xliff_filename(domain: str, locale: str) -> str:
    return f"{domain}.{locale}.xlf"


def find_xliff_file(input_dir: Path, domain: str, locale: str) -> Optional[Path]:
    """First existing ``<domain>.<locale>.<ext>`` for any XLIFF extension."""
    handler = FormatRegistry.get_handler(XLIFF_FORMAT)
    for ext in handler.file_extensions:
        path = input_dir / f"{domain}.{locale}.{ext}"
        if path.exists():
            return path
    return None


def cmd_get(args) -> dict:
    """Show one translation."""
    storage = build_storage(args)
    message = storage.get(args.locale, args.domain, args.key)
    if message is None:
        return {
            "status": "not_found",
            "locale": args.locale,
            "domain": args.domain,
            "key": args.key,
        }
    return {
        "status": "ok",
        "locale": message.locale,
        "domain": message.domain,
        "key": message.key,
        "translation": message.translation,
    }


def cmd_create(args) -> dict:
    """Create a key and its translation."""
    storage = build_storage(args)
    storage.create(Message(
        key=args.key,
        domain=args.domain,
        locale=args.locale,
        translation=args.translation,
    ))
    return {
        "status": "ok",
        "summary": f"Created {args.domain}::{args.key} for {args.locale}",
    }


def cmd_update(args) -> dict:
    """Change an existing translation."""
    storage = build_storage(args)
    storage.update(Message(
        key=args.key,
        domain=args.domain,
        locale=args.locale,
        translation=args.translation,
    ))
    return {
        "status": "ok",
        "summary": f"Updated {args.domain}::{args.key} for {args.locale} (if it existed)",
    }


def cmd_delete(args) -> dict:
    """Delete a key."""
    storage = build_storage(args)
    storage.delete(args.locale, args.domain, args.key)
    return {
        "status": "ok",
        "summary": f"Deleted {args.domain}::{args.key} (if it existed)",
    }


def cmd_export(args) -> dict:
    """Download every configured domain and write one XLIFF file per domain."""
    storage = build_storage(args)
    catalogue = storage.export(MessageCatalogue(args.locale))

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    options = {}
    if storage.config.default_locale:
        options["default_locale"] = storage.config.default_locale

    files = []
    for domain in catalogue.domains():
        path = output_dir / xliff_filename(domain, args.locale)
        path.write_text(XliffConverter.catalogue_to_content(catalogue, domain, options), encoding="utf-8")
        files.append(str(path))

    return {
        "status": "ok",
        "locale": args.locale,
        "files": files,
        "stats": {
            "domains": len(files),
            "messages": len(catalogue),
        },
        "summary": f"Exported {len(catalogue)} messages in {len(files)} domains to {output_dir}",
    }


def cmd_import(args) -> dict:
    """Validate one XLIFF file per configured domain and upload them."""
    storage = build_storage(args)
    input_dir = Path(args.input_dir)
    handler = FormatRegistry.get_handler(XLIFF_FORMAT)

    contents = {}
    missing = []
    invalid = {}
    for domain in storage.config.domains:
        path = find_xliff_file(input_dir, domain, args.locale)
        if path is None:
            missing.append(str(input_dir / xliff_filename(domain, args.locale)))
            continue
        content = path.read_text(encoding="utf-8")
        errors = handler.validate_content(content)
        if errors:
            invalid[str(path)] = errors
            continue
        contents[domain] = (path, content)

    if invalid:
        return {
            "status": "error",
            "error_type": "INVALID_FILE",
            "error": f"{len(invalid)} XLIFF file(s) could not be parsed, nothing was uploaded",
            "errors": invalid,
        }

    if not contents:
        return {
            "status": "error",
            "error_type": "FILE_NOT_FOUND",
            "error": f"No XLIFF files for locale '{args.locale}' in {input_dir}",
            "expected": missing,
        }

    catalogue = MessageCatalogue(args.locale)
    for domain, (_, content) in contents.items():
        catalogue.add_catalogue(XliffConverter.content_to_catalogue(content, args.locale, domain))

    storage.import_(catalogue)
    files = [str(path) for path, _ in contents.values()]
    return {
        "status": "ok",
        "locale": args.locale,
        "files": files,
        "skipped": missing,
        "stats": {
            "messages": len(catalogue),
        },
        "summary": f"Imported {len(catalogue)} messages from {len(files)} files",
    }


def cmd_locales(args) -> dict:
    """Show the configured locales and domains."""
    config = load_config(args.config)
    return {
        "status": "ok",
        "project_id": config.project_id,
        "default_locale": config.default_locale,
        "locales": dict(config.locale_to_id),
        "domains": list(config.domains),
    }


def cmd_formats(args) -> dict:
    """List supported file formats."""
    formats = FormatRegistry.list_formats()
    return {
        "status": "ok",
        "formats": formats,
        "summary": f"{len(formats)} formats supported: {', '.join(f['name'] for f in formats)}",
    }


COMMANDS = {
    "get": cmd_get,
    "create": cmd_create,
    "update": cmd_update,
    "delete": cmd_delete,
    "export": cmd_export,
    "import": cmd_import,
    "locales": cmd_locales,
    "formats": cmd_formats,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phrasestore",
        description="phrasestore - Phrase translation storage CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Read one translation
  phrasestore get --locale fr --domain messages --key welcome

  # Create a translation
  phrasestore create --locale fr --domain messages --key welcome --translation 'Bienvenue'

  # Download all configured domains for French
  phrasestore export --locale fr --output-dir translations/

  # Upload translations/messages.fr.xlf, translations/validators.fr.xlf, ...
  phrasestore import --locale fr --input-dir translations/
        """,
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG_FILE, help=f"Config file (default: {DEFAULT_CONFIG_FILE})")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (("get", "Show one translation"), ("delete", "Delete a key")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--locale", "-l", required=True, help="Locale code")
        sub.add_argument("--domain", "-d", required=True, help="Translation domain")
        sub.add_argument("--key", "-k", required=True, help="Message key")

    for name, help_text in (("create", "Create a translation"), ("update", "Update a translation")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--locale", "-l", required=True, help="Locale code")
        sub.add_argument("--domain", "-d", required=True, help="Translation domain")
        sub.add_argument("--key", "-k", required=True, help="Message key")
        sub.add_argument("--translation", "-t", required=True, help="Translated text")

    export_parser = subparsers.add_parser("export", help="Download XLIFF files")
    export_parser.add_argument("--locale", "-l", required=True, help="Locale code")
    export_parser.add_argument("--output-dir", "-o", default=".", help="Directory for <domain>.<locale>.xlf files")

    import_parser = subparsers.add_parser("import", help="Upload XLIFF files")
    import_parser.add_argument("--locale", "-l", required=True, help="Locale code")
    import_parser.add_argument("--input-dir", "-i", default=".", help="Directory with <domain>.<locale>.xlf (or .xliff) files")

    subparsers.add_parser("locales", help="Show configured locales and domains")
    subparsers.add_parser("formats", help="List supported file formats")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    try:
        result = COMMANDS[args.command](args)
        print(json.dumps(result, indent=2, ensure_ascii=False))
    except Exception as e:
        print(json.dumps({
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
        }), file=sys.stderr)
        sys.exit(1)

    if result.get("status") == "error":
        sys.exit(1)


if __name__ == "__main__":
    main()
