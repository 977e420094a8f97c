#!/usr/bin/env python3
"""Storage maintenance CLI for filestore.

Runs storage operations directly against the base directory, without the
HTTP server. Useful for inspecting a resource, recovering trashed items
and seeding folders.

USAGE:
    storage_manager.py [--base-dir DIR] <command> <resource-key> [options]

    Commands:
      list     <key> [--path PATH] [--format table|json]
      mkdir    <key> <name> [--path PATH]
      shortcut <key> <name> <url> [--path PATH]
      upload   <key> <file> [<file> ...] [--path PATH]
      trash    <key> <path>
      restore  <key> <path>
      delete   <key> <path> [--yes]
      serve    [--host HOST] [--port PORT]

ENVIRONMENT VARIABLES:
    FILESTORE_BASE_DIR         Storage base directory (default: ./Storage)
    FILESTORE_MAX_UPLOAD_SIZE  Per-file upload cap in bytes
    FILESTORE_LOG_LEVEL        Log level for the server

EXAMPLES:
    # Show what's in the trash of resource "acme":
    storage_manager.py list acme --path .trash

    # Put a trashed item back:
    storage_manager.py restore acme .trash/20240101_120000_report.pdf

    # Permanently delete a folder without prompting:
    storage_manager.py delete acme old-exports --yes
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from filestore.config import DEFAULT_PREFIX, Settings
from filestore.exceptions import FilestoreError
from filestore.logger import create_logger
from filestore.storage import ItemKind, StorageService, UploadFile

KIND_LABELS = {
    ItemKind.FOLDER: "folder",
    ItemKind.FILE: "file",
    ItemKind.SHORTCUT: "shortcut",
}


def create_storage_service(settings: Settings, quiet: bool = True) -> StorageService:
    """Build a StorageService, logging only warnings and above when quiet."""
    logger = create_logger(
        name="filestore-cli",
        level=logging.WARNING if quiet else logging.DEBUG,
    )
    return StorageService.from_settings(settings, logger)


# ============================================================================
# Commands
# ============================================================================


def cmd_list(service: StorageService, key: str, path: Optional[str], format: str = "table") -> int:
    listing = service.list(key, path)

    if format == "json":
        print(json.dumps(listing.to_dict(), indent=2, ensure_ascii=False))
        return 0

    if not listing.items:
        print(f"No items in '/{listing.current_path}'")
        return 0

    print(f"\n{'Type':<10} {'Name':<40} {'Path':<40}")
    print("-" * 90)
    for item in listing.items:
        print(f"{KIND_LABELS[item.kind]:<10} {item.display_name:<40} {item.relative_path:<40}")

    print(f"\nTotal: {len(listing.items)} items")
    return 0


def cmd_mkdir(service: StorageService, key: str, path: Optional[str], name: str) -> int:
    result = service.create_folder(key, path, name)
    print(f"Created folder: {result.item.relative_path}")
    return 0


def cmd_shortcut(service: StorageService, key: str, path: Optional[str], name: str, url: str) -> int:
    result = service.create_shortcut(key, path, name, url)
    print(f"Created shortcut: {result.item.relative_path}")
    return 0


def cmd_upload(service: StorageService, key: str, path: Optional[str], files: List[str]) -> int:
    sources = [Path(f) for f in files]
    missing = [str(p) for p in sources if not p.is_file()]
    if missing:
        print(f"ERROR: Not a file: {', '.join(missing)}", file=sys.stderr)
        return 1

    handles = [open(p, "rb") for p in sources]
    try:
        uploads = [
            UploadFile(filename=p.name, stream=h, length=p.stat().st_size)
            for p, h in zip(sources, handles)
        ]
        result = service.upload(key, path, uploads)
    finally:
        for handle in handles:
            handle.close()

    for item in result.items:
        print(f"Uploaded: {item.relative_path}")
    skipped = len(sources) - len(result.items)
    if skipped:
        print(f"Skipped {skipped} empty file(s)")
    return 0


def cmd_trash(service: StorageService, key: str, path: str) -> int:
    trash_path = service.move_to_trash(key, path)
    print(f"Moved '{path}' to {trash_path}")
    return 0


def cmd_restore(service: StorageService, key: str, path: str) -> int:
    restored = service.restore_from_trash(key, path)
    print(f"Restored '{path}' as {restored}")
    return 0


def cmd_delete(service: StorageService, key: str, path: str, yes: bool = False) -> int:
    if not yes:
        answer = input(f"Permanently delete '{path}' from '{key}'? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Aborted")
            return 1
    service.delete(key, path)
    print(f"Deleted '{path}'")
    return 0


def cmd_serve(settings: Settings, host: Optional[str], port: Optional[int]) -> int:
    from filestore.web import serve

    if host:
        settings.server.host = host
    if port:
        settings.server.port = port
    serve(settings)
    return 0


# ============================================================================
# Main
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Storage maintenance CLI for filestore",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
EXAMPLES:
  List a resource root:
    %(prog)s list acme

  Create a folder inside "docs":
    %(prog)s mkdir acme "Invoices" --path docs

  Restore a trashed file:
    %(prog)s restore acme .trash/20240101_120000_report.pdf

ENVIRONMENT:
  FILESTORE_BASE_DIR, FILESTORE_MAX_UPLOAD_SIZE (see script header)
        """,
    )

    parser.add_argument(
        "--base-dir",
        help="Storage base directory. Overrides FILESTORE_BASE_DIR.",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Optional .env file to load settings from. Default: %(default)s",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging output for debugging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Storage operation", required=False)

    list_parser = subparsers.add_parser("list", help="List a folder")
    list_parser.add_argument("key", help="Resource key")
    list_parser.add_argument("--path", help="Folder path relative to the resource root")
    list_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format. Table for humans, JSON for scripts. Default: %(default)s",
    )

    mkdir_parser = subparsers.add_parser("mkdir", help="Create a folder")
    mkdir_parser.add_argument("key", help="Resource key")
    mkdir_parser.add_argument("name", help="Folder name (made unique if taken)")
    mkdir_parser.add_argument("--path", help="Parent folder path")

    shortcut_parser = subparsers.add_parser("shortcut", help="Create a .url shortcut")
    shortcut_parser.add_argument("key", help="Resource key")
    shortcut_parser.add_argument("name", help="Shortcut name (.url is appended)")
    shortcut_parser.add_argument("url", help="Target URL")
    shortcut_parser.add_argument("--path", help="Parent folder path")

    upload_parser = subparsers.add_parser("upload", help="Upload local files")
    upload_parser.add_argument("key", help="Resource key")
    upload_parser.add_argument("files", nargs="+", help="Local files to upload")
    upload_parser.add_argument("--path", help="Target folder path (created if missing)")

    trash_parser = subparsers.add_parser("trash", help="Move an item to the trash")
    trash_parser.add_argument("key", help="Resource key")
    trash_parser.add_argument("path", help="Item path")

    restore_parser = subparsers.add_parser("restore", help="Restore an item from the trash")
    restore_parser.add_argument("key", help="Resource key")
    restore_parser.add_argument("path", help="Trash entry path (.trash/<name>)")

    delete_parser = subparsers.add_parser("delete", help="Permanently delete an item")
    delete_parser.add_argument("key", help="Resource key")
    delete_parser.add_argument("path", help="Item path")
    delete_parser.add_argument("--yes", "-y", action="store_true", help="Don't ask for confirmation")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP server (needs uvicorn)")
    serve_parser.add_argument("--host", help="Bind host. Overrides FILESTORE_HOST.")
    serve_parser.add_argument("--port", type=int, help="Bind port. Overrides FILESTORE_PORT.")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    overrides = {f"{DEFAULT_PREFIX}_BASE_DIR": args.base_dir} if args.base_dir else None
    settings = Settings.from_env(env_file=args.env_file, overrides=overrides)

    if args.command == "serve":
        return cmd_serve(settings, args.host, args.port)

    service = create_storage_service(settings, quiet=not args.verbose)

    try:
        if args.command == "list":
            return cmd_list(service, args.key, args.path, args.format)
        elif args.command == "mkdir":
            return cmd_mkdir(service, args.key, args.path, args.name)
        elif args.command == "shortcut":
            return cmd_shortcut(service, args.key, args.path, args.name, args.url)
        elif args.command == "upload":
            return cmd_upload(service, args.key, args.path, args.files)
        elif args.command == "trash":
            return cmd_trash(service, args.key, args.path)
        elif args.command == "restore":
            return cmd_restore(service, args.key, args.path)
        elif args.command == "delete":
            return cmd_delete(service, args.key, args.path, args.yes)
    except FilestoreError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
