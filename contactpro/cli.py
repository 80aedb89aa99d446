#!/usr/bin/env python3
"""ContactPro CLI."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Optional

from dotenv import load_dotenv

from .config import ConfigError, Settings, load_settings
from .contacts import Contact
from .errors import ContactError
from .manager import ContactManager


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contactpro",
        description="Manage a personal contact list with undo/redo, filters and CSV/JSON transfer.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List contacts.")
    list_parser.add_argument("--search", default="", help="Case-insensitive match on name or email.")
    list_parser.add_argument("--tag", default="", help="Only contacts carrying this exact tag.")
    list_parser.add_argument(
        "--recent",
        action="store_true",
        help="Only contacts created in the last 7 days.",
    )
    list_parser.add_argument(
        "--sort",
        default="name",
        help="Sort order: 'name' (A-Z) or 'recent' (last updated first). Anything else keeps insertion order.",
    )

    add_parser = subparsers.add_parser("add", help="Add a contact.")
    _add_field_arguments(add_parser, required=True)

    edit_parser = subparsers.add_parser("edit", help="Edit a contact by ID.")
    edit_parser.add_argument("contact_id", help="ID of the contact to edit.")
    _add_field_arguments(edit_parser, required=False)

    delete_parser = subparsers.add_parser("delete", help="Delete a contact by ID.")
    delete_parser.add_argument("contact_id")

    delete_many_parser = subparsers.add_parser("delete-many", help="Delete several contacts.")
    delete_many_parser.add_argument("contact_ids", nargs="+")

    subparsers.add_parser("tags", help="Show the tags in use.")

    export_parser = subparsers.add_parser("export", help="Export contacts as CSV or JSON.")
    export_parser.add_argument("--format", choices=("csv", "json"), default="csv")
    export_parser.add_argument(
        "--output",
        help="File or directory to write to (prints to stdout when omitted).",
    )

    import_parser = subparsers.add_parser(
        "import",
        help="Replace the contact list with a .csv or .json file.",
    )
    import_parser.add_argument("path")

    subparsers.add_parser("backup", help="Save a backup snapshot (overwrites the previous one).")
    subparsers.add_parser("restore", help="Replace the contact list with the backup snapshot.")

    theme_parser = subparsers.add_parser("theme", help="Show or toggle the light/dark theme.")
    theme_parser.add_argument("--toggle", action="store_true")

    subparsers.add_parser("shell", help="Interactive session with undo/redo.")

    return parser


def _add_field_arguments(parser: argparse.ArgumentParser, *, required: bool) -> None:
    parser.add_argument("--name", required=required)
    parser.add_argument("--email", required=required)
    parser.add_argument("--phone")
    parser.add_argument("--address")
    parser.add_argument("--tags", help="Comma-separated tags.")


def _fields_from_args(args: argparse.Namespace) -> dict:
    return {
        key: getattr(args, key)
        for key in ("name", "email", "phone", "address", "tags")
        if getattr(args, key) is not None
    }


def format_contact_rows(contacts: Iterable[Contact]) -> str:
    lines = []
    for contact in contacts:
        tags = ", ".join(contact.tags) if contact.tags else "-"
        lines.append(
            f"{contact.id}  {contact.name} <{contact.email}>  "
            f"phone: {contact.phone or '-'}  tags: {tags}"
        )
    return "\n".join(lines)


def _cmd_list(manager: ContactManager, args: argparse.Namespace) -> int:
    manager.set_filter("search", args.search)
    manager.set_filter("tag", args.tag)
    manager.set_filter("recent", args.recent)
    manager.set_sort(args.sort)
    current = manager.current_view()
    if current.contacts:
        print(format_contact_rows(current.contacts))
    print(f"{current.count} contact(s)")
    return 0


def _cmd_add(manager: ContactManager, args: argparse.Namespace) -> int:
    contact = manager.add_contact(**_fields_from_args(args))
    print(f"Added {contact.name} ({contact.id}).")
    return 0


def _cmd_edit(manager: ContactManager, args: argparse.Namespace) -> int:
    contact = manager.edit_contact(args.contact_id, **_fields_from_args(args))
    print(f"Updated {contact.name} ({contact.id}).")
    return 0


def _cmd_delete(manager: ContactManager, contact_ids: list[str]) -> int:
    removed = manager.delete_selected(contact_ids)
    print(f"Deleted {removed} contact(s).")
    return 0


def _cmd_tags(manager: ContactManager) -> int:
    tags = manager.tags()
    print("\n".join(tags) if tags else "No tags in use.")
    return 0


def _cmd_export(manager: ContactManager, fmt: str, output: Optional[str]) -> int:
    if output is None:
        print(manager.export(fmt))
        return 0
    target = manager.export_to_file(output, fmt)
    print(f"Exported {len(manager.store)} contact(s) to {target}.")
    return 0


def _cmd_import(manager: ContactManager, path: str) -> int:
    try:
        result = manager.import_file(path)
    except OSError as exc:
        print(f"Error importing file: {exc}", file=sys.stderr)
        return 1
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    print(f"Data imported successfully! {len(result.contacts)} contact(s) loaded.")
    return 0


def _cmd_backup(manager: ContactManager) -> int:
    backup = manager.backup()
    print(f"Backup created successfully! ({len(backup.contacts)} contact(s), {backup.timestamp})")
    return 0


def _cmd_restore(manager: ContactManager) -> int:
    backup = manager.restore()
    print(f"Data restored successfully! Backup from {backup.timestamp or 'unknown time'}.")
    return 0


def _cmd_theme(manager: ContactManager, toggle: bool) -> int:
    theme = manager.toggle_theme() if toggle else manager.theme
    print(f"Theme: {theme}")
    return 0


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
        configure_logging(settings)
        manager = ContactManager.from_settings(settings)
    except (ConfigError, ContactError) as exc:
        print(f"Startup failed: {exc}", file=sys.stderr)
        return 1

    try:
        return _run(manager, args, parser)
    except ContactError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def _run(manager: ContactManager, args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    if args.command == "list":
        return _cmd_list(manager, args)
    if args.command == "add":
        return _cmd_add(manager, args)
    if args.command == "edit":
        return _cmd_edit(manager, args)
    if args.command == "delete":
        return _cmd_delete(manager, [args.contact_id])
    if args.command == "delete-many":
        return _cmd_delete(manager, args.contact_ids)
    if args.command == "tags":
        return _cmd_tags(manager)
    if args.command == "export":
        return _cmd_export(manager, args.format, args.output)
    if args.command == "import":
        return _cmd_import(manager, args.path)
    if args.command == "backup":
        return _cmd_backup(manager)
    if args.command == "restore":
        return _cmd_restore(manager)
    if args.command == "theme":
        return _cmd_theme(manager, args.toggle)
    if args.command == "shell":
        from .interfaces.shell import run_shell

        return run_shell(manager)

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
