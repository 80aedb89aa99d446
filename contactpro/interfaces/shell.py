"""Interactive shell for working through the contact list in one session."""
from __future__ import annotations

import shlex
from typing import Callable, Dict, List, Optional

from ..contacts import Contact
from ..errors import ContactError
from ..manager import ContactManager, Intent

HELP_TEXT = """Commands:
  list                      show the current view
  add                       add a contact (prompts for fields)
  edit <id>                 edit a contact (enter keeps the current value)
  delete <id> [<id> ...]    delete one or more contacts
  search <text>             filter by name/email (no text clears it)
  tag <tag>                 filter by tag (no tag clears it)
  recent on|off             only contacts created in the last 7 days
  sort name|recent          change the sort order
  reset                     clear all filters
  tags                      show the tags in use
  undo / redo               step through this session's changes
  export csv|json [path]    export (prints when no path is given)
  import <path>             replace the list with a .csv or .json file
  backup / restore          save or load the backup snapshot
  theme                     toggle light/dark
  help                      show this text
  quit                      leave the shell"""

FORM_FIELDS = ("name", "email", "phone", "address", "tags")


def run_shell(
    manager: ContactManager,
    input_func: Callable[[str], str] = input,
) -> int:
    print(f"ContactPro shell ({len(manager.store)} contacts, theme {manager.theme}). Type 'help'.")
    _render_view(manager)
    while True:
        try:
            line = input_func("\ncontactpro> ").strip()
        except EOFError:
            print("Goodbye!")
            return 0
        if not line:
            continue
        try:
            parts = shlex.split(line)
        except ValueError as exc:
            print(f"Could not parse command: {exc}")
            continue
        command, args = parts[0].lower(), parts[1:]
        if command in {"q", "quit", "exit"}:
            print("Goodbye!")
            return 0
        try:
            _handle(manager, command, args, input_func)
        except ContactError as exc:
            print(f"Error: {exc}")
        except (OSError, ValueError) as exc:
            print(f"Error: {exc}")


def _handle(
    manager: ContactManager,
    command: str,
    args: List[str],
    input_func: Callable[[str], str],
) -> None:
    if command == "help":
        print(HELP_TEXT)
    elif command == "list":
        _render_view(manager)
    elif command == "add":
        fields = _prompt_fields(input_func)
        contact = manager.dispatch(Intent.ADD, **fields)
        print(f"Added {contact.name} ({contact.id}).")
        _render_view(manager)
    elif command == "edit":
        if len(args) != 1:
            print("Usage: edit <id>")
            return
        current = manager.get_contact(args[0])
        fields = _prompt_fields(input_func, current)
        manager.dispatch(Intent.EDIT, contact_id=current.id, **fields)
        _render_view(manager)
    elif command == "delete":
        if not args:
            print("No contacts selected!")
            return
        removed = manager.dispatch(Intent.DELETE_SELECTED, contact_ids=args)
        print(f"Deleted {removed} contact(s).")
        _render_view(manager)
    elif command in {"search", "tag"}:
        manager.dispatch(Intent.SET_FILTER, field=command, value=" ".join(args))
        _render_view(manager)
    elif command == "recent":
        manager.dispatch(Intent.SET_FILTER, field="recent", value=(args[:1] or ["on"])[0])
        _render_view(manager)
    elif command == "sort":
        manager.dispatch(Intent.SET_SORT, value=(args[:1] or ["name"])[0])
        _render_view(manager)
    elif command == "reset":
        manager.reset_filters()
        _render_view(manager)
    elif command == "tags":
        tags = manager.tags()
        print(", ".join(tags) if tags else "No tags in use.")
    elif command in {"undo", "redo"}:
        if not manager.dispatch(Intent(command)):
            print(f"Nothing to {command}.")
        _render_view(manager)
    elif command == "export":
        fmt = (args[:1] or ["csv"])[0]
        if len(args) > 1:
            target = manager.export_to_file(args[1], fmt)
            print(f"Exported to {target}.")
        else:
            print(manager.dispatch(Intent.EXPORT, format=fmt))
    elif command == "import":
        if len(args) != 1:
            print("Usage: import <path>")
            return
        result = manager.import_file(args[0])
        for warning in result.warnings:
            print(f"Warning: {warning}")
        print("Data imported successfully!")
        _render_view(manager)
    elif command == "backup":
        manager.dispatch(Intent.BACKUP)
        print("Backup created successfully!")
    elif command == "restore":
        confirm = input_func("Restore from backup? This will overwrite current data. [y/N] ")
        if confirm.strip().lower().startswith("y"):
            manager.dispatch(Intent.RESTORE)
            print("Data restored successfully!")
            _render_view(manager)
    elif command == "theme":
        print(f"Theme: {manager.dispatch(Intent.TOGGLE_THEME)}")
    else:
        print(f"Unknown command {command!r}. Type 'help'.")


def _prompt_fields(
    input_func: Callable[[str], str],
    current: Optional[Contact] = None,
) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    for name in FORM_FIELDS:
        default = ""
        if current is not None:
            value = getattr(current, name)
            default = ", ".join(value) if name == "tags" else value
        label = name.capitalize() + (f" [{default}]" if default else "")
        answer = input_func(f"{label}: ").strip()
        fields[name] = answer or default
    return fields


def _render_view(manager: ContactManager) -> None:
    current = manager.current_view()
    criteria = current.criteria
    active = [
        f"search={criteria.search!r}" if criteria.search else "",
        f"tag={criteria.tag!r}" if criteria.tag else "",
        "recent" if criteria.recent else "",
    ]
    active = [item for item in active if item]
    print(f"\n=== Contacts ({current.count}) | sort: {criteria.sort_by}"
          + (f" | filters: {', '.join(active)}" if active else "") + " ===")
    for idx, contact in enumerate(current.contacts, 1):
        tags = " ".join(f"[{tag}]" for tag in contact.tags)
        print(
            f"[{idx:02d}] {contact.name} | {contact.email} | {contact.phone or '-'} | "
            f"{tags or '-'} | id {contact.id}"
        )
    flags = []
    if current.can_undo:
        flags.append("undo")
    if current.can_redo:
        flags.append("redo")
    if flags:
        print("Available: " + ", ".join(flags))
