# src/planstore/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Callable
from pathlib import Path
from typing import cast

from ..core.errors import ImportParseError
from ..core.state import AppState

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /export, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()

_COLLECTION_USAGE = "tasks|projects"


def _pick_store(state: AppState, which: str):
    return state.stores().get(which.lower())


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    lines = [
        "Status:",
        f"  Backend: {getattr(settings, 'backend', '?')}",
        f"  Data dir: {getattr(settings, 'data_dir', '?')}",
        f"  Auto-save quiet period: {getattr(settings, 'autosave_seconds', '?')}s",
    ]
    for name, store in state.stores().items():
        dirty = "unsaved changes" if store.is_dirty else "saved"
        lines.append(f"  {name}: {store.count()} records ({dirty})")
    return "\n".join(lines)


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks              -> all tasks
    /tasks <project_id> -> tasks of one project
    """
    store = state.task_store
    tasks = store.get_tasks_by_project(args[0]) if args else store.get_all()
    if not tasks:
        return "No tasks."
    lines = [f"Tasks ({len(tasks)}):"]
    for t in tasks:
        indent = "  " * max(0, t.level)
        lines.append(f"  {indent}{t.id} [{t.status}] {t.name} ({t.progress:.0%})")
    return "\n".join(lines)


def cmd_projects(state: AppState, args: list[str]) -> str:
    """
    /projects         -> all projects
    /projects active  -> only projects that are not completed/cancelled
    """
    store = state.project_store
    active_only = bool(args) and args[0].lower() == "active"
    projects = store.get_active_projects() if active_only else store.get_all()
    if not projects:
        return "No projects."
    lines = [f"Projects ({len(projects)}):"]
    for p in projects:
        lines.append(f"  {p.id} [{p.status}] {p.name}")
    return "\n".join(lines)


def cmd_export(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return f"Usage: /export {_COLLECTION_USAGE} <path>"
    store = _pick_store(state, args[0])
    if store is None:
        return f"Unknown collection: {args[0]}. Use {_COLLECTION_USAGE}."

    path = Path(args[1]).expanduser()
    text = store.export_to_json()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, "utf-8")
    except OSError as e:
        logger.exception("Export of %s to %s failed", store.name, path)
        return f"Export failed: {e}"
    return f"Exported {store.name} to {path}."


def cmd_import(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /import tasks <path>          -> upsert entities from a JSON array file
    /import tasks <path> --clear  -> replace the whole collection
    """
    clear_first = "--clear" in args
    rest = [a for a in args if a != "--clear"]
    if len(rest) != 2:
        return f"Usage: /import {_COLLECTION_USAGE} <path> [--clear]"
    store = _pick_store(state, rest[0])
    if store is None:
        return f"Unknown collection: {rest[0]}. Use {_COLLECTION_USAGE}."

    path = Path(rest[1]).expanduser()
    try:
        text = path.read_text("utf-8")
    except OSError as e:
        return f"Cannot read {path}: {e}"

    if emit and clear_first:
        with contextlib.suppress(Exception):
            emit(f"[IMPORT] Replacing all {store.name}...")

    try:
        n = store.import_from_json(text, clear_first=clear_first)
    except ImportParseError as e:
        logger.info("Import of %s from %s rejected: %s", store.name, path, e)
        return f"Import rejected, nothing was changed: {e}"
    return f"Imported {n} {store.name} from {path}."


def cmd_flush(state: AppState, args: list[str]) -> str:
    failed = [name for name, store in state.stores().items() if not store.force_flush()]
    if failed:
        return f"Flush failed for: {', '.join(failed)} (see log)."
    return "All stores flushed."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend, record counts and save state.")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [project_id].")
registry.register("projects", cmd_projects, help_text="List projects: /projects [active].")
registry.register(
    "export", cmd_export, help_text=f"Export a collection: /export {_COLLECTION_USAGE} <path>."
)
registry.register(
    "import",
    cmd_import,
    help_text=f"Import a collection: /import {_COLLECTION_USAGE} <path> [--clear].",
)
registry.register("flush", cmd_flush, help_text="Flush all stores to disk now.", aliases=["save"])
