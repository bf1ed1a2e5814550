"""Event bus for loose-coupled extensibility.

Lets the journal tell its front-end that entries changed without knowing
who is listening. Hooks are plain callables run on the emitting thread,
which for the journal is always the store's owner.

Usage::

    from inkwell.core.events import EventBus, Event, ENTRY_CREATED

    bus = EventBus()
    bus.on(ENTRY_CREATED, lambda event: print(event.payload["id"]))
    bus.emit(Event(name=ENTRY_CREATED, payload={"id": "..."}, source="store"))
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any

from loguru import logger

# ---------------------------------------------------------------------------
# Well-known event names
# ---------------------------------------------------------------------------

JOURNAL_LOADED = "journal.loaded"
JOURNAL_RELOADED = "journal.reloaded"
JOURNAL_MIGRATED = "journal.migrated"
ENTRY_CREATED = "journal.entry.created"
ENTRY_UPDATED = "journal.entry.updated"
ENTRY_DELETED = "journal.entry.deleted"


# ---------------------------------------------------------------------------
# Event model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Event:
    """An immutable event that flows through the bus."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time)
    source: str = ""


Hook = Callable[[Event], None]


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------


class EventBus:
    """Simple synchronous pub/sub event bus."""

    def __init__(self) -> None:
        self._hooks: dict[str, list[Hook]] = defaultdict(list)
        self._wildcard_hooks: list[Hook] = []

    def on(self, event_name: str, hook: Hook) -> None:
        """Register *hook* for a specific event name."""
        self._hooks[event_name].append(hook)

    def on_all(self, hook: Hook) -> None:
        """Register *hook* for all events (wildcard)."""
        self._wildcard_hooks.append(hook)

    def off(self, event_name: str, hook: Hook) -> None:
        """Unregister *hook* from a specific event name."""
        try:
            self._hooks[event_name].remove(hook)
        except ValueError:
            pass

    def emit(self, event: Event) -> None:
        """Run every matching hook. A failing hook never stops the others."""
        hooks = list(self._hooks.get(event.name, []))
        hooks.extend(self._wildcard_hooks)
        for hook in hooks:
            try:
                hook(event)
            except Exception as exc:
                logger.warning(f"Event hook failed for {event.name}: {exc}")

    def clear(self) -> None:
        """Remove all hooks."""
        self._hooks.clear()
        self._wildcard_hooks.clear()
