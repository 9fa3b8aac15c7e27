"""Change notifications for interactive refresh of panels and the editor."""

import logging
from collections import defaultdict
from typing import Callable, Literal

from pydantic import BaseModel

logger = logging.getLogger(__name__)

EventName = Literal[
    "note-saved",
    "note-deleted",
    "links-changed",
    "edges-changed",
    "create-wikilink",
]


class ChangeEvent(BaseModel):
    """Something in the graph changed.

    Attributes:
        name: Kind of change
        note_ids: Notes whose panels should refresh
        payload: Extra data, e.g. the text to turn into a reference for "create-wikilink"
    """

    name: EventName
    note_ids: list[str] = []
    payload: dict[str, str] = {}


Listener = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """Synchronous publish/subscribe channel.

    Listeners run in the emitting call, after the change has been committed.
    A failing listener is logged and does not affect the others or the emitter.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, name: EventName, listener: Listener) -> None:
        self._listeners[name].append(listener)

    def unsubscribe(self, name: EventName, listener: Listener) -> None:
        if listener in self._listeners[name]:
            self._listeners[name].remove(listener)

    def emit(self, event: ChangeEvent) -> None:
        for listener in list(self._listeners[event.name]):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Listener for {event.name} failed: {e}")
