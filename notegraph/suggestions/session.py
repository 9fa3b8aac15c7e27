"""Per-panel coordination of suggestion requests.

One session belongs to one panel. It allows a single request in flight,
rate-limits automatic (typing-triggered) analysis, and drops results whose
note or panel is no longer current when the model answers.
"""

import asyncio
import logging
import time
from typing import Callable, Literal

from notegraph.domain.note import Note
from notegraph.errors import SessionBusyError

from .client import SuggestionClient
from .committer import AutoLinkCommitter
from .schemas import AutoLinkReport, LinkSuggestion, SuggestionBatch

logger = logging.getLogger(__name__)

Trigger = Literal["auto", "manual"]


class SuggestionSession:
    def __init__(
        self,
        *,
        client: SuggestionClient,
        committer: AutoLinkCommitter,
        min_interval_seconds: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.committer = committer
        self.min_interval_seconds = min_interval_seconds
        self.clock = clock

        self.current_note_id: str | None = None
        self.suggestions: list[LinkSuggestion] = []
        self._busy = False
        self._last_auto_run: float | None = None
        self._generation = 0

    @property
    def busy(self) -> bool:
        return self._busy

    def set_current_note(self, note_id: str | None) -> None:
        """Switch the panel to another note; in-flight results for the old one are dropped."""
        if note_id != self.current_note_id:
            self.current_note_id = note_id
            self.suggestions = []
            self._generation += 1

    def close(self) -> None:
        """Close the panel. Requests still in flight finish but are discarded."""
        self.set_current_note(None)
        self._generation += 1

    def clear_suggestions(self) -> None:
        """Dismiss the suggestions shown for the current note."""
        self.suggestions = []

    def _start(self, trigger: Trigger) -> bool:
        if self._busy:
            if trigger == "manual":
                raise SessionBusyError("A suggestion request is already in progress")
            logger.debug("Skipping automatic analysis: request in flight")
            return False
        if trigger == "auto":
            now = self.clock()
            if (
                self._last_auto_run is not None
                and now - self._last_auto_run < self.min_interval_seconds
            ):
                logger.debug("Skipping automatic analysis: rate limited")
                return False
            self._last_auto_run = now
        self._busy = True
        return True

    async def analyze(self, note: Note, trigger: Trigger = "auto") -> SuggestionBatch | None:
        """Request suggestions for ``note``.

        Returns:
            The batch, or None when the request was skipped (busy or rate
            limited) or its result was discarded because the context changed

        Raises:
            SessionBusyError: For a manual trigger while a request is in flight
            TransportError: If the language model call fails
        """
        if self.current_note_id != note.id:
            self.set_current_note(note.id)
        if not self._start(trigger):
            return None

        generation = self._generation
        try:
            batch = await asyncio.to_thread(self.client.suggest_for_note, note)
        finally:
            self._busy = False

        if generation != self._generation:
            logger.debug(f"Discarding suggestions for note {note.id}: context changed")
            return None
        self.suggestions = batch.suggestions
        return batch

    async def auto_link(self, notes: list[Note] | None = None) -> AutoLinkReport | None:
        """Run whole-canvas auto-linking and commit the accepted connections.

        Manual only: never rate limited, refused while another request runs.

        Returns:
            The report, or None if the panel was closed before the model answered
        """
        self._start("manual")
        generation = self._generation
        try:
            batch = await asyncio.to_thread(self.client.suggest_for_canvas, notes)
            if generation != self._generation:
                logger.debug("Discarding auto-link result: panel closed")
                return None
            return await asyncio.to_thread(self.committer.commit_batch, batch)
        finally:
            self._busy = False
