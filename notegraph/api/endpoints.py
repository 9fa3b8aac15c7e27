import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger

from notegraph.api.auth import verify_credentials
from notegraph.api.schemas import (
    AcceptSuggestionsInput,
    AnalyzeInput,
    EdgeInput,
    EdgeUpdate,
    LinkMentionInput,
    NoteInput,
    RenameInput,
)
from notegraph.config import settings
from notegraph.domain.note import Note
from notegraph.domain.relationships import RELATIONSHIP_TYPES, Edge, Link, RelationshipTypeInfo
from notegraph.edges import EdgeService
from notegraph.errors import (
    EdgeNotFoundError,
    MentionNotFoundError,
    NoteNotFoundError,
    SessionBusyError,
    StoreError,
    TransportError,
)
from notegraph.queries import Backlink, UnlinkedMention, find_unlinked_mentions, get_backlinks
from notegraph.scanning import Mention, scan_mentions
from notegraph.stores.base import GraphStore
from notegraph.suggestions.committer import AutoLinkCommitter
from notegraph.suggestions.schemas import AutoLinkReport, SuggestionBatch
from notegraph.suggestions.session import SuggestionSession
from notegraph.sync import GraphSynchronizer, SyncReport

AI_UNAVAILABLE = "The AI service is unavailable, please try again later"


def _get_note_or_404(store: GraphStore, note_id: str) -> Note:
    note = store.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return note


def _create_save_note_endpoint(store: GraphStore, synchronizer: GraphSynchronizer):
    """Create the note save endpoint handler."""

    async def save_note(
        note_id: str,
        note_input: NoteInput,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ) -> SyncReport:
        now = time.time()
        existing = store.get_note(note_id)
        note = Note(
            id=note_id,
            title=note_input.title,
            content=note_input.content,
            tags=note_input.tags,
            created=existing.created if existing else now,
            modified=now,
            x=note_input.x,
            y=note_input.y,
        )
        try:
            return synchronizer.save_note(note)
        except StoreError as e:
            logger.error(f"Error saving note {note_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to save note") from e

    return save_note


def _create_rename_note_endpoint(synchronizer: GraphSynchronizer):
    """Create the note rename endpoint handler."""

    async def rename_note(
        note_id: str,
        rename_input: RenameInput,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ):
        try:
            updated = synchronizer.rename_note(note_id, rename_input.title)
        except NoteNotFoundError as e:
            raise HTTPException(status_code=404, detail="Note not found") from e
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        except StoreError as e:
            logger.error(f"Error renaming note {note_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to rename note") from e
        return {"note_id": note_id, "title": rename_input.title.strip(), "links_updated": updated}

    return rename_note


def _create_delete_note_endpoint(synchronizer: GraphSynchronizer):
    """Create the note delete endpoint handler."""

    async def delete_note(
        note_id: str,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ):
        try:
            synchronizer.delete_note(note_id)
        except NoteNotFoundError as e:
            raise HTTPException(status_code=404, detail="Note not found") from e
        except StoreError as e:
            logger.error(f"Error deleting note {note_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to delete note") from e
        return {"deleted": note_id}

    return delete_note


def _create_backlinks_endpoint(store: GraphStore):
    """Create the backlinks panel endpoint handler."""

    async def backlinks(
        note_id: str,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ) -> List[Backlink]:
        _get_note_or_404(store, note_id)
        return get_backlinks(store, note_id, context_chars=settings.context_chars)

    return backlinks


def _create_unlinked_mentions_endpoint(store: GraphStore):
    """Create the unlinked mentions panel endpoint handler."""

    async def unlinked_mentions(
        note_id: str,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ) -> List[UnlinkedMention]:
        note = _get_note_or_404(store, note_id)
        return find_unlinked_mentions(
            store, note_id, note.title, context_chars=settings.context_chars
        )

    return unlinked_mentions


def _create_mentions_endpoint(store: GraphStore):
    """Create the endpoint listing references to other notes found in a note."""

    async def mentions(
        note_id: str,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ) -> List[Mention]:
        note = _get_note_or_404(store, note_id)
        titles = {
            other.id: other.title for other in store.get_all_notes() if other.id != note_id
        }
        return scan_mentions(note.content, titles)

    return mentions


def _create_link_mention_endpoint(synchronizer: GraphSynchronizer):
    """Create the endpoint that confirms an unlinked mention as a link."""

    async def link_mention(
        note_id: str,
        mention: LinkMentionInput,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ) -> Link:
        try:
            return synchronizer.link_mention(
                target_note_id=note_id,
                source_note_id=mention.source_note_id,
                position=mention.position,
            )
        except NoteNotFoundError as e:
            raise HTTPException(status_code=404, detail="Note not found") from e
        except MentionNotFoundError as e:
            logger.warning(f"Mention of {note_id} is gone: {str(e)}")
            raise HTTPException(status_code=409, detail="Mention no longer present") from e
        except StoreError as e:
            logger.error(f"Error linking mention of {note_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to create link") from e

    return link_mention


def _create_suggestions_endpoint(store: GraphStore, session: SuggestionSession):
    """Create the single-note suggestion endpoint handler."""

    async def suggestions(
        note_id: str,
        analyze_input: AnalyzeInput,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ):
        note = _get_note_or_404(store, note_id)
        try:
            batch = await session.analyze(note, trigger=analyze_input.trigger)
        except SessionBusyError as e:
            raise HTTPException(status_code=409, detail="Analysis already in progress") from e
        except TransportError as e:
            logger.error(f"Error requesting suggestions for {note_id}: {str(e)}")
            raise HTTPException(status_code=502, detail=AI_UNAVAILABLE) from e
        if batch is None:
            return {"skipped": True, "batch": None}
        return {"skipped": False, "batch": batch.model_dump(mode="json")}

    return suggestions


def _create_dismiss_suggestions_endpoint(session: SuggestionSession):
    """Create the endpoint that dismisses the suggestions shown for a note."""

    async def dismiss_suggestions(
        note_id: str,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ):
        if session.current_note_id != note_id:
            return {"dismissed": 0}
        dismissed = len(session.suggestions)
        session.clear_suggestions()
        return {"dismissed": dismissed}

    return dismiss_suggestions


def _create_accept_suggestions_endpoint(committer: AutoLinkCommitter):
    """Create the endpoint that commits accepted suggestions as edges."""

    async def accept_suggestions(
        accepted: AcceptSuggestionsInput,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ) -> AutoLinkReport:
        return committer.commit(accepted.suggestions)

    return accept_suggestions


def _create_auto_link_endpoint(session: SuggestionSession):
    """Create the whole-canvas auto-link endpoint handler."""

    async def auto_link(
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ):
        try:
            report = await session.auto_link()
        except SessionBusyError as e:
            raise HTTPException(status_code=409, detail="Auto-link already in progress") from e
        except TransportError as e:
            logger.error(f"Error auto-linking canvas: {str(e)}")
            raise HTTPException(status_code=502, detail=AI_UNAVAILABLE) from e
        if report is None:
            return AutoLinkReport(message="Auto-link cancelled")
        return report

    return auto_link


def _create_edge_endpoints(store: GraphStore, edge_service: EdgeService) -> APIRouter:
    """Create the canvas edge endpoints."""
    router = APIRouter()

    @router.get("/api/edges")
    async def list_edges(
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ) -> List[Edge]:
        return store.get_edges()

    @router.post("/api/edges")
    async def connect(
        edge_input: EdgeInput,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ) -> Edge:
        try:
            return edge_service.connect(
                edge_input.source,
                edge_input.target,
                relationship_type=edge_input.relationship_type,
                label=edge_input.label,
            )
        except NoteNotFoundError as e:
            raise HTTPException(status_code=404, detail="Note not found") from e
        except StoreError as e:
            logger.error(f"Error connecting notes: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to create edge") from e

    @router.patch("/api/edges/{edge_id}")
    async def update_edge(
        edge_id: str,
        edge_update: EdgeUpdate,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ) -> Edge:
        try:
            return edge_service.set_relationship_type(
                edge_id, edge_update.relationship_type, label=edge_update.label
            )
        except EdgeNotFoundError as e:
            raise HTTPException(status_code=404, detail="Edge not found") from e
        except StoreError as e:
            logger.error(f"Error updating edge {edge_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to update edge") from e

    @router.delete("/api/edges/{edge_id}")
    async def delete_edge(
        edge_id: str,
        request: Request,  # noqa: ARG001
        _: str = Depends(verify_credentials),
    ):
        try:
            deleted = edge_service.delete([edge_id])
        except StoreError as e:
            logger.error(f"Error deleting edge {edge_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to delete edge") from e
        if not deleted:
            raise HTTPException(status_code=404, detail="Edge not found")
        return {"deleted": edge_id}

    return router


def get_endpoints_router(
    *,
    store: GraphStore,
    synchronizer: GraphSynchronizer,
    edge_service: EdgeService,
    committer: AutoLinkCommitter,
    note_session: SuggestionSession,
    canvas_session: SuggestionSession,
) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @router.get("/api/relationship-types")
    async def relationship_types(
        _: str = Depends(verify_credentials),
    ) -> List[RelationshipTypeInfo]:
        return list(RELATIONSHIP_TYPES.values())

    router.put("/api/notes/{note_id}")(_create_save_note_endpoint(store, synchronizer))
    router.patch("/api/notes/{note_id}/title")(_create_rename_note_endpoint(synchronizer))
    router.delete("/api/notes/{note_id}")(_create_delete_note_endpoint(synchronizer))
    router.get("/api/notes/{note_id}/backlinks")(_create_backlinks_endpoint(store))
    router.get("/api/notes/{note_id}/mentions")(_create_mentions_endpoint(store))
    router.get("/api/notes/{note_id}/unlinked-mentions")(
        _create_unlinked_mentions_endpoint(store)
    )
    router.post("/api/notes/{note_id}/unlinked-mentions/link")(
        _create_link_mention_endpoint(synchronizer)
    )
    router.post("/api/notes/{note_id}/suggestions")(
        _create_suggestions_endpoint(store, note_session)
    )
    router.delete("/api/notes/{note_id}/suggestions")(
        _create_dismiss_suggestions_endpoint(note_session)
    )
    router.post("/api/suggestions/accept")(_create_accept_suggestions_endpoint(committer))
    router.post("/api/canvas/auto-link")(_create_auto_link_endpoint(canvas_session))
    router.include_router(_create_edge_endpoints(store, edge_service))

    return router
