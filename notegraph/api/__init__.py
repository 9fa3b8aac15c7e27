import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notegraph.api.endpoints import get_endpoints_router
from notegraph.config import settings
from notegraph.edges import EdgeService
from notegraph.events import ChangeNotifier
from notegraph.llms.base import TextCompletion
from notegraph.stores.base import GraphStore
from notegraph.suggestions.client import SuggestionClient
from notegraph.suggestions.committer import AutoLinkCommitter
from notegraph.suggestions.session import SuggestionSession
from notegraph.sync import GraphSynchronizer


def create_app(
    *,
    store: GraphStore,
    llm: TextCompletion,
    notifier: ChangeNotifier | None = None,
) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    notifier = notifier or ChangeNotifier()
    client = SuggestionClient(
        store=store,
        llm=llm,
        threshold=settings.suggestion_threshold,
        max_candidates=settings.max_candidates,
        max_suggestions=settings.max_suggestions,
        recency_days=settings.recency_days,
        excerpt_chars=settings.excerpt_chars,
    )
    committer = AutoLinkCommitter(store=store, notifier=notifier)

    # The note suggestions panel and the canvas auto-link button are separate panels
    note_session = SuggestionSession(
        client=client,
        committer=committer,
        min_interval_seconds=settings.auto_analysis_min_interval_seconds,
    )
    canvas_session = SuggestionSession(client=client, committer=committer)

    app.include_router(
        router=get_endpoints_router(
            store=store,
            synchronizer=GraphSynchronizer(store=store, notifier=notifier),
            edge_service=EdgeService(store=store, notifier=notifier),
            committer=committer,
            note_session=note_session,
            canvas_session=canvas_session,
        )
    )

    return app


def serve(app: FastAPI) -> None:
    """Run the app with uvicorn on the configured host and port."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
