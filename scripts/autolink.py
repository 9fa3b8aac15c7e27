"""CLI for auto-linking every note in a local graph store with AI-suggested connections"""

import argparse
import sys

from anthropic import Anthropic
from loguru import logger

from notegraph.config import settings
from notegraph.llms.anthropic_completion import AnthropicTextCompletion
from notegraph.stores.local_db import LocalGraphStore
from notegraph.suggestions.client import SuggestionClient
from notegraph.suggestions.committer import AutoLinkCommitter


def main(store_path: str, threshold: float, dry_run: bool) -> None:
    store = LocalGraphStore(filepath=store_path)
    anthropic_client = Anthropic(
        api_key=settings.anthropic_api_key, timeout=settings.llm_timeout_seconds, max_retries=0
    )
    llm = AnthropicTextCompletion(
        anthropic_client, model=settings.llm_model, max_tokens=settings.llm_max_tokens
    )
    client = SuggestionClient(
        store=store, llm=llm, threshold=threshold, excerpt_chars=settings.excerpt_chars
    )

    batch = client.suggest_for_canvas()
    for suggestion in batch.suggestions:
        logger.info(
            f"{suggestion.source_note_id} -> {suggestion.target_note_id} "
            f"({suggestion.relationship_type.value}, {suggestion.confidence:.2f}): "
            f"{suggestion.reason}"
        )
    if dry_run:
        logger.info(f"Dry run: {len(batch.suggestions)} connections suggested, nothing saved")
        return

    report = AutoLinkCommitter(store=store).commit_batch(batch)
    logger.info(report.message)


if __name__ == "__main__":
    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--store",
        type=str,
        required=False,
        help="Local graph store file",
        default=settings.local_graph_store_path,
    )
    parser.add_argument(
        "--threshold",
        type=float,
        required=False,
        help="Minimum confidence for a connection to be created",
        default=settings.suggestion_threshold,
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Print suggestions without creating edges"
    )

    args = parser.parse_args()

    main(store_path=args.store, threshold=args.threshold, dry_run=args.dry_run)
