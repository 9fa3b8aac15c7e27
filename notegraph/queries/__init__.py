"""Read-side queries backing the backlinks and unlinked mentions panels."""

from notegraph.queries.backlinks import Backlink, get_backlinks
from notegraph.queries.unlinked import UnlinkedMention, find_unlinked_mentions

__all__ = [
    "Backlink",
    "UnlinkedMention",
    "find_unlinked_mentions",
    "get_backlinks",
]
