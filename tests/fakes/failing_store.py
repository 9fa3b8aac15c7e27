from notegraph.domain.relationships import Edge, Link
from notegraph.stores.local_db import LocalGraphStore


class FailingGraphStore(LocalGraphStore):
    """In-memory store whose inserts start failing after a number of successes."""

    def __init__(self, fail_links_after: int | None = None, fail_edges_after: int | None = None):
        super().__init__(filepath=None)
        self.fail_links_after = fail_links_after
        self.fail_edges_after = fail_edges_after
        self.link_inserts = 0
        self.edge_inserts = 0

    def add_link(self, link: Link) -> None:
        with self.transaction():
            if self.fail_links_after is not None and self.link_inserts >= self.fail_links_after:
                raise OSError("disk full")
            self.link_inserts += 1
            super().add_link(link)

    def add_edge(self, edge: Edge) -> None:
        with self.transaction():
            if self.fail_edges_after is not None and self.edge_inserts >= self.fail_edges_after:
                raise OSError("disk full")
            self.edge_inserts += 1
            super().add_edge(edge)
