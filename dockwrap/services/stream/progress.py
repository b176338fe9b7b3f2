"""Aggregation of pull/push/build progress into a multi-line view."""

from typing import Dict, Iterable, Iterator, List, Optional, Set

from ...models.progress import ProgressRecord


class MessageParser:
    """Keeps one display line per progress id.

    Progress streams repeat a record for every active layer or step,
    interleaved. Each id gets a fixed line, placed where it was first
    seen, whose text is replaced by every later record with that id.
    ``append`` returns the whole view; callers redraw rather than append.

    One instance serves one pull/push/build operation. It is not safe for
    concurrent use.
    """

    def __init__(self):
        self._order: List[str] = []
        self._latest: Dict[str, str] = {}
        self._seen: Set[str] = set()

    def append(self, record: ProgressRecord) -> str:
        """Record ``record`` and return the rendered view.

        Records without an id are single summary lines: their message is
        returned as is and nothing is stored.
        """
        if not record.has_id():
            return record.message()
        if record.id not in self._seen:
            self._order.append(record.id)
            self._seen.add(record.id)
        self._latest[record.id] = record.message()
        return self.render()

    def render(self) -> str:
        """The current view, one line per id in first-seen order."""
        return "\n".join(self._latest[i] for i in self._order)

    @property
    def ids(self) -> List[str]:
        return list(self._order)

    def __len__(self) -> int:
        return len(self._order)


def render_progress(
    records: Iterable[ProgressRecord], parser: Optional[MessageParser] = None
) -> Iterator[str]:
    """Yield the aggregated view after each record."""
    parser = parser or MessageParser()
    for record in records:
        yield parser.append(record)
