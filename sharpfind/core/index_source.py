# core/index_source.py

"""Candidate source backed by an OS-level content index."""
import os
from datetime import datetime as dt
from typing import ContextManager, Iterator, NamedTuple, Optional, Tuple

from sharpfind.core.data_structures import Candidate, FilterSpec, IndexRow
from sharpfind.core.filter_engine import Predicate
from sharpfind.utils.file_utils import to_relative_path


class IndexQuery(NamedTuple):
    """
    The part of a FilterSpec an index provider evaluates itself.

    Every populated field is an AND-ed clause. ``path_contains`` holds
    substrings of the full display path. Providers render this into their
    native query syntax.
    """
    scope: str
    min_size: Optional[int] = None
    max_size: Optional[int] = None
    newer_than: Optional[dt] = None
    older_than: Optional[dt] = None
    extension: Optional[str] = None
    path_contains: Tuple[str, ...] = ()
    files_only: bool = True


def build_index_query(root: str, spec: FilterSpec) -> IndexQuery:
    """Translate the pushdown-capable predicates of ``spec`` for ``root``."""
    return IndexQuery(
        scope=os.path.abspath(root),
        min_size=spec.min_size,
        max_size=spec.max_size,
        newer_than=spec.newer_than,
        older_than=spec.older_than,
        extension=spec.extension.lower() if spec.extension else None,
        path_contains=tuple(spec.include_patterns),
    )


class IndexProvider:
    """
    Contract for an external index service.

    ``query`` is a context manager yielding an iterator of IndexRow. The
    provider keeps its connection open while the iterator is in use and
    must release it when the context exits, whether the iterator was
    exhausted, abandoned or raised. It raises BackendUnavailable if the
    service can't be reached.
    """
    name = 'index'

    def query(self, index_query: IndexQuery) -> ContextManager[Iterator[IndexRow]]:
        raise NotImplementedError


class IndexSource:
    """
    Streams candidates for one IndexQuery.

    The provider matches include substrings case-insensitively against the
    full path and keeps timestamps at its own precision, so only size and
    extension are guaranteed here. Include, time, exclude and hidden
    directory stages are re-applied by FilterEngine.
    """
    pushed_down = frozenset({Predicate.SIZE, Predicate.EXTENSION})

    def __init__(self, root: str, spec: FilterSpec, provider: IndexProvider):
        self.root = os.path.abspath(root)
        self.spec = spec
        self.provider = provider

    @property
    def query(self) -> IndexQuery:
        return build_index_query(self.root, self.spec)

    def __iter__(self) -> Iterator[Candidate]:
        with self.provider.query(self.query) as rows:
            for row in rows:
                yield self._to_candidate(row)

    def _to_candidate(self, row: IndexRow) -> Candidate:
        return Candidate(
            full_path=row.path,
            relative_path=to_relative_path(row.path, self.root),
            size_bytes=int(row.size) if row.size is not None else 0,
            modified_at=row.modified if row.modified is not None else dt.min,
        )
