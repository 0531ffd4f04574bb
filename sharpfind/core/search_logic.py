# core/search_logic.py

"""Search orchestration: filter spec construction, backend selection and result streaming."""
from datetime import datetime as dt
from typing import Callable, Iterable, Iterator, Optional, Union

from sharpfind.core.data_structures import (
    Backend, Candidate, FilterSpec, DEFAULT_HIDDEN_DIRS
)
from sharpfind.core.filter_engine import FilterEngine
from sharpfind.core.index_source import IndexProvider, IndexSource
from sharpfind.core.walk_source import WalkSource
from sharpfind.core.windows_search import WindowsSearchProvider
from sharpfind.utils.file_utils import (
    WarnCallback, normalize_extension, normalize_separators, parse_size, parse_time
)

CandidateSource = Union[WalkSource, IndexSource]
ProgressCallback = Callable[[Candidate], None]


def build_filter_spec(include: Iterable[str] = (), exclude: Iterable[str] = (),
                      ignore_case: bool = False, exclude_ignore_case: bool = False,
                      ext: Optional[str] = None,
                      larger: Optional[str] = None, smaller: Optional[str] = None,
                      newer: Optional[str] = None, older: Optional[str] = None,
                      head: Optional[int] = None,
                      include_hidden_dirs: bool = False,
                      hidden_dirs: Iterable[str] = DEFAULT_HIDDEN_DIRS,
                      use_index: bool = False,
                      now: Optional[dt] = None,
                      warn: Optional[WarnCallback] = None) -> FilterSpec:
    """
    Resolve raw user tokens into a FilterSpec.

    Size and time tokens that can't be parsed are reported through ``warn``
    and leave their bound unset. ``now`` pins the reference instant for
    relative times like '2d'.
    """
    if head is not None and head <= 0:
        raise ValueError(f"Result limit must be positive, got {head}")

    return FilterSpec(
        include_patterns=tuple(normalize_separators(p) for p in include),
        exclude_patterns=tuple(normalize_separators(p) for p in exclude),
        ignore_case=ignore_case,
        exclude_ignore_case=exclude_ignore_case,
        extension=normalize_extension(ext),
        min_size=parse_size(larger, warn=warn) if larger is not None else None,
        max_size=parse_size(smaller, warn=warn) if smaller is not None else None,
        newer_than=parse_time(newer, now=now, warn=warn) if newer is not None else None,
        older_than=parse_time(older, now=now, warn=warn) if older is not None else None,
        include_hidden_dirs=include_hidden_dirs,
        hidden_dirs=frozenset(hidden_dirs),
        result_limit=head,
        backend=Backend.INDEX if use_index else Backend.WALK,
    )


def open_source(root: str, spec: FilterSpec, provider: Optional[IndexProvider] = None,
                follow_symlinks: bool = False) -> CandidateSource:
    """Pick the candidate source for ``spec.backend``.

    An index search never falls back to walking; an unavailable provider
    surfaces as BackendUnavailable when the stream is first pulled.
    """
    if spec.backend is Backend.INDEX:
        if provider is None:
            provider = WindowsSearchProvider()
        return IndexSource(root, spec, provider)
    return WalkSource(root, spec, follow_symlinks=follow_symlinks)


def _close(iterator):
    close = getattr(iterator, 'close', None)
    if close is not None:
        close()


class ResultStream:
    """
    Draws candidates from a source, filters them and stops at the limit.

    Nothing is drawn past the candidate that fills the limit, and the source
    iterator is closed on every exit path so index connections and directory
    handles are released even when the consumer stops early.
    """

    def __init__(self, source: Iterable[Candidate], engine: FilterEngine,
                 limit: Optional[int] = None,
                 progress_callback: Optional[ProgressCallback] = None):
        self.source = source
        self.engine = engine
        self.limit = limit
        self.progress_callback = progress_callback
        self.examined = 0
        self.emitted = 0

    @property
    def limit_reached(self) -> bool:
        return self.limit is not None and self.emitted >= self.limit

    def __iter__(self) -> Iterator[Candidate]:
        if self.limit_reached:
            return
        iterator = iter(self.source)
        try:
            for candidate in iterator:
                self.examined += 1
                if self.progress_callback:
                    self.progress_callback(candidate)

                if not self.engine.accepts(candidate):
                    continue

                self.emitted += 1
                if self.limit_reached:
                    # Release the source before handing out the last result
                    _close(iterator)
                    yield candidate
                    return
                yield candidate
        finally:
            _close(iterator)


def search(root: str, spec: FilterSpec, provider: Optional[IndexProvider] = None,
           follow_symlinks: bool = False,
           progress_callback: Optional[ProgressCallback] = None) -> ResultStream:
    """Build the ResultStream for one search under ``root``."""
    source = open_source(root, spec, provider=provider, follow_symlinks=follow_symlinks)
    engine = FilterEngine(spec, pushed_down=source.pushed_down)
    return ResultStream(source, engine, spec.result_limit, progress_callback)
