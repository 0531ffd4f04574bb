"""Core data structures for SharpFind."""
from enum import Enum
from typing import FrozenSet, NamedTuple, Optional, Tuple
from datetime import datetime as dt

# Directory names skipped unless hidden directories are requested
DEFAULT_HIDDEN_DIRS = frozenset({'.git', 'bin', 'obj'})


class Backend(Enum):
    """Where candidates come from."""
    WALK = 'walk'
    INDEX = 'index'


class FilterSpec(NamedTuple):
    """Immutable, fully-resolved description of all active search predicates.

    Patterns use '/' as path separator. Size bounds are bytes, time bounds are
    naive local datetimes; all bounds are inclusive.
    """
    include_patterns: Tuple[str, ...] = ()
    exclude_patterns: Tuple[str, ...] = ()
    ignore_case: bool = False
    exclude_ignore_case: bool = False
    extension: Optional[str] = None
    min_size: Optional[int] = None
    max_size: Optional[int] = None
    newer_than: Optional[dt] = None
    older_than: Optional[dt] = None
    include_hidden_dirs: bool = False
    hidden_dirs: FrozenSet[str] = DEFAULT_HIDDEN_DIRS
    result_limit: Optional[int] = None
    backend: Backend = Backend.WALK

    @property
    def has_size_filter(self) -> bool:
        return self.min_size is not None or self.max_size is not None

    @property
    def has_time_filter(self) -> bool:
        return self.newer_than is not None or self.older_than is not None

    @property
    def has_any_filter(self) -> bool:
        """Whether the filter spec restricts anything beyond the default exclusions."""
        return bool(self.include_patterns or self.extension
                    or self.has_size_filter or self.has_time_filter)


class Candidate(NamedTuple):
    """One file observed from a backend."""
    full_path: str
    relative_path: str
    size_bytes: int
    modified_at: dt


class IndexRow(NamedTuple):
    """A raw result row from an index provider."""
    path: str
    size: Optional[int]
    modified: Optional[dt]
