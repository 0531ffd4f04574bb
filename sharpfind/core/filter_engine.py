# core/filter_engine.py

"""In-process predicate evaluation shared by every backend."""
from enum import Enum
from typing import Callable, FrozenSet, Iterable, List, Tuple

from sharpfind.core.data_structures import Candidate, FilterSpec
from sharpfind.utils.file_utils import get_extension


class Predicate(Enum):
    """Predicates a candidate source may guarantee through pushdown."""
    HIDDEN_DIRS = 'hidden_dirs'
    EXCLUDE = 'exclude'
    INCLUDE = 'include'
    EXTENSION = 'extension'
    SIZE = 'size'
    TIME = 'time'


def _fold_patterns(patterns: Iterable[str], ignore_case: bool) -> Tuple[str, ...]:
    return tuple(p.casefold() if ignore_case else p for p in patterns)


class FilterEngine:
    """
    Accepts or rejects candidates against a FilterSpec.

    Stages run cheapest first and stop at the first failure:
    hidden directories, exclude patterns, include patterns, extension,
    size bounds, time bounds. Stages that don't apply to the spec, or that
    the candidate source already guarantees (``pushed_down``), are left out.
    """

    def __init__(self, spec: FilterSpec, pushed_down: Iterable[Predicate] = ()):
        self.spec = spec
        self.pushed_down: FrozenSet[Predicate] = frozenset(pushed_down)

        self._hidden_dirs = frozenset(d.casefold() for d in spec.hidden_dirs)
        self._excludes = _fold_patterns(spec.exclude_patterns, spec.exclude_ignore_case)
        self._includes = _fold_patterns(spec.include_patterns, spec.ignore_case)
        self._extension = spec.extension.casefold() if spec.extension else None

        self._stages: List[Callable[[Candidate], bool]] = []
        applicable = [
            (Predicate.HIDDEN_DIRS, not spec.include_hidden_dirs and bool(self._hidden_dirs),
             self._check_hidden_dirs),
            (Predicate.EXCLUDE, bool(self._excludes), self._check_excludes),
            (Predicate.INCLUDE, bool(self._includes), self._check_includes),
            (Predicate.EXTENSION, self._extension is not None, self._check_extension),
            (Predicate.SIZE, spec.has_size_filter, self._check_size),
            (Predicate.TIME, spec.has_time_filter, self._check_time),
        ]
        for predicate, active, stage in applicable:
            if active and predicate not in self.pushed_down:
                self._stages.append(stage)

    def accepts(self, candidate: Candidate) -> bool:
        """True if the candidate clears every remaining stage."""
        return all(stage(candidate) for stage in self._stages)

    def _check_hidden_dirs(self, candidate: Candidate) -> bool:
        # The final segment is the file name and never counts
        segments = candidate.relative_path.split('/')[:-1]
        return not any(s.casefold() in self._hidden_dirs for s in segments)

    def _check_excludes(self, candidate: Candidate) -> bool:
        path = candidate.relative_path
        if self.spec.exclude_ignore_case:
            path = path.casefold()
        return not any(p in path for p in self._excludes)

    def _check_includes(self, candidate: Candidate) -> bool:
        path = candidate.relative_path
        if self.spec.ignore_case:
            path = path.casefold()
        return all(p in path for p in self._includes)

    def _check_extension(self, candidate: Candidate) -> bool:
        return get_extension(candidate.relative_path).casefold() == self._extension

    def _check_size(self, candidate: Candidate) -> bool:
        if self.spec.min_size is not None and candidate.size_bytes < self.spec.min_size:
            return False
        if self.spec.max_size is not None and candidate.size_bytes > self.spec.max_size:
            return False
        return True

    def _check_time(self, candidate: Candidate) -> bool:
        if self.spec.newer_than is not None and candidate.modified_at < self.spec.newer_than:
            return False
        if self.spec.older_than is not None and candidate.modified_at > self.spec.older_than:
            return False
        return True
