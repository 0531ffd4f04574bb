# core/errors.py

"""Search failures surfaced to callers."""


class SearchError(Exception):
    """Base class for failures that end a search."""
    pass


class BackendUnavailable(SearchError):
    """The index provider can't be opened or queried on this host."""
    pass


class EnumerationFailure(SearchError):
    """The walk or query failed as a whole, e.g. the root does not exist."""
    pass
