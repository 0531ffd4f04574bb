"""Shared fixtures: file trees and a stub index provider."""

import os
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

import pytest

from sharpfind.core.data_structures import IndexRow
from sharpfind.core.index_source import IndexProvider, IndexQuery
from sharpfind.utils.file_utils import get_extension
from sharpfind.utils.i18n import translator


@pytest.fixture(autouse=True)
def english_messages():
    """Pin message language so assertions on text don't depend on the locale."""
    previous = translator.current_lang
    translator.set_language('en')
    yield
    translator.set_language(previous)


def write_file(root: Path, relative: str, size: int = 0, mtime: datetime = None) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b'x' * size)
    if mtime is not None:
        stamp = time.mktime(mtime.timetuple())
        os.utime(path, (stamp, stamp))
    return path


@pytest.fixture
def sample_tree(tmp_path):
    """A small project tree with hidden/build dirs, mixed sizes and dates."""
    root = tmp_path / "project"
    write_file(root, "README.md", 100, datetime(2024, 6, 1, 12, 0))
    write_file(root, "src/app/main.cs", 2048, datetime(2025, 1, 15, 9, 30))
    write_file(root, "src/app/Helper.CS", 512, datetime(2023, 3, 1, 8, 0))
    write_file(root, "src/lib/util.py", 4096, datetime(2025, 2, 1, 10, 0))
    write_file(root, "src/tmp/scratch.cs", 10, datetime(2025, 1, 20, 0, 0))
    write_file(root, "docs/cache/page.html", 300, datetime(2022, 12, 31, 23, 59))
    write_file(root, "docs/guide.md", 20000, datetime(2025, 3, 3, 3, 3))
    write_file(root, ".git/config", 50, datetime(2025, 1, 1, 0, 0))
    write_file(root, "bin/app.exe", 3 * 1024 * 1024, datetime(2025, 1, 16, 0, 0))
    write_file(root, "obj/Debug/main.o", 700, datetime(2025, 1, 16, 0, 0))
    return root


def rows_for_tree(root: Path):
    """Index rows describing every regular file under ``root``."""
    rows = []
    for dirpath, _, filenames in os.walk(root):
        for name in filenames:
            full = os.path.join(dirpath, name)
            info = os.stat(full)
            rows.append(IndexRow(full, info.st_size, datetime.fromtimestamp(info.st_mtime)))
    return rows


class StubIndexProvider(IndexProvider):
    """
    In-process stand-in for an OS search index.

    Evaluates IndexQuery clauses the way a real index does: path substrings
    match case-insensitively against the full path. Tracks open connections
    and how many rows were handed out.
    """
    name = 'stub'

    def __init__(self, rows, fail_after=None):
        self.rows = list(rows)
        self.fail_after = fail_after
        self.queries = []
        self.open_connections = 0
        self.rows_served = 0

    def _matches(self, query: IndexQuery, row: IndexRow) -> bool:
        scope = query.scope.rstrip(os.sep) + os.sep
        if not row.path.startswith(scope):
            return False
        if query.min_size is not None and row.size < query.min_size:
            return False
        if query.max_size is not None and row.size > query.max_size:
            return False
        if query.newer_than is not None and row.modified < query.newer_than:
            return False
        if query.older_than is not None and row.modified > query.older_than:
            return False
        if query.extension and get_extension(row.path).lower() != query.extension:
            return False
        folded = row.path.casefold()
        return all(p.casefold() in folded for p in query.path_contains)

    @contextmanager
    def query(self, index_query: IndexQuery):
        self.queries.append(index_query)
        self.open_connections += 1
        try:
            yield self._serve(index_query)
        finally:
            self.open_connections -= 1

    def _serve(self, index_query):
        for row in self.rows:
            if not self._matches(index_query, row):
                continue
            if self.fail_after is not None and self.rows_served >= self.fail_after:
                raise RuntimeError("index connection dropped")
            self.rows_served += 1
            yield row


@pytest.fixture
def stub_provider_for(sample_tree):
    """Factory building a stub provider over the sample tree."""
    def factory(**kwargs):
        return StubIndexProvider(rows_for_tree(sample_tree), **kwargs)
    return factory
