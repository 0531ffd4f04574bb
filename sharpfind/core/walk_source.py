# core/walk_source.py

"""Candidate source backed by a recursive filesystem walk."""
import os
import stat
from datetime import datetime as dt
from typing import Iterator

from sharpfind.core.data_structures import Candidate, FilterSpec
from sharpfind.core.errors import EnumerationFailure
from sharpfind.core.filter_engine import Predicate
from sharpfind.utils.file_utils import get_extension, to_relative_path
from sharpfind.utils.i18n import translator as t


class WalkSource:
    """
    Enumerates every regular file reachable from ``root``.

    Unreadable directories and files that vanish or can't be stat'ed are
    skipped. The extension check runs on the bare file name before the
    stat call; everything else is left to FilterEngine. Order is whatever
    ``os.walk`` yields.
    """
    pushed_down = frozenset({Predicate.EXTENSION})

    def __init__(self, root: str, spec: FilterSpec, follow_symlinks: bool = False):
        self.root = os.path.abspath(root)
        self.spec = spec
        self.follow_symlinks = follow_symlinks

    def __iter__(self) -> Iterator[Candidate]:
        if not os.path.isdir(self.root):
            raise EnumerationFailure(t.get('root_not_found', self.root))

        extension = self.spec.extension.casefold() if self.spec.extension else None
        visited_dirs = set()

        # onerror=None: directories that can't be listed are dropped silently
        for dirpath, dirnames, filenames in os.walk(self.root, followlinks=self.follow_symlinks):
            if self.follow_symlinks:
                real_dir = os.path.realpath(dirpath)
                if real_dir in visited_dirs:
                    dirnames[:] = []
                    continue
                visited_dirs.add(real_dir)

            for filename in filenames:
                if extension is not None and get_extension(filename).casefold() != extension:
                    continue

                full_path = os.path.join(dirpath, filename)
                try:
                    stat_info = os.stat(full_path)
                except OSError:
                    continue
                if not stat.S_ISREG(stat_info.st_mode):
                    continue

                yield Candidate(
                    full_path=full_path,
                    relative_path=to_relative_path(full_path, self.root),
                    size_bytes=stat_info.st_size,
                    modified_at=dt.fromtimestamp(stat_info.st_mtime),
                )
