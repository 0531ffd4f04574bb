"""Tests for the Windows Search provider against an in-memory ADODB double."""

import sys
import time
import types
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from sharpfind.core.data_structures import FilterSpec, IndexRow
from sharpfind.core.errors import BackendUnavailable, EnumerationFailure
from sharpfind.core.index_source import IndexQuery, IndexSource, build_index_query
from sharpfind.core.windows_search import (
    WindowsSearchProvider, _to_local, format_timestamp, render_sql
)

ADO_OPEN = 1


class FakeComError(Exception):
    pass


class FakeField:

    def __init__(self, value):
        self.Value = value


class FakeFields:

    def __init__(self, row):
        self.row = row

    def Item(self, index):
        return FakeField(self.row[index])


class FakeConnection:

    def __init__(self):
        self.State = 0
        self.connection_string = None

    def Open(self, connection_string):
        self.connection_string = connection_string
        self.State = ADO_OPEN

    def Close(self):
        self.State = 0


class FakeRecordset:
    """Forward-only cursor over a list of (path, size, modified) tuples."""

    def __init__(self, rows, open_error=False, fail_at=None):
        self.rows = rows
        self.open_error = open_error
        self.fail_at = fail_at
        self.position = 0
        self.State = 0
        self.sql = None

    def Open(self, sql, connection):
        if self.open_error:
            raise FakeComError("Search service not running")
        self.sql = sql
        self.State = ADO_OPEN

    @property
    def EOF(self):
        return self.position >= len(self.rows)

    @property
    def Fields(self):
        return FakeFields(self.rows[self.position])

    def MoveNext(self):
        self.position += 1
        if self.fail_at is not None and self.position == self.fail_at:
            raise FakeComError("cursor lost")

    def Close(self):
        self.State = 0


class FakeCom:
    """Stands in for the pythoncom, pywintypes and win32com.client modules."""

    def __init__(self, rows=(), open_error=False, fail_at=None):
        self.connection = FakeConnection()
        self.recordset = FakeRecordset(list(rows), open_error, fail_at)
        self.initialized = 0

        self.pythoncom = types.ModuleType("pythoncom")
        self.pythoncom.CoInitialize = self._co_initialize
        self.pythoncom.CoUninitialize = self._co_uninitialize
        self.pywintypes = types.ModuleType("pywintypes")
        self.pywintypes.com_error = FakeComError
        self.client = types.ModuleType("win32com.client")
        self.client.Dispatch = self._dispatch
        self.win32com = types.ModuleType("win32com")
        self.win32com.client = self.client

    def _co_initialize(self):
        self.initialized += 1

    def _co_uninitialize(self):
        self.initialized -= 1

    def _dispatch(self, prog_id):
        return {"ADODB.Connection": self.connection, "ADODB.Recordset": self.recordset}[prog_id]

    @property
    def released(self):
        return (self.connection.State == 0 and self.recordset.State == 0
                and self.initialized == 0)

    def modules(self):
        return {
            "pythoncom": self.pythoncom,
            "pywintypes": self.pywintypes,
            "win32com": self.win32com,
            "win32com.client": self.client,
        }


@pytest.fixture
def fake_com():
    """Install a FakeCom built from the given rows for the duration of a test."""
    patches = []

    def install(rows=(), **kwargs):
        com = FakeCom(rows, **kwargs)
        for p in (patch("sharpfind.core.windows_search.supports_windows_search", return_value=True),
                  patch.dict(sys.modules, com.modules())):
            p.start()
            patches.append(p)
        return com

    yield install
    for p in reversed(patches):
        p.stop()


@pytest.fixture
def tokyo_time(monkeypatch):
    """Pin the local timezone to UTC+9 (no DST)."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "JST-9")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


class TestProviderQuery:
    """Connection lifetime and error mapping of WindowsSearchProvider.query."""

    def test_reads_rows_and_releases_on_exhaustion(self, fake_com, tmp_path):
        modified = datetime(2025, 5, 5, 3, 0, tzinfo=timezone.utc)
        com = fake_com([(str(tmp_path / "a.txt"), 10, modified), (str(tmp_path / "b.txt"), 20, modified)])
        query = build_index_query(str(tmp_path), FilterSpec(min_size=5))

        with WindowsSearchProvider().query(query) as rows:
            assert com.initialized == 1
            result = list(rows)

        assert [row.path for row in result] == [str(tmp_path / "a.txt"), str(tmp_path / "b.txt")]
        assert [row.size for row in result] == [10, 20]
        assert com.recordset.sql == render_sql(query)
        assert com.released

    def test_null_columns(self, fake_com, tmp_path):
        fake_com([(str(tmp_path / "f"), None, None)])
        candidates = list(IndexSource(str(tmp_path), FilterSpec(), WindowsSearchProvider()))
        assert candidates[0].size_bytes == 0
        assert candidates[0].modified_at == datetime.min

    def test_releases_when_consumer_stops_early(self, fake_com, tmp_path):
        rows = [(str(tmp_path / f"f{i}"), i, None) for i in range(5)]
        com = fake_com(rows)
        iterator = iter(IndexSource(str(tmp_path), FilterSpec(), WindowsSearchProvider()))
        next(iterator)
        assert not com.released
        iterator.close()
        assert com.released
        assert com.recordset.position == 0

    def test_open_failure_is_backend_unavailable(self, fake_com, tmp_path):
        com = fake_com(open_error=True)
        with pytest.raises(BackendUnavailable, match="Search service not running"):
            list(IndexSource(str(tmp_path), FilterSpec(), WindowsSearchProvider()))
        assert com.released

    def test_read_failure_is_enumeration_failure(self, fake_com, tmp_path):
        rows = [(str(tmp_path / f"f{i}"), i, None) for i in range(5)]
        com = fake_com(rows, fail_at=2)
        seen = []
        with pytest.raises(EnumerationFailure, match="cursor lost"):
            for candidate in IndexSource(str(tmp_path), FilterSpec(), WindowsSearchProvider()):
                seen.append(candidate)
        assert len(seen) == 2
        assert com.released

    def test_row_values_are_index_rows(self, fake_com, tmp_path):
        fake_com([(str(tmp_path / "x"), 7, None)])
        with WindowsSearchProvider().query(IndexQuery(scope=str(tmp_path))) as rows:
            assert list(rows) == [IndexRow(str(tmp_path / "x"), 7, datetime.min)]


class TestTimeConversion:
    """Local and UTC instants on the way into and out of SystemIndex."""

    def test_bound_rendered_as_utc(self, tokyo_time):
        assert format_timestamp(datetime(2025, 1, 1, 9, 0)) == "2025-01-01 00:00:00"
        sql = render_sql(IndexQuery(scope="C:\\", newer_than=datetime(2025, 1, 1, 9, 0),
                                    older_than=datetime(2025, 6, 1)))
        assert "System.DateModified >= '2025-01-01 00:00:00'" in sql
        assert "System.DateModified <= '2025-05-31 15:00:00'" in sql

    def test_row_date_converted_to_local(self, tokyo_time):
        utc = datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc)
        assert _to_local(utc) == datetime(2025, 1, 1, 9, 0)

    def test_naive_row_date_kept(self):
        assert _to_local(datetime(2025, 1, 1, 12, 0)) == datetime(2025, 1, 1, 12, 0)

    def test_offset_lookup_failure_uses_current_offset(self, tokyo_time):
        class NoLocalOffset(datetime):
            # Windows raises for instants before the epoch
            def astimezone(self, tz=None):
                raise OSError(22, "Invalid argument")

        assert format_timestamp(NoLocalOffset(1969, 12, 31, 9, 0)) == "1969-12-31 00:00:00"

    def test_unrepresentable_bound_is_left_to_post_filter(self, tokyo_time):
        sql = render_sql(IndexQuery(scope="C:\\", older_than=datetime.min))
        assert "System.DateModified" not in sql
