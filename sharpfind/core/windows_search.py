# core/windows_search.py

"""Windows Search (SystemIndex) provider over OLE DB / ADODB."""
import re
from contextlib import contextmanager
from datetime import datetime as dt, timezone
from typing import Iterator, List, Optional

from sharpfind.core.data_structures import IndexRow
from sharpfind.core.errors import BackendUnavailable, EnumerationFailure
from sharpfind.core.index_source import IndexProvider, IndexQuery
from sharpfind.utils.i18n import translator as t
from sharpfind.utils.platform_utils import get_platform_info, supports_windows_search

CONNECTION_STRING = "Provider=Search.CollatorDSO;Extended Properties='Application=Windows';"
SELECT_COLUMNS = "System.ItemPathDisplay, System.Size, System.DateModified"

# ADODB ObjectStateEnum
AD_STATE_CLOSED = 0

_LIKE_SPECIAL_RE = re.compile(r'([%_\[])')


def escape_literal(value: str) -> str:
    """Double every single quote so the value is safe inside '...'."""
    return value.replace("'", "''")


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the pattern matches literally."""
    return _LIKE_SPECIAL_RE.sub(r'[\1]', value)


def format_timestamp(value: dt) -> Optional[str]:
    """Render a local naive datetime as the UTC literal SystemIndex compares against.

    Windows cannot look up the local offset of instants before 1970, so those use
    the current offset. Returns None when the instant has no UTC representation;
    the time bound is then left to the local post-filter.
    """
    try:
        utc_value = value.astimezone(timezone.utc)
    except (OSError, OverflowError, ValueError):
        try:
            utc_value = value - dt.now().astimezone().utcoffset()
        except OverflowError:
            return None
    return utc_value.strftime('%Y-%m-%d %H:%M:%S')


def render_sql(query: IndexQuery) -> str:
    """Build the Windows Search SQL statement for ``query``."""
    scope = query.scope.replace('\\', '/')
    conditions: List[str] = [f"SCOPE='file:{escape_literal(scope)}'"]

    if query.min_size is not None:
        conditions.append(f"System.Size >= {int(query.min_size)}")
    if query.max_size is not None:
        conditions.append(f"System.Size <= {int(query.max_size)}")
    for operator, bound in (('>=', query.newer_than), ('<=', query.older_than)):
        literal = format_timestamp(bound) if bound is not None else None
        if literal is not None:
            conditions.append(f"System.DateModified {operator} '{literal}'")
    if query.extension:
        conditions.append(f"System.FileExtension = '{escape_literal(query.extension.lower())}'")

    for pattern in query.path_contains:
        # ItemPathDisplay uses backslashes
        native = escape_like(pattern.replace('/', '\\'))
        conditions.append(f"System.ItemPathDisplay LIKE '%{escape_literal(native)}%'")

    if query.files_only:
        conditions.append("System.ItemType <> 'Directory'")

    where_clause = " AND ".join(conditions)
    return f"SELECT {SELECT_COLUMNS} FROM SystemIndex WHERE {where_clause}"


def _to_local(value) -> dt:
    """Convert a COM date (UTC, tz-aware in current pywin32) to a naive local datetime."""
    if value is None:
        return dt.min
    if value.tzinfo is not None:
        try:
            return dt.fromtimestamp(value.timestamp())
        except (OSError, OverflowError, ValueError):
            return (value + dt.now().astimezone().utcoffset()).replace(tzinfo=None)
    return dt(value.year, value.month, value.day, value.hour, value.minute,
              value.second, value.microsecond)


class WindowsSearchProvider(IndexProvider):
    """Runs IndexQuery objects against the local Windows Search service."""
    name = 'windows-search'

    def __init__(self, connection_string: str = CONNECTION_STRING):
        self.connection_string = connection_string

    def _load_com(self):
        if not supports_windows_search():
            raise BackendUnavailable(t.get('index_not_windows', get_platform_info()['name']))
        try:
            import pythoncom
            import pywintypes
            import win32com.client
        except ImportError as e:
            raise BackendUnavailable(t.get('index_no_pywin32')) from e
        return pythoncom, pywintypes, win32com.client

    @contextmanager
    def query(self, index_query: IndexQuery):
        pythoncom, pywintypes, client = self._load_com()
        sql = render_sql(index_query)

        pythoncom.CoInitialize()
        connection = None
        recordset = None
        try:
            try:
                connection = client.Dispatch("ADODB.Connection")
                connection.Open(self.connection_string)
                recordset = client.Dispatch("ADODB.Recordset")
                recordset.Open(sql, connection)
            except pywintypes.com_error as e:
                raise BackendUnavailable(t.get('index_open_failed', e)) from e

            yield self._iter_rows(recordset, pywintypes.com_error)
        finally:
            if recordset is not None and recordset.State != AD_STATE_CLOSED:
                recordset.Close()
            if connection is not None and connection.State != AD_STATE_CLOSED:
                connection.Close()
            pythoncom.CoUninitialize()

    @staticmethod
    def _iter_rows(recordset, com_error) -> Iterator[IndexRow]:
        try:
            while not recordset.EOF:
                fields = recordset.Fields
                path = fields.Item(0).Value or ''
                size = fields.Item(1).Value
                modified = fields.Item(2).Value
                yield IndexRow(
                    path=str(path),
                    size=int(size) if size is not None else None,
                    modified=_to_local(modified),
                )
                recordset.MoveNext()
        except com_error as e:
            raise EnumerationFailure(t.get('index_read_failed', e)) from e
