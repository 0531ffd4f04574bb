# utils/file_utils.py

"""Size/date token parsing and path utilities."""
import os
import re
import sys
import datetime
from datetime import datetime as dt
from typing import Callable, Optional

from sharpfind.utils.i18n import translator as t

WarnCallback = Callable[[str], None]

SIZE_SUFFIXES = [
    ('gb', 1024 ** 3),
    ('mb', 1024 ** 2),
    ('kb', 1024),
]

RELATIVE_TIME_RE = re.compile(r'^(\d+)([dhms])$')
RELATIVE_TIME_UNITS = {
    'd': 'days',
    'h': 'hours',
    'm': 'minutes',
    's': 'seconds',
}

# Tried in order, first match wins; the token must have the exact shape
DATE_FORMATS = [
    (re.compile(r'^\d{4}$'), '%Y'),
    (re.compile(r'^\d{8}$'), '%Y%m%d'),
    (re.compile(r'^\d{8} \d{4}$'), '%Y%m%d %H%M'),
    (re.compile(r'^\d{4}-\d{2}-\d{2}$'), '%Y-%m-%d'),
    (re.compile(r'^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$'), '%Y-%m-%d %H:%M:%S'),
    (re.compile(r'^\d{4}/\d{2}/\d{2}$'), '%Y/%m/%d'),
    (re.compile(r'^\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}$'), '%Y/%m/%d %H:%M:%S'),
]

_INTEGER_RE = re.compile(r'^[+-]?\d+$')


def print_warning(message: str):
    """Default diagnostic sink for non-fatal parse problems."""
    print(f"{t.get('warning_prefix')} {message}", file=sys.stderr)


def parse_size(size_str: Optional[str], warn: Optional[WarnCallback] = None) -> Optional[int]:
    """Parse size string like '500', '10kb', '5MB', '2gb' to bytes.

    Returns None and reports through ``warn`` when the token can't be parsed.
    """
    warn = warn or print_warning
    if size_str is None or not size_str.strip():
        warn(t.get('invalid_size', size_str or ''))
        return None

    clean = size_str.strip().lower()
    multiplier = 1
    for suffix, factor in SIZE_SUFFIXES:
        if clean.endswith(suffix):
            multiplier = factor
            clean = clean[:-len(suffix)]
            break

    clean = clean.strip()
    if not _INTEGER_RE.match(clean):
        warn(t.get('invalid_size', size_str))
        return None
    return int(clean) * multiplier


def parse_time(date_str: Optional[str], now: Optional[dt] = None,
               warn: Optional[WarnCallback] = None) -> Optional[dt]:
    """Parse a relative ('2d', '3h', '15m', '30s') or absolute date string.

    Relative tokens are resolved against ``now`` (defaults to the current local
    time, taken when this function is called).
    """
    if date_str is None or not date_str.strip():
        return None
    warn = warn or print_warning
    date_str = date_str.strip()

    match = RELATIVE_TIME_RE.match(date_str)
    if match:
        reference = now if now is not None else dt.now()
        amount = int(match.group(1))
        unit = RELATIVE_TIME_UNITS[match.group(2)]
        try:
            return reference - datetime.timedelta(**{unit: amount})
        except OverflowError:
            warn(t.get('invalid_date', date_str))
            return None

    for shape, fmt in DATE_FORMATS:
        if not shape.fullmatch(date_str):
            continue
        try:
            return dt.strptime(date_str, fmt)
        except ValueError:
            continue

    warn(t.get('invalid_date', date_str))
    return None


def normalize_extension(ext: Optional[str]) -> Optional[str]:
    """Return the extension dot-prefixed ('cs' and '.cs' both give '.cs')."""
    if ext is None:
        return None
    ext = ext.strip()
    if not ext or ext == '.':
        return None
    return ext if ext.startswith('.') else '.' + ext


def get_extension(path: str) -> str:
    """Final extension of a path including the dot, or '' if there is none.

    A leading-dot name such as '.gitignore' is its own extension.
    """
    name = re.split(r'[\\/]', path)[-1]
    dot = name.rfind('.')
    if dot < 0 or dot == len(name) - 1:
        return ''
    return name[dot:]


def normalize_separators(path: str) -> str:
    """Convert native separators to the canonical '/'."""
    if os.sep != '/':
        path = path.replace(os.sep, '/')
    if os.altsep and os.altsep != '/':
        path = path.replace(os.altsep, '/')
    return path


def to_relative_path(full_path: str, root: str) -> str:
    """Path of ``full_path`` relative to ``root`` using '/' separators."""
    try:
        relative = os.path.relpath(full_path, root)
    except ValueError:
        # Different drives on Windows
        relative = full_path
    return normalize_separators(relative)


def format_size(size_bytes: int) -> str:
    """Formats bytes into a human-readable string (KB, MB, GB)."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"
