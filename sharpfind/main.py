#!/usr/bin/env python3
"""
SharpFind (sf) - Entry Point

Finds files under a root directory by path keywords, extension, size and
modification time, either by walking the directory tree or by querying the
Windows Search index.
"""

import argparse
import json
import os
import re
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from sharpfind import __version__
from sharpfind.core.config import Config
from sharpfind.core.data_structures import Candidate
from sharpfind.core.errors import BackendUnavailable, EnumerationFailure
from sharpfind.core.search_logic import build_filter_spec, search
from sharpfind.utils.file_utils import format_size
from sharpfind.utils.i18n import translator as t

_COUNT_RE = re.compile(r'^[+-]?\d+$')


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"count must be positive: {value!r}")
    return number


def resolve_head(parser: argparse.ArgumentParser, args):
    """Turn the optional --head value into a count.

    A value that is not a number is a keyword that followed a bare --head.
    """
    if args.head is None:
        return
    if not _COUNT_RE.match(args.head):
        args.keywords = list(args.keywords or []) + [args.head]
        args.head = None
        return
    try:
        args.head = positive_int(args.head)
    except argparse.ArgumentTypeError as e:
        parser.error(f"argument --head: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sf',
        description=t.get('app_description'),
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="""
Keywords must all appear in the file's path relative to the search root.
Results are limited to 10 by default (see --head and --all).

Examples:
  sf log --larger 10mb -l
    (Files whose path contains 'log' and that are at least 10 MB, with details)

  sf --use-index --ext jpg --newer 20231001 --older 20250930
    (JPEG files modified in that range, answered by the Windows Search index)

  sf src -x test --ext py --head 50 --output json > hits.json
"""
    )
    parser.add_argument('keywords', nargs='*', metavar='keyword',
                        help='Path keyword, same as --path (all must match)')

    filters = parser.add_argument_group('filtering')
    filters.add_argument('--path', action='append', default=[], metavar='KEYWORD',
                         help='Keyword that must appear in the relative path')
    filters.add_argument('--ipath', action='append', default=[], metavar='KEYWORD',
                         help='Like --path, and makes all keyword matching case-insensitive')
    filters.add_argument('-x', '--exclude', action='append', default=[], metavar='KEYWORD',
                         help='Skip files whose path contains this keyword (any match excludes)')
    filters.add_argument('--iexclude', action='append', default=[], metavar='KEYWORD',
                         help='Like --exclude, and makes exclude matching case-insensitive')
    filters.add_argument('--ext', metavar='EXT', help='File extension, with or without the dot')
    filters.add_argument('--larger', metavar='SIZE', help='At least this size (e.g. 500kb, 100mb, 2gb)')
    filters.add_argument('--smaller', metavar='SIZE', help='At most this size')
    filters.add_argument('--newer', metavar='WHEN',
                         help="Modified at or after (e.g. 1d, 2h, 30m, 2026, 20260101, '20260101 1230', 2026-01-01)")
    filters.add_argument('--older', metavar='WHEN', help='Modified at or before')
    filters.add_argument('--no-ignore-hidden', action='store_true',
                         help='Also search inside .git, bin, obj and other configured directories')

    search_opts = parser.add_argument_group('search')
    search_opts.add_argument('--root', metavar='DIR', help='Directory to search (default: current directory)')
    search_opts.add_argument('--use-index', action='store_true', help='Query the Windows Search index')
    search_opts.add_argument('--walk', action='store_true',
                             help='Walk the directory tree even if the config selects the index')
    search_opts.add_argument('--follow-symlinks', action='store_true',
                             help='Descend into symlinked directories while walking')
    search_opts.add_argument('--head', nargs='?', metavar='N',
                             help='Stop after N results (default: 10); a non-number after\n'
                                  '--head is taken as a keyword')
    search_opts.add_argument('--all', action='store_true', help='Do not limit the number of results')

    output = parser.add_argument_group('output')
    output.add_argument('-l', '--list', action='store_true', help='Show modification time and size')
    output.add_argument('--output', choices=['text', 'json'], default='text', help='Output format')
    output.add_argument('--progress', action='store_true', help='Show a progress bar on stderr')
    output.add_argument('--lang', choices=['en', 'ja'], help='Language for messages')
    output.add_argument('--config', type=Path, metavar='FILE',
                        help='Config file (default: ~/.sharpfind_config.json)')
    output.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def format_result(candidate: Candidate, detailed: bool) -> str:
    if not detailed:
        return candidate.relative_path
    modified = candidate.modified_at.strftime('%Y-%m-%d %H:%M')
    return f"{modified}  {format_size(candidate.size_bytes):>10s}  {candidate.relative_path}"


def result_to_json(candidate: Candidate) -> dict:
    return {
        "path": candidate.full_path,
        "relative_path": candidate.relative_path,
        "size_bytes": candidate.size_bytes,
        "modified_iso": candidate.modified_at.isoformat(),
    }


def run_search(args, config: Config) -> int:
    """Handles one search invocation and returns the exit status."""
    use_index = (args.use_index or bool(config.get('use_index'))) and not args.walk
    head = None if args.all else (args.head if args.head is not None else config.head_limit)

    spec = build_filter_spec(
        include=list(args.keywords) + args.path + args.ipath,
        exclude=args.exclude + args.iexclude,
        ignore_case=bool(args.ipath),
        exclude_ignore_case=bool(args.iexclude),
        ext=args.ext,
        larger=args.larger,
        smaller=args.smaller,
        newer=args.newer,
        older=args.older,
        head=head,
        include_hidden_dirs=args.no_ignore_hidden,
        hidden_dirs=config.hidden_dirs,
        use_index=use_index,
    )

    if not spec.has_any_filter:
        print(t.get('usage_hint'))
        return 0

    root = args.root or os.getcwd()
    follow_symlinks = args.follow_symlinks or bool(config.get('follow_symlinks'))
    emit = tqdm.write if args.progress else print
    json_results: List[dict] = []

    with tqdm(desc=t.get('scanning'), unit=' files', file=sys.stderr,
              disable=not args.progress, leave=False) as progress_bar:
        stream = search(root, spec, follow_symlinks=follow_symlinks,
                        progress_callback=lambda _candidate: progress_bar.update())
        for candidate in stream:
            if args.output == 'json':
                json_results.append(result_to_json(candidate))
            else:
                emit(format_result(candidate, args.list))

    if args.output == 'json':
        print(json.dumps(json_results, indent=2, ensure_ascii=False))
    else:
        print(t.get('found_status', stream.emitted), file=sys.stderr)
        if stream.limit_reached:
            print(t.get('limit_reached', stream.emitted), file=sys.stderr)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the sf command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    resolve_head(parser, args)

    config = Config(args.config)
    language = args.lang or config.get('language')
    if language:
        t.set_language(language)

    try:
        return run_search(args, config)
    except BackendUnavailable as e:
        print(f"{t.get('error_prefix')} {t.get('index_unavailable', e)}", file=sys.stderr)
        return 1
    except EnumerationFailure as e:
        print(f"{t.get('error_prefix')} {t.get('search_failed', e)}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print(f"\n{t.get('interrupted')}", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"{t.get('error_prefix')} {t.get('unexpected_error', e)}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
