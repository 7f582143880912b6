"""
CLI entry point for the activity digest. Wires the pipeline: load raw JSON -> normalize -> summarize -> export
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List

from correlate.filtering import STATUS_FILTERS, TYPE_FILTERS, apply_filters_and_sort, parse_usernames
from correlate.grouping import display_buckets
from correlate.summary import all_displayed, grouped_for_export, summarize, total_count
from normalize.dates import DateWindow
from normalize.util import (
    available_labels,
    available_repositories,
    available_users,
    normalize_events,
    normalize_search_items,
)
from report.renderer import format_for_clipboard
from report.settings import load_export_settings

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = 'ACTIVITY_DIGEST_LOG_LEVEL'


def _configure_logging(level_name: str = ''):
    """Configure root logging from the CLI flag, then ACTIVITY_DIGEST_LOG_LEVEL, defaulting to WARNING."""
    name = (level_name or os.getenv(LOG_LEVEL_ENV_VAR) or 'WARNING').upper()
    level = getattr(logging, name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')


def _load_json_file(path: str, description: str):
    """Attempt to load a JSON file and return the parsed object or None on failure.
    Errors are printed here; the caller decides whether to exit.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        print(f"Failed to read {description} {path}: {e}", file=sys.stderr)
        return None


def _search_items(data: Any) -> List[Dict[str, Any]]:
    """Accept either a bare list of search items or a search response object with an 'items' list."""
    if isinstance(data, dict):
        return data.get('items') or []
    return data or []


def _load_inputs(args) -> Dict[str, Any]:
    """Load every input file named on the command line; returns None when any of them cannot be read."""
    events = _load_json_file(args.events, 'events file')
    if events is None or not isinstance(events, list):
        if events is not None:
            print(f"Invalid events file {args.events}; expected an array of events.", file=sys.stderr)
        return None

    inputs = {'events': events, 'search': [], 'reviewed': []}
    for key, path, description in (('search', args.search, 'search file'), ('reviewed', args.reviewed, 'reviewed file')):
        if not path:
            continue
        data = _load_json_file(path, description)
        if data is None:
            return None
        inputs[key] = _search_items(data)
    return inputs


def run_pipeline(window: DateWindow, inputs: Dict[str, Any]):
    """Normalize the loaded feeds and return the reconciled buckets."""
    event_records = normalize_events(inputs['events'], window)
    search_records = normalize_search_items(inputs['search'], window)
    reviewed_records = normalize_search_items(inputs['reviewed'], window)
    logger.info(
        "Loaded %d event records, %d search records, %d reviewed records for %s",
        len(event_records), len(search_records), len(reviewed_records), window,
    )
    return summarize(event_records, search_records, window, reviewed_records)


def _has_filters(args) -> bool:
    return bool(args.filter.strip() or args.user.strip() or args.type != 'all' or args.status != 'all')


def filter_buckets(buckets, args):
    """Narrow every bucket with the --type/--status/--user/--filter options; buckets come back newest first."""
    if not _has_filters(args):
        return buckets
    usernames = parse_usernames(args.user)
    filtered = {
        bucket: apply_filters_and_sort(
            records, kind=args.type, status=args.status, usernames=usernames, search_text=args.filter,
        )
        for bucket, records in buckets.items()
    }
    logger.info("Filters kept %d of %d records", sum(map(len, filtered.values())), sum(map(len, buckets.values())))
    return filtered


def render_filter_options(buckets) -> str:
    """JSON of the label, repository and user values present in the summary, for building --filter queries."""
    records = all_displayed(buckets)
    return json.dumps({
        'labels': available_labels(records),
        'repositories': available_repositories(records),
        'users': available_users(records),
    }, indent=2)


def render_summary(buckets, fmt: str) -> str:
    """Render the bucket view: one row per thread with its record count."""
    view = display_buckets(buckets)
    if fmt == 'json':
        payload = {
            bucket.label: [
                {
                    'key': group.key,
                    'count': group.count,
                    'title': group.representative.title,
                    'url': group.representative.url,
                    'updated_at': group.representative.updated_at,
                }
                for group in groups
            ]
            for bucket, groups in view.items()
        }
        return json.dumps(payload, indent=2, default=str)

    lines = [f"Total records: {total_count(buckets)}"]
    for bucket, groups in view.items():
        if not groups:
            continue
        lines.append('')
        lines.append(f"{bucket.label} ({len(groups)})")
        for group in groups:
            suffix = f" [x{group.count}]" if group.count > 1 else ''
            lines.append(f"- {group.representative.title}{suffix} - {group.representative.url}")
    return '\n'.join(lines)


def render_export(buckets, args, settings) -> str:
    payload = format_for_clipboard(
        all_displayed(buckets),
        compact=(args.output == 'compact'),
        grouped=True,
        grouped_data=grouped_for_export(buckets),
        cross_group=args.cross_group,
        settings=settings,
    )
    if args.format == 'json':
        return json.dumps(payload.as_dict(), indent=2)
    if args.format == 'html':
        return payload.html
    return payload.plain_text


def write_output(rendered: str, args):
    """Write output to the requested file, or stdout when no file was given."""
    if not args.out_file.strip():
        print(rendered)
        return
    out_path = args.out_file.strip()
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(out_path, 'w', encoding='utf-8') as fh:
        fh.write(rendered)
    print(f"Wrote report to {out_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="GitHub activity digest CLI")
    parser.add_argument("--events", type=str, required=True, help="Path to a JSON dump of the user's events feed")
    parser.add_argument("--search", type=str, default="", help="Path to a JSON dump of issue/PR search results (optional)")
    parser.add_argument("--reviewed", type=str, default="", help="Path to a JSON dump of reviewed-by search results (optional)")
    parser.add_argument("--start", type=str, required=True, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, required=True, help="End date (YYYY-MM-DD)")
    parser.add_argument("--output", type=str, choices=("summary", "compact", "detailed"), default="summary", help="What to produce: the bucket summary or a clipboard export")
    parser.add_argument("--format", type=str, choices=("text", "html", "json"), default="text", help="Output encoding")
    parser.add_argument("--cross-group", action="store_true", help="Drop titles already exported under an earlier group")
    parser.add_argument("--filter", type=str, default="", help="Search text: free text plus label:X, -label:X, user:X, repo:O/N, -repo:O/N tokens")
    parser.add_argument("--user", type=str, default="", help="Comma-separated logins; keep only their records")
    parser.add_argument("--type", type=str, choices=TYPE_FILTERS, default="all", help="Keep only issues, pull requests or comments")
    parser.add_argument("--status", type=str, choices=STATUS_FILTERS, default="all", help="Keep only open, closed or merged records")
    parser.add_argument("--list-filters", action="store_true", help="Print the labels, repositories and users available for filtering, then exit")
    parser.add_argument("--out-file", type=str, default="", help="Output file path. Prints to stdout when omitted")
    parser.add_argument("--config", type=str, default="", help="Path to export settings YAML (overrides ACTIVITY_DIGEST_CONFIG env)")
    parser.add_argument("--log-level", type=str, default="", help="Logging level (overrides ACTIVITY_DIGEST_LOG_LEVEL env)")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        window = DateWindow.parse(args.start, args.end)
    except ValueError as e:
        parser.error(str(e))

    inputs = _load_inputs(args)
    if inputs is None:
        return 1

    buckets = run_pipeline(window, inputs)
    if args.list_filters:
        write_output(render_filter_options(buckets), args)
        return 0
    buckets = filter_buckets(buckets, args)
    if args.output == 'summary':
        if args.format == 'html':
            parser.error("--format html is only available for compact and detailed exports")
        rendered = render_summary(buckets, args.format)
    else:
        rendered = render_export(buckets, args, load_export_settings(args.config or None))
    write_output(rendered, args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
