"""
Clipboard export renderer: serialize activity records into plain text and HTML.

Records are deduplicated by title (newest wins) and rendered in compact
(one line per record, titles truncated) or detailed (numbered blocks) density,
either as a flat list or as named groups. HTML is rendered from the Jinja2
templates in report/templates and mirrors the plain text structure.
"""

import logging
import os
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from correlate.models import updated_sort_key
from normalize.models import ActivityRecord
from report.settings import resolve_settings
from report.text import contrast_color, format_date, truncate_middle

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), 'templates')

GroupedInput = Union[Mapping[str, List[ActivityRecord]], Sequence[Tuple[str, List[ActivityRecord]]]]

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(['html', 'xml', 'html.j2']),
    trim_blocks=True,
    lstrip_blocks=True,
)


class ClipboardPayload:
    """
    The two encodings of one export: text/plain and text/html.
    """
    def __init__(self, plain_text: str, html: str):
        self.plain_text = plain_text
        self.html = html

    def as_dict(self) -> Dict[str, str]:
        return {'plain_text': self.plain_text, 'html': self.html}


# --- deduplication ---

def deduplicate_by_title(records: Iterable[ActivityRecord]) -> List[ActivityRecord]:
    """Keep one record per exact title: the most recently updated one, in first-seen title order."""
    by_title: Dict[str, ActivityRecord] = {}
    for record in records:
        existing = by_title.get(record.title)
        if existing is None or updated_sort_key(record) > updated_sort_key(existing):
            by_title[record.title] = record
    return list(by_title.values())


def _group_pairs(grouped_data: Optional[GroupedInput]) -> List[Tuple[str, List[ActivityRecord]]]:
    if not grouped_data:
        return []
    if isinstance(grouped_data, Mapping):
        return [(str(name), list(items or [])) for name, items in grouped_data.items()]
    return [(str(name), list(items or [])) for name, items in grouped_data]


def deduplicate_within_groups(grouped_data: Optional[GroupedInput]) -> List[Tuple[str, List[ActivityRecord]]]:
    """Title-deduplicate each group independently."""
    return [(name, deduplicate_by_title(items)) for name, items in _group_pairs(grouped_data)]


def deduplicate_across_groups(grouped_data: Optional[GroupedInput]) -> List[Tuple[str, List[ActivityRecord]]]:
    """Title-deduplicate each group, then drop titles an earlier group already emitted (first group wins)."""
    seen_titles = set()
    result = []
    for name, items in deduplicate_within_groups(grouped_data):
        kept = [r for r in items if r.title not in seen_titles]
        seen_titles.update(r.title for r in kept)
        result.append((name, kept))
    return result


def _prepared_groups(grouped_data: Optional[GroupedInput], cross_group: bool) -> List[Tuple[str, List[ActivityRecord]]]:
    groups = deduplicate_across_groups(grouped_data) if cross_group else deduplicate_within_groups(grouped_data)
    return [(name, items) for name, items in groups if items]


# --- per-record fields ---

def _merged_pr(record: ActivityRecord) -> bool:
    return record.is_pull_request and record.is_merged


def record_status(record: ActivityRecord) -> str:
    """'merged' for merged pull requests, otherwise the raw state."""
    if _merged_pr(record):
        return 'merged'
    return record.state


def _type_label(record: ActivityRecord) -> str:
    return 'Pull Request' if record.is_pull_request else 'Issue'


def _is_draft(record: ActivityRecord) -> bool:
    return record.is_pull_request and bool(record.draft)


def _compact_title(record: ActivityRecord, settings: Dict[str, Any]) -> str:
    return truncate_middle(record.title, settings['max_title_length'], settings['separator'])


# --- plain text ---

def _compact_line(record: ActivityRecord, settings: Dict[str, Any]) -> str:
    return f"{_compact_title(record, settings)} ({record_status(record)}) - {record.url}"


def _detailed_block(index: int, record: ActivityRecord) -> str:
    lines = [
        f"{index}. {record.title}",
        f"   Link: {record.url}",
        f"   Type: {_type_label(record)}{' (DRAFT)' if _is_draft(record) else ''}",
        f"   Status: {record.state}{' (merged)' if _merged_pr(record) else ''}",
        f"   Created: {format_date(record.created_at)}",
        f"   Updated: {format_date(record.updated_at)}",
    ]
    if record.labels:
        lines.append(f"   Labels: {', '.join(label.name for label in record.labels)}")
    if record.body:
        lines.append('   Description:')
        lines.extend(f"     {line}" for line in record.body.split('\n'))
    return '\n'.join(lines) + '\n'


def _plain_compact(records: List[ActivityRecord], settings: Dict[str, Any]) -> str:
    return '\n'.join(_compact_line(r, settings) for r in records)


def _plain_detailed(records: List[ActivityRecord]) -> str:
    return '\n'.join(_detailed_block(i, r) for i, r in enumerate(records, start=1))


def _plain_grouped(groups: List[Tuple[str, List[ActivityRecord]]], compact: bool, settings: Dict[str, Any]) -> str:
    sections = []
    for name, items in groups:
        if compact:
            body = '\n'.join(f"- {_compact_line(r, settings)}" for r in items)
            sections.append(f"{name}\n{body}")
        else:
            sections.append(f"{name}\n{'=' * len(name)}\n\n{_plain_detailed(items)}")
    return '\n\n'.join(sections)


# --- html ---

def _label_view(label, settings: Dict[str, Any]) -> Dict[str, str]:
    if label.color:
        return {'name': label.name, 'background': f"#{str(label.color).lstrip('#')}", 'color': contrast_color(label.color)}
    return {'name': label.name, 'background': f"#{settings['default_label_color']}", 'color': contrast_color(settings['default_label_color'])}


def _status_color(record: ActivityRecord, settings: Dict[str, Any]) -> str:
    colors = settings['status_colors']
    if _merged_pr(record):
        return colors['merged']
    if record.state == 'closed':
        return colors['closed']
    return colors['open']


def _record_view(record: ActivityRecord, compact: bool, settings: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'title': _compact_title(record, settings) if compact else record.title,
        'url': record.url,
        'status': record_status(record),
        'state': record.state,
        'merged': _merged_pr(record),
        'status_color': _status_color(record, settings),
        'type': _type_label(record),
        'draft': _is_draft(record),
        'created': format_date(record.created_at),
        'updated': format_date(record.updated_at),
        'labels': [_label_view(label, settings) for label in record.labels],
        'body': record.body or '',
    }


def _render_html(groups: List[Tuple[Optional[str], List[ActivityRecord]]], compact: bool, settings: Dict[str, Any]) -> str:
    template = _env.get_template('compact.html.j2' if compact else 'detailed.html.j2')
    view = [{'name': name, 'items': [_record_view(r, compact, settings) for r in items]} for name, items in groups]
    return template.render(groups=view)


# --- public API ---

def render_plain_text(
    records: List[ActivityRecord],
    compact: bool,
    grouped: bool = False,
    grouped_data: Optional[GroupedInput] = None,
    cross_group: bool = False,
    settings: Optional[Dict[str, Any]] = None,
) -> str:
    """Render the text/plain encoding."""
    settings = resolve_settings(settings)
    if grouped and grouped_data is not None:
        return _plain_grouped(_prepared_groups(grouped_data, cross_group), compact, settings)
    items = deduplicate_by_title(records or [])
    return _plain_compact(items, settings) if compact else _plain_detailed(items)


def render_html(
    records: List[ActivityRecord],
    compact: bool,
    grouped: bool = False,
    grouped_data: Optional[GroupedInput] = None,
    cross_group: bool = False,
    settings: Optional[Dict[str, Any]] = None,
) -> str:
    """Render the text/html encoding."""
    settings = resolve_settings(settings)
    if grouped and grouped_data is not None:
        groups = _prepared_groups(grouped_data, cross_group)
    else:
        groups = [(None, deduplicate_by_title(records or []))]
    return _render_html(groups, compact, settings)


def format_for_clipboard(
    records: List[ActivityRecord],
    compact: bool,
    grouped: bool = False,
    grouped_data: Optional[GroupedInput] = None,
    cross_group: bool = False,
    settings: Optional[Dict[str, Any]] = None,
) -> ClipboardPayload:
    """Main export function: both clipboard encodings for a flat list or a set of named groups.

    Parameters:
        records: records for a flat export (ignored when grouped data is rendered).
        compact: one truncated line per record instead of numbered detailed blocks.
        grouped: render grouped_data as one heading per group.
        grouped_data: mapping or (name, records) pairs, in output order.
        cross_group: also drop titles that appeared in an earlier group.
        settings: export settings (see report.settings); defaults when omitted.
    """
    plain_text = render_plain_text(records, compact, grouped, grouped_data, cross_group, settings)
    html = render_html(records, compact, grouped, grouped_data, cross_group, settings)
    logger.debug("Formatted clipboard export (compact=%s, grouped=%s): %d chars", compact, grouped, len(plain_text))
    return ClipboardPayload(plain_text, html)
