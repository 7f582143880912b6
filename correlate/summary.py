"""
Summary entry point and selection helpers used by the UI/export layer.
"""
from typing import Iterable, List, Optional, Set, Tuple, Union

from correlate.categorizer import categorize_records
from correlate.models import Buckets
from correlate.reconciler import reconcile
from normalize.dates import DateWindow
from normalize.models import ActivityRecord

GroupedRecords = List[Tuple[str, List[ActivityRecord]]]
SelectionKey = Union[int, str]


def summarize(
    event_records: List[ActivityRecord],
    search_records: List[ActivityRecord],
    window: DateWindow,
    reviewed_records: Optional[List[ActivityRecord]] = None,
) -> Buckets:
    """Run the strict primary pass over events-feed records, then reconcile search-feed records into it."""
    primary = categorize_records(event_records, window, strict=True)
    return reconcile(primary, search_records, window, reviewed_records)


def grouped_for_export(buckets: Buckets, selected_keys: Optional[Set[SelectionKey]] = None) -> GroupedRecords:
    """Non-empty (label, records) pairs in bucket order, restricted to the selection when one is given."""
    grouped = [(bucket.label, list(records)) for bucket, records in buckets.items() if records]
    if selected_keys:
        grouped = [(name, [r for r in records if r.selection_key in selected_keys]) for name, records in grouped]
        grouped = [(name, records) for name, records in grouped if records]
    return grouped


def all_displayed(buckets: Buckets) -> List[ActivityRecord]:
    return [record for records in buckets.values() for record in records]


def has_any(buckets: Buckets) -> bool:
    return any(records for records in buckets.values())


def total_count(buckets: Buckets) -> int:
    return sum(len(records) for records in buckets.values())


def group_select_state(records: Iterable[ActivityRecord], selected_keys: Set[SelectionKey]) -> Tuple[bool, bool]:
    """Return (checked, indeterminate) for a select-all checkbox over records."""
    records = list(records)
    if not records:
        return False, False
    selected = sum(1 for r in records if r.selection_key in selected_keys)
    if selected == 0:
        return False, False
    if selected == len(records):
        return True, False
    return False, True
