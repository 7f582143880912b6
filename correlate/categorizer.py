"""
Categorizer: assigns a classified record to at most one SummaryBucket for a date window.

strict=True is the primary pass over events-feed records, whose membership in
the window is not guaranteed: records with no in-window activity are dropped.
strict=False is for search results that were already filtered to the window:
they always land somewhere.
"""
import logging
from typing import Iterable, Optional, Set

from correlate.classifier import classify, is_review, is_review_comment
from correlate.models import ActivityType, Buckets, SummaryBucket, empty_buckets
from normalize.dates import DateWindow
from normalize.models import ActivityRecord

logger = logging.getLogger(__name__)

_FIXED_BUCKETS = {
    ActivityType.COMMENT: SummaryBucket.COMMENTS,
    ActivityType.COMMIT: SummaryBucket.COMMITS,
    ActivityType.OTHER: SummaryBucket.OTHER_EVENTS,
}


def review_key(record: ActivityRecord) -> str:
    """Dedup key for reviews: one entry per reviewer per PR."""
    return f"{record.user_login}:{record.base_url}"


def _categorize_review(record: ActivityRecord, seen_review_keys: Set[str]) -> Optional[SummaryBucket]:
    key = review_key(record)
    if key in seen_review_keys:
        return None
    seen_review_keys.add(key)
    return SummaryBucket.PRS_REVIEWED


def _categorize_pull_request(record: ActivityRecord, window: DateWindow, strict: bool) -> Optional[SummaryBucket]:
    merged_in = bool(record.merged_at) and window.contains(record.merged_at)
    closed_in = bool(record.closed_at) and window.contains(record.closed_at)
    created_in = window.contains(record.created_at)

    if merged_in:
        return SummaryBucket.PRS_MERGED
    if record.state == 'closed' and closed_in and not record.merged_at:
        return SummaryBucket.PRS_CLOSED
    if created_in:
        return SummaryBucket.PRS_OPENED
    if not strict:
        return SummaryBucket.PRS_UPDATED
    if window.contains(record.updated_at) and not closed_in:
        return SummaryBucket.PRS_UPDATED
    return None


def _categorize_issue(record: ActivityRecord, window: DateWindow, strict: bool) -> Optional[SummaryBucket]:
    closed_in = bool(record.closed_at) and window.contains(record.closed_at)
    created_in = window.contains(record.created_at)
    # an events-feed action other than 'opened' (labeled, edited, ...) is an update, not an opening
    opened_action = not record.action or record.action == 'opened'

    if record.state == 'closed' and closed_in:
        return SummaryBucket.ISSUES_CLOSED
    if created_in and opened_action:
        return SummaryBucket.ISSUES_OPENED
    if not strict:
        return SummaryBucket.ISSUES_UPDATED
    if window.contains(record.updated_at) and not closed_in:
        return SummaryBucket.ISSUES_UPDATED
    return None


def categorize(record: ActivityRecord, seen_review_keys: Set[str], window: DateWindow, strict: bool = True) -> Optional[SummaryBucket]:
    """Return the bucket for a record, or None when it belongs in none.

    seen_review_keys is the caller-owned accumulator for review dedup; it is
    updated when a review is accepted.
    """
    activity_type = classify(record)

    if is_review(record):
        return _categorize_review(record, seen_review_keys)
    if is_review_comment(record):
        return None
    if activity_type in _FIXED_BUCKETS:
        return _FIXED_BUCKETS[activity_type]
    if activity_type is ActivityType.PULL_REQUEST:
        return _categorize_pull_request(record, window, strict)
    return _categorize_issue(record, window, strict)


def categorize_records(records: Iterable[ActivityRecord], window: DateWindow, strict: bool = True) -> Buckets:
    """Fold categorize() over records with a fresh review accumulator; returns every bucket."""
    buckets = empty_buckets()
    seen_review_keys: Set[str] = set()
    dropped = 0
    for record in records:
        bucket = categorize(record, seen_review_keys, window, strict)
        if bucket is None:
            dropped += 1
            continue
        buckets[bucket].append(record)
    logger.debug("Categorized records for %s (strict=%s); %d dropped", window, strict, dropped)
    return buckets
