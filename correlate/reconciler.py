"""
Cross-source reconciler.

The events feed only keeps a limited window of recent events, so merges,
issue activity and reviews older than its retention go missing from the
primary pass. Search results are folded in here without duplicating what
the events feed already produced.
"""
import logging
from typing import Iterable, List, Optional, Set

from correlate.categorizer import categorize
from correlate.classifier import is_review
from correlate.models import ISSUE_BUCKETS, Buckets, SummaryBucket, empty_buckets
from normalize.dates import DateWindow
from normalize.models import ActivityRecord

logger = logging.getLogger(__name__)


def _copy_buckets(buckets: Buckets) -> Buckets:
    working = empty_buckets()
    for bucket, records in (buckets or {}).items():
        working[SummaryBucket(bucket)] = list(records)
    return working


def _add_merged_prs(buckets: Buckets, records: List[ActivityRecord], window: DateWindow) -> int:
    merged = buckets[SummaryBucket.PRS_MERGED]
    known_urls: Set[str] = {r.url for r in merged}
    added = 0
    for record in records:
        if not record.is_pull_request or not record.merged_at or record.url in known_urls:
            continue
        if window.contains(record.merged_at):
            merged.append(record)
            known_urls.add(record.url)
            added += 1
    return added


def _add_issues(buckets: Buckets, records: List[ActivityRecord], window: DateWindow) -> int:
    known_urls: Set[str] = {r.url for bucket in ISSUE_BUCKETS for r in buckets[bucket]}
    added = 0
    for record in records:
        if record.is_pull_request or record.url in known_urls:
            continue
        bucket = categorize(record, set(), window, strict=False)
        if bucket in ISSUE_BUCKETS:
            buckets[bucket].append(record)
            known_urls.add(record.url)
            added += 1
    return added


def _add_reviewed_prs(buckets: Buckets, records: Iterable[ActivityRecord]) -> int:
    reviewed = buckets[SummaryBucket.PRS_REVIEWED]
    # keyed by PR only: the reviewed-by query already returns one record per PR
    known_urls: Set[str] = {r.base_url for r in reviewed}
    added = 0
    for record in records:
        if record.base_url in known_urls:
            continue
        reviewed.append(record)
        known_urls.add(record.base_url)
        added += 1
    return added


def reconcile(
    primary_buckets: Buckets,
    supplementary_records: List[ActivityRecord],
    window: DateWindow,
    reviewed_records: Optional[List[ActivityRecord]] = None,
) -> Buckets:
    """Merge search-feed records into a copy of the primary buckets and return it.

    Parameters:
        primary_buckets: output of the strict events-feed categorization pass.
        supplementary_records: search-feed records for the window.
        window: the report window.
        reviewed_records: optional results of a dedicated reviewed-by query.

    Returns:
        a new bucket mapping; primary_buckets is left untouched.
    """
    buckets = _copy_buckets(primary_buckets)
    supplementary = list(supplementary_records or [])

    merged_added = _add_merged_prs(buckets, supplementary, window)
    issues_added = _add_issues(buckets, supplementary, window)

    review_candidates = list(reviewed_records or []) + [r for r in supplementary if is_review(r)]
    reviews_added = _add_reviewed_prs(buckets, review_candidates)

    logger.debug(
        "Reconciled %d supplementary records: %d merged PRs, %d issues, %d reviewed PRs added",
        len(supplementary), merged_added, issues_added, reviews_added,
    )
    return buckets
