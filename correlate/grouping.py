"""
Display grouping: collapse records describing the same thread into one row with a count.
"""
from typing import Dict, List

from correlate.classifier import is_review
from correlate.models import Buckets, DisplayGroup, SummaryBucket
from normalize.models import ActivityRecord


def group_key(record: ActivityRecord) -> str:
    """Base URL of the thread; reviews are keyed per reviewer so two reviewers form two groups."""
    if is_review(record):
        return f"{record.user_login}:{record.base_url}"
    return record.base_url


def group_by_url(records: List[ActivityRecord]) -> Dict[str, List[ActivityRecord]]:
    """Map group key -> records, in first-seen order."""
    groups: Dict[str, List[ActivityRecord]] = {}
    for record in records:
        groups.setdefault(group_key(record), []).append(record)
    return groups


def representative(records: List[ActivityRecord]) -> ActivityRecord:
    """Most recently updated record of a non-empty group."""
    return DisplayGroup('', records).representative


def display_groups(records: List[ActivityRecord]) -> List[DisplayGroup]:
    return [DisplayGroup(key, members) for key, members in group_by_url(records).items()]


def display_buckets(buckets: Buckets) -> Dict[SummaryBucket, List[DisplayGroup]]:
    """Display groups for every bucket, empty buckets included."""
    return {bucket: display_groups(records) for bucket, records in buckets.items()}
