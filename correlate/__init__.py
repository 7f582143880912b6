"""
Correlate package: classify, bucket, reconcile and group GitHub activity records.
"""

from .models import ActivityType, SummaryBucket, DisplayGroup, empty_buckets
from .classifier import classify
from .categorizer import categorize, categorize_records
from .reconciler import reconcile
from .grouping import group_by_url, representative, display_groups, display_buckets
from .summary import summarize, grouped_for_export
from .filtering import apply_filters_and_sort, parse_search_text, parse_usernames

__all__ = [
    "ActivityType",
    "SummaryBucket",
    "DisplayGroup",
    "empty_buckets",
    "classify",
    "categorize",
    "categorize_records",
    "reconcile",
    "group_by_url",
    "representative",
    "display_groups",
    "display_buckets",
    "summarize",
    "grouped_for_export",
    "apply_filters_and_sort",
    "parse_search_text",
    "parse_usernames",
]
