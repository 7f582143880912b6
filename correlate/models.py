"""
Taxonomy for classified and bucketed activity.
"""
import enum
from typing import Dict, List, Union

from normalize.dates import parse_timestamp
from normalize.models import ActivityRecord


class ActivityType(str, enum.Enum):
    ISSUE = 'issue'
    PULL_REQUEST = 'pull_request'
    COMMENT = 'comment'
    COMMIT = 'commit'
    OTHER = 'other'


class SummaryBucket(str, enum.Enum):
    """
    Named summary categories. Declaration order is display order; values are display labels.
    """
    PRS_OPENED = 'PRs - opened'
    PRS_UPDATED = 'PRs - updated'
    PRS_REVIEWED = 'PRs - reviewed'
    PRS_MERGED = 'PRs - merged'
    PRS_CLOSED = 'PRs - closed'
    ISSUES_OPENED = 'Issues - opened'
    ISSUES_UPDATED = 'Issues - updated'
    ISSUES_CLOSED = 'Issues - closed'
    COMMENTS = 'Comments'
    COMMITS = 'Commits'
    OTHER_EVENTS = 'Other Events'

    @property
    def label(self) -> str:
        return self.value


ISSUE_BUCKETS = (SummaryBucket.ISSUES_OPENED, SummaryBucket.ISSUES_CLOSED, SummaryBucket.ISSUES_UPDATED)

Buckets = Dict[SummaryBucket, List[ActivityRecord]]


def empty_buckets() -> Buckets:
    """Return a mapping with every bucket present and empty, in display order."""
    return {bucket: [] for bucket in SummaryBucket}


def updated_sort_key(record: ActivityRecord) -> float:
    """Sort/compare key on updated_at; unparsable dates sort before everything."""
    parsed = parse_timestamp(record.updated_at)
    return parsed.timestamp() if parsed is not None else float('-inf')


class DisplayGroup:
    """
    Records describing the same thread (issue, PR, review) collapsed for display.
    """
    def __init__(self, key: str, records: List[ActivityRecord]):
        self.key = key
        self.records = records

    @property
    def representative(self) -> ActivityRecord:
        """The most recently updated record; the first one wins ties."""
        latest = self.records[0]
        for record in self.records[1:]:
            if updated_sort_key(record) > updated_sort_key(latest):
                latest = record
        return latest

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def selection_key(self) -> Union[int, str]:
        return self.representative.selection_key

    def __repr__(self):
        return f"DisplayGroup({self.key!r}, count={self.count})"
