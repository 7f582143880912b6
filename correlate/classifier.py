"""
Type classifier: maps one ActivityRecord to an ActivityType.

The events-feed tag is authoritative when present; otherwise the title
conventions are consulted, and finally the record's structure decides.
"""
from correlate import conventions
from correlate.models import ActivityType
from normalize.models import ActivityRecord

REVIEW_EVENT = 'PullRequestReviewEvent'
REVIEW_COMMENT_EVENT = 'PullRequestReviewCommentEvent'

EVENT_TYPE_MAP = {
    REVIEW_EVENT: ActivityType.PULL_REQUEST,
    REVIEW_COMMENT_EVENT: ActivityType.COMMENT,
    'PullRequestEvent': ActivityType.PULL_REQUEST,
    'IssuesEvent': ActivityType.ISSUE,
    'IssueCommentEvent': ActivityType.COMMENT,
    'PushEvent': ActivityType.COMMIT,
    'CreateEvent': ActivityType.OTHER,
    'DeleteEvent': ActivityType.OTHER,
    'ForkEvent': ActivityType.OTHER,
    'WatchEvent': ActivityType.OTHER,
    'PublicEvent': ActivityType.OTHER,
    'GollumEvent': ActivityType.OTHER,
}


def classify(record: ActivityRecord) -> ActivityType:
    """Return the semantic activity type of a record. Never raises."""
    tagged = EVENT_TYPE_MAP.get(record.original_event_type or '')
    if tagged is not None:
        return tagged
    by_title = conventions.type_from_title(record.title)
    if by_title is not None:
        return ActivityType(by_title)
    return ActivityType.PULL_REQUEST if record.is_pull_request else ActivityType.ISSUE


def is_review(record: ActivityRecord) -> bool:
    """True for PR review records (tagged review events or 'Review on:' titles)."""
    if classify(record) is not ActivityType.PULL_REQUEST:
        return False
    return record.original_event_type == REVIEW_EVENT or conventions.is_review_title(record.title)


def is_review_comment(record: ActivityRecord) -> bool:
    """True for inline review comments, which are superseded by the review itself."""
    if classify(record) is not ActivityType.COMMENT:
        return False
    return record.original_event_type == REVIEW_COMMENT_EVENT or conventions.is_review_comment_title(record.title)
