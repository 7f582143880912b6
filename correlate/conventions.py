"""
Title conventions used to classify records that carry no events-feed tag.

Search-feed items and records built by older code only have a title to go on.
All prefix sniffing lives here so the conventions can be swapped out without
touching the classifier or its callers.
"""
from typing import Optional

REVIEW_PREFIX = 'Review on:'
REVIEW_COMMENT_PREFIX = 'Review comment on:'
COMMENT_PREFIX = 'Comment on:'

COMMIT_PREFIXES = ('Committed', 'Pushed')

OTHER_PREFIXES = (
    'Created branch',
    'Created tag',
    'Created repository',
    'Deleted branch',
    'Deleted tag',
    'Forked repository',
    'Starred',
    'Unstarred',
    'Made repository public',
)

WIKI_MARKER = 'wiki page'


def type_from_title(title: str) -> Optional[str]:
    """Return the activity type name implied by a title convention, or None when no convention matches.

    Checked in order: review, review comment, comment, commit, other.
    """
    text = title or ''
    if text.startswith(REVIEW_PREFIX):
        return 'pull_request'
    if text.startswith(REVIEW_COMMENT_PREFIX) or text.startswith(COMMENT_PREFIX):
        return 'comment'
    if text.startswith(COMMIT_PREFIXES):
        return 'commit'
    if text.startswith(OTHER_PREFIXES) or WIKI_MARKER in text:
        return 'other'
    return None


def is_review_title(title: str) -> bool:
    return (title or '').startswith(REVIEW_PREFIX)


def is_review_comment_title(title: str) -> bool:
    return (title or '').startswith(REVIEW_COMMENT_PREFIX)
