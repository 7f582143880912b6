"""
Record filtering and sorting for the summary and export views.

Search text supports a small query syntax on top of free text:
  label:<name>   record must carry the label (all given labels required)
  -label:<name>  record must not carry the label
  user:<login>   record author must be one of the given users
  repo:<o/n>     record must belong to one of the given repositories
  -repo:<o/n>    record must not belong to the repository
Whatever remains is matched case-insensitively against title, body and author.
"""
import functools
import re
from typing import Iterable, List, Optional, Tuple

from correlate.classifier import classify
from correlate.models import ActivityType, updated_sort_key
from normalize.models import ActivityRecord

TYPE_FILTERS = ('all', 'issue', 'pr', 'comment')
STATUS_FILTERS = ('all', 'open', 'closed', 'merged')

_EXCLUDED_LABEL = re.compile(r'-label:(\S+)')
_INCLUDED_LABEL = re.compile(r'\blabel:(\S+)')
_USER = re.compile(r'\buser:(\S+)')
_EXCLUDED_REPO = re.compile(r'-repo:(\S+)')
_INCLUDED_REPO = re.compile(r'\brepo:(\S+)')

_TYPE_NAMES = {
    ActivityType.ISSUE: 'issue',
    ActivityType.PULL_REQUEST: 'pr',
    ActivityType.COMMENT: 'comment',
}


class ParsedSearch:
    """
    Search text split into its filter tokens and the remaining free text.
    """
    def __init__(
        self,
        included_labels: Tuple[str, ...] = (),
        excluded_labels: Tuple[str, ...] = (),
        user_filters: Tuple[str, ...] = (),
        included_repos: Tuple[str, ...] = (),
        excluded_repos: Tuple[str, ...] = (),
        clean_text: str = '',
    ):
        self.included_labels = included_labels
        self.excluded_labels = excluded_labels
        self.user_filters = user_filters
        self.included_repos = included_repos
        self.excluded_repos = excluded_repos
        self.clean_text = clean_text

    def __eq__(self, other):
        return isinstance(other, ParsedSearch) and vars(self) == vars(other)

    def __repr__(self):
        return f"ParsedSearch({vars(self)!r})"


def _extract(pattern, text: str) -> Tuple[Tuple[str, ...], str]:
    """Collect pattern captures and blank them out of the text."""
    values = tuple(pattern.findall(text))
    return values, pattern.sub(' ', text)


@functools.lru_cache(maxsize=100)
def parse_search_text(search_text: str) -> ParsedSearch:
    """Split search text into label/user/repo tokens and free text.

    Exclusions are extracted before inclusions so '-label:x' never also counts as 'label:x'.

    >>> parse_search_text('label:bug -label:wontfix crash').clean_text
    'crash'
    """
    text = search_text or ''
    if not text.strip():
        return ParsedSearch()
    excluded_labels, text = _extract(_EXCLUDED_LABEL, text)
    included_labels, text = _extract(_INCLUDED_LABEL, text)
    users, text = _extract(_USER, text)
    excluded_repos, text = _extract(_EXCLUDED_REPO, text)
    included_repos, text = _extract(_INCLUDED_REPO, text)
    return ParsedSearch(
        included_labels=included_labels,
        excluded_labels=excluded_labels,
        user_filters=users,
        included_repos=included_repos,
        excluded_repos=excluded_repos,
        clean_text=' '.join(text.split()),
    )


def parse_usernames(usernames: Optional[str]) -> List[str]:
    """Split a comma-separated username list into lowercase logins, dropping blanks."""
    return [name.strip().lower() for name in (usernames or '').split(',') if name.strip()]


def item_type(record: ActivityRecord) -> Optional[str]:
    """'issue', 'pr' or 'comment'; None for commits and other repository events."""
    return _TYPE_NAMES.get(classify(record))


# --- individual filters ---

def filter_by_type(records: Iterable[ActivityRecord], kind: str = 'all') -> List[ActivityRecord]:
    if kind == 'all':
        return list(records)
    return [r for r in records if item_type(r) == kind]


def filter_by_status(records: Iterable[ActivityRecord], status: str = 'all') -> List[ActivityRecord]:
    """open/closed exclude merged pull requests; merged keeps only them."""
    if status == 'all':
        return list(records)
    if status == 'merged':
        return [r for r in records if r.is_pull_request and r.is_merged]
    return [r for r in records if not (r.is_pull_request and r.is_merged) and r.state == status]


def filter_by_labels(
    records: Iterable[ActivityRecord],
    included: Optional[Iterable[str]] = None,
    excluded: Optional[Iterable[str]] = None,
) -> List[ActivityRecord]:
    """Keep records carrying every included label and none of the excluded ones (case-insensitive)."""
    included = {name.lower() for name in included or []}
    excluded = {name.lower() for name in excluded or []}
    result = []
    for record in records:
        names = {label.name.lower() for label in record.labels}
        if included - names or names & excluded:
            continue
        result.append(record)
    return result


def filter_by_repository(
    records: Iterable[ActivityRecord],
    included: Optional[Iterable[str]] = None,
    excluded: Optional[Iterable[str]] = None,
) -> List[ActivityRecord]:
    """Records without a known repository only pass when no inclusion list is given."""
    included = {name.lower() for name in included or []}
    excluded = {name.lower() for name in excluded or []}
    result = []
    for record in records:
        repo = record.repository_name.lower()
        if included and repo not in included:
            continue
        if repo and repo in excluded:
            continue
        result.append(record)
    return result


def filter_by_users(records: Iterable[ActivityRecord], usernames: Optional[Iterable[str]] = None) -> List[ActivityRecord]:
    wanted = {name.lower() for name in usernames or [] if name}
    if not wanted:
        return list(records)
    return [r for r in records if r.user_login.lower() in wanted]


def filter_by_text(records: Iterable[ActivityRecord], search_text: str = '') -> List[ActivityRecord]:
    """Apply the search syntax: tokens first, then free text against title, body and author."""
    parsed = parse_search_text(search_text or '')
    records = filter_by_labels(records, parsed.included_labels, parsed.excluded_labels)
    records = filter_by_users(records, parsed.user_filters)
    records = filter_by_repository(records, parsed.included_repos, parsed.excluded_repos)
    if not parsed.clean_text:
        return records
    needle = parsed.clean_text.lower()
    return [
        r for r in records
        if needle in r.title.lower() or needle in (r.body or '').lower() or needle in r.user_login.lower()
    ]


def sort_by_updated(records: Iterable[ActivityRecord]) -> List[ActivityRecord]:
    """Newest first; records with unparsable dates go last. Stable for ties."""
    return sorted(records, key=updated_sort_key, reverse=True)


def apply_filters_and_sort(
    records: Iterable[ActivityRecord],
    kind: str = 'all',
    status: str = 'all',
    included_labels: Optional[Iterable[str]] = None,
    excluded_labels: Optional[Iterable[str]] = None,
    repositories: Optional[Iterable[str]] = None,
    usernames: Optional[Iterable[str]] = None,
    search_text: str = '',
) -> List[ActivityRecord]:
    """Run every filter in turn and return the survivors newest first."""
    result = filter_by_type(records, kind)
    result = filter_by_status(result, status)
    result = filter_by_labels(result, included_labels, excluded_labels)
    result = filter_by_repository(result, repositories)
    result = filter_by_users(result, usernames)
    result = filter_by_text(result, search_text)
    return sort_by_updated(result)
