"""
Normalization utility helpers.
Small helpers to normalize raw GitHub events-feed and search-feed payloads into normalize.models entities.
"""
import logging
from typing import Dict, Any, List, Optional
from normalize.models import ActivityRecord, Label
from normalize.dates import DateWindow

logger = logging.getLogger(__name__)

GITHUB_WEB = 'https://github.com'
GITHUB_API = 'https://api.github.com'

# number of commit subjects / wiki pages listed in a generated body
_BODY_PREVIEW_LIMIT = 5


def _labels(raw: Any) -> List[Label]:
    """Convert a raw labels list into Label objects, skipping anything without a name."""
    if not isinstance(raw, list):
        return []
    labels = []
    for entry in raw:
        if isinstance(entry, dict) and entry.get('name'):
            labels.append(Label(entry.get('name'), entry.get('color') or None))
        elif isinstance(entry, str) and entry:
            labels.append(Label(entry))
    return labels


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _text(value: Any) -> str:
    return '' if value is None else str(value)


def _login(raw: Any) -> str:
    if not isinstance(raw, dict):
        return ''
    return raw.get('login') or ''


def _repo_fields(repo_name: str) -> Dict[str, Any]:
    return {'repository_url': f"{GITHUB_API}/repos/{repo_name}"} if repo_name else {}


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _first_line(message: Optional[str]) -> str:
    lines = _text(message).splitlines()
    return lines[0] if lines else ''


def _item_record(item: Dict[str, Any], title: str, event: Dict[str, Any], is_pr: bool, url: Optional[str] = None, extra: Optional[Dict[str, Any]] = None) -> ActivityRecord:
    """Build a record for an issue/PR-bearing event. created_at is the event timestamp and user is the actor."""
    repo_name = _text(_dict(event.get('repo')).get('name'))
    payload = _dict(event.get('payload'))
    fields = {
        'id': item.get('id'),
        'event_id': str(event.get('id')) if event.get('id') is not None else None,
        'title': title,
        'url': url or item.get('html_url') or '',
        'state': item.get('state') or 'open',
        'created_at': event.get('created_at'),
        'updated_at': item.get('updated_at') or event.get('created_at'),
        'user_login': _login(event.get('actor')),
        'closed_at': item.get('closed_at'),
        'merged_at': item.get('merged_at') or _dict(item.get('pull_request')).get('merged_at'),
        'is_pull_request': is_pr,
        'draft': item.get('draft'),
        'merged': item.get('merged'),
        'original_event_type': event.get('type'),
        'action': payload.get('action'),
        'labels': _labels(item.get('labels')),
        'body': item.get('body'),
        'number': item.get('number'),
    }
    fields.update(_repo_fields(repo_name))
    if extra:
        fields.update(extra)
    return ActivityRecord(**fields)


def _repo_record(event: Dict[str, Any], title: str, url: str, body: str = '', state: str = 'open') -> ActivityRecord:
    """Build a record for repository-level events (push, create, fork, ...) that carry no issue/PR."""
    repo_name = _text(_dict(event.get('repo')).get('name'))
    payload = _dict(event.get('payload'))
    event_id = event.get('id')
    fields = {
        'id': event_id,
        'event_id': str(event_id) if event_id is not None else None,
        'title': title,
        'url': url,
        'state': state,
        'created_at': event.get('created_at'),
        'updated_at': event.get('created_at'),
        'user_login': _login(event.get('actor')),
        'original_event_type': event.get('type'),
        'action': payload.get('action'),
        'body': body,
    }
    fields.update(_repo_fields(repo_name))
    return ActivityRecord(**fields)


def _push_record(event: Dict[str, Any], repo_name: str) -> ActivityRecord:
    payload = _dict(event.get('payload'))
    branch = _text(payload.get('ref')).replace('refs/heads/', '') or 'main'
    commits = [c for c in _list(payload.get('commits')) if isinstance(c, dict)]
    distinct = payload.get('distinct_size') if isinstance(payload.get('distinct_size'), int) else 0
    title = f"Pushed {_plural(distinct, 'commit')} to {branch}"
    if len(commits) > distinct:
        title += f" ({len(commits)} total)"
    lines = [f"- {_first_line(c.get('message'))}" for c in commits[:_BODY_PREVIEW_LIMIT]]
    if len(commits) > _BODY_PREVIEW_LIMIT:
        lines.append(f"... and {len(commits) - _BODY_PREVIEW_LIMIT} more commits")
    return _repo_record(event, title, f"{GITHUB_WEB}/{repo_name}/commits/{branch}", '\n'.join(lines))


def _create_record(event: Dict[str, Any], repo_name: str) -> ActivityRecord:
    payload = _dict(event.get('payload'))
    ref_type = payload.get('ref_type') or 'repository'
    ref = _text(payload.get('ref'))
    description = payload.get('description') or ''
    if ref_type == 'branch':
        return _repo_record(event, f"Created branch {ref}", f"{GITHUB_WEB}/{repo_name}/tree/{ref}", description)
    if ref_type == 'tag':
        return _repo_record(event, f"Created tag {ref}", f"{GITHUB_WEB}/{repo_name}/releases/tag/{ref}", description)
    title = f"Created repository: {description}" if description else 'Created repository'
    return _repo_record(event, title, f"{GITHUB_WEB}/{repo_name}", description)


def _delete_record(event: Dict[str, Any], repo_name: str) -> ActivityRecord:
    payload = _dict(event.get('payload'))
    ref_type = payload.get('ref_type') or 'branch'
    ref = _text(payload.get('ref'))
    title = f"Deleted {ref_type} {ref}" if ref_type in ('branch', 'tag') else f"Deleted {ref_type}"
    actor = _login(event.get('actor'))
    return _repo_record(event, title, f"{GITHUB_WEB}/{repo_name}", f"{actor} deleted {ref_type} {ref} from {repo_name}", state='closed')


def _fork_record(event: Dict[str, Any], repo_name: str) -> ActivityRecord:
    forkee = _dict(_dict(event.get('payload')).get('forkee'))
    name = forkee.get('full_name') or 'unknown repository'
    url = forkee.get('html_url') or f"{GITHUB_WEB}/{repo_name}"
    return _repo_record(event, f"Forked repository to {name}", url, f"Repository forked from {repo_name} to {name}")


def _watch_record(event: Dict[str, Any], repo_name: str) -> ActivityRecord:
    action = _dict(event.get('payload')).get('action') or 'started'
    verb = 'Starred' if action == 'started' else 'Unstarred'
    actor = _login(event.get('actor'))
    return _repo_record(event, f"{verb} repository", f"{GITHUB_WEB}/{repo_name}", f"{actor} {action} the repository {repo_name}")


def _public_record(event: Dict[str, Any], repo_name: str) -> ActivityRecord:
    actor = _login(event.get('actor'))
    return _repo_record(event, 'Made repository public', f"{GITHUB_WEB}/{repo_name}", f"{actor} made the repository {repo_name} public")


def _wiki_record(event: Dict[str, Any], repo_name: str) -> Optional[ActivityRecord]:
    pages = [p for p in _list(_dict(event.get('payload')).get('pages')) if isinstance(p, dict)]
    if not pages:
        return None
    first = pages[0]
    action = _text(first.get('action')) or 'edited'
    verb = {'created': 'Created', 'edited': 'Updated'}.get(action, 'Deleted')
    if len(pages) == 1:
        title = f"{verb} wiki page: {first.get('title') or ''}"
    else:
        title = f"{verb} {len(pages)} wiki pages"
    lines = [f"- {p.get('title') or ''} ({p.get('action') or ''})" for p in pages[:_BODY_PREVIEW_LIMIT]]
    if len(pages) > _BODY_PREVIEW_LIMIT:
        lines.append(f"... and {len(pages) - _BODY_PREVIEW_LIMIT} more pages")
    return _repo_record(event, title, first.get('html_url') or f"{GITHUB_WEB}/{repo_name}/wiki", '\n'.join(lines))


_REPO_EVENT_BUILDERS = {
    'PushEvent': _push_record,
    'CreateEvent': _create_record,
    'DeleteEvent': _delete_record,
    'ForkEvent': _fork_record,
    'WatchEvent': _watch_record,
    'PublicEvent': _public_record,
    'GollumEvent': _wiki_record,
}


def _issue_or_pr_record(event: Dict[str, Any]) -> Optional[ActivityRecord]:
    """Handle the events that embed an issue, pull request or comment payload."""
    event_type = event.get('type')
    payload = _dict(event.get('payload'))
    issue = payload.get('issue') if isinstance(payload.get('issue'), dict) else None
    pr = payload.get('pull_request') if isinstance(payload.get('pull_request'), dict) else None
    comment = payload.get('comment') if isinstance(payload.get('comment'), dict) else None

    if event_type == 'IssuesEvent' and issue:
        return _item_record(issue, issue.get('title') or '', event, bool(issue.get('pull_request')))
    if event_type == 'PullRequestEvent' and pr:
        return _item_record(pr, pr.get('title') or '', event, True)
    if event_type == 'PullRequestReviewEvent' and pr:
        # the review's own url carries a #pullrequestreview fragment when available
        review = _dict(payload.get('review'))
        return _item_record(pr, f"Review on: {pr.get('title') or ''}", event, True, url=review.get('html_url') or pr.get('html_url'))
    if event_type == 'IssueCommentEvent' and comment and issue:
        return _item_record(
            issue,
            f"Comment on: {issue.get('title') or ''}",
            event,
            bool(issue.get('pull_request')),
            url=comment.get('html_url'),
            extra={'id': comment.get('id'), 'updated_at': comment.get('updated_at') or event.get('created_at'), 'body': comment.get('body')},
        )
    if event_type == 'PullRequestReviewCommentEvent' and comment and pr:
        return _item_record(
            pr,
            f"Review comment on: {pr.get('title') or ''}",
            event,
            True,
            url=comment.get('html_url'),
            extra={'id': comment.get('id'), 'updated_at': comment.get('updated_at') or event.get('created_at'), 'body': comment.get('body')},
        )
    return None


def normalize_event(event: Dict[str, Any]) -> Optional[ActivityRecord]:
    """Create an ActivityRecord from one events-feed event.
    Returns None for event types that carry nothing to report (or malformed events).
    """
    if not isinstance(event, dict):
        return None
    event_type = event.get('type')
    builder = _REPO_EVENT_BUILDERS.get(event_type) if isinstance(event_type, str) else None
    if builder:
        repo_name = _text(_dict(event.get('repo')).get('name'))
        return builder(event, repo_name)
    record = _issue_or_pr_record(event)
    if record is None:
        logger.debug("Skipping unsupported event %s of type %s", event.get('id'), event_type)
    return record


def normalize_search_item(item: Dict[str, Any]) -> ActivityRecord:
    """Create an ActivityRecord from a search-feed issue/PR item.
    Search items describe current state and carry no event tag.
    """
    pr = item.get('pull_request') if isinstance(item.get('pull_request'), dict) else None
    return ActivityRecord(
        id=item.get('id'),
        title=item.get('title') or '',
        url=item.get('html_url') or '',
        state=item.get('state') or 'open',
        created_at=item.get('created_at'),
        updated_at=item.get('updated_at'),
        user_login=_login(item.get('user')),
        closed_at=item.get('closed_at'),
        merged_at=item.get('merged_at') or (pr or {}).get('merged_at'),
        is_pull_request=pr is not None or bool(item.get('pull_request')),
        draft=item.get('draft'),
        merged=item.get('merged'),
        repository_url=item.get('repository_url'),
        labels=_labels(item.get('labels')),
        body=item.get('body'),
        number=item.get('number'),
    )


def normalize_events(events: List[Dict[str, Any]], window: Optional[DateWindow] = None) -> List[ActivityRecord]:
    """Normalize an events-feed page list, dropping unsupported events and, when a window is given, events outside it."""
    records: List[ActivityRecord] = []
    for event in events or []:
        if window is not None and not window.contains(_dict(event).get('created_at')):
            continue
        record = normalize_event(event)
        if record is not None:
            records.append(record)
    return records


def normalize_search_items(items: List[Dict[str, Any]], window: Optional[DateWindow] = None) -> List[ActivityRecord]:
    """Normalize search-feed items, keeping those updated inside the window and the first item per URL."""
    records: List[ActivityRecord] = []
    seen_urls = set()
    for item in items or []:
        if not isinstance(item, dict):
            continue
        if window is not None and not window.contains(item.get('updated_at')):
            continue
        record = normalize_search_item(item)
        if record.url in seen_urls:
            continue
        seen_urls.add(record.url)
        records.append(record)
    return records


def available_labels(records: List[ActivityRecord]) -> List[str]:
    """Sorted unique label names across records."""
    return sorted({label.name for r in records for label in r.labels})


def available_repositories(records: List[ActivityRecord]) -> List[str]:
    """Sorted unique owner/name repository identifiers across records."""
    return sorted({r.repository_name for r in records if r.repository_name})


def available_users(records: List[ActivityRecord]) -> List[str]:
    """Sorted unique user logins across records."""
    return sorted({r.user_login for r in records if r.user_login})
