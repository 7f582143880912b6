"""
Unified data models for normalized GitHub activity.
Both the events feed and the search feed are normalized into ActivityRecord.
"""

from typing import Any, List, Optional, Union


def _text(value: Any) -> str:
    return '' if value is None else str(value)


class Label:
    """
    Issue/PR label. color is a hex string without the leading '#'.
    """
    def __init__(self, name: str, color: Optional[str] = None):
        self.name = _text(name)
        self.color = str(color) if color not in (None, '') else None

    def __eq__(self, other):
        return isinstance(other, Label) and (self.name, self.color) == (other.name, other.color)

    def __repr__(self):
        return f"Label({self.name!r}, {self.color!r})"


class ActivityRecord:
    """
    One unit of GitHub activity: an issue, a pull request, a comment, a review, a push, ...
    Records are treated as immutable once built.
    """
    def __init__(
        self,
        id: Union[int, str],
        title: str,
        url: str,
        state: str,
        created_at: str,
        updated_at: str,
        user_login: str,
        closed_at: Optional[str] = None,
        merged_at: Optional[str] = None,
        is_pull_request: bool = False,
        draft: Optional[bool] = None,
        merged: Optional[bool] = None,
        event_id: Optional[str] = None,
        original_event_type: Optional[str] = None,
        action: Optional[str] = None,
        repository_url: Optional[str] = None,
        labels: Optional[List[Label]] = None,
        body: Optional[str] = None,
        number: Optional[int] = None,
    ):
        self.id = id
        self.title = _text(title)
        self.url = _text(url)
        self.state = _text(state)
        self.created_at = created_at
        self.updated_at = updated_at
        self.user_login = _text(user_login)
        self.closed_at = closed_at
        self.merged_at = merged_at
        self.is_pull_request = bool(is_pull_request)
        self.draft = draft
        self.merged = merged
        self.event_id = event_id  # events feed only
        self.original_event_type = original_event_type  # e.g. PullRequestEvent, IssueCommentEvent
        self.action = action  # payload action: opened, closed, labeled, ...
        self.repository_url = repository_url
        self.labels = labels or []
        self.body = _text(body) if body is not None else None
        self.number = number

    @property
    def selection_key(self) -> Union[int, str]:
        """Key used for selection and export: the event id when present, else the item id."""
        return self.event_id if self.event_id else self.id

    @property
    def base_url(self) -> str:
        """URL with any comment/review fragment stripped."""
        return self.url.split('#')[0]

    @property
    def is_merged(self) -> bool:
        return bool(self.merged) or bool(self.merged_at)

    @property
    def repository_name(self) -> str:
        """owner/name derived from the API repository url, or empty string."""
        if not self.repository_url:
            return ''
        marker = '/repos/'
        if marker in self.repository_url:
            return self.repository_url.split(marker, 1)[1]
        return ''

    def __repr__(self):
        return f"ActivityRecord(id={self.id!r}, title={self.title!r}, url={self.url!r})"
