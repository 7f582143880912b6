from correlate.models import SummaryBucket, empty_buckets
from correlate.summary import (
    all_displayed,
    group_select_state,
    grouped_for_export,
    has_any,
    summarize,
    total_count,
)
from normalize.dates import DateWindow
from normalize.models import ActivityRecord

WINDOW = DateWindow.parse('2024-01-01', '2024-01-07')


def _record(id, title, url, **overrides):
    fields = {
        'id': id,
        'title': title,
        'url': url,
        'state': 'open',
        'created_at': '2024-01-02T10:00:00Z',
        'updated_at': '2024-01-02T10:00:00Z',
        'user_login': 'alice',
    }
    fields.update(overrides)
    return ActivityRecord(**fields)


def test_summarize_combines_events_and_search():
    events = [
        _record(1, 'Pushed 1 commit to main', 'https://github.com/octo/app/commits/main', original_event_type='PushEvent', event_id='e1'),
        _record(2, 'Review on: Fix bug', 'https://github.com/octo/app/pull/5#pullrequestreview-1', is_pull_request=True, original_event_type='PullRequestReviewEvent', event_id='e2'),
    ]
    search = [
        _record(3, 'Old refactor', 'https://github.com/octo/app/pull/3', is_pull_request=True, state='closed',
                created_at='2023-11-20T10:00:00Z', merged_at='2024-01-05T10:00:00Z'),
    ]
    buckets = summarize(events, search, WINDOW)
    assert [r.id for r in buckets[SummaryBucket.COMMITS]] == [1]
    assert [r.id for r in buckets[SummaryBucket.PRS_REVIEWED]] == [2]
    assert [r.id for r in buckets[SummaryBucket.PRS_MERGED]] == [3]
    assert total_count(buckets) == 3
    assert has_any(buckets)


def test_grouped_for_export_skips_empty_buckets_and_filters_selection():
    buckets = empty_buckets()
    a = _record(1, 'A', 'https://github.com/octo/app/issues/1', event_id='e1')
    b = _record(2, 'B', 'https://github.com/octo/app/issues/2')
    c = _record(3, 'C', 'https://github.com/octo/app/pull/3', is_pull_request=True)
    buckets[SummaryBucket.ISSUES_OPENED].extend([a, b])
    buckets[SummaryBucket.PRS_OPENED].append(c)

    grouped = grouped_for_export(buckets)
    assert [name for name, _ in grouped] == ['PRs - opened', 'Issues - opened']

    selected = grouped_for_export(buckets, {'e1', 2})
    assert selected == [('Issues - opened', [a, b])]


def test_empty_buckets_helpers():
    buckets = empty_buckets()
    assert not has_any(buckets)
    assert total_count(buckets) == 0
    assert all_displayed(buckets) == []
    assert grouped_for_export(buckets) == []


def test_group_select_state():
    records = [_record(1, 'A', 'u1'), _record(2, 'B', 'u2')]
    assert group_select_state(records, set()) == (False, False)
    assert group_select_state(records, {1}) == (False, True)
    assert group_select_state(records, {1, 2}) == (True, False)
    assert group_select_state([], {1}) == (False, False)
