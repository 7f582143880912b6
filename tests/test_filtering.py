import unittest

from correlate.filtering import (
    ParsedSearch,
    apply_filters_and_sort,
    filter_by_labels,
    filter_by_repository,
    filter_by_status,
    filter_by_text,
    filter_by_type,
    filter_by_users,
    parse_search_text,
    parse_usernames,
    sort_by_updated,
)
from normalize.models import ActivityRecord, Label


def _record(id, title, **overrides):
    fields = {
        'id': id,
        'title': title,
        'url': f'https://github.com/octo/app/issues/{id}',
        'state': 'open',
        'created_at': '2024-01-02T10:00:00Z',
        'updated_at': '2024-01-02T10:00:00Z',
        'user_login': 'alice',
        'repository_url': 'https://api.github.com/repos/octo/app',
    }
    fields.update(overrides)
    return ActivityRecord(**fields)


ISSUE = _record(1, 'Crash on start', labels=[Label('bug'), Label('ui')], body='Stack trace attached', updated_at='2024-01-03T10:00:00Z')
MERGED = _record(
    2, 'Fix crash', is_pull_request=True, state='closed', merged_at='2024-01-04T10:00:00Z',
    user_login='Bob', labels=[Label('bug')], updated_at='2024-01-04T10:00:00Z',
)
CLOSED_PR = _record(3, 'Try another approach', is_pull_request=True, state='closed', updated_at='2024-01-01T10:00:00Z')
COMMENT = _record(
    4, 'Comment on: Crash on start', original_event_type='IssueCommentEvent',
    user_login='carol', repository_url='https://api.github.com/repos/octo/docs', updated_at='garbage',
)
COMMIT = _record(5, 'Pushed 2 commits to main', original_event_type='PushEvent', repository_url=None)

ALL = [ISSUE, MERGED, CLOSED_PR, COMMENT, COMMIT]


def _ids(records):
    return [r.id for r in records]


class TestParseSearchText(unittest.TestCase):
    def test_tokens_are_extracted(self):
        parsed = parse_search_text('label:bug -label:wontfix user:alice repo:octo/app -repo:octo/docs  crash   report')
        self.assertEqual(parsed.included_labels, ('bug',))
        self.assertEqual(parsed.excluded_labels, ('wontfix',))
        self.assertEqual(parsed.user_filters, ('alice',))
        self.assertEqual(parsed.included_repos, ('octo/app',))
        self.assertEqual(parsed.excluded_repos, ('octo/docs',))
        self.assertEqual(parsed.clean_text, 'crash report')

    def test_excluded_label_is_not_also_included(self):
        parsed = parse_search_text('-label:wip')
        self.assertEqual(parsed.included_labels, ())
        self.assertEqual(parsed.excluded_labels, ('wip',))

    def test_blank_text(self):
        self.assertEqual(parse_search_text(''), ParsedSearch())
        self.assertEqual(parse_search_text('   '), ParsedSearch())

    def test_repeated_tokens(self):
        parsed = parse_search_text('user:alice user:bob')
        self.assertEqual(parsed.user_filters, ('alice', 'bob'))
        self.assertEqual(parsed.clean_text, '')


def test_parse_usernames():
    assert parse_usernames(' Alice, bob ,,CAROL ') == ['alice', 'bob', 'carol']
    assert parse_usernames('') == []
    assert parse_usernames(None) == []


class TestIndividualFilters(unittest.TestCase):
    def test_type(self):
        self.assertEqual(_ids(filter_by_type(ALL, 'all')), [1, 2, 3, 4, 5])
        self.assertEqual(_ids(filter_by_type(ALL, 'issue')), [1])
        self.assertEqual(_ids(filter_by_type(ALL, 'pr')), [2, 3])
        self.assertEqual(_ids(filter_by_type(ALL, 'comment')), [4])

    def test_status_separates_merged_from_closed(self):
        self.assertEqual(_ids(filter_by_status(ALL, 'merged')), [2])
        self.assertEqual(_ids(filter_by_status(ALL, 'closed')), [3])
        self.assertEqual(_ids(filter_by_status(ALL, 'open')), [1, 4, 5])

    def test_closed_issue_with_merged_at_is_closed_not_merged(self):
        odd = _record(9, 'Odd issue', state='closed', merged_at='2024-01-04T10:00:00Z')
        self.assertEqual(filter_by_status([odd], 'merged'), [])
        self.assertEqual(filter_by_status([odd], 'closed'), [odd])

    def test_labels_require_all_included_and_no_excluded(self):
        self.assertEqual(_ids(filter_by_labels(ALL, ['bug'])), [1, 2])
        self.assertEqual(_ids(filter_by_labels(ALL, ['BUG', 'ui'])), [1])
        self.assertEqual(_ids(filter_by_labels(ALL, ['bug'], ['ui'])), [2])
        self.assertEqual(_ids(filter_by_labels(ALL, None, ['bug'])), [3, 4, 5])

    def test_repository(self):
        self.assertEqual(_ids(filter_by_repository(ALL, ['octo/docs'])), [4])
        self.assertEqual(_ids(filter_by_repository(ALL, None, ['octo/app'])), [4, 5])

    def test_users_case_insensitive(self):
        self.assertEqual(_ids(filter_by_users(ALL, ['bob', 'CAROL'])), [2, 4])
        self.assertEqual(_ids(filter_by_users(ALL, [])), [1, 2, 3, 4, 5])


def test_text_matches_title_body_and_author():
    assert _ids(filter_by_text(ALL, 'CRASH')) == [1, 2, 4]
    assert _ids(filter_by_text(ALL, 'stack trace')) == [1]
    assert _ids(filter_by_text(ALL, 'carol')) == [4]


def test_text_combines_tokens_and_free_text():
    assert _ids(filter_by_text(ALL, 'label:bug -label:ui crash')) == [2]
    assert _ids(filter_by_text(ALL, 'user:bob user:carol')) == [2, 4]
    assert _ids(filter_by_text(ALL, 'repo:octo/app -label:bug')) == [3]
    assert _ids(filter_by_text(ALL, '-repo:octo/app')) == [4, 5]


def test_sort_by_updated_newest_first_invalid_last():
    assert _ids(sort_by_updated(ALL)) == [2, 1, 5, 3, 4]


def test_apply_filters_and_sort():
    result = apply_filters_and_sort(ALL, kind='pr', search_text='label:bug')
    assert _ids(result) == [2]
    result = apply_filters_and_sort(ALL, status='open', usernames=['alice', 'carol'])
    assert _ids(result) == [1, 5, 4]
    assert apply_filters_and_sort([], search_text='anything') == []


if __name__ == '__main__':
    unittest.main()
