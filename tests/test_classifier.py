import unittest

from correlate.classifier import classify, is_review, is_review_comment
from correlate.models import ActivityType
from normalize.models import ActivityRecord


def _record(title='Some title', event_type=None, is_pr=False, url='https://github.com/octo/app/issues/1'):
    return ActivityRecord(
        id=1,
        title=title,
        url=url,
        state='open',
        created_at='2024-01-02T10:00:00Z',
        updated_at='2024-01-02T10:00:00Z',
        user_login='alice',
        is_pull_request=is_pr,
        original_event_type=event_type,
    )


class TestClassifyByEventTag(unittest.TestCase):
    def test_known_tags(self):
        expected = {
            'PushEvent': ActivityType.COMMIT,
            'PullRequestEvent': ActivityType.PULL_REQUEST,
            'PullRequestReviewEvent': ActivityType.PULL_REQUEST,
            'PullRequestReviewCommentEvent': ActivityType.COMMENT,
            'IssuesEvent': ActivityType.ISSUE,
            'IssueCommentEvent': ActivityType.COMMENT,
            'CreateEvent': ActivityType.OTHER,
            'DeleteEvent': ActivityType.OTHER,
            'ForkEvent': ActivityType.OTHER,
            'WatchEvent': ActivityType.OTHER,
            'PublicEvent': ActivityType.OTHER,
            'GollumEvent': ActivityType.OTHER,
        }
        for tag, activity_type in expected.items():
            self.assertEqual(classify(_record(event_type=tag)), activity_type, tag)

    def test_tag_wins_over_title(self):
        record = _record(title='Comment on: looks like a comment', event_type='IssuesEvent')
        self.assertEqual(classify(record), ActivityType.ISSUE)

    def test_unknown_tag_falls_through_to_title(self):
        record = _record(title='Pushed 1 commit to main', event_type='MemberEvent')
        self.assertEqual(classify(record), ActivityType.COMMIT)


class TestClassifyByTitle(unittest.TestCase):
    def test_title_conventions(self):
        cases = [
            ('Review on: Fix bug', ActivityType.PULL_REQUEST),
            ('Review comment on: Fix bug', ActivityType.COMMENT),
            ('Comment on: Crash on start', ActivityType.COMMENT),
            ('Committed a fix', ActivityType.COMMIT),
            ('Pushed 3 commits to main', ActivityType.COMMIT),
            ('Created branch feature/x', ActivityType.OTHER),
            ('Deleted tag v1.0', ActivityType.OTHER),
            ('Forked repository to bob/app', ActivityType.OTHER),
            ('Starred repository', ActivityType.OTHER),
            ('Made repository public', ActivityType.OTHER),
            ('Updated wiki page: Home', ActivityType.OTHER),
        ]
        for title, activity_type in cases:
            self.assertEqual(classify(_record(title=title)), activity_type, title)

    def test_structure_decides_last(self):
        self.assertEqual(classify(_record(title='Add dark mode', is_pr=True)), ActivityType.PULL_REQUEST)
        self.assertEqual(classify(_record(title='Crash on start')), ActivityType.ISSUE)

    def test_empty_title_does_not_raise(self):
        self.assertEqual(classify(_record(title='')), ActivityType.ISSUE)


def test_is_review_by_tag_and_title():
    assert is_review(_record(title='Fix bug', event_type='PullRequestReviewEvent', is_pr=True))
    assert is_review(_record(title='Review on: Fix bug', is_pr=True))
    assert not is_review(_record(title='Fix bug', event_type='PullRequestEvent', is_pr=True))


def test_is_review_comment():
    assert is_review_comment(_record(title='x', event_type='PullRequestReviewCommentEvent'))
    assert is_review_comment(_record(title='Review comment on: Fix bug'))
    assert not is_review_comment(_record(title='Comment on: Fix bug'))


if __name__ == '__main__':
    unittest.main()
