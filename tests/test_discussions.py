"""Tests for app.services.discussions: admitted topic creation, comments, polls, favorites."""

import unittest
from datetime import date

from app.core.errors import (
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitedError,
)
from app.models import Comment, PollOption, Topic
from app.services.discussions import DiscussionService
from app.services.geolocation import GeoLocation
from app.services.reputation import CommentVoteService
from sqlite_db import make_board, make_session_factory, make_settings, make_topic, make_user

TODAY = date(2026, 3, 10)


class DiscussionTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.service = DiscussionService(self.db, make_settings())
        self.user = make_user(self.db, login_count=5)

    def tearDown(self) -> None:
        self.db.close()


class TestCreateTopic(DiscussionTestCase):
    def test_creates_discussion_and_counts_it(self) -> None:
        created = self.service.create_topic(
            self.user, "Is coffee healthy?", "", "Health", today=TODAY
        )
        self.assertEqual(created.topics_today, 1)
        self.assertEqual(created.daily_limit, 5)
        self.assertEqual(created.topic.description, "Is coffee healthy?")
        self.assertEqual(created.topic.author_name, "alice")

    def test_sixth_topic_rejected_and_not_inserted(self) -> None:
        for i in range(5):
            self.service.create_topic(self.user, f"Topic {i}", "body", "Health", today=TODAY)
        with self.assertRaises(RateLimitedError):
            self.service.create_topic(self.user, "One too many", "body", "Health", today=TODAY)
        self.assertEqual(self.db.query(Topic).count(), 5)

    def test_board_requirement_blocks_topic(self) -> None:
        make_board(self.db, "Politics", min_login_count=30)
        with self.assertRaises(PermissionDeniedError):
            self.service.create_topic(self.user, "Elections", "body", "Politics", today=TODAY)
        self.assertEqual(self.db.query(Topic).count(), 0)

    def test_poll_needs_two_options(self) -> None:
        with self.assertRaises(InvalidInputError):
            self.service.create_topic(
                self.user, "Best sport?", "", "Health", topic_type="poll", options=["Running", " "]
            )
        self.assertEqual(self.service.board_access.topics_today(self.user.id), 0)

    def test_poll_options_created(self) -> None:
        created = self.service.create_topic(
            self.user,
            "Best sport?",
            "",
            "Health",
            topic_type="poll",
            options=["Running", "Swimming", "HIIT"],
            today=TODAY,
        )
        texts = [
            o.text
            for o in self.db.query(PollOption).filter(PollOption.topic_id == created.topic.id)
        ]
        self.assertEqual(sorted(texts), ["HIIT", "Running", "Swimming"])


class TestComments(DiscussionTestCase):
    def test_stances_update_topic_tallies(self) -> None:
        topic = make_topic(self.db, self.user)
        self.service.create_comment(self.user, topic.id, "Agree", stance="support")
        self.service.create_comment(self.user, topic.id, "Disagree", stance="oppose", comment_type="refutation")
        self.service.create_comment(self.user, topic.id, "Hmm")
        self.db.refresh(topic)
        self.assertEqual((topic.credible_votes, topic.controversial_votes), (1, 1))

    def test_location_tags_are_stored(self) -> None:
        topic = make_topic(self.db, self.user)
        comment = self.service.create_comment(
            self.user,
            topic.id,
            "Source?",
            ip_address="8.8.8.8",
            location=GeoLocation(country="Taiwan", region="Taipei", city="Taipei"),
        )
        stored = self.db.get(Comment, comment.id)
        self.assertEqual((stored.ip_address, stored.country), ("8.8.8.8", "Taiwan"))

    def test_reply_must_belong_to_topic(self) -> None:
        topic = make_topic(self.db, self.user)
        other = make_topic(self.db, self.user)
        parent = self.service.create_comment(self.user, other.id, "Elsewhere")
        with self.assertRaises(InvalidInputError):
            self.service.create_comment(self.user, topic.id, "Reply", parent_id=parent.id)

    def test_unknown_topic(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.create_comment(self.user, 999, "Hello")


class TestPollsAndFavorites(DiscussionTestCase):
    def setUp(self) -> None:
        super().setUp()
        created = self.service.create_topic(
            self.user, "Best sport?", "", "Health", topic_type="poll",
            options=["Running", "Swimming"], today=TODAY,
        )
        self.topic_id = created.topic.id
        self.running, self.swimming = (
            self.db.query(PollOption)
            .filter(PollOption.topic_id == self.topic_id)
            .order_by(PollOption.id)
            .all()
        )

    def counts(self) -> tuple[int, int]:
        self.db.refresh(self.running)
        self.db.refresh(self.swimming)
        return self.running.vote_count, self.swimming.vote_count

    def test_vote_then_switch_option(self) -> None:
        self.service.vote_poll(self.user.id, self.topic_id, self.running.id)
        self.assertEqual(self.counts(), (1, 0))
        self.service.vote_poll(self.user.id, self.topic_id, self.swimming.id)
        self.assertEqual(self.counts(), (0, 1))

    def test_same_option_twice_is_noop(self) -> None:
        self.service.vote_poll(self.user.id, self.topic_id, self.running.id)
        self.service.vote_poll(self.user.id, self.topic_id, self.running.id)
        self.assertEqual(self.counts(), (1, 0))

    def test_option_from_other_topic_rejected(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.vote_poll(self.user.id, self.topic_id + 1, self.running.id)

    def test_favorite_toggles(self) -> None:
        self.assertTrue(self.service.toggle_favorite(self.user.id, self.topic_id))
        self.assertFalse(self.service.toggle_favorite(self.user.id, self.topic_id))

    def test_store_analysis(self) -> None:
        topic = self.service.store_analysis(self.topic_id, "Mostly accurate.")
        self.assertEqual(topic.ai_analysis, "Mostly accurate.")
        self.assertFalse(topic.is_analyzing)


class TestListTopics(DiscussionTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.viewer = make_user(self.db, username="viewer")
        self.older = make_topic(self.db, self.user)
        self.poll = self.service.create_topic(
            self.user, "Best sport?", "", "Health", topic_type="poll",
            options=["Running", "Swimming"], today=TODAY,
        ).topic
        self.comment = self.service.create_comment(self.user, self.older.id, "Agree", stance="support")

    def test_empty_board(self) -> None:
        self.db.query(Comment).delete()
        self.db.query(PollOption).delete()
        self.db.query(Topic).delete()
        self.db.commit()
        self.assertEqual(self.service.list_topics(), [])

    def test_newest_first_with_tallies_and_options(self) -> None:
        poll, older = self.service.list_topics()
        self.assertEqual((poll.id, older.id), (self.poll.id, self.older.id))
        self.assertEqual(older.credible_votes, 1)
        self.assertEqual([c.content for c in older.comments], ["Agree"])
        self.assertEqual([o.text for o in poll.options], ["Running", "Swimming"])
        self.assertEqual(poll.comments, [])

    def test_viewer_state(self) -> None:
        option = self.db.query(PollOption).filter(PollOption.topic_id == self.poll.id).first()
        self.service.vote_poll(self.viewer.id, self.poll.id, option.id)
        self.service.toggle_favorite(self.viewer.id, self.older.id)
        CommentVoteService(self.db).cast_vote(self.viewer.id, self.comment.id, "down")

        poll, older = self.service.list_topics(self.viewer.id)
        self.assertEqual(poll.user_poll_vote_id, option.id)
        self.assertEqual(poll.options[0].vote_count, 1)
        self.assertTrue(older.is_favorite)
        self.assertFalse(poll.is_favorite)
        self.assertEqual(older.comments[0].user_vote, "down")
        self.assertEqual(older.comments[0].downvotes, 1)

    def test_anonymous_listing_has_no_viewer_state(self) -> None:
        self.service.toggle_favorite(self.viewer.id, self.older.id)
        for topic in self.service.list_topics():
            self.assertFalse(topic.is_favorite)
            self.assertIsNone(topic.user_poll_vote_id)


if __name__ == "__main__":
    unittest.main()
