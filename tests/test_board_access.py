"""Tests for app.services.board_access: requirement evaluation and the daily topic cap."""

import unittest
from datetime import date, timedelta

from app.core.errors import PermissionDeniedError, RateLimitedError
from app.models import DailyTopicTracking
from app.services.board_access import BoardAccessService
from sqlite_db import make_board, make_session_factory, make_settings, make_user

TODAY = date(2026, 3, 10)


class BoardTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.service = BoardAccessService(self.db, make_settings())
        make_board(self.db, "Politics", min_login_count=30)

    def tearDown(self) -> None:
        self.db.close()


class TestCheckAccess(BoardTestCase):
    def test_category_without_requirements_is_open(self) -> None:
        user = make_user(self.db, login_count=0)
        result = self.service.check_access(user, "Science")
        self.assertTrue(result.can_access)
        self.assertEqual(result.missing_requirements, [])

    def test_login_count_below_threshold(self) -> None:
        user = make_user(self.db, login_count=29)
        result = self.service.check_access(user, "Politics")
        self.assertFalse(result.can_access)
        self.assertEqual(
            [m.model_dump() for m in result.missing_requirements],
            [{"type": "loginCount", "required": 30, "current": 29}],
        )

    def test_login_count_at_threshold(self) -> None:
        user = make_user(self.db, login_count=30)
        self.assertTrue(self.service.check_access(user, "Politics").can_access)

    def test_all_failures_reported_together(self) -> None:
        make_board(self.db, "Economics", min_login_count=10, min_reputation=20, min_level="expert")
        user = make_user(self.db, login_count=3, reputation=7, age_days=10)
        result = self.service.check_access(user, "Economics")
        self.assertFalse(result.can_access)
        self.assertEqual(
            [(m.type, m.required, m.current) for m in result.missing_requirements],
            [("loginCount", 10, 3), ("reputation", 20, 7), ("level", "expert", "member")],
        )

    def test_admin_bypasses_requirements(self) -> None:
        user = make_user(self.db, username="root", level="admin", login_count=0)
        self.assertTrue(self.service.check_access(user, "Politics").can_access)

    def test_reserved_admin_username_bypasses_requirements(self) -> None:
        user = make_user(self.db, username="admin", login_count=0)
        self.assertTrue(self.service.check_access(user, "Politics").can_access)


class TestAdmitTopicCreation(BoardTestCase):
    def test_board_failure_raises_insufficient_permission(self) -> None:
        user = make_user(self.db, login_count=29)
        with self.assertRaises(PermissionDeniedError) as ctx:
            self.service.admit_topic_creation(user, "Politics", TODAY)
        self.assertEqual(ctx.exception.code, "INSUFFICIENT_PERMISSION")
        self.assertEqual(
            ctx.exception.details["missing_requirements"],
            [{"type": "loginCount", "required": 30, "current": 29}],
        )
        self.assertIsNone(self.db.get(DailyTopicTracking, (user.id, TODAY)))

    def test_counts_topics_and_caps_at_five(self) -> None:
        user = make_user(self.db)
        counts = []
        for _ in range(5):
            counts.append(self.service.admit_topic_creation(user, "Science", TODAY).topic_count)
            self.db.commit()
        self.assertEqual(counts, [1, 2, 3, 4, 5])

        with self.assertRaises(RateLimitedError) as ctx:
            self.service.admit_topic_creation(user, "Science", TODAY)
        self.assertEqual(ctx.exception.code, "DAILY_LIMIT_EXCEEDED")
        self.assertEqual(ctx.exception.details, {"current": 5, "limit": 5})
        self.assertEqual(self.service.topics_today(user.id, TODAY), 5)

    def test_counter_resets_next_day(self) -> None:
        user = make_user(self.db)
        for _ in range(5):
            self.service.admit_topic_creation(user, "Science", TODAY)
        self.db.commit()
        usage = self.service.admit_topic_creation(user, "Science", TODAY + timedelta(days=1))
        self.assertEqual(usage.topic_count, 1)
        self.assertEqual(usage.limit, 5)

    def test_rollback_releases_reserved_slot(self) -> None:
        user = make_user(self.db)
        self.service.admit_topic_creation(user, "Science", TODAY)
        self.db.rollback()
        self.assertEqual(self.service.topics_today(user.id, TODAY), 0)

    def test_limits_are_per_user(self) -> None:
        first = make_user(self.db, username="first")
        second = make_user(self.db, username="second")
        for _ in range(5):
            self.service.admit_topic_creation(first, "Science", TODAY)
        usage = self.service.admit_topic_creation(second, "Science", TODAY)
        self.assertEqual(usage.topic_count, 1)


if __name__ == "__main__":
    unittest.main()
