"""Tests for app.services.invitations against an in-memory database."""

import re
import unittest
from datetime import timedelta

from sqlalchemy import update

from app.core.errors import ConflictError, InvalidInputError, NotFoundError, PermissionDeniedError
from app.models import InvitationCode
from app.services.invitations import InvitationService
from sqlite_db import NOW, make_code, make_session_factory, make_settings, make_user


class InvitationTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.settings = make_settings()
        self.service = InvitationService(self.db, self.settings)

    def tearDown(self) -> None:
        self.db.close()


class TestGenerate(InvitationTestCase):
    def test_member_generates_code(self) -> None:
        user = make_user(self.db, reputation=5, age_days=10)
        result = self.service.generate(user.id, now=NOW)
        self.assertRegex(result.code, re.compile(r"^[0-9A-F]{12}$"))
        self.assertEqual(result.expires_at, NOW + timedelta(days=30))
        self.assertEqual(result.active_codes, 1)
        self.assertEqual(result.max_codes, 3)
        stored = self.db.get(InvitationCode, result.code)
        self.assertEqual(stored.created_by_user_id, user.id)
        self.assertFalse(stored.is_used)

    def test_insufficient_reputation(self) -> None:
        user = make_user(self.db, reputation=4, age_days=10)
        with self.assertRaises(PermissionDeniedError) as ctx:
            self.service.generate(user.id, now=NOW)
        self.assertEqual(ctx.exception.code, "INSUFFICIENT_REPUTATION")
        self.assertEqual(ctx.exception.details["current_reputation"], 4)
        self.assertEqual(ctx.exception.details["required_reputation"], 5)

    def test_trainee_cannot_generate_whatever_reputation(self) -> None:
        user = make_user(self.db, reputation=1000, age_days=1, level="trainee")
        with self.assertRaises(PermissionDeniedError) as ctx:
            self.service.generate(user.id, now=NOW)
        self.assertEqual(ctx.exception.code, "LEVEL_TOO_LOW")
        self.assertIn("3 days", ctx.exception.message)

    def test_unknown_user(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.generate(999, now=NOW)

    def test_member_quota_and_recovery_after_use(self) -> None:
        user = make_user(self.db, reputation=10, age_days=10)
        codes = [self.service.generate(user.id, now=NOW).code for _ in range(3)]
        with self.assertRaises(PermissionDeniedError) as ctx:
            self.service.generate(user.id, now=NOW)
        self.assertEqual(ctx.exception.code, "QUOTA_EXCEEDED")
        self.assertEqual(ctx.exception.details, {"active_codes": 3, "max_codes": 3})

        self.db.execute(
            update(InvitationCode).where(InvitationCode.code == codes[0]).values(is_used=True)
        )
        self.db.commit()
        result = self.service.generate(user.id, now=NOW)
        self.assertEqual(result.active_codes, 3)

    def test_expired_codes_free_quota(self) -> None:
        user = make_user(self.db, reputation=10, age_days=60)
        for i in range(3):
            make_code(self.db, user, f"OLD00000000{i}", created_at=NOW - timedelta(days=31))
        result = self.service.generate(user.id, now=NOW)
        self.assertEqual(result.active_codes, 1)

    def test_expert_quota_is_ten(self) -> None:
        user = make_user(self.db, reputation=150, age_days=10)
        for i in range(10):
            self.service.generate(user.id, now=NOW)
        with self.assertRaises(PermissionDeniedError) as ctx:
            self.service.generate(user.id, now=NOW)
        self.assertEqual(ctx.exception.details["max_codes"], 10)

    def test_admin_username_is_unbounded(self) -> None:
        user = make_user(self.db, username="admin", reputation=5, age_days=10)
        for _ in range(25):
            result = self.service.generate(user.id, now=NOW)
        self.assertIsNone(result.max_codes)
        self.assertEqual(result.active_codes, 25)


class TestValidate(InvitationTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.owner = make_user(self.db, reputation=10)

    def test_valid_code_case_insensitive(self) -> None:
        make_code(self.db, self.owner, "ABCDEF123456")
        result = self.service.validate(" abcdef123456 ", now=NOW)
        self.assertTrue(result.valid)
        self.assertIsNone(result.reason)

    def test_unknown_code(self) -> None:
        result = self.service.validate("NOPE", now=NOW)
        self.assertEqual((result.valid, result.reason), (False, "not found"))

    def test_used_code(self) -> None:
        make_code(self.db, self.owner, "USED00000000", is_used=True)
        result = self.service.validate("USED00000000", now=NOW)
        self.assertEqual((result.valid, result.reason), (False, "already used"))

    def test_expired_code(self) -> None:
        make_code(self.db, self.owner, "EXPIRED00000", created_at=NOW - timedelta(days=31))
        result = self.service.validate("EXPIRED00000", now=NOW)
        self.assertEqual((result.valid, result.reason), (False, "expired"))

    def test_expiry_instant_is_still_valid(self) -> None:
        make_code(self.db, self.owner, "EDGE00000000", created_at=NOW - timedelta(days=30))
        self.assertTrue(self.service.validate("EDGE00000000", now=NOW).valid)

    def test_empty_code_rejected(self) -> None:
        with self.assertRaises(InvalidInputError):
            self.service.validate("   ", now=NOW)

    def test_validate_has_no_side_effects(self) -> None:
        make_code(self.db, self.owner, "PURE00000000")
        self.service.validate("PURE00000000", now=NOW)
        self.assertFalse(self.db.get(InvitationCode, "PURE00000000").is_used)


class TestRedeem(InvitationTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.owner = make_user(self.db, reputation=10)
        self.newcomer = make_user(self.db, username="carol", age_days=0, level="trainee")

    def test_redeem_marks_code_used(self) -> None:
        make_code(self.db, self.owner, "REDEEM000000")
        invite = self.service.redeem("redeem000000", self.newcomer.id, now=NOW)
        self.db.commit()
        self.assertTrue(invite.is_used)
        self.assertEqual(invite.used_by_user_id, self.newcomer.id)
        self.assertIsNotNone(invite.used_at)

    def test_second_redemption_conflicts(self) -> None:
        make_code(self.db, self.owner, "TWICE0000000")
        self.service.redeem("TWICE0000000", self.newcomer.id, now=NOW)
        self.db.commit()
        other = make_user(self.db, username="dave", age_days=0, level="trainee")
        with self.assertRaises(ConflictError):
            self.service.redeem("TWICE0000000", other.id, now=NOW)

    def test_redeem_after_concurrent_use_conflicts(self) -> None:
        """The redemption is conditional in SQL, not on the copy this session read earlier."""
        make_code(self.db, self.owner, "RACE00000000")
        self.assertTrue(self.service.validate("RACE00000000", now=NOW).valid)
        self.db.execute(
            update(InvitationCode)
            .where(InvitationCode.code == "RACE00000000")
            .values(is_used=True)
            .execution_options(synchronize_session=False)
        )
        with self.assertRaises(ConflictError):
            self.service.redeem("RACE00000000", self.newcomer.id, now=NOW)

    def test_redeem_expired(self) -> None:
        make_code(self.db, self.owner, "LATE00000000", created_at=NOW - timedelta(days=40))
        with self.assertRaises(InvalidInputError) as ctx:
            self.service.redeem("LATE00000000", self.newcomer.id, now=NOW)
        self.assertEqual(ctx.exception.code, "INVITATION_EXPIRED")

    def test_redeem_unknown(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.redeem("MISSING00000", self.newcomer.id, now=NOW)


class TestListFor(InvitationTestCase):
    def test_lists_newest_first_with_redeemer(self) -> None:
        owner = make_user(self.db, reputation=10)
        newcomer = make_user(self.db, username="erin", age_days=0, level="trainee")
        make_code(self.db, owner, "FIRST0000000", created_at=NOW - timedelta(days=2))
        make_code(self.db, owner, "SECOND000000", created_at=NOW - timedelta(days=1))
        self.service.redeem("FIRST0000000", newcomer.id, now=NOW)
        self.db.commit()

        items = self.service.list_for(owner.id)
        self.assertEqual([i.code for i in items], ["SECOND000000", "FIRST0000000"])
        self.assertFalse(items[0].used)
        self.assertIsNone(items[0].used_by_username)
        self.assertTrue(items[1].used)
        self.assertEqual(items[1].used_by_username, "erin")


if __name__ == "__main__":
    unittest.main()
