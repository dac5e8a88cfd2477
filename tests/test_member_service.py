"""
tests/test_member_service.py — Roster, Passwords & Subscriptions
==================================================================

Uses an in-memory SQLite database via the shared conftest fixtures.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from conftest import MARSHAL_ID, PASSWORD, RIDER_ID
from creed.database.models import AdminLog, ClubRole, SubscriptionType
from creed.engine.drafts import DraftError, apply_profile_edit, profile_draft_from
from creed.errors import AuthFailure, FetchFailure, WriteFailure
from creed.services import member_service


class TestAddRider:
    def test_new_rider_starts_from_zero(self, db_engine):
        user = member_service.add_rider(
            db_engine, user_id=" 98450 12345 ", name=" Kabir ", password="pw",
            actor_id=MARSHAL_ID,
        )
        assert user.id == "9845012345"
        assert user.name == "Kabir"
        assert user.club_role == ClubRole.RIDER
        assert (user.total_rides, user.total_kms, user.leads, user.sweeps, user.rps) == (0,) * 5
        assert user.subscription_type == SubscriptionType.NONE
        assert user.payment_status == "Pending"

    def test_password_is_hashed(self, db_engine):
        user = member_service.add_rider(
            db_engine, user_id="1", name="A", password="secret", actor_id="m",
        )
        assert user.password_hash != "secret"
        assert member_service.check_password("secret", user.password_hash)

    def test_duplicate_phone_is_a_conflict(self, db_engine, members):
        with pytest.raises(WriteFailure) as info:
            member_service.add_rider(
                db_engine, user_id=RIDER_ID, name="Dup", password="x", actor_id=MARSHAL_ID,
            )
        assert info.value.conflict is True

    @pytest.mark.parametrize("fields", [
        {"user_id": "  \t", "name": "Kabir", "password": "pw"},
        {"user_id": "9845012345", "name": "   ", "password": "pw"},
        {"user_id": "9845012345", "name": "Kabir", "password": "   "},
        {"user_id": "9845012345", "name": "Kabir", "password": "p" * 73},
        {"user_id": "9845012345", "name": "Kabir", "password": "é" * 37},
    ])
    def test_unusable_credentials_rejected(self, db_engine, fields):
        with pytest.raises(DraftError):
            member_service.add_rider(db_engine, actor_id=MARSHAL_ID, **fields)
        assert member_service.list_users(db_engine) == []

    def test_longest_password_still_logs_in(self, db_engine):
        password = "p" * member_service.MAX_PASSWORD_BYTES
        member_service.add_rider(
            db_engine, user_id="9845012345", name="Kabir", password=password,
            actor_id=MARSHAL_ID,
        )
        assert member_service.authenticate(db_engine, "9845012345", password).name == "Kabir"

    def test_audit_never_contains_password_hash(self, db_engine, members):
        with Session(db_engine) as session:
            logs = session.scalars(select(AdminLog).where(AdminLog.target_table == "users")).all()
        assert len(logs) == 2
        for log in logs:
            assert "password_hash" not in log.after_snapshot


class TestAuthenticate:
    def test_valid_credentials(self, db_engine, members):
        user = member_service.authenticate(db_engine, RIDER_ID, PASSWORD)
        assert user.id == RIDER_ID

    def test_whitespace_is_stripped(self, db_engine, members):
        phone = f"  {RIDER_ID[:5]} {RIDER_ID[5:]}\t"
        user = member_service.authenticate(db_engine, phone, f"  {PASSWORD} ")
        assert user.id == RIDER_ID

    def test_wrong_password(self, db_engine, members):
        with pytest.raises(AuthFailure, match="Invalid Credentials"):
            member_service.authenticate(db_engine, RIDER_ID, "wrong")

    def test_unknown_member(self, db_engine, members):
        with pytest.raises(AuthFailure):
            member_service.authenticate(db_engine, "0000000000", PASSWORD)

    def test_blank_credentials(self, db_engine):
        with pytest.raises(AuthFailure, match="required"):
            member_service.authenticate(db_engine, "   ", "")

    def test_lookup_error_is_auth_failure(self, db_engine, members):
        with patch(
            "creed.services.member_service.Session.get",
            side_effect=OperationalError("SELECT", {}, Exception("down")),
        ):
            with pytest.raises(AuthFailure):
                member_service.authenticate(db_engine, RIDER_ID, PASSWORD)


class TestReads:
    def test_list_users_sorted_by_name(self, db_engine, members):
        member_service.add_rider(
            db_engine, user_id="3", name="Zoya", password="x", actor_id=MARSHAL_ID,
        )
        names = [u.name for u in member_service.list_users(db_engine)]
        assert names == ["Arjun", "Meera", "Zoya"]

    def test_list_marshals(self, db_engine, members):
        assert [u.id for u in member_service.list_marshals(db_engine)] == [MARSHAL_ID]

    def test_get_user_missing(self, db_engine):
        assert member_service.get_user(db_engine, "nobody") is None

    def test_fetch_failure(self, db_engine):
        with patch(
            "creed.services.member_service.Session.scalars",
            side_effect=OperationalError("SELECT", {}, Exception("down")),
        ):
            with pytest.raises(FetchFailure):
                member_service.list_users(db_engine)


class TestUpdates:
    def test_marshal_updates_stats(self, db_engine, members):
        updated = member_service.update_user(
            db_engine, RIDER_ID, actor_id=MARSHAL_ID, total_kms=1200, leads=5,
        )
        assert updated.total_kms == 1200
        assert updated.leads == 5

    def test_password_change_rehashes(self, db_engine, members):
        member_service.update_user(db_engine, RIDER_ID, actor_id=MARSHAL_ID, password="new-pass")
        assert member_service.authenticate(db_engine, RIDER_ID, "new-pass").id == RIDER_ID
        with pytest.raises(AuthFailure):
            member_service.authenticate(db_engine, RIDER_ID, PASSWORD)

    def test_id_is_frozen(self, db_engine, members):
        updated = member_service.update_user(
            db_engine, RIDER_ID, actor_id=MARSHAL_ID, id="hijack", name="Meera K",
        )
        assert updated.id == RIDER_ID
        assert updated.name == "Meera K"

    @pytest.mark.parametrize("fields", [{"password": "  "}, {"password": "x" * 80}, {"name": " "}])
    def test_update_rejects_unusable_values(self, db_engine, members, fields):
        with pytest.raises(DraftError):
            member_service.update_user(db_engine, RIDER_ID, actor_id=MARSHAL_ID, **fields)
        assert member_service.authenticate(db_engine, RIDER_ID, PASSWORD).name == "Meera"

    def test_update_missing_member(self, db_engine):
        assert member_service.update_user(db_engine, "ghost", actor_id="m", name="x") is None

    def test_update_profile(self, db_engine, members):
        _, rider = members
        draft = apply_profile_edit(profile_draft_from(rider), "bike_model", "Scram 411")
        updated = member_service.update_profile(db_engine, RIDER_ID, draft)
        assert updated.bike_model == "Scram 411"
        assert updated.club_role == ClubRole.RIDER

    def test_delete(self, db_engine, members):
        assert member_service.delete_user(db_engine, RIDER_ID, actor_id=MARSHAL_ID) is True
        assert member_service.get_user(db_engine, RIDER_ID) is None
        assert member_service.delete_user(db_engine, RIDER_ID, actor_id=MARSHAL_ID) is False


class TestSubscription:
    NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)

    def _user(self, kind, expiry=None):
        return SimpleNamespace(subscription_type=kind, subscription_expiry=expiry)

    def test_lifetime_always_active(self):
        assert member_service.is_subscription_active(self._user("Lifetime"), self.NOW)

    def test_annual_in_future(self):
        user = self._user("Annual", self.NOW + timedelta(days=30))
        assert member_service.is_subscription_active(user, self.NOW)

    def test_annual_expired(self):
        user = self._user("Annual", self.NOW - timedelta(seconds=1))
        assert not member_service.is_subscription_active(user, self.NOW)

    def test_naive_expiry_treated_as_utc(self):
        user = self._user("Annual", datetime(2026, 12, 31))
        assert member_service.is_subscription_active(user, self.NOW)

    def test_none_without_expiry(self):
        assert not member_service.is_subscription_active(self._user("None"), self.NOW)


def test_user_to_dict_hides_password(db_engine, members):
    data = member_service.user_to_dict(members[1])
    assert "password_hash" not in data
    assert data["subscription_active"] is False
