"""
tests/test_ride_service.py — Rides, Rosters & Attendance
==========================================================

Uses an in-memory SQLite database via the shared conftest fixtures.
"""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from conftest import MARSHAL_ID, RIDER_ID
from creed.database.models import AdminLog, RideParticipant, RideRole, RideStatus
from creed.engine.drafts import DraftError, apply_ride_edits, new_ride_draft
from creed.services import ride_service


def _draft(title="Western Ghats Loop", summary="Two days of twisties", **edits):
    base = new_ride_draft(MARSHAL_ID, today=date(2026, 11, 1))
    return apply_ride_edits(base, {"title": title, "summary": summary, **edits})


@pytest.fixture
def ride(db_engine, members):
    return ride_service.create_ride(db_engine, _draft(), actor_id=MARSHAL_ID)


class TestRides:
    def test_create_defaults(self, ride):
        assert ride.status == RideStatus.UPCOMING
        assert ride.start_time == "06:00"
        assert ride.end_time == "18:00"
        assert ride.duration_days == 1
        assert ride.ride_date == date(2026, 11, 1)
        assert len(ride.id) == 36

    def test_create_requires_title_and_summary(self, db_engine, members):
        with pytest.raises(DraftError):
            ride_service.create_ride(db_engine, _draft(title=""), actor_id=MARSHAL_ID)
        with pytest.raises(DraftError):
            ride_service.create_ride(db_engine, _draft(summary="  "), actor_id=MARSHAL_ID)
        assert ride_service.list_rides(db_engine) == []

    def test_list_newest_first(self, db_engine, members):
        ride_service.create_ride(db_engine, _draft("Early", date="2026-01-05"), actor_id=MARSHAL_ID)
        ride_service.create_ride(db_engine, _draft("Late", date="2026-06-05"), actor_id=MARSHAL_ID)
        ride_service.create_ride(db_engine, _draft("Mid", date="2026-03-05"), actor_id=MARSHAL_ID)
        assert [r.title for r in ride_service.list_rides(db_engine)] == ["Late", "Mid", "Early"]

    def test_list_by_status(self, db_engine, ride):
        ride_service.complete_ride(db_engine, ride.id, actor_id=MARSHAL_ID)
        assert ride_service.list_rides(db_engine, status=RideStatus.UPCOMING) == []
        assert len(ride_service.list_rides(db_engine, status=RideStatus.COMPLETED)) == 1

    def test_update(self, db_engine, ride):
        updated = ride_service.update_ride(
            db_engine, ride.id, _draft("Renamed", terrain_types=["Mountains"]),
            actor_id=MARSHAL_ID,
        )
        assert updated.title == "Renamed"
        assert updated.terrain_types == ["Mountains"]
        assert updated.id == ride.id

    def test_update_missing(self, db_engine, members):
        assert ride_service.update_ride(db_engine, "nope", _draft(), actor_id=MARSHAL_ID) is None

    def test_complete_with_links(self, db_engine, ride):
        done = ride_service.complete_ride(
            db_engine, ride.id, actor_id=MARSHAL_ID,
            feedback_link="https://forms.example/fb", drive_link="https://drive.example/pics",
        )
        assert done.status == RideStatus.COMPLETED
        assert done.feedback_link == "https://forms.example/fb"
        assert done.drive_link == "https://drive.example/pics"

    def test_delete_removes_roster(self, db_engine, ride):
        ride_service.assign_participant(db_engine, ride.id, RIDER_ID, actor_id=MARSHAL_ID)
        assert ride_service.delete_ride(db_engine, ride.id, actor_id=MARSHAL_ID) is True
        assert ride_service.get_ride(db_engine, ride.id) is None
        with Session(db_engine) as session:
            count = session.scalar(select(func.count()).select_from(RideParticipant))
        assert count == 0

    def test_mutations_are_audited(self, db_engine, ride):
        ride_service.complete_ride(db_engine, ride.id, actor_id=MARSHAL_ID)
        with Session(db_engine) as session:
            actions = session.scalars(
                select(AdminLog.action_type)
                .where(AdminLog.target_table == "rides")
                .order_by(AdminLog.id)
            ).all()
        assert actions == ["CREATE", "UPDATE"]


class TestRoster:
    def test_assign_is_an_upsert(self, db_engine, ride):
        first = ride_service.assign_participant(
            db_engine, ride.id, RIDER_ID, RideRole.SWEEP, actor_id=MARSHAL_ID,
        )
        assert first.role == RideRole.SWEEP
        second = ride_service.assign_participant(
            db_engine, ride.id, RIDER_ID, "Lead", actor_id=MARSHAL_ID,
        )
        assert second.role == RideRole.LEAD
        assert len(ride_service.list_participants(db_engine, ride.id)) == 1

    def test_invalid_role(self, db_engine, ride):
        with pytest.raises(ValueError):
            ride_service.assign_participant(db_engine, ride.id, RIDER_ID, "Pillion", actor_id="m")

    def test_attendance(self, db_engine, ride):
        ride_service.assign_participant(db_engine, ride.id, RIDER_ID, actor_id=MARSHAL_ID)
        entry = ride_service.set_attendance(db_engine, ride.id, RIDER_ID, True, actor_id=MARSHAL_ID)
        assert entry.attended is True

    def test_attendance_for_missing_participant(self, db_engine, ride):
        assert ride_service.set_attendance(
            db_engine, ride.id, RIDER_ID, True, actor_id=MARSHAL_ID,
        ) is None

    def test_remove(self, db_engine, ride):
        ride_service.assign_participant(db_engine, ride.id, RIDER_ID, actor_id=MARSHAL_ID)
        assert ride_service.remove_participant(db_engine, ride.id, RIDER_ID, actor_id=MARSHAL_ID)
        assert not ride_service.remove_participant(
            db_engine, ride.id, RIDER_ID, actor_id=MARSHAL_ID,
        )

    def test_list_all_participants(self, db_engine, ride):
        other = ride_service.create_ride(db_engine, _draft("Other"), actor_id=MARSHAL_ID)
        ride_service.assign_participant(db_engine, ride.id, RIDER_ID, actor_id=MARSHAL_ID)
        ride_service.assign_participant(db_engine, other.id, MARSHAL_ID, "Lead", actor_id=MARSHAL_ID)
        assert len(ride_service.list_participants(db_engine)) == 2
        assert len(ride_service.list_participants(db_engine, other.id)) == 1


def test_group_roster_by_role():
    participants = [
        SimpleNamespace(user_id="a", role="Lead"),
        SimpleNamespace(user_id="b", role="Rider"),
        SimpleNamespace(user_id="c", role="Rider"),
        SimpleNamespace(user_id="d", role="RP"),
    ]
    roster = ride_service.group_roster(participants)
    assert roster == {"Lead": ["a"], "Sweep": [], "RP": ["d"], "Rider": ["b", "c"]}
