"""
tests/test_poll_service.py — Polls & One-Vote-Per-Member
==========================================================
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy.orm import Session

from conftest import MARSHAL_ID, RIDER_ID
from creed.database.models import UserVote
from creed.errors import WriteFailure
from creed.services import poll_service


@pytest.fixture
def poll(db_engine, members):
    return poll_service.create_poll(
        db_engine,
        title="Next long ride?",
        options=["Spiti", "Goa", "  "],
        actor_id=MARSHAL_ID,
    )


class TestCreate:
    def test_blank_options_dropped(self, poll):
        assert [o.text for o in poll.options] == ["Spiti", "Goa"]
        assert all(o.votes == 0 for o in poll.options)
        assert poll.is_active is True

    @pytest.mark.parametrize("options", [[], ["Only one"], ["One", "", "   "]])
    def test_needs_two_options(self, db_engine, members, options):
        with pytest.raises(ValueError, match="two options"):
            poll_service.create_poll(db_engine, title="T", options=options, actor_id=MARSHAL_ID)

    def test_needs_title(self, db_engine, members):
        with pytest.raises(ValueError, match="title"):
            poll_service.create_poll(db_engine, title=" ", options=["a", "b"], actor_id=MARSHAL_ID)


class TestVoting:
    def test_vote_counts(self, db_engine, poll):
        spiti = poll.options[0]
        assert poll_service.cast_vote(db_engine, poll.id, spiti.id, RIDER_ID) is True
        assert poll_service.cast_vote(db_engine, poll.id, spiti.id, MARSHAL_ID) is True
        refreshed = poll_service.get_poll(db_engine, poll.id)
        assert [o.votes for o in refreshed.options] == [2, 0]

    def test_second_vote_rejected(self, db_engine, poll):
        spiti, goa = poll.options
        assert poll_service.cast_vote(db_engine, poll.id, spiti.id, RIDER_ID) is True
        assert poll_service.cast_vote(db_engine, poll.id, goa.id, RIDER_ID) is False
        refreshed = poll_service.get_poll(db_engine, poll.id)
        assert [o.votes for o in refreshed.options] == [1, 0]
        assert poll_service.has_voted(db_engine, poll.id, RIDER_ID)

    def test_option_from_another_poll(self, db_engine, poll):
        other = poll_service.create_poll(
            db_engine, title="Other", options=["x", "y"], actor_id=MARSHAL_ID,
        )
        with pytest.raises(LookupError):
            poll_service.cast_vote(db_engine, poll.id, other.options[0].id, RIDER_ID)

    def test_closed_poll(self, db_engine, poll):
        closed = poll_service.close_poll(db_engine, poll.id, actor_id=MARSHAL_ID)
        assert closed.is_active is False
        with pytest.raises(LookupError, match="closed"):
            poll_service.cast_vote(db_engine, poll.id, poll.options[0].id, RIDER_ID)


class TestListing:
    def test_active_only(self, db_engine, poll):
        second = poll_service.create_poll(
            db_engine, title="Jacket colour", options=["Black", "Olive"], actor_id=MARSHAL_ID,
        )
        poll_service.close_poll(db_engine, poll.id, actor_id=MARSHAL_ID)
        assert {p.id for p in poll_service.list_polls(db_engine)} == {poll.id, second.id}
        assert [p.id for p in poll_service.list_polls(db_engine, active_only=True)] == [second.id]

    def test_delete(self, db_engine, poll):
        assert poll_service.delete_poll(db_engine, poll.id, actor_id=MARSHAL_ID) is True
        assert poll_service.get_poll(db_engine, poll.id) is None

    def test_to_dict(self, poll):
        data = poll_service.poll_to_dict(poll)
        assert data["title"] == "Next long ride?"
        assert [o["text"] for o in data["options"]] == ["Spiti", "Goa"]


class TestVoteConstraints:
    def test_racing_duplicate_is_a_repeat_vote(self, db_engine, poll):
        spiti, goa = poll.options
        assert poll_service.cast_vote(db_engine, poll.id, spiti.id, RIDER_ID) is True

        real_get = Session.get
        skipped = []

        def racing_get(self, model, ident, **kwargs):
            # The first vote lookup misses, as if the other vote landed just after it
            if model is UserVote and not skipped:
                skipped.append(ident)
                return None
            return real_get(self, model, ident, **kwargs)

        with patch.object(Session, "get", racing_get):
            assert poll_service.cast_vote(db_engine, poll.id, goa.id, RIDER_ID) is False
        assert skipped
        refreshed = poll_service.get_poll(db_engine, poll.id)
        assert [o.votes for o in refreshed.options] == [1, 0]

    def test_vote_by_removed_member_is_a_write_failure(self, db_engine, poll):
        with db_engine.connect() as conn:
            conn.exec_driver_sql("PRAGMA foreign_keys=ON")
        with pytest.raises(WriteFailure) as info:
            poll_service.cast_vote(db_engine, poll.id, poll.options[0].id, "0000000000")
        assert info.value.conflict is True
        refreshed = poll_service.get_poll(db_engine, poll.id)
        assert [o.votes for o in refreshed.options] == [0, 0]
