"""
tests/test_drafts.py — Ride & Profile Draft Reducers
======================================================
"""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest

from creed.engine.drafts import (
    DraftError,
    ProfileField,
    RideField,
    apply_profile_edit,
    apply_profile_edits,
    apply_ride_edit,
    apply_ride_edits,
    new_ride_draft,
    profile_changes,
    profile_draft_from,
    ride_draft_from,
    toggle_terrain,
    validate_ride_draft,
)

TODAY = date(2026, 10, 18)


@pytest.fixture
def draft():
    return new_ride_draft("9000000001", today=TODAY)


class TestNewRideDraft:
    def test_form_defaults(self, draft):
        assert draft.date == TODAY
        assert draft.start_time == "06:00"
        assert draft.end_time == "18:00"
        assert draft.duration_days == 1
        assert draft.terrain_types == ()
        assert draft.marshal_id == "9000000001"

    def test_from_stored_ride(self):
        ride = SimpleNamespace(
            title="Nandi Hills", summary="Dawn run", ride_date=TODAY,
            marshal_id="m1", notes=None, start_time="05:00", end_time="11:00",
            duration_days=None, terrain_types=["Mountains"], custom_terrain=None,
            map_link=None, drive_link=None, feedback_link="https://forms/x",
        )
        d = ride_draft_from(ride)
        assert d.title == "Nandi Hills"
        assert d.notes == ""
        assert d.duration_days == 1
        assert d.terrain_types == ("Mountains",)
        assert d.map_link == ""
        assert d.feedback_link == "https://forms/x"


class TestRideReducers:
    def test_each_edit_returns_new_draft(self, draft):
        edited = apply_ride_edit(draft, RideField.TITLE, "Coastal Sprint")
        assert edited.title == "Coastal Sprint"
        assert draft.title == ""

    def test_field_by_name(self, draft):
        assert apply_ride_edit(draft, "summary", "Along the shore").summary == "Along the shore"

    @pytest.mark.parametrize("raw, expected", [
        ("3", 3), (2, 2), ("abc", 1), ("", 1), (None, 1), (0, 1), (-4, 1),
    ])
    def test_duration_falls_back_to_one(self, draft, raw, expected):
        assert apply_ride_edit(draft, RideField.DURATION_DAYS, raw).duration_days == expected

    def test_date_from_iso_string(self, draft):
        assert apply_ride_edit(draft, "date", "2026-12-25").date == date(2026, 12, 25)

    def test_invalid_date(self, draft):
        with pytest.raises(DraftError):
            apply_ride_edit(draft, "date", "next sunday")

    def test_unknown_field(self, draft):
        with pytest.raises(ValueError):
            apply_ride_edit(draft, "horsepower", 100)

    def test_terrain_list(self, draft):
        edited = apply_ride_edit(draft, "terrain_types", ["Highway", "City"])
        assert edited.terrain_types == ("Highway", "City")

    def test_toggle_terrain(self, draft):
        on = toggle_terrain(draft, "Coastal")
        assert on.terrain_types == ("Coastal",)
        off = toggle_terrain(on, "Coastal")
        assert off.terrain_types == ()

    def test_apply_many(self, draft):
        edited = apply_ride_edits(draft, {"title": "T", "summary": "S", "duration_days": "2"})
        assert (edited.title, edited.summary, edited.duration_days) == ("T", "S", 2)

    def test_to_columns_uses_ride_date(self, draft):
        cols = apply_ride_edits(draft, {"title": "  T  ", "summary": "S"}).to_columns()
        assert cols["ride_date"] == TODAY
        assert cols["title"] == "T"
        assert cols["terrain_types"] == []


class TestValidation:
    @pytest.mark.parametrize("title, summary", [("", "S"), ("T", ""), ("   ", "S"), ("T", "  ")])
    def test_title_and_summary_required(self, draft, title, summary):
        d = apply_ride_edits(draft, {"title": title, "summary": summary})
        with pytest.raises(DraftError):
            validate_ride_draft(d)

    def test_valid(self, draft):
        d = apply_ride_edits(draft, {"title": "T", "summary": "S"})
        assert validate_ride_draft(d) is d


class TestProfileDraft:
    @pytest.fixture
    def profile(self):
        user = SimpleNamespace(
            name="Meera", avatar_url=None, about=None, dream_ride="Ladakh",
            bike_model="Himalayan", fav_destination=None, blood_group="O+",
            emergency_contact=None, riding_style=None, experience_years=None,
            fav_gear_brand=None, ride_memory=None,
        )
        return profile_draft_from(user)

    def test_from_user(self, profile):
        assert profile.name == "Meera"
        assert profile.avatar_url == ""
        assert profile.dream_ride == "Ladakh"

    def test_edit(self, profile):
        edited = apply_profile_edit(profile, ProfileField.BIKE_MODEL, "Interceptor 650")
        assert edited.bike_model == "Interceptor 650"
        assert profile.bike_model == "Himalayan"

    def test_blank_name_rejected(self, profile):
        with pytest.raises(DraftError):
            apply_profile_edit(profile, "name", "   ")

    def test_changes_cover_every_profile_field(self, profile):
        changes = profile_changes(apply_profile_edits(profile, {"about": "Weekend tourer"}))
        assert set(changes) == {f.value for f in ProfileField}
        assert changes["about"] == "Weekend tourer"

    def test_changes_carry_each_value(self, profile):
        edits = {f.value: f"{f.value}-edited" for f in ProfileField}
        changes = profile_changes(apply_profile_edits(profile, edits))
        assert changes == edits
