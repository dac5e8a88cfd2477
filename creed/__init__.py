"""
Creed — A Themeable Dashboard Backend for Motorcycle Clubs
============================================================
Keeps the club roster, schedules expeditions and their command roles,
tracks attendance, turns rider stats into achievement progress, and
serves the club's branding as a ready-to-inject theme.

Package layout::

    creed/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Brand colors, default fonts, terrain options
    ├── errors.py          # AuthFailure / FetchFailure / WriteFailure
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   ├── models.py      # All ORM models
    │   └── seed.py        # Default club settings row
    ├── engine/
    │   ├── achievements.py # Per-category milestone progress
    │   ├── theme.py       # Color sanitizer, theme projector, field table
    │   ├── drafts.py      # Typed ride / profile drafts + reducers
    │   └── cache.py       # Versioned in-memory club settings snapshot
    ├── services/
    │   ├── admin_service.py   # Audit-logged mutation helpers
    │   ├── member_service.py  # Roster + authentication
    │   ├── ride_service.py    # Expeditions + participants
    │   ├── poll_service.py    # Club polls
    │   ├── settings_service.py # Club settings fetch-or-default / upsert
    │   └── log_buffer.py      # In-memory log ring buffer
    └── api/
        ├── main.py        # FastAPI app
        ├── auth.py        # Phone + password → JWT
        └── routes/        # Members, rides, settings, polls
"""

__version__ = "0.1.0"
