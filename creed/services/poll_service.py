"""
creed.services.poll_service — Member Polls
============================================

Marshals open polls; every member may vote once per poll.  The
``user_votes`` primary key enforces the one-vote rule in the database, so
a racing duplicate is rejected there too.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from creed.database.models import Poll, PollOption, UserVote
from creed.errors import FetchFailure, WriteFailure
from creed.services import admin_service

logger = logging.getLogger(__name__)


def list_polls(engine, active_only: bool = False) -> list[Poll]:
    """Polls newest first, options eagerly loaded."""
    stmt = (
        select(Poll)
        .options(selectinload(Poll.options))
        .order_by(Poll.created_at.desc(), Poll.id)
    )
    if active_only:
        stmt = stmt.where(Poll.is_active.is_(True))
    try:
        with Session(engine, expire_on_commit=False) as session:
            polls = session.scalars(stmt).all()
            for p in polls:
                session.expunge(p)
            return list(polls)
    except SQLAlchemyError as exc:
        logger.error("Poll query failed: %s", exc)
        raise FetchFailure("Failed to load polls") from exc


def get_poll(engine, poll_id: str) -> Poll | None:
    try:
        with Session(engine, expire_on_commit=False) as session:
            poll = session.scalars(
                select(Poll).options(selectinload(Poll.options)).where(Poll.id == poll_id)
            ).first()
            if poll is not None:
                session.expunge(poll)
            return poll
    except SQLAlchemyError as exc:
        logger.error("Poll lookup failed for %s: %s", poll_id, exc)
        raise FetchFailure("Failed to load poll") from exc


def create_poll(
    engine,
    *,
    title: str,
    options: Iterable[str],
    actor_id: str,
    description: str = "",
) -> Poll:
    """Open a poll with at least two non-blank options.

    Raises ``ValueError`` for a blank title or too few options.
    """
    title = title.strip()
    choices = [o.strip() for o in options if o and o.strip()]
    if not title:
        raise ValueError("A poll needs a title.")
    if len(choices) < 2:
        raise ValueError("A poll needs at least two options.")

    poll_id = str(uuid.uuid4())
    poll = Poll(
        id=poll_id,
        title=title,
        description=description,
        created_by=actor_id,
        is_active=True,
        options=[
            PollOption(id=str(uuid.uuid4()), poll_id=poll_id, text=text, votes=0, position=i)
            for i, text in enumerate(choices)
        ],
    )
    admin_service.audited_create(
        engine, poll, table_name="polls", actor_id=actor_id, target_id=poll_id,
    )
    logger.info("Poll %s opened by %s with %d options", poll_id, actor_id, len(choices))
    return get_poll(engine, poll_id)


def cast_vote(engine, poll_id: str, option_id: str, user_id: str) -> bool:
    """Record a member's vote.

    Returns ``False`` if the member has already voted on this poll.

    Raises
    ------
    LookupError
        The poll is closed or the option does not belong to it.
    WriteFailure
        The write failed for any other reason.
    """
    try:
        with Session(engine) as session:
            option = session.get(PollOption, option_id)
            poll = session.get(Poll, poll_id)
            if poll is None or option is None or option.poll_id != poll_id:
                raise LookupError("No such poll option")
            if not poll.is_active:
                raise LookupError("Poll is closed")
            if session.get(UserVote, (poll_id, user_id)) is not None:
                return False

            session.add(UserVote(poll_id=poll_id, user_id=user_id, option_id=option_id))
            session.execute(
                update(PollOption)
                .where(PollOption.id == option_id)
                .values(votes=PollOption.votes + 1)
            )
            session.commit()
    except IntegrityError as exc:
        # Only a vote already on record counts as a repeat
        if has_voted(engine, poll_id, user_id):
            logger.info("Duplicate vote by %s on poll %s rejected", user_id, poll_id)
            return False
        logger.error("Vote on poll %s by %s violated a constraint: %s", poll_id, user_id, exc)
        raise WriteFailure("Failed to record vote", conflict=True) from exc
    except SQLAlchemyError as exc:
        logger.error("Vote on poll %s failed: %s", poll_id, exc)
        raise WriteFailure("Failed to record vote") from exc

    logger.debug("Vote recorded: poll=%s user=%s", poll_id, user_id)
    return True


def has_voted(engine, poll_id: str, user_id: str) -> bool:
    try:
        with Session(engine) as session:
            return session.get(UserVote, (poll_id, user_id)) is not None
    except SQLAlchemyError as exc:
        raise FetchFailure("Failed to load vote") from exc


def close_poll(engine, poll_id: str, *, actor_id: str) -> Poll | None:
    return admin_service.audited_update(
        engine, Poll, poll_id,
        table_name="polls", actor_id=actor_id, is_active=False,
    )


def delete_poll(engine, poll_id: str, *, actor_id: str) -> bool:
    return admin_service.audited_delete(
        engine, Poll, poll_id, table_name="polls", actor_id=actor_id,
    )


def poll_to_dict(poll: Poll) -> dict:
    return {
        "id": poll.id,
        "title": poll.title,
        "description": poll.description or "",
        "created_by": poll.created_by,
        "is_active": poll.is_active,
        "options": [
            {"id": o.id, "text": o.text, "votes": o.votes}
            for o in poll.options
        ],
    }
