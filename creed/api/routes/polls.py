"""
creed.api.routes.polls — Member polls
=======================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from creed.api.deps import get_current_marshal, get_current_user, get_engine
from creed.services import poll_service

router = APIRouter(prefix="/polls", tags=["polls"])


class PollCreate(BaseModel):
    title: str
    description: str = ""
    options: list[str] = Field(default_factory=list)


class VoteRequest(BaseModel):
    option_id: str


def _poll_view(engine, poll, user_id: str) -> dict:
    return {
        **poll_service.poll_to_dict(poll),
        "has_voted": poll_service.has_voted(engine, poll.id, user_id),
    }


@router.get("")
def list_polls(
    active_only: bool = False,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    polls = poll_service.list_polls(engine, active_only=active_only)
    return {"polls": [_poll_view(engine, p, user["sub"]) for p in polls]}


@router.post("", status_code=201)
def create_poll(
    body: PollCreate,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    try:
        poll = poll_service.create_poll(
            engine,
            title=body.title,
            description=body.description,
            options=body.options,
            actor_id=marshal["sub"],
        )
    except ValueError as exc:
        raise HTTPException(422, str(exc)) from exc
    return poll_service.poll_to_dict(poll)


@router.post("/{poll_id}/vote")
def vote(
    poll_id: str,
    body: VoteRequest,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    """Cast the member's single vote on a poll."""
    try:
        accepted = poll_service.cast_vote(engine, poll_id, body.option_id, user["sub"])
    except LookupError as exc:
        raise HTTPException(404, str(exc)) from exc
    if not accepted:
        raise HTTPException(409, "You have already voted on this poll")
    poll = poll_service.get_poll(engine, poll_id)
    return _poll_view(engine, poll, user["sub"])


@router.post("/{poll_id}/close")
def close_poll(
    poll_id: str,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    if poll_service.close_poll(engine, poll_id, actor_id=marshal["sub"]) is None:
        raise HTTPException(404, "Poll not found")
    return poll_service.poll_to_dict(poll_service.get_poll(engine, poll_id))


@router.delete("/{poll_id}")
def delete_poll(
    poll_id: str,
    marshal: dict = Depends(get_current_marshal),
    engine=Depends(get_engine),
):
    if not poll_service.delete_poll(engine, poll_id, actor_id=marshal["sub"]):
        raise HTTPException(404, "Poll not found")
    return {"deleted": True}
