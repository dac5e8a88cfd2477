"""
creed.services.admin_service — Audit-Logged Mutation Helpers
==============================================================

Every marshal mutation follows the same pattern:
  1. Begin transaction
  2. Read "before" snapshot
  3. Apply change
  4. Write admin_log with before/after JSONB
  5. Commit

Database errors are rolled back and re-raised as
:class:`~creed.errors.WriteFailure`; the caller's prior state is untouched.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from creed.database.models import AdminActionType, AdminLog
from creed.errors import WriteFailure

logger = logging.getLogger(__name__)

# Never copied into audit snapshots
_REDACTED_COLUMNS = frozenset({"password_hash"})


# ---------------------------------------------------------------------------
# Generic audit helpers
# ---------------------------------------------------------------------------

def row_to_dict(obj: Any) -> dict | None:
    """Convert a SQLAlchemy model instance to a JSON-serializable dict."""
    if obj is None:
        return None
    result = {}
    for attr in inspect(obj).mapper.column_attrs:
        name = attr.columns[0].name
        if name in _REDACTED_COLUMNS:
            continue
        val = getattr(obj, attr.key)
        if isinstance(val, (datetime, date)):
            val = val.isoformat()
        result[name] = val
    return result


def log_admin_action(
    session: Session,
    *,
    actor_id: str,
    action_type: str,
    target_table: str,
    target_id: str | None,
    before: dict | None,
    after: dict | None,
) -> None:
    """Insert a row into admin_log within the current transaction."""
    session.add(AdminLog(
        actor_id=actor_id,
        action_type=action_type,
        target_table=target_table,
        target_id=target_id,
        before_snapshot=before,
        after_snapshot=after,
    ))


def _pk_str(pk: Any) -> str:
    if isinstance(pk, tuple):
        return ":".join(str(p) for p in pk)
    return str(pk)


def _write_failure(table_name: str, action: str, exc: SQLAlchemyError) -> WriteFailure:
    logger.error("%s on %s failed: %s", action, table_name, exc)
    if isinstance(exc, IntegrityError):
        return WriteFailure(f"{action} on {table_name} conflicts with existing data",
                            conflict=True)
    return WriteFailure(f"{action} on {table_name} failed")


def audited_create(
    engine,
    row: Any,
    *,
    table_name: str,
    actor_id: str,
    target_id: str,
) -> Any:
    """Generic audited CREATE: add -> flush -> log -> commit -> return.

    Parameters
    ----------
    row : ORM instance (already constructed, not yet added to a session).
    target_id : Primary key rendered for the audit trail.
    """
    try:
        with Session(engine, expire_on_commit=False) as session:
            session.add(row)
            session.flush()
            log_admin_action(
                session,
                actor_id=actor_id,
                action_type=AdminActionType.CREATE,
                target_table=table_name,
                target_id=target_id,
                before=None,
                after=row_to_dict(row),
            )
            session.commit()
            session.refresh(row)
            session.expunge(row)
            return row
    except SQLAlchemyError as exc:
        raise _write_failure(table_name, "CREATE", exc) from exc


def audited_update(
    engine,
    model_cls: type,
    pk: Any,
    *,
    table_name: str,
    actor_id: str,
    frozen_keys: tuple[str, ...] = ("id",),
    **kwargs: Any,
) -> Any | None:
    """Generic audited UPDATE: get -> before -> apply kwargs -> log -> commit.

    Returns the updated (expunged) object, or ``None`` if not found.
    Unknown and frozen keys are ignored.
    """
    try:
        with Session(engine, expire_on_commit=False) as session:
            obj = session.get(model_cls, pk)
            if obj is None:
                return None
            before = row_to_dict(obj)
            for key, value in kwargs.items():
                if hasattr(obj, key) and key not in frozen_keys:
                    setattr(obj, key, value)
            session.flush()
            log_admin_action(
                session,
                actor_id=actor_id,
                action_type=AdminActionType.UPDATE,
                target_table=table_name,
                target_id=_pk_str(pk),
                before=before,
                after=row_to_dict(obj),
            )
            session.commit()
            session.refresh(obj)
            session.expunge(obj)
            return obj
    except SQLAlchemyError as exc:
        raise _write_failure(table_name, "UPDATE", exc) from exc


def audited_delete(
    engine,
    model_cls: type,
    pk: Any,
    *,
    table_name: str,
    actor_id: str,
) -> bool:
    """Generic audited DELETE: get -> log -> delete -> commit.

    Returns ``True`` if the row existed and was deleted.
    """
    try:
        with Session(engine) as session:
            obj = session.get(model_cls, pk)
            if obj is None:
                return False
            log_admin_action(
                session,
                actor_id=actor_id,
                action_type=AdminActionType.DELETE,
                target_table=table_name,
                target_id=_pk_str(pk),
                before=row_to_dict(obj),
                after=None,
            )
            session.delete(obj)
            session.commit()
            return True
    except SQLAlchemyError as exc:
        raise _write_failure(table_name, "DELETE", exc) from exc
