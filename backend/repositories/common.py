"""
Helpers shared by the repositories: uniqueness checks, commit handling and
column value normalization.
"""
import logging
from enum import Enum
from typing import Any, Dict, Optional, Type

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from domain.errors import ConflictError, InternalError

logger = logging.getLogger(__name__)


def column_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Unwrap enums so values can be bound to plain string columns."""
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in fields.items()}


def ensure_unique(
    session: Session,
    orm_cls: Type,
    column: str,
    value: Any,
    message: str,
    exclude_id: Optional[int] = None,
) -> None:
    query = session.query(func.count(orm_cls.id)).filter(getattr(orm_cls, column) == value)
    if exclude_id is not None:
        query = query.filter(orm_cls.id != exclude_id)
    if query.scalar():
        raise ConflictError(message, field=column)


def exists(session: Session, orm_cls: Type, row_id: Optional[int]) -> bool:
    if row_id is None:
        return False
    return session.get(orm_cls, row_id) is not None


def commit(session: Session, conflict_message: str = "Resource already exists") -> None:
    """Commit the unit of work; a unique-constraint race becomes a ConflictError."""
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.info("Integrity error on commit: %s", exc.orig)
        raise ConflictError(conflict_message) from exc
    except Exception as exc:
        session.rollback()
        logger.exception("Commit failed")
        raise InternalError() from exc
