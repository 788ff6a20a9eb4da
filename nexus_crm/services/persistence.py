"""Write helpers for schema-tolerant updates."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from nexus_crm.core.errors import PersistenceError
from nexus_crm.models import Base

logger = logging.getLogger(__name__)


async def commit_or_fail(session: AsyncSession, operation: str) -> None:
    """Commit the session, rolling back and raising ``PersistenceError`` on failure."""

    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Persistence failure", extra={"operation": operation}, exc_info=exc)
        raise PersistenceError(operation) from exc


async def update_first_accepted(
    session: AsyncSession,
    model: type[Base],
    criteria: Sequence[ColumnElement[bool]],
    variants: Sequence[dict[str, Any]],
    *,
    operation: str,
) -> dict[str, Any]:
    """Apply the first payload variant the database accepts.

    ``variants`` run from most to least complete, so an optional column
    that is missing from an older schema is dropped instead of failing the
    whole write. Each attempt is committed or rolled back on its own.
    Returns the variant that landed.
    """

    for index, values in enumerate(variants):
        try:
            await session.execute(update(model).where(*criteria).values(**values))
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            logger.warning(
                "Update variant rejected",
                extra={
                    "table": model.__tablename__,
                    "variant": index,
                    "columns": sorted(values),
                },
                exc_info=True,
            )
            continue
        return values

    logger.error(
        "All update variants rejected",
        extra={"table": model.__tablename__, "operation": operation},
    )
    raise PersistenceError(operation)
