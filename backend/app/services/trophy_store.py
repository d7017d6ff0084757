"""
Trophy API - Trophy Store
===========================

What:  Persistence operations for trophies: insert, list newest-first, delete by id.
Why:   Keeps SQLAlchemy out of the route handlers and turns driver failures
       into the application's exception types.
How:   Each operation opens one session (one transaction) on the injected
       Database handle.
Who:   Created per request by the `get_trophy_store` dependency; the Database
       handle it wraps lives on app.state for the process lifetime.

Error Handling Strategy:
    - Missing rows → NotFoundError (404)
    - Malformed ids → InvalidIdError (400), raised before any query
    - Any SQLAlchemyError → DatabaseError (500), details logged server-side only
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError

from app.database import Database
from app.exceptions import DatabaseError, InvalidIdError, NotFoundError
from app.models.trophy import Trophy

logger = logging.getLogger(__name__)


def parse_trophy_id(trophy_id: str) -> UUID:
    """Convert a path id to a UUID, raising InvalidIdError if malformed."""
    try:
        return UUID(trophy_id)
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError(resource_id=str(trophy_id))


class TrophyStore:
    """
    Data access for the `trophies` table.

    Responsibilities:
        - insert(): Persist a validated trophy and return the stored row
        - list_all(): Every trophy, created_at descending
        - delete_by_id(): Remove one trophy and return it
    """

    def __init__(self, database: Database):
        self._database = database

    async def insert(
        self,
        name: str,
        description: Optional[str],
        image_url: str,
        created_at: Optional[datetime] = None,
    ) -> Trophy:
        """
        Persist a new trophy.

        The id is generated here (uuid4) and created_at defaults to now (UTC),
        so both are present on the returned object without a refresh.

        Raises:
            DatabaseError: The insert or commit failed
        """
        trophy = Trophy(
            name=name,
            description=description,
            image_url=image_url,
            created_at=created_at or datetime.now(timezone.utc),
        )
        try:
            async with self._database.session() as session:
                session.add(trophy)
                await session.flush()
        except SQLAlchemyError as e:
            logger.error("Database error inserting trophy: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the trophy. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Trophy created: %s", trophy.id)
        return trophy

    async def list_all(self) -> List[Trophy]:
        """
        Return all trophies, most recent first.

        Query plan:
            SELECT * FROM trophies ORDER BY created_at DESC
            → served by idx_trophies_created_at
        """
        try:
            async with self._database.session() as session:
                result = await session.execute(
                    select(Trophy).order_by(desc(Trophy.created_at))
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing trophies: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve trophies. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def delete_by_id(self, trophy_id: str) -> Trophy:
        """
        Delete a trophy by id and return the removed row.

        Lookup and delete run in the same transaction.

        Raises:
            InvalidIdError: trophy_id is not a UUID
            NotFoundError:  no trophy has this id
            DatabaseError:  the query or commit failed
        """
        uid = parse_trophy_id(trophy_id)
        try:
            async with self._database.session() as session:
                trophy = await session.get(Trophy, uid)
                if trophy is None:
                    raise NotFoundError(resource="Trophy", resource_id=str(uid))
                await session.delete(trophy)
        except SQLAlchemyError as e:
            logger.error("Database error deleting trophy %s: %s", uid, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the trophy. Please try again.",
                context={"trophy_id": str(uid), "error_type": type(e).__name__},
            )

        logger.info("Trophy deleted: %s", uid)
        return trophy
