"""
Footballer Services
===================

Contains:
- Footballer validation rules
- Listing query construction (full-text, array containment, window count)
- FootballerModel, the data-access component for the footballers table

Every data-access call runs under a single timeout (settings.db_query_timeout).
Storage failures other than "not found" and "edit conflict" surface as
PersistenceError.
"""

import asyncio
import logging
from datetime import date
from typing import Any, Callable, List, Optional, Sequence, Tuple

from sqlalchemy import Select, delete, func, insert, literal_column, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from footballer_api.config import settings
from footballer_api.errors import EditConflictError, PersistenceError, RecordNotFoundError
from footballer_api.filters import Filters, Metadata, calculate_metadata
from footballer_api.models import FOOTBALLER_COLUMNS, Footballer
from footballer_api.validator import Validator, unique

logger = logging.getLogger(__name__)

footballers_table = Footballer.__table__

# Sortable columns keyed by their SQL name, which is what Filters.sort_column returns
SORT_COLUMNS = {column.name: column for column in footballers_table.columns}

# Matches the expression of the footballers_name_idx GIN index
TEXT_SEARCH_CONFIG = literal_column("'simple'")


# =============================================================================
# VALIDATION
# =============================================================================

def validate_footballer(v: Validator, footballer: Footballer) -> None:
    """Record every field violation on v. Never stops at the first one."""
    current_year = date.today().year
    name = footballer.name or ""
    club = footballer.club or ""
    position = footballer.position

    v.check(name != "", "name", "must be provided")
    v.check(len(name.encode("utf-8")) <= 500, "name", "must not be more than 500 bytes long")

    v.check(bool(footballer.started_play_year), "started_play_year", "must be provided")
    v.check((footballer.started_play_year or 0) <= current_year, "started_play_year", "must not be in the future")

    v.check(bool(footballer.year), "year", "must be provided")
    v.check((footballer.year or 0) <= current_year, "year", "must not be in the future")

    v.check((footballer.titles or 0) >= 0, "titles", "must not be less than zero")

    v.check((footballer.played_clubs or 0) >= 1, "played_clubs", "must not be less than 1")

    v.check(len(club.encode("utf-8")) <= 500, "club", "must not be more than 500 bytes long")

    v.check((footballer.goals or 0) >= 0, "goals", "must not be negative")

    v.check(position is not None, "position", "must be provided")
    v.check(len(position or []) >= 1, "position", "must contain at least 1 position")
    v.check(len(position or []) <= 6, "position", "must not contain more than 6 positions")
    v.check(unique(position or []), "position", "must not contain duplicate values")


# =============================================================================
# QUERY CONSTRUCTION
# =============================================================================

def build_list_statement(
    name: str,
    club: str,
    positions: Sequence[str],
    filters: Filters
) -> Select:
    """
    Listing query for FootballerModel.get_all.

    The first column is count(*) OVER (), the number of rows matching the
    filters before LIMIT/OFFSET, so metadata needs no second query.
    Empty filters match everything.
    """
    stmt = select(
        func.count().over().label("total_records"),
        *FOOTBALLER_COLUMNS
    )

    if name:
        stmt = stmt.where(
            func.to_tsvector(TEXT_SEARCH_CONFIG, Footballer.name).op("@@")(
                func.plainto_tsquery(TEXT_SEARCH_CONFIG, name)
            )
        )

    if club:
        stmt = stmt.where(func.lower(Footballer.club) == club.lower())

    if positions:
        stmt = stmt.where(Footballer.position.contains(list(positions)))

    sort_column = SORT_COLUMNS[filters.sort_column()]
    ordering = sort_column.desc() if filters.sort_direction() == "DESC" else sort_column.asc()

    return (
        stmt
        .order_by(ordering, Footballer.id.asc())
        .limit(filters.limit())
        .offset(filters.offset())
    )


def _row_to_footballer(row: Any) -> Footballer:
    """Build a detached Footballer from a row selected with FOOTBALLER_COLUMNS."""
    mapping = row._mapping
    return Footballer(**{column.key: mapping[column.key] for column in FOOTBALLER_COLUMNS})


def _mutable_values(footballer: Footballer) -> dict:
    return {
        Footballer.name: footballer.name,
        Footballer.titles: footballer.titles,
        Footballer.started_play_year: footballer.started_play_year,
        Footballer.year: footballer.year,
        Footballer.club: footballer.club,
        Footballer.played_clubs: footballer.played_clubs,
        Footballer.position: list(footballer.position),
        Footballer.goals: footballer.goals,
    }


# =============================================================================
# DATA ACCESS
# =============================================================================

class FootballerModel:
    """Data access for the footballers table."""

    def __init__(self, db: AsyncSession, timeout: Optional[float] = None):
        self.db = db
        self.timeout = settings.db_query_timeout if timeout is None else timeout

    async def _run(
        self,
        stmt: Any,
        fetch: Callable[[Any], Any],
        commit: bool = False
    ) -> Any:
        """Execute stmt under the per-call timeout and return fetch(result)."""
        async def execute():
            result = await self.db.execute(stmt)
            value = fetch(result)
            if commit:
                await self.db.commit()
            return value

        try:
            return await asyncio.wait_for(execute(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            await self._rollback()
            raise PersistenceError(f"query exceeded {self.timeout}s timeout") from e
        except (SQLAlchemyError, OSError) as e:
            # asyncpg connect failures arrive as bare OSError
            await self._rollback()
            raise PersistenceError(str(e)) from e

    async def _rollback(self) -> None:
        """Roll back after a failed call, bounded by the same timeout."""
        try:
            await asyncio.wait_for(self.db.rollback(), timeout=self.timeout)
        except (asyncio.TimeoutError, SQLAlchemyError, OSError) as e:
            logger.warning(f"Rollback after failed query did not complete: {e!r}")

    async def insert(self, footballer: Footballer) -> Footballer:
        """Insert footballer; fills in id, created_at and version (1)."""
        stmt = (
            insert(footballers_table)
            .values(_mutable_values(footballer))
            .returning(Footballer.id, Footballer.created_at, Footballer.version)
        )
        row = await self._run(stmt, lambda result: result.one(), commit=True)

        footballer.id, footballer.created_at, footballer.version = row
        logger.info(f"Inserted footballer {footballer.id}")
        return footballer

    async def get(self, footballer_id: int) -> Footballer:
        if footballer_id < 1:
            raise RecordNotFoundError()

        stmt = select(*FOOTBALLER_COLUMNS).where(Footballer.id == footballer_id)
        row = await self._run(stmt, lambda result: result.one_or_none())

        if row is None:
            raise RecordNotFoundError()
        return _row_to_footballer(row)

    async def update(self, footballer: Footballer) -> Footballer:
        """
        Write footballer back if, and only if, the stored version still equals
        footballer.version. On success footballer.version is the new version.
        """
        values = _mutable_values(footballer)
        values[Footballer.version] = Footballer.version + 1

        stmt = (
            update(footballers_table)
            .where(
                Footballer.id == footballer.id,
                Footballer.version == footballer.version
            )
            .values(values)
            .returning(Footballer.version)
        )
        new_version = await self._run(stmt, lambda result: result.scalar_one_or_none(), commit=True)

        if new_version is None:
            raise EditConflictError()

        footballer.version = new_version
        return footballer

    async def delete(self, footballer_id: int) -> None:
        if footballer_id < 1:
            raise RecordNotFoundError()

        stmt = delete(footballers_table).where(Footballer.id == footballer_id)
        rows_affected = await self._run(stmt, lambda result: result.rowcount, commit=True)

        if rows_affected == 0:
            raise RecordNotFoundError()
        logger.info(f"Deleted footballer {footballer_id}")

    async def get_all(
        self,
        name: str,
        club: str,
        positions: Sequence[str],
        filters: Filters
    ) -> Tuple[List[Footballer], Metadata]:
        stmt = build_list_statement(name, club, positions, filters)
        rows = await self._run(stmt, lambda result: result.all())

        total_records = rows[0].total_records if rows else 0
        footballers = [_row_to_footballer(row) for row in rows]

        return footballers, calculate_metadata(total_records, filters.page, filters.page_size)


class Models:
    """Data-access components sharing one session."""

    def __init__(self, db: AsyncSession, timeout: Optional[float] = None):
        self.footballers = FootballerModel(db, timeout=timeout)
