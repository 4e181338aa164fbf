"""
Footballer Database Model
=========================

A footballer row is versioned: `version` starts at 1 and is bumped by every
successful update, which is what the optimistic-concurrency check in
FootballerModel.update compares against.

Attribute names follow the API (`name`, `started_play_year`, ...); column
names follow the table (`names`, `startedplayyear`, ...).
"""

from datetime import datetime
from typing import List

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from footballer_api.database import Base


class Footballer(Base):
    """Footballer record."""
    __tablename__ = "footballers"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    # Identity
    name: Mapped[str] = mapped_column("names", Text, nullable=False)
    club: Mapped[str] = mapped_column(Text, nullable=False)

    # Career
    titles: Mapped[int] = mapped_column(Integer, nullable=False)
    started_play_year: Mapped[int] = mapped_column("startedplayyear", Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    played_clubs: Mapped[int] = mapped_column("playedclubs", Integer, nullable=False)
    position: Mapped[List[str]] = mapped_column("positions", ARRAY(Text), nullable=False)
    goals: Mapped[int] = mapped_column(Integer, nullable=False)

    # Optimistic-concurrency token
    version: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))

    __table_args__ = (
        CheckConstraint(
            "year BETWEEN 1600 AND date_part('year', now())",
            name="footballers_year_check",
        ),
        CheckConstraint(
            "array_length(positions, 1) BETWEEN 1 AND 6",
            name="footballers_length_check",
        ),
        Index(
            "footballers_name_idx",
            text("to_tsvector('simple', names)"),
            postgresql_using="gin",
        ),
        Index("footballers_positions_idx", "positions", postgresql_using="gin"),
    )

    def __repr__(self) -> str:
        return f"<Footballer id={self.id} name={self.name!r} version={self.version}>"


FOOTBALLER_FIELDS = (
    "id",
    "created_at",
    "name",
    "titles",
    "started_play_year",
    "year",
    "club",
    "played_clubs",
    "position",
    "goals",
    "version",
)

# Column order used by every read, labelled with the attribute keys
FOOTBALLER_COLUMNS = tuple(getattr(Footballer, key).label(key) for key in FOOTBALLER_FIELDS)

# Permitted values for the `sort` query parameter (column names).
FOOTBALLER_SORT_SAFELIST = [
    "id", "names", "titles", "startedplayyear", "year", "goals",
    "-id", "-names", "-titles", "-startedplayyear", "-year", "-goals",
]
