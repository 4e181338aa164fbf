"""
Demo Seed Data
==============

Inserts a small set of footballers through FootballerModel so every row
passes the same validation and insert path as the API.
"""

import logging
from typing import List

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from footballer_api.models import Footballer
from footballer_api.services import FootballerModel, validate_footballer
from footballer_api.validator import Validator

logger = logging.getLogger(__name__)


FOOTBALLERS_DATA = [
    {"name": "Lionel Messi", "titles": 44, "started_play_year": 2004, "year": 2024,
     "club": "Inter Miami", "played_clubs": 3, "position": ["RW", "CF", "CAM"], "goals": 838},
    {"name": "Cristiano Ronaldo", "titles": 35, "started_play_year": 2002, "year": 2024,
     "club": "Al Nassr", "played_clubs": 5, "position": ["ST", "LW"], "goals": 895},
    {"name": "Erling Haaland", "titles": 9, "started_play_year": 2016, "year": 2024,
     "club": "Manchester City", "played_clubs": 4, "position": ["ST"], "goals": 280},
    {"name": "Kylian Mbappe", "titles": 16, "started_play_year": 2015, "year": 2024,
     "club": "Real Madrid", "played_clubs": 3, "position": ["ST", "LW"], "goals": 330},
    {"name": "Luka Modric", "titles": 28, "started_play_year": 2003, "year": 2024,
     "club": "Real Madrid", "played_clubs": 4, "position": ["CM", "CAM"], "goals": 130},
    {"name": "Virgil van Dijk", "titles": 8, "started_play_year": 2011, "year": 2024,
     "club": "Liverpool", "played_clubs": 4, "position": ["CB"], "goals": 50},
    {"name": "Manuel Neuer", "titles": 33, "started_play_year": 2006, "year": 2024,
     "club": "Bayern Munich", "played_clubs": 2, "position": ["GK"], "goals": 0},
    {"name": "Bukayo Saka", "titles": 2, "started_play_year": 2018, "year": 2024,
     "club": "Arsenal", "played_clubs": 1, "position": ["RW", "LW", "LB"], "goals": 70},
]


async def clear_footballers(session: AsyncSession) -> None:
    await session.execute(text("TRUNCATE TABLE footballers RESTART IDENTITY"))
    await session.commit()


async def seed_footballers(session: AsyncSession) -> List[Footballer]:
    """Insert the demo footballers. Rows that fail validation are skipped."""
    model = FootballerModel(session)
    footballers = []

    for data in FOOTBALLERS_DATA:
        footballer = Footballer(**data)

        v = Validator()
        validate_footballer(v, footballer)
        if not v.valid():
            logger.warning(f"Skipping {data['name']}: {v.errors}")
            continue

        footballers.append(await model.insert(footballer))

    return footballers
