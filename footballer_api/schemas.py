"""
Footballer API Schemas
======================

Pydantic schemas for request/response bodies.

Create bodies default every field to its zero value so that a missing field
reaches footballer validation (and is reported alongside every other
violation) instead of failing request parsing. Update bodies make every
field Optional; only fields that are present and non-null overwrite the
stored value.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from footballer_api.filters import Metadata


# =============================================================================
# BASE SCHEMAS
# =============================================================================

class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# HEALTH & STATUS
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: datetime
    database: str
    environment: str


class ReadyResponse(BaseModel):
    """Readiness probe response."""
    ready: bool
    checks: Dict[str, bool]


# =============================================================================
# FOOTBALLER SCHEMAS
# =============================================================================

class FootballerCreate(BaseModel):
    name: str = ""
    titles: int = 0
    started_play_year: int = 0
    year: int = 0
    club: str = ""
    played_clubs: int = 0
    position: Optional[List[str]] = None
    goals: int = 0


class FootballerUpdate(BaseModel):
    name: Optional[str] = None
    titles: Optional[int] = None
    started_play_year: Optional[int] = None
    year: Optional[int] = None
    club: Optional[str] = None
    played_clubs: Optional[int] = None
    position: Optional[List[str]] = None
    goals: Optional[int] = None

    def changes(self) -> Dict[str, object]:
        """Fields the client actually supplied with a non-null value."""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


class FootballerRead(BaseSchema):
    # created_at is stored but never rendered
    id: int
    name: str
    titles: int
    started_play_year: int
    year: int
    club: str
    played_clubs: int
    position: List[str]
    goals: int
    version: int


# =============================================================================
# ENVELOPES
# =============================================================================

class FootballerEnvelope(BaseModel):
    footballer: FootballerRead


class FootballerListEnvelope(BaseModel):
    footballers: List[FootballerRead]
    metadata: Metadata


class MessageEnvelope(BaseModel):
    message: str
