"""
Trophy API - Pydantic Request/Response Schemas
================================================

What:  Pydantic models defining the API contract with the frontend.
Why:   Automatic serialization, camelCase wire names and OpenAPI docs.
How:   Python attributes are snake_case; `alias` gives the JSON field names
       (`imageUrl`, `createdAt`). FastAPI serializes responses by alias.

Design Decision:
    TrophyCreate accepts every field as optional. Presence rules live in the
    validation layer so that a missing name produces the API's own 400 message
    instead of FastAPI's generic 422 field report.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TrophyCreate(BaseModel):
    """
    What:  Body of POST /api/trophies.
    Who:   Checked by services.validation.validate_trophy_input before insert.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, description="Trophy name (required)")
    description: Optional[str] = Field(default=None, description="Free-text description")
    image_url: Optional[str] = Field(
        default=None,
        alias="imageUrl",
        description="Base64-encoded image, typically a data: URL (required)",
    )


class TrophyResponse(BaseModel):
    """
    What:  Full representation of a stored trophy.
    Who:   Returned by GET /api/trophies (as a list) and POST /api/trophies.
    """
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: uuid.UUID = Field(description="Unique trophy identifier")
    name: str = Field(description="Trophy name")
    description: Optional[str] = Field(default=None, description="Description, null if none")
    image_url: str = Field(alias="imageUrl", description="Base64-encoded image")
    created_at: datetime = Field(alias="createdAt", description="Creation time (ISO 8601)")

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """SQLite returns naive datetimes; every stored timestamp is UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class MessageResponse(BaseModel):
    """
    What:  `{"message": ...}` body used for confirmations and every error.
    Why:   One error shape across routes, handlers and middleware.
    """
    message: str = Field(description="Human-readable message")


class HealthResponse(BaseModel):
    """Liveness probe body."""
    status: str = Field(default="ok", description="Always 'ok' while the process serves requests")
