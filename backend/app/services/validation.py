"""
Trophy API - Trophy Input Validation
======================================

What:  Presence checks for the create-trophy body.
Why:   Runs before the store is touched so invalid input never costs a
       database round-trip.
How:   Pure function: trims name and description, then either returns a
       TrophyInput or raises ValidationError.
"""

from typing import NamedTuple, Optional

from app.exceptions import ValidationError
from app.schemas.trophy import TrophyCreate

REQUIRED_FIELDS_MESSAGE = "Name and imageUrl are required"


class TrophyInput(NamedTuple):
    """Validated fields ready for TrophyStore.insert()."""
    name: str
    description: Optional[str]
    image_url: str


def _clean(value: Optional[str]) -> str:
    return value.strip() if value else ""


def validate_trophy_input(payload: Optional[TrophyCreate]) -> TrophyInput:
    """
    Validate a create request.

    Rules:
        - name and imageUrl must be present and non-blank after trimming
        - name and description are trimmed; imageUrl is kept unchanged
        - description is optional; blank becomes None

    Raises:
        ValidationError: name or imageUrl is missing, empty or whitespace-only
    """
    if payload is None:
        payload = TrophyCreate()

    name = _clean(payload.name)
    has_image = bool(_clean(payload.image_url))
    if not name or not has_image:
        missing = [field for field, ok in (("name", name), ("imageUrl", has_image)) if not ok]
        raise ValidationError(
            message=REQUIRED_FIELDS_MESSAGE,
            context={"missing": missing},
        )

    description = _clean(payload.description) or None
    # The image payload is stored exactly as sent
    return TrophyInput(name=name, description=description, image_url=payload.image_url)
