"""
Request models for the CobroSmart AI Engine API.

Security:
- Free-text fields have max_length constraints to bound prompt and row size
- Status values are checked by the engine so an unknown one gets INVALID_STATUS
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from cobrosmart.store.models import TONES, Tone


class MessageRequest(BaseModel):
    """Generate (or fetch the cached) message for a debtor."""

    tone: Tone = "amable"
    # None defers to the regenerate query parameter
    regenerate: Optional[bool] = None

    @field_validator("tone", mode="before")
    @classmethod
    def default_unknown_tone(cls, v):
        """Unknown or missing tones fall back to amable."""
        return v if isinstance(v, str) and v in TONES else "amable"


class StatusUpdateRequest(BaseModel):
    """Record the outcome of a contact attempt."""

    status: Optional[str] = Field(None, max_length=50)
    promise_date: Optional[str] = Field(None, max_length=64)  # ISO date or datetime
    message_text: Optional[str] = Field(None, max_length=2000)
    tone: Optional[Tone] = None
    channel: Optional[str] = Field(None, max_length=50)  # defaults to whatsapp_manual


class ImportRequest(BaseModel):
    """Spreadsheet rows keyed by the Spanish column names.

    Rows are validated one by one during import so that a bad row is
    reported instead of failing the whole request. The route checks that
    rows is a list so a malformed body gets INVALID_PAYLOAD.
    """

    rows: Any = None
