"""Pydantic schemas for notification admission responses."""

from __future__ import annotations

from pydantic import BaseModel, Field


class NotificationAdmissionResponse(BaseModel):
    """Outcome of a guarded notification admission."""

    user_id: str = Field(..., description="User the notification is addressed to.")
    admitted: bool = Field(
        ..., description="Always true; throttled requests are answered with HTTP 429."
    )
