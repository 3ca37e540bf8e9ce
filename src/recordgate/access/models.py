"""Pydantic models for the acting identity."""

from typing import Optional

from pydantic import BaseModel, Field


class IdentityContext(BaseModel):
    """Who is acting on the current request, supplied by the host application."""

    acting_user_id: Optional[int] = Field(default=None, description="Authenticated user id, if any")
    has_elevated_permission: bool = Field(
        default=False,
        description="Result of the host's administrative capability check",
    )
    locale: Optional[str] = Field(default=None, description="Locale for error messages")
