"""Lawn care plan model."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field, field_validator

from lawn_advisor.models.location import Coordinates


class LawnCarePlan(BaseModel):
    """A registered lawn and the owner who receives its advisories.

    Plans are read-only snapshots taken once per run; the advisory engine
    never mutates or persists them.
    """

    model_config = {"frozen": True}

    id: uuid.UUID = Field(..., description="Plan identifier")
    owner_email: str = Field(..., description="Where advisories are sent")
    owner_name: str | None = Field(default=None, description="Owner display name")
    location: Coordinates = Field(..., description="Lawn location")
    name: str | None = Field(default=None, description="Friendly name of the lawn")

    @field_validator("owner_email")
    @classmethod
    def validate_owner_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v:
            raise ValueError(f"Invalid notification target: '{v}'")
        return v
