"""Request schemas for run control endpoints."""
from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from ...jobs.models import JobVariant


class StartRunRequest(BaseModel):
    """Request body for POST /api/runs."""

    variant: JobVariant
    # Used as the result file stem, so no path separators.
    product_id: str = Field(min_length=1, max_length=128, pattern=r"^[^/\\:*?\"<>|]+$")

    @field_validator("product_id")
    @classmethod
    def _not_only_dots(cls, v: str) -> str:
        if not v.strip("."):
            raise ValueError("product_id must not consist only of dots")
        return v
