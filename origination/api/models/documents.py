"""Request models for document review endpoints."""

from pydantic import BaseModel, Field


class DocumentRejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500, description="Shown to the applicant")
    comment: str | None = Field(default=None, max_length=1000, description="Internal comment")
