"""Enhancer data models."""

from pydantic import BaseModel, Field


class EnhancedDocument(BaseModel):
    """Print-ready document image produced by the enhancer."""

    width: int
    height: int
    data: bytes = Field(..., repr=False, description="Encoded image bytes")
    content_type: str = "image/jpeg"

    class Config:
        """Pydantic config."""
        frozen = True
