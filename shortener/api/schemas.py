"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse.

The public contract is camelCase (the embeddable widget posts
{url, customCode}); snake_case field names are accepted as well.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortenRequest(CamelModel):
    """Request model for URL shortening endpoints."""
    # Plain str: URL validation is a service concern so it maps to InvalidURLError
    url: str = Field(..., description="The long URL to shorten")
    custom_code: Optional[str] = Field(
        default=None,
        description="Preferred short code (2-20 letters/digits); random when omitted"
    )


class ShortenResponse(CamelModel):
    """Response model for POST /shorten."""
    short_url: str = Field(..., description="The complete short URL")
    short_code: str = Field(..., description="The short code")
    original_url: str = Field(..., description="The original long URL")
    expires_at: Optional[datetime] = Field(None, description="When the alias stops resolving")


class LinkResponse(CamelModel):
    """One alias on the first-party management surface."""
    id: int
    short_code: str
    short_url: str
    original_url: str
    created_at: datetime
    expires_at: Optional[datetime] = None


class LinkListResponse(CamelModel):
    """An owner's live aliases plus the quota view."""
    links: list[LinkResponse]
    count: int
    limit: int
    remaining: int
    has_custom_code: bool = Field(
        ..., description="Whether any listed code differs from the generated shape"
    )


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str
