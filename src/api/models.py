"""Pydantic models for API request/response."""

from typing import Optional
from pydantic import BaseModel, Field


class SiteResponse(BaseModel):
    """An enabled MediaWiki dictionary."""
    id: str = Field(..., description="Dictionary ID")
    name: str = Field(..., description="Display name")
    url: str = Field(..., description="Directory holding api.php")
    language: Optional[str] = Field(None, description="Two-letter language code guessed from the URL")
    rtl: bool = Field(False, description="Articles are wrapped in a right-to-left container")
    icon: str = Field(..., description="Icon file path or stock icon name")


class PrefixMatchResponse(BaseModel):
    """Titles sorting at or after the searched word."""
    matches: list[str] = Field(default_factory=list, description="Matching titles in API order")
    error: Optional[str] = Field(None, description="Transport or parse error, if any")


class ArticleResponse(BaseModel):
    """Merged article fragment for a headword and its alternates."""
    html: str = Field("", description="Article fragment; empty if no variant matched a page")
    has_data: bool = Field(False, description="At least one page was found")
    error: Optional[str] = Field(None, description="Last per-variant error; does not mean the lookup failed")
