"""Contract models for global styles and theme style endpoints."""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# theme.json schema version written into user global styles documents
LATEST_SCHEMA = 2

RequestContext = Literal["view", "edit"]


class GlobalStylesTitle(BaseModel):
    """Title of a global styles document."""
    raw: str = Field(..., description="Title as it exists in the database")
    rendered: str = Field(..., description="HTML title for display")


class GlobalStylesTitleUpdate(BaseModel):
    """Title given as an object on update."""
    model_config = ConfigDict(extra="ignore")

    raw: str | None = None


class GlobalStylesResponse(BaseModel):
    """A user global styles document."""
    id: int = Field(..., description="ID of the global styles document")
    title: GlobalStylesTitle = Field(..., description="Title of the global styles document")
    settings: dict[str, Any] = Field(
        default_factory=dict, description="Global settings"
    )
    styles: dict[str, Any] = Field(
        default_factory=dict, description="Global styles"
    )


class GlobalStylesUpdateRequest(BaseModel):
    """
    Partial update of a global styles document.

    settings and styles replace the stored members wholesale when given.
    """
    model_config = ConfigDict(extra="ignore")

    title: str | GlobalStylesTitleUpdate | None = None
    settings: dict[str, Any] | None = None
    styles: dict[str, Any] | None = None


class ThemeGlobalStylesResponse(BaseModel):
    """Base styles declared by a theme."""
    settings: dict[str, Any] = Field(
        default_factory=dict, description="Global settings"
    )
    styles: dict[str, Any] = Field(
        default_factory=dict, description="Global styles"
    )


class ThemeStyleVariation(BaseModel):
    """A theme-authored style variation."""
    version: int = LATEST_SCHEMA
    title: str
    settings: dict[str, Any] | None = None
    styles: dict[str, Any] | None = None
