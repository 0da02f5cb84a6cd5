"""Pydantic schemas for sanitized spreadsheet records."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class BreachRecord(BaseModel):
    """A single reported data breach."""

    organization: str = Field(
        ...,
        min_length=1,
        description="Affected organization (never empty).",
    )
    date: str = Field(
        "",
        description="Incident date as YYYY-MM-DD, or empty when unknown. Year-only data maps to January 1.",
    )
    type: str = Field(
        "",
        description="Incident category (e.g. ransomware, data leak).",
    )
    impact: str = Field(
        "",
        description="Impact summary, when the source table provides one.",
    )
    description: str = Field(
        "",
        description="Descriptive columns joined with ' | '.",
    )
    source: str = Field(
        "",
        description="Source reference, normalized to an absolute URL when possible.",
    )


class ConferenceRecord(BaseModel):
    """A single conference or event in the calendar."""

    name: str = Field(
        ...,
        min_length=1,
        description="Event name (never empty).",
    )
    date: str = Field(
        "",
        description="Start date as YYYY-MM-DD, or empty when unknown.",
    )
    location: str = Field(
        "",
        description="Country or city hosting the event.",
    )
    website: str = Field(
        "",
        description="Event website, normalized to an absolute URL when possible.",
    )
    description: str = Field(
        "",
        description="Duration and usual timing joined with ' | '.",
    )
    type: Literal["Conference"] = Field(
        "Conference",
        description="Record kind; always 'Conference'.",
    )


class ErrorResponse(BaseModel):
    """Error body returned for every non-200 response."""

    error: str = Field(..., description="Human-readable error summary.")
    details: str | None = Field(None, description="Optional context (e.g. upstream status).")
