# src/reloft/api/schemas.py
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ScreenRequest(BaseModel):
    """
    Request body for /screen.

    Permissive: intake exports use camelCase and carry extra
    fields; ``services.validation`` does the real normalization. Either a
    flat payload or ``profile`` / ``underwriting`` sections.
    """
    model_config = ConfigDict(extra="allow")

    address: str = ""
    profile: dict[str, Any] | None = None
    underwriting: dict[str, Any] | None = None


class ScreenResponse(BaseModel):
    """Nested screening record; shape is owned by services.screening."""
    model_config = ConfigDict(extra="allow")

    address: str = ""
    assumptions_version: str


class HealthResponse(BaseModel):
    status: str = "ok"
    assumptions_version: str
    env: str
