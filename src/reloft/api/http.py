# src/reloft/api/http.py
from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException

from reloft.adapters.config import config
from reloft.adapters.logging_utils import get_logger
from reloft.domain.assumptions import build_assumptions
from reloft.services.screening import screen_property

from .schemas import HealthResponse, ScreenRequest, ScreenResponse

app = FastAPI(title="reloft", version="0.1.0")
logger = get_logger(__name__)


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(assumptions_version=config.ASSUMPTIONS_VERSION, env=config.ENV)


@app.get("/assumptions", response_model=dict)
def assumptions() -> dict[str, Any]:
    """Current rate tables, after environment overrides."""
    return build_assumptions().model_dump(mode="json")


@app.post("/screen", response_model=ScreenResponse)
def screen(payload: ScreenRequest) -> ScreenResponse:
    raw = payload.model_dump(exclude_none=True)
    try:
        record = screen_property(raw)
    except ValueError as e:
        logger.warning("Screen request rejected", extra={"context": {"error": str(e)}})
        raise HTTPException(status_code=400, detail=str(e)) from e
    return ScreenResponse(**record)
