# src/reloft/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # Which rate-table vintage the pipeline reports against
    ASSUMPTIONS_VERSION: str = Field(default="2026.1")
    CURRENT_YEAR: int = Field(default=2026)

    # -----------------------------
    # Market rates (percent points, e.g. 7.5 == 7.5%)
    # -----------------------------
    CONSTRUCTION_LOAN_RATE: float = Field(default=7.5)
    HTC_BRIDGE_RATE: float = Field(default=8.0)

    # Return-on-cost hurdle used for subsidy gap / max offer
    TARGET_ROC: float = Field(default=6.5)

    model_config = SettingsConfigDict(
        env_prefix="RELOFT_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "CONSTRUCTION_LOAN_RATE",
        "HTC_BRIDGE_RATE",
        "TARGET_ROC",
        mode="before",
    )
    @classmethod
    def _to_percent_points(cls, v: Any) -> Any:
        if v is None:
            return v
        if isinstance(v, str):
            v = v.strip().replace("%", "")
        try:
            f = float(v)
        except Exception as err:
            raise ValueError("rate must be numeric or percent-like") from err
        # 0.075 means 7.5%
        if 0 < f < 1.0:
            f = f * 100.0
        if f < 0:
            raise ValueError("rate must be non-negative")
        return f

    @field_validator("CURRENT_YEAR", mode="before")
    @classmethod
    def _year_sane(cls, v: Any) -> Any:
        y = int(v)
        if y < 1900:
            raise ValueError("CURRENT_YEAR must be a calendar year")
        return y


config = AppConfig()
