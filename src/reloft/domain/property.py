# src/reloft/domain/property.py
from __future__ import annotations

import math
import numbers
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from reloft.domain.enums import (
    AffordableStrategy,
    ConversionScope,
    ConversionType,
    FloorplateShape,
    FoundationCondition,
    HistoricDesignation,
    LoanStructure,
    QualityLevel,
    SeismicEra,
    Submarket,
    UseType,
    VacancyBand,
    WindowType,
    Zoning,
)


def lenient_number(v: Any) -> float:
    """
    Coerce intake values like 185000, "185,000", "$4,200,000" or "5%"
    into a float. Blank / garbage / negative / non-finite values collapse
    to 0.0.
    """
    if v is None or isinstance(v, bool):
        return 0.0
    if isinstance(v, numbers.Real):  # includes numpy scalars from CSV intake
        try:
            f = float(v)
        except OverflowError:
            return 0.0
    elif isinstance(v, str):
        s = v.strip().replace(",", "").replace("$", "")
        if s.endswith("%"):
            s = s[:-1]
        if not s:
            return 0.0
        try:
            f = float(s)
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(f) or f < 0:
        return 0.0
    return f


def lenient_bool(v: Any) -> bool | None:
    """Yes/no style intake flags. Anything unrecognised is None (unknown)."""
    if v is None or isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in ("yes", "y", "true", "on", "1"):
        return True
    if s in ("no", "n", "false", "off", "0"):
        return False
    return None


_FLOAT_FIELDS = (
    "building_sf",
    "floorplate_width",
    "floorplate_depth",
    "typical_floor_sf",
    "floor_to_floor",
    "site_area",
    "acquisition_price",
    "corridor_width",
    "min_window_distance",
)

_INT_FIELDS = (
    "year_built",
    "stories",
    "elevators",
    "surface_parking",
    "structured_parking",
    "stories_to_convert",
)


class PropertyProfile(BaseModel):
    """
    Immutable intake record for one candidate building.

    Every field is optional. Numbers default to 0 (meaning "not provided")
    and classifications default to their Unknown/None member; each stage
    documents how it degrades on those neutral values.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    address: str = ""
    neighborhood: str = ""
    use_type: UseType = UseType.UNKNOWN
    year_built: int = 0

    building_sf: float = 0.0
    stories: int = 0
    floorplate_width: float = 0.0
    floorplate_depth: float = 0.0
    typical_floor_sf: float = 0.0
    floor_to_floor: float = 0.0

    window_type: WindowType = WindowType.UNKNOWN
    facade_material: str = "Unknown"
    structural_system: str = "Unknown"
    seismic_era: SeismicEra = SeismicEra.UNKNOWN
    mep_condition: str = "Unknown"
    elevators: int = 0
    loading_dock: bool | None = None
    foundation_condition: FoundationCondition = FoundationCondition.UNKNOWN

    surface_parking: int = 0
    structured_parking: int = 0
    site_area: float = 0.0
    character_features: tuple[str, ...] = ()

    historic_designation: HistoricDesignation = HistoricDesignation.NONE
    affordable_strategy: AffordableStrategy = AffordableStrategy.MARKET_RATE
    zoning: Zoning = Zoning.UNKNOWN
    vacancy_rate: VacancyBand = VacancyBand.UNKNOWN
    floorplate_shape: FloorplateShape = FloorplateShape.UNKNOWN

    acquisition_price: float = Field(default=0.0, description="Asking or estimated value")

    # Partial conversions keep the lower floors as office
    conversion_scope: ConversionScope = ConversionScope.FULL
    stories_to_convert: int = 0

    # Layout stress-test geometry
    corridor_width: float = 6.0
    min_window_distance: float = 25.0

    @field_validator(*_FLOAT_FIELDS, mode="before")
    @classmethod
    def _coerce_float(cls, v: Any) -> float:
        return lenient_number(v)

    @field_validator(*_INT_FIELDS, mode="before")
    @classmethod
    def _coerce_int(cls, v: Any) -> int:
        return int(lenient_number(v))

    @field_validator("use_type", mode="before")
    @classmethod
    def _use_type(cls, v: Any) -> UseType:
        return UseType.parse(v)

    @field_validator("window_type", mode="before")
    @classmethod
    def _window(cls, v: Any) -> WindowType:
        return WindowType.parse(v)

    @field_validator("seismic_era", mode="before")
    @classmethod
    def _seismic(cls, v: Any) -> SeismicEra:
        return SeismicEra.parse(v)

    @field_validator("foundation_condition", mode="before")
    @classmethod
    def _foundation(cls, v: Any) -> FoundationCondition:
        return FoundationCondition.parse(v)

    @field_validator("historic_designation", mode="before")
    @classmethod
    def _historic(cls, v: Any) -> HistoricDesignation:
        return HistoricDesignation.parse(v)

    @field_validator("affordable_strategy", mode="before")
    @classmethod
    def _affordable(cls, v: Any) -> AffordableStrategy:
        return AffordableStrategy.parse(v)

    @field_validator("zoning", mode="before")
    @classmethod
    def _zoning(cls, v: Any) -> Zoning:
        return Zoning.parse(v)

    @field_validator("vacancy_rate", mode="before")
    @classmethod
    def _vacancy(cls, v: Any) -> VacancyBand:
        return VacancyBand.parse(v)

    @field_validator("floorplate_shape", mode="before")
    @classmethod
    def _shape(cls, v: Any) -> FloorplateShape:
        return FloorplateShape.parse(v)

    @field_validator("conversion_scope", mode="before")
    @classmethod
    def _scope(cls, v: Any) -> ConversionScope:
        return ConversionScope.parse(v)

    @field_validator("loading_dock", mode="before")
    @classmethod
    def _dock(cls, v: Any) -> bool | None:
        return lenient_bool(v)

    @field_validator("character_features", mode="before")
    @classmethod
    def _features(cls, v: Any) -> tuple[str, ...]:
        if not v:
            return ()
        if isinstance(v, str):
            v = v.split(",")
        return tuple(str(f).strip() for f in v if str(f).strip())

    @field_validator("corridor_width", "min_window_distance", mode="after")
    @classmethod
    def _layout_default(cls, v: float, info: ValidationInfo) -> float:
        if v > 0:
            return v
        return 6.0 if info.field_name == "corridor_width" else 25.0

    # ------------------------------------------------------------------
    # Derived geometry
    # ------------------------------------------------------------------

    @property
    def submarket(self) -> Submarket:
        return Submarket.parse(self.neighborhood)

    @property
    def in_downtown_program(self) -> bool:
        return self.neighborhood.strip().lower() == "downtown la"

    @property
    def is_partial(self) -> bool:
        return self.conversion_scope is ConversionScope.PARTIAL

    @property
    def conversion_sf(self) -> float:
        if not self.is_partial:
            return self.building_sf
        if self.stories <= 0 or self.stories_to_convert <= 0:
            return self.building_sf
        share = min(self.stories_to_convert, self.stories) / self.stories
        return float(int(self.building_sf * share + 0.5))

    @property
    def retained_sf(self) -> float:
        if not self.is_partial:
            return 0.0
        return max(0.0, self.building_sf - self.conversion_sf)

    @property
    def conversion_stories(self) -> int:
        if self.is_partial and self.stories_to_convert > 0:
            return self.stories_to_convert
        return self.stories


def _pct_or_none(v: Any) -> float | None:
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    return lenient_number(v)


class UnderwritingInputs(BaseModel):
    """
    Deal-level assumptions entered by the analyst (rents, scope choices,
    capital structure). Percentages are in percent points: 5.0 == 5%.

    ``None`` on the rate fields means "use the configured market default";
    the include_* switches default to automatic detection from the profile.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    studio_rent: float = 0.0
    one_br_rent: float = 0.0
    two_br_rent: float = 0.0

    pct_affordable: float = 0.0
    affordable_rent_pct: float = 60.0
    vacancy_pct: float = 5.0
    opex_ratio_pct: float = 40.0
    exit_cap_rate_pct: float = 5.5
    construction_loan_rate_pct: float | None = None
    loan_structure: LoanStructure = LoanStructure.LTC_65
    target_roc_pct: float | None = None

    conversion_type: ConversionType = ConversionType.STANDARD
    quality_level: QualityLevel = QualityLevel.STANDARD
    include_seismic: bool | None = None
    include_windows: bool | None = None
    include_parking_conversion: bool = False
    parking_conversion_units: int | None = None

    @field_validator("include_seismic", "include_windows", mode="before")
    @classmethod
    def _auto_switch(cls, v: Any) -> bool | None:
        return lenient_bool(v)

    @field_validator("include_parking_conversion", mode="before")
    @classmethod
    def _parking_switch(cls, v: Any) -> bool:
        return bool(lenient_bool(v))

    @field_validator(
        "studio_rent",
        "one_br_rent",
        "two_br_rent",
        "pct_affordable",
        mode="before",
    )
    @classmethod
    def _coerce(cls, v: Any) -> float:
        return lenient_number(v)

    @field_validator(
        "affordable_rent_pct",
        "vacancy_pct",
        "opex_ratio_pct",
        "exit_cap_rate_pct",
        mode="before",
    )
    @classmethod
    def _coerce_rate(cls, v: Any, info: ValidationInfo) -> float:
        parsed = _pct_or_none(v)
        if parsed is None:
            return cls.model_fields[info.field_name].default
        return parsed

    @field_validator("construction_loan_rate_pct", "target_roc_pct", mode="before")
    @classmethod
    def _optional_rate(cls, v: Any) -> float | None:
        parsed = _pct_or_none(v)
        if parsed is None or parsed == 0:
            return None
        return parsed

    @field_validator("pct_affordable", mode="after")
    @classmethod
    def _pct_range(cls, v: float) -> float:
        return min(v, 100.0)

    @field_validator("loan_structure", mode="before")
    @classmethod
    def _loan(cls, v: Any) -> LoanStructure:
        return LoanStructure.parse(v)

    @field_validator("conversion_type", mode="before")
    @classmethod
    def _conv(cls, v: Any) -> ConversionType:
        return ConversionType.parse(v)

    @field_validator("quality_level", mode="before")
    @classmethod
    def _quality(cls, v: Any) -> QualityLevel:
        return QualityLevel.parse(v)

    @field_validator("parking_conversion_units", mode="before")
    @classmethod
    def _units(cls, v: Any) -> int | None:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return int(lenient_number(v))
