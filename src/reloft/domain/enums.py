# src/reloft/domain/enums.py
"""
Closed vocabularies for every classification the pipeline branches on.

Intake sends free text ("Office-Mid Rise", "Partial ≥11%", "Koreatown").
Each enum's ``parse`` resolves that text exactly once, at validation time,
so scoring code only ever compares enum members.
"""
from __future__ import annotations

from enum import Enum
from typing import Any


def _norm(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    return str(value).strip().lower()


class _Parseable(str, Enum):
    @classmethod
    def parse(cls, value: Any):
        if isinstance(value, cls):
            return value
        text = _norm(value)
        for member in cls:
            if text == member.value.lower():
                return member
        return cls._resolve(text)

    @classmethod
    def _resolve(cls, text: str):
        return cls("Unknown")


class UseType(_Parseable):
    OFFICE = "Office"
    HOTEL = "Hotel"
    INDUSTRIAL = "Industrial"
    RETAIL = "Retail"
    PARKING = "Parking Structure"
    OTHER = "Other"
    UNKNOWN = "Unknown"

    @classmethod
    def _resolve(cls, text: str) -> "UseType":
        if not text or text == "unknown":
            return cls.UNKNOWN
        # first keyword wins: "Office/Retail" is an office
        if "office" in text:
            return cls.OFFICE
        if "hotel" in text or "motel" in text:
            return cls.HOTEL
        if "warehouse" in text or "industrial" in text:
            return cls.INDUSTRIAL
        if "retail" in text or "shopping" in text or "commercial" in text:
            return cls.RETAIL
        if "parking" in text:
            return cls.PARKING
        return cls.OTHER


class BuildingClass(str, Enum):
    OFFICE_LOW_RISE = "Office Low Rise"
    OFFICE_MID_RISE = "Office Mid Rise"
    OFFICE_HIGH_RISE = "Office High Rise"
    WAREHOUSE_INDUSTRIAL = "Warehouse/Industrial"
    HOTEL_MOTEL = "Hotel/Motel"
    RETAIL_COMMERCIAL = "Retail/Commercial"
    PARKING_STRUCTURE = "Parking Structure"

    @classmethod
    def classify(cls, use_type: UseType, stories: int) -> "BuildingClass":
        if use_type is UseType.UNKNOWN:
            return cls.OFFICE_MID_RISE
        if use_type is UseType.INDUSTRIAL:
            return cls.WAREHOUSE_INDUSTRIAL
        if use_type is UseType.HOTEL:
            return cls.HOTEL_MOTEL
        if use_type is UseType.RETAIL:
            return cls.RETAIL_COMMERCIAL
        if use_type is UseType.PARKING:
            return cls.PARKING_STRUCTURE
        # office (or unlisted) by story count
        s = stories or 5
        if s <= 4:
            return cls.OFFICE_LOW_RISE
        if s <= 12:
            return cls.OFFICE_MID_RISE
        return cls.OFFICE_HIGH_RISE


class VacancyBand(_Parseable):
    LOW = "0-10%"
    MODERATE = "11-30%"
    MATERIAL = "31-50%"
    SIGNIFICANT = "51-75%"
    SEVERE = "76-100%"
    UNKNOWN = "Unknown"

    @classmethod
    def _resolve(cls, text: str) -> "VacancyBand":
        compact = text.replace(" ", "").replace("–", "-")
        for member in cls:
            if compact == member.value.lower():
                return member
        return cls.UNKNOWN


class FloorplateShape(_Parseable):
    NARROW = "Narrow/Efficient"
    MEDIUM = "Medium"
    DEEP = "Deep/Challenging"
    UNKNOWN = "Unknown"

    @classmethod
    def _resolve(cls, text: str) -> "FloorplateShape":
        if "narrow" in text:
            return cls.NARROW
        if "medium" in text:
            return cls.MEDIUM
        if "deep" in text:
            return cls.DEEP
        return cls.UNKNOWN


class HistoricDesignation(_Parseable):
    NONE = "None"
    NATIONAL_REGISTER = "National Register"
    CALIFORNIA_REGISTER = "California Register"
    LOCAL = "Local (HCM)"
    ELIGIBLE = "Eligible"
    UNKNOWN = "Unknown"

    @classmethod
    def _resolve(cls, text: str) -> "HistoricDesignation":
        if not text or text == "none":
            return cls.NONE
        if text == "unknown":
            return cls.UNKNOWN
        if "national" in text:
            return cls.NATIONAL_REGISTER
        if "california" in text or "state" in text:
            return cls.CALIFORNIA_REGISTER
        if "eligible" in text:
            return cls.ELIGIBLE
        return cls.LOCAL

    @property
    def is_designated(self) -> bool:
        return self not in (HistoricDesignation.NONE, HistoricDesignation.UNKNOWN)


class AffordableStrategy(_Parseable):
    MARKET_RATE = "None-market rate only"
    PARTIAL_11 = "Partial ≥11%"
    PARTIAL_25 = "Partial ≥25%"
    FULL = "100% Affordable"
    UNKNOWN = "Unknown"

    @classmethod
    def _resolve(cls, text: str) -> "AffordableStrategy":
        if text == "unknown":
            return cls.UNKNOWN
        if "100%" in text:
            return cls.FULL
        if "25%" in text:
            return cls.PARTIAL_25
        if "11%" in text:
            return cls.PARTIAL_11
        return cls.MARKET_RATE

    @property
    def has_affordable(self) -> bool:
        return self not in (AffordableStrategy.MARKET_RATE, AffordableStrategy.UNKNOWN)


class Zoning(_Parseable):
    C2 = "C2"
    C4 = "C4"
    CM = "CM"
    PARKING = "P – Parking"
    M1 = "M1"
    M2 = "M2"
    OTHER = "Other"
    UNKNOWN = "Unknown"

    @classmethod
    def _resolve(cls, text: str) -> "Zoning":
        if not text or text == "unknown":
            return cls.UNKNOWN
        if text.startswith("p ") or text.startswith("p-") or text.startswith("p –") or text == "p":
            return cls.PARKING
        return cls.OTHER

    @property
    def is_commercial(self) -> bool:
        return self in (Zoning.C2, Zoning.C4, Zoning.CM)

    @property
    def is_industrial(self) -> bool:
        return self in (Zoning.M1, Zoning.M2)


class WindowType(_Parseable):
    OPERABLE = "Operable"
    RIBBON = "Ribbon"
    FIXED = "Fixed"
    SEALED = "Sealed"
    UNKNOWN = "Unknown"

    @classmethod
    def _resolve(cls, text: str) -> "WindowType":
        if "operable" in text:
            return cls.OPERABLE
        if "ribbon" in text:
            return cls.RIBBON
        if "fixed" in text:
            return cls.FIXED
        if "sealed" in text or "curtain" in text:
            return cls.SEALED
        return cls.UNKNOWN


class SeismicEra(_Parseable):
    PRE_1980 = "Pre-1980"
    ERA_1980_1994 = "1980-1994"
    POST_1994 = "Post-1994"
    UNKNOWN = "Unknown"

    @classmethod
    def _resolve(cls, text: str) -> "SeismicEra":
        if "pre-1980" in text or "pre 1980" in text:
            return cls.PRE_1980
        if "1980-1994" in text or "1980–1994" in text:
            return cls.ERA_1980_1994
        if "post-1994" in text or "post 1994" in text or "retrofit" in text:
            return cls.POST_1994
        return cls.UNKNOWN

    @property
    def needs_retrofit(self) -> bool:
        return self in (SeismicEra.PRE_1980, SeismicEra.ERA_1980_1994)


class FoundationCondition(_Parseable):
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    UNKNOWN = "Unknown"


class Submarket(str, Enum):
    PRIME_URBAN = "prime_urban"
    ESTABLISHED = "established"
    GROWING_URBAN = "growing_urban"
    SUBURBAN = "suburban"
    IDENTIFIED = "identified"
    UNSPECIFIED = "unspecified"

    @classmethod
    def parse(cls, neighborhood: Any) -> "Submarket":
        nb = _norm(neighborhood)
        if any(k in nb for k in ("downtown", "arts district", "culver", "santa monica")):
            return cls.PRIME_URBAN
        if any(k in nb for k in ("hollywood", "koreatown", "wilshire", "west la", "brentwood", "century")):
            return cls.ESTABLISHED
        if any(k in nb for k in ("sherman", "burbank", "glendale", "pasadena", "el segundo", "playa")):
            return cls.SUBURBAN
        if "long beach" in nb:
            return cls.GROWING_URBAN
        if nb and nb != "other la":
            return cls.IDENTIFIED
        return cls.UNSPECIFIED


class ConversionType(_Parseable):
    STANDARD = "Standard"
    HISTORIC = "Historic"
    AFFORDABLE = "Affordable"
    MIXED = "Mixed"
    CREATIVE = "Creative"

    @classmethod
    def _resolve(cls, text: str) -> "ConversionType":
        for member in cls:
            if member.value.lower() in text:
                return member
        return cls.STANDARD


class QualityLevel(_Parseable):
    STANDARD = "Standard"
    PREMIUM = "Premium"
    LUXURY = "Luxury"

    @classmethod
    def _resolve(cls, text: str) -> "QualityLevel":
        return cls.STANDARD


class LoanStructure(_Parseable):
    LTC_65 = "65% LTC"
    LTC_70 = "70% LTC"
    HUD_221D4 = "HUD 221d4"
    BRIDGE = "Bridge"

    @classmethod
    def _resolve(cls, text: str) -> "LoanStructure":
        if "70" in text:
            return cls.LTC_70
        if "hud" in text or "221" in text:
            return cls.HUD_221D4
        if "bridge" in text:
            return cls.BRIDGE
        return cls.LTC_65


class ConversionScope(_Parseable):
    FULL = "full"
    PARTIAL = "partial"

    @classmethod
    def _resolve(cls, text: str) -> "ConversionScope":
        return cls.PARTIAL if "partial" in text else cls.FULL
