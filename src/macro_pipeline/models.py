"""Shared record types for the macro indicator pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Source(str, Enum):
    """Statistical agencies the pipeline reconciles."""
    WB = "WB"
    OECD = "OECD"
    IMF = "IMF"


# Observation table per source
OBSERVATION_TABLES = {
    Source.WB: "indicators",
    Source.OECD: "oecd_indicators",
    Source.IMF: "imf_indicators",
}

# Column in the mapping tables holding each source's native code
SOURCE_CODE_COLUMNS = {
    Source.WB: "wb_code",
    Source.OECD: "oecd_code",
    Source.IMF: "imf_code",
}


def as_source(value) -> Source:
    """Coerce ``'wb'``, ``'WB'`` or ``Source.WB`` to a Source member."""
    if isinstance(value, Source):
        return value
    return Source(str(value).upper())


@dataclass(frozen=True)
class CountryInfo:
    """Unified identity of a source-native country code."""

    name: str
    unified_code: str


@dataclass
class Observation:
    """One (country, indicator, year) data point from a single source."""

    country_code: str
    country_name: Optional[str]
    indicator_code: str
    indicator_name: Optional[str]
    year: int
    value: float
    industry: str
    source: Source
    data_quality_score: int
    units: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def key(self):
        """Natural key of the observation tables."""
        return (self.country_code, self.indicator_code, self.year, self.source.value)
