"""Field-level validation and cleaning for externally sourced values.

Every function here is total: malformed input yields ``None`` instead of
an exception, so ingestion loops can count and skip bad fields without
aborting the stream.
"""

import math
import re
from typing import Optional, Tuple

from macro_pipeline.models import Source, as_source

DEFAULT_VALUE_BOUNDS: Tuple[float, float] = (-1_000_000.0, 1_000_000_000.0)
DEFAULT_YEAR_BOUNDS: Tuple[int, int] = (1960, 2030)

GDP_GROWTH_BOUNDS: Tuple[float, float] = (-50.0, 50.0)
INFLATION_BOUNDS: Tuple[float, float] = (-20.0, 100.0)
TRADE_VOLUME_BOUNDS: Tuple[float, float] = (-100.0, 500.0)

EMPTY_MARKERS = frozenset({"", "..", "nan", "n/a", "na", "--"})

_HAZARD_CHARS = re.compile(r"[<>\"'&]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_INDICATOR_DISALLOWED = re.compile(r"[^A-Z0-9._-]")
_ISO3 = re.compile(r"^[A-Z0-9]{3}$")
_DIGITS = re.compile(r"^[0-9]+$")


def sanitize_text(value, max_len: int = 255) -> Optional[str]:
    """Strip markup/control characters, trim and truncate.

    Returns ``None`` for non-strings and for strings that end up empty.
    """
    if not isinstance(value, str):
        return None
    cleaned = _CONTROL_CHARS.sub("", _HAZARD_CHARS.sub("", value)).strip()
    cleaned = cleaned[:max_len].strip()
    return cleaned or None


def is_empty_marker(value) -> bool:
    """True for missing values and the sources' "no data" tokens."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() in EMPTY_MARKERS
    return False


def validate_numeric_value(
    value, bounds: Tuple[float, float] = DEFAULT_VALUE_BOUNDS
) -> Optional[float]:
    """Parse a float and check it lies within ``bounds`` (inclusive)."""
    if isinstance(value, bool) or is_empty_marker(value):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    low, high = bounds
    if number < low or number > high:
        return None
    return number


def validate_year(value, bounds: Tuple[int, int] = DEFAULT_YEAR_BOUNDS) -> Optional[int]:
    """Parse an integer year and check it lies within ``bounds`` (inclusive)."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        year = int(value)
    elif isinstance(value, int):
        year = value
    elif isinstance(value, str):
        text = value.strip()
        if not _DIGITS.match(text):
            return None
        year = int(text)
    else:
        return None
    low, high = bounds
    if year < low or year > high:
        return None
    return year


def validate_country_code(code, source) -> Optional[str]:
    """Check a country code has the shape its source uses.

    World Bank and OECD use three upper-case alphanumerics (ISO alpha-3
    style); IMF WEO uses a numeric code between 100 and 999.
    """
    if not isinstance(code, str):
        return None
    try:
        source = as_source(source)
    except ValueError:
        return None

    text = code.strip()
    if source == Source.IMF:
        if not _DIGITS.match(text):
            return None
        number = int(text)
        if number < 100 or number > 999:
            return None
        return str(number)

    if not _ISO3.match(text):
        return None
    return text


def validate_indicator_code(code, max_len: int = 50) -> Optional[str]:
    """Restrict an indicator code to ``[A-Z0-9._-]`` and truncate."""
    if not isinstance(code, str):
        return None
    cleaned = _INDICATOR_DISALLOWED.sub("", code.strip())[:max_len]
    return cleaned or None


def indicator_family(code: Optional[str]) -> Optional[str]:
    """Classify an indicator code into a family with known plausible bounds.

    Returns ``"gdp_growth"``, ``"inflation"``, ``"trade_volume"`` or ``None``.
    """
    if not code:
        return None
    code = code.upper()
    if "INFLATION" in code:
        return "inflation"
    if code.startswith("FP.CPI") and code.endswith(".ZG"):
        return "inflation"
    if code.startswith("PCPI") and code.endswith("PCH"):
        return "inflation"
    if "GDP" in code and code.endswith(".ZG"):
        return "gdp_growth"
    if code.startswith("NGDP") and code.endswith("_RPCH"):
        return "gdp_growth"
    if code in ("TM_RPCH", "TX_RPCH", "TMG_RPCH", "TXG_RPCH"):
        return "trade_volume"
    return None


FAMILY_BOUNDS = {
    "gdp_growth": GDP_GROWTH_BOUNDS,
    "inflation": INFLATION_BOUNDS,
    "trade_volume": TRADE_VOLUME_BOUNDS,
}


def bounds_for_indicator(code: Optional[str]) -> Tuple[float, float]:
    """Value bounds for an indicator: family-specific when recognized."""
    return FAMILY_BOUNDS.get(indicator_family(code), DEFAULT_VALUE_BOUNDS)
