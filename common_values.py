import math
import re
from typing import Optional, Sequence

from exposure_logic import (
    av_to_f_number,
    f_number_to_av,
    iso_to_sensitivity,
    round_half_up,
    sensitivity_to_iso,
    shutter_speed_to_tv,
    tv_to_shutter_speed,
)
from exposure_types import check_param

# Nearest lookups keep the first entry on ties, so table order matters.
COMMON_F_NUMBERS = (
    1.0, 1.1, 1.2, 1.4, 1.6, 1.8, 2.0, 2.2, 2.5, 2.8, 3.2, 3.5, 4.0, 4.5, 5.0, 5.6,
    6.3, 7.1, 8.0, 9.0, 10, 11, 13, 14, 16, 18, 20, 22, 25, 28, 32,
)

# Seconds. Long exposures first, then fractions of a second.
COMMON_SHUTTER_SPEEDS = (
    180, 120, 90, 60, 50, 40, 30, 25, 20, 15, 13, 10, 8, 6, 5, 4, 3, 2.5, 2, 1.6, 1.3, 1,
    1 / 1.3, 1 / 1.6, 1 / 2, 1 / 2.5, 1 / 3, 1 / 4, 1 / 5, 1 / 6, 1 / 8, 1 / 10, 1 / 13,
    1 / 15, 1 / 20, 1 / 25, 1 / 30, 1 / 40, 1 / 50, 1 / 60, 1 / 80, 1 / 100, 1 / 125,
    1 / 160, 1 / 200, 1 / 250, 1 / 320, 1 / 400, 1 / 500, 1 / 640, 1 / 800, 1 / 1000,
    1 / 1250, 1 / 1600, 1 / 2000, 1 / 2500, 1 / 3200, 1 / 4000, 1 / 5000, 1 / 6400,
    1 / 8000, 1 / 10000, 1 / 12800,
)

COMMON_ISO_VALUES = (
    50, 64, 80, 100, 125, 160, 200, 250, 320, 400, 500, 640, 800, 1000, 1250, 1600,
    2000, 2500, 3200, 4000, 5000, 6400, 8000, 10000, 12800, 16000, 20000, 25600,
    32000, 40000, 51200, 64000, 80000, 102400, 128000, 160000, 200000, 256000,
    320000, 400000, 512000,
)

ISO_RELATIVE_TOLERANCE = 0.05

_NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_F_PREFIX = re.compile(r"^f/?", re.IGNORECASE)
_S_SUFFIX = re.compile(r"s$", re.IGNORECASE)
_ISO_PREFIX = re.compile(r"^iso\s*", re.IGNORECASE)


def _nearest(table: Sequence[float], target: float) -> float:
    # min() keeps the first minimal entry
    return min(table, key=lambda entry: abs(entry - target))


def _format_number(value: float) -> str:
    return f"{value:g}"


def parse_number(text: str) -> Optional[float]:
    """Leading-number parse: "2.8mm" gives 2.8, "abc" and "1e999" give None."""
    match = _NUMBER_PREFIX.match(text)
    if not match:
        return None
    value = float(match.group(1))
    if not math.isfinite(value):
        return None
    return value


def get_nearest_common_f_number(av: float) -> float:
    return _nearest(COMMON_F_NUMBERS, av_to_f_number(av))


def get_nearest_common_shutter_speed(tv: float) -> float:
    return _nearest(COMMON_SHUTTER_SPEEDS, tv_to_shutter_speed(tv))


def get_nearest_common_iso(iso: float) -> float:
    return _nearest(COMMON_ISO_VALUES, iso_to_sensitivity(iso))


def format_common_f_number(av: float) -> str:
    return f"f/{_format_number(get_nearest_common_f_number(av))}"


def format_common_shutter_speed(tv: float) -> str:
    speed = get_nearest_common_shutter_speed(tv)
    if speed >= 1:
        return f"{_format_number(speed)}s"
    return f"1/{round_half_up(1 / speed)}"


def format_common_iso(iso: float) -> str:
    return f"ISO {_format_number(get_nearest_common_iso(iso))}"


def is_near_common_value(param: str, value: float, threshold: float = 0.1) -> bool:
    """
    Whether a value sits close to something a camera would show.

    Aperture and shutter compare in physical units against `threshold`;
    ISO uses 5% of the nearest rating. EV has no common table and always
    passes.
    """
    check_param(param)
    if param == "av":
        return abs(av_to_f_number(value) - get_nearest_common_f_number(value)) < threshold
    if param == "tv":
        return abs(tv_to_shutter_speed(value) - get_nearest_common_shutter_speed(value)) < threshold
    if param == "iso":
        nearest = get_nearest_common_iso(value)
        return abs(iso_to_sensitivity(value) - nearest) < nearest * ISO_RELATIVE_TOLERANCE
    return True


def parse_common_f_number(text: str) -> Optional[float]:
    """'f/2.8', 'F2.8' or '2.8' -> AV. None if unparseable."""
    f_number = parse_number(_F_PREFIX.sub("", text.strip(), count=1))
    if f_number is None or f_number <= 0:
        return None
    return f_number_to_av(f_number)


def parse_common_shutter_speed(text: str) -> Optional[float]:
    """'1/125', '2s', '0.5' -> TV. None if unparseable."""
    cleaned = _S_SUFFIX.sub("", text.strip(), count=1)

    if "/" in cleaned:
        parts = cleaned.split("/")
        if len(parts) != 2:
            return None
        numerator = parse_number(parts[0])
        denominator = parse_number(parts[1])
        if numerator is None or denominator is None or denominator == 0:
            return None
        speed = numerator / denominator
    else:
        speed = parse_number(cleaned)
        if speed is None:
            return None

    # Quotients and subnormals can still overflow once inverted
    if speed <= 0 or not math.isfinite(speed) or not math.isfinite(1 / speed):
        return None
    return shutter_speed_to_tv(speed)


def parse_common_iso(text: str) -> Optional[float]:
    """'ISO 400', 'iso400' or '400' -> ISO stops. None if unparseable."""
    sensitivity = parse_number(_ISO_PREFIX.sub("", text.strip(), count=1))
    if sensitivity is None or sensitivity <= 0:
        return None
    return sensitivity_to_iso(sensitivity)


def parse_common_value(param: str, text: str) -> Optional[float]:
    check_param(param)
    if param == "av":
        return parse_common_f_number(text)
    if param == "tv":
        return parse_common_shutter_speed(text)
    if param == "iso":
        return parse_common_iso(text)
    return parse_number(text)
