import math
from typing import Dict, Iterable, List, Mapping, Optional

from exposure_config import DEFAULT_FALLBACKS
from exposure_types import ExposureValues, RangeConfig, check_param, other_params
from logging_config import get_logger

logger = get_logger(__name__)

# Inputs each target needs: ev = av + tv - iso, rearranged.
_REQUIRED_INPUTS = {
    "ev": ("av", "tv", "iso"),
    "av": ("ev", "tv", "iso"),
    "tv": ("ev", "av", "iso"),
    "iso": ("ev", "av", "tv"),
}

# (minimum EV, scene, illuminance) from brightest to darkest
EV_REFERENCE = [
    (16, "Midsummer beach", "164kLux"),
    (15, "Clear sky", "81.9kLux"),
    (14, "Sunny", "41.0kLux"),
    (13, "Hazy sun", "20.5kLux"),
    (12, "Overcast", "10.2kLux"),
    (11, "Rain clouds", "5.12kLux"),
    (10, "Shop display", "2.56kLux"),
    (9, "Bright room", "1.28kLux"),
    (8, "Elevator", "640Lux"),
    (7, "Gymnasium", "320Lux"),
    (6, "Hallway", "160Lux"),
    (5, "Break room", "80Lux"),
    (4, "Dim interior", "40Lux"),
    (3, "Auditorium", "20Lux"),
    (2, "Cinema", "10Lux"),
    (1, "After sunset", "5Lux"),
    (0, "Twilight", "2.5Lux"),
    (-1, "Indoors at night", "1.25Lux"),
    (-2, "Moonlight", "0.63Lux"),
    (-3, "Hazy moonlight", "0.31Lux"),
    (-4, "Starlight", "0.16Lux"),
]


class InsufficientInputsError(ValueError):
    """The solver was not given every input the target needs."""

    def __init__(self, target: str, missing: Iterable[str]):
        self.target = target
        self.missing = tuple(missing)
        super().__init__(
            f"Cannot calculate {target} with provided values (missing: {', '.join(self.missing)})"
        )


def round_half_up(value: float) -> int:
    """Round .5 towards +inf, the way camera displays round."""
    return math.floor(value + 0.5)


# --- Unit conversion ---

def av_to_f_number(av: float) -> float:
    """Convert aperture value (stops) to f-number."""
    return 2 ** (av / 2)


def f_number_to_av(f_number: float) -> float:
    """Convert f-number to aperture value."""
    return 2 * math.log2(f_number)


def tv_to_shutter_speed(tv: float) -> float:
    """Convert time value to shutter speed in seconds."""
    return 2 ** (-tv)


def shutter_speed_to_tv(shutter_speed: float) -> float:
    """Convert shutter speed in seconds to time value."""
    return math.log2(1 / shutter_speed)


def iso_to_sensitivity(iso: float) -> float:
    """Convert ISO stops (0 = ISO 100) to the ISO rating."""
    return 100 * 2 ** iso


def sensitivity_to_iso(sensitivity: float) -> float:
    """Convert an ISO rating to ISO stops."""
    return math.log2(sensitivity / 100)


def ev_to_lux(ev: float) -> float:
    """Approximate scene illuminance for an EV at ISO 100."""
    return 2.5 * 2 ** ev


def format_lux(lux: float) -> str:
    if lux >= 1000:
        return f"{lux / 1000:.1f}kLux"
    return f"{lux:.1f}Lux"


def get_ev_description(ev: float) -> str:
    """Describe the scene brightness an EV corresponds to."""
    for threshold, label, lux in EV_REFERENCE:
        if ev >= threshold:
            return f"{label} ({lux})"
    return "Extremely dark"


# --- Strict formatting (exact values, no snapping) ---

def format_f_number(av: float) -> str:
    return f"f/{av_to_f_number(av):.1f}"


def format_shutter_speed(tv: float) -> str:
    speed = tv_to_shutter_speed(tv)
    if speed >= 1:
        return f"{speed:.1f}s"
    return f"1/{round_half_up(1 / speed)}"


def format_iso(iso: float) -> str:
    return f"ISO {round_half_up(iso_to_sensitivity(iso))}"


# --- Solver ---

def calculate_missing_value(known: Mapping[str, Optional[float]], target: str) -> float:
    """
    Solve ev = av + tv - iso for `target`.

    `known` maps parameter names to values; absent keys and None count as
    unknown. Raises InsufficientInputsError when an input the target needs
    is unknown. Sweep loops rely on that to skip infeasible candidates.
    """
    check_param(target)
    missing = [p for p in _REQUIRED_INPUTS[target] if known.get(p) is None]
    if missing:
        raise InsufficientInputsError(target, missing)

    ev, av, tv, iso = (known.get(p) for p in ("ev", "av", "tv", "iso"))
    if target == "ev":
        return av + tv - iso
    if target == "av":
        return ev - tv + iso
    if target == "tv":
        return ev - av + iso
    return av + tv - ev


def derive_from_fixed(
    values: ExposureValues,
    fixed: Iterable[str],
    fallbacks: Mapping[str, float] = DEFAULT_FALLBACKS,
) -> ExposureValues:
    """
    Complete a setting from two fixed params.

    The first free param listed in `fallbacks` is pinned to its fallback
    value and the remaining free param is solved from the other three.
    """
    fixed = [check_param(p) for p in fixed]
    free = other_params(fixed)
    if len(free) != 2:
        raise ValueError(f"Expected two distinct fixed params, got {fixed}")

    pinned = next((p for p in fallbacks if p in free), None)
    if pinned is None:
        raise InsufficientInputsError(free[0], free)
    solved = free[1] if pinned == free[0] else free[0]

    known: Dict[str, float] = {p: values[p] for p in fixed}
    known[pinned] = float(fallbacks[pinned])
    known[solved] = calculate_missing_value(known, solved)
    return ExposureValues(**known)


# --- Step sequences ---

def effective_step(step_size: float) -> float:
    """Snap near-canonical step sizes to exactly 1, 1/2 or 1/3."""
    for canonical in (1.0, 0.5, 1 / 3):
        if math.isclose(step_size, canonical, rel_tol=1e-6):
            return canonical
    return step_size


def round_to_step(value: float, step: float) -> float:
    if step == 1 / 3:
        return round_half_up(value * 3) / 3
    if step == 0.5:
        return round_half_up(value * 2) / 2
    return float(round_half_up(value))


def generate_steps(min_value: float, max_value: float, step_size: float) -> List[float]:
    """
    Ascending values from min_value to max_value at the given stop granularity.

    Each entry is computed from its index rather than by accumulation, then
    rounded to the precision of the step.
    """
    if step_size <= 0:
        raise ValueError(f"step_size must be positive, got {step_size}")
    if max_value < min_value:
        return []

    step = effective_step(step_size)
    # Small epsilon so an exact multiple landing on max_value is kept
    count = math.floor((max_value - min_value) / step + 1e-9) + 1
    return [round_to_step(min_value + i * step, step) for i in range(count)]


# --- Range checks ---

def is_value_in_range(param: str, value: float, ranges: RangeConfig) -> bool:
    return ranges[param].contains(value)


def get_range_warning(param: str, value: float, ranges: RangeConfig) -> str:
    """Human-readable message for an out-of-range value, or '' when in range."""
    bounds = ranges[param]
    if value < bounds.min:
        return f"Value is below the minimum ({bounds.min:g})"
    if value > bounds.max:
        return f"Value is above the maximum ({bounds.max:g})"
    return ""


def clamp_to_range(param: str, value: float, ranges: RangeConfig) -> float:
    bounds = ranges[param]
    return max(bounds.min, min(bounds.max, value))


# --- Step adjustment ---

def is_step_allowed(param: str, current: float, step: float, ranges: RangeConfig) -> bool:
    """
    Whether `current + step` is a valid move.

    Half steps are refused from third-stop positions and third steps from
    half-stop positions, so the two scales never mix.
    """
    if not is_value_in_range(param, current + step, ranges):
        return False

    remainder = abs(math.fmod(current, 1))
    on_third = abs(remainder - 1 / 3) < 0.01 or abs(remainder - 2 / 3) < 0.01
    on_half = abs(remainder - 0.5) < 0.01

    if on_third and math.isclose(abs(step), 0.5):
        return False
    if on_half and math.isclose(abs(step), 1 / 3):
        return False
    return True


def adjust_value(
    values: ExposureValues,
    param: str,
    step: float,
    ranges: RangeConfig,
    target: Optional[str] = None,
) -> ExposureValues:
    """
    Move `param` by `step` stops, then re-solve `target` if one is given.

    A move that would leave the configured range returns `values` unchanged.
    """
    new_value = values[param] + step
    if not is_value_in_range(param, new_value, ranges):
        logger.debug("Step %+.3f on %s rejected: %.3f out of range", step, param, new_value)
        return values

    updated = values.with_value(param, new_value)
    if target is None or target == param:
        return updated

    result = calculate_missing_value(updated.known(excluding=target), target)
    return updated.with_value(target, result)
