import os
from exposure_types import ExposureValues, ParamRange, RangeConfig

APP_INFO = {
    "name": "ExpoCalc",
    "version": "1.0.1",
    "author": "nobuoJT",
}

# Log level name, e.g. DEBUG to trace table generation
LOG_LEVEL = os.getenv("EXPOCALC_LOG_LEVEL", "INFO").upper()

# Starting point for every new session: f/5.6, 1/128s, ISO 100 -> EV 12
DEFAULT_VALUES = ExposureValues(ev=12, av=5, tv=7, iso=0)

DEFAULT_RANGES = RangeConfig(
    ev=ParamRange(-6, 16),
    av=ParamRange(0, 9),
    tv=ParamRange(-3, 13),
    iso=ParamRange(0, 10),
)

STEP_SIZES = {
    "1 stop": 1.0,
    "1/2 stop": 1 / 2,
    "1/3 stop": 1 / 3,
}
DEFAULT_STEP_SIZE = 1.0

# Reference values used when two fixed params leave two free ones.
# Order matters: the first free param listed is pinned, the other solved.
DEFAULT_FALLBACKS = {
    "iso": 0.0,
    "av": 5.0,
    "tv": 7.0,
    "ev": 12.0,
}

# Display-layer truncation for 1-D tables
MAX_DISPLAY_ROWS = 50

PARAM_LABELS = {
    "ev": "EV (exposure value)",
    "av": "AV (aperture)",
    "tv": "TV (shutter speed)",
    "iso": "ISO (sensitivity)",
}

INPUT_PLACEHOLDERS = {
    "ev": "EV",
    "av": "f/2.8",
    "tv": "1/125",
    "iso": "ISO400",
}
