from dataclasses import asdict, dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple

# Canonical parameter order. Matrix axes and 1-D variable params follow it.
PARAMS: Tuple[str, ...] = ("ev", "av", "tv", "iso")


class UnknownParameterError(ValueError):
    """Raised when a parameter name is not one of ev, av, tv, iso."""

    def __init__(self, param: str):
        super().__init__(f"Unknown exposure parameter: {param!r}")
        self.param = param


def check_param(param: str) -> str:
    if param not in PARAMS:
        raise UnknownParameterError(param)
    return param


def other_params(excluded: Iterable[str]) -> List[str]:
    """Parameters not in `excluded`, in canonical order."""
    excluded = set(excluded)
    return [p for p in PARAMS if p not in excluded]


@dataclass(frozen=True)
class ExposureValues:
    """
    One exposure setting in log-scale stops.

    The identity ev = av + tv - iso is not enforced here; it is restored on
    demand by recomputing a single field from the other three.
    """

    ev: float = 0.0
    av: float = 0.0
    tv: float = 0.0
    iso: float = 0.0

    def __getitem__(self, param: str) -> float:
        return getattr(self, check_param(param))

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)

    def known(self, excluding: Optional[str] = None) -> Dict[str, float]:
        values = self.as_dict()
        if excluding is not None:
            values.pop(check_param(excluding))
        return values

    def with_value(self, param: str, value: float) -> "ExposureValues":
        return replace(self, **{check_param(param): float(value)})


@dataclass(frozen=True)
class ParamRange:
    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class RangeConfig:
    """Per-parameter bounds. min <= max is the caller's responsibility."""

    ev: ParamRange = field(default_factory=lambda: ParamRange(-6, 16))
    av: ParamRange = field(default_factory=lambda: ParamRange(0, 9))
    tv: ParamRange = field(default_factory=lambda: ParamRange(-3, 13))
    iso: ParamRange = field(default_factory=lambda: ParamRange(0, 10))

    def __getitem__(self, param: str) -> ParamRange:
        return getattr(self, check_param(param))

    def with_range(self, param: str, min_value: float, max_value: float) -> "RangeConfig":
        return replace(self, **{check_param(param): ParamRange(min_value, max_value)})


@dataclass
class OneDTable:
    variable_params: Tuple[str, str]
    combinations: List[ExposureValues] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.combinations)


@dataclass
class MatrixTable:
    fixed_param: str
    output_param: str
    row_param: str
    col_param: str
    row_values: List[float] = field(default_factory=list)
    col_values: List[float] = field(default_factory=list)
    # None marks a cell with no valid output.
    cells: List[List[Optional[float]]] = field(default_factory=list)

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self.row_values), len(self.col_values)
