from typing import Callable, Dict, List, Optional

from exposure_logic import (
    InsufficientInputsError,
    calculate_missing_value,
    generate_steps,
    is_value_in_range,
)
from exposure_types import (
    PARAMS,
    ExposureValues,
    MatrixTable,
    OneDTable,
    RangeConfig,
    check_param,
    other_params,
)
from logging_config import get_logger

logger = get_logger(__name__)

# Two rows closer than this on every field are the same row
DUPLICATE_TOLERANCE = 0.01

CellHook = Callable[[float, float, Optional[float]], None]


def _sweep(
    fixed: Dict[str, float],
    swept: str,
    solved: str,
    ranges: RangeConfig,
    step_size: float,
) -> List[ExposureValues]:
    """Step `swept` across its range and solve `solved` for each candidate."""
    rows = []
    for candidate in generate_steps(ranges[swept].min, ranges[swept].max, step_size):
        # Rounded steps can land outside a fractional bound
        if not is_value_in_range(swept, candidate, ranges):
            continue
        known = dict(fixed)
        known[swept] = candidate
        try:
            known[solved] = calculate_missing_value(known, solved)
        except InsufficientInputsError:
            continue
        if not is_value_in_range(solved, known[solved], ranges):
            continue
        rows.append(ExposureValues(**known))
    return rows


def _is_duplicate(row: ExposureValues, kept: List[ExposureValues]) -> bool:
    return any(
        all(abs(row[p] - other[p]) < DUPLICATE_TOLERANCE for p in PARAMS)
        for other in kept
    )


def deduplicate(rows: List[ExposureValues]) -> List[ExposureValues]:
    """Drop rows matching an earlier kept row on all four fields. Order preserving."""
    kept: List[ExposureValues] = []
    for row in rows:
        if not _is_duplicate(row, kept):
            kept.append(row)
    return kept


def generate_1d_table(
    param1: str,
    param2: str,
    values: ExposureValues,
    ranges: RangeConfig,
    step_size: float,
) -> OneDTable:
    """
    List every (var1, var2) pair consistent with the two fixed params.

    Each variable param is swept in turn with the other solved; the two
    lists are merged, de-duplicated and sorted by the first variable param.
    """
    check_param(param1)
    check_param(param2)
    if param1 == param2:
        raise ValueError(f"1-D table needs two different fixed params, got {param1!r} twice")

    var1, var2 = other_params((param1, param2))
    fixed = {param1: values[param1], param2: values[param2]}

    merged = _sweep(fixed, var1, var2, ranges, step_size) + _sweep(fixed, var2, var1, ranges, step_size)
    combinations = deduplicate(merged)
    combinations.sort(key=lambda row: row[var1])

    logger.debug(
        "1-D table fixed=%s,%s: %d candidates, %d unique rows",
        param1,
        param2,
        len(merged),
        len(combinations),
    )
    return OneDTable(variable_params=(var1, var2), combinations=combinations)


def generate_matrix_table(
    fixed_param: str,
    output_param: str,
    values: ExposureValues,
    ranges: RangeConfig,
    step_size: float,
    on_cell: Optional[CellHook] = None,
) -> MatrixTable:
    """
    Grid the two remaining params and solve `output_param` in every cell.

    Row and column axes are the leftover params in canonical order. A cell
    is None when the output cannot be solved or falls outside its range.
    `on_cell(row_value, col_value, result)` is called for every cell.
    """
    check_param(fixed_param)
    check_param(output_param)
    if fixed_param == output_param:
        raise ValueError(f"Fixed and output param must differ, got {fixed_param!r}")

    row_param, col_param = other_params((fixed_param, output_param))
    row_values = generate_steps(ranges[row_param].min, ranges[row_param].max, step_size)
    col_values = generate_steps(ranges[col_param].min, ranges[col_param].max, step_size)
    fixed_value = values[fixed_param]

    cells: List[List[Optional[float]]] = []
    filled = 0
    for row_value in row_values:
        row: List[Optional[float]] = []
        for col_value in col_values:
            known = {fixed_param: fixed_value, row_param: row_value, col_param: col_value}
            try:
                result: Optional[float] = calculate_missing_value(known, output_param)
            except InsufficientInputsError:
                result = None
            if result is not None and not is_value_in_range(output_param, result, ranges):
                result = None
            if result is not None:
                filled += 1
            if on_cell is not None:
                on_cell(row_value, col_value, result)
            row.append(result)
        cells.append(row)

    logger.debug(
        "Matrix %s=%.3f -> %s: %d x %d (%s x %s), %d valid cells",
        fixed_param,
        fixed_value,
        output_param,
        len(row_values),
        len(col_values),
        row_param,
        col_param,
        filled,
    )
    return MatrixTable(
        fixed_param=fixed_param,
        output_param=output_param,
        row_param=row_param,
        col_param=col_param,
        row_values=row_values,
        col_values=col_values,
        cells=cells,
    )
