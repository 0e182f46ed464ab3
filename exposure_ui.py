from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
import streamlit as st

from common_values import (
    format_common_f_number,
    format_common_iso,
    format_common_shutter_speed,
    is_near_common_value,
    parse_common_f_number,
    parse_common_iso,
    parse_common_shutter_speed,
    parse_number,
)
from exposure_config import (
    APP_INFO,
    DEFAULT_FALLBACKS,
    DEFAULT_RANGES,
    DEFAULT_STEP_SIZE,
    DEFAULT_VALUES,
    INPUT_PLACEHOLDERS,
    MAX_DISPLAY_ROWS,
    PARAM_LABELS,
    STEP_SIZES,
)
from exposure_logic import (
    EV_REFERENCE,
    adjust_value,
    calculate_missing_value,
    derive_from_fixed,
    ev_to_lux,
    format_f_number,
    format_iso,
    format_lux,
    format_shutter_speed,
    get_ev_description,
    get_range_warning,
    is_step_allowed,
    is_value_in_range,
    round_half_up,
)
from exposure_tables import generate_1d_table, generate_matrix_table
from exposure_types import PARAMS, ExposureValues, MatrixTable, OneDTable, ParamRange, RangeConfig
from logging_config import get_logger

logger = get_logger(__name__)

FORMAT_WARNINGS = {
    "av": "Aperture format not recognised (e.g. f/2.8)",
    "tv": "Shutter speed format not recognised (e.g. 1/125, 2s)",
    "iso": "ISO format not recognised (e.g. ISO400)",
}
UNCOMMON_WARNING = "Not a common camera setting"

STEP_BUTTONS = [(-1.0, "-1"), (-0.5, "-½"), (-1 / 3, "-⅓"), (1 / 3, "+⅓"), (0.5, "+½"), (1.0, "+1")]

MODES = ["Single Calculation", "1D Table", "Matrix Table", "EV Reference"]


# --- Pure helpers (no Streamlit calls) ---

def ev_label(ev: float) -> str:
    """Short scene label, e.g. 'Overcast'."""
    return get_ev_description(ev).split(" (")[0]


def format_ev_with_description(ev: float) -> str:
    return f"{round_half_up(ev)}({ev_label(ev)})"


def format_simple_value(param: str, value: float) -> str:
    """Value as a camera would show it."""
    if param == "ev":
        return f"EV={format_ev_with_description(value)}"
    if param == "av":
        return format_common_f_number(value)
    if param == "tv":
        return format_common_shutter_speed(value)
    return format_common_iso(value)


def format_strict_value(param: str, value: float) -> str:
    """Exact physical value, unsnapped."""
    if param == "ev":
        return format_lux(ev_to_lux(value))
    if param == "av":
        return format_f_number(value)
    if param == "tv":
        return format_shutter_speed(value)
    return format_iso(value)


def input_display(param: str, value: float) -> str:
    """Text shown in an editable field."""
    if param == "ev":
        return f"{round(value, 2):g}"
    return format_simple_value(param, value)


def interpret_input(param: str, text: str, ranges: RangeConfig = DEFAULT_RANGES) -> Tuple[Optional[float], str]:
    """
    Turn a typed value into a stop value plus a warning ('' if none).

    'f/2.8', '1/125', '2s' and 'ISO400' style text is read as a common value;
    anything else is read as a raw stop value.
    """
    text = text.strip()
    lowered = text.lower()
    warning = ""

    if param == "av" and "f" in lowered:
        value = parse_common_f_number(text)
    elif param == "tv" and ("/" in text or "s" in lowered):
        value = parse_common_shutter_speed(text)
    elif param == "iso" and "iso" in lowered:
        value = parse_common_iso(text)
    else:
        return _check_value(param, parse_number(text), ranges)

    if value is None:
        logger.info("Rejected %s input %r", param, text)
        warning = FORMAT_WARNINGS[param]
        return None, warning
    return _check_value(param, value, ranges)


def _check_value(param: str, value: Optional[float], ranges: RangeConfig) -> Tuple[Optional[float], str]:
    if value is None:
        return None, ""
    if not is_value_in_range(param, value, ranges):
        return value, get_range_warning(param, value, ranges)
    if not is_near_common_value(param, value):
        return value, UNCOMMON_WARNING
    return value, ""


def _unique_labels(labels: Sequence[str]) -> List[str]:
    """Suffix repeated labels; two stops can snap to the same common value."""
    seen: Dict[str, int] = {}
    unique = []
    for label in labels:
        count = seen.get(label, 0)
        seen[label] = count + 1
        unique.append(label if count == 0 else f"{label} #{count + 1}")
    return unique


def one_d_table_frame(table: OneDTable, max_rows: int = MAX_DISPLAY_ROWS, show_check: bool = False) -> pd.DataFrame:
    var1, var2 = table.variable_params
    rows = []
    for combination in table.combinations[:max_rows]:
        row = {
            PARAM_LABELS[var1]: input_display(var1, combination[var1]),
            PARAM_LABELS[var2]: input_display(var2, combination[var2]),
        }
        if show_check:
            check_ev = combination.av + combination.tv - combination.iso
            row["Check EV"] = format_ev_with_description(check_ev)
        rows.append(row)
    return pd.DataFrame(rows)


def matrix_table_frame(matrix: MatrixTable) -> pd.DataFrame:
    columns = _unique_labels([format_simple_value(matrix.col_param, v) for v in matrix.col_values])
    index = _unique_labels([format_simple_value(matrix.row_param, v) for v in matrix.row_values])
    data = [
        [format_simple_value(matrix.output_param, cell) if cell is not None else "" for cell in row]
        for row in matrix.cells
    ]
    return pd.DataFrame(data, index=index, columns=columns)


# --- Session state ---

def _input_key(param: str) -> str:
    return f"input_{param}"


def _init_state():
    if "exposure_values" not in st.session_state:
        st.session_state["exposure_values"] = DEFAULT_VALUES
        st.session_state["warnings"] = {p: "" for p in PARAMS}
        _sync_inputs(DEFAULT_VALUES)


def _sync_inputs(values: ExposureValues):
    for param in PARAMS:
        st.session_state[_input_key(param)] = input_display(param, values[param])


def _current_ranges() -> RangeConfig:
    ranges = DEFAULT_RANGES
    for param in PARAMS:
        lo = st.session_state.get(f"range_{param}_min")
        hi = st.session_state.get(f"range_{param}_max")
        if lo is not None and hi is not None:
            ranges = ranges.with_range(param, lo, hi)
    return ranges


def _resolve_target(values: ExposureValues, target: Optional[str], ranges: RangeConfig) -> ExposureValues:
    if target is None:
        return values
    result = calculate_missing_value(values.known(excluding=target), target)
    st.session_state["warnings"][target] = get_range_warning(target, result, ranges)
    return values.with_value(target, result)


def _on_input_change(param: str, target: Optional[str]):
    ranges = _current_ranges()
    value, warning = interpret_input(param, st.session_state[_input_key(param)], ranges)
    st.session_state["warnings"][param] = warning
    if value is None:
        return
    values = st.session_state["exposure_values"].with_value(param, value)
    values = _resolve_target(values, target, ranges)
    st.session_state["exposure_values"] = values
    _sync_inputs(values)


def _on_step(param: str, step: float, target: Optional[str]):
    ranges = _current_ranges()
    values = adjust_value(st.session_state["exposure_values"], param, step, ranges, target=target)
    st.session_state["warnings"][param] = ""
    if target is not None:
        st.session_state["warnings"][target] = get_range_warning(target, values[target], ranges)
    st.session_state["exposure_values"] = values
    _sync_inputs(values)


# --- Rendering ---

def render_param_input(param: str, target: Optional[str], ranges: RangeConfig, detailed: bool):
    values = st.session_state["exposure_values"]
    # Streamlit drops widget state for inputs hidden on the previous run
    if _input_key(param) not in st.session_state:
        st.session_state[_input_key(param)] = input_display(param, values[param])
    col_input, col_buttons = st.columns([2, 3])
    with col_input:
        st.text_input(
            PARAM_LABELS[param],
            key=_input_key(param),
            placeholder=INPUT_PLACEHOLDERS[param],
            on_change=_on_input_change,
            args=(param, target),
        )
        if detailed:
            st.caption(f"{values[param]:.3f} stops · {format_strict_value(param, values[param])}")
    with col_buttons:
        st.write("")
        button_cols = st.columns(len(STEP_BUTTONS))
        for col, (step, label) in zip(button_cols, STEP_BUTTONS):
            with col:
                st.button(
                    label,
                    key=f"step_{param}_{label}",
                    disabled=not is_step_allowed(param, values[param], step, ranges),
                    on_click=_on_step,
                    args=(param, step, target),
                )
    warning = st.session_state["warnings"].get(param)
    if warning:
        st.warning(warning)


def render_settings() -> Tuple[float, RangeConfig]:
    with st.expander("Settings", expanded=False):
        step_label = st.selectbox("Step size", list(STEP_SIZES), key="step_label")
        st.markdown("**Value ranges**")
        for param in PARAMS:
            default = DEFAULT_RANGES[param]
            c1, c2, c3 = st.columns([2, 2, 3])
            with c1:
                st.number_input(f"{param.upper()} min", value=float(default.min), key=f"range_{param}_min")
            with c2:
                st.number_input(f"{param.upper()} max", value=float(default.max), key=f"range_{param}_max")
            with c3:
                lo = st.session_state[f"range_{param}_min"]
                hi = st.session_state[f"range_{param}_max"]
                st.caption(_range_display(param, ParamRange(lo, hi)))
    return STEP_SIZES.get(step_label, DEFAULT_STEP_SIZE), _current_ranges()


def _range_display(param: str, bounds: ParamRange) -> str:
    if param == "ev":
        return f"{ev_label(bounds.min)} ~ {ev_label(bounds.max)}"
    if param == "tv":
        # Larger TV is the faster shutter
        return f"{format_common_shutter_speed(bounds.max)} ~ {format_common_shutter_speed(bounds.min)}"
    return f"{format_simple_value(param, bounds.min)} ~ {format_simple_value(param, bounds.max)}"


def render_single(ranges: RangeConfig, detailed: bool):
    st.markdown("**Enter three values; the fourth is calculated:**")
    target = st.radio(
        "Calculate",
        list(PARAMS),
        format_func=lambda p: PARAM_LABELS[p],
        horizontal=True,
        key="single_target",
    )
    for param in PARAMS:
        if param != target:
            render_param_input(param, target, ranges, detailed)

    values = _resolve_target(st.session_state["exposure_values"], target, ranges)
    st.session_state["exposure_values"] = values
    result = values[target]
    message = f"{PARAM_LABELS[target]}: {format_simple_value(target, result)} ({format_strict_value(target, result)})"
    if is_value_in_range(target, result, ranges):
        st.success(message)
    else:
        st.error(f"{message}. {get_range_warning(target, result, ranges)}")
    if target != "ev":
        st.info(get_ev_description(values.ev))


def render_1d_table(ranges: RangeConfig, step_size: float, detailed: bool):
    c1, c2 = st.columns(2)
    with c1:
        param1 = st.selectbox("Fixed parameter 1", list(PARAMS), index=1, format_func=PARAM_LABELS.get, key="t1_p1")
    with c2:
        options = [p for p in PARAMS if p != param1]
        default = options.index("tv") if "tv" in options else 0
        param2 = st.selectbox("Fixed parameter 2", options, index=default, format_func=PARAM_LABELS.get, key="t1_p2")

    for param in (param1, param2):
        render_param_input(param, None, ranges, detailed)

    values = st.session_state["exposure_values"]
    reference = derive_from_fixed(values, (param1, param2), DEFAULT_FALLBACKS)
    table = generate_1d_table(param1, param2, values, ranges, step_size)

    st.markdown(
        f"#### Fixed: {format_simple_value(param1, values[param1])}, {format_simple_value(param2, values[param2])}"
    )
    st.caption("Reference: " + ", ".join(format_simple_value(p, reference[p]) for p in PARAMS))
    show_check = st.toggle("Show check EV", key="t1_check")
    if not table.combinations:
        st.warning("No combinations fall inside the configured ranges.")
        return
    st.dataframe(one_d_table_frame(table, show_check=show_check), hide_index=True, width="stretch")
    if len(table) > MAX_DISPLAY_ROWS:
        st.caption(f"Showing {MAX_DISPLAY_ROWS} of {len(table)} rows.")


def render_matrix_table(ranges: RangeConfig, step_size: float, detailed: bool):
    c1, c2 = st.columns(2)
    with c1:
        fixed = st.selectbox("Fixed parameter", list(PARAMS), index=3, format_func=PARAM_LABELS.get, key="mx_fixed")
    with c2:
        options = [p for p in PARAMS if p != fixed]
        output = st.selectbox("Output parameter", options, format_func=PARAM_LABELS.get, key="mx_output")
    st.caption("The remaining two parameters become the row and column axes.")

    render_param_input(fixed, None, ranges, detailed)

    values = st.session_state["exposure_values"]
    matrix = generate_matrix_table(fixed, output, values, ranges, step_size)
    st.markdown(
        f"#### Fixed: {format_simple_value(fixed, values[fixed])} → Output: {PARAM_LABELS[output]}"
    )
    st.caption(f"Rows: {PARAM_LABELS[matrix.row_param]} · Columns: {PARAM_LABELS[matrix.col_param]}")
    st.dataframe(matrix_table_frame(matrix), width="stretch")


def render_ev_reference():
    st.markdown("### EV brightness guide")
    frame = pd.DataFrame(
        [{"EV": f"EV {ev}", "Scene": label, "Illuminance": lux} for ev, label, lux in EV_REFERENCE]
    )
    st.dataframe(frame, hide_index=True, width="stretch")


def exposure_ui():
    _init_state()
    st.title("📸 ExpoCalc - Exposure Calculator")

    mode = st.radio("Calculation mode", MODES, horizontal=True, key="mode_picker")
    step_size, ranges = render_settings()
    detailed = st.toggle("Show detailed values", key="show_detailed")

    if mode == "Single Calculation":
        render_single(ranges, detailed)
    elif mode == "1D Table":
        render_1d_table(ranges, step_size, detailed)
    elif mode == "Matrix Table":
        render_matrix_table(ranges, step_size, detailed)
    else:
        render_ev_reference()

    st.caption(f"{APP_INFO['name']} v{APP_INFO['version']} - Camera Exposure Calculator · © {APP_INFO['author']}")
