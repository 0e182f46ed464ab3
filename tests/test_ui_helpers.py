import pytest
from exposure_config import DEFAULT_RANGES, PARAM_LABELS
from exposure_logic import f_number_to_av, shutter_speed_to_tv
from exposure_tables import generate_1d_table, generate_matrix_table
from exposure_types import ExposureValues
from exposure_ui import (
    FORMAT_WARNINGS,
    UNCOMMON_WARNING,
    _unique_labels,
    ev_label,
    format_simple_value,
    format_strict_value,
    input_display,
    interpret_input,
    matrix_table_frame,
    one_d_table_frame,
)


@pytest.fixture
def values():
    return ExposureValues(ev=12, av=5, tv=7, iso=0)


def test_interpret_common_aperture():
    value, warning = interpret_input("av", "f/2.8")
    assert value == pytest.approx(f_number_to_av(2.8))
    assert warning == ""


def test_interpret_bad_common_format():
    assert interpret_input("av", "f/abc") == (None, FORMAT_WARNINGS["av"])
    assert interpret_input("tv", "1/0") == (None, FORMAT_WARNINGS["tv"])
    assert interpret_input("iso", "iso fast") == (None, FORMAT_WARNINGS["iso"])


def test_interpret_overflowing_shutter_is_a_format_warning():
    assert interpret_input("tv", "1e999s") == (None, FORMAT_WARNINGS["tv"])
    assert interpret_input("tv", "1e999/1") == (None, FORMAT_WARNINGS["tv"])


def test_interpret_raw_value_out_of_range():
    value, warning = interpret_input("av", "12")
    assert value == 12
    assert warning == "Value is above the maximum (9)"


def test_interpret_shutter_out_of_range():
    value, warning = interpret_input("tv", "1/100000")
    assert value == pytest.approx(shutter_speed_to_tv(1 / 100000))
    assert warning == "Value is above the maximum (13)"


def test_interpret_uncommon_iso():
    value, warning = interpret_input("iso", "ISO 450")
    assert value is not None
    assert warning == UNCOMMON_WARNING


def test_interpret_raw_common_value():
    # Plain numbers are stop values: av=5 is f/5.66, close to f/5.6
    assert interpret_input("av", "5") == (5, "")


def test_interpret_empty_input():
    assert interpret_input("ev", "") == (None, "")
    assert interpret_input("ev", "   ") == (None, "")


def test_interpret_respects_custom_ranges():
    ranges = DEFAULT_RANGES.with_range("ev", 0, 10)
    assert interpret_input("ev", "12", ranges) == (12, "Value is above the maximum (10)")


def test_value_formatting():
    assert ev_label(12) == "Overcast"
    assert format_simple_value("ev", 12) == "EV=12(Overcast)"
    assert format_simple_value("av", 5) == "f/5.6"
    assert format_simple_value("tv", 7) == "1/125"
    assert format_simple_value("iso", 0) == "ISO 100"
    assert format_strict_value("ev", 0) == "2.5Lux"
    assert format_strict_value("av", 6) == "f/8.0"
    assert input_display("ev", 12 + 1 / 3) == "12.33"
    assert input_display("tv", 7) == "1/125"


def test_unique_labels():
    assert _unique_labels(["a", "a", "b", "a"]) == ["a", "a #2", "b", "a #3"]


def test_one_d_table_frame(values):
    table = generate_1d_table("av", "tv", values, DEFAULT_RANGES, 1)
    frame = one_d_table_frame(table)
    assert list(frame.columns) == [PARAM_LABELS["ev"], PARAM_LABELS["iso"]]
    assert len(frame) == len(table) == 11

    short = one_d_table_frame(table, max_rows=5, show_check=True)
    assert len(short) == 5
    assert short["Check EV"].iloc[0] == "2(Cinema)"


def test_matrix_table_frame(values):
    matrix = generate_matrix_table("iso", "ev", values, DEFAULT_RANGES, 1)
    frame = matrix_table_frame(matrix)
    assert frame.shape == matrix.shape
    assert frame.iloc[0, 0] == "EV=-3(Hazy moonlight)"
    assert frame.iloc[-1, -1] == ""
    assert frame.index[0] == "f/1"
    assert frame.columns[0] == "8s"
