import math

import pytest
from common_values import (
    COMMON_F_NUMBERS,
    COMMON_ISO_VALUES,
    COMMON_SHUTTER_SPEEDS,
    _nearest,
    format_common_f_number,
    format_common_iso,
    format_common_shutter_speed,
    get_nearest_common_iso,
    get_nearest_common_shutter_speed,
    is_near_common_value,
    parse_common_f_number,
    parse_common_iso,
    parse_common_shutter_speed,
    parse_common_value,
    parse_number,
)
from exposure_logic import (
    f_number_to_av,
    iso_to_sensitivity,
    sensitivity_to_iso,
    shutter_speed_to_tv,
    tv_to_shutter_speed,
)


def test_table_sizes_and_bounds():
    assert len(COMMON_F_NUMBERS) == 31
    assert COMMON_F_NUMBERS[0] == 1.0 and COMMON_F_NUMBERS[-1] == 32
    assert len(COMMON_SHUTTER_SPEEDS) == 63
    assert COMMON_SHUTTER_SPEEDS[0] == 180
    assert COMMON_SHUTTER_SPEEDS[-1] == pytest.approx(1 / 12800)
    assert len(COMMON_ISO_VALUES) == 41
    assert COMMON_ISO_VALUES[0] == 50 and COMMON_ISO_VALUES[-1] == 512000


def test_format_common_f_number_snaps_to_table():
    assert format_common_f_number(f_number_to_av(2.83)) == "f/2.8"
    assert format_common_f_number(0) == "f/1"
    assert format_common_f_number(f_number_to_av(10.2)) == "f/10"
    # av=5 is f/5.66
    assert format_common_f_number(5) == "f/5.6"


def test_format_common_shutter_speed():
    assert format_common_shutter_speed(shutter_speed_to_tv(1 / 125)) == "1/125"
    # tv=7 is 1/128s
    assert format_common_shutter_speed(7) == "1/125"
    assert format_common_shutter_speed(0) == "1s"
    assert format_common_shutter_speed(-1) == "2s"
    assert format_common_shutter_speed(shutter_speed_to_tv(2.4)) == "2.5s"
    assert format_common_shutter_speed(shutter_speed_to_tv(200)) == "180s"


def test_format_common_iso():
    assert format_common_iso(0) == "ISO 100"
    assert format_common_iso(sensitivity_to_iso(390)) == "ISO 400"
    assert format_common_iso(10) == "ISO 102400"
    assert format_common_iso(-5) == "ISO 50"


def test_nearest_keeps_first_on_tie():
    assert _nearest((1, 3), 2) == 1
    assert _nearest((3, 1), 2) == 3
    assert get_nearest_common_iso(1) == 200


def test_nearest_shutter_speed_scans_both_scales():
    assert get_nearest_common_shutter_speed(shutter_speed_to_tv(0.9)) == 1
    assert get_nearest_common_shutter_speed(shutter_speed_to_tv(1 / 7000)) == pytest.approx(1 / 6400)


def test_is_near_common_value():
    assert is_near_common_value("av", f_number_to_av(2.8))
    assert not is_near_common_value("av", f_number_to_av(2.65))
    assert is_near_common_value("tv", 7)
    assert not is_near_common_value("tv", shutter_speed_to_tv(3.5))
    assert is_near_common_value("tv", shutter_speed_to_tv(3.5), threshold=1.0)
    # 5% of ISO 400 is 20
    assert is_near_common_value("iso", sensitivity_to_iso(415))
    assert not is_near_common_value("iso", sensitivity_to_iso(440))
    assert is_near_common_value("ev", 12.345)


@pytest.mark.parametrize("text", ["f/2.8", "F/2.8", "f2.8", "2.8", " f/2.8 "])
def test_parse_common_f_number(text):
    av = parse_common_f_number(text)
    assert av == pytest.approx(f_number_to_av(2.8))


@pytest.mark.parametrize("text", ["", "f/", "f/abc", "f/0", "f/-2", "f/1e999"])
def test_parse_common_f_number_rejects(text):
    assert parse_common_f_number(text) is None


def test_parse_common_shutter_speed_fraction():
    tv = parse_common_shutter_speed("1/125")
    assert tv_to_shutter_speed(tv) == pytest.approx(1 / 125)
    assert parse_common_shutter_speed("1/125s") == pytest.approx(tv)


def test_parse_common_shutter_speed_seconds():
    assert tv_to_shutter_speed(parse_common_shutter_speed("2s")) == pytest.approx(2)
    assert tv_to_shutter_speed(parse_common_shutter_speed("2.5S")) == pytest.approx(2.5)
    assert tv_to_shutter_speed(parse_common_shutter_speed("0.5")) == pytest.approx(0.5)


@pytest.mark.parametrize(
    "text",
    ["abc", "1/0", "1/", "/125", "1/2/3", "0s", "-1/125", "", "1e999s", "1e999/1", "1e308/1e-308", "1e-320"],
)
def test_parse_common_shutter_speed_rejects(text):
    assert parse_common_shutter_speed(text) is None


def test_parse_common_iso():
    assert iso_to_sensitivity(parse_common_iso("ISO 400")) == pytest.approx(400)
    assert iso_to_sensitivity(parse_common_iso("iso400")) == pytest.approx(400)
    assert iso_to_sensitivity(parse_common_iso("1600")) == pytest.approx(1600)
    assert parse_common_iso("ISO") is None
    assert parse_common_iso("ISO 0") is None
    assert parse_common_iso("ISO fast") is None


def test_parse_number_reads_leading_prefix():
    assert parse_number("2.8mm") == 2.8
    assert parse_number("-3") == -3
    assert parse_number(".5") == 0.5
    assert parse_number("abc") is None


def test_parse_number_rejects_overflow():
    assert parse_number("1e999") is None
    assert parse_number("-1e999") is None
    assert parse_number("1e3") == 1000
    assert parse_common_iso("ISO 1e999") is None
    assert parse_common_value("ev", "1e999") is None


def test_parse_common_value_dispatch():
    assert parse_common_value("av", "f/4") == pytest.approx(4.0)
    assert parse_common_value("tv", "1/8") == pytest.approx(3.0)
    assert parse_common_value("iso", "ISO 200") == pytest.approx(1.0)
    assert parse_common_value("ev", "12.5") == 12.5
    assert math.isclose(parse_common_value("iso", "ISO 800"), 3.0)
