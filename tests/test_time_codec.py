import pytest

from interview_slots.services.slots.config import (
    SlotConfig,
    index_to_time,
    minutes_to_time_str,
    time_str_to_minutes,
    time_to_index,
)


def test_time_to_index_on_30_minute_grid():
    assert time_to_index("00:00", 30) == 0
    assert time_to_index("09:30", 30) == 19
    assert time_to_index("23:30", 30) == 47


def test_index_to_time_pads_and_renders_end_of_day():
    assert index_to_time(0, 30) == "00:00"
    assert index_to_time(19, 30) == "09:30"
    assert index_to_time(48, 30) == "24:00"


def test_codec_on_15_minute_grid():
    assert time_to_index("09:45", 15) == 39
    assert index_to_time(39, 15) == "09:45"


def test_default_interval_is_30_minutes():
    assert time_to_index("01:00") == 2
    assert index_to_time(3) == "01:30"


def test_minutes_helpers():
    assert time_str_to_minutes("10:05") == 605
    assert minutes_to_time_str(605) == "10:05"


def test_config_grid_properties():
    config = SlotConfig(interval_minutes=15)
    assert config.intervals_per_hour == 4
    assert config.intervals_per_day == 96
    assert config.time_to_index("12:15") == 49
    assert config.index_to_time(49) == "12:15"


@pytest.mark.parametrize("interval", [0, 7, 20, 45, 90])
def test_config_rejects_unsupported_interval(interval):
    with pytest.raises(ValueError):
        SlotConfig(interval_minutes=interval)
