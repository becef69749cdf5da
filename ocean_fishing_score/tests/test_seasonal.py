from datetime import date, datetime

import pytest

from ocean_fishing_score.astro import day_of_year, is_odd_year, moon_illumination, solunar_period
from ocean_fishing_score.seasonal import season_score, select_profile
from ocean_fishing_score.species_loader import SpeciesLoader

MONTH_TABLE = {
    "type": "month_table",
    "default_region": "south",
    "split_day": 15,
    "tables": {
        "south": {"2": [0.55, 0.65], "8": 1.0},
        "north": {"2": 0.4, "8": 0.9},
    },
}

SEGMENTS = {
    "type": "day_segments",
    "floor": 0.1,
    "segments": [
        {"days": [258, 287], "ramp": [[258, 0.5], [288, 1.0]], "label": "building_run"},
        {"days": [288, 319], "score": 1.0, "label": "peak_run"},
    ],
}

GAUSSIAN = {"type": "gaussian", "peak_day": 227, "width": 25, "window": [201, 273], "floor": 0.1}


def test_month_table_split_and_region():
    assert season_score(MONTH_TABLE, date(2025, 2, 1))[0] == 0.55
    assert season_score(MONTH_TABLE, date(2025, 2, 20))[0] == 0.65
    assert season_score(MONTH_TABLE, date(2025, 2, 20), region="north")[0] == 0.4
    # unknown region falls back to the default table
    assert season_score(MONTH_TABLE, date(2025, 8, 1), region="east") == (1.0, "peak_season")


def test_day_segments_ramp_and_floor():
    start = date(2025, 9, 15)  # day 258
    assert day_of_year(start) == 258
    assert season_score(SEGMENTS, start) == (0.5, "building_run")
    score, label = season_score(SEGMENTS, date(2025, 10, 1))
    assert 0.5 < score < 1.0
    assert label == "building_run"
    assert season_score(SEGMENTS, date(2025, 3, 1)) == (0.1, "off_season")


def test_gaussian_peak_and_window():
    peak, label = season_score(GAUSSIAN, date(2025, 8, 15))
    assert peak == pytest.approx(1.0)
    assert label == "peak_run"
    assert season_score(GAUSSIAN, date(2025, 1, 15)) == (0.1, "off_season")


def test_is_odd_year():
    assert is_odd_year(date(2025, 8, 1))
    assert not is_odd_year(date(2026, 8, 1))


def test_solunar_period_is_one_of_three():
    period = solunar_period(datetime(2025, 6, 1, 12, 0), -123.4)
    assert period.period_type in ("major", "minor", "none")
    assert period.score in (1.0, 0.7, 0.3)


def test_select_profile_by_month():
    chinook = SpeciesLoader().load().get_species("chinook")
    assert select_profile(chinook, date(2025, 1, 10)).mode_name == "feeder"
    assert select_profile(chinook, date(2025, 7, 10)).mode_name == "spawner"


def test_moon_illumination_follows_lunar_cycle():
    assert moon_illumination(date(2000, 1, 6)) == 0
    assert moon_illumination(date(2000, 1, 21)) == 100
    assert 40 <= moon_illumination(date(2000, 1, 13)) <= 60
