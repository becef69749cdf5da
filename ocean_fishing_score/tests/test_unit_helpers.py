from datetime import timedelta

import pytest

from ocean_fishing_score import unit_helpers as uh
from ocean_fishing_score.models import ContextError, EnvironmentalContext, Pressure, Wind


def test_converters_handle_bad_input():
    assert uh.kmh_to_knots("fast") is None
    assert uh.m_s_to_knots(None) is None
    assert uh.kmh_to_knots(10) == pytest.approx(5.39957)
    assert uh.wind_to_knots(10, "m_s") == pytest.approx(19.43844)
    with pytest.raises(ValueError):
        uh.wind_to_knots(10, "furlongs_per_fortnight")


def test_estimate_wave_height():
    assert uh.estimate_wave_height_m(0, 5.0) is None
    assert uh.estimate_wave_height_m(100, 2.0) == 2.0


def test_coerce_datetime_keeps_offset():
    dt = uh.coerce_datetime("2025-08-15T06:30:00-07:00")
    assert dt.hour == 6
    assert dt.utcoffset() == timedelta(hours=-7)
    assert uh.coerce_datetime("not a date") is None
    assert uh.coerce_datetime(1_700_000_000_000).year == 2023


def test_safety_limits_clamp_and_warn():
    normalized, warnings = uh.validate_and_normalize_safety_limits({"max_wind_kts": 500, "bogus": 1})
    assert normalized["max_wind_kts"] == 80.0
    assert normalized["max_current_kts"] == 4.5
    assert len(warnings) == 2


def test_safety_limits_strict_raises():
    with pytest.raises(ValueError):
        uh.validate_and_normalize_safety_limits({"max_wind_kts": "breezy"}, strict=True)


def make_payload(**overrides):
    payload = {
        "timestamp": "2025-08-15T06:30:00-07:00",
        "wind": {"speed": 20, "direction": 270, "gust": 30},
        "pressure": {"current": 1012, "history": [1014, None, 1013]},
        "swell": {"height": "0.8", "period": 9},
        "tide": {"current_speed": 1.0, "is_rising": True},
        "bio_intel_text": "some bait around",
        "overrides": {"region": "North"},
    }
    payload.update(overrides)
    return payload


def test_context_from_dict_converts_units():
    ctx = EnvironmentalContext.from_dict(make_payload(), wind_unit="kmh")
    assert ctx.wind.speed_kts == pytest.approx(20 * 0.539957)
    assert ctx.tide.current_speed_kts == pytest.approx(0.539957)
    assert ctx.pressure.history_hpa == (1014.0, 1013.0)
    assert ctx.swell.height_m == 0.8
    assert ctx.overrides.region == "north"


def test_context_lenient_numbers_become_missing():
    ctx = EnvironmentalContext.from_dict(make_payload(cloud_cover="lots", tide=None))
    assert ctx.cloud_cover_pct is None
    assert ctx.tide is None


def test_context_requires_timestamp():
    payload = make_payload()
    del payload["timestamp"]
    with pytest.raises(ContextError):
        EnvironmentalContext.from_dict(payload)
    with pytest.raises(ContextError):
        EnvironmentalContext.from_dict(make_payload(timestamp="yesterday"))


def test_context_from_imperial_units():
    payload = make_payload(air_temperature=59, tide={"tidal_range": 10, "water_temperature": 50})
    payload["pressure"] = {"current": 29.92}
    ctx = EnvironmentalContext.from_dict(payload, wind_unit="mph", height_unit="ft", temp_unit="f", pressure_unit="inhg")
    assert ctx.wind.speed_kts == pytest.approx(17.37952)
    assert ctx.swell.height_m == pytest.approx(0.8 * 0.3048)
    assert ctx.tide.tidal_range_m == pytest.approx(3.048)
    assert ctx.tide.water_temp_c == pytest.approx(10.0)
    assert ctx.air_temp_c == pytest.approx(15.0)
    assert ctx.pressure.current_hpa == pytest.approx(1013.2, abs=0.1)


def test_unknown_unit_rejected():
    with pytest.raises(ValueError):
        EnvironmentalContext.from_dict(make_payload(), height_unit="fathoms")


def test_sun_times_follow_timestamp_zone():
    ctx = EnvironmentalContext.from_dict(
        make_payload(
            timestamp="2025-08-15T08:00:00Z",
            sunrise="2025-08-15T05:30:00",
            sunset="2025-08-15T20:30:00-07:00",
        )
    )
    assert ctx.sunrise.utcoffset() == timedelta(0)
    assert ctx.sunrise.hour == 5
    assert ctx.sunset.utcoffset() == timedelta(0)
    assert ctx.sunset.day == 16
    assert ctx.sunset.hour == 3


def test_align_to_naive_reference_keeps_wall_clock():
    reference = uh.coerce_datetime("2025-08-15T08:00:00")
    aware = uh.coerce_datetime("2025-08-15T05:30:00-07:00")
    assert uh.align_to(aware, reference) == reference.replace(hour=5, minute=30)
    assert uh.align_to(None, reference) is None


def test_non_finite_numbers_are_missing():
    assert uh._to_float("inf") is None
    assert uh._to_float(float("-inf")) is None
    assert uh._to_float(float("nan")) is None
    assert uh.non_negative(float("inf")) is None
    ctx = EnvironmentalContext.from_dict(make_payload(wind={"speed": "inf", "gust": float("inf")}))
    assert ctx.wind.speed_kts is None
    assert ctx.wind.gust_kts is None


def test_direct_context_drops_non_finite():
    ctx = EnvironmentalContext(
        timestamp=uh.coerce_datetime("2025-08-15T08:00:00"),
        wind=Wind(speed_kts=float("inf"), gust_kts=float("nan")),
        pressure=Pressure(current_hpa=1012.0, history_hpa=(1013.0, float("inf"))),
        cloud_cover_pct=float("inf"),
    )
    assert ctx.wind.speed_kts is None
    assert ctx.wind.gust_kts is None
    assert ctx.pressure.history_hpa == (1013.0,)
    assert ctx.cloud_cover_pct is None
