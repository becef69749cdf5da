from datetime import datetime

import pytest

from ocean_fishing_score import light, physics


def test_wind_opposing_current_is_dangerous():
    r = physics.wind_current_interaction(0, 25, 180, 2)
    assert r.is_opposing
    assert r.score <= 0.2
    assert r.warning


def test_wind_current_wraps_around_north():
    r = physics.wind_current_interaction(350, 10, 10, 1)
    assert not r.is_opposing
    assert r.score == 1.0


def test_opposing_wind_is_monotonic():
    scores = [physics.wind_current_interaction(0, w, 180, 1.5).score for w in range(0, 40, 2)]
    assert all(a >= b for a, b in zip(scores, scores[1:]))


def test_swell_comfort_flat_and_dangerous():
    assert physics.swell_comfort(0.2, 4).label == "flat"
    big = physics.swell_comfort(3.5, 14)
    assert big.label == "dangerous"
    assert big.score <= 0.3
    assert physics.swell_comfort(4.5, 14).score <= big.score


def test_freshet_worst_case_is_rain_on_snowmelt():
    r = physics.freshet_status(45, 30, 5)
    assert r.is_blown_out
    assert r.score == 0.0
    assert r.cause == "rain_and_snowmelt"
    # the same heat outside freshet season is not snowmelt
    assert physics.freshet_status(0, 30, 10).label == "clear"


def test_trollability_prime_time_near_slack():
    near = physics.trollability(4.0, 30, 2.0)
    far = physics.trollability(4.0, 300, 2.0)
    assert near.label == "prime_time"
    assert near.score == 1.0
    assert far.score < near.score
    assert far.depth_penalty_pct == 70


def test_resultant_drift_vertical_and_uncontrollable():
    calm = physics.resultant_drift(5, 0, 0.05, 180)
    assert calm.label == "vertical"
    assert calm.can_hold_position
    fast = physics.resultant_drift(20, 0, 2.0, 180)
    assert not fast.can_hold_position
    assert fast.warning


def test_pressure_trend_without_history_uses_absolute():
    assert physics.pressure_trend(1005).label == "low"
    assert physics.pressure_trend(1025).label == "very_high"


def test_pressure_trend_falling():
    history = [1016.0 - 0.2 * i for i in range(24)]
    r = physics.pressure_trend(1011.0, history, 15)
    assert r.label == "rapidly_falling"
    assert r.delta_6h < 0


def test_barometric_stability_uses_sample_span():
    # 12 samples of 15 minutes is 3 hours; 3 hPa over 3 h is 1 hPa/h
    r = physics.barometric_stability(1010.0, [1013.0] * 12, 15)
    assert r.rate_hpa_per_hour == pytest.approx(-1.0)
    assert r.label == "slowly_falling"
    assert physics.barometric_stability(1010.0, []).label == "no_history"


def test_tidal_slope_prefers_minutes_over_current():
    assert physics.tidal_slope(10, 3.0).score == 1.0
    assert physics.tidal_slope(None, 3.0).label == "ripping"


def test_slack_decay_is_exponential():
    assert physics.slack_decay(0).score == pytest.approx(1.0)
    assert physics.slack_decay(1.0).score == pytest.approx(0.4066, abs=1e-3)
    assert physics.slack_decay(10).score == 0.05


def test_negative_inputs_are_clamped():
    assert physics.swell_heave(-1, 8).label == "stable"
    assert physics.tidal_shoulder(-1.0).label == "shoulder"


def test_storm_trigger_and_thermal_gate():
    r = physics.storm_trigger("falling", 10)
    assert r.is_active
    assert r.score == 1.0
    assert physics.thermal_gate(9).is_cold
    assert not physics.thermal_gate(15).is_cold


@pytest.mark.parametrize(
    "elevation, label, score, depth",
    [
        (9.9, "surface", 1.0, (40, 80)),
        (10, "shallow", 0.9, (60, 100)),
        (24.9, "shallow", 0.9, (60, 100)),
        (25, "mid", 0.7, (80, 120)),
        (39.9, "mid", 0.7, (80, 120)),
        (40, "deep", 0.5, (100, 150)),
        (54.9, "deep", 0.5, (100, 150)),
        (55, "very_deep", 0.3, (120, 180)),
    ],
)
def test_light_bands_under_clear_sky(elevation, label, score, depth):
    penetration = light.light_penetration(elevation, 0)
    advice = light.depth_advice(elevation, 0)
    assert penetration.label == label
    assert penetration.score == score
    assert (advice.min_ft, advice.max_ft) == depth
    assert advice.is_deep_bite is (elevation >= 40)


def test_low_sun_scores_highest_and_depth_only_grows():
    elevations = range(0, 90, 5)
    scores = [light.light_penetration(e, 0).score for e in elevations]
    depths = [light.depth_advice(e, 0).min_ft for e in elevations]
    assert scores[0] == max(scores)
    assert all(a >= b for a, b in zip(scores, scores[1:]))
    assert all(a <= b for a, b in zip(depths, depths[1:]))


def test_overcast_moves_fish_up_and_clears_deep_bite():
    # 80% cloud cuts the effective angle to 0.6 x elevation: 80 deg -> 48 deg, the deep band
    clear = light.depth_advice(48, 0)
    overcast = light.depth_advice(80, 80)
    assert clear.is_deep_bite
    assert not overcast.is_deep_bite
    assert (overcast.min_ft, overcast.max_ft) == (clear.min_ft - 20, clear.max_ft - 20)
    assert light.light_penetration(50, 80).score == pytest.approx(0.9)


def test_thermal_blockade_stacks_fish_in_hot_rivers():
    assert physics.thermal_blockade(20).label == "blocked"
    assert physics.thermal_blockade(20).is_stacking
    assert physics.thermal_blockade(18).is_stacking
    passable = physics.thermal_blockade(16)
    assert (passable.score, passable.is_stacking) == (0.6, False)
    assert physics.thermal_blockade(12).label == "highway"


def test_ebb_treadmill_beats_flood():
    assert physics.tidal_treadmill(True, 2.0).ground_speed == "holding"
    assert physics.tidal_treadmill(True, 1.0).score == 0.85
    assert physics.tidal_treadmill(False, 2.5).score == 0.3
    assert physics.tidal_treadmill(False, 0.5).label == "good"
    assert physics.tidal_treadmill(True, 0.5).score > physics.tidal_treadmill(False, 1.5).score


def test_scent_hydraulics():
    optimal = physics.scent_hydraulics([1.0, 1.2, 0.9])
    assert (optimal.score, optimal.label) == (1.0, "optimal_plume")
    assert not optimal.trap_roll_risk

    rolling = physics.scent_hydraulics([1.0, 3.5])
    assert rolling.trap_roll_risk
    assert rolling.label == "trap_roll_risk"
    assert rolling.score == pytest.approx((1.0 + 0.1) / 2 * 0.4)
    assert rolling.warning

    assert physics.scent_hydraulics([0.1, 0.2]).label == "pooling"
    assert physics.scent_hydraulics([]).label == "no_current_data"


def test_molt_quality_by_temperature():
    assert [physics.molt_quality(t).label for t in (8, 11, 14, 16)] == ["hard_shell", "good", "fair", "soft_shell"]


def test_nocturnal_flood_multipliers():
    assert physics.nocturnal_flood(80, True).multiplier == 1.3
    assert physics.nocturnal_flood(40, True).label == "flood_partial_night"
    assert physics.nocturnal_flood(80, False).multiplier == 1.1
    assert physics.nocturnal_flood(0, True).multiplier == 1.05
    assert physics.nocturnal_flood(0, False).multiplier == 0.9


def test_retrieval_safety():
    calm = physics.retrieval_safety(5, 0.2, 0.3)
    assert calm.is_safe and calm.is_slack
    assert calm.label == "easy_haul"
    assert calm.warning is None

    windy = physics.retrieval_safety(22, 1.0, 0.5)
    assert not windy.is_safe
    assert windy.label == "unsafe"
    assert windy.warning.startswith("Unsafe wind 22 kts")

    steep = physics.retrieval_safety(5, 1.0, 2.5)
    assert not steep.is_safe
    assert steep.score <= 0.1

    strong = physics.retrieval_safety(12, 2.5, 0.5)
    assert strong.is_safe
    assert strong.score == pytest.approx(0.7 * 0.7)
    assert strong.label == "hard_haul"


def test_catenary_limit_falls_with_depth():
    assert physics.catenary_drag(0.5, 300).max_safe_current_kts == pytest.approx(0.65)
    assert physics.catenary_drag(0.5, 100).max_safe_current_kts == pytest.approx(0.95)
    assert physics.catenary_drag(0.1, 300).label == "slack"
    assert physics.catenary_drag(0.6, 300).label == "safe"
    assert physics.catenary_drag(0.75, 300).label == "moderate"
    severe = physics.catenary_drag(0.9, 300)
    assert severe.label == "severe"
    assert severe.warning
    assert physics.catenary_drag(1.5, 300).label == "impossible"


def test_slack_window_shrinks_with_tidal_range():
    windows = [physics.slack_window(r) for r in (1.5, 2.2, 3.0, 4.0, 5.0)]
    assert [w.minutes for w in windows] == [70, 45, 30, 20, 15]
    assert [w.multiplier for w in windows] == [1.2, 1.1, 1.0, 0.8, 0.7]


@pytest.mark.parametrize(
    "elevation,cloud,depth",
    [(5, 0, "25-45ft"), (50, 90, "25-45ft"), (20, 0, "40-60ft"), (50, 10, "65-90ft"), (35, 40, "50-70ft")],
)
def test_interception_corridor_depth(elevation, cloud, depth):
    advice = light.interception_corridor(elevation, cloud)
    assert advice.depth_range == depth
    assert depth in advice.recommendation


def test_night_fraction_spans_midnight():
    day = datetime(2025, 7, 1)
    sunrise = day.replace(hour=5, minute=30)
    sunset = day.replace(hour=20, minute=30)
    assert light.night_fraction(day.replace(hour=20), 12, sunrise, sunset) == pytest.approx(0.75)
    assert light.night_fraction(day.replace(hour=10), 4, sunrise, sunset) == 0.0
    assert light.night_fraction(day.replace(hour=0), 3, sunrise, sunset) == 1.0
    assert light.night_fraction(day, 12, None, sunset) is None


def test_prawn_darkness():
    assert light.prawn_darkness(10, True).label == "new_moon_ideal"
    assert light.prawn_darkness(40, True).score == 0.85
    assert light.prawn_darkness(90, True).label == "bright"
    assert light.prawn_darkness(10, False).label == "moderate"
