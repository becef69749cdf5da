from datetime import datetime

import pytest

from ocean_fishing_score.bio_intel import BaitPresence, BaitSignal, KeywordClassifier
from ocean_fishing_score.evaluation import EvaluationState
from ocean_fishing_score.models import EnvironmentalContext, Pressure, Swell, Tide, Wind
from ocean_fishing_score.pipeline import UNSAFE_ADVICE
from ocean_fishing_score.scoring import ScoringEngine, UnknownSpeciesError
from ocean_fishing_score.species_factors import sea_state_result


def make_context(when=datetime(2025, 8, 15, 8, 0), wind_kts=8.0, bio_intel_text=None, **kwargs):
    defaults = dict(
        timestamp=when,
        wind=Wind(speed_kts=wind_kts, direction_deg=270, gust_kts=wind_kts + 2),
        pressure=Pressure(current_hpa=1012.0),
        cloud_cover_pct=50.0,
        swell=Swell(height_m=0.5, period_s=10.0),
        tide=Tide(current_speed_kts=1.0, is_rising=True, water_temp_c=11.0),
        bio_intel_text=bio_intel_text,
    )
    defaults.update(kwargs)
    return EnvironmentalContext(**defaults)


@pytest.fixture(scope="module")
def engine():
    return ScoringEngine()


def test_calm_chinook_is_safe(engine):
    result = engine.score("chinook", make_context())
    assert result.is_safe
    assert result.provenance.safety_failures == ()
    assert 0 < result.total <= result.max_score
    assert UNSAFE_ADVICE not in result.recommendations


def test_factor_weights_match_active_profile(engine):
    result = engine.score("chinook", make_context())
    table = result.provenance.weight_table
    assert {name: f.weight for name, f in result.factors.items()} == table
    assert sum(table.values()) == pytest.approx(1.0)
    assert result.provenance.stages_run[:2] == ("gatekeepers", "factors")


def test_unsafe_caps_total_and_leads_recommendations(engine):
    result = engine.score("chinook", make_context(wind_kts=30.0))
    assert not result.is_safe
    assert result.total <= 3.0
    assert "sea_state" in result.provenance.safety_failures
    assert result.recommendations[0] == UNSAFE_ADVICE
    assert result.safety_warnings[0].startswith("Dangerous wind")


def test_bait_floor_does_not_lift_over_unsafe_cap(engine):
    result = engine.score("chinook", make_context(wind_kts=30.0, bio_intel_text="herring balls everywhere"))
    fired = {m.name for m in result.provenance.modifiers if m.fired}
    assert "bait_floor" in fired
    assert result.total <= 3.0


def test_advisory_check_warns_without_failing(engine):
    cold = make_context(tide=Tide(current_speed_kts=1.0, is_rising=True, water_temp_c=4.0))
    result = engine.score("chinook", cold)
    assert result.is_safe
    assert any(w.startswith("Cold water warning: 4.0 C") for w in result.safety_warnings)


def test_night_visibility_depends_on_species(engine):
    night = make_context(
        when=datetime(2025, 7, 15, 1, 0),
        sunrise=datetime(2025, 7, 15, 5, 30),
        sunset=datetime(2025, 7, 15, 21, 15),
        wind_kts=5.0,
    )
    assert engine.score("chinook", night).is_safe
    lingcod = engine.score("lingcod", night)
    assert not lingcod.is_safe
    assert "night_visibility" in lingcod.provenance.safety_failures


def test_even_year_gatekeeper_short_circuits(engine):
    result = engine.score("pink", make_context(when=datetime(2026, 8, 15, 8, 0)))
    assert result.total == 0.0
    assert not result.is_in_season
    assert result.is_safe
    assert result.factors == {}
    assert result.advisories == []
    assert result.safety_warnings == ["Even year (2026): no significant run expected"]
    assert result.recommendations == ["Next run expected in 2027"]
    assert result.provenance.gatekeeper.name == "even_year"
    assert result.provenance.stages_run == ("gatekeepers",)


def test_lingcod_closed_in_february(engine):
    result = engine.score("lingcod", make_context(when=datetime(2025, 2, 10, 9, 0)))
    assert result.total == 0.0
    assert not result.is_in_season
    assert result.provenance.gatekeeper.triggered


def test_lingcod_announces_mode(engine):
    result = engine.score("lingcod", make_context(when=datetime(2025, 7, 10, 9, 0)))
    assert result.provenance.gatekeeper is None
    assert any(" MODE (" in r for r in result.recommendations)


def test_halibut_closed_months_cap(engine):
    result = engine.score("halibut", make_context(when=datetime(2025, 1, 15, 10, 0)))
    assert result.total <= 1.0
    assert "Halibut season typically closed December-February" in result.safety_warnings


def test_rockfish_advisories_follow_month(engine):
    march = engine.score("rockfish", make_context(when=datetime(2025, 3, 10, 10, 0)))
    july = engine.score("rockfish", make_context(when=datetime(2025, 7, 10, 10, 0)))
    quillback = "Quillback Rockfish: closed Feb-May in many areas"
    assert quillback in march.advisories
    assert quillback not in july.advisories
    assert march.advisories[0].startswith("Yelloweye")


def test_unknown_species_raises(engine):
    with pytest.raises(UnknownSpeciesError):
        engine.score("sturgeon", make_context())
    with pytest.raises(UnknownSpeciesError):
        engine.score_many(make_context(), ["coho", "sturgeon"])


class AlwaysMassiveClassifier(KeywordClassifier):
    def classify_bait_presence(self, text):
        return BaitSignal(BaitPresence.MASSIVE, ("stub",))


def test_injected_classifier_drives_bait_factor(engine):
    result = engine.score("chinook", make_context(), classifier=AlwaysMassiveClassifier())
    assert result.factors["bait_presence"].score == 1.0
    assert result.factors["bait_presence"].description == "massive"
    assert result.total >= 6.0

    plain = engine.score("chinook", make_context())
    assert plain.factors["bait_presence"].description == "none"


def test_engine_safety_limits_override():
    strict = ScoringEngine(safety_limits={"max_wind_kts": 10})
    context = make_context(wind_kts=15.0)
    assert not strict.score("pink", context).is_safe
    assert ScoringEngine().score("pink", context).is_safe


def test_score_series_keeps_order(engine):
    contexts = [make_context(when=datetime(2025, 8, 15, h, 0)) for h in (6, 9, 12)]
    results = engine.score_series("coho", contexts)
    assert len(results) == 3
    assert results == [engine.score("coho", c) for c in contexts]


def test_to_dict_exposes_provenance(engine):
    data = engine.score("coho", make_context()).to_dict()
    assert data["species"] == "coho"
    assert data["provenance"]["weight_table"]
    assert "signals" in data["provenance"]["intermediate"]


def test_mixed_timezones_score_without_error(engine):
    context = EnvironmentalContext.from_dict(
        {
            "timestamp": "2025-08-15T08:00:00Z",
            "sunrise": "2025-08-15T05:30:00",
            "sunset": "2025-08-15T20:30:00",
            "wind": {"speed": 8, "direction": 270},
        }
    )
    for species_id in engine.available_species():
        result = engine.score(species_id, context)
        assert 0.0 <= result.total <= result.max_score


def test_infinite_wind_is_treated_as_missing(engine):
    context = make_context(wind=Wind(speed_kts=float("inf"), gust_kts=float("inf")))
    for species_id in engine.available_species():
        result = engine.score(species_id, context)
        assert 0.0 <= result.total <= result.max_score


def test_halibut_swell_gate_keeps_season_verdict(engine):
    rough = Swell(height_m=1.2, period_s=5.0)
    january_gated = engine.score("halibut", make_context(when=datetime(2025, 1, 15, 10, 0), swell=rough))
    january_open = engine.score("halibut", make_context(when=datetime(2025, 1, 15, 10, 0)))
    august_gated = engine.score("halibut", make_context(when=datetime(2025, 8, 15, 10, 0), swell=rough))
    assert january_gated.provenance.gatekeeper.name == "short_period_swell"
    assert not january_gated.is_in_season
    assert not january_open.is_in_season
    assert august_gated.is_in_season
    assert not august_gated.is_safe


def test_sea_state_memo_respects_wave_cap(engine):
    species = engine.loader.get_species("chinook")
    context = make_context(wind_kts=30.0, swell=Swell())
    state = EvaluationState(species, species.modes[0], context, KeywordClassifier(), species.safety_limits)
    assert sea_state_result(state, 5.0).wave_height_m == pytest.approx(1.543, abs=1e-3)
    assert sea_state_result(state, 1.0).wave_height_m == 1.0


def test_score_series_uses_injected_classifier(engine):
    contexts = [make_context(when=datetime(2025, 8, 15, h, 0)) for h in (6, 9)]
    results = engine.score_series("chinook", contexts, classifier=AlwaysMassiveClassifier())
    assert all(r.factors["bait_presence"].description == "massive" for r in results)


def test_lingcod_modes_are_distinct(engine):
    lingcod = engine.loader.get_species("lingcod")
    names = [mode.mode_name for mode in lingcod.modes]
    assert len(names) == len(set(names))
    july = engine.score("lingcod", make_context(when=datetime(2025, 7, 10, 9, 0)))
    november = engine.score("lingcod", make_context(when=datetime(2025, 11, 10, 9, 0)))
    assert (july.seasonal_mode, november.seasonal_mode) == ("standard", "standard_winter")
