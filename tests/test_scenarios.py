"""End-to-end scoring scenarios against the packaged species profiles."""
import pytest

from ocean_fishing_score import (
    EnvironmentalContext,
    KeywordClassifier,
    ScoringEngine,
    SpeciesLoader,
    physics,
)
from ocean_fishing_score.bio_intel import BaitPresence

ALL_SPECIES = (
    "chinook", "coho", "pink", "chum", "sockeye", "halibut", "lingcod", "rockfish", "crab", "spot_prawn",
)


def make_payload(**overrides):
    payload = {
        "timestamp": "2025-08-15T08:00:00",
        "wind": {"speed": 8, "direction": 270, "gust": 10},
        "pressure": {"current": 1012},
        "cloud_cover": 50,
        "swell": {"height": 0.5, "period": 10},
        "tide": {"current_speed": 1.0, "is_rising": True, "water_temperature": 11},
    }
    payload.update(overrides)
    return payload


def make_context(**overrides):
    return EnvironmentalContext.from_dict(make_payload(**overrides))


@pytest.fixture(scope="module")
def engine():
    return ScoringEngine()


def test_wind_against_current_is_flagged(engine):
    interaction = physics.wind_current_interaction(0, 25, 180, 2)
    assert interaction.is_opposing
    assert interaction.score <= 0.2

    context = make_context(
        timestamp="2025-07-15T10:00:00",
        wind={"speed": 25, "direction": 0, "gust": 28},
        tide={"current_speed": 2, "current_direction": 180, "is_rising": False},
    )
    result = engine.score("lingcod", context)
    assert result.factors["wind_tide_safety"].score <= 0.2
    assert result.factors["wind_tide_safety"].description == "dangerous"
    assert any("Wind against current" in w for w in result.safety_warnings)
    assert not result.is_safe


def test_short_period_swell_closes_halibut(engine):
    result = engine.score("halibut", make_context(swell={"height": 1.0, "period": 5}))
    assert result.total == 0
    assert not result.is_safe
    assert result.is_in_season
    assert result.provenance.gatekeeper.name == "short_period_swell"


def test_herring_balls_lift_salmon_to_floor(engine):
    poor = make_context(
        timestamp="2025-01-20T12:00:00",
        wind={"speed": 18, "direction": 270, "gust": 22},
        pressure={"current": 1028},
        cloud_cover=0,
        precipitation=5,
        swell={"height": 1.4, "period": 7},
        tide={"current_speed": 3.0, "current_direction": 270, "is_rising": False, "water_temperature": 9},
        bio_intel_text="Herring balls everywhere off the point",
    )
    assert KeywordClassifier().classify_bait_presence(poor.bio_intel_text).level is BaitPresence.MASSIVE

    chinook = engine.score("chinook", poor)
    coho = engine.score("coho", poor)
    assert chinook.is_safe and coho.is_safe
    assert chinook.provenance.intermediate["signals"]["bait_override"]
    assert chinook.total >= 6.0
    assert coho.total >= 8.0
    assert chinook.recommendations[0].startswith("Massive bait reported")


def test_even_year_has_no_pink_run(engine):
    result = engine.score("pink", make_context(timestamp="2026-08-20T07:00:00"))
    assert result.total == 0
    assert not result.is_in_season


def test_halibut_near_slack(engine):
    context = make_context(tide={"current_speed": 0.4, "minutes_to_slack": 10, "is_rising": True})
    assert engine.score("halibut", context).factors["tidal_slope"].score >= 0.9


def test_scoring_is_deterministic(engine):
    context = make_context(bio_intel_text="some bait, a few pinks jumping")
    for species_id in ALL_SPECIES:
        assert engine.score(species_id, context) == engine.score(species_id, context)


@pytest.mark.parametrize("species_id", ALL_SPECIES)
@pytest.mark.parametrize(
    "payload",
    [
        {"timestamp": "2025-03-01T00:00:00"},
        make_payload(),
        make_payload(
            timestamp="2025-10-05T17:30:00",
            sunrise="2025-10-05T07:15:00",
            sunset="2025-10-05T18:45:00",
            wind={"speed": 45, "direction": 10, "gust": 60},
            precipitation=60,
            swell={"height": 4.5, "period": 6},
            tide={"current_speed": 6, "current_direction": 200, "tidal_range": 5.2},
            bio_intel_text="herring balls, orcas came through and the bite shut down",
        ),
    ],
)
def test_total_stays_in_range(engine, species_id, payload):
    result = engine.score(species_id, EnvironmentalContext.from_dict(payload))
    assert 0.0 <= result.total <= result.max_score


def test_weights_close_for_every_profile():
    for species in SpeciesLoader().load().get_all_species():
        for mode in species.modes:
            assert abs(sum(mode.weights.values()) - 1.0) < 1e-6


def test_safety_dominates_every_species(engine):
    storm = make_context(
        timestamp="2025-07-15T11:00:00",
        wind={"speed": 40, "direction": 0, "gust": 50},
        tide={"current_speed": 2.5, "current_direction": 180, "is_rising": True, "water_temperature": 12},
        bio_intel_text="herring balls everywhere, millions of pinks",
    )
    for species_id, result in engine.score_many(storm).items():
        if result.provenance.gatekeeper is not None and not result.is_in_season:
            assert result.total == 0, species_id
            continue
        assert not result.is_safe, species_id
        assert result.total <= 3.0, species_id


def test_gatekeeper_ignores_other_inputs(engine):
    for extra in ({}, {"bio_intel_text": "herring balls everywhere"}, {"wind": {"speed": 2}}):
        payload = make_payload(swell={"height": 1.5, "period": 4}, **extra)
        assert engine.score("halibut", EnvironmentalContext.from_dict(payload)).total == 0


def test_rockfish_conservation_area(engine):
    result = engine.score("rockfish", make_context(overrides={"in_conservation_area": True}))
    assert result.total == 0
    assert result.safety_warnings[0].startswith("Inside a Rockfish Conservation Area")
    assert result.recommendations == ["RCA closure - find an alternative location"]


def test_parallel_matches_sequential(engine):
    context = make_context(bio_intel_text="lots of rockfish on the reef")
    assert engine.score_many(context, max_workers=4) == engine.score_many(context)


def modifier_record(result, name):
    return next(m for m in result.provenance.modifiers if m.name == name)


def test_sockeye_closed_outside_fishery_window(engine):
    result = engine.score("sockeye", make_context(timestamp="2025-06-20T08:00:00"))
    assert result.total == 0
    assert result.is_safe
    assert not result.is_in_season
    assert result.provenance.gatekeeper.name == "fishery_window"


def test_sockeye_fishery_override(engine):
    opened = engine.score("sockeye", make_context(timestamp="2025-06-20T08:00:00", overrides={"fishery_open": True}))
    assert opened.provenance.gatekeeper is None
    assert opened.total > 0

    closed = engine.score("sockeye", make_context(overrides={"fishery_open": False}))
    assert closed.total == 0
    assert closed.provenance.gatekeeper.name == "fishery_window"


def test_commercial_opening_boosts_sockeye(engine):
    quiet = engine.score("sockeye", make_context())
    busy = engine.score("sockeye", make_context(bio_intel_text="Commercial opening today, seine fleet on the grounds"))
    assert busy.total > quiet.total
    assert busy.factors["bio_intel"].score == 1.0
    record = modifier_record(busy, "run_intel_multiplier")
    assert record.fired
    assert record.detail == "massive_run x1.5"
    assert not modifier_record(quiet, "run_intel_multiplier").fired


def test_hot_river_stacks_sockeye(engine):
    result = engine.score("sockeye", make_context(overrides={"river_temp_c": 20}))
    assert result.factors["thermal_blockade"].description == "blocked"
    assert result.provenance.intermediate["signals"]["stacking"] is True


def test_night_flood_soak_beats_day_ebb(engine):
    sun = {"sunrise": "2025-08-15T05:30:00", "sunset": "2025-08-15T20:30:00"}
    night = engine.score(
        "crab",
        make_context(timestamp="2025-08-15T20:00:00", tide={"current_speed": 1.0, "is_rising": True}, **sun),
    )
    day = engine.score(
        "crab",
        make_context(timestamp="2025-08-15T10:00:00", tide={"current_speed": 1.0, "is_rising": False}, **sun),
    )
    assert night.provenance.intermediate["nocturnal_flood"] == {"night_pct": 75, "is_flood": True}
    assert modifier_record(night, "nocturnal_flood").detail == "golden_window x1.3"
    assert modifier_record(day, "nocturnal_flood").detail == "day_ebb x0.9"
    assert night.total > day.total
    assert night.advisories[0].startswith("Males only")


def test_crab_haul_in_strong_wind_is_unsafe(engine):
    result = engine.score(
        "crab", make_context(timestamp="2025-01-10T09:00:00", wind={"speed": 22, "direction": 270, "gust": 26})
    )
    assert not result.is_safe
    assert result.is_in_season
    assert result.total <= 3.0
    assert result.provenance.safety_failures == ("retrieval",)
    assert result.safety_warnings[0].startswith("Unsafe wind 22 kts")


def test_spot_prawn_closed_in_july(engine):
    result = engine.score("spot_prawn", make_context(timestamp="2025-07-15T08:00:00"))
    assert result.total == 0
    assert result.is_safe
    assert not result.is_in_season
    assert result.provenance.gatekeeper.name == "season_window"


def test_spot_prawn_neap_opening_week(engine):
    result = engine.score(
        "spot_prawn",
        make_context(
            timestamp="2025-05-20T08:00:00",
            tide={"current_speed": 0.1, "is_rising": True, "tidal_range": 1.5},
        ),
    )
    assert result.is_safe
    assert result.is_in_season
    assert result.factors["catenary_drag"].description == "slack"
    assert result.factors["intra_season"].description == "opening_week_peak"
    assert result.factors["retrieval_safety"].description == "calm"
    assert modifier_record(result, "slack_window_multiplier").detail == "long x1.2"
    assert result.total >= 8.0


def test_spot_prawn_rough_water_gate(engine):
    result = engine.score(
        "spot_prawn",
        make_context(timestamp="2025-05-20T08:00:00", wind={"speed": 25, "direction": 270, "gust": 30}),
    )
    assert result.total == 0
    assert not result.is_safe
    assert result.is_in_season
    assert result.safety_warnings[0].startswith("Unsafe: wind 25 kts")


def test_spot_prawn_blowback_warning(engine):
    result = engine.score(
        "spot_prawn",
        make_context(timestamp="2025-05-20T08:00:00", tide={"current_speed": 0.9, "is_rising": True}),
    )
    assert result.factors["catenary_drag"].description == "severe"
    assert result.provenance.intermediate["signals"]["blowback"] == "severe"
    assert "Current too strong for safe retrieval - high gear loss risk" in result.safety_warnings
