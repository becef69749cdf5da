import copy
import json

import pytest

from ocean_fishing_score.species_loader import SpeciesConfigError, SpeciesLoader


def make_profiles():
    with open(SpeciesLoader().path, "r", encoding="utf-8") as fp:
        return json.load(fp)


def write_profiles(tmp_path, profiles):
    path = tmp_path / "profiles.json"
    path.write_text(json.dumps(profiles), encoding="utf-8")
    return str(path)


def test_packaged_profiles_load():
    loader = SpeciesLoader().load()
    assert set(loader.species_ids()) == {
        "chinook", "coho", "pink", "chum", "sockeye", "halibut", "lingcod", "rockfish", "crab", "spot_prawn",
    }
    assert loader.version
    for species in loader.get_all_species():
        assert species.max_score == 10.0
        assert species.unsafe_ceiling == 3.0
        for mode in species.modes:
            assert sum(mode.weights.values()) == pytest.approx(1.0, abs=1e-6)


def test_configs_are_read_only():
    chinook = SpeciesLoader().load().get_species("chinook")
    with pytest.raises(TypeError):
        chinook.modes[0].weights["solunar"] = 0.5


def test_habitat_lookup():
    loader = SpeciesLoader().load()
    assert {s.id for s in loader.get_species_by_habitat("estuary")} == {"pink", "chum"}
    assert loader.get_species("sturgeon") is None


def test_weights_must_close(tmp_path):
    profiles = make_profiles()
    profiles["species"]["coho"]["seasonal_modes"][0]["weights"]["seasonality"] = 0.5
    with pytest.raises(SpeciesConfigError):
        SpeciesLoader(write_profiles(tmp_path, profiles)).load()


def test_months_must_partition_year(tmp_path):
    profiles = make_profiles()
    profiles["species"]["chinook"]["seasonal_modes"][0]["months"] = [1, 2, 3]
    with pytest.raises(SpeciesConfigError):
        SpeciesLoader(write_profiles(tmp_path, profiles)).load()


def test_mode_names_must_be_unique(tmp_path):
    profiles = make_profiles()
    for mode in profiles["species"]["lingcod"]["seasonal_modes"]:
        if mode["name"] == "standard_winter":
            mode["name"] = "standard"
    with pytest.raises(SpeciesConfigError, match="duplicate seasonal mode names"):
        SpeciesLoader(write_profiles(tmp_path, profiles)).load()


@pytest.mark.parametrize(
    "section, entry",
    [
        ("modifiers", {"type": "lucky_socks"}),
        ("safety", {"type": "sea_monsters"}),
        ("gatekeepers", {"type": "full_moon"}),
    ],
)
def test_unknown_registry_names_rejected(tmp_path, section, entry):
    profiles = make_profiles()
    species = profiles["species"]["rockfish"]
    species[section] = list(species.get(section, [])) + [entry]
    with pytest.raises(SpeciesConfigError):
        SpeciesLoader(write_profiles(tmp_path, profiles)).load()


def test_unknown_safety_limit_rejected(tmp_path):
    profiles = make_profiles()
    profiles["species"]["pink"]["safety_limits"] = {"max_shark_count": 3}
    with pytest.raises(SpeciesConfigError):
        SpeciesLoader(write_profiles(tmp_path, profiles)).load()


def test_missing_file_raises(tmp_path):
    with pytest.raises(SpeciesConfigError):
        SpeciesLoader(str(tmp_path / "nope.json")).load()


def test_use_before_load_raises():
    with pytest.raises(SpeciesConfigError):
        SpeciesLoader().species_ids()


def test_parse_rejects_non_object():
    with pytest.raises(SpeciesConfigError):
        SpeciesLoader.parse([])


def test_parse_does_not_mutate_input():
    profiles = make_profiles()
    original = copy.deepcopy(profiles)
    SpeciesLoader.parse(profiles)
    assert profiles == original
