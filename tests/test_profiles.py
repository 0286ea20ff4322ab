import pytest

from gas_response.exceptions import ParseError, ProfileParseError
from gas_response.profiles import GAS_PRESETS, ConcentrationProfile, parse_profile, preset_profile


def test_parse_profile_keeps_gas_name_and_order():
    profile = parse_profile("CO 5 25 50 75 100")
    assert profile.gas_name == "CO"
    assert profile.concentrations == (5.0, 25.0, 50.0, 75.0, 100.0)
    assert profile.exposure_count == 5


def test_parse_profile_accepts_any_whitespace():
    profile = parse_profile("  NH3\t0.5   2.5\n5 ")
    assert profile.gas_name == "NH3"
    assert profile.concentrations == (0.5, 2.5, 5.0)


def test_profile_str_reads_back():
    text = "Formaldehyde 0.3 0.75 1.5 3 6"
    profile = parse_profile(text)
    assert str(profile) == text
    assert parse_profile(str(profile)) == profile


@pytest.mark.parametrize("text", [None, "", "   ", "CO", "CO 5 abc", "CO 5 -1", "CO 0", "CO nan", "CO inf"])
def test_parse_profile_rejects_malformed_text(text):
    with pytest.raises(ProfileParseError):
        parse_profile(text)


def test_profile_parse_error_is_a_value_error_and_keeps_text():
    with pytest.raises(ValueError) as excinfo:
        parse_profile("CO five")
    assert excinfo.value.text == "CO five"
    assert "'five'" in str(excinfo.value)
    assert isinstance(excinfo.value, ParseError)


def test_every_preset_parses_to_its_own_gas():
    for name, text in GAS_PRESETS.items():
        profile = parse_profile(text)
        assert profile.gas_name == name, f"preset {name} names gas {profile.gas_name}"
        assert profile.exposure_count >= 5


def test_preset_lookup_is_case_insensitive():
    assert preset_profile("co") == ConcentrationProfile("CO", (5.0, 25.0, 50.0, 75.0, 100.0))
    with pytest.raises(ProfileParseError):
        preset_profile("Unobtainium")
