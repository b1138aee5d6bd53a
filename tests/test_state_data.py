import pytest

from solar_savings.formatting import format_currency, format_number, round_half_up
from solar_savings.state_data import (
    STATE_NAMES,
    STATE_PRICING,
    US_AVERAGE_PRICING,
    get_electricity_rate,
    get_state_pricing,
    get_system_cost,
    resolve_state_code,
    state_from_coordinates,
)


# ======================= 1. PRICING TABLE =======================
def test_pricing_table_covers_states_dc_and_pr():
    assert len(STATE_PRICING) == 52
    assert 'DC' in STATE_PRICING
    assert 'PR' in STATE_PRICING
    assert STATE_NAMES['DC'] == 'District of Columbia'


def test_pricing_table_is_read_only():
    with pytest.raises(TypeError):
        STATE_PRICING['XX'] = US_AVERAGE_PRICING


def test_every_state_has_positive_prices():
    for code, pricing in STATE_PRICING.items():
        assert pricing.code == code
        assert pricing.cost_per_watt > 0
        assert pricing.utility_rate > 0


@pytest.mark.parametrize("state_code, expected_name, expected_cpw", [
    ("NY", "New York", 3.50),
    ("ny", "New York", 3.50),
    (" nj ", "New Jersey", 3.30),
    ("CA", "California", 4.00),
])
def test_get_state_pricing_normalizes_code(state_code, expected_name, expected_cpw):
    pricing = get_state_pricing(state_code)
    assert pricing.name == expected_name
    assert pricing.cost_per_watt == expected_cpw


@pytest.mark.parametrize("state_code", ["ZZ", "", None, "Atlantis"])
def test_unknown_state_falls_back_to_us_average(state_code):
    assert get_state_pricing(state_code) is US_AVERAGE_PRICING


def test_us_average_record():
    pricing = get_state_pricing('ZZ')
    assert pricing.avg_system_cost == 20000
    assert pricing.cost_per_watt == 2.85
    assert pricing.max_system_size_kw is None


def test_only_california_caps_system_size():
    capped = [code for code, p in STATE_PRICING.items() if p.max_system_size_kw]
    assert capped == ['CA']
    assert STATE_PRICING['CA'].max_system_size_kw == 10


def test_get_system_cost_uses_state_price_per_watt():
    assert get_system_cost('NY', 7.0) == 24500
    assert get_system_cost('NJ', 10.0) == 33000


def test_get_system_cost_unknown_state_uses_average_price():
    assert get_system_cost('ZZ', 10.0) == 28500


def test_get_electricity_rate():
    assert get_electricity_rate('CA') == 0.30
    assert get_electricity_rate('zz') == US_AVERAGE_PRICING.utility_rate


@pytest.mark.parametrize("state, expected", [
    ("nj", "NJ"),
    (" NY ", "NY"),
    ("New Jersey", "NJ"),
    ("california", "CA"),
    ("District of Columbia", "DC"),
    ("Puerto Rico", "PR"),
    ("ZZ", "ZZ"),
    ("Atlantis", "ATLANTIS"),
    ("", None),
    ("  ", None),
    (None, None),
])
def test_resolve_state_code(state, expected):
    assert resolve_state_code(state) == expected


def test_every_state_name_resolves_to_its_code():
    for code, name in STATE_NAMES.items():
        assert resolve_state_code(name) == code
        assert resolve_state_code(name.upper()) == code


# ======================= 2. COORDINATE LOOKUP =======================
@pytest.mark.parametrize("latitude, longitude, expected", [
    (40.7128, -74.0060, 'NY'),    # New York City
    (34.0522, -118.2437, 'CA'),   # Los Angeles
    (29.7604, -95.3698, 'TX'),    # Houston
    (25.7617, -80.1918, 'FL'),    # Miami
    (39.9526, -75.1652, None),    # Philadelphia, not covered
    (51.5074, -0.1278, None),     # London
])
def test_state_from_coordinates(latitude, longitude, expected):
    assert state_from_coordinates(latitude, longitude) == expected


# ======================= 3. ROUNDING & FORMATTING =======================
@pytest.mark.parametrize("value, digits, expected", [
    (1187.5, 0, 1188),
    (1186.5, 0, 1187),   # round() would give 1186
    (99.49, 0, 99),
    (-0.5, 0, 0),
    (2.25, 1, 2.3),
    (7.6457, 1, 7.6),
])
def test_round_half_up(value, digits, expected):
    assert round_half_up(value, digits) == pytest.approx(expected)


def test_round_half_up_returns_int_for_whole_numbers():
    assert isinstance(round_half_up(12.4), int)


@pytest.mark.parametrize("amount, expected", [
    (1234.4, "$1,234"),
    (1234.5, "$1,235"),
    (0, "$0"),
    (-500, "-$500"),
    (1250000, "$1,250,000"),
])
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_format_number():
    assert format_number(9543) == "9,543"
    assert format_number(12345.678, 1) == "12,345.7"
