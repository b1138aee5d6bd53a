import math

import pytest
import requests
from unittest.mock import patch

from solar_savings.api_calls import (
    fetch_pvwatts_production,
    get_building_insights,
    get_enhanced_solar_insights,
    get_utility_rates,
)
from solar_savings.config import PVWATTS_API_URL, EngineConfig
from solar_savings.roof_engineering import calculate_engineered_capacity

MOCK_BUILDING_INSIGHTS = {
    "name": "buildings/ChIJ123",
    "center": {"latitude": 40.7128, "longitude": -74.0060},
    "imageryDate": {"year": 2023, "month": 4, "day": 9},
    "imageryQuality": "HIGH",
    "postalCode": "10001",
    "administrativeArea": "NY",
    "solarPotential": {
        "maxArrayPanelsCount": 40,
        "panelCapacityWatts": 400,
        "maxArrayAreaMeters2": 80.5,
        "maxSunshineHoursPerYear": 1500,
        "carbonOffsetFactorKgPerMwh": 428.9,
        "wholeRoofStats": {"areaMeters2": 150},
        "solarPanelConfigs": [{"panelsCount": 4}, {"panelsCount": 40}],
    },
}

MOCK_OPENEI_RESPONSE = {
    "items": [{
        "utility": "Consolidated Edison Co-NY Inc",
        "name": "SC-1 Residential",
        "energyratestructure": [[{"rate": 0.20, "adj": 0.03, "unit": "kWh"}]],
    }]
}


# ======================= 1. CONFIG =======================
def test_config_defaults():
    config = EngineConfig()
    assert config.nrel_api_key is None
    assert config.pvwatts_url == PVWATTS_API_URL
    assert config.request_timeout == 10.0


def test_config_from_env():
    config = EngineConfig.from_env({
        "NREL_API_KEY": "nrel",
        "GOOGLE_API_KEY": "google",
        "OPENEI_API_KEY": "",
    })
    assert config.nrel_api_key == "nrel"
    assert config.google_api_key == "google"
    assert config.openei_api_key is None


def test_config_from_env_accepts_legacy_pvwatts_key():
    assert EngineConfig.from_env({"PVWATTS_API_KEY": "legacy"}).nrel_api_key == "legacy"


def test_config_is_frozen():
    with pytest.raises(AttributeError):
        EngineConfig().nrel_api_key = "changed"


# ======================= 2. PVWATTS =======================
def test_pvwatts_success(make_response):
    payload = {"outputs": {"ac_annual": 9180.4, "solrad_annual": 4.71, "capacity_factor": 17.5}}
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        mock_get.return_value = make_response(payload)
        result = fetch_pvwatts_production(40.7128, -74.0060, 6.0, "KEY")

    assert result.success
    assert result.ac_annual == pytest.approx(9180.4)
    assert result.solrad_annual == 4.71
    assert result.capacity_factor == 17.5

    _, kwargs = mock_get.call_args
    assert kwargs['params']['tilt'] == 40.7128         # Tilt defaults to latitude
    assert kwargs['params']['array_type'] == 1
    assert kwargs['timeout'] == 10


@pytest.mark.parametrize("api_key, capacity", [
    (None, 6.0),
    ("", 6.0),
    ("KEY", 0),
    ("KEY", -1),
    ("KEY", 600000),
])
def test_pvwatts_rejects_without_request(api_key, capacity):
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        result = fetch_pvwatts_production(40.7, -74.0, capacity, api_key)

    mock_get.assert_not_called()
    assert not result.success
    assert result.ac_annual == 0


def test_pvwatts_non_finite_production(make_response):
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        mock_get.return_value = make_response({"outputs": {"ac_annual": "NaN"}})
        result = fetch_pvwatts_production(40.7, -74.0, 6.0, "KEY")

    assert not result.success
    assert "no production" in result.error


# ======================= 3. BUILDING INSIGHTS =======================
def test_building_insights_success(provider_config, make_response):
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        mock_get.return_value = make_response(MOCK_BUILDING_INSIGHTS)
        result = get_building_insights(40.7128, -74.0060, provider_config)

    assert result.success
    assert result.max_panel_count == 40
    assert result.max_capacity_kw == pytest.approx(16.0)
    assert result.max_sunshine_hours == 1500
    assert result.roof_area_m2 == 150
    assert result.max_array_area_m2 == 80.5
    assert result.imagery_date == "2023-04-09"
    assert result.imagery_quality == "HIGH"
    assert result.postal_code == "10001"
    assert result.administrative_area == "NY"

    _, kwargs = mock_get.call_args
    assert kwargs['params']['key'] == "TEST_GOOGLE_KEY"
    assert kwargs['params']['requiredQuality'] == "LOW"


def test_building_insights_falls_back_to_panel_configs(provider_config, make_response):
    payload = {"solarPotential": {"solarPanelConfigs": [{"panelsCount": 4}, {"panelsCount": 30}],
                                  "maxArrayAreaMeters2": 60}}
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        mock_get.return_value = make_response(payload)
        result = get_building_insights(40.7128, -74.0060, provider_config)

    assert result.max_panel_count == 30
    assert result.roof_area_m2 == 60                 # No whole-roof stats
    assert result.imagery_date is None


@pytest.mark.parametrize("status_code, expected_error", [
    (403, "API key invalid or quota exceeded"),
    (404, "No solar data available for this location"),
    (500, "API error: 500"),
])
def test_building_insights_http_errors(provider_config, make_response, status_code,
                                       expected_error):
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        mock_get.return_value = make_response({}, status_code=status_code)
        result = get_building_insights(40.7128, -74.0060, provider_config)

    assert not result.success
    assert result.error == expected_error


def test_building_insights_without_solar_potential(provider_config, make_response):
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        mock_get.return_value = make_response({"name": "buildings/empty"})
        result = get_building_insights(40.7128, -74.0060, provider_config)

    assert not result.success


def test_building_insights_without_key(offline_config):
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        result = get_building_insights(40.7128, -74.0060, offline_config)

    mock_get.assert_not_called()
    assert result.error == "Google API key is missing"


# ======================= 4. ENHANCED INSIGHTS =======================
def test_enhanced_solar_insights(provider_config, make_response):
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        mock_get.return_value = make_response(MOCK_BUILDING_INSIGHTS)
        insights = get_enhanced_solar_insights(40.7128, -74.0060, provider_config)

    engineered = calculate_engineered_capacity(150 * 10.764, 40, 40.7128)
    expected_panels = math.floor(engineered.max_panels_engineered * 0.8)

    assert insights.max_panels == 40
    assert insights.roof_area_sqft == 1615
    assert insights.roof_area_m2 == 150
    assert insights.sunshine_hours == 1500
    assert insights.engineering_analysis == engineered
    assert insights.recommended_panel_count == expected_panels
    assert insights.recommended_system_size_kw == pytest.approx(expected_panels * 0.4, abs=0.05)
    assert insights.recommended_annual_production_kwh == round(
        expected_panels * 400 * 1500 / 1000 * 0.86
    )
    assert insights.roof_utilization == pytest.approx(expected_panels / 40 * 100)
    assert insights.summary.startswith("ENGINEERING ANALYSIS:")


def test_enhanced_insights_default_sunshine_hours(provider_config, make_response):
    payload = {"solarPotential": {"maxArrayPanelsCount": 40, "wholeRoofStats": {"areaMeters2": 150}}}
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        mock_get.return_value = make_response(payload)
        insights = get_enhanced_solar_insights(40.7128, -74.0060, provider_config)

    assert insights.sunshine_hours == 1600


def test_enhanced_insights_none_when_no_panels(provider_config, make_response):
    payload = {"solarPotential": {"maxArrayPanelsCount": 0, "wholeRoofStats": {"areaMeters2": 150}}}
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        mock_get.return_value = make_response(payload)
        assert get_enhanced_solar_insights(40.7128, -74.0060, provider_config) is None


def test_enhanced_insights_none_when_provider_down(provider_config):
    with patch('solar_savings.api_calls.requests.get',
               side_effect=requests.exceptions.ConnectionError("down")):
        assert get_enhanced_solar_insights(40.7128, -74.0060, provider_config) is None


# ======================= 5. UTILITY RATES =======================
def test_utility_rates_from_openei(provider_config, make_response):
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        mock_get.return_value = make_response(MOCK_OPENEI_RESPONSE)
        info = get_utility_rates(40.7128, -74.0060, provider_config)

    assert info.rate == pytest.approx(0.23)
    assert info.utility_name == "Consolidated Edison Co-NY Inc"
    assert info.source == "OpenEI Utility Rate Database"


def test_utility_rates_state_default_without_key(offline_config):
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        info = get_utility_rates(40.7128, -74.0060, offline_config)

    mock_get.assert_not_called()
    assert info.rate == 0.22
    assert info.utility_name == "Con Edison"
    assert info.source == "State Default (New York)"


@pytest.mark.parametrize("payload, status_code", [
    ({"items": []}, 200),
    ({"items": [{"utility": "No Rates Co", "energyratestructure": []}]}, 200),
    ({"items": [{"energyratestructure": [[{"adj": 0.01}]]}]}, 200),
    (None, 500),
])
def test_utility_rates_fall_back_to_state(provider_config, make_response, payload, status_code):
    with patch('solar_savings.api_calls.requests.get') as mock_get:
        mock_get.return_value = make_response(payload, status_code=status_code)
        info = get_utility_rates(34.0522, -118.2437, provider_config)

    assert info.rate == 0.30
    assert info.source == "State Default (California)"


def test_utility_rates_default_outside_known_states(offline_config):
    info = get_utility_rates(39.9526, -75.1652, offline_config)

    assert info.rate == 0.15
    assert info.utility_name == "Local Utility"
    assert info.source == "Default Fallback"
