import pytest
import requests
from unittest.mock import MagicMock

from solar_savings.config import EngineConfig
from solar_savings.models import Location, SolarCalculationInput


# ============ SHARED FIXTURES ============
@pytest.fixture
def offline_config():
    """No provider keys: every provider call takes the fallback path."""
    return EngineConfig()


@pytest.fixture
def provider_config():
    return EngineConfig(
        nrel_api_key="TEST_NREL_KEY",
        google_api_key="TEST_GOOGLE_KEY",
        openei_api_key="TEST_OPENEI_KEY",
        request_timeout=5.0,
    )


@pytest.fixture
def ny_location():
    return Location("350 5th Ave, New York, NY", 40.7128, -74.0060, "NY")


@pytest.fixture
def nj_location():
    return Location("1 W State St, Trenton, NJ", 40.2171, -74.7429, "NJ")


@pytest.fixture
def ca_location():
    return Location("200 N Spring St, Los Angeles, CA", 34.0522, -118.2437, "CA")


@pytest.fixture
def ny_input(ny_location):
    return SolarCalculationInput(
        location=ny_location,
        monthly_bill=120,
        roof_area=500,
        utility_rate=0.15,
    )


@pytest.fixture
def make_response():
    """
    Factory for fake requests responses.

    A status code of 400 or more makes raise_for_status raise HTTPError, the way
    a real response does.
    """
    def _make(json_data=None, status_code=200):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = json_data
        if status_code >= 400:
            response.raise_for_status.side_effect = requests.exceptions.HTTPError(
                f"{status_code} error", response=response
            )
        return response
    return _make
