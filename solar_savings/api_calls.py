"""
External data providers: NREL PVWatts, Google Solar API and OpenEI utility rates.

Every call returns a result object instead of raising, so callers can fall back
to table-driven estimates when a provider is down or not configured.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .config import PVWATTS_API_URL, EngineConfig
from .formatting import round_half_up
from .roof_engineering import (
    EngineeringResult,
    STANDARD_400W_PANEL,
    calculate_engineered_capacity,
    generate_engineering_summary,
)
from .state_data import US_AVERAGE_PRICING, STATE_PRICING, state_from_coordinates

logger = logging.getLogger(__name__)

SQFT_PER_SQM = 10.764
DEFAULT_SUNSHINE_HOURS = 1600
AC_DERATE = 0.86
RECOMMENDED_ROOF_FILL = 0.8
PVWATTS_MAX_CAPACITY_KW = 500000


@dataclass
class PVWattsResult:
    """Result from the NREL PVWatts API."""
    ac_annual: float
    solrad_annual: Optional[float]
    capacity_factor: Optional[float]
    success: bool
    error: Optional[str] = None


@dataclass
class SolarInsightsResult:
    """Result from Google Solar API building insights."""
    max_panel_count: int
    max_capacity_kw: float
    max_sunshine_hours: float
    roof_area_m2: float
    max_array_area_m2: float
    carbon_offset_factor_kg_per_mwh: float
    imagery_date: Optional[str]
    imagery_quality: Optional[str]
    postal_code: Optional[str]
    administrative_area: Optional[str]
    success: bool
    error: Optional[str] = None
    raw_data: Optional[Dict] = None


@dataclass
class EnhancedSolarInsights:
    """Roof-imagery data combined with the engineered layout."""
    max_panels: int
    roof_area_sqft: int
    roof_area_m2: int
    sunshine_hours: float
    engineering_analysis: EngineeringResult
    recommended_panel_count: int
    recommended_system_size_kw: float
    recommended_annual_production_kwh: int
    roof_utilization: float
    summary: str


@dataclass
class UtilityInfo:
    """Residential electricity rate and where it came from."""
    rate: float
    utility_name: str
    source: str


def _pvwatts_failure(error: str) -> PVWattsResult:
    return PVWattsResult(ac_annual=0, solrad_annual=None, capacity_factor=None,
                         success=False, error=error)


def fetch_pvwatts_production(
    latitude: float,
    longitude: float,
    system_capacity_kw: float,
    api_key: Optional[str],
    url: str = PVWATTS_API_URL,
    timeout: float = 10,
    azimuth: float = 180,
    tilt: Optional[float] = None,
    array_type: int = 1,
    module_type: int = 0,
    losses: float = 14
) -> PVWattsResult:
    """
    Get annual AC production for a system from NREL PVWatts.

    Args:
        latitude: Latitude
        longitude: Longitude
        system_capacity_kw: DC system size in kW
        api_key: NREL API key; a missing key fails without a request
        url: PVWatts endpoint
        timeout: Request timeout in seconds
        azimuth: Array azimuth (180 = south-facing)
        tilt: Array tilt; defaults to the latitude
        array_type: PVWatts array type (1 = fixed rack)
        module_type: PVWatts module type (0 = standard)
        losses: System losses (%)

    Returns:
        PVWattsResult; success is False with an error message on any failure
    """
    if not api_key:
        return _pvwatts_failure("NREL API key is missing")
    if not 0 < system_capacity_kw <= PVWATTS_MAX_CAPACITY_KW:
        return _pvwatts_failure(f"Invalid system capacity: {system_capacity_kw} kW")

    params = {
        'api_key': api_key,
        'lat': latitude,
        'lon': longitude,
        'system_capacity': system_capacity_kw,
        'azimuth': azimuth,
        'tilt': latitude if tilt is None else tilt,
        'array_type': array_type,
        'module_type': module_type,
        'losses': losses,
    }

    try:
        response = requests.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        data = response.json()

        errors = data.get('errors')
        if errors:
            error_msg = errors[0] if isinstance(errors, list) else errors
            return _pvwatts_failure(f"PVWatts API response error: {error_msg}")

        outputs = data['outputs']
        ac_annual = float(outputs['ac_annual'])
        if not math.isfinite(ac_annual) or ac_annual <= 0:
            return _pvwatts_failure(f"PVWatts returned no production ({ac_annual})")

        return PVWattsResult(
            ac_annual=ac_annual,
            solrad_annual=outputs.get('solrad_annual'),
            capacity_factor=outputs.get('capacity_factor'),
            success=True,
        )

    except requests.exceptions.Timeout:
        return _pvwatts_failure("Request timed out")
    except requests.exceptions.HTTPError as e:
        return _pvwatts_failure(f"NREL API error: {e.response.status_code}")
    except requests.exceptions.RequestException as e:
        return _pvwatts_failure(f"Network error: {str(e)}")
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        return _pvwatts_failure(f"Malformed PVWatts response: {str(e)}")


def _insights_failure(error: str) -> SolarInsightsResult:
    return SolarInsightsResult(
        max_panel_count=0, max_capacity_kw=0, max_sunshine_hours=0,
        roof_area_m2=0, max_array_area_m2=0, carbon_offset_factor_kg_per_mwh=0,
        imagery_date=None, imagery_quality=None, postal_code=None,
        administrative_area=None, success=False, error=error
    )


def get_building_insights(
    latitude: float,
    longitude: float,
    config: EngineConfig,
    required_quality: str = "LOW"
) -> SolarInsightsResult:
    """
    Get building solar insights from Google Solar API.

    Args:
        latitude: Latitude of the location
        longitude: Longitude of the location
        config: Engine config carrying the Google API key
        required_quality: Minimum imagery quality (LOW, MEDIUM, HIGH)

    Returns:
        SolarInsightsResult with roof and panel data
    """
    if not config.google_api_key:
        logger.warning("Google Solar API key not configured, skipping roof analysis")
        return _insights_failure("Google API key is missing")

    params = {
        "location.latitude": latitude,
        "location.longitude": longitude,
        "requiredQuality": required_quality,
        "key": config.google_api_key
    }

    try:
        response = requests.get(config.google_solar_url, params=params,
                                timeout=config.request_timeout)
        response.raise_for_status()
        data = response.json()

        if 'solarPotential' not in data:
            return _insights_failure("No solar potential data available for this location")

        solar = data['solarPotential']

        # Prefer the whole-array count; fall back to the largest panel config
        max_panels = solar.get('maxArrayPanelsCount', 0)
        if not max_panels:
            panel_configs = solar.get('solarPanelConfigs', [])
            if panel_configs:
                max_panels = max(c.get('panelsCount', 0) for c in panel_configs)
        panel_wattage = solar.get('panelCapacityWatts', STANDARD_400W_PANEL.watts)

        roof_area_m2 = solar.get('wholeRoofStats', {}).get('areaMeters2') \
            or solar.get('maxArrayAreaMeters2', 0)

        imagery_date = data.get('imageryDate', {})
        if imagery_date:
            imagery_date_str = (f"{imagery_date.get('year', 0)}-{imagery_date.get('month', 0):02d}"
                                f"-{imagery_date.get('day', 0):02d}")
        else:
            imagery_date_str = None

        return SolarInsightsResult(
            max_panel_count=max_panels,
            max_capacity_kw=max_panels * panel_wattage / 1000,
            max_sunshine_hours=solar.get('maxSunshineHoursPerYear', 0),
            roof_area_m2=roof_area_m2,
            max_array_area_m2=solar.get('maxArrayAreaMeters2', 0),
            carbon_offset_factor_kg_per_mwh=solar.get('carbonOffsetFactorKgPerMwh', 0),
            imagery_date=imagery_date_str,
            imagery_quality=data.get('imageryQuality'),
            postal_code=data.get('postalCode'),
            administrative_area=data.get('administrativeArea'),
            success=True,
            raw_data=data
        )

    except requests.exceptions.Timeout:
        return _insights_failure("Request timed out. Please try again.")
    except requests.exceptions.HTTPError as e:
        error_msg = f"API error: {e.response.status_code}"
        if e.response.status_code == 404:
            error_msg = "No solar data available for this location"
        elif e.response.status_code == 403:
            error_msg = "API key invalid or quota exceeded"
        return _insights_failure(error_msg)
    except requests.exceptions.RequestException as e:
        return _insights_failure(f"Network error: {str(e)}")
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        return _insights_failure(f"Malformed Solar API response: {str(e)}")


def get_enhanced_solar_insights(
    latitude: float,
    longitude: float,
    config: EngineConfig
) -> Optional[EnhancedSolarInsights]:
    """
    Roof-imagery insights refined by the roof engineering model.

    Args:
        latitude: Latitude of the location
        longitude: Longitude of the location
        config: Engine config carrying the Google API key

    Returns:
        EnhancedSolarInsights, or None when no roof data is available
    """
    insights = get_building_insights(latitude, longitude, config)
    if not insights.success:
        logger.warning("Roof analysis unavailable: %s", insights.error)
        return None
    if insights.max_panel_count <= 0:
        logger.info("Roof imagery reported no usable panels at %.4f, %.4f", latitude, longitude)
        return None

    roof_area_sqft = insights.roof_area_m2 * SQFT_PER_SQM
    sunshine_hours = insights.max_sunshine_hours or DEFAULT_SUNSHINE_HOURS

    analysis = calculate_engineered_capacity(roof_area_sqft, insights.max_panel_count, latitude)

    watts = STANDARD_400W_PANEL.watts
    panel_count = math.floor(analysis.max_panels_engineered * RECOMMENDED_ROOF_FILL)
    production = panel_count * watts * sunshine_hours / 1000 * AC_DERATE

    return EnhancedSolarInsights(
        max_panels=insights.max_panel_count,
        roof_area_sqft=round_half_up(roof_area_sqft),
        roof_area_m2=round_half_up(insights.roof_area_m2),
        sunshine_hours=sunshine_hours,
        engineering_analysis=analysis,
        recommended_panel_count=panel_count,
        recommended_system_size_kw=round_half_up(panel_count * watts / 1000, 1),
        recommended_annual_production_kwh=round_half_up(production),
        roof_utilization=panel_count / insights.max_panel_count * 100,
        summary=generate_engineering_summary(analysis),
    )


def _parse_openei_rate(item: Dict[str, Any]) -> Optional[float]:
    # energyratestructure is periods -> tiers -> {rate, adj, ...}
    structure = item.get('energyratestructure') or []
    if not structure or not structure[0]:
        return None
    tier = structure[0][0]
    rate = tier.get('rate')
    if rate is None:
        return None
    return float(rate) + float(tier.get('adj', 0) or 0)


def fetch_openei_rate(latitude: float, longitude: float, config: EngineConfig) -> Optional[UtilityInfo]:
    """
    Get the residential rate for a location from the OpenEI Utility Rate Database.

    Returns:
        UtilityInfo, or None if the provider is unavailable
    """
    if not config.openei_api_key:
        logger.warning("OpenEI API key not configured, using fallback rates")
        return None

    params = {
        'version': 'latest',
        'format': 'json',
        'api_key': config.openei_api_key,
        'lat': latitude,
        'lon': longitude,
        'sector': 'Residential',
        'detail': 'full',
        'limit': 1,
    }

    try:
        response = requests.get(config.openei_url, params=params, timeout=config.request_timeout)
        response.raise_for_status()
        items = response.json().get('items') or []
        if not items:
            return None

        rate = _parse_openei_rate(items[0])
        if rate is None or rate <= 0:
            return None

        return UtilityInfo(
            rate=rate,
            utility_name=items[0].get('utility') or 'Local Utility',
            source='OpenEI Utility Rate Database'
        )

    except requests.exceptions.RequestException as e:
        logger.warning("OpenEI API error: %s", e)
        return None
    except (ValueError, KeyError, TypeError, AttributeError, IndexError) as e:
        logger.warning("Malformed OpenEI response: %s", e)
        return None


def get_utility_rates(latitude: float, longitude: float, config: EngineConfig) -> UtilityInfo:
    """
    Residential electricity rate for a location.

    Tries OpenEI first, then the state table for the state the coordinates fall
    in, then the US average.

    Returns:
        UtilityInfo (never None)
    """
    info = fetch_openei_rate(latitude, longitude, config)
    if info is not None:
        return info

    state = state_from_coordinates(latitude, longitude)
    pricing = STATE_PRICING.get(state) if state else None
    if pricing is not None:
        return UtilityInfo(
            rate=pricing.utility_rate,
            utility_name=pricing.utility_provider or 'Local Utility',
            source=f"State Default ({pricing.name})"
        )

    return UtilityInfo(
        rate=US_AVERAGE_PRICING.utility_rate,
        utility_name='Local Utility',
        source='Default Fallback'
    )
