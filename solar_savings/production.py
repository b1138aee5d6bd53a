"""
Annual production estimates: PVWatts when available, peak-sun-hours otherwise.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .api_calls import fetch_pvwatts_production
from .config import EngineConfig
from .formatting import round_half_up
from .models import Location

logger = logging.getLogger(__name__)

SYSTEM_LOSSES = 0.14  # 14% total system losses (industry standard)
DAYS_PER_YEAR = 365

SOURCE_PROVIDER = "provider"
SOURCE_FALLBACK = "fallback"

# (max |latitude|, annual average peak sun hours), from NREL data patterns
_SUN_HOUR_BANDS = (
    (25, 5.5),  # FL, southern TX, southern CA
    (35, 5.0),  # Most of CA, TX and the South
    (40, 4.5),  # Central states
    (45, 4.0),  # Northern Midwest, mountain states
)
_NORTHERN_SUN_HOURS = 3.5


@dataclass(frozen=True)
class ProductionEstimate:
    """Annual AC production and which path produced it."""
    annual_kwh: int
    source: str
    error: Optional[str] = None


def estimate_peak_sun_hours(latitude: float) -> float:
    """Annual average peak sun hours per day for a latitude."""
    abs_lat = abs(latitude)
    for max_lat, hours in _SUN_HOUR_BANDS:
        if abs_lat <= max_lat:
            return hours
    return _NORTHERN_SUN_HOURS


def fallback_annual_production(system_size_kw: float, latitude: float) -> int:
    """
    Annual AC production from peak sun hours and fixed system losses.

    Args:
        system_size_kw: DC system size in kW
        latitude: Site latitude

    Returns:
        Annual production in whole kWh
    """
    daily = system_size_kw * estimate_peak_sun_hours(latitude) * (1 - SYSTEM_LOSSES)
    return round_half_up(daily * DAYS_PER_YEAR)


async def estimate_annual_production(
    system_size_kw: float,
    location: Location,
    config: Optional[EngineConfig] = None
) -> ProductionEstimate:
    """
    Annual production for a system, preferring NREL PVWatts data.

    Never raises for a provider problem: a missing key, HTTP error, network
    failure or malformed payload all resolve to the peak-sun-hours estimate.

    Args:
        system_size_kw: DC system size in kW
        location: Site location
        config: Provider settings; defaults to no providers

    Returns:
        ProductionEstimate tagged with its source
    """
    config = config or EngineConfig()

    if not config.nrel_api_key:
        logger.warning("NREL API key not configured, using fallback calculations")
        result = None
        error = "NREL API key is missing"
    else:
        result = await asyncio.to_thread(
            fetch_pvwatts_production,
            location.latitude,
            location.longitude,
            system_size_kw,
            config.nrel_api_key,
            url=config.pvwatts_url,
            timeout=config.request_timeout,
        )
        error = result.error

    if result is not None and result.success:
        logger.debug("PVWatts production for %.1f kW: %.0f kWh", system_size_kw, result.ac_annual)
        return ProductionEstimate(round_half_up(result.ac_annual), SOURCE_PROVIDER)

    if result is not None:
        logger.warning("PVWatts unavailable (%s), using fallback calculations", error)

    annual_kwh = fallback_annual_production(system_size_kw, location.latitude)
    logger.info("Fallback production for %.1f kW at latitude %.2f: %d kWh",
                system_size_kw, location.latitude, annual_kwh)
    return ProductionEstimate(annual_kwh, SOURCE_FALLBACK, error)
