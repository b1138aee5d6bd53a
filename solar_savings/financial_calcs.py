"""
Financial projection for a residential solar system.

Sizes the system from the monthly bill, prices it with state data, applies
incentives and SREC income, and projects payback, 20-year savings and ROI.
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .config import EngineConfig
from .errors import InvalidInputError
from .formatting import round_half_up
from .models import SolarCalculationInput
from .production import SYSTEM_LOSSES, estimate_annual_production, estimate_peak_sun_hours
from .srec_calcs import SRECCalculationResult, calculate_srec_income
from .state_data import (
    DEFAULT_COST_PER_WATT,
    FEDERAL_ITC_RATE,
    get_state_pricing,
    get_system_cost,
    resolve_state_code,
)

logger = logging.getLogger(__name__)

STATE_INCENTIVE_RATE = 0.05      # Share of system cost
UTILITY_REBATE_PER_KW = 100      # $ per kW installed
DEGRADATION_RATE = 0.005         # 0.5% annual panel degradation
ELECTRICITY_ESCALATION_RATE = 0.03
SREC_ESCALATION_RATE = 0.0       # SREC prices don't typically escalate
ANALYSIS_YEARS = 20
CO2_EMISSIONS_FACTOR = 0.0007   # Grid emissions factor


@dataclass(frozen=True)
class Incentives:
    """Incentives deducted from the installed cost."""
    federal: float
    state: float
    utility: float
    total: float


@dataclass(frozen=True)
class SolarCalculationResult:
    """Complete projection for one calculator request."""
    system_size_kw: float
    system_cost: float
    annual_production_kwh: int
    annual_savings: float                 # Electricity only, year one
    payback_period_years: float
    twenty_year_savings: int              # Electricity only
    co2_offset_tons: float                # Over 20 years
    roi_percent: float
    incentives: Incentives
    total_annual_savings: float           # Electricity + SREC, year one
    total_twenty_year_savings: int        # Electricity + SREC
    srec_data: Optional[SRECCalculationResult] = None
    net_cost: float = 0.0
    offset_percent: float = 0.0
    production_source: str = "fallback"
    yearly_savings: Tuple[float, ...] = ()
    cumulative_savings: Tuple[float, ...] = ()  # Net of the initial net cost

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict for persistence and JSON responses."""
        return asdict(self)


def estimate_usage_from_bill(monthly_bill: float, electricity_rate: float) -> float:
    """
    Estimate annual electricity usage from monthly bill.

    Args:
        monthly_bill: Average monthly electricity bill ($)
        electricity_rate: Electricity rate ($/kWh)

    Returns:
        Estimated annual usage in kWh
    """
    if electricity_rate <= 0:
        return 0
    monthly_usage = monthly_bill / electricity_rate
    return monthly_usage * 12


def calculate_offset_percentage(
    annual_production_kwh: float,
    annual_usage_kwh: float
) -> float:
    """
    Calculate what percentage of electricity usage is offset by solar.

    Args:
        annual_production_kwh: Annual solar production
        annual_usage_kwh: Annual electricity usage

    Returns:
        Offset percentage (0-100+, can exceed 100 if overproducing)
    """
    if annual_usage_kwh <= 0:
        return 0
    return (annual_production_kwh / annual_usage_kwh) * 100


def estimate_system_size(monthly_bill: float, utility_rate: float, latitude: float) -> float:
    """
    System size (kW) that covers the household's usage.

    Args:
        monthly_bill: Average monthly electricity bill ($)
        utility_rate: Electricity rate ($/kWh)
        latitude: Site latitude

    Returns:
        System size in kW, rounded to 1 decimal
    """
    annual_usage = estimate_usage_from_bill(monthly_bill, utility_rate)
    daily_usage = annual_usage / 365
    peak_sun_hours = estimate_peak_sun_hours(latitude)
    return round_half_up(daily_usage / (peak_sun_hours * (1 - SYSTEM_LOSSES)), 1)


def _year_factors(years: int, degradation_rate: float, escalation_rate: float) -> np.ndarray:
    elapsed = np.arange(years)
    return (1 - degradation_rate) ** elapsed * (1 + escalation_rate) ** elapsed


def calculate_lifetime_savings(
    annual_savings: float,
    years: int,
    degradation_rate: float,
    escalation_rate: float
) -> int:
    """
    Sum of a year-one value degraded and escalated over a number of years.

    Year n contributes annual_savings * (1 - degradation)^(n-1) * (1 + escalation)^(n-1).

    Args:
        annual_savings: Year-one value ($)
        years: Number of years
        degradation_rate: Annual production loss (e.g., 0.005)
        escalation_rate: Annual price increase (e.g., 0.03)

    Returns:
        Total in whole dollars
    """
    if years <= 0:
        return 0
    factors = _year_factors(years, degradation_rate, escalation_rate)
    return round_half_up(float(annual_savings * factors.sum()))


def calculate_incentives(system_cost: float, system_size_kw: float) -> Incentives:
    """Federal ITC, state incentive and utility rebate for a system."""
    federal = system_cost * FEDERAL_ITC_RATE
    state = system_cost * STATE_INCENTIVE_RATE
    utility = system_size_kw * UTILITY_REBATE_PER_KW
    return Incentives(federal=federal, state=state, utility=utility,
                      total=federal + state + utility)


def _validate(calc_input: SolarCalculationInput) -> None:
    checks = (
        ('monthly_bill', calc_input.monthly_bill),
        ('roof_area', calc_input.roof_area),
        ('utility_rate', calc_input.utility_rate),
        ('latitude', calc_input.location.latitude),
        ('longitude', calc_input.location.longitude),
    )
    for field, value in checks:
        if value is None or not math.isfinite(value):
            raise InvalidInputError(field, f"must be a finite number, got {value!r}")

    if calc_input.utility_rate <= 0:
        raise InvalidInputError('utility_rate', "must be greater than zero")
    if calc_input.monthly_bill < 0:
        raise InvalidInputError('monthly_bill', "must not be negative")
    if calc_input.roof_area < 0:
        raise InvalidInputError('roof_area', "must not be negative")


class SolarCalculator:
    """
    Solar savings calculator.

    Holds only its provider config; calls share no state and may run
    concurrently.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    async def calculate(self, calc_input: SolarCalculationInput) -> SolarCalculationResult:
        """
        Run the full projection for one request.

        Args:
            calc_input: Location, bill, roof area, utility rate and optional state

        Returns:
            SolarCalculationResult

        Raises:
            InvalidInputError: for a non-positive utility rate, a negative bill or
                roof area, or non-finite numbers
        """
        _validate(calc_input)

        location = calc_input.location
        # Pricing, the net metering cap and SREC lookup all key off this code
        state = resolve_state_code(calc_input.effective_state)

        system_size = estimate_system_size(calc_input.monthly_bill, calc_input.utility_rate,
                                           location.latitude)

        # Net metering caps
        if state:
            max_size = get_state_pricing(state).max_system_size_kw
            if max_size and system_size > max_size:
                logger.info("System size %.1f kW capped at %s net metering limit %.1f kW",
                            system_size, state, max_size)
                system_size = float(max_size)

        production = await estimate_annual_production(system_size, location, self.config)
        annual_production = production.annual_kwh

        if state:
            system_cost = get_system_cost(state, system_size)
        else:
            system_cost = system_size * 1000 * DEFAULT_COST_PER_WATT

        incentives = calculate_incentives(system_cost, system_size)
        net_cost = system_cost - incentives.total
        annual_electricity_savings = annual_production * calc_input.utility_rate

        srec_data = None
        srec_income = 0
        srec_years = 0
        if state:
            srec_data = calculate_srec_income(annual_production, state)
            if srec_data.is_eligible:
                srec_income = srec_data.annual_income
                srec_years = min(srec_data.eligibility_years, ANALYSIS_YEARS)
        total_annual_savings = annual_electricity_savings + srec_income

        if total_annual_savings > 0:
            payback_period = net_cost / total_annual_savings
        else:
            payback_period = float('inf')

        twenty_year_electricity = calculate_lifetime_savings(
            annual_electricity_savings, ANALYSIS_YEARS, DEGRADATION_RATE, ELECTRICITY_ESCALATION_RATE
        )
        twenty_year_srec = calculate_lifetime_savings(
            srec_income, srec_years, DEGRADATION_RATE, SREC_ESCALATION_RATE
        )
        total_twenty_year_savings = twenty_year_electricity + twenty_year_srec

        if net_cost > 0:
            roi_percent = (total_twenty_year_savings - net_cost) / net_cost * 100
        else:
            roi_percent = 0

        co2_offset = annual_production * ANALYSIS_YEARS * CO2_EMISSIONS_FACTOR / 1000

        yearly = (
            annual_electricity_savings
            * _year_factors(ANALYSIS_YEARS, DEGRADATION_RATE, ELECTRICITY_ESCALATION_RATE)
        )
        yearly[:srec_years] += srec_income * _year_factors(srec_years, DEGRADATION_RATE,
                                                           SREC_ESCALATION_RATE)
        cumulative = np.cumsum(yearly) - net_cost

        annual_usage = estimate_usage_from_bill(calc_input.monthly_bill, calc_input.utility_rate)

        return SolarCalculationResult(
            system_size_kw=system_size,
            system_cost=system_cost,
            annual_production_kwh=annual_production,
            annual_savings=annual_electricity_savings,
            payback_period_years=payback_period,
            twenty_year_savings=twenty_year_electricity,
            co2_offset_tons=co2_offset,
            roi_percent=roi_percent,
            incentives=incentives,
            total_annual_savings=total_annual_savings,
            total_twenty_year_savings=total_twenty_year_savings,
            srec_data=srec_data,
            net_cost=net_cost,
            offset_percent=calculate_offset_percentage(annual_production, annual_usage),
            production_source=production.source,
            yearly_savings=tuple(float(v) for v in yearly),
            cumulative_savings=tuple(float(v) for v in cumulative),
        )


async def calculate_solar_savings(
    calc_input: SolarCalculationInput,
    config: Optional[EngineConfig] = None
) -> SolarCalculationResult:
    """Run one projection with a throwaway calculator."""
    return await SolarCalculator(config).calculate(calc_input)
