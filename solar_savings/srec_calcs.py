"""
SREC income calculations for residential systems.
"""

import math
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from .formatting import round_half_up
from .srec_states import (
    KWH_PER_SREC,
    STATE_CODES,
    SRECAssociation,
    get_cross_state_options,
    get_srec_data,
)


@dataclass(frozen=True)
class SRECCalculationResult:
    """SREC income projection for one state market."""
    is_eligible: bool
    state_code: Optional[str]
    state_name: Optional[str]
    program_name: Optional[str]
    annual_production_kwh: float
    annual_srecs: float        # Rounded to 1 decimal
    srec_value: float          # $/SREC
    annual_income: int
    lifetime_income: int       # Over the eligibility period
    eligibility_years: int
    monthly_income: int
    associations: Tuple[SRECAssociation, ...] = ()
    cross_state_options: Optional[Tuple[str, ...]] = None
    notes: Optional[str] = None
    uses_mrets: Optional[bool] = None


def normalize_state_code(state: str) -> Optional[str]:
    """
    Turn a state code or full state name into a two-letter code.

    Args:
        state: "nj", "NJ", "New Jersey", ...

    Returns:
        Upper-case code, or None if the name is not recognised
    """
    if not state:
        return None
    state = state.strip()
    if len(state) == 2:
        return state.upper()
    return STATE_CODES.get(state.lower())


def _ineligible_result(state_code: Optional[str]) -> SRECCalculationResult:
    return SRECCalculationResult(
        is_eligible=False,
        state_code=state_code,
        state_name=None,
        program_name=None,
        annual_production_kwh=0,
        annual_srecs=0,
        srec_value=0,
        annual_income=0,
        lifetime_income=0,
        eligibility_years=0,
        monthly_income=0,
    )


def calculate_srec_income(annual_production_kwh: float, state: str) -> SRECCalculationResult:
    """
    Calculate SREC income for a system in the given state.

    Args:
        annual_production_kwh: Annual AC production in kWh
        state: State code or full state name

    Returns:
        SRECCalculationResult; all figures are zero when the state has no program
    """
    state_code = normalize_state_code(state)
    srec_data = get_srec_data(state_code) if state_code else None
    if srec_data is None:
        return _ineligible_result(state_code)

    annual_srecs = annual_production_kwh / KWH_PER_SREC
    annual_income = round_half_up(annual_srecs * srec_data.value)
    lifetime_income = round_half_up(annual_income * srec_data.years)

    cross_state_options = get_cross_state_options(srec_data.code)

    return SRECCalculationResult(
        is_eligible=True,
        state_code=srec_data.code,
        state_name=srec_data.name,
        program_name=srec_data.program,
        annual_production_kwh=annual_production_kwh,
        annual_srecs=round_half_up(annual_srecs, 1),
        srec_value=srec_data.value,
        annual_income=annual_income,
        lifetime_income=lifetime_income,
        eligibility_years=srec_data.years,
        monthly_income=round_half_up(annual_income / 12),
        associations=srec_data.associations,
        cross_state_options=tuple(cross_state_options) if len(cross_state_options) > 1 else None,
        notes=srec_data.notes,
        uses_mrets=srec_data.uses_mrets,
    )


def calculate_best_srec_option(annual_production_kwh: float, home_state: str) -> SRECCalculationResult:
    """
    Pick the market that pays the most for a home state's SRECs.

    Ties keep the home state.

    Args:
        annual_production_kwh: Annual AC production in kWh
        home_state: State code or full state name where the system is installed

    Returns:
        SRECCalculationResult for the best market
    """
    home_result = calculate_srec_income(annual_production_kwh, home_state)
    if not home_result.is_eligible or not home_result.cross_state_options:
        return home_result

    best_result = home_result
    for option in home_result.cross_state_options:
        if option == home_result.state_code:
            continue
        option_result = calculate_srec_income(annual_production_kwh, option)
        if option_result.annual_income > best_result.annual_income:
            best_result = replace(
                option_result,
                notes=f"Best value: Sell {home_result.state_code} SRECs in {option} market",
            )

    return best_result


def calculate_payback_with_srec(
    system_cost: float,
    annual_electricity_savings: float,
    srec_annual_income: float,
    incentives: float = 0
) -> Dict[str, float]:
    """
    Compare simple payback with and without SREC income.

    Args:
        system_cost: Installed cost ($)
        annual_electricity_savings: Year-one electricity savings ($)
        srec_annual_income: Year-one SREC income ($)
        incentives: Total incentives deducted from cost ($)

    Returns:
        Dict with payback_without_srec, payback_with_srec and payback_reduction,
        each in years rounded to 1 decimal
    """
    net_cost = system_cost - incentives
    without_srec = _payback_years(net_cost, annual_electricity_savings)
    with_srec = _payback_years(net_cost, annual_electricity_savings + srec_annual_income)

    # No reduction can be quoted against an infinite baseline
    if math.isinf(without_srec) or math.isinf(with_srec):
        reduction = 0.0
    else:
        reduction = round_half_up(without_srec - with_srec, 1)

    return {
        'payback_without_srec': _round_years(without_srec),
        'payback_with_srec': _round_years(with_srec),
        'payback_reduction': reduction,
    }


def _payback_years(net_cost: float, annual_savings: float) -> float:
    if annual_savings <= 0:
        return float('inf')
    return net_cost / annual_savings


def _round_years(years: float) -> float:
    return years if math.isinf(years) else round_half_up(years, 1)


def get_srec_education() -> Dict[str, object]:
    """Static explainer text shown next to SREC results."""
    return {
        'title': "What are SRECs?",
        'description': (
            "Solar Renewable Energy Certificates (SRECs) are earned for every 1,000 kWh "
            "(1 MWh) of solar electricity your system produces. You can sell these "
            "certificates for additional income beyond your electricity savings."
        ),
        'how_it_works': [
            "Your solar system generates electricity",
            "For every 1,000 kWh produced, you earn 1 SREC",
            "SRECs are sold to utilities to meet renewable energy requirements",
            "You receive payment for each SREC sold",
        ],
        'selling_process': [
            "Register your system with your state program",
            "Track production through monitoring",
            "Sell SRECs through a broker or aggregator",
            "Receive quarterly or annual payments",
        ],
    }


def format_srec_display(result: SRECCalculationResult) -> Dict[str, str]:
    """Display strings for an SREC result."""
    if not result.is_eligible:
        return {
            'income_text': "Not eligible for SREC income",
            'production_text': "",
            'program_text': "",
            'value_text': "",
        }

    return {
        'income_text': f"${result.annual_income:,}/year",
        'production_text': f"{result.annual_srecs:g} SRECs/year",
        'program_text': result.program_name or "",
        'value_text': f"${result.srec_value:g}/SREC",
    }
