"""Calculation engine for the Solar Savings Calculator."""

from .api_calls import (
    fetch_pvwatts_production,
    get_building_insights,
    get_enhanced_solar_insights,
    fetch_openei_rate,
    get_utility_rates,
    PVWattsResult,
    SolarInsightsResult,
    EnhancedSolarInsights,
    UtilityInfo
)

from .commercial_srec import (
    PROJECT_TYPES,
    calculate_commercial_srec,
    calculate_commercial_roi,
    CommercialProjectInputs,
    CommercialSRECResult
)

from .config import EngineConfig

from .errors import InvalidInputError, SolarInputError

from .financial_calcs import (
    ANALYSIS_YEARS,
    calculate_incentives,
    calculate_lifetime_savings,
    calculate_solar_savings,
    estimate_system_size,
    estimate_usage_from_bill,
    calculate_offset_percentage,
    Incentives,
    SolarCalculationResult,
    SolarCalculator
)

from .formatting import format_currency, format_number, round_half_up

from .models import Location, SolarCalculationInput

from .production import (
    estimate_annual_production,
    estimate_peak_sun_hours,
    fallback_annual_production,
    ProductionEstimate
)

from .roof_engineering import (
    STANDARD_400W_PANEL,
    STANDARD_SETBACKS,
    STANDARD_SPACING,
    calculate_engineered_capacity,
    calculate_max_panels_with_spacing,
    calculate_optimal_spacing,
    calculate_usable_roof_area,
    generate_engineering_summary,
    EngineeringResult,
    PanelDimensions
)

from .srec_calcs import (
    calculate_best_srec_option,
    calculate_payback_with_srec,
    calculate_srec_income,
    format_srec_display,
    get_srec_education,
    SRECCalculationResult
)

from .srec_states import (
    SREC_STATES,
    get_cross_state_options,
    get_srec_data,
    is_srec_state
)

from .state_data import (
    STATE_PRICING,
    STATE_NAMES,
    FEDERAL_ITC_RATE,
    DEFAULT_COST_PER_WATT,
    get_electricity_rate,
    get_state_pricing,
    get_system_cost,
    resolve_state_code,
    state_from_coordinates,
    StatePricing
)
