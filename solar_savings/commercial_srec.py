"""
SREC modelling for commercial, industrial, utility-scale and community solar projects.

Adds scale pricing, portfolio bonuses, MACRS depreciation and cross-state market
comparison on top of the residential SREC figures.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .errors import InvalidInputError
from .formatting import round_half_up
from .srec_calcs import normalize_state_code
from .srec_states import KWH_PER_SREC, get_cross_state_options, get_srec_data

PROJECT_TYPES = ('commercial', 'industrial', 'utility_scale', 'community_solar')

# 5-year MACRS schedule (half-year convention spreads it over six years)
MACRS_SCHEDULE = (0.20, 0.32, 0.192, 0.1152, 0.1152, 0.0576)

# (minimum kW, price multiplier, volume bonus share)
_SIZE_TIERS = (
    (5000, 1.15, 0.08),
    (1000, 1.10, 0.05),
    (500, 1.05, 0.02),
)

_PROJECT_TYPE_MULTIPLIERS = {
    'utility_scale': 1.08,
    'industrial': 1.05,
    'community_solar': 1.03,
    'commercial': 1.0,
}

HIGH_VALUE_STATES = ('DC', 'MA', 'NJ', 'MD')
EMERGING_STATES = ('IL', 'VA')

_ADJACENT_STATES = {
    'PA': ('OH', 'WV', 'MD', 'NJ'),
    'OH': ('PA', 'WV', 'IN', 'KY', 'MI'),
    'MD': ('PA', 'VA', 'DC', 'DE'),
    'VA': ('MD', 'DC'),
    'NJ': ('PA',),
    'DE': ('MD', 'PA'),
}

# Regulatory risk of selling into each market, 0 (stable) to 1
_CROSS_STATE_RISK = {
    'DC': 0.1,
    'MA': 0.15,
    'MD': 0.2,
    'NJ': 0.25,
    'PA': 0.3,
    'DE': 0.3,
    'VA': 0.35,
    'IL': 0.4,
    'OH': 0.45,
    'IN': 0.5,
    'KY': 0.5,
    'MI': 0.5,
    'WV': 0.5,
}
DEFAULT_CROSS_STATE_RISK = 0.6

BASE_TRANSACTION_COST = 500     # $/year for cross-state sales
TRANSACTION_COST_PER_KW = 0.1
NON_ADJACENT_PREMIUM = 1.5
BEST_MARKET_SCORE_THRESHOLD = 50


@dataclass(frozen=True)
class CommercialProjectInputs:
    system_size_kw: float
    annual_production_kwh: float
    project_type: str
    state: str
    tax_rate: float                     # Corporate tax rate for depreciation
    project_cost: float = 0
    portfolio_size: int = 1             # Projects in the owner's portfolio


@dataclass(frozen=True)
class AcceleratedDepreciation:
    eligible: bool
    five_year_benefit: int
    total_tax_benefit: int


@dataclass(frozen=True)
class ScaleIncentives:
    volume_bonus: int
    aggregation_benefit: int
    portfolio_optimization: int


@dataclass(frozen=True)
class PortfolioImpact:
    diversification_benefit: float
    risk_reduction: float
    scalability_factor: float


@dataclass(frozen=True)
class MarketAnalysis:
    current_supply: str
    demand_trend: str
    price_volatility: str
    recommended_sell_timing: str


@dataclass(frozen=True)
class CommercialCrossStateOption:
    state: str
    state_name: str
    annual_income: int
    transportation_cost: int
    net_benefit: int
    risk_factor: float
    recommendation_score: float


@dataclass(frozen=True)
class CommercialSRECResult:
    is_eligible: bool
    project_type: str
    system_size_kw: float
    annual_production_kwh: float
    annual_srecs: float
    srec_value: float
    annual_srec_income: int
    lifetime_srec_income: int
    eligibility_years: int
    accelerated_depreciation: AcceleratedDepreciation
    scale_incentives: ScaleIncentives
    levelized_srec_value: int
    portfolio_impact: PortfolioImpact
    market_analysis: MarketAnalysis
    state: Optional[str] = None
    state_name: Optional[str] = None
    program_name: Optional[str] = None
    cross_state_options: Tuple[CommercialCrossStateOption, ...] = ()
    best_market_recommendation: Optional[str] = None
    notes: List[str] = field(default_factory=list)


def get_commercial_scale_factor(system_size_kw: float, project_type: str) -> float:
    """SREC price multiplier for project size and type."""
    scale_factor = 1.0
    for min_kw, multiplier, _ in _SIZE_TIERS:
        if system_size_kw >= min_kw:
            scale_factor = multiplier
            break
    return scale_factor * _PROJECT_TYPE_MULTIPLIERS[project_type]


def calculate_scale_incentives(system_size_kw: float, portfolio_size: int,
                               base_income: float) -> ScaleIncentives:
    volume_bonus = 0.0
    for min_kw, _, bonus_share in _SIZE_TIERS:
        if system_size_kw >= min_kw:
            volume_bonus = base_income * bonus_share
            break

    if portfolio_size >= 10:
        aggregation_benefit = base_income * 0.06
    elif portfolio_size >= 5:
        aggregation_benefit = base_income * 0.03
    else:
        aggregation_benefit = 0.0

    # Fewer transactions per certificate across a portfolio
    portfolio_optimization = base_income * 0.02 if portfolio_size > 1 else 0.0

    return ScaleIncentives(
        volume_bonus=round_half_up(volume_bonus),
        aggregation_benefit=round_half_up(aggregation_benefit),
        portfolio_optimization=round_half_up(portfolio_optimization),
    )


def calculate_accelerated_depreciation(project_cost: float, tax_rate: float) -> AcceleratedDepreciation:
    """
    MACRS tax benefit for a commercial project.

    Args:
        project_cost: Depreciable project cost ($)
        tax_rate: Corporate tax rate (e.g., 0.21)

    Returns:
        AcceleratedDepreciation; ineligible when cost or tax rate is zero
    """
    if project_cost == 0 or tax_rate == 0:
        return AcceleratedDepreciation(eligible=False, five_year_benefit=0, total_tax_benefit=0)

    five_year = sum(project_cost * rate for rate in MACRS_SCHEDULE[:5])
    total = sum(project_cost * rate for rate in MACRS_SCHEDULE)

    return AcceleratedDepreciation(
        eligible=True,
        five_year_benefit=round_half_up(five_year * tax_rate),
        total_tax_benefit=round_half_up(total * tax_rate),
    )


def calculate_portfolio_impact(portfolio_size: int, system_size_kw: float,
                               project_type: str) -> PortfolioImpact:
    diversification = min(portfolio_size * 0.02, 0.15)
    risk_reduction = min(portfolio_size * 0.01, 0.08)

    if project_type == 'utility_scale':
        scalability = 1.2
    elif system_size_kw >= 1000:
        scalability = 1.1
    else:
        scalability = 1.0

    return PortfolioImpact(
        diversification_benefit=round_half_up(diversification, 2),
        risk_reduction=round_half_up(risk_reduction, 2),
        scalability_factor=scalability,
    )


def generate_market_analysis(state_code: str, system_size_kw: float) -> MarketAnalysis:
    if state_code in HIGH_VALUE_STATES:
        analysis = MarketAnalysis('High competition', 'Strong', 'Medium',
                                  'Lock in long-term contracts')
    elif state_code in EMERGING_STATES:
        analysis = MarketAnalysis('Growing', 'Increasing', 'Medium-High',
                                  'Strategic timing around program changes')
    else:
        analysis = MarketAnalysis('Moderate', 'Stable', 'Low-Medium', 'Quarterly batches')

    if system_size_kw >= 5000:
        analysis = MarketAnalysis(analysis.current_supply, analysis.demand_trend,
                                  analysis.price_volatility,
                                  'Annual contracts with price floors')
    return analysis


def estimate_transportation_cost(home_state: str, target_state: str, system_size_kw: float) -> float:
    """Annual transaction cost of selling SRECs outside the home state."""
    cost = BASE_TRANSACTION_COST + system_size_kw * TRANSACTION_COST_PER_KW
    if target_state not in _ADJACENT_STATES.get(home_state, ()):
        cost *= NON_ADJACENT_PREMIUM
    return cost


def assess_cross_state_risk(state_code: str) -> float:
    return _CROSS_STATE_RISK.get(state_code, DEFAULT_CROSS_STATE_RISK)


def analyze_cross_state_options(inputs: CommercialProjectInputs,
                                home_state: str) -> List[CommercialCrossStateOption]:
    """
    Score every other market that accepts the home state's SRECs.

    Returns:
        Options sorted best first by recommendation score
    """
    scale_factor = get_commercial_scale_factor(inputs.system_size_kw, inputs.project_type)
    annual_srecs = inputs.annual_production_kwh / KWH_PER_SREC

    options = []
    for code in get_cross_state_options(home_state):
        if code == home_state:
            continue
        data = get_srec_data(code)
        annual_income = annual_srecs * data.value * scale_factor
        transport = estimate_transportation_cost(home_state, code, inputs.system_size_kw)
        net_benefit = annual_income - transport
        risk = assess_cross_state_risk(code)

        options.append(CommercialCrossStateOption(
            state=code,
            state_name=data.name,
            annual_income=round_half_up(annual_income),
            transportation_cost=round_half_up(transport),
            net_benefit=round_half_up(net_benefit),
            risk_factor=risk,
            recommendation_score=(net_benefit / 1000) * (1 - risk),
        ))

    return sorted(options, key=lambda o: o.recommendation_score, reverse=True)


def find_best_market(options: List[CommercialCrossStateOption]) -> str:
    if not options:
        return 'Sell in home state market'

    best = options[0]
    if best.recommendation_score > BEST_MARKET_SCORE_THRESHOLD:
        share = best.net_benefit / best.annual_income * 100
        return f"Consider {best.state_name} market for {share:.1f}% higher net returns"

    return 'Home state market recommended'


def generate_commercial_notes(state_code: str, project_type: str, system_size_kw: float) -> List[str]:
    notes = []

    if system_size_kw >= 5000:
        notes.append('Utility-scale pricing advantages available')
        notes.append('Consider long-term contracting strategies')
    elif system_size_kw >= 1000:
        notes.append('Commercial-scale volume bonuses apply')

    if project_type == 'community_solar':
        notes.append('Community solar programs may have additional SREC benefits')

    if state_code == 'IL':
        notes.append('M-RETS compliance required for Illinois Shines program')
        notes.append('Consider block pricing structure impacts')
    elif state_code == 'MA':
        notes.append('SMART program has declining block pricing')
        notes.append('Energy storage adder opportunities available')
    elif state_code == 'NJ':
        notes.append('SREC-II program has price volatility')
        notes.append('Consider SREC financing products')

    return notes


def calculate_commercial_srec(inputs: CommercialProjectInputs) -> CommercialSRECResult:
    """
    Full SREC model for a commercial-scale project.

    Args:
        inputs: Project size, production, type, state and tax position

    Returns:
        CommercialSRECResult; zeroed and ineligible outside SREC states

    Raises:
        InvalidInputError: for an unknown project type
    """
    if inputs.project_type not in PROJECT_TYPES:
        raise InvalidInputError('project_type', f"must be one of {', '.join(PROJECT_TYPES)}")

    state_code = normalize_state_code(inputs.state)
    srec_data = get_srec_data(state_code) if state_code else None

    if srec_data is None:
        return CommercialSRECResult(
            is_eligible=False,
            project_type=inputs.project_type,
            system_size_kw=inputs.system_size_kw,
            annual_production_kwh=inputs.annual_production_kwh,
            annual_srecs=0,
            srec_value=0,
            annual_srec_income=0,
            lifetime_srec_income=0,
            eligibility_years=0,
            accelerated_depreciation=AcceleratedDepreciation(False, 0, 0),
            scale_incentives=ScaleIncentives(0, 0, 0),
            levelized_srec_value=0,
            portfolio_impact=PortfolioImpact(0, 0, 1),
            market_analysis=MarketAnalysis('No data', 'No data', 'No data', 'Not applicable'),
        )

    annual_srecs = inputs.annual_production_kwh / KWH_PER_SREC
    srec_value = srec_data.value * get_commercial_scale_factor(inputs.system_size_kw,
                                                               inputs.project_type)

    base_income = annual_srecs * srec_value
    incentives = calculate_scale_incentives(inputs.system_size_kw, inputs.portfolio_size, base_income)
    total_income = base_income + incentives.volume_bonus + incentives.aggregation_benefit

    cross_state = analyze_cross_state_options(inputs, srec_data.code)

    return CommercialSRECResult(
        is_eligible=True,
        project_type=inputs.project_type,
        system_size_kw=inputs.system_size_kw,
        annual_production_kwh=inputs.annual_production_kwh,
        annual_srecs=round_half_up(annual_srecs, 1),
        srec_value=srec_value,
        annual_srec_income=round_half_up(total_income),
        lifetime_srec_income=round_half_up(total_income * srec_data.years),
        eligibility_years=srec_data.years,
        accelerated_depreciation=calculate_accelerated_depreciation(inputs.project_cost,
                                                                    inputs.tax_rate),
        scale_incentives=incentives,
        # Lifetime income per year of eligibility
        levelized_srec_value=round_half_up(total_income),
        portfolio_impact=calculate_portfolio_impact(inputs.portfolio_size, inputs.system_size_kw,
                                                    inputs.project_type),
        market_analysis=generate_market_analysis(srec_data.code, inputs.system_size_kw),
        state=srec_data.code,
        state_name=srec_data.name,
        program_name=srec_data.program,
        cross_state_options=tuple(cross_state),
        best_market_recommendation=find_best_market(cross_state),
        notes=generate_commercial_notes(srec_data.code, inputs.project_type, inputs.system_size_kw),
    )


def calculate_commercial_roi(
    project_cost: float,
    annual_electricity_savings: float,
    srec_result: CommercialSRECResult,
    incentives: float = 0
) -> Dict[str, float]:
    """
    Simple ROI and payback with and without SREC income.

    Depreciation tax benefits are deducted from the project cost along with
    incentives.

    Args:
        project_cost: Installed cost ($)
        annual_electricity_savings: Year-one electricity savings ($)
        srec_result: Output of calculate_commercial_srec
        incentives: Grants and credits deducted from cost ($)

    Returns:
        Dict with base_roi, srec_enhanced_roi, roi_improvement (percent) and
        payback_reduction (years), each rounded to 1 decimal
    """
    net_cost = project_cost - incentives - srec_result.accelerated_depreciation.total_tax_benefit
    total_benefit = annual_electricity_savings + srec_result.annual_srec_income

    if net_cost > 0:
        base_roi = annual_electricity_savings / net_cost * 100
        enhanced_roi = total_benefit / net_cost * 100
    else:
        base_roi = enhanced_roi = 0.0

    if annual_electricity_savings > 0 and total_benefit > 0:
        payback_reduction = net_cost / annual_electricity_savings - net_cost / total_benefit
    else:
        payback_reduction = 0.0

    return {
        'base_roi': round_half_up(base_roi, 1),
        'srec_enhanced_roi': round_half_up(enhanced_roi, 1),
        'roi_improvement': round_half_up(enhanced_roi - base_roi, 1),
        'payback_reduction': round_half_up(payback_reduction, 1),
    }
