"""
State-specific solar pricing, utility rates and net-metering limits.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Tuple

from .formatting import round_half_up

# Federal Investment Tax Credit (ITC)
FEDERAL_ITC_RATE = 0.30

# Flat installed cost used when no state is known
DEFAULT_COST_PER_WATT = 3.00


@dataclass(frozen=True)
class StatePricing:
    """Installed-cost and utility figures for one state or territory."""
    code: str
    name: str
    avg_system_cost: float            # Average cost for a 7 kW system
    cost_per_watt: float              # $/W installed
    battery_price_range: Tuple[float, float]  # (single battery, dual battery)
    utility_rate: float               # Average $/kWh
    labor_cost_index: float           # Relative to national average (1.0)
    utility_provider: Optional[str] = None
    incentives: Optional[str] = None
    max_system_size_kw: Optional[float] = None  # Net metering cap


# Source: 2024 installer averages and EIA State Electricity Profiles
STATE_PRICING = MappingProxyType({
    'AL': StatePricing('AL', 'Alabama', 18900, 2.70, (11000, 20000), 0.13, 0.85,
                       utility_provider='Alabama Power'),
    'AK': StatePricing('AK', 'Alaska', 23100, 3.30, (13000, 24000), 0.23, 1.25,
                       utility_provider='Chugach Electric'),
    'AZ': StatePricing('AZ', 'Arizona', 18200, 2.60, (10500, 19000), 0.13, 0.95,
                       utility_provider='APS (Arizona Public Service)',
                       incentives='State tax credit up to $1,000'),
    'AR': StatePricing('AR', 'Arkansas', 19600, 2.80, (11000, 20000), 0.11, 0.85,
                       utility_provider='Entergy Arkansas'),
    'CA': StatePricing('CA', 'California', 28000, 4.00, (15000, 30000), 0.30, 1.35,
                       utility_provider='PG&E',
                       incentives='SGIP battery rebates, NEM 3.0',
                       max_system_size_kw=10),
    'CO': StatePricing('CO', 'Colorado', 21000, 3.00, (12000, 22000), 0.13, 1.05,
                       utility_provider='Xcel Energy'),
    'CT': StatePricing('CT', 'Connecticut', 23800, 3.40, (13000, 24000), 0.22, 1.15,
                       utility_provider='Eversource',
                       incentives='Green Bank financing available'),
    'DE': StatePricing('DE', 'Delaware', 20300, 2.90, (11500, 21000), 0.13, 1.05,
                       utility_provider='Delmarva Power'),
    'DC': StatePricing('DC', 'District of Columbia', 24500, 3.50, (14000, 25000), 0.13, 1.20,
                       utility_provider='Pepco',
                       incentives='Solar for All program'),
    'FL': StatePricing('FL', 'Florida', 18900, 2.70, (11000, 20000), 0.13, 0.95,
                       utility_provider='Florida Power & Light (FPL)',
                       incentives='Property tax exemption'),
    'GA': StatePricing('GA', 'Georgia', 19600, 2.80, (11000, 20000), 0.13, 0.90,
                       utility_provider='Georgia Power'),
    'HI': StatePricing('HI', 'Hawaii', 26600, 3.80, (15000, 28000), 0.33, 1.40,
                       utility_provider='Hawaiian Electric (HECO)',
                       incentives='State tax credit 35%'),
    'ID': StatePricing('ID', 'Idaho', 19600, 2.80, (11000, 20000), 0.10, 0.90,
                       utility_provider='Idaho Power'),
    'IL': StatePricing('IL', 'Illinois', 21700, 3.10, (12000, 22000), 0.13, 1.05,
                       utility_provider='ComEd',
                       incentives='Illinois Shines program'),
    'IN': StatePricing('IN', 'Indiana', 20300, 2.90, (11500, 21000), 0.12, 0.95,
                       utility_provider='Duke Energy Indiana'),
    'IA': StatePricing('IA', 'Iowa', 20300, 2.90, (11500, 21000), 0.12, 0.95,
                       utility_provider='MidAmerican Energy',
                       incentives='State tax credit'),
    'KS': StatePricing('KS', 'Kansas', 19600, 2.80, (11000, 20000), 0.13, 0.90,
                       utility_provider='Evergy'),
    'KY': StatePricing('KY', 'Kentucky', 19600, 2.80, (11000, 20000), 0.11, 0.85,
                       utility_provider='Louisville Gas & Electric (LG&E)'),
    'LA': StatePricing('LA', 'Louisiana', 19600, 2.80, (11000, 20000), 0.11, 0.90,
                       utility_provider='Entergy Louisiana'),
    'ME': StatePricing('ME', 'Maine', 22400, 3.20, (12500, 23000), 0.17, 1.10,
                       utility_provider='Central Maine Power'),
    'MD': StatePricing('MD', 'Maryland', 21700, 3.10, (12000, 22000), 0.13, 1.10,
                       utility_provider='BGE (Baltimore Gas & Electric)',
                       incentives='State grant program'),
    'MA': StatePricing('MA', 'Massachusetts', 24500, 3.50, (14000, 25000), 0.23, 1.20,
                       utility_provider='National Grid',
                       incentives='SMART program, ConnectedSolutions'),
    'MI': StatePricing('MI', 'Michigan', 21000, 3.00, (12000, 22000), 0.17, 1.00,
                       utility_provider='DTE Energy'),
    'MN': StatePricing('MN', 'Minnesota', 21700, 3.10, (12000, 22000), 0.13, 1.05,
                       utility_provider='Xcel Energy',
                       incentives='Solar*Rewards program'),
    'MS': StatePricing('MS', 'Mississippi', 18900, 2.70, (11000, 20000), 0.12, 0.85,
                       utility_provider='Mississippi Power'),
    'MO': StatePricing('MO', 'Missouri', 19600, 2.80, (11000, 20000), 0.11, 0.90,
                       utility_provider='Ameren Missouri'),
    'MT': StatePricing('MT', 'Montana', 20300, 2.90, (11500, 21000), 0.11, 0.95,
                       utility_provider='NorthWestern Energy'),
    'NE': StatePricing('NE', 'Nebraska', 19600, 2.80, (11000, 20000), 0.11, 0.90,
                       utility_provider='Omaha Public Power District (OPPD)'),
    'NV': StatePricing('NV', 'Nevada', 18200, 2.60, (10500, 19000), 0.12, 1.00,
                       utility_provider='NV Energy'),
    'NH': StatePricing('NH', 'New Hampshire', 23100, 3.30, (13000, 24000), 0.20, 1.15,
                       utility_provider='Eversource'),
    'NJ': StatePricing('NJ', 'New Jersey', 23100, 3.30, (13000, 24000), 0.16, 1.15,
                       utility_provider='PSE&G',
                       incentives='SRECs, Successor Solar Incentive'),
    'NM': StatePricing('NM', 'New Mexico', 20300, 2.90, (11500, 21000), 0.13, 0.95,
                       utility_provider='PNM (Public Service Company of New Mexico)',
                       incentives='State tax credit 10%'),
    'NY': StatePricing('NY', 'New York', 24500, 3.50, (14000, 25000), 0.22, 1.25,
                       utility_provider='Con Edison',
                       incentives='NY-Sun program, tax credit'),
    'NC': StatePricing('NC', 'North Carolina', 19600, 2.80, (11000, 20000), 0.12, 0.90,
                       utility_provider='Duke Energy Carolinas',
                       incentives='Duke Energy rebates'),
    'ND': StatePricing('ND', 'North Dakota', 20300, 2.90, (11500, 21000), 0.10, 0.95,
                       utility_provider='Xcel Energy'),
    'OH': StatePricing('OH', 'Ohio', 20300, 2.90, (11500, 21000), 0.13, 0.95,
                       utility_provider='AEP Ohio'),
    'OK': StatePricing('OK', 'Oklahoma', 18900, 2.70, (11000, 20000), 0.11, 0.85,
                       utility_provider='OG&E'),
    'OR': StatePricing('OR', 'Oregon', 21700, 3.10, (12000, 22000), 0.11, 1.10,
                       utility_provider='Portland General Electric (PGE)',
                       incentives='Solar + Storage Rebate Program'),
    'PA': StatePricing('PA', 'Pennsylvania', 21700, 3.10, (12000, 22000), 0.14, 1.00,
                       utility_provider='PECO'),
    'PR': StatePricing('PR', 'Puerto Rico', 21000, 3.00, (12000, 22000), 0.22, 0.90,
                       utility_provider='LUMA Energy',
                       incentives='Net metering available'),
    'RI': StatePricing('RI', 'Rhode Island', 23800, 3.40, (13000, 24000), 0.22, 1.15,
                       utility_provider='Rhode Island Energy',
                       incentives='REF program'),
    'SC': StatePricing('SC', 'South Carolina', 19600, 2.80, (11000, 20000), 0.13, 0.90,
                       utility_provider='Dominion Energy SC',
                       incentives='State tax credit 25%'),
    'SD': StatePricing('SD', 'South Dakota', 19600, 2.80, (11000, 20000), 0.12, 0.90,
                       utility_provider='Black Hills Energy'),
    'TN': StatePricing('TN', 'Tennessee', 18900, 2.70, (11000, 20000), 0.11, 0.85,
                       utility_provider='TVA (Tennessee Valley Authority)'),
    'TX': StatePricing('TX', 'Texas', 18200, 2.60, (10500, 19000), 0.12, 0.90,
                       utility_provider='Oncor',
                       incentives='Property tax exemption'),
    'UT': StatePricing('UT', 'Utah', 18900, 2.70, (11000, 20000), 0.10, 0.95,
                       utility_provider='Rocky Mountain Power',
                       incentives='State tax credit'),
    'VT': StatePricing('VT', 'Vermont', 23100, 3.30, (13000, 24000), 0.18, 1.10,
                       utility_provider='Green Mountain Power'),
    'VA': StatePricing('VA', 'Virginia', 20300, 2.90, (11500, 21000), 0.12, 1.00,
                       utility_provider='Dominion Energy Virginia'),
    'WA': StatePricing('WA', 'Washington', 21000, 3.00, (12000, 22000), 0.10, 1.15,
                       utility_provider='Puget Sound Energy (PSE)',
                       incentives='Sales tax exemption'),
    'WV': StatePricing('WV', 'West Virginia', 19600, 2.80, (11000, 20000), 0.12, 0.85,
                       utility_provider='Appalachian Power'),
    'WI': StatePricing('WI', 'Wisconsin', 21000, 3.00, (12000, 22000), 0.15, 1.00,
                       utility_provider='We Energies'),
    'WY': StatePricing('WY', 'Wyoming', 19600, 2.80, (11000, 20000), 0.11, 0.90,
                       utility_provider='Rocky Mountain Power'),
})

# Returned for any code not in the table
US_AVERAGE_PRICING = StatePricing(
    'US', 'United States Average', 20000, 2.85, (11500, 21000), 0.15, 1.0
)

# State names for display
STATE_NAMES = MappingProxyType({code: p.name for code, p in STATE_PRICING.items()})

# Lower-cased full name -> code
_CODES_BY_NAME = MappingProxyType({name.lower(): code for code, name in STATE_NAMES.items()})

# Rough bounding boxes (lat_min, lat_max, lon_min, lon_max) for the largest markets
_STATE_BOXES = (
    ('CA', 32.5, 42.0, -124.5, -114.0),
    ('TX', 25.8, 36.5, -106.6, -93.5),
    ('FL', 24.4, 31.0, -87.6, -80.0),
    ('NY', 40.5, 45.0, -79.8, -71.9),
)


def get_state_pricing(state_code: str) -> StatePricing:
    """Get pricing for a state, with fallback to the US average."""
    if not state_code:
        return US_AVERAGE_PRICING
    return STATE_PRICING.get(state_code.strip().upper(), US_AVERAGE_PRICING)


def resolve_state_code(state: Optional[str]) -> Optional[str]:
    """
    Turn a two-letter code or a full state name into an upper-case code.

    Names are matched case-insensitively against the pricing table. Anything
    unrecognised comes back stripped and upper-cased so that lookups still
    fall through to the US average.

    Args:
        state: Code such as "nj" or name such as "New Jersey"

    Returns:
        Two-letter code, or None for an empty value
    """
    if not state or not state.strip():
        return None
    state = state.strip()
    if len(state) == 2:
        return state.upper()
    return _CODES_BY_NAME.get(state.lower(), state.upper())


def get_system_cost(state_code: str, system_size_kw: float) -> int:
    """
    Installed cost of a system at the state's $/W price.

    Args:
        state_code: Two-letter state code
        system_size_kw: System size in kW

    Returns:
        Cost in whole dollars
    """
    pricing = get_state_pricing(state_code)
    return round_half_up(system_size_kw * 1000 * pricing.cost_per_watt)


def get_electricity_rate(state_code: str) -> float:
    """Get electricity rate for a state, with fallback to the US average."""
    return get_state_pricing(state_code).utility_rate


def state_from_coordinates(latitude: float, longitude: float) -> Optional[str]:
    """
    Coarse state lookup from coordinates.

    Only the largest markets are covered; everything else returns None.
    Boxes are checked in order, so overlaps resolve to the first match.
    """
    for code, lat_min, lat_max, lon_min, lon_max in _STATE_BOXES:
        if lat_min <= latitude <= lat_max and lon_min <= longitude <= lon_max:
            return code
    return None
