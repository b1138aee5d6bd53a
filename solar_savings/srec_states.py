"""
SREC program data for states with a solar renewable energy certificate market.

1 SREC = 1 MWh = 1,000 kWh of solar production in every state.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Optional, Tuple

KWH_PER_SREC = 1000


@dataclass(frozen=True)
class SRECAssociation:
    """Trade group or broker a homeowner can contact about selling SRECs."""
    name: str
    url: str


@dataclass(frozen=True)
class SRECStateData:
    """SREC program details for one state."""
    code: str
    name: str
    program: str
    value: float                      # Average $/SREC
    value_range: Tuple[float, float]  # Min-max $/SREC
    years: int                        # Eligibility period
    production_factor: float          # SRECs per kW per year
    associations: Tuple[SRECAssociation, ...]
    cross_state_eligible: Tuple[str, ...] = ()  # Markets that accept this state's SRECs
    uses_mrets: Optional[bool] = None  # Issued through M-RETS
    notes: Optional[str] = None


SREC_STATES = MappingProxyType({
    'DE': SRECStateData(
        'DE', 'Delaware', 'Delaware SREC', 30, (20, 40), 20, 1.3,
        (SRECAssociation('Solar Delaware', 'https://solardelaware.org/'),
         SRECAssociation('MSSIA', 'https://mssia.org/')),
    ),
    'IL': SRECStateData(
        'IL', 'Illinois', 'Illinois Shines', 80, (70, 90), 15, 1.2,
        (SRECAssociation('Illinois Solar Energy Association', 'https://illinoissolar.org/'),
         SRECAssociation('Midwest Renewable Energy Association', 'https://midwestrenew.org/')),
        uses_mrets=True,
        notes='M-RETS compliance required',
    ),
    'IN': SRECStateData(
        'IN', 'Indiana', 'Indiana SREC', 20, (10, 30), 15, 1.2,
        (SRECAssociation('Indiana Renewable Energy Association',
                         'http://www.indianadg.net/indiana-renewable-energy-association-inrea/'),
         SRECAssociation('IndianaDG', 'http://www.indianadg.net/')),
        cross_state_eligible=('OH',),
    ),
    'KY': SRECStateData(
        'KY', 'Kentucky', 'Kentucky SREC', 15, (10, 20), 15, 1.3,
        (SRECAssociation('Kentucky Solar Energy Society', 'https://www.kyses.org/'),
         SRECAssociation('KYSEIA', 'https://kyseia.org/')),
        cross_state_eligible=('OH',),
    ),
    'MD': SRECStateData(
        'MD', 'Maryland', 'Maryland SREC', 65, (50, 80), 20, 1.3,
        (SRECAssociation('Maryland Clean Energy Center', 'https://www.mdcleanenergy.org/'),
         SRECAssociation('ChESSA', 'https://chessa.org/')),
    ),
    'MA': SRECStateData(
        'MA', 'Massachusetts', 'SMART Program', 250, (200, 300), 10, 1.1,
        (SRECAssociation('NESEA', 'https://nesea.org/'),),
        notes='Solar Massachusetts Renewable Target program',
    ),
    'MI': SRECStateData(
        'MI', 'Michigan', 'Michigan SREC', 20, (10, 30), 15, 1.1,
        (SRECAssociation('MREA', 'https://midwestrenew.org/'),),
        cross_state_eligible=('OH',),
    ),
    # NH and RI figures are estimates, not published program averages
    'NH': SRECStateData(
        'NH', 'New Hampshire', 'NH Class II REC', 30, (20, 40), 15, 1.1,
        (SRECAssociation('New Hampshire Sustainable Energy Association', 'https://www.nhsea.org/'),),
        notes='Solar qualifies for Class II certificates',
    ),
    'NJ': SRECStateData(
        'NJ', 'New Jersey', 'SREC-II', 125, (50, 200), 15, 1.2,
        (SRECAssociation('MSSIA', 'https://mssia.org/'),
         SRECAssociation('New Jersey Energy Coalition', 'https://www.njenergycoalition.org/')),
        notes='Declining SREC values over time',
    ),
    'OH': SRECStateData(
        'OH', 'Ohio', 'Ohio SREC', 7, (4, 10), 15, 1.2,
        (SRECAssociation('SEIA Ohio', 'https://seia.org/'),),
        cross_state_eligible=('PA',),
        notes='Can sell into PA market for better returns',
    ),
    'PA': SRECStateData(
        'PA', 'Pennsylvania', 'Pennsylvania SREC', 15, (10, 20), 15, 1.2,
        (SRECAssociation('MSSIA', 'https://mssia.org/'),),
        notes='Accepts SRECs from OH, IN, KY, WV',
    ),
    # Estimate, see NH
    'RI': SRECStateData(
        'RI', 'Rhode Island', 'Renewable Energy Growth', 40, (30, 50), 15, 1.2,
        (SRECAssociation('Northeast Clean Energy Council', 'https://www.necec.org/'),),
        notes='Performance-based payments through Rhode Island Energy',
    ),
    'VA': SRECStateData(
        'VA', 'Virginia', 'Virginia SREC', 50, (40, 60), 15, 1.3,
        (SRECAssociation('ChESSA', 'https://chessa.org/'),),
    ),
    'DC': SRECStateData(
        'DC', 'Washington DC', 'DC SREC', 350, (300, 400), 15, 1.3,
        (SRECAssociation('ChESSA', 'https://chessa.org/'),),
        notes='Highest SREC values nationally',
    ),
    'WV': SRECStateData(
        'WV', 'West Virginia', 'WV SREC', 15, (10, 20), 15, 1.2,
        (SRECAssociation('SEIA', 'https://seia.org/'),),
        cross_state_eligible=('OH', 'PA'),
    ),
})

# State names accepted in place of a code
STATE_CODES = MappingProxyType({
    'delaware': 'DE',
    'illinois': 'IL',
    'indiana': 'IN',
    'kentucky': 'KY',
    'maryland': 'MD',
    'massachusetts': 'MA',
    'michigan': 'MI',
    'new hampshire': 'NH',
    'new jersey': 'NJ',
    'ohio': 'OH',
    'pennsylvania': 'PA',
    'rhode island': 'RI',
    'virginia': 'VA',
    'washington dc': 'DC',
    'district of columbia': 'DC',
    'west virginia': 'WV',
})


def is_srec_state(state_code: str) -> bool:
    """Check whether a state has an SREC program."""
    return bool(state_code) and state_code.upper() in SREC_STATES


def get_srec_data(state_code: str) -> Optional[SRECStateData]:
    """Get SREC program data for a state, or None."""
    if not state_code:
        return None
    return SREC_STATES.get(state_code.upper())


def _notes_mention(data: SRECStateData, state_code: str) -> bool:
    return bool(data.notes) and re.search(rf"\b{state_code}\b", data.notes) is not None


def get_cross_state_options(state_code: str) -> List[str]:
    """
    Markets where a state's SRECs can be sold.

    The home state always comes first, followed by the markets listed in its own
    cross-state list and any state whose notes say it accepts the home state's
    SRECs.

    Args:
        state_code: Two-letter state code

    Returns:
        De-duplicated list of state codes, empty for non-SREC states
    """
    home = get_srec_data(state_code)
    if home is None:
        return []

    options = [home.code]
    options.extend(home.cross_state_eligible)
    for code, data in SREC_STATES.items():
        if code != home.code and _notes_mention(data, home.code):
            options.append(code)

    # dict keeps first-seen order
    return list(dict.fromkeys(options))
