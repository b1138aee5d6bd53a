"""
Calculator inputs.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Location:
    """A resolved street address."""
    address: str
    latitude: float
    longitude: float
    state_code: Optional[str] = None


@dataclass(frozen=True)
class SolarCalculationInput:
    """One visitor's calculator request."""
    location: Location
    monthly_bill: float     # $
    roof_area: float        # sq ft
    utility_rate: float     # $/kWh
    state_code: Optional[str] = None

    @property
    def effective_state(self) -> Optional[str]:
        """Explicit state, else the one on the location."""
        return self.state_code or self.location.state_code
