"""
Provider credentials and endpoints for the calculation engine.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

PVWATTS_API_URL = "https://developer.nrel.gov/api/pvwatts/v8.json"
GOOGLE_SOLAR_API_URL = "https://solar.googleapis.com/v1/buildingInsights:findClosest"
OPENEI_API_URL = "https://api.openei.org/utility_rates"


@dataclass(frozen=True)
class EngineConfig:
    """
    Settings handed to the calculator at construction.

    A missing key is not an error: the matching provider is skipped and the
    deterministic fallback is used instead.
    """
    nrel_api_key: Optional[str] = None
    google_api_key: Optional[str] = None
    openei_api_key: Optional[str] = None
    pvwatts_url: str = PVWATTS_API_URL
    google_solar_url: str = GOOGLE_SOLAR_API_URL
    openei_url: str = OPENEI_API_URL
    request_timeout: float = 10.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            EngineConfig with whichever keys are set
        """
        env = os.environ if environ is None else environ
        return cls(
            nrel_api_key=env.get("NREL_API_KEY") or env.get("PVWATTS_API_KEY") or None,
            google_api_key=env.get("GOOGLE_API_KEY") or None,
            openei_api_key=env.get("OPENEI_API_KEY") or None,
        )
