"""
Region registry: ISO country code -> RegionCalculator
Populated once when the application is composed and only read afterwards.
"""

import logging
from typing import Dict, List

from payroll_engine.core.exceptions import ConfigurationError, InvalidInputError
from payroll_engine.payrolls.calculation import RegionCalculator
from payroll_engine.payrolls.regions.india import IndiaCalculator
from payroll_engine.payrolls.regions.philippines import PhilippinesCalculator
from payroll_engine.payrolls.schemas import RegionInfo

logger = logging.getLogger(__name__)


class RegionRegistry:
    def __init__(self):
        self._calculators: Dict[str, RegionCalculator] = {}

    def register(self, country_code: str, calculator: RegionCalculator) -> None:
        if not country_code or not country_code.strip():
            raise ConfigurationError(
                detail="Country code is required to register a region calculator",
                config_key="country_code"
            )
        if not isinstance(calculator, RegionCalculator):
            raise ConfigurationError(
                detail=f"Region calculator for {country_code} must be a RegionCalculator",
                config_key="calculator",
                error_data={"calculator_type": type(calculator).__name__}
            )

        code = country_code.strip().upper()
        logger.info(f"Registering calculation factory for region: {code}")
        self._calculators[code] = calculator

    def get(self, country_code: str) -> RegionCalculator:
        calculator = self._calculators.get((country_code or "").upper())
        if calculator is None:
            raise InvalidInputError(
                detail=f"No calculation factory registered for country: {country_code}",
                field="country_code",
                value=country_code
            )
        return calculator

    def regions(self) -> List[RegionInfo]:
        return [
            RegionInfo(country_code=code, region_name=calculator.region_name)
            for code, calculator in sorted(self._calculators.items())
        ]

    def __contains__(self, country_code: str) -> bool:
        return (country_code or "").upper() in self._calculators


def build_default_registry() -> RegionRegistry:
    """Registry with every jurisdiction shipped in this package."""
    registry = RegionRegistry()
    registry.register("IN", IndiaCalculator())
    registry.register("PH", PhilippinesCalculator())
    return registry
