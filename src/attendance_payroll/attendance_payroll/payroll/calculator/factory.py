from __future__ import annotations

from dataclasses import dataclass, field

from ...core.enums import PayrollMode
from ...core.exceptions import ValidationError
from ..model import PerInstanceConfig
from .base import PayrollCalculator
from .per_instance_calculator import PerInstancePayrollCalculator
from .structured_calculator import StructuredPayrollCalculator


@dataclass
class PayrollCalculatorFactory:
    """Factory Pattern: pick the payroll strategy the caller asked for."""

    per_instance_config: PerInstanceConfig = field(default_factory=PerInstanceConfig)

    def for_mode(self, mode: PayrollMode | str) -> PayrollCalculator:
        try:
            mode = PayrollMode(mode)
        except ValueError:
            raise ValidationError(f"Unknown payroll mode: {mode}")

        if mode == PayrollMode.STRUCTURED:
            return StructuredPayrollCalculator()
        return PerInstancePayrollCalculator(self.per_instance_config)
