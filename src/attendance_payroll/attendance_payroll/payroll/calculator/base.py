from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ...core.enums import PayrollMode


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll).

    Each mode consumes its own input type; the modes are alternatives,
    not substitutes for one another.
    """

    mode: PayrollMode

    @abstractmethod
    def calculate(self, source: Any) -> Any:
        raise NotImplementedError
