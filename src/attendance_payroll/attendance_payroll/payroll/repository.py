from __future__ import annotations

from typing import Optional, Protocol

from .model import SalaryStructure


class SalaryStructureRepository(Protocol):
    def read_salary_structure(self, employee_id: int, period: str) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def save_salary_structure(self, structure: SalaryStructure) -> int:
        """Insert or update by (employee_id, period); returns structure_id.

        The write is refused with InvalidStateError when the stored row is
        finalized, even if it was finalized after the caller last read it.
        """

        raise NotImplementedError

    def mark_finalized(self, employee_id: int, period: str) -> bool:
        raise NotImplementedError
