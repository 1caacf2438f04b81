from __future__ import annotations

import logging
import threading
from dataclasses import replace
from decimal import Decimal
from typing import Callable, Optional

from ..common.numbers import ZERO, Number, to_decimal
from ..common.validators import require_positive
from ..core.constants import LEDGER_MAX_RETRIES
from ..core.exceptions import (
    ConcurrencyConflictError,
    InsufficientBalanceError,
    InvariantViolationError,
    NotFoundError,
    ValidationError,
)
from .model import BalanceKey, LeaveBalance, LeaveType
from .repository import LeaveBalanceRepository

logger = logging.getLogger(__name__)


def check_invariant(balance: LeaveBalance) -> LeaveBalance:
    fields = {
        "total": balance.total,
        "used": balance.used,
        "pending": balance.pending,
        "available": balance.available,
    }
    negative = [name for name, value in fields.items() if value < 0]
    if negative:
        raise InvariantViolationError(f"Negative {', '.join(negative)} in balance {balance.key}: {fields}")
    if balance.available != balance.total - balance.used - balance.pending:
        raise InvariantViolationError(f"available != total - used - pending in balance {balance.key}: {fields}")
    return balance


def _days(days: Number) -> Decimal:
    return require_positive(to_decimal(days), "Leave days")


# Pure ledger operations. Each returns a new balance and checks the identity.

def reserve(balance: LeaveBalance, days: Number) -> LeaveBalance:
    days = _days(days)
    if days > balance.available:
        raise InsufficientBalanceError(requested=days, available=balance.available)
    return check_invariant(replace(balance, pending=balance.pending + days, available=balance.available - days))


def commit(balance: LeaveBalance, days: Number) -> LeaveBalance:
    days = _days(days)
    return check_invariant(replace(balance, pending=balance.pending - days, used=balance.used + days))


def release(balance: LeaveBalance, days: Number) -> LeaveBalance:
    days = _days(days)
    return check_invariant(replace(balance, pending=balance.pending - days, available=balance.available + days))


def carry_forward_days(previous: Optional[LeaveBalance], leave_type: LeaveType) -> Decimal:
    if previous is None or not leave_type.carry_forward:
        return ZERO
    return max(ZERO, min(previous.available, leave_type.max_carry_forward))


class LeaveBalanceLedger:
    """Serializes every mutation of one (employee, leave type, year) balance.

    A per-key lock orders callers inside this process; the repository's
    versioned write catches writers from other processes, in which case the
    operation is re-run on a fresh read. A balance that fails its invariant
    check is halted: no further mutation is attempted on that key.
    """

    def __init__(self, balances: LeaveBalanceRepository, *, max_retries: int = LEDGER_MAX_RETRIES):
        self._balances = balances
        self._max_retries = max(1, int(max_retries))
        self._guard = threading.Lock()
        self._locks: dict[BalanceKey, threading.Lock] = {}
        self._halted: set[BalanceKey] = set()

    def _lock_for(self, key: BalanceKey) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def is_halted(self, key: BalanceKey) -> bool:
        return key in self._halted

    def read(self, key: BalanceKey) -> Optional[LeaveBalance]:
        return self._balances.read_balance(key.employee_id, key.leave_type_id, key.year)

    def open_balance(self, key: BalanceKey, total: Number) -> LeaveBalance:
        """Return the balance for ``key``, creating it with ``total`` days if missing."""
        existing = self.read(key)
        if existing is not None:
            return existing
        created = self._balances.create_balance(
            LeaveBalance(
                employee_id=key.employee_id,
                leave_type_id=key.leave_type_id,
                year=key.year,
                total=to_decimal(total),
            )
        )
        logger.debug("Opened balance %s with %s days", key, created.total)
        return created

    def reserve(self, key: BalanceKey, days: Number) -> LeaveBalance:
        return self._apply(key, reserve, days)

    def commit(self, key: BalanceKey, days: Number) -> LeaveBalance:
        return self._apply(key, commit, days)

    def release(self, key: BalanceKey, days: Number) -> LeaveBalance:
        return self._apply(key, release, days)

    def adjust_total(self, key: BalanceKey, total: Number) -> LeaveBalance:
        total = to_decimal(total)

        def _adjust(balance: LeaveBalance, _days: Number) -> LeaveBalance:
            available = total - balance.used - balance.pending
            if total < 0 or available < 0:
                raise ValidationError("Total cannot be lower than used + pending days")
            return check_invariant(replace(balance, total=total, available=available))

        return self._apply(key, _adjust, total)

    def _apply(self, key: BalanceKey, op: Callable[[LeaveBalance, Number], LeaveBalance], days: Number) -> LeaveBalance:
        with self._lock_for(key):
            # Checked under the lock so waiters see a halt made by the holder.
            if key in self._halted:
                raise InvariantViolationError(f"Balance {key} is halted after an invariant violation")

            for attempt in range(1, self._max_retries + 1):
                current = self.read(key)
                if current is None:
                    raise NotFoundError(f"No leave balance for {key}")

                try:
                    check_invariant(current)
                    updated = op(current, days)
                except InvariantViolationError:
                    self._halted.add(key)
                    logger.critical("Leave balance %s halted", key, exc_info=True)
                    raise

                try:
                    self._balances.write_balance(updated, expected_version=current.version)
                except ConcurrencyConflictError:
                    logger.warning("Concurrent write on %s (attempt %s/%s)", key, attempt, self._max_retries)
                    continue

                logger.debug("%s %s on %s -> %s", op.__name__, days, key, updated.to_dict())
                return replace(updated, version=current.version + 1)

        raise ConcurrencyConflictError(f"Leave balance {key} kept changing; retry with fresh data")
