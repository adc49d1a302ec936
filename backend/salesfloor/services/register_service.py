"""
Register and Cashier Directory

WHY: Track which cashier works at which physical register. A sale is
rung up at a register, and the receipt names the cashier bound to it.

DESIGN PRINCIPLES:
- One cashier per register at a time (check-then-set under one lock)
- Cashier values are immutable; assignment stores a new stamped value
- Every hired cashier counts toward salary expense, assigned or not
- A cashier holding two registers is prevented by the caller's workflow,
  not by this map
"""

from __future__ import annotations

import logging
import threading
from decimal import Decimal

from ..models import Cashier, RegisterAssignment
from ..time_utils import utcnow
from ..validation import ConflictError, NotFoundError, ValidationError
from .concurrency import SequenceGenerator

logger = logging.getLogger(__name__)


class CashierNotFoundError(NotFoundError):
    def __init__(self, cashier_id: int):
        super().__init__(
            f"Cashier not found: {cashier_id}",
            details={"cashier_id": cashier_id},
        )
        self.cashier_id = cashier_id


class RegisterAlreadyAssignedError(ConflictError):
    def __init__(self, register_number: int, cashier_id: int | None = None):
        super().__init__(
            f"Register {register_number} is already assigned to a cashier",
            details={"register_number": register_number, "cashier_id": cashier_id},
        )
        self.register_number = register_number
        self.cashier_id = cashier_id


class NegativeRegisterNumberError(ValidationError):
    def __init__(self, register_number: int):
        super().__init__(
            f"Register number cannot be negative: {register_number}",
            details={"register_number": register_number},
        )
        self.register_number = register_number


class RegisterDirectory:
    """Owns cashier records and the register -> cashier map."""

    def __init__(self):
        self._cashiers: dict[int, Cashier] = {}
        self._assignments: dict[int, RegisterAssignment] = {}
        self._lock = threading.Lock()
        self._ids = SequenceGenerator()

    # =========================================================================
    # CASHIERS
    # =========================================================================

    def add_cashier(self, cashier: Cashier) -> Cashier:
        with self._lock:
            self._cashiers[cashier.id] = cashier
            self._ids.advance_past(cashier.id)
        return cashier

    def hire_cashier(self, name: str, monthly_salary) -> Cashier:
        """Create a cashier with the next directory id and add it."""
        cashier = Cashier(id=self._ids.next(), name=name, monthly_salary=monthly_salary)
        return self.add_cashier(cashier)

    def get_cashier(self, cashier_id: int) -> Cashier:
        with self._lock:
            cashier = self._cashiers.get(cashier_id)
        if cashier is None:
            raise CashierNotFoundError(cashier_id)
        return cashier

    def cashiers(self) -> list[Cashier]:
        with self._lock:
            return [self._cashiers[cid] for cid in sorted(self._cashiers)]

    def total_salary_expense(self) -> Decimal:
        with self._lock:
            return sum((c.monthly_salary for c in self._cashiers.values()), Decimal("0"))

    # =========================================================================
    # REGISTER ASSIGNMENT
    # =========================================================================

    def assign_to_register(self, cashier_id: int, register_number: int) -> RegisterAssignment:
        """
        Bind a cashier to a register.

        Raises:
            NegativeRegisterNumberError: register_number < 0
            CashierNotFoundError: unknown cashier id
            RegisterAlreadyAssignedError: register occupied (existing
                assignment is left untouched)
        """
        if register_number < 0:
            raise NegativeRegisterNumberError(register_number)

        with self._lock:
            cashier = self._cashiers.get(cashier_id)
            if cashier is None:
                raise CashierNotFoundError(cashier_id)

            existing = self._assignments.get(register_number)
            if existing is not None:
                raise RegisterAlreadyAssignedError(register_number, existing.cashier_id)

            assignment = RegisterAssignment(
                register_number=register_number,
                cashier_id=cashier_id,
                assigned_at=utcnow(),
            )
            self._assignments[register_number] = assignment
            self._cashiers[cashier_id] = cashier.assigned_to(register_number)

        logger.info("Cashier %s assigned to register %s", cashier_id, register_number)
        return assignment

    def cashier_at_register(self, register_number: int) -> Cashier | None:
        with self._lock:
            assignment = self._assignments.get(register_number)
            if assignment is None:
                return None
            return self._cashiers.get(assignment.cashier_id)

    def is_register_assigned(self, register_number: int) -> bool:
        with self._lock:
            return register_number in self._assignments

    def assignments(self) -> list[RegisterAssignment]:
        with self._lock:
            return [self._assignments[n] for n in sorted(self._assignments)]
