# Overview: Pytest coverage for cashiers and register assignment.

import threading
from decimal import Decimal

import pytest

from salesfloor.models import Cashier, UNASSIGNED_REGISTER
from salesfloor.services.register_service import (
    CashierNotFoundError,
    NegativeRegisterNumberError,
    RegisterAlreadyAssignedError,
    RegisterDirectory,
)


@pytest.fixture
def directory():
    return RegisterDirectory()


@pytest.mark.registers
class TestCashiers:
    def test_hire_allocates_ids(self, directory):
        first = directory.hire_cashier("John Doe", "1500")
        second = directory.hire_cashier("Jane Roe", "1200")

        assert (first.id, second.id) == (1, 2)
        assert first.register_number == UNASSIGNED_REGISTER

    def test_hire_after_explicit_id(self, directory):
        directory.add_cashier(Cashier(10, "John Doe", "1500"))
        assert directory.hire_cashier("Jane Roe", "1200").id == 11

    def test_unknown_cashier(self, directory):
        with pytest.raises(CashierNotFoundError):
            directory.get_cashier(7)

    def test_salary_expense_counts_unassigned(self, directory):
        john = directory.hire_cashier("John Doe", "1500")
        directory.hire_cashier("Jane Roe", "1200.50")
        directory.assign_to_register(john.id, 1)

        assert directory.total_salary_expense() == Decimal("2700.50")

    def test_negative_salary_rejected(self):
        from salesfloor.validation import ValidationError

        with pytest.raises(ValidationError):
            Cashier(1, "John Doe", "-1")


@pytest.mark.registers
class TestAssignment:
    def test_assign_stamps_register(self, directory):
        john = directory.hire_cashier("John Doe", "1500")
        assignment = directory.assign_to_register(john.id, 1)

        at_register = directory.cashier_at_register(1)
        assert assignment.cashier_id == john.id
        assert at_register.id == john.id
        assert at_register.register_number == 1
        assert at_register.is_assigned
        assert john.register_number == UNASSIGNED_REGISTER  # original value untouched

    def test_occupied_register_rejected(self, directory):
        """
        SCENARIO: Register 1 already has John; Jane is assigned to it.
        EXPECTED: RegisterAlreadyAssignedError, John stays on register 1.
        """
        john = directory.hire_cashier("John Doe", "1500")
        jane = directory.hire_cashier("Jane Roe", "1200")
        directory.assign_to_register(john.id, 1)

        with pytest.raises(RegisterAlreadyAssignedError) as exc:
            directory.assign_to_register(jane.id, 1)

        assert "Register 1 is already assigned" in str(exc.value)
        assert directory.cashier_at_register(1).id == john.id

    def test_negative_register_rejected(self, directory):
        john = directory.hire_cashier("John Doe", "1500")
        with pytest.raises(NegativeRegisterNumberError):
            directory.assign_to_register(john.id, -1)
        assert directory.assignments() == []

    def test_unknown_cashier_rejected(self, directory):
        with pytest.raises(CashierNotFoundError):
            directory.assign_to_register(5, 1)
        assert directory.is_register_assigned(1) is False

    def test_empty_register(self, directory):
        assert directory.cashier_at_register(3) is None

    def test_assignments_ordered_by_register(self, directory):
        a = directory.hire_cashier("A", "1")
        b = directory.hire_cashier("B", "1")
        directory.assign_to_register(a.id, 4)
        directory.assign_to_register(b.id, 2)

        assert [x.register_number for x in directory.assignments()] == [2, 4]


@pytest.mark.registers
@pytest.mark.concurrency
class TestConcurrentAssignment:
    def test_only_one_cashier_wins_a_register(self, directory):
        cashiers = [directory.hire_cashier(f"Cashier {i}", "1000") for i in range(12)]
        barrier = threading.Barrier(len(cashiers))
        wins, conflicts = [], []

        def attempt(cashier):
            barrier.wait()
            try:
                directory.assign_to_register(cashier.id, 1)
                wins.append(cashier.id)
            except RegisterAlreadyAssignedError:
                conflicts.append(cashier.id)

        threads = [threading.Thread(target=attempt, args=(c,)) for c in cashiers]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert len(wins) == 1
        assert len(conflicts) == len(cashiers) - 1
        assert directory.cashier_at_register(1).id == wins[0]
