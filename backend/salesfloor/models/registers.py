from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from ..validation import ValidationError, to_decimal, to_int
from ..time_utils import to_utc_z


UNASSIGNED_REGISTER = -1


@dataclass(frozen=True)
class Cashier:
    """
    Store employee who rings up sales.

    DESIGN: register_number stays UNASSIGNED_REGISTER until the
    RegisterDirectory records an assignment; assignment produces a new
    stamped value instead of mutating this one.
    """
    id: int
    name: str
    monthly_salary: Decimal
    register_number: int = UNASSIGNED_REGISTER

    def __post_init__(self):
        object.__setattr__(self, "id", to_int(self.id, "id"))
        object.__setattr__(self, "monthly_salary", to_decimal(self.monthly_salary, "monthly_salary"))
        object.__setattr__(self, "register_number", to_int(self.register_number, "register_number"))

        if not self.name or not str(self.name).strip():
            raise ValidationError("name is required")
        if self.monthly_salary < 0:
            raise ValidationError(
                "monthly_salary cannot be negative",
                details={"monthly_salary": str(self.monthly_salary)},
            )

    @property
    def is_assigned(self) -> bool:
        return self.register_number != UNASSIGNED_REGISTER

    def assigned_to(self, register_number: int) -> "Cashier":
        return replace(self, register_number=register_number)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "monthly_salary": str(self.monthly_salary),
            "register_number": self.register_number,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Cashier":
        return cls(
            id=data["id"],
            name=data["name"],
            monthly_salary=data["monthly_salary"],
            register_number=data.get("register_number", UNASSIGNED_REGISTER),
        )


@dataclass(frozen=True)
class RegisterAssignment:
    """
    Register number -> cashier binding.

    Unique on register_number inside RegisterDirectory.
    """
    register_number: int
    cashier_id: int
    assigned_at: datetime

    def to_dict(self) -> dict:
        return {
            "register_number": self.register_number,
            "cashier_id": self.cashier_id,
            "assigned_at": to_utc_z(self.assigned_at),
        }
