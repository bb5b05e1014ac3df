'''
    File Name: transaction.py
    Version: 3.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
    Description: Transaction data model for the finance tracker.
'''
import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, List, Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

FIXED = "fixed"
VARIABLE = "variable"
FREQUENCIES = (FIXED, VARIABLE)


def new_transaction_id() -> str:
    """Return an id derived from the creation timestamp (milliseconds)."""
    return str(int(datetime.now().timestamp() * 1000))


def now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def parse_amount(value: Any) -> Optional[float]:
    """Coerce a stored amount to a float, or None when it is unusable.

    Numbers and numeric strings are accepted ("12.50", "12,50"). NaN,
    infinities, negative values, booleans and blanks are rejected.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if "," in text and "." not in text:
            text = text.replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def _optional_ref(value: Any) -> Optional[str]:
    # empty strings and nulls both mean "no reference"
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class Transaction:
    """
    Represents a single income or expense entry.

    Attributes:
        id: Opaque unique identifier
        type: "income" or "expense"
        amount: Amount as stored (number or string); coerced by the indicator engine
        date: Transaction date (YYYY-MM-DD string or date object)
        frequency: "fixed" or "variable" (descriptive only)
        category_id / group_id / subgroup_id / establishment_id: Optional references
        description: Optional free text
    """
    id: str
    type: str
    amount: Any
    date: Any
    frequency: str = VARIABLE
    category_id: Optional[str] = None
    group_id: Optional[str] = None
    subgroup_id: Optional[str] = None
    establishment_id: Optional[str] = None
    description: str = ""
    created_at: str = ""
    updated_at: str = ""

    def validate(self) -> List[str]:
        """Return a list of problems with this transaction (empty when valid)."""
        errors: List[str] = []
        if self.type not in TRANSACTION_TYPES:
            errors.append(f"Unsupported transaction type: {self.type}")
        if self.frequency not in FREQUENCIES:
            errors.append(f"Unsupported frequency: {self.frequency}")
        amount = parse_amount(self.amount)
        if amount is None:
            errors.append(f"Invalid amount: {self.amount}")
        elif amount == 0:
            errors.append("Amount must be greater than zero.")
        if not isinstance(self.date, date):
            try:
                date.fromisoformat(str(self.date))
            except (TypeError, ValueError):
                errors.append(f"Invalid date format: {self.date}. Expected YYYY-MM-DD")
        return errors

    def touched(self) -> "Transaction":
        """Copy with `updated_at` set to now."""
        return replace(self, updated_at=now_iso())

    def to_dict(self) -> dict:
        """Convert to the JSON shape kept in storage."""
        return {
            "id": self.id,
            "type": self.type,
            "frequency": self.frequency,
            "amount": self.amount,
            "date": self.date.isoformat() if isinstance(self.date, date) else self.date,
            "categoryId": self.category_id or "",
            "groupId": self.group_id or "",
            "subgroupId": self.subgroup_id or "",
            "establishmentId": self.establishment_id or "",
            "description": self.description,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        """Create a Transaction from a stored JSON object. Missing fields never raise."""
        return cls(
            id=str(data.get("id", "")),
            type=str(data.get("type", "")),
            amount=data.get("amount"),
            date=data.get("date"),
            frequency=data.get("frequency") or VARIABLE,
            category_id=_optional_ref(data.get("categoryId")),
            group_id=_optional_ref(data.get("groupId")),
            subgroup_id=_optional_ref(data.get("subgroupId")),
            establishment_id=_optional_ref(data.get("establishmentId")),
            description=data.get("description") or "",
            created_at=data.get("createdAt") or "",
            updated_at=data.get("updatedAt") or "",
        )

    def __repr__(self) -> str:
        return f"Transaction(id={self.id}, type={self.type}, amount={self.amount}, date={self.date}, category_id={self.category_id})"
