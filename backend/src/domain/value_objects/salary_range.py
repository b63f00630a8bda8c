"""
Salary Range Value Object
Immutable salary range with validation
"""
from dataclasses import dataclass
from typing import Optional


CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "ILS": "₪",
}


@dataclass(frozen=True)
class SalaryRange:
    """Annual salary range as advertised by a posting"""

    min_salary: Optional[int] = None
    max_salary: Optional[int] = None
    currency: str = "USD"

    def __post_init__(self):
        """Validate salary range"""
        if self.min_salary is not None and self.min_salary < 0:
            raise ValueError("Minimum salary cannot be negative")

        if self.max_salary is not None:
            if self.max_salary < 0:
                raise ValueError("Maximum salary cannot be negative")
            if self.min_salary is not None and self.max_salary < self.min_salary:
                raise ValueError("Maximum salary cannot be less than minimum salary")

    @property
    def is_specified(self) -> bool:
        return self.min_salary is not None or self.max_salary is not None

    @property
    def comparable_amount(self) -> Optional[int]:
        """Figure compared against a candidate's floor: the top of the range when known"""
        return self.max_salary or self.min_salary

    def _fmt(self, amount: int) -> str:
        symbol = CURRENCY_SYMBOLS.get(self.currency)
        if symbol:
            return f"{symbol}{amount:,}"
        return f"{amount:,} {self.currency}"

    def format_amount(self, amount: int) -> str:
        return self._fmt(amount)

    def __str__(self) -> str:
        if self.min_salary and self.max_salary:
            return f"{self._fmt(self.min_salary)} - {self._fmt(self.max_salary)}"
        if self.min_salary:
            return f"{self._fmt(self.min_salary)}+"
        if self.max_salary:
            return f"Up to {self._fmt(self.max_salary)}"
        return "Not specified"
