from dataclasses import dataclass
from typing import Optional


@dataclass
class Transaction:
    description: str
    amount: float
    date: str               # 'YYYY-MM-DD'
    type: str               # 'DEBIT' | 'CREDIT'
    account_id: str
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    due_date: Optional[str] = None
    is_paid: bool = False
    is_recurring: bool = False
    installments: Optional[int] = None
    recurrence_id: Optional[str] = None
    creditor_name: Optional[str] = None
    creditor_phone: Optional[str] = None
    id: Optional[str] = None  # assigned by storage

    @property
    def effective_date(self) -> str:
        """The date that places this transaction in a month: due date, else date."""
        return self.due_date or self.date
