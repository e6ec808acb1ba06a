"""
Effective amounts and cash positions.

Everything here is a pure function of the records passed in: no queries, no
cached running balances. Callers load the income/expense rows in scope and
recompute on every read, so the result never depends on the order in which
records were entered.

Example:
- Income: 10,000 into bank, 2,000 into locker1
- Labor expense 3,000 paid by bank
- Material expense 5,000 (cash/locker1), vendor paid 1,500 so far from locker1
- Cash position: bank 7,000 / locker1 500 / locker2 0 / total 7,500
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from buildbooks.models.common import FundingSource, PaymentMode, funding_source_for
from buildbooks.models.expense import ExpenseType, VendorPaymentStatus

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class CashPosition:
    bank: Decimal
    locker1: Decimal
    locker2: Decimal

    @property
    def total(self) -> Decimal:
        return self.bank + self.locker1 + self.locker2

    def as_dict(self) -> dict:
        return {
            "bank": self.bank,
            "locker1": self.locker1,
            "locker2": self.locker2,
            "total": self.total,
        }


def effective_amount(expense) -> Decimal:
    """
    How much of an expense counts as money actually spent.

    Labor, overhead and petty cash are disbursed immediately. A material
    expense only counts what has been paid to the vendor so far.
    """
    amount = expense.amount or ZERO
    if expense.type != ExpenseType.material:
        return amount
    if expense.vendor_payment_status == VendorPaymentStatus.pending:
        return ZERO
    return min(expense.vendor_paid_amount or ZERO, amount)


def _declared_source(record):
    return funding_source_for(record.mode, record.cash_location)


def income_for_source(income, source: FundingSource) -> Decimal:
    if _declared_source(income) == FundingSource(source):
        return income.amount or ZERO
    return ZERO


def expense_outflow_for_source(expense, source: FundingSource) -> Decimal:
    """Money that left `source` because of this expense."""
    source = FundingSource(source)
    amount = expense.amount or ZERO
    declared_here = _declared_source(expense) == source

    if expense.type != ExpenseType.material:
        return amount if declared_here else ZERO

    # Vendor payments can come from a different source than the expense's own channel
    counter = expense.paid_by_source(source)
    if counter > 0:
        return counter

    # No counter for this source: assume the declared channel paid
    status = expense.vendor_payment_status
    if status == VendorPaymentStatus.partial and expense.vendor_paid_amount:
        return min(expense.vendor_paid_amount, amount) if declared_here else ZERO
    if status == VendorPaymentStatus.full:
        return amount if declared_here else ZERO
    return ZERO


def source_balance(incomes: Iterable, expenses: Iterable, source: FundingSource) -> Decimal:
    """Income into a source minus outflow from it. May be negative (overdraft)."""
    received = sum((income_for_source(i, source) for i in incomes), ZERO)
    spent = sum((expense_outflow_for_source(e, source) for e in expenses), ZERO)
    return received - spent


def calculate_cash_position(incomes: Iterable, expenses: Iterable) -> CashPosition:
    incomes = list(incomes)
    expenses = list(expenses)
    return CashPosition(
        bank=source_balance(incomes, expenses, FundingSource.bank),
        locker1=source_balance(incomes, expenses, FundingSource.locker1),
        locker2=source_balance(incomes, expenses, FundingSource.locker2),
    )


def total_for_mode(records: Iterable, mode: PaymentMode) -> Decimal:
    """Face-value total of records declared through `mode`."""
    return sum((r.amount or ZERO for r in records if r.mode == PaymentMode(mode)), ZERO)
