from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel

from buildbooks.models.project import ProjectType


class SummaryProject(BaseModel):
    id: str
    name: str
    type: ProjectType


class IncomeTotals(BaseModel):
    total: Decimal
    bank: Decimal
    cash: Decimal
    transactions: int


class ExpenseByType(BaseModel):
    material: Decimal
    labor: Decimal
    overhead: Decimal
    petty_cash: Decimal


class ExpenseByMode(BaseModel):
    bank: Decimal
    cash: Decimal


class ExpenseTotals(BaseModel):
    total: Decimal
    by_type: ExpenseByType
    by_mode: ExpenseByMode
    transactions: int


class MaterialTotals(BaseModel):
    quantity: Decimal
    total_cost: Decimal
    unit: str


class CashPositionResponse(BaseModel):
    bank: Decimal
    locker1: Decimal
    locker2: Decimal
    total: Decimal


class LoanTotals(BaseModel):
    total_given: Decimal
    total_returned: Decimal
    outstanding: Decimal
    active_count: int


class SummaryResponse(BaseModel):
    project: Optional[SummaryProject] = None
    income: IncomeTotals
    expenses: ExpenseTotals
    material_summary: Dict[str, MaterialTotals]
    cash_position: CashPositionResponse
    loans: LoanTotals
    profit: Decimal
